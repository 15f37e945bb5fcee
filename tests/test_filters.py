"""Tests for the filter vocabulary and pipeline."""

import logging

import pytest

from virusquery.filters.pipeline import FilterRequest, apply_filters
from virusquery.filters.vocabulary import (
    PRIMITIVE_OPERATIONS,
    TOKEN_TABLE,
    FilterToken,
    Primitive,
    lookup_token,
)
from virusquery.models.mutation_set import MutationSet
from virusquery.viruses.hiv1 import HIV1

from conftest import make_mutation

LEGACY_DRUG_CLASS_TOKENS = [
    token
    for token, translation in TOKEN_TABLE.items()
    if translation.restriction is not None and translation.restriction.drug_class is not None
]


def run(mutations, gene=None, **arguments):
    return apply_filters(mutations, FilterRequest.from_arguments(arguments), HIV1, gene=gene)


class TestVocabulary:
    """Tests for the token table."""

    def test_every_token_is_translated(self):
        """Test that the table covers the whole vocabulary."""
        assert set(TOKEN_TABLE) == set(FilterToken)

    def test_every_primitive_is_executable(self):
        """Test that every primitive except CUSTOMLIST has an operation."""
        assert set(PRIMITIVE_OPERATIONS) == set(Primitive) - {Primitive.CUSTOMLIST}

    def test_deprecated_tokens(self):
        """Test which tokens are deprecated."""
        assert FilterToken.NRTI_DRM.is_deprecated
        assert FilterToken.GENE_RT.is_deprecated
        assert FilterToken.TYPE_MAJOR.is_deprecated
        assert not FilterToken.DRM.is_deprecated
        assert not FilterToken.CUSTOMLIST.is_deprecated

    def test_lookup_token(self):
        """Test lookup of known and unknown names."""
        assert lookup_token("notSDRM") is FilterToken.notSDRM
        assert lookup_token(FilterToken.DRM) is FilterToken.DRM
        assert lookup_token("NOT_A_TOKEN") is None


class TestFilterRequest:
    """Tests for FilterRequest."""

    def test_from_arguments(self):
        """Test mapping of the camelCase argument surface."""
        request = FilterRequest.from_arguments(
            {
                "filterOptions": [FilterToken.DRM, "notSDRM", None],
                "includeGenes": ["RT"],
                "drugClass": "NRTI",
                "customList": ["M184V"],
            }
        )
        assert request.filter_options == ("DRM", "notSDRM")
        assert request.include_genes == frozenset({"RT"})
        assert request.drug_class == "NRTI"
        assert request.mutation_type is None
        assert request.custom_list == ("M184V",)

    def test_defaults(self):
        """Test an empty request."""
        request = FilterRequest.from_arguments({})
        assert request.filter_options == ()
        assert request.include_genes is None


class TestApplyFilters:
    """Tests for apply_filters."""

    def test_drm(self, drm_set):
        """Test filterOptions=[DRM]."""
        assert run(drm_set, filterOptions=["DRM"]).mutations.texts() == ["PR:L90M", "RT:M184V"]

    def test_drm_then_not_sdrm(self, drm_set):
        """Test filterOptions=[DRM, notSDRM]."""
        result = run(drm_set, filterOptions=["DRM", "notSDRM"])
        assert result.mutations.texts() == ["PR:L90M"]

    def test_include_genes(self, drm_set):
        """Test includeGenes={RT}."""
        assert run(drm_set, includeGenes=["RT"]).mutations.texts() == ["RT:M184V"]

    def test_include_genes_never_splits(self, mixed_set):
        """Test that the gene filter keeps whole records of that gene only."""
        for gene in HIV1.gene_names:
            result = run(mixed_set, includeGenes=[gene]).mutations
            assert all(mutation.gene == gene for mutation in result)
            assert all(mutation in mixed_set for mutation in result)
            assert result == mixed_set.by_genes([gene])

    def test_empty_options_is_identity(self, mixed_set):
        """Test that no criteria returns the input."""
        assert run(mixed_set).mutations == mixed_set

    def test_unknown_token_is_noop(self, drm_set, caplog):
        """Test that unknown tokens are skipped."""
        with caplog.at_level(logging.DEBUG, logger="virusquery.filters.pipeline"):
            result = run(drm_set, filterOptions=["BOGUS", "SDRM"])
        assert result.mutations.texts() == ["RT:M184V"]
        assert "BOGUS" in caplog.text

    def test_token_order_is_preserved(self, mixed_set):
        """Test that tokens apply left to right."""
        first = run(mixed_set, filterOptions=["DRM", "APOBEC"]).mutations
        assert first.texts() == ["RT:M230I"]
        assert run(mixed_set, filterOptions=["notDRM", "APOBEC"]).mutations.texts() == ["RT:W88*"]

    def test_drp(self, mixed_set):
        """Test that DRP keeps mutations at drug resistance positions."""
        result = run(mixed_set, filterOptions=["DRP"]).mutations
        assert result.texts() == ["PR:L90M", "RT:M184V", "RT:M230I"]
        assert not run(mixed_set, filterOptions=["DRM"]).mutations.subtract(result)
        assert "DRMs included" in TOKEN_TABLE[FilterToken.DRP].description

    def test_scalar_steps_after_tokens(self, mixed_set):
        """Test drugClass and mutationType after the token steps."""
        result = run(mixed_set, filterOptions=["DRM"], drugClass="NRTI", mutationType="NRTI")
        assert result.mutations.texts() == ["RT:M184V"]

    def test_unknown_drug_class_yields_empty(self, drm_set):
        """Test restriction to a class the virus does not have."""
        assert not run(drm_set, drugClass="FI").mutations

    @pytest.mark.parametrize("token", LEGACY_DRUG_CLASS_TOKENS, ids=lambda token: token.value)
    def test_legacy_drug_class_tokens_match_modern_form(self, mixed_set, token):
        """Test that PI_DRM etc. equal the modern token plus drugClass."""
        translation = TOKEN_TABLE[token]
        modern = translation.primitive.value.replace("NOT_", "not")
        legacy = run(mixed_set, filterOptions=[token.value]).mutations
        expected = run(
            mixed_set, filterOptions=[modern], drugClass=translation.restriction.drug_class
        ).mutations
        assert legacy == expected

    def test_legacy_drug_class_token_keeps_cross_class_drm(self):
        """Test NRTI_DRM on a DRM of another class that is an NRTI TSM."""
        cross = make_mutation("RT", 65, "R", "K", drm_drug_class="NNRTI", tsm_drug_class="NRTI")
        other = make_mutation("RT", 101, "E", "K", drm_drug_class="NNRTI")
        mutations = MutationSet([cross, other])
        legacy = run(mutations, filterOptions=["NRTI_DRM"]).mutations
        assert legacy.texts() == ["RT:K65R"]
        assert legacy == run(mutations, filterOptions=["DRM"], drugClass="NRTI").mutations

    def test_legacy_gene_token(self, mixed_set):
        """Test that GENE_RT equals includeGenes={RT}."""
        legacy = run(mixed_set, filterOptions=["GENE_RT"]).mutations
        assert legacy == run(mixed_set, includeGenes=["RT"]).mutations

    def test_legacy_type_token(self, mixed_set):
        """Test that TYPE_NNRTI equals mutationType=NNRTI."""
        legacy = run(mixed_set, filterOptions=["TYPE_NNRTI"]).mutations
        assert legacy == run(mixed_set, mutationType="NNRTI").mutations
        assert legacy.texts() == ["RT:K103N"]


class TestCustomList:
    """Tests for the CUSTOMLIST token."""

    def test_custom_list_intersection(self, drm_set):
        """Test intersection with a custom list."""
        result = run(drm_set, filterOptions=["CUSTOMLIST"], customList=["RT:M184VI", "IN:Q148R"])
        assert result.mutations.texts() == ["RT:M184V"]
        assert result.validation_results == []

    def test_custom_list_uses_gene_context(self, m184v):
        """Test that unprefixed entries use the calling context's gene."""
        mutations = MutationSet([m184v, make_mutation("PR", 84, "V", "I")])
        result = run(mutations, gene="RT", filterOptions=["CUSTOMLIST"], customList=["M184V"])
        assert result.mutations.texts() == ["RT:M184V"]

    def test_custom_list_errors_are_reported(self, drm_set, caplog):
        """Test that malformed entries become validation results."""
        with caplog.at_level(logging.WARNING):
            result = run(
                drm_set,
                filterOptions=["CUSTOMLIST"],
                customList=["PR:L90M", "M184V", "RT:???"],
            )
        assert result.mutations.texts() == ["PR:L90M"]
        assert len(result.validation_results) == 2
        assert "Rejected custom list entry" in caplog.text

    def test_custom_list_ignored_without_token(self, drm_set):
        """Test that customList alone does nothing."""
        result = run(drm_set, customList=["PR:L90M"])
        assert result.mutations == drm_set

    def test_missing_custom_list_gives_empty_set(self, drm_set):
        """Test CUSTOMLIST without a list."""
        assert not run(drm_set, filterOptions=["CUSTOMLIST"]).mutations
