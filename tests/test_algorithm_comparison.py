"""Tests for algorithm comparison and provider retries."""

from unittest.mock import MagicMock

import pytest

from virusquery.exceptions import ArgumentError, CollaboratorUnavailableError
from virusquery.resolvers.algorithm_comparison import (
    compare_algorithms,
    get_algorithm,
    merge_custom_algorithms,
)
from virusquery.resolvers.context import ResolveContext
from virusquery.resolvers.execution import resolve_field
from virusquery.resolvers.sources import AnalysisSource, NamedMutationSet
from virusquery.viruses.hiv1 import HIV1

from conftest import FakeProvider


@pytest.fixture
def gene_mutations(drm_set):
    grouped = drm_set.group_by_gene(HIV1.gene_names)
    return [(gene, grouped[gene]) for gene in ("PR", "RT")]


class TestMergeCustomAlgorithms:
    """Tests for merging custom algorithm definitions."""

    def test_last_definition_wins_first_position_kept(self):
        """Test that a repeated name keeps its first slot with the last XML."""
        merged = merge_custom_algorithms(
            [
                {"name": "A", "xml": "<a1/>"},
                {"name": "B", "xml": "<b/>"},
                {"name": "A", "xml": "<a2/>"},
            ]
        )
        assert list(merged) == ["A", "B"]
        assert merged["A"] == "<a2/>"

    def test_nulls_dropped(self):
        """Test that null entries and unnamed entries are ignored."""
        merged = merge_custom_algorithms([None, {"name": None, "xml": "<x/>"}, {"name": "C"}])
        assert merged == {"C": ""}
        assert merge_custom_algorithms(None) == {}


class TestCompareAlgorithms:
    """Tests for compare_algorithms."""

    def test_empty_request_does_not_touch_provider(self, provider, gene_mutations):
        """Test the short-circuit when nothing was requested."""
        assert compare_algorithms(provider, gene_mutations, [], []) == []
        assert compare_algorithms(provider, gene_mutations, [None], [None]) == []
        assert provider.calls == []

    def test_builtin_then_custom_per_gene(self, provider, gene_mutations):
        """Test result order and custom flags."""
        results = compare_algorithms(
            provider,
            gene_mutations,
            ["HIVDB_9.5", None, "ANRS_3.2"],
            [{"name": "Mine", "xml": "<ALGORITHM/>"}],
        )
        assert [(r.gene, r.algorithm, r.is_custom) for r in results] == [
            ("PR", "HIVDB_9.5", False),
            ("PR", "ANRS_3.2", False),
            ("PR", "Mine", True),
            ("RT", "HIVDB_9.5", False),
            ("RT", "ANRS_3.2", False),
            ("RT", "Mine", True),
        ]
        assert ("compile", "Mine", "<ALGORITHM/>") in provider.calls

    def test_scores_reflect_mutations(self, provider, gene_mutations):
        """Test that each gene is evaluated with its own mutations."""
        results = compare_algorithms(provider, gene_mutations, ["HIVDB_9.5"])
        pr_scores = {score.drug_class: score.level for score in results[0].drug_scores}
        rt_scores = {score.drug_class: score.level for score in results[1].drug_scores}
        assert pr_scores == {"PI": 2}
        assert rt_scores == {"NRTI": 2, "NNRTI": 1}

    def test_empty_gene_mutations(self, provider):
        """Test that algorithms are still loaded when there are no genes."""
        assert compare_algorithms(provider, [], ["HIVDB_9.5"]) == []
        assert provider.calls == [("get", "HIVDB_9.5")]


class TestProviderRetry:
    """Tests for retries of transient provider failures."""

    def test_transient_failure_is_retried(self):
        """Test that a single failure is retried."""
        provider = FakeProvider(failures=1)
        algorithm = get_algorithm(provider, "HIVDB_9.5")
        assert algorithm.name == "HIVDB_9.5"
        assert provider.calls == [("get", "HIVDB_9.5"), ("get", "HIVDB_9.5")]

    def test_persistent_failure_is_reraised(self):
        """Test that the provider error surfaces after the last attempt."""
        provider = FakeProvider(failures=10)
        with pytest.raises(CollaboratorUnavailableError, match="unavailable"):
            get_algorithm(provider, "HIVDB_9.5")
        assert len(provider.calls) == 3

    def test_custom_compile_retried(self, gene_mutations):
        """Test retries of custom algorithm compilation."""
        algorithm = MagicMock()
        algorithm.name = "Mine"
        algorithm.evaluate.return_value.drug_scores = []
        provider = MagicMock()
        provider.compile_custom.side_effect = [CollaboratorUnavailableError("busy"), algorithm]

        results = compare_algorithms(provider, gene_mutations, custom_algorithms=[{"name": "Mine", "xml": "<x/>"}])

        assert provider.compile_custom.call_count == 2
        provider.get_algorithm.assert_not_called()
        assert [(r.gene, r.algorithm, r.is_custom) for r in results] == [("PR", "Mine", True), ("RT", "Mine", True)]

    def test_other_errors_are_not_retried(self):
        """Test that only collaborator failures are retried."""

        class BrokenProvider:
            def __init__(self):
                self.calls = 0

            def get_algorithm(self, name):
                self.calls += 1
                raise ValueError(f"no such algorithm {name}")

        provider = BrokenProvider()
        with pytest.raises(ValueError):
            get_algorithm(provider, "Unknown")
        assert provider.calls == 1


class TestAlgorithmComparisonField:
    """Tests for the algorithmComparison field."""

    @pytest.fixture
    def source(self, drm_set):
        return AnalysisSource.from_mutations(NamedMutationSet(mutations=drm_set))

    def test_no_algorithms_without_provider(self, hiv1_schema, source):
        """Test that the short-circuit does not require a provider."""
        context = ResolveContext(virus=HIV1, schema=hiv1_schema)
        result = resolve_field(context, "MutationsAnalysis", "algorithmComparison", source)
        assert result.data == []

    def test_missing_provider(self, hiv1_schema, source):
        """Test that requesting algorithms without a provider fails."""
        context = ResolveContext(virus=HIV1, schema=hiv1_schema)
        with pytest.raises(CollaboratorUnavailableError):
            resolve_field(
                context,
                "MutationsAnalysis",
                "algorithmComparison",
                source,
                {"algorithms": ["HIVDB_9.5"]},
            )

    def test_invalid_algorithm_name(self, hiv1_context, source):
        """Test that algorithm names are checked against the enum."""
        with pytest.raises(ArgumentError):
            resolve_field(
                hiv1_context,
                "MutationsAnalysis",
                "algorithmComparison",
                source,
                {"algorithms": ["HIVDB_1.0"]},
            )

    def test_genes_filtered(self, hiv1_context, source, provider):
        """Test comparison restricted to one gene."""
        result = resolve_field(
            hiv1_context,
            "MutationsAnalysis",
            "algorithmComparison",
            source,
            {"algorithms": ["Rega_10.0"], "includeGenes": ["IN"]},
        )
        assert [(r.gene, r.algorithm) for r in result.data] == [("IN", "Rega_10.0")]
        assert result.data[0].drug_scores[0].level == 1
