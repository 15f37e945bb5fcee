"""Filter tokens and their translation into primitive operations.

Tokens are modelled in two layers. ``Primitive`` operations narrow a
mutation set to a category (or its complement). ``TOKEN_TABLE`` maps every
public token, including the deprecated ones, onto at most one primitive plus
an optional scalar ``Restriction``. The pipeline only ever executes
primitives and restrictions.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from virusquery.models.mutation_set import MutationSet


class FilterToken(str, Enum):
    """Public filter options accepted by mutation set fields."""

    APOBEC = "APOBEC"
    APOBEC_DRM = "APOBEC_DRM"
    DRM = "DRM"
    DRP = "DRP"
    notDRM = "notDRM"
    SEQUENCED_ONLY = "SEQUENCED_ONLY"
    PI_DRM = "PI_DRM"
    NRTI_DRM = "NRTI_DRM"
    NNRTI_DRM = "NNRTI_DRM"
    INSTI_DRM = "INSTI_DRM"
    SDRM = "SDRM"
    notSDRM = "notSDRM"
    PI_SDRM = "PI_SDRM"
    NRTI_SDRM = "NRTI_SDRM"
    NNRTI_SDRM = "NNRTI_SDRM"
    INSTI_SDRM = "INSTI_SDRM"
    TSM = "TSM"
    notTSM = "notTSM"
    PI_TSM = "PI_TSM"
    NRTI_TSM = "NRTI_TSM"
    NNRTI_TSM = "NNRTI_TSM"
    INSTI_TSM = "INSTI_TSM"
    GENE_PR = "GENE_PR"
    GENE_RT = "GENE_RT"
    GENE_IN = "GENE_IN"
    TYPE_MAJOR = "TYPE_MAJOR"
    TYPE_ACCESSORY = "TYPE_ACCESSORY"
    TYPE_NRTI = "TYPE_NRTI"
    TYPE_NNRTI = "TYPE_NNRTI"
    TYPE_OTHER = "TYPE_OTHER"
    INSERTION = "INSERTION"
    DELETION = "DELETION"
    UNUSUAL = "UNUSUAL"
    AMBIGUOUS = "AMBIGUOUS"
    STOPCODON = "STOPCODON"
    CUSTOMLIST = "CUSTOMLIST"

    @property
    def is_deprecated(self) -> bool:
        return TOKEN_TABLE[self].deprecation_reason is not None


class Primitive(str, Enum):
    """Canonical mutation set operations."""

    APOBEC = "APOBEC"
    APOBEC_DRM = "APOBEC_DRM"
    DRM = "DRM"
    NOT_DRM = "NOT_DRM"
    DRP = "DRP"
    SDRM = "SDRM"
    NOT_SDRM = "NOT_SDRM"
    TSM = "TSM"
    NOT_TSM = "NOT_TSM"
    SEQUENCED_ONLY = "SEQUENCED_ONLY"
    INSERTION = "INSERTION"
    DELETION = "DELETION"
    UNUSUAL = "UNUSUAL"
    AMBIGUOUS = "AMBIGUOUS"
    STOPCODON = "STOPCODON"
    CUSTOMLIST = "CUSTOMLIST"


# CUSTOMLIST needs the request's custom list and gene context, so the
# pipeline handles it itself.
PRIMITIVE_OPERATIONS: dict[Primitive, Callable[[MutationSet], MutationSet]] = {
    Primitive.APOBEC: MutationSet.apobec_mutations,
    Primitive.APOBEC_DRM: MutationSet.apobec_drms,
    Primitive.DRM: lambda muts: muts.drms(),
    Primitive.NOT_DRM: lambda muts: muts.subtract(muts.drms()),
    Primitive.DRP: MutationSet.at_drp_mutations,
    Primitive.SDRM: lambda muts: muts.sdrms(),
    Primitive.NOT_SDRM: lambda muts: muts.subtract(muts.sdrms()),
    Primitive.TSM: lambda muts: muts.tsms(),
    Primitive.NOT_TSM: lambda muts: muts.subtract(muts.tsms()),
    Primitive.SEQUENCED_ONLY: MutationSet.sequenced_only,
    Primitive.INSERTION: MutationSet.insertions,
    Primitive.DELETION: MutationSet.deletions,
    Primitive.UNUSUAL: MutationSet.unusual_mutations,
    Primitive.AMBIGUOUS: MutationSet.ambiguous_codons,
    Primitive.STOPCODON: MutationSet.stop_codons,
}


@dataclass(frozen=True)
class Restriction:
    """Scalar restriction applied in place by a deprecated token."""

    drug_class: str | None = None
    gene: str | None = None
    mutation_type: str | None = None

    def apply(self, mutations: MutationSet) -> MutationSet:
        if self.gene is not None:
            mutations = mutations.by_genes([self.gene])
        if self.drug_class is not None:
            mutations = mutations.by_drug_class(self.drug_class)
        if self.mutation_type is not None:
            mutations = mutations.by_mutation_type(self.mutation_type)
        return mutations


@dataclass(frozen=True)
class TokenTranslation:
    """How one public token is executed."""

    primitive: Primitive | None
    restriction: Restriction | None = None
    description: str | None = None
    deprecation_reason: str | None = None


def _by_drug_class(primitive: Primitive, drug_class: str, label: str) -> TokenTranslation:
    return TokenTranslation(
        primitive=primitive,
        restriction=Restriction(drug_class=drug_class),
        description=f"List only mutations which are {drug_class} {label}.",
        deprecation_reason=(
            f"Use combination of `drugClass={drug_class}` and `filterOptions={label}` instead."
        ),
    )


def _by_gene(gene: str) -> TokenTranslation:
    return TokenTranslation(
        primitive=None,
        restriction=Restriction(gene=gene),
        description=f"List only mutations of gene {gene}.",
        deprecation_reason=f"Use `includeGenes={gene}` instead.",
    )


def _by_mutation_type(mutation_type: str) -> TokenTranslation:
    return TokenTranslation(
        primitive=None,
        restriction=Restriction(mutation_type=mutation_type),
        description=f"List only {mutation_type} mutations.",
        deprecation_reason=f"Use `mutationType={mutation_type}` instead.",
    )


TOKEN_TABLE: dict[FilterToken, TokenTranslation] = {
    FilterToken.APOBEC: TokenTranslation(
        Primitive.APOBEC,
        description="List only mutations which are APOBEC-mediated G-to-A hypermutation.",
    ),
    FilterToken.APOBEC_DRM: TokenTranslation(
        Primitive.APOBEC_DRM,
        description=(
            "List only drug resistance mutations which are APOBEC-mediated "
            "G-to-A hypermutation."
        ),
    ),
    FilterToken.DRM: TokenTranslation(
        Primitive.DRM,
        description="List only mutations which are drug resistance mutation (DRM).",
    ),
    FilterToken.DRP: TokenTranslation(
        Primitive.DRP,
        description="List all mutations at DRM positions, DRMs included.",
    ),
    FilterToken.notDRM: TokenTranslation(
        Primitive.NOT_DRM,
        description="List only mutations which are not drug resistance mutation (DRM).",
    ),
    FilterToken.SEQUENCED_ONLY: TokenTranslation(
        Primitive.SEQUENCED_ONLY,
        description="Remove all unsequenced positions.",
    ),
    FilterToken.PI_DRM: _by_drug_class(Primitive.DRM, "PI", "DRM"),
    FilterToken.NRTI_DRM: _by_drug_class(Primitive.DRM, "NRTI", "DRM"),
    FilterToken.NNRTI_DRM: _by_drug_class(Primitive.DRM, "NNRTI", "DRM"),
    FilterToken.INSTI_DRM: _by_drug_class(Primitive.DRM, "INSTI", "DRM"),
    FilterToken.SDRM: TokenTranslation(
        Primitive.SDRM,
        description="List only mutations which are surveillance drug resistance mutations (SDRM).",
    ),
    FilterToken.notSDRM: TokenTranslation(
        Primitive.NOT_SDRM,
        description=(
            "List only mutations which are not surveillance drug resistance mutation (SDRM)."
        ),
    ),
    FilterToken.PI_SDRM: _by_drug_class(Primitive.SDRM, "PI", "SDRM"),
    FilterToken.NRTI_SDRM: _by_drug_class(Primitive.SDRM, "NRTI", "SDRM"),
    FilterToken.NNRTI_SDRM: _by_drug_class(Primitive.SDRM, "NNRTI", "SDRM"),
    FilterToken.INSTI_SDRM: _by_drug_class(Primitive.SDRM, "INSTI", "SDRM"),
    FilterToken.TSM: TokenTranslation(
        Primitive.TSM,
        description="List only mutations which are treatment-selected mutations (TSM).",
    ),
    FilterToken.notTSM: TokenTranslation(
        Primitive.NOT_TSM,
        description="List only mutations which are not treatment-selected mutations (TSM).",
    ),
    FilterToken.PI_TSM: _by_drug_class(Primitive.TSM, "PI", "TSM"),
    FilterToken.NRTI_TSM: _by_drug_class(Primitive.TSM, "NRTI", "TSM"),
    FilterToken.NNRTI_TSM: _by_drug_class(Primitive.TSM, "NNRTI", "TSM"),
    FilterToken.INSTI_TSM: _by_drug_class(Primitive.TSM, "INSTI", "TSM"),
    FilterToken.GENE_PR: _by_gene("PR"),
    FilterToken.GENE_RT: _by_gene("RT"),
    FilterToken.GENE_IN: _by_gene("IN"),
    FilterToken.TYPE_MAJOR: _by_mutation_type("Major"),
    FilterToken.TYPE_ACCESSORY: _by_mutation_type("Accessory"),
    FilterToken.TYPE_NRTI: _by_mutation_type("NRTI"),
    FilterToken.TYPE_NNRTI: _by_mutation_type("NNRTI"),
    FilterToken.TYPE_OTHER: _by_mutation_type("Other"),
    FilterToken.INSERTION: TokenTranslation(Primitive.INSERTION),
    FilterToken.DELETION: TokenTranslation(Primitive.DELETION),
    FilterToken.UNUSUAL: TokenTranslation(Primitive.UNUSUAL),
    FilterToken.AMBIGUOUS: TokenTranslation(
        Primitive.AMBIGUOUS,
        description="List all highly-ambiguous (HBDVN) mutations.",
    ),
    FilterToken.STOPCODON: TokenTranslation(
        Primitive.STOPCODON,
        description="List only mutations with stop codon(s).",
    ),
    FilterToken.CUSTOMLIST: TokenTranslation(
        Primitive.CUSTOMLIST,
        description="Accept a custom list of mutations and find the intersects.",
    ),
}


def lookup_token(value: "str | FilterToken") -> FilterToken | None:
    """Return the token named ``value``, or None when it is not recognized."""
    if isinstance(value, FilterToken):
        return value
    try:
        return FilterToken(value)
    except ValueError:
        return None
