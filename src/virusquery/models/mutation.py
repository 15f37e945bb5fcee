"""Mutation data model and mutation string parsing."""

import re
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from virusquery.exceptions import InputValidationError

if TYPE_CHECKING:
    from virusquery.viruses.config import VirusConfig

INSERTION = "_"
DELETION = "-"
STOP_CODON = "*"

_RESIDUE_ALIASES = {
    "INS": INSERTION,
    "#": INSERTION,
    "DEL": DELETION,
    "~": DELETION,
}

_MUTATION_PATTERN = re.compile(
    r"^(?P<reference>[A-Z])?(?P<position>\d+)(?P<residues>INS|DEL|[A-Z*_#~-]+)$"
)


class Mutation(BaseModel):
    """A single observed amino acid change at a gene position.

    Classification flags are computed by the alignment collaborator and are
    never changed afterwards.
    """

    model_config = ConfigDict(frozen=True)

    gene: str = Field(..., description="Abstract gene name (e.g., RT)")
    position: int = Field(..., ge=1, description="Amino acid position in the gene")
    amino_acids: str = Field(..., min_length=1, description="Observed residue(s)")
    reference: str | None = Field(None, description="Consensus residue at this position")
    gene_ordinal: int = Field(0, description="Order of the gene in the virus genome")
    codon: str | None = None
    is_unusual: bool = False
    is_apobec_mutation: bool = False
    is_apobec_drm: bool = False
    is_ambiguous: bool = False
    is_unsequenced: bool = False
    is_at_drp: bool = False
    drm_drug_class: str | None = None
    sdrm_drug_class: str | None = None
    tsm_drug_class: str | None = None
    primary_type: str | None = None

    @property
    def is_drm(self) -> bool:
        return self.drm_drug_class is not None

    @property
    def is_sdrm(self) -> bool:
        return self.sdrm_drug_class is not None

    @property
    def is_tsm(self) -> bool:
        return self.tsm_drug_class is not None

    @property
    def is_insertion(self) -> bool:
        return INSERTION in self.amino_acids

    @property
    def is_deletion(self) -> bool:
        return DELETION in self.amino_acids

    @property
    def has_stop(self) -> bool:
        return STOP_CODON in self.amino_acids

    @property
    def is_mixture(self) -> bool:
        return len(set(self.amino_acids)) > 1

    @property
    def short_text(self) -> str:
        """Mutation text without gene, e.g. M184V."""
        return f"{self.reference or ''}{self.position}{self._display_residues()}"

    @property
    def text(self) -> str:
        """Mutation text with gene prefix, e.g. RT:M184V."""
        return f"{self.gene}:{self.short_text}"

    @property
    def key(self) -> tuple[str, int, str]:
        """Identity used for de-duplication and set algebra."""
        return (self.gene, self.position, "".join(sorted(set(self.amino_acids))))

    @property
    def genomic_key(self) -> tuple[int, str, int, str]:
        """Sort key placing mutations in genomic order."""
        return (self.gene_ordinal, self.gene, self.position, self.amino_acids)

    def shares_residue(self, other: "Mutation") -> bool:
        """Check whether both mutations sit at the same site with a common residue."""
        return (
            self.gene == other.gene
            and self.position == other.position
            and bool(set(self.amino_acids) & set(other.amino_acids))
        )

    def _display_residues(self) -> str:
        if self.amino_acids == INSERTION:
            return "ins"
        if self.amino_acids == DELETION:
            return "del"
        return self.amino_acids

    def __str__(self) -> str:
        return self.text


def _normalize_residues(residues: str) -> str:
    residues = _RESIDUE_ALIASES.get(residues, residues)
    normalized = []
    for residue in residues:
        residue = _RESIDUE_ALIASES.get(residue, residue)
        if residue not in normalized:
            normalized.append(residue)
    return "".join(normalized)


def parse_mutation(
    text: str,
    gene: str | None = None,
    virus: "VirusConfig | None" = None,
) -> Mutation:
    """Parse a mutation string such as ``M184V`` or ``RT:K103N``.

    Args:
        text: Mutation string, optionally prefixed with ``GENE:``
        gene: Gene inferred from the calling context, used when the string has no prefix
        virus: Virus whose genes are used to validate the gene and position

    Returns:
        Parsed Mutation without classification flags

    Raises:
        InputValidationError: If the string is malformed or its gene cannot be resolved
    """
    if not isinstance(text, str) or not text.strip():
        raise InputValidationError("Empty mutation string", item=str(text))

    raw = text.strip()
    gene_text, separator, body = raw.partition(":")
    if not separator:
        gene_text, body = "", raw
    gene_name = gene_text.strip() or gene

    match = _MUTATION_PATTERN.match(body.strip().upper())
    if match is None:
        raise InputValidationError(f"Invalid mutation string: {raw!r}", item=raw)
    if not gene_name:
        raise InputValidationError(
            f"Gene of mutation {raw!r} can not be inferred from the context; "
            "prepend the gene (e.g. RT:M184V)",
            item=raw,
        )

    position = int(match.group("position"))
    ordinal = 0
    if virus is not None:
        gene_obj = virus.find_gene(gene_name)
        if gene_obj is None:
            raise InputValidationError(
                f"Unknown gene {gene_name!r} for {virus.name} in mutation {raw!r}", item=raw
            )
        if not 1 <= position <= gene_obj.length:
            raise InputValidationError(
                f"Position {position} is out of range for gene {gene_obj.abstract_gene} "
                f"(1-{gene_obj.length})",
                item=raw,
            )
        gene_name = gene_obj.abstract_gene
        ordinal = gene_obj.ordinal
    elif position < 1:
        raise InputValidationError(f"Invalid position in mutation {raw!r}", item=raw)

    return Mutation(
        gene=gene_name.upper() if virus is None else gene_name,
        position=position,
        reference=match.group("reference"),
        amino_acids=_normalize_residues(match.group("residues")),
        gene_ordinal=ordinal,
    )
