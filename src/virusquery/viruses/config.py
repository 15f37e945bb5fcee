"""Static per-virus configuration models."""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def identity_extension(type_def: Any) -> Any:
    """Extension hook of viruses that add nothing to the base schema."""
    return type_def


class Strain(BaseModel):
    """A strain of a virus."""

    model_config = ConfigDict(frozen=True)

    name: str
    display_text: str


class Drug(BaseModel):
    """An antiviral drug."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Drug name (e.g., DTG)")
    full_name: str
    display_abbr: str
    drug_class: str


class DrugClass(BaseModel):
    """An antiviral drug class targeting one gene."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Drug class name (e.g., NNRTI)")
    full_name: str
    abstract_gene: str = Field(..., description="Gene targeted by this drug class")
    drugs: tuple[Drug, ...] = ()


class Gene(BaseModel):
    """A gene of a virus."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Full gene name (e.g., HIV1RT)")
    abstract_gene: str = Field(..., description="Virus-independent gene name (e.g., RT)")
    ordinal: int
    length: int = Field(..., gt=0, description="Gene length in amino acids")
    drug_classes: tuple[str, ...] = ()


class VirusConfig(BaseModel):
    """Genes, drug classes and schema extension hook of one virus.

    Created once at start-up and never modified afterwards.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    strains: tuple[Strain, ...]
    genes: tuple[Gene, ...]
    drug_classes: tuple[DrugClass, ...] = ()
    mutation_types: tuple[str, ...] = ()
    default_included_genes: tuple[str, ...] = ()
    algorithms: tuple[str, ...] = ()
    default_algorithm: str | None = None
    extension: Callable[[Any], Any] = identity_extension

    @field_validator("genes")
    @classmethod
    def _genes_in_genomic_order(cls, genes: tuple[Gene, ...]) -> tuple[Gene, ...]:
        return tuple(sorted(genes, key=lambda gene: gene.ordinal))

    @model_validator(mode="after")
    def _check_references(self) -> "VirusConfig":
        gene_names = {gene.abstract_gene for gene in self.genes}
        for drug_class in self.drug_classes:
            if drug_class.abstract_gene not in gene_names:
                raise ValueError(
                    f"Drug class {drug_class.name} targets unknown gene {drug_class.abstract_gene}"
                )
        unknown = set(self.default_included_genes) - gene_names
        if unknown:
            raise ValueError(f"Unknown default included genes: {sorted(unknown)}")
        if self.default_algorithm is not None and self.default_algorithm not in self.algorithms:
            raise ValueError(f"Default algorithm {self.default_algorithm} is not listed")
        return self

    @property
    def gene_names(self) -> list[str]:
        """Abstract gene names in genomic order."""
        return [gene.abstract_gene for gene in self.genes]

    @property
    def drug_class_names(self) -> list[str]:
        return [drug_class.name for drug_class in self.drug_classes]

    @property
    def drugs(self) -> list[Drug]:
        return [drug for drug_class in self.drug_classes for drug in drug_class.drugs]

    @property
    def has_drug_resistance(self) -> bool:
        """Whether drug resistance fields are part of this virus's schema."""
        return self.default_algorithm is not None

    def find_gene(self, name: str) -> Gene | None:
        """Look up a gene by abstract name (RT) or full name (HIV1RT), case-insensitively."""
        wanted = name.strip().upper()
        for gene in self.genes:
            if wanted in (gene.abstract_gene.upper(), gene.name.upper()):
                return gene
        return None

    def get_drug_class(self, name: str | None) -> DrugClass | None:
        if name is None:
            return None
        for drug_class in self.drug_classes:
            if drug_class.name == name:
                return drug_class
        return None

    def drug_classes_of(self, abstract_gene: str) -> list[DrugClass]:
        return [dc for dc in self.drug_classes if dc.abstract_gene == abstract_gene]
