"""Records exchanged with analysis collaborators."""

from pydantic import BaseModel, ConfigDict, Field

from virusquery.models.mutation_set import MutationSet
from virusquery.viruses.config import DrugClass, Gene


class UnalignedSequence(BaseModel):
    header: str
    sequence: str


class GenotypeMatch(BaseModel):
    """A candidate subtype/genotype with its distance to the query sequence."""

    name: str = Field(..., description="Subtype or genotype name (e.g., B)")
    distance: float = Field(..., ge=0.0, le=1.0, description="Distance to the reference (0-1)")
    display: str | None = None
    reference_accession: str | None = None

    @property
    def distance_pcnt(self) -> str:
        return f"{self.distance * 100:.2f}%"


class FrameShift(BaseModel):
    gene: str
    position: int
    size: int
    is_insertion: bool
    nas: str = ""

    @property
    def is_deletion(self) -> bool:
        return not self.is_insertion

    @property
    def text(self) -> str:
        kind = "ins" if self.is_insertion else "del"
        return f"{self.gene}{self.position}{kind}{self.size}bp{self.nas}"


class AlignedGeneSequence(BaseModel):
    """Alignment of one gene of an input sequence."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    gene: str
    first_aa: int
    last_aa: int
    match_pcnt: float | None = None
    mutations: MutationSet = Field(default_factory=MutationSet)


class GeneSequenceReads(BaseModel):
    """Codon reads of one gene of a next-generation sequencing sample."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    gene: str
    first_aa: int
    last_aa: int
    mutations: MutationSet = Field(default_factory=MutationSet)


class CodonReadsCoverage(BaseModel):
    gene: str
    position: int
    total_reads: int
    is_trimmed: bool = False


class CutoffKeyPoint(BaseModel):
    mixture_rate: float
    min_prevalence: float
    is_above_mixture_rate_threshold: bool
    is_below_min_prevalence_threshold: bool


class DescriptiveStatistics(BaseModel):
    mean: float
    standard_deviation: float
    min: float
    max: float
    n: int
    sum: float
    percentile25: float | None = None
    percentile50: float | None = None
    percentile75: float | None = None


class DrugScore(BaseModel):
    """Resistance score of one drug."""

    drug: str = Field(..., description="Drug name (e.g., EFV)")
    drug_class: str
    score: float
    level: int = Field(..., ge=1, le=5, description="Resistance level (1=susceptible, 5=high)")
    text: str


class ResistanceResult(BaseModel):
    """Interpretation of one gene's mutations by one algorithm."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    gene: str
    algorithm: str
    version: str | None = None
    drug_scores: list[DrugScore] = Field(default_factory=list)
    mutations: MutationSet = Field(default_factory=MutationSet)


class AlgorithmComparisonResult(BaseModel):
    """Result of one algorithm, built-in or custom, for one gene."""

    algorithm: str
    is_custom: bool = False
    gene: str
    drug_scores: list[DrugScore] = Field(default_factory=list)


class GeneMutations(BaseModel):
    """Mutations of one gene."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    gene: Gene
    mutations: MutationSet = Field(default_factory=MutationSet)


class BoundDrugClass(BaseModel):
    """A drug class together with the mutations of its gene."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    drug_class: DrugClass
    gene: Gene
    mutations: MutationSet = Field(default_factory=MutationSet)

    @property
    def name(self) -> str:
        return self.drug_class.name

    @property
    def full_name(self) -> str:
        return self.drug_class.full_name

    @property
    def drug_resist_mutations(self) -> MutationSet:
        return self.mutations.drms(self.drug_class.name)

    @property
    def surveil_drug_resist_mutations(self) -> MutationSet:
        return self.mutations.sdrms(self.drug_class.name)

    @property
    def rx_selected_mutations(self) -> MutationSet:
        return self.mutations.tsms(self.drug_class.name)

    @property
    def has_drug_resist_mutations(self) -> bool:
        return bool(self.drug_resist_mutations)

    @property
    def has_surveil_drug_resist_mutations(self) -> bool:
        return bool(self.surveil_drug_resist_mutations)

    @property
    def has_rx_selected_mutations(self) -> bool:
        return bool(self.rx_selected_mutations)
