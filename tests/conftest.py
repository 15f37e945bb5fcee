"""Shared fixtures and collaborator fakes."""

from collections.abc import Iterable

import pytest

from virusquery.config import Settings
from virusquery.exceptions import CollaboratorUnavailableError
from virusquery.models.analysis import (
    AlignedGeneSequence,
    CodonReadsCoverage,
    CutoffKeyPoint,
    DescriptiveStatistics,
    DrugScore,
    FrameShift,
    GeneSequenceReads,
    GenotypeMatch,
    ResistanceResult,
    UnalignedSequence,
)
from virusquery.models.mutation import Mutation
from virusquery.models.mutation_set import MutationSet
from virusquery.models.validation import ValidationLevel, ValidationResult
from virusquery.resolvers.context import ResolveContext
from virusquery.schema.registry import SchemaRegistry
from virusquery.viruses.hiv1 import HIV1
from virusquery.viruses.hiv2 import HIV2
from virusquery.viruses.registry import VirusRegistry

GENE_ORDINALS = {"PR": 0, "RT": 1, "IN": 2}


def make_mutation(gene: str, position: int, amino_acids: str, reference: str | None = None, **flags):
    """Build a mutation with the HIV-1 gene ordinal filled in."""
    return Mutation(
        gene=gene,
        position=position,
        amino_acids=amino_acids,
        reference=reference,
        gene_ordinal=GENE_ORDINALS[gene],
        **flags,
    )


class FakeGenotype:
    def __init__(self, matches: list[GenotypeMatch]):
        self.matches = matches

    def get_all_matches(self):
        return list(self.matches)


class FakeAlignment:
    """Alignment result backed by a fixed mutation set."""

    def __init__(self, mutations: MutationSet, genotype: FakeGenotype | None = None):
        self.input_sequence = UnalignedSequence(header="seq1", sequence="CCTCAGGTCACT")
        self.mutations = mutations
        self.available_genes = ["PR", "RT"]
        self.genotype = genotype
        self.frame_shifts = [
            FrameShift(gene="RT", position=67, size=2, is_insertion=False),
            FrameShift(gene="PR", position=10, size=1, is_insertion=True, nas="A"),
        ]

    def get_aligned_gene_sequences(self, genes: Iterable[str]):
        grouped = self.mutations.group_by_gene()
        return [
            AlignedGeneSequence(
                gene=gene,
                first_aa=1,
                last_aa=99 if gene == "PR" else 240,
                match_pcnt=98.5,
                mutations=grouped.get(gene, MutationSet()),
            )
            for gene in genes
            if gene in self.available_genes
        ]

    def get_frame_shifts(self):
        return list(self.frame_shifts)

    def get_validation_results(self, genes: Iterable[str]):
        return [ValidationResult(level=ValidationLevel.OK, message=f"Genes: {', '.join(genes)}")]

    def get_genotype_result(self):
        return self.genotype

    def get_mixture_pcnt(self) -> float:
        return 0.25


class FakeReads:
    """Sequence reads result backed by a fixed mutation set."""

    def __init__(self, name: str, strain: str, mutations: MutationSet):
        self.name = name
        self.strain = strain
        self.mutations = mutations
        self.available_genes = ["RT"]
        self.mixture_rate = 0.002

    def get_all_gene_sequence_reads(self, genes: Iterable[str]):
        return [
            GeneSequenceReads(gene="RT", first_aa=1, last_aa=240, mutations=self.mutations.by_genes(["RT"]))
            for gene in genes
            if gene == "RT"
        ]

    def get_codon_reads_coverage(self, genes: Iterable[str]):
        wanted = set(genes)
        coverage = [
            CodonReadsCoverage(gene="PR", position=1, total_reads=120),
            CodonReadsCoverage(gene="RT", position=1, total_reads=150),
            CodonReadsCoverage(gene="RT", position=2, total_reads=9, is_trimmed=True),
        ]
        return [item for item in coverage if item.gene in wanted]

    def get_validation_results(self, genes: Iterable[str]):
        return []

    def get_genotype_result(self):
        return FakeGenotype([GenotypeMatch(name="B", distance=0.02)])

    def get_cutoff_suggestions(self):
        looser = CutoffKeyPoint(
            mixture_rate=0.01,
            min_prevalence=0.01,
            is_above_mixture_rate_threshold=False,
            is_below_min_prevalence_threshold=True,
        )
        stricter = CutoffKeyPoint(
            mixture_rate=0.001,
            min_prevalence=0.2,
            is_above_mixture_rate_threshold=False,
            is_below_min_prevalence_threshold=False,
        )
        return [looser], [stricter]

    def get_read_depth_stats(self):
        return DescriptiveStatistics(mean=135.0, standard_deviation=15.0, min=120, max=150, n=2, sum=270)

    def get_mixture_rate(self) -> float:
        return self.mixture_rate


class FakeProcessor:
    def __init__(self):
        self.processed = []

    def process(self, reads):
        self.processed.append(reads)
        return FakeReads(reads.name, reads.strain, MutationSet())


class FakeAlgorithm:
    """Scores each drug of the gene's classes by its number of DRMs."""

    def __init__(self, name: str, definition: str | None = None):
        self.name = name
        self.version = "1.0"
        self.definition = definition
        self.evaluated = []

    def evaluate(self, gene: str, mutations: MutationSet) -> ResistanceResult:
        self.evaluated.append((gene, mutations))
        scores = []
        for drug_class in HIV1.drug_classes_of(gene):
            drms = mutations.drms(drug_class.name)
            for drug in drug_class.drugs[:1]:
                scores.append(
                    DrugScore(
                        drug=drug.name,
                        drug_class=drug_class.name,
                        score=15.0 * len(drms),
                        level=min(1 + len(drms), 5),
                        text="Susceptible" if not drms else "Resistant",
                    )
                )
        return ResistanceResult(
            gene=gene,
            algorithm=self.name,
            version=self.version,
            drug_scores=scores,
            mutations=mutations,
        )


class FakeProvider:
    """Algorithm provider that can fail a number of times first."""

    def __init__(self, failures: int = 0):
        self.failures = failures
        self.calls = []

    def _maybe_fail(self):
        if self.failures > 0:
            self.failures -= 1
            raise CollaboratorUnavailableError("algorithm service unavailable")

    def get_algorithm(self, name: str) -> FakeAlgorithm:
        self.calls.append(("get", name))
        self._maybe_fail()
        return FakeAlgorithm(name)

    def compile_custom(self, name: str, xml: str) -> FakeAlgorithm:
        self.calls.append(("compile", name, xml))
        self._maybe_fail()
        return FakeAlgorithm(name, definition=xml)


@pytest.fixture
def l90m():
    """PR:L90M, a PI DRM that is not an SDRM."""
    return make_mutation(
        "PR", 90, "M", "L", drm_drug_class="PI", is_at_drp=True, primary_type="Major"
    )


@pytest.fixture
def m184v():
    """RT:M184V, an NRTI DRM and SDRM."""
    return make_mutation(
        "RT",
        184,
        "V",
        "M",
        drm_drug_class="NRTI",
        sdrm_drug_class="NRTI",
        is_at_drp=True,
        primary_type="NRTI",
    )


@pytest.fixture
def drm_set(l90m, m184v):
    return MutationSet([l90m, m184v])


@pytest.fixture
def mixed_set(l90m, m184v):
    """Mutations covering every category view."""
    return MutationSet(
        [
            l90m,
            m184v,
            make_mutation("PR", 10, "F", "L", is_unusual=True, primary_type="Accessory"),
            make_mutation("RT", 69, "_", "T"),
            make_mutation("RT", 67, "-", "D"),
            make_mutation("RT", 68, "-", "S"),
            make_mutation("RT", 88, "*", "W", is_apobec_mutation=True),
            make_mutation("RT", 103, "N", "K", tsm_drug_class="NNRTI", primary_type="NNRTI"),
            make_mutation("RT", 106, "X", "V", is_ambiguous=True),
            make_mutation("RT", 230, "I", "M", is_apobec_mutation=True, is_apobec_drm=True, drm_drug_class="NNRTI"),
            make_mutation("IN", 148, "R", "Q", is_unsequenced=True),
        ]
    )


@pytest.fixture
def virus_registry():
    return VirusRegistry([HIV1, HIV2])


@pytest.fixture
def schema_registry(virus_registry):
    return SchemaRegistry(virus_registry)


@pytest.fixture
def hiv1_schema(schema_registry):
    return schema_registry.get("HIV1")


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def hiv1_context(hiv1_schema, provider, settings):
    return ResolveContext(virus=HIV1, schema=hiv1_schema, algorithms=provider, settings=settings)
