"""Interfaces of the analysis engines the query layer consumes.

Alignment, codon-reads processing, genotyping and resistance interpretation
run elsewhere. Resolvers talk to them only through these protocols.
"""

from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from virusquery.models.analysis import (
    AlignedGeneSequence,
    CodonReadsCoverage,
    CutoffKeyPoint,
    DescriptiveStatistics,
    FrameShift,
    GeneSequenceReads,
    GenotypeMatch,
    ResistanceResult,
    UnalignedSequence,
)
from virusquery.models.inputs import SequenceReadsInput
from virusquery.models.mutation_set import MutationSet
from virusquery.models.validation import ValidationResult


@runtime_checkable
class GenotypeResult(Protocol):
    def get_all_matches(self) -> Sequence[GenotypeMatch]:
        """Candidate matches, closest first."""
        ...  # pragma: no cover


@runtime_checkable
class AlignmentResult(Protocol):
    """An input sequence aligned against the virus reference."""

    @property
    def input_sequence(self) -> UnalignedSequence: ...  # pragma: no cover

    @property
    def mutations(self) -> MutationSet: ...  # pragma: no cover

    @property
    def available_genes(self) -> Sequence[str]: ...  # pragma: no cover

    def get_aligned_gene_sequences(self, genes: Iterable[str]) -> list[AlignedGeneSequence]: ...  # pragma: no cover

    def get_frame_shifts(self) -> list[FrameShift]: ...  # pragma: no cover

    def get_validation_results(self, genes: Iterable[str]) -> list[ValidationResult]: ...  # pragma: no cover

    def get_genotype_result(self) -> GenotypeResult | None: ...  # pragma: no cover

    def get_mixture_pcnt(self) -> float: ...  # pragma: no cover


@runtime_checkable
class ReadsResult(Protocol):
    """Codon reads of a sample after cutoffs were applied."""

    @property
    def name(self) -> str: ...  # pragma: no cover

    @property
    def strain(self) -> str: ...  # pragma: no cover

    @property
    def mutations(self) -> MutationSet: ...  # pragma: no cover

    @property
    def available_genes(self) -> Sequence[str]: ...  # pragma: no cover

    def get_all_gene_sequence_reads(self, genes: Iterable[str]) -> list[GeneSequenceReads]: ...  # pragma: no cover

    def get_codon_reads_coverage(self, genes: Iterable[str]) -> list[CodonReadsCoverage]: ...  # pragma: no cover

    def get_validation_results(self, genes: Iterable[str]) -> list[ValidationResult]: ...  # pragma: no cover

    def get_genotype_result(self) -> GenotypeResult | None: ...  # pragma: no cover

    def get_cutoff_suggestions(self) -> tuple[list[CutoffKeyPoint], list[CutoffKeyPoint]]:
        """Suggested looser and stricter cutoffs."""
        ...  # pragma: no cover

    def get_read_depth_stats(self) -> DescriptiveStatistics | None: ...  # pragma: no cover

    def get_mixture_rate(self) -> float: ...  # pragma: no cover


class SequenceReadsProcessor(Protocol):
    def process(self, reads: SequenceReadsInput) -> ReadsResult: ...  # pragma: no cover


class ResistanceAlgorithm(Protocol):
    """An interpretation algorithm (built-in or compiled from custom XML)."""

    @property
    def name(self) -> str: ...  # pragma: no cover

    @property
    def version(self) -> str | None: ...  # pragma: no cover

    def evaluate(self, gene: str, mutations: MutationSet) -> ResistanceResult: ...  # pragma: no cover


class AlgorithmProvider(Protocol):
    """Resolves algorithm names and compiles custom algorithm definitions.

    Implementations may reach a remote service and raise
    CollaboratorUnavailableError on transient failures.
    """

    def get_algorithm(self, name: str) -> ResistanceAlgorithm: ...  # pragma: no cover

    def compile_custom(self, name: str, xml: str) -> ResistanceAlgorithm: ...  # pragma: no cover
