"""Sources that analysis fields resolve against."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from virusquery.collaborators import AlignmentResult, ReadsResult
from virusquery.exceptions import UnsupportedSourceError
from virusquery.models.mutation_set import MutationSet


class SourceKind(str, Enum):
    ALIGNMENT = "alignment"
    READS = "reads"
    MUTATIONS = "mutations"


@dataclass(frozen=True)
class NamedMutationSet:
    """A client-supplied mutation list analysed without a sequence."""

    mutations: MutationSet
    name: str | None = None
    known_genes: tuple[str, ...] = field(default=())


@dataclass(frozen=True)
class AnalysisSource:
    """Tagged wrapper around whatever an analysis was computed from."""

    kind: SourceKind
    payload: Any

    @classmethod
    def from_alignment(cls, result: AlignmentResult) -> "AnalysisSource":
        return cls(SourceKind.ALIGNMENT, result)

    @classmethod
    def from_reads(cls, result: ReadsResult) -> "AnalysisSource":
        return cls(SourceKind.READS, result)

    @classmethod
    def from_mutations(cls, named: NamedMutationSet) -> "AnalysisSource":
        return cls(SourceKind.MUTATIONS, named)

    @property
    def mutations(self) -> MutationSet:
        return mutations_from_source(self)


def mutations_from_source(source: Any) -> MutationSet:
    """Extract the mutation set of an analysis source.

    Args:
        source: An AnalysisSource

    Returns:
        The source's mutations

    Raises:
        UnsupportedSourceError: If the source is not one of the supported kinds
    """
    if not isinstance(source, AnalysisSource):
        raise UnsupportedSourceError(
            f"Can not extract mutations from {type(source).__name__}"
        )
    if source.kind is SourceKind.MUTATIONS:
        if not isinstance(source.payload, NamedMutationSet):
            raise UnsupportedSourceError(
                f"Mutations source carries {type(source.payload).__name__}, "
                "expected NamedMutationSet"
            )
        return source.payload.mutations
    if source.kind in (SourceKind.ALIGNMENT, SourceKind.READS):
        mutations = getattr(source.payload, "mutations", None)
        if not isinstance(mutations, MutationSet):
            raise UnsupportedSourceError(
                f"{source.kind.value} source {type(source.payload).__name__} has no mutation set"
            )
        return mutations
    raise UnsupportedSourceError(f"Unsupported source kind {source.kind!r}")


def source_payload(source: Any, *kinds: SourceKind) -> Any:
    """Return the payload of ``source`` if it is one of ``kinds``.

    Raises:
        UnsupportedSourceError: If the source is not an AnalysisSource of an accepted kind
    """
    if not isinstance(source, AnalysisSource):
        raise UnsupportedSourceError(f"Expected an analysis source, got {type(source).__name__}")
    if source.kind not in kinds:
        accepted = " or ".join(kind.value for kind in kinds)
        raise UnsupportedSourceError(
            f"Field needs a source of kind {accepted}, got {source.kind.value}"
        )
    return source.payload
