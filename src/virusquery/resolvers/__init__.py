"""Field resolvers of the virus schemas."""

from virusquery.resolvers.context import FieldResult, ResolveContext
from virusquery.resolvers.execution import resolve_field
from virusquery.resolvers.sources import (
    AnalysisSource,
    NamedMutationSet,
    SourceKind,
    mutations_from_source,
    source_payload,
)

__all__ = [
    "AnalysisSource",
    "FieldResult",
    "NamedMutationSet",
    "ResolveContext",
    "SourceKind",
    "mutations_from_source",
    "resolve_field",
    "source_payload",
]
