"""Per-virus schema extensions."""

from typing import Any

from virusquery.resolvers.analysis import resolve_best_matching_subtype, resolve_subtypes
from virusquery.resolvers.context import ResolveContext
from virusquery.resolvers.sources import AnalysisSource, SourceKind, source_payload
from virusquery.schema.types import ArgumentDef, FieldDef, TypeDef, TypeRef

_FIRST = ArgumentDef(
    name="first",
    type=TypeRef(name="Int"),
    description="Number of closest matches to return (default 2)",
)


def _legacy_subtypes(
    source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext
) -> list[dict[str, Any]]:
    return [
        {
            "name": match.name,
            "distancePcnt": match.distance * 100,
            "display": match.display or match.name,
        }
        for match in resolve_subtypes(source, arguments, context)
    ]


def _subtype_text(source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext) -> str:
    best = resolve_best_matching_subtype(source, arguments, context)
    if best is None:
        return "NA"
    return best.display or best.name


def _mixture_pcnt(source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext) -> float:
    return source_payload(source, SourceKind.ALIGNMENT).get_mixture_pcnt()


HIV1_SEQUENCE_ANALYSIS_FIELDS = (
    FieldDef(
        name="subtypes",
        type=TypeRef.list_of("BoundSubtype"),
        description="Closest HIV-1 subtypes, with distances in percent.",
        arguments=(_FIRST,),
        deprecation_reason="Use field `subtypesV2` instead.",
        resolver=_legacy_subtypes,
    ),
    FieldDef(
        name="subtypeText",
        type=TypeRef(name="String"),
        description="Display text of the closest subtype.",
        deprecation_reason="Use field `bestMatchingSubtype { display }` instead.",
        resolver=_subtype_text,
    ),
    FieldDef(
        name="genotypes",
        type=TypeRef.list_of("BoundSubtypeV2"),
        arguments=(_FIRST,),
        deprecation_reason="Use field `subtypesV2` instead.",
        resolver=resolve_subtypes,
    ),
    FieldDef(
        name="bestMatchingGenotype",
        type=TypeRef(name="BoundSubtypeV2"),
        deprecation_reason="Use field `bestMatchingSubtype` instead.",
        resolver=resolve_best_matching_subtype,
    ),
    FieldDef(
        name="mixturePcnt",
        type=TypeRef(name="Float"),
        description="Percentage of highly ambiguous nucleotides.",
        deprecation_reason="Use field `mixtureRate` instead.",
        resolver=_mixture_pcnt,
    ),
)


def extend_hiv1(type_def: TypeDef) -> TypeDef:
    """Add the HIV-1 legacy subtype fields to SequenceAnalysis."""
    if type_def.name == "SequenceAnalysis":
        return type_def.with_fields(*HIV1_SEQUENCE_ANALYSIS_FIELDS)
    return type_def
