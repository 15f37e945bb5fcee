"""Filterable mutation set fields."""

from collections.abc import Mapping
from typing import Any

from virusquery.exceptions import UnsupportedSourceError
from virusquery.filters.pipeline import FilterRequest, apply_filters
from virusquery.models.mutation_set import MutationSet
from virusquery.resolvers.context import FieldResult, ResolveContext
from virusquery.resolvers.sources import AnalysisSource, mutations_from_source
from virusquery.schema.types import ArgumentDef, FieldDef, Resolver, TypeRef
from virusquery.viruses.config import Gene, VirusConfig


def mutation_set_arguments(virus: VirusConfig) -> tuple[ArgumentDef, ...]:
    """Standard filter arguments shared by every mutation set field."""
    return (
        ArgumentDef(
            name="filterOptions",
            type=TypeRef.list_of("MutationSetFilterOption"),
            description="Filter tokens, applied left to right",
        ),
        ArgumentDef(
            name="includeGenes",
            type=TypeRef.list_of("GeneEnum"),
            default=virus.default_included_genes or tuple(virus.gene_names),
            description="Genes to include",
        ),
        ArgumentDef(name="drugClass", type=TypeRef(name="DrugClassEnum")),
        ArgumentDef(name="mutationType", type=TypeRef(name="MutationTypeEnum")),
        ArgumentDef(
            name="customList",
            type=TypeRef.list_of("String"),
            description="Mutations used by the CUSTOMLIST filter option",
        ),
    )


def mutation_set_field(
    virus: VirusConfig,
    name: str,
    description: str | None = None,
    property_name: str | None = None,
    deprecation_reason: str | None = None,
) -> FieldDef:
    """A ``[Mutation]`` field taking the standard filter arguments."""
    return FieldDef(
        name=name,
        type=TypeRef.list_of("Mutation"),
        description=description,
        arguments=mutation_set_arguments(virus),
        deprecation_reason=deprecation_reason,
        resolver=mutation_set_resolver(property_name),
    )


def mutation_set_resolver(property_name: str | None = None) -> Resolver:
    """Resolver filtering the mutations of ``property_name`` (or of the analysis source)."""

    def resolve(source: Any, arguments: dict[str, Any], context: ResolveContext) -> FieldResult:
        mutations = _source_mutations(source, property_name)
        result = apply_filters(
            mutations,
            FilterRequest.from_arguments(arguments),
            context.virus,
            gene=_gene_context(source),
        )
        return FieldResult(data=result.mutations, validation_results=result.validation_results)

    return resolve


def _source_mutations(source: Any, property_name: str | None) -> MutationSet:
    if property_name is None or isinstance(source, AnalysisSource):
        return mutations_from_source(source)
    if isinstance(source, Mapping):
        value = source.get(property_name)
    else:
        value = getattr(source, property_name, None)
    if callable(value):
        value = value()
    if not isinstance(value, MutationSet):
        raise UnsupportedSourceError(
            f"{type(source).__name__}.{property_name} is not a mutation set"
        )
    return value


def _gene_context(source: Any) -> str | None:
    """Gene a mutation list without gene prefixes is parsed against."""
    if isinstance(source, AnalysisSource):
        return None
    gene = source.get("gene") if isinstance(source, Mapping) else getattr(source, "gene", None)
    if isinstance(gene, Gene):
        return gene.abstract_gene
    if isinstance(gene, str):
        return gene
    return None
