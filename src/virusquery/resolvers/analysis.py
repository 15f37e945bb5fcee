"""Resolvers of the analysis types and their nested objects."""

import json
import logging
from collections.abc import Callable
from typing import Any

from virusquery.collaborators import AlgorithmProvider, GenotypeResult
from virusquery.exceptions import CollaboratorUnavailableError
from virusquery.models.analysis import BoundDrugClass, GeneMutations, GenotypeMatch, ResistanceResult
from virusquery.models.mutation_set import MutationSet
from virusquery.models.validation import ValidationResult
from virusquery.resolvers.algorithm_comparison import compare_algorithms, get_algorithm
from virusquery.resolvers.context import ResolveContext
from virusquery.resolvers.execution import property_resolver
from virusquery.resolvers.sources import (
    AnalysisSource,
    SourceKind,
    mutations_from_source,
    source_payload,
)
from virusquery.viruses.config import Drug, Gene, Strain, VirusConfig
from virusquery.viruses.validation import validate_mutations

logger = logging.getLogger(__name__)


def selected_genes(virus: VirusConfig, arguments: dict[str, Any]) -> list[str]:
    """Requested genes in genomic order; defaults to the virus's default gene set."""
    requested = arguments.get("includeGenes")
    if requested is None:
        requested = virus.default_included_genes or virus.gene_names
    wanted = set(requested)
    return [gene for gene in virus.gene_names if gene in wanted]


def gene_mutation_sets(
    source: AnalysisSource, genes: list[str], context: ResolveContext
) -> list[tuple[str, MutationSet]]:
    """Per-gene mutation sets of an analysis source, restricted to ``genes``."""
    payload = source_payload(source, *SourceKind)
    if source.kind is SourceKind.ALIGNMENT:
        return [(seq.gene, seq.mutations) for seq in payload.get_aligned_gene_sequences(genes)]
    if source.kind is SourceKind.READS:
        return [(reads.gene, reads.mutations) for reads in payload.get_all_gene_sequence_reads(genes)]
    grouped = mutations_from_source(source).group_by_gene(context.virus.gene_names)
    return [(gene, grouped[gene]) for gene in genes]


def count_mutations(mutations: MutationSet) -> int:
    """Count mutations, collapsing runs of consecutive deletions into one."""
    count = 0
    previous = None
    for mutation in mutations:
        if (
            mutation.is_deletion
            and previous is not None
            and previous.is_deletion
            and previous.gene == mutation.gene
            and previous.position + 1 == mutation.position
        ):
            previous = mutation
            continue
        count += 1
        previous = mutation
    return count


def mutation_count_resolver(view: Callable[[MutationSet], MutationSet]):
    def resolve(source: Any, arguments: dict[str, Any], context: ResolveContext) -> int:
        return count_mutations(view(mutations_from_source(source)))

    return resolve


def _require_provider(context: ResolveContext) -> AlgorithmProvider:
    if context.algorithms is None:
        raise CollaboratorUnavailableError("No resistance algorithm provider is configured")
    return context.algorithms


def _genotype(source: AnalysisSource) -> GenotypeResult | None:
    return source_payload(source, SourceKind.ALIGNMENT, SourceKind.READS).get_genotype_result()


# Analysis-level fields


def resolve_validation_results(
    source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext
) -> list[ValidationResult]:
    genes = selected_genes(context.virus, arguments)
    if isinstance(source, AnalysisSource) and source.kind is SourceKind.MUTATIONS:
        return validate_mutations(context.virus, mutations_from_source(source), genes)
    payload = source_payload(source, SourceKind.ALIGNMENT, SourceKind.READS)
    return list(payload.get_validation_results(genes))


def resolve_all_gene_mutations(
    source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext
) -> list[GeneMutations]:
    return [
        GeneMutations(gene=context.virus.find_gene(gene), mutations=mutations)
        for gene, mutations in gene_mutation_sets(
            source, selected_genes(context.virus, arguments), context
        )
    ]


def resolve_drug_resistance(
    source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext
) -> list[ResistanceResult]:
    """Interpret each gene's mutations with one algorithm (the virus default if unset)."""
    provider = _require_provider(context)
    name = arguments.get("algorithm") or context.virus.default_algorithm
    algorithm = get_algorithm(provider, name)
    genes = selected_genes(context.virus, arguments)
    return [
        algorithm.evaluate(gene, mutations)
        for gene, mutations in gene_mutation_sets(source, genes, context)
    ]


def resolve_algorithm_comparison(
    source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext
):
    algorithms = arguments.get("algorithms")
    custom_algorithms = arguments.get("customAlgorithms")
    if not algorithms and not custom_algorithms:
        return []
    genes = selected_genes(context.virus, arguments)
    return compare_algorithms(
        _require_provider(context),
        gene_mutation_sets(source, genes, context),
        algorithms,
        custom_algorithms,
    )


def resolve_subtypes(
    source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext
) -> list[GenotypeMatch]:
    genotype = _genotype(source)
    if genotype is None:
        return []
    first = arguments.get("first")
    if first is None:
        first = context.settings.default_subtype_count if context.settings else 2
    return list(genotype.get_all_matches())[: max(first, 0)]


def resolve_best_matching_subtype(
    source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext
) -> GenotypeMatch | None:
    genotype = _genotype(source)
    if genotype is None:
        return None
    matches = list(genotype.get_all_matches())
    return matches[0] if matches else None


def resolve_frame_shifts(source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext):
    shifts = source_payload(source, SourceKind.ALIGNMENT).get_frame_shifts()
    genes = set(selected_genes(context.virus, arguments))
    return [shift for shift in shifts if shift.gene in genes]


def resolve_frame_shift_count(source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext):
    return len(source_payload(source, SourceKind.ALIGNMENT).get_frame_shifts())


def resolve_aligned_gene_sequences(
    source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext
):
    payload = source_payload(source, SourceKind.ALIGNMENT)
    return payload.get_aligned_gene_sequences(selected_genes(context.virus, arguments))


def resolve_available_genes(
    source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext
) -> list[Gene]:
    payload = source_payload(source, SourceKind.ALIGNMENT, SourceKind.READS)
    genes = [context.virus.find_gene(name) for name in payload.available_genes]
    return [gene for gene in genes if gene is not None]


def resolve_all_gene_sequence_reads(
    source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext
):
    payload = source_payload(source, SourceKind.READS)
    return payload.get_all_gene_sequence_reads(selected_genes(context.virus, arguments))


def resolve_codon_reads_coverage(
    source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext
):
    payload = source_payload(source, SourceKind.READS)
    return payload.get_codon_reads_coverage(selected_genes(context.virus, arguments))


def resolve_internal_json_codon_reads_coverage(
    source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext
) -> str:
    """Codon coverage as compact JSON, for clients that plot it directly."""
    coverage = resolve_codon_reads_coverage(source, arguments, context)
    return json.dumps(
        [
            {
                "gene": item.gene,
                "position": item.position,
                "totalReads": item.total_reads,
                "isTrimmed": item.is_trimmed,
            }
            for item in coverage
        ],
        separators=(",", ":"),
    )


def resolve_cutoff_suggestion_looser(
    source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext
):
    return source_payload(source, SourceKind.READS).get_cutoff_suggestions()[0]


def resolve_cutoff_suggestion_stricter(
    source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext
):
    return source_payload(source, SourceKind.READS).get_cutoff_suggestions()[1]


def resolve_strain(source: Any, arguments: dict[str, Any], context: ResolveContext) -> Strain | None:
    name = property_resolver("strain")(source, arguments, context)
    if name is None or isinstance(name, Strain):
        return name
    for strain in context.virus.strains:
        if strain.name == name:
            return strain
    logger.warning(f"Unknown strain {name!r} for {context.virus.name}")
    return None


# Nested objects


def gene_resolver(attribute: str = "gene"):
    """Resolver turning a gene name held by the source into a Gene."""
    read = property_resolver(attribute)

    def resolve(source: Any, arguments: dict[str, Any], context: ResolveContext) -> Gene | None:
        value = read(source, arguments, context)
        if value is None or isinstance(value, Gene):
            return value
        return context.virus.find_gene(value)

    return resolve


def _bind_drug_class(
    context: ResolveContext, name: str | None, mutations: MutationSet | None = None
) -> BoundDrugClass | None:
    drug_class = context.virus.get_drug_class(name)
    if drug_class is None:
        return None
    return BoundDrugClass(
        drug_class=drug_class,
        gene=context.virus.find_gene(drug_class.abstract_gene),
        mutations=mutations or MutationSet(),
    )


def resolve_gene_name(source: Gene, arguments: dict[str, Any], context: ResolveContext) -> str:
    return source.abstract_gene


def resolve_gene_full_name(source: Gene, arguments: dict[str, Any], context: ResolveContext) -> str:
    return source.name


def resolve_gene_drug_classes(
    source: Gene, arguments: dict[str, Any], context: ResolveContext
) -> list[BoundDrugClass]:
    return [
        _bind_drug_class(context, drug_class.name)
        for drug_class in context.virus.drug_classes_of(source.abstract_gene)
    ]


def resolve_gene_mutation_types(
    source: Gene, arguments: dict[str, Any], context: ResolveContext
) -> list[str]:
    return list(context.virus.mutation_types)


def resolve_gene_mutations_drug_classes(
    source: GeneMutations, arguments: dict[str, Any], context: ResolveContext
) -> list[BoundDrugClass]:
    return [
        _bind_drug_class(context, drug_class.name, source.mutations)
        for drug_class in context.virus.drug_classes_of(source.gene.abstract_gene)
    ]


def resolve_drug_class_drugs(
    source: BoundDrugClass, arguments: dict[str, Any], context: ResolveContext
) -> list[Drug]:
    return list(source.drug_class.drugs)


def drug_class_resolver(attribute: str = "drug_class"):
    """Resolver turning a drug class name held by the source into a DrugClass."""
    read = property_resolver(attribute)

    def resolve(source: Any, arguments: dict[str, Any], context: ResolveContext):
        return _bind_drug_class(context, read(source, arguments, context))

    return resolve


def resolve_drug(source: Any, arguments: dict[str, Any], context: ResolveContext) -> Drug | None:
    name = property_resolver("drug")(source, arguments, context)
    for drug in context.virus.drugs:
        if drug.name == name:
            return drug
    return None


def resolve_mixture_rate(source: AnalysisSource, arguments: dict[str, Any], context: ResolveContext) -> float:
    payload = source_payload(source, SourceKind.ALIGNMENT, SourceKind.READS)
    if source.kind is SourceKind.ALIGNMENT:
        return payload.get_mixture_pcnt() / 100
    return payload.get_mixture_rate()
