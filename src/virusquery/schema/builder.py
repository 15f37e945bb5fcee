"""Construction of the per-virus schema."""

import logging
from collections.abc import Iterable

from virusquery.exceptions import SchemaBuildError
from virusquery.filters.vocabulary import TOKEN_TABLE, FilterToken
from virusquery.models.mutation_set import MutationSet
from virusquery.models.validation import ValidationLevel
from virusquery.resolvers import analysis
from virusquery.resolvers.execution import property_resolver
from virusquery.resolvers.mutation_set import mutation_set_field
from virusquery.schema.types import (
    BUILTIN_SCALARS,
    ArgumentDef,
    EnumValueDef,
    FieldDef,
    Resolver,
    TypeDef,
    TypeKind,
    TypeRef,
    VariantSchema,
)
from virusquery.viruses.config import VirusConfig

logger = logging.getLogger(__name__)

# Types a virus may extend through its extension hook.
EXTENSIBLE_TYPES = ("MutationsAnalysis", "SequenceAnalysis", "SequenceReadsAnalysis")


def _field(
    name: str,
    type_name: str,
    description: str | None = None,
    *,
    is_list: bool = False,
    resolver: Resolver | None = None,
    arguments: tuple[ArgumentDef, ...] = (),
    deprecation_reason: str | None = None,
) -> FieldDef:
    return FieldDef(
        name=name,
        type=TypeRef(name=type_name, is_list=is_list),
        description=description,
        arguments=arguments,
        deprecation_reason=deprecation_reason,
        resolver=resolver,
    )


def _object(name: str, description: str | None, fields: Iterable[FieldDef]) -> TypeDef:
    return TypeDef(name=name, kind=TypeKind.OBJECT, description=description, fields=tuple(fields))


def _input(name: str, description: str | None, fields: Iterable[FieldDef]) -> TypeDef:
    return TypeDef(
        name=name, kind=TypeKind.INPUT_OBJECT, description=description, fields=tuple(fields)
    )


def _enum(
    name: str, values: Iterable[str], description: str | None = None, strict: bool = True
) -> TypeDef:
    return TypeDef(
        name=name,
        kind=TypeKind.ENUM,
        description=description,
        enum_values=tuple(EnumValueDef(name=value) for value in values),
        strict=strict,
    )


def _filter_option_enum() -> TypeDef:
    values = []
    for token in FilterToken:
        translation = TOKEN_TABLE[token]
        values.append(
            EnumValueDef(
                name=token.value,
                description=translation.description,
                deprecation_reason=translation.deprecation_reason,
            )
        )
    # Unknown options are skipped by the filter pipeline rather than rejected.
    return TypeDef(
        name="MutationSetFilterOption",
        kind=TypeKind.ENUM,
        description="Filter options of mutation set fields.",
        enum_values=tuple(values),
        strict=False,
    )


def _include_genes(virus: VirusConfig) -> ArgumentDef:
    return ArgumentDef(
        name="includeGenes",
        type=TypeRef.list_of("GeneEnum"),
        default=virus.default_included_genes or tuple(virus.gene_names),
        description="Genes to include",
    )


def _first() -> ArgumentDef:
    return ArgumentDef(
        name="first",
        type=TypeRef(name="Int"),
        description="Number of closest matches to return (default 2)",
    )


def _count_fields() -> list[FieldDef]:
    views = {
        "mutationCount": MutationSet.sequenced_only,
        "unusualMutationCount": MutationSet.unusual_mutations,
        "insertionCount": MutationSet.insertions,
        "deletionCount": MutationSet.deletions,
        "stopCodonCount": MutationSet.stop_codons,
        "ambiguousMutationCount": MutationSet.ambiguous_codons,
        "apobecMutationCount": MutationSet.apobec_mutations,
        "apobecDRMCount": MutationSet.apobec_drms,
    }
    return [
        _field(name, "Int", resolver=analysis.mutation_count_resolver(view))
        for name, view in views.items()
    ]


def _resistance_fields(virus: VirusConfig) -> list[FieldDef]:
    if not virus.has_drug_resistance:
        return []
    return [
        _field(
            "drugResistance",
            "DrugResistance",
            "Drug resistance interpretation of each included gene.",
            is_list=True,
            resolver=analysis.resolve_drug_resistance,
            arguments=(
                ArgumentDef(
                    name="algorithm",
                    type=TypeRef(name="ASIAlgorithm"),
                    default=virus.default_algorithm,
                ),
                _include_genes(virus),
            ),
        ),
        _field(
            "algorithmComparison",
            "AlgorithmComparison",
            "Drug resistance interpretations of several algorithms.",
            is_list=True,
            resolver=analysis.resolve_algorithm_comparison,
            arguments=(
                ArgumentDef(name="algorithms", type=TypeRef.list_of("ASIAlgorithm")),
                ArgumentDef(name="customAlgorithms", type=TypeRef.list_of("CustomASIAlgorithm")),
                _include_genes(virus),
            ),
        ),
    ]


def _common_analysis_fields(virus: VirusConfig) -> list[FieldDef]:
    return [
        _field(
            "validationResults",
            "ValidationResult",
            is_list=True,
            resolver=analysis.resolve_validation_results,
            arguments=(_include_genes(virus),),
        ),
        mutation_set_field(virus, "mutations", "All mutations of the input."),
        _field(
            "allGeneMutations",
            "GeneMutations",
            "Mutations grouped by gene.",
            is_list=True,
            resolver=analysis.resolve_all_gene_mutations,
            arguments=(_include_genes(virus),),
        ),
        *_count_fields(),
        *_resistance_fields(virus),
    ]


def _reference_types(virus: VirusConfig) -> list[TypeDef]:
    gene = analysis.gene_resolver()
    types = [
        *(TypeDef(name=name, kind=TypeKind.SCALAR) for name in BUILTIN_SCALARS),
        _enum("GeneEnum", virus.gene_names, "Genes of the virus."),
        _enum("DrugClassEnum", virus.drug_class_names, "Drug classes of the virus."),
        _enum("DrugEnum", [drug.name for drug in virus.drugs], "Antiviral drugs."),
        _enum("MutationTypeEnum", virus.mutation_types, "Mutation classifications."),
        _enum("StrainEnum", [strain.name for strain in virus.strains], "Strains of the virus."),
        _enum("ValidationLevel", [level.value for level in ValidationLevel]),
        _filter_option_enum(),
        _object(
            "Strain",
            "A virus strain.",
            [
                _field("name", "StrainEnum"),
                _field("display", "String", resolver=property_resolver("display", "display_text")),
            ],
        ),
        _object(
            "Gene",
            "A gene of the virus.",
            [
                _field("name", "GeneEnum", resolver=analysis.resolve_gene_name),
                _field("fullName", "String", resolver=analysis.resolve_gene_full_name),
                _field("length", "Int", "Length in amino acids."),
                _field(
                    "drugClasses",
                    "DrugClass",
                    is_list=True,
                    resolver=analysis.resolve_gene_drug_classes,
                ),
                _field(
                    "mutationTypes",
                    "MutationTypeEnum",
                    is_list=True,
                    resolver=analysis.resolve_gene_mutation_types,
                ),
            ],
        ),
        _object(
            "DrugClass",
            "An antiviral drug class, bound to the mutations of its gene.",
            [
                _field("name", "DrugClassEnum"),
                _field("fullName", "String"),
                _field("drugs", "Drug", is_list=True, resolver=analysis.resolve_drug_class_drugs),
                _field("gene", "Gene", resolver=gene),
                mutation_set_field(
                    virus,
                    "drugResistMutations",
                    "Drug resistance mutations of this class.",
                    property_name="drug_resist_mutations",
                ),
                mutation_set_field(
                    virus,
                    "surveilDrugResistMutations",
                    "Surveillance drug resistance mutations of this class.",
                    property_name="surveil_drug_resist_mutations",
                ),
                mutation_set_field(
                    virus,
                    "rxSelectedMutations",
                    "Treatment-selected mutations of this class.",
                    property_name="rx_selected_mutations",
                ),
                _field("hasDrugResistMutations", "Boolean"),
                _field("hasSurveilDrugResistMutations", "Boolean"),
                _field("hasRxSelectedMutations", "Boolean"),
            ],
        ),
        _object(
            "Drug",
            "An antiviral drug.",
            [
                _field("name", "DrugEnum"),
                _field("displayAbbr", "String"),
                _field("fullName", "String"),
                _field("drugClass", "DrugClass", resolver=analysis.drug_class_resolver()),
            ],
        ),
        _object(
            "Mutation",
            "An amino acid mutation relative to the reference.",
            [
                _field("gene", "Gene", resolver=gene),
                _field("position", "Int"),
                _field("reference", "String"),
                _field("aminoAcids", "String"),
                _field("triplet", "String", resolver=property_resolver("triplet", "codon")),
                _field("text", "String"),
                _field("shortText", "String"),
                _field("primaryType", "MutationTypeEnum"),
                _field("isInsertion", "Boolean"),
                _field("isDeletion", "Boolean"),
                _field("hasStop", "Boolean"),
                _field("isMixture", "Boolean"),
                _field("isUnusual", "Boolean"),
                _field("isAmbiguous", "Boolean"),
                _field("isUnsequenced", "Boolean"),
                _field("isDRM", "Boolean"),
                _field("isSDRM", "Boolean"),
                _field("isTSM", "Boolean"),
                _field("drmDrugClass", "DrugClassEnum"),
                _field("sdrmDrugClass", "DrugClassEnum"),
                _field("tsmDrugClass", "DrugClassEnum"),
                _field(
                    "isAPOBECMutation",
                    "Boolean",
                    resolver=property_resolver("isAPOBECMutation", "is_apobec_mutation"),
                ),
                _field(
                    "isApobecDRM",
                    "Boolean",
                    resolver=property_resolver("isApobecDRM", "is_apobec_drm"),
                ),
                _field(
                    "isAtDrugResistancePosition",
                    "Boolean",
                    resolver=property_resolver("isAtDrugResistancePosition", "is_at_drp"),
                ),
            ],
        ),
        _object(
            "GeneMutations",
            "Mutations of one gene.",
            [
                _field("gene", "Gene"),
                mutation_set_field(virus, "mutations", property_name="mutations"),
                _field(
                    "drugClasses",
                    "DrugClass",
                    is_list=True,
                    resolver=analysis.resolve_gene_mutations_drug_classes,
                ),
            ],
        ),
        _object(
            "ValidationResult",
            "A validation finding about the input.",
            [_field("level", "ValidationLevel"), _field("message", "String")],
        ),
        _object(
            "UnalignedSequence",
            None,
            [_field("header", "String"), _field("sequence", "String")],
        ),
        _object(
            "FrameShift",
            "A frame shift found during alignment.",
            [
                _field("gene", "Gene", resolver=gene),
                _field("position", "Int"),
                _field("isInsertion", "Boolean"),
                _field("isDeletion", "Boolean"),
                _field("size", "Int"),
                _field("NAs", "String", resolver=property_resolver("NAs", "nas")),
                _field("text", "String"),
            ],
        ),
        _object(
            "AlignedGeneSequence",
            "Alignment of one gene.",
            [
                _field("gene", "Gene", resolver=gene),
                _field("firstAA", "Int"),
                _field("lastAA", "Int"),
                _field("matchPcnt", "Float"),
                mutation_set_field(virus, "mutations", property_name="mutations"),
            ],
        ),
        _object(
            "GeneSequenceReads",
            "Codon reads of one gene.",
            [
                _field("gene", "Gene", resolver=gene),
                _field("firstAA", "Int"),
                _field("lastAA", "Int"),
                mutation_set_field(virus, "mutations", property_name="mutations"),
            ],
        ),
        _object(
            "BoundSubtype",
            "Legacy subtype match with the distance in percent.",
            [_field("name", "String"), _field("distancePcnt", "Float"), _field("display", "String")],
        ),
        _object(
            "BoundSubtypeV2",
            "A subtype/genotype match.",
            [
                _field("name", "String"),
                _field("distance", "Float"),
                _field("distancePcnt", "String"),
                _field("display", "String"),
                _field("referenceAccession", "String"),
            ],
        ),
        _object(
            "OneCodonReadsCoverage",
            None,
            [
                _field("gene", "Gene", resolver=gene),
                _field("position", "Int"),
                _field("totalReads", "Long"),
                _field("isTrimmed", "Boolean"),
            ],
        ),
        _object(
            "CutoffKeyPoint",
            "A suggested mixture rate/minimal prevalence cutoff pair.",
            [
                _field("mixtureRate", "Float"),
                _field("minPrevalence", "Float"),
                _field("isAboveMixtureRateThreshold", "Boolean"),
                _field("isBelowMinPrevalenceThreshold", "Boolean"),
            ],
        ),
        _object(
            "DescriptiveStatistics",
            None,
            [
                _field("mean", "Float"),
                _field("standardDeviation", "Float"),
                _field("min", "Float"),
                _field("max", "Float"),
                _field("n", "Int"),
                _field("sum", "Float"),
                _field("percentile25", "Float"),
                _field("percentile50", "Float"),
                _field("percentile75", "Float"),
            ],
        ),
        _input(
            "CodonReadsInput",
            None,
            [_field("codon", "String"), _field("reads", "Long")],
        ),
        _input(
            "PositionCodonReadsInput",
            None,
            [
                _field("gene", "GeneEnum"),
                _field("position", "Int"),
                _field("totalReads", "Long"),
                _field("allCodonReads", "CodonReadsInput", is_list=True),
            ],
        ),
        _input(
            "UntranslatedRegionInput",
            None,
            [
                _field("name", "String"),
                _field("refStart", "Long"),
                _field("refEnd", "Long"),
                _field("consensus", "String"),
            ],
        ),
        _input(
            "SequenceReadsInput",
            "Codon reads of one sample.",
            [
                _field("name", "String"),
                _field("strain", "StrainEnum"),
                _field("allReads", "PositionCodonReadsInput", is_list=True),
                _field("untranslatedRegions", "UntranslatedRegionInput", is_list=True),
                _field("maxMixtureRate", "Float"),
                _field("minPrevalence", "Float"),
                _field("minCodonReads", "Long"),
                _field("minPositionReads", "Long"),
            ],
        ),
        _input(
            "UnalignedSequenceInput",
            None,
            [_field("header", "String"), _field("sequence", "String")],
        ),
    ]

    if virus.has_drug_resistance:
        types.extend(
            [
                _enum("ASIAlgorithm", virus.algorithms, "Built-in resistance algorithms."),
                _input(
                    "CustomASIAlgorithm",
                    "A custom algorithm given as ASI XML.",
                    [_field("name", "String"), _field("xml", "String")],
                ),
                _object(
                    "DrugScore",
                    "Resistance score of one drug.",
                    [
                        _field("drug", "Drug", resolver=analysis.resolve_drug),
                        _field("drugClass", "DrugClass", resolver=analysis.drug_class_resolver()),
                        _field("score", "Float"),
                        _field("level", "Int"),
                        _field("text", "String"),
                    ],
                ),
                _object(
                    "DrugResistance",
                    "Interpretation of one gene by one algorithm.",
                    [
                        _field("gene", "Gene", resolver=gene),
                        _field("algorithm", "String"),
                        _field("version", "String"),
                        _field("drugScores", "DrugScore", is_list=True),
                        mutation_set_field(virus, "mutations", property_name="mutations"),
                    ],
                ),
                _object(
                    "AlgorithmComparison",
                    "Interpretation of one gene by one compared algorithm.",
                    [
                        _field("algorithm", "String"),
                        _field("isCustom", "Boolean"),
                        _field("gene", "Gene", resolver=gene),
                        _field("drugScores", "DrugScore", is_list=True),
                    ],
                ),
            ]
        )
    return types


def _analysis_types(virus: VirusConfig) -> list[TypeDef]:
    genes = (_include_genes(virus),)
    return [
        _object(
            "MutationsAnalysis",
            "Analysis of a client-supplied mutation list.",
            [_field("name", "String"), *_common_analysis_fields(virus)],
        ),
        _object(
            "SequenceAnalysis",
            "Analysis of one aligned sequence.",
            [
                _field("inputSequence", "UnalignedSequence"),
                _field(
                    "availableGenes",
                    "Gene",
                    is_list=True,
                    resolver=analysis.resolve_available_genes,
                ),
                _field(
                    "alignedGeneSequences",
                    "AlignedGeneSequence",
                    is_list=True,
                    resolver=analysis.resolve_aligned_gene_sequences,
                    arguments=genes,
                ),
                _field(
                    "subtypesV2",
                    "BoundSubtypeV2",
                    is_list=True,
                    resolver=analysis.resolve_subtypes,
                    arguments=(_first(),),
                ),
                _field(
                    "bestMatchingSubtype",
                    "BoundSubtypeV2",
                    resolver=analysis.resolve_best_matching_subtype,
                ),
                _field(
                    "mixtureRate",
                    "Float",
                    resolver=analysis.resolve_mixture_rate,
                ),
                _field(
                    "frameShifts",
                    "FrameShift",
                    is_list=True,
                    resolver=analysis.resolve_frame_shifts,
                    arguments=genes,
                ),
                _field("frameShiftCount", "Int", resolver=analysis.resolve_frame_shift_count),
                *_common_analysis_fields(virus),
            ],
        ),
        _object(
            "SequenceReadsAnalysis",
            "Analysis of the codon reads of one sample.",
            [
                _field("name", "String"),
                _field("strain", "Strain", resolver=analysis.resolve_strain),
                _field(
                    "availableGenes",
                    "Gene",
                    is_list=True,
                    resolver=analysis.resolve_available_genes,
                ),
                _field(
                    "allGeneSequenceReads",
                    "GeneSequenceReads",
                    is_list=True,
                    resolver=analysis.resolve_all_gene_sequence_reads,
                    arguments=genes,
                ),
                _field(
                    "subtypes",
                    "BoundSubtypeV2",
                    is_list=True,
                    resolver=analysis.resolve_subtypes,
                    arguments=(_first(),),
                ),
                _field(
                    "bestMatchingSubtype",
                    "BoundSubtypeV2",
                    resolver=analysis.resolve_best_matching_subtype,
                ),
                _field("mixtureRate", "Float"),
                _field(
                    "cutoffSuggestionLooserLimit",
                    "CutoffKeyPoint",
                    is_list=True,
                    resolver=analysis.resolve_cutoff_suggestion_looser,
                ),
                _field(
                    "cutoffSuggestionStricterLimit",
                    "CutoffKeyPoint",
                    is_list=True,
                    resolver=analysis.resolve_cutoff_suggestion_stricter,
                ),
                _field("readDepthStats", "DescriptiveStatistics"),
                _field(
                    "codonReadsCoverage",
                    "OneCodonReadsCoverage",
                    is_list=True,
                    resolver=analysis.resolve_codon_reads_coverage,
                    arguments=genes,
                ),
                _field(
                    "internalJsonCodonReadsCoverage",
                    "String",
                    resolver=analysis.resolve_internal_json_codon_reads_coverage,
                    arguments=genes,
                ),
                *_common_analysis_fields(virus),
            ],
        ),
    ]


def apply_extension(virus: VirusConfig, type_def: TypeDef) -> TypeDef:
    """Run the virus's extension hook on ``type_def`` and check it only added fields.

    Raises:
        SchemaBuildError: If the hook renamed the type or dropped/changed a field
    """
    try:
        extended = virus.extension(type_def)
    except ValueError as e:
        raise SchemaBuildError(virus.name, f"extension of {type_def.name} failed: {e}") from e

    if not isinstance(extended, TypeDef) or extended.name != type_def.name:
        raise SchemaBuildError(virus.name, f"extension of {type_def.name} must return the same type")
    if extended.kind is not type_def.kind:
        raise SchemaBuildError(virus.name, f"extension of {type_def.name} changed its kind")
    for field in type_def.fields:
        if not extended.has_field(field.name) or extended.field(field.name) != field:
            raise SchemaBuildError(
                virus.name, f"extension of {type_def.name} removed or changed field {field.name}"
            )
    return extended


def build_variant_schema(virus: VirusConfig) -> VariantSchema:
    """Build the complete schema of one virus.

    Args:
        virus: Virus configuration

    Returns:
        VariantSchema whose type references all resolve

    Raises:
        SchemaBuildError: If the extension hook is not additive or a reference dangles
    """
    logger.debug(f"Building schema for {virus.name}")
    types: dict[str, TypeDef] = {}
    for type_def in [*_reference_types(virus), *_analysis_types(virus)]:
        if type_def.name in EXTENSIBLE_TYPES:
            type_def = apply_extension(virus, type_def)
        if type_def.name in types:
            raise SchemaBuildError(virus.name, f"type {type_def.name} is defined twice")
        types[type_def.name] = type_def

    schema = VariantSchema(virus=virus.name, types=types)
    dangling = schema.check_references()
    if dangling:
        raise SchemaBuildError(virus.name, f"dangling type references: {', '.join(dangling)}")
    logger.info(f"Built {virus.name} schema with {len(types)} types")
    return schema
