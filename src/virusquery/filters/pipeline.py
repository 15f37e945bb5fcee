"""Compile a filter request into a filtered mutation set."""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from virusquery.filters.vocabulary import (
    PRIMITIVE_OPERATIONS,
    TOKEN_TABLE,
    FilterToken,
    Primitive,
    lookup_token,
)
from virusquery.models.mutation_set import MutationSet
from virusquery.models.validation import ValidationResult
from virusquery.viruses.config import VirusConfig

logger = logging.getLogger(__name__)


class FilterRequest(BaseModel):
    """Filter options of one mutation set field invocation."""

    model_config = ConfigDict(frozen=True)

    filter_options: tuple[str, ...] = Field(
        default=(), description="Filter tokens, applied left to right"
    )
    include_genes: frozenset[str] | None = Field(
        None, description="Keep only mutations of these genes"
    )
    drug_class: str | None = Field(None, description="Keep only DRM/SDRM/TSM of this class")
    mutation_type: str | None = Field(None, description="Keep only mutations of this type")
    custom_list: tuple[str, ...] = Field(
        default=(), description="Mutation strings used by the CUSTOMLIST token"
    )

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> "FilterRequest":
        """Build a request from the camelCase field arguments."""
        include_genes = arguments.get("includeGenes")
        return cls(
            filter_options=tuple(
                str(option.value if isinstance(option, FilterToken) else option)
                for option in arguments.get("filterOptions") or ()
                if option is not None
            ),
            include_genes=frozenset(include_genes) if include_genes is not None else None,
            drug_class=arguments.get("drugClass"),
            mutation_type=arguments.get("mutationType"),
            custom_list=tuple(arguments.get("customList") or ()),
        )


class FilterResult(BaseModel):
    """Filtered mutations plus validation results of the custom list."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    mutations: MutationSet
    validation_results: list[ValidationResult] = Field(default_factory=list)


def apply_filters(
    mutations: MutationSet,
    request: FilterRequest,
    virus: VirusConfig,
    gene: str | None = None,
) -> FilterResult:
    """Apply a filter request to a mutation set.

    Steps run in a fixed order: every token in request order, then the gene
    inclusion filter, then the drug class filter, then the mutation type
    filter. Unrecognized tokens are skipped.

    Args:
        mutations: Mutations to filter
        request: Filter request
        virus: Virus used to parse the custom list
        gene: Gene inferred from the calling context, if any

    Returns:
        FilterResult with the filtered set and custom list parse failures
    """
    validation_results: list[ValidationResult] = []

    for option in request.filter_options:
        token = lookup_token(option)
        if token is None:
            logger.debug(f"Ignoring unrecognized filter option {option!r}")
            continue
        translation = TOKEN_TABLE[token]

        if translation.primitive is Primitive.CUSTOMLIST:
            custom_set, errors = MutationSet.from_strings(
                request.custom_list, gene=gene, virus=virus
            )
            for error in errors:
                logger.warning(f"Rejected custom list entry: {error.message}")
            validation_results.extend(errors)
            mutations = mutations.intersect(custom_set)
        elif translation.primitive is not None:
            mutations = PRIMITIVE_OPERATIONS[translation.primitive](mutations)

        if translation.restriction is not None:
            mutations = translation.restriction.apply(mutations)

    if request.include_genes is not None:
        mutations = mutations.by_genes(request.include_genes)
    if request.drug_class is not None:
        mutations = mutations.by_drug_class(request.drug_class)
    if request.mutation_type is not None:
        mutations = mutations.by_mutation_type(request.mutation_type)

    return FilterResult(mutations=mutations, validation_results=validation_results)
