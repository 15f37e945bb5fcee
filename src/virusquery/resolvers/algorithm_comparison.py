"""Side-by-side comparison of resistance interpretation algorithms."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from virusquery.collaborators import AlgorithmProvider, ResistanceAlgorithm
from virusquery.exceptions import CollaboratorUnavailableError
from virusquery.models.analysis import AlgorithmComparisonResult
from virusquery.models.mutation_set import MutationSet

logger = logging.getLogger(__name__)

_provider_retry = retry(
    retry=retry_if_exception_type(CollaboratorUnavailableError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)


def merge_custom_algorithms(
    custom_algorithms: Iterable[Mapping[str, Any] | None] | None,
) -> dict[str, str]:
    """Merge custom algorithm definitions by name.

    Null entries are dropped. When a name repeats, the later definition wins
    but the name keeps the position of its first occurrence.
    """
    merged: dict[str, str] = {}
    for custom in custom_algorithms or ():
        if custom is None or custom.get("name") is None:
            continue
        merged[custom["name"]] = custom.get("xml") or ""
    return merged


@_provider_retry
def get_algorithm(provider: AlgorithmProvider, name: str) -> ResistanceAlgorithm:
    return provider.get_algorithm(name)


@_provider_retry
def _compile_custom(provider: AlgorithmProvider, name: str, xml: str) -> ResistanceAlgorithm:
    return provider.compile_custom(name, xml)


def compare_algorithms(
    provider: AlgorithmProvider,
    gene_mutations: Sequence[tuple[str, MutationSet]],
    algorithms: Iterable[str | None] | None = None,
    custom_algorithms: Iterable[Mapping[str, Any] | None] | None = None,
) -> list[AlgorithmComparisonResult]:
    """Evaluate every requested algorithm against every gene's mutations.

    Args:
        provider: Source of built-in algorithms and compiler of custom ones
        gene_mutations: (gene, mutations) pairs in genomic order
        algorithms: Built-in algorithm names; nulls are dropped
        custom_algorithms: ``{"name", "xml"}`` definitions; nulls are dropped

    Returns:
        One result per gene and algorithm, built-in algorithms first. Empty
        when no algorithm was requested.

    Raises:
        CollaboratorUnavailableError: If the provider keeps failing
    """
    names = [name for name in algorithms or () if name is not None]
    customs = merge_custom_algorithms(custom_algorithms)
    if not names and not customs:
        return []

    selected: list[tuple[ResistanceAlgorithm, bool]] = [
        (get_algorithm(provider, name), False) for name in names
    ]
    for name, xml in customs.items():
        logger.debug(f"Compiling custom algorithm {name}")
        selected.append((_compile_custom(provider, name, xml), True))

    results = []
    for gene, mutations in gene_mutations:
        for algorithm, is_custom in selected:
            resistance = algorithm.evaluate(gene, mutations)
            results.append(
                AlgorithmComparisonResult(
                    algorithm=algorithm.name,
                    is_custom=is_custom,
                    gene=gene,
                    drug_scores=resistance.drug_scores,
                )
            )
    return results
