"""Validation of client-provided mutation lists."""

from collections.abc import Iterable

from virusquery.models.mutation_set import MutationSet
from virusquery.models.validation import ValidationLevel, ValidationResult
from virusquery.viruses.config import VirusConfig


def validate_mutations(
    virus: VirusConfig,
    mutations: MutationSet,
    include_genes: Iterable[str],
) -> list[ValidationResult]:
    """Validate a mutation list against the genes requested by the client.

    Args:
        virus: Virus the mutations belong to
        mutations: Mutations to validate
        include_genes: Genes the client asked results for

    Returns:
        Validation results, most severe first
    """
    genes = [gene for gene in virus.gene_names if gene in set(include_genes)]
    results: list[ValidationResult] = []
    scoped = mutations.by_genes(genes)

    outside = mutations.subtract(scoped)
    if outside:
        results.append(
            ValidationResult(
                level=ValidationLevel.NOTE,
                message=(
                    f"{len(outside)} mutation(s) outside of the included genes were ignored: "
                    f"{', '.join(outside.texts())}."
                ),
            )
        )

    stop_codons = scoped.stop_codons()
    if stop_codons:
        results.append(
            ValidationResult(
                level=ValidationLevel.SEVERE_WARNING if len(stop_codons) > 1 else ValidationLevel.WARNING,
                message=f"There are {len(stop_codons)} stop codon(s): {', '.join(stop_codons.texts())}.",
            )
        )

    unusual = scoped.unusual_mutations()
    if unusual:
        results.append(
            ValidationResult(
                level=ValidationLevel.WARNING if len(unusual) > 2 else ValidationLevel.NOTE,
                message=(
                    f"There are {len(unusual)} unusual mutation(s): {', '.join(unusual.texts())}."
                ),
            )
        )

    apobec = scoped.apobec_mutations()
    if apobec:
        apobec_drms = scoped.apobec_drms()
        message = f"There are {len(apobec)} APOBEC-mediated G-to-A hypermutation(s)"
        if apobec_drms:
            message += f", including {len(apobec_drms)} at drug resistance position(s)"
        results.append(
            ValidationResult(
                level=ValidationLevel.SEVERE_WARNING if len(apobec) > 2 else ValidationLevel.WARNING,
                message=message + ".",
            )
        )

    severity = list(ValidationLevel)
    results.sort(key=lambda result: severity.index(result.level))
    return results
