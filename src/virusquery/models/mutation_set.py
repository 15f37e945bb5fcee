"""Immutable ordered mutation collection with set algebra."""

from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any

from virusquery.exceptions import InputValidationError
from virusquery.models.mutation import Mutation, parse_mutation
from virusquery.models.validation import ValidationResult

if TYPE_CHECKING:
    from virusquery.viruses.config import VirusConfig

MutationPredicate = Callable[[Mutation], bool]


class MutationSet:
    """Ordered, duplicate-free collection of mutations.

    Members are de-duplicated by ``Mutation.key`` (the first occurrence wins)
    and kept in genomic order. Every operation returns a new set; the
    receiver is never modified.
    """

    __slots__ = ("_mutations", "_keys")

    def __init__(self, mutations: Iterable[Mutation] = ()) -> None:
        unique: dict[tuple[str, int, str], Mutation] = {}
        for mutation in mutations:
            unique.setdefault(mutation.key, mutation)
        self._mutations: tuple[Mutation, ...] = tuple(
            sorted(unique.values(), key=lambda mut: mut.genomic_key)
        )
        self._keys = frozenset(unique)

    @classmethod
    def from_strings(
        cls,
        texts: Iterable[str],
        gene: str | None = None,
        virus: "VirusConfig | None" = None,
    ) -> tuple["MutationSet", list[ValidationResult]]:
        """Parse mutation strings, collecting parse failures instead of raising.

        Args:
            texts: Mutation strings (e.g. ``["RT:M184V", "K103N"]``)
            gene: Gene used for strings without a gene prefix
            virus: Virus used to validate genes and positions

        Returns:
            Tuple of the parsed set and one validation result per rejected string
        """
        mutations = []
        errors = []
        for text in texts:
            try:
                mutations.append(parse_mutation(text, gene=gene, virus=virus))
            except InputValidationError as e:
                errors.append(ValidationResult.from_error(e))
        return cls(mutations), errors

    # Collection protocol

    def __iter__(self) -> Iterator[Mutation]:
        return iter(self._mutations)

    def __len__(self) -> int:
        return len(self._mutations)

    def __bool__(self) -> bool:
        return bool(self._mutations)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Mutation):
            return item.key in self._keys
        return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MutationSet):
            return NotImplemented
        return self._keys == other._keys

    def __hash__(self) -> int:
        return hash(self._keys)

    def __repr__(self) -> str:
        return f"MutationSet([{', '.join(mut.text for mut in self._mutations)}])"

    def as_list(self) -> list[Mutation]:
        """Return members in display (genomic) order."""
        return list(self._mutations)

    def texts(self) -> list[str]:
        return [mut.text for mut in self._mutations]

    @property
    def genes(self) -> list[str]:
        """Genes present in this set, in genomic order."""
        return list(dict.fromkeys(mut.gene for mut in self._mutations))

    # Set algebra

    def union(self, other: "MutationSet") -> "MutationSet":
        return MutationSet((*self._mutations, *other._mutations))

    def intersect(self, other: "MutationSet") -> "MutationSet":
        """Keep members sharing gene, position and at least one residue with ``other``."""
        by_site: dict[tuple[str, int], list[Mutation]] = {}
        for mutation in other._mutations:
            by_site.setdefault((mutation.gene, mutation.position), []).append(mutation)
        return self.filter_by(
            lambda mut: any(
                mut.shares_residue(candidate)
                for candidate in by_site.get((mut.gene, mut.position), ())
            )
        )

    def subtract(self, other: "MutationSet") -> "MutationSet":
        return self.filter_by(lambda mut: mut.key not in other._keys)

    def filter_by(self, predicate: MutationPredicate) -> "MutationSet":
        """Keep whole mutation records for which ``predicate`` holds."""
        return MutationSet(mut for mut in self._mutations if predicate(mut))

    def group_by_gene(self, known_genes: Sequence[str] = ()) -> dict[str, "MutationSet"]:
        """Group mutations by gene.

        Every gene in ``known_genes`` is present in the result, with an empty
        set when no mutation falls on it. Known genes come first, in the
        given order, followed by any other gene found in this set.
        """
        grouped: dict[str, list[Mutation]] = {gene: [] for gene in known_genes}
        for mutation in self._mutations:
            grouped.setdefault(mutation.gene, []).append(mutation)
        return {gene: MutationSet(muts) for gene, muts in grouped.items()}

    # Category views

    def drms(self, drug_class: str | None = None) -> "MutationSet":
        if drug_class is None:
            return self.filter_by(lambda mut: mut.is_drm)
        return self.filter_by(lambda mut: mut.drm_drug_class == drug_class)

    def sdrms(self, drug_class: str | None = None) -> "MutationSet":
        if drug_class is None:
            return self.filter_by(lambda mut: mut.is_sdrm)
        return self.filter_by(lambda mut: mut.sdrm_drug_class == drug_class)

    def tsms(self, drug_class: str | None = None) -> "MutationSet":
        if drug_class is None:
            return self.filter_by(lambda mut: mut.is_tsm)
        return self.filter_by(lambda mut: mut.tsm_drug_class == drug_class)

    def apobec_mutations(self) -> "MutationSet":
        return self.filter_by(lambda mut: mut.is_apobec_mutation)

    def apobec_drms(self) -> "MutationSet":
        return self.filter_by(lambda mut: mut.is_apobec_drm)

    def at_drp_mutations(self) -> "MutationSet":
        return self.filter_by(lambda mut: mut.is_at_drp or mut.is_drm)

    def insertions(self) -> "MutationSet":
        return self.filter_by(lambda mut: mut.is_insertion)

    def deletions(self) -> "MutationSet":
        return self.filter_by(lambda mut: mut.is_deletion)

    def unusual_mutations(self) -> "MutationSet":
        return self.filter_by(lambda mut: mut.is_unusual)

    def ambiguous_codons(self) -> "MutationSet":
        return self.filter_by(lambda mut: mut.is_ambiguous)

    def stop_codons(self) -> "MutationSet":
        return self.filter_by(lambda mut: mut.has_stop)

    def sequenced_only(self) -> "MutationSet":
        return self.filter_by(lambda mut: not mut.is_unsequenced)

    def by_genes(self, genes: Iterable[str]) -> "MutationSet":
        gene_set = set(genes)
        return self.filter_by(lambda mut: mut.gene in gene_set)

    def by_mutation_type(self, mutation_type: str) -> "MutationSet":
        return self.filter_by(lambda mut: mut.primary_type == mutation_type)

    def by_drug_class(self, drug_class: str) -> "MutationSet":
        """Keep mutations classified as DRM, SDRM or TSM of ``drug_class``."""
        return self.filter_by(
            lambda mut: drug_class
            in (mut.drm_drug_class, mut.sdrm_drug_class, mut.tsm_drug_class)
        )

    def to_json(self) -> list[dict[str, Any]]:
        return [mut.model_dump(mode="json") for mut in self._mutations]
