"""Async entry point used by an outer query executor."""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from virusquery.collaborators import AlgorithmProvider, AlignmentResult, SequenceReadsProcessor
from virusquery.config import Settings, load_settings
from virusquery.exceptions import CollaboratorUnavailableError, InputValidationError, VirusQueryError
from virusquery.models.inputs import SequenceReadsInput
from virusquery.models.mutation_set import MutationSet
from virusquery.models.validation import ValidationLevel, ValidationResult
from virusquery.resolvers.context import FieldResult, ResolveContext
from virusquery.resolvers.execution import resolve_field
from virusquery.resolvers.sources import AnalysisSource, NamedMutationSet
from virusquery.schema.registry import SchemaRegistry
from virusquery.schema.types import VariantSchema
from virusquery.viruses.registry import VirusRegistry, default_virus_registry

logger = logging.getLogger(__name__)


class FieldRequest(BaseModel):
    """One field to resolve against one source."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    type_name: str = Field(..., description="Object type owning the field (e.g., MutationsAnalysis)")
    field_name: str = Field(..., description="Field to resolve (e.g., mutations)")
    source: Any = None
    arguments: dict[str, Any] = Field(default_factory=dict)
    virus: str | None = Field(None, description="Virus schema to use; settings default if unset")


class QueryEngine:
    """Resolves fields of the per-virus schemas concurrently."""

    def __init__(
        self,
        viruses: VirusRegistry | None = None,
        algorithms: AlgorithmProvider | None = None,
        reads_processor: SequenceReadsProcessor | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or load_settings()
        self.viruses = viruses or default_virus_registry()
        self.schemas = SchemaRegistry(self.viruses)
        self.algorithms = algorithms
        self.reads_processor = reads_processor
        self._semaphore = asyncio.Semaphore(self.settings.max_concurrent)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        logger.debug(f"Schema cache stats: {self.schemas.stats}")

    async def get_schema(self, virus: str | None = None) -> VariantSchema:
        """Return the memoized schema of a virus, building it off the event loop."""
        return await asyncio.to_thread(self.schemas.get, virus or self.settings.default_virus)

    def _context(self, schema: VariantSchema) -> ResolveContext:
        return ResolveContext(
            virus=self.viruses.get(schema.virus),
            schema=schema,
            algorithms=self.algorithms,
            reads_processor=self.reads_processor,
            settings=self.settings,
        )

    async def resolve(self, request: FieldRequest) -> FieldResult:
        """Resolve one field. Failures become an error entry of the result."""
        async with self._semaphore:
            try:
                schema = await self.get_schema(request.virus)
                return await asyncio.to_thread(
                    resolve_field,
                    self._context(schema),
                    request.type_name,
                    request.field_name,
                    request.source,
                    request.arguments,
                )
            except VirusQueryError as e:
                logger.error(f"Failed to resolve {request.type_name}.{request.field_name}: {e}")
                return FieldResult(errors=[str(e)])

    async def resolve_many(self, requests: Iterable[FieldRequest]) -> list[FieldResult]:
        """Resolve several fields concurrently, in request order."""
        return await asyncio.gather(*(self.resolve(request) for request in requests))

    async def analyze_mutations(
        self, virus: str, name: str | None, mutation_strings: Iterable[str]
    ) -> tuple[AnalysisSource, list[ValidationResult]]:
        """Parse a mutation list into a MutationsAnalysis source.

        Args:
            virus: Virus the mutations belong to
            name: Name of the mutation list
            mutation_strings: Mutations, each with a gene prefix (e.g., RT:M184V)

        Returns:
            The analysis source and one validation result per rejected string
        """
        config = self.viruses.get(virus)
        mutations, errors = MutationSet.from_strings(mutation_strings, gene=None, virus=config)
        named = NamedMutationSet(mutations=mutations, name=name, known_genes=tuple(config.gene_names))
        return AnalysisSource.from_mutations(named), errors

    async def analyze_sequence(self, virus: str, alignment: AlignmentResult) -> AnalysisSource:
        self.viruses.get(virus)
        return AnalysisSource.from_alignment(alignment)

    async def analyze_sequence_reads(
        self,
        virus: str,
        reads_inputs: Iterable[Mapping[str, Any]],
        processor: SequenceReadsProcessor | None = None,
    ) -> tuple[list[AnalysisSource], list[ValidationResult]]:
        """Process codon reads samples into SequenceReadsAnalysis sources.

        Invalid samples are reported as validation results; the rest are processed.

        Raises:
            CollaboratorUnavailableError: If no reads processor is configured
        """
        self.viruses.get(virus)
        processor = processor or self.reads_processor
        if processor is None:
            raise CollaboratorUnavailableError("No sequence reads processor is configured")

        inputs: list[SequenceReadsInput] = []
        validation_results: list[ValidationResult] = []
        for item in reads_inputs:
            try:
                inputs.append(SequenceReadsInput.from_arguments(item))
            except InputValidationError as e:
                logger.warning(f"Rejected sequence reads input: {e.message}")
                validation_results.append(
                    ValidationResult.from_error(e, level=ValidationLevel.CRITICAL)
                )

        results = await asyncio.gather(
            *(asyncio.to_thread(processor.process, reads) for reads in inputs)
        )
        return [AnalysisSource.from_reads(result) for result in results], validation_results
