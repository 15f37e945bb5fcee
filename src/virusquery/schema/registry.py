"""Lazily-built, per-virus schema registry."""

import logging

from virusquery.exceptions import SchemaBuildError
from virusquery.schema.builder import build_variant_schema
from virusquery.schema.memoizer import SingleFlightMemoizer
from virusquery.schema.types import TypeDef, TypeRef, VariantSchema
from virusquery.viruses.registry import VirusRegistry

logger = logging.getLogger(__name__)


class SchemaRegistry:
    """Builds each virus's schema on first request and keeps it for the process lifetime.

    Safe to share between threads: concurrent first requests for one virus
    wait for a single build.
    """

    def __init__(self, viruses: VirusRegistry) -> None:
        self.viruses = viruses
        self._schemas: SingleFlightMemoizer[str, VariantSchema] = SingleFlightMemoizer(
            self._build, name="schema-registry"
        )

    def _build(self, virus_name: str) -> VariantSchema:
        config = self.viruses.get(virus_name)
        try:
            return build_variant_schema(config)
        except SchemaBuildError:
            raise
        except Exception as e:
            raise SchemaBuildError(virus_name, str(e)) from e

    def get(self, virus_name: str) -> VariantSchema:
        """Return the schema of ``virus_name``, building it if needed.

        Raises:
            UnknownVirusError: If the virus is not registered
            SchemaBuildError: If the schema could not be built
        """
        self.viruses.get(virus_name)
        try:
            return self._schemas.get(virus_name)
        except SchemaBuildError as e:
            logger.error(f"Schema build failed: {e}")
            raise

    def resolve(self, virus_name: str, ref: TypeRef | str) -> TypeDef:
        """Look up a type of a virus schema by name or reference."""
        name = ref.name if isinstance(ref, TypeRef) else ref
        return self.get(virus_name).get_type(name)

    def is_built(self, virus_name: str) -> bool:
        return virus_name in self._schemas

    @property
    def stats(self):
        return self._schemas.stats
