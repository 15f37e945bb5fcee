"""Per-request resolution context and field results."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from virusquery.collaborators import AlgorithmProvider, SequenceReadsProcessor
from virusquery.config import Settings
from virusquery.models.validation import ValidationResult
from virusquery.viruses.config import VirusConfig

if TYPE_CHECKING:
    from virusquery.schema.types import VariantSchema


@dataclass(frozen=True)
class ResolveContext:
    """What resolvers may consult besides their source and arguments."""

    virus: VirusConfig
    schema: "VariantSchema | None" = None
    algorithms: AlgorithmProvider | None = None
    reads_processor: SequenceReadsProcessor | None = None
    settings: Settings | None = None


@dataclass
class FieldResult:
    """Value of a resolved field plus any validation results it produced."""

    data: Any = None
    validation_results: list[ValidationResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
