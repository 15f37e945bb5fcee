"""Read-only registry of known viruses."""

import logging
from collections.abc import Iterable, Iterator

from virusquery.exceptions import UnknownVirusError
from virusquery.viruses.config import VirusConfig

logger = logging.getLogger(__name__)


class VirusRegistry:
    """Registry of virus configurations, written once at construction."""

    def __init__(self, configs: Iterable[VirusConfig]) -> None:
        self._configs: dict[str, VirusConfig] = {}
        for config in configs:
            if config.name in self._configs:
                raise ValueError(f"Duplicate virus configuration: {config.name}")
            self._configs[config.name] = config
        logger.debug(f"Virus registry initialized with {', '.join(self._configs) or 'no viruses'}")

    def get(self, name: str) -> VirusConfig:
        try:
            return self._configs[name]
        except KeyError:
            raise UnknownVirusError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._configs

    def __iter__(self) -> Iterator[VirusConfig]:
        return iter(self._configs.values())

    def __len__(self) -> int:
        return len(self._configs)

    @property
    def names(self) -> list[str]:
        return list(self._configs)


def default_virus_registry() -> VirusRegistry:
    """Create a new registry holding the built-in viruses."""
    from virusquery.viruses.hiv1 import HIV1
    from virusquery.viruses.hiv2 import HIV2

    return VirusRegistry([HIV1, HIV2])
