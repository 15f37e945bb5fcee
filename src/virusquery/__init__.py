"""virusquery: per-virus query schemas and mutation set filtering for HIV drug resistance analysis."""

__version__ = "0.1.0"
