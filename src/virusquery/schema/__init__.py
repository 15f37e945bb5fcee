"""Per-virus schemas: type descriptions, construction and caching."""
