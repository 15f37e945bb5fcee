"""Data models for virusquery."""

from virusquery.models.mutation import Mutation, parse_mutation
from virusquery.models.mutation_set import MutationSet
from virusquery.models.validation import ValidationLevel, ValidationResult

__all__ = [
    "Mutation",
    "MutationSet",
    "ValidationLevel",
    "ValidationResult",
    "parse_mutation",
]
