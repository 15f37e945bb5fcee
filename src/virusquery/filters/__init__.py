"""Mutation set filter vocabulary and pipeline."""

from virusquery.filters.pipeline import FilterRequest, FilterResult, apply_filters
from virusquery.filters.vocabulary import (
    TOKEN_TABLE,
    FilterToken,
    Primitive,
    Restriction,
    TokenTranslation,
    lookup_token,
)

__all__ = [
    "FilterRequest",
    "FilterResult",
    "FilterToken",
    "Primitive",
    "Restriction",
    "TOKEN_TABLE",
    "TokenTranslation",
    "apply_filters",
    "lookup_token",
]
