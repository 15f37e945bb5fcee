"""Field resolution: argument checking and the default property resolver."""

import inspect
import logging
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

from virusquery.exceptions import ArgumentError
from virusquery.resolvers.context import FieldResult, ResolveContext
from virusquery.resolvers.sources import AnalysisSource
from virusquery.schema.types import FieldDef, Resolver, TypeKind, VariantSchema

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def camel_to_snake(name: str) -> str:
    """``aminoAcidsText`` -> ``amino_acids_text``; ``NAs`` -> ``nas``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def property_resolver(field_name: str, attribute: str | None = None) -> Resolver:
    """Resolver reading ``field_name`` (or its snake_case form) off the source.

    Mappings are looked up by key, objects by attribute or ``get_`` method.
    Missing values resolve to None.
    """
    attribute = attribute or camel_to_snake(field_name)

    def resolve(source: Any, arguments: dict[str, Any], context: Any) -> Any:
        if isinstance(source, AnalysisSource):
            source = source.payload
        if source is None:
            return None
        if isinstance(source, Mapping):
            value = source.get(field_name, source.get(attribute))
        else:
            value = getattr(source, attribute, None)
            if value is None:
                getter = getattr(source, f"get_{attribute}", None)
                value = getter() if callable(getter) else None
            elif inspect.ismethod(value):
                value = value()
        if isinstance(value, Enum):
            return value.value
        return value

    return resolve


def coerce_arguments(
    schema: VariantSchema, field: FieldDef, arguments: Mapping[str, Any] | None
) -> dict[str, Any]:
    """Fill in argument defaults and check enum-typed values.

    Raises:
        ArgumentError: On an unknown argument or a value outside a strict enum
    """
    provided = dict(arguments or {})
    declared = {argument.name for argument in field.arguments}
    unknown = sorted(set(provided) - declared)
    if unknown:
        raise ArgumentError(f"Unknown argument(s) for field {field.name}: {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for argument in field.arguments:
        if argument.name in provided:
            value = provided[argument.name]
        elif isinstance(argument.default, (list, tuple)):
            value = list(argument.default)
        else:
            value = argument.default

        if value is not None and schema.has_type(argument.type.name):
            target = schema.get_type(argument.type.name)
            if target.kind is TypeKind.ENUM and target.strict:
                items = value if argument.type.is_list else [value]
                allowed = set(target.enum_names)
                invalid = [
                    item
                    for item in items
                    if item is not None and getattr(item, "value", item) not in allowed
                ]
                if invalid:
                    raise ArgumentError(
                        f"Invalid value(s) {invalid} for argument {argument.name} "
                        f"of type {argument.type}"
                    )
        values[argument.name] = value
    return values


def resolve_field(
    context: ResolveContext,
    type_name: str,
    field_name: str,
    source: Any,
    arguments: Mapping[str, Any] | None = None,
) -> FieldResult:
    """Resolve one field of one type against a source.

    Args:
        context: Resolution context carrying the virus and its schema
        type_name: Name of the object type owning the field
        field_name: Field to resolve
        source: Object the field is resolved against
        arguments: Field arguments (camelCase names)

    Returns:
        FieldResult with the resolved data

    Raises:
        SchemaLookupError: If the type or field does not exist
        ArgumentError: If arguments are invalid
        UnsupportedSourceError: If the resolver can not handle the source
    """
    if context.schema is None:
        raise ValueError("ResolveContext has no schema to resolve against")
    field = context.schema.get_type(type_name).field(field_name)
    if field.is_deprecated:
        logger.debug(f"Resolving deprecated field {type_name}.{field_name}")
    values = coerce_arguments(context.schema, field, arguments)
    resolver = field.resolver or property_resolver(field.name)
    result = resolver(source, values, context)
    if isinstance(result, FieldResult):
        return result
    return FieldResult(data=result)
