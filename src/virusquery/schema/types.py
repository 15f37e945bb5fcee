"""Type and field descriptions of a virus schema.

Types refer to each other by name only (``TypeRef``), so self-referential
and mutually-referential types (Gene -> DrugClass -> Drug -> DrugClass)
never need a materialized object graph. References are resolved by name
lookup in the owning ``VariantSchema``.
"""

import json
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from virusquery.exceptions import SchemaLookupError

BUILTIN_SCALARS = ("String", "Int", "Long", "Float", "Boolean")

Resolver = Callable[[Any, dict[str, Any], Any], Any]


class TypeKind(str, Enum):
    SCALAR = "SCALAR"
    OBJECT = "OBJECT"
    ENUM = "ENUM"
    INPUT_OBJECT = "INPUT_OBJECT"


class TypeRef(BaseModel):
    """Reference to a named type, optionally wrapped in a list."""

    model_config = ConfigDict(frozen=True)

    name: str
    is_list: bool = False

    @classmethod
    def list_of(cls, name: str) -> "TypeRef":
        return cls(name=name, is_list=True)

    def __str__(self) -> str:
        return f"[{self.name}]" if self.is_list else self.name


class ArgumentDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: TypeRef
    default: Any = None
    description: str | None = None


class EnumValueDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str | None = None
    deprecation_reason: str | None = None


class FieldDef(BaseModel):
    """A field of an object or input type, with its bound resolver."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: TypeRef
    description: str | None = None
    arguments: tuple[ArgumentDef, ...] = ()
    deprecation_reason: str | None = None
    resolver: Resolver | None = Field(None, exclude=True, repr=False)

    @property
    def is_deprecated(self) -> bool:
        return self.deprecation_reason is not None

    def argument(self, name: str) -> ArgumentDef | None:
        for argument in self.arguments:
            if argument.name == name:
                return argument
        return None


class TypeDef(BaseModel):
    """A named type of the schema."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: TypeKind
    description: str | None = None
    fields: tuple[FieldDef, ...] = ()
    enum_values: tuple[EnumValueDef, ...] = ()
    # Lenient enums accept unknown values (they are ignored downstream).
    strict: bool = True

    @property
    def field_names(self) -> list[str]:
        return [field.name for field in self.fields]

    @property
    def enum_names(self) -> list[str]:
        return [value.name for value in self.enum_values]

    def has_field(self, name: str) -> bool:
        return any(field.name == name for field in self.fields)

    def field(self, name: str) -> FieldDef:
        for field in self.fields:
            if field.name == name:
                return field
        raise SchemaLookupError(f"Type {self.name} has no field {name!r}")

    def with_fields(self, *fields: FieldDef) -> "TypeDef":
        """Return a copy with ``fields`` appended; existing fields can not be redefined."""
        existing = set(self.field_names)
        for field in fields:
            if field.name in existing:
                raise ValueError(f"Field {self.name}.{field.name} is already defined")
            existing.add(field.name)
        return self.model_copy(update={"fields": (*self.fields, *fields)})


class VariantSchema(BaseModel):
    """All types of one virus, keyed by name."""

    model_config = ConfigDict(frozen=True)

    virus: str
    types: dict[str, TypeDef]

    def get_type(self, name: str) -> TypeDef:
        try:
            return self.types[name]
        except KeyError:
            raise SchemaLookupError(f"Unknown type {name!r} in {self.virus} schema") from None

    def resolve_ref(self, ref: TypeRef) -> TypeDef:
        return self.get_type(ref.name)

    def has_type(self, name: str) -> bool:
        return name in self.types

    def check_references(self) -> list[str]:
        """Return a description of every reference that does not resolve."""
        dangling = []
        for type_def in self.types.values():
            for field in type_def.fields:
                refs = [field.type, *(argument.type for argument in field.arguments)]
                for ref in refs:
                    if ref.name not in self.types:
                        dangling.append(f"{type_def.name}.{field.name} -> {ref.name}")
        return dangling

    def to_sdl(self, type_names: Iterable[str] | None = None) -> str:
        """Render types in an SDL-like text form."""
        names = list(type_names) if type_names is not None else sorted(self.types)
        blocks = [_render_type(self.get_type(name)) for name in names]
        return "\n\n".join(block for block in blocks if block)


def _render_description(description: str | None, indent: str = "") -> list[str]:
    return [f'{indent}"""{description}"""'] if description else []


def _render_deprecation(reason: str | None) -> str:
    return f" @deprecated(reason: {json.dumps(reason)})" if reason else ""


def _render_default(value: Any, type_ref: TypeRef) -> str:
    if isinstance(value, (list, tuple, set, frozenset)):
        return "[" + ", ".join(_render_default(item, TypeRef(name=type_ref.name)) for item in value) + "]"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str) and type_ref.name == "String":
        return json.dumps(value)
    return str(value)


def _render_type(type_def: TypeDef) -> str:
    if type_def.kind is TypeKind.SCALAR:
        return "" if type_def.name in BUILTIN_SCALARS else f"scalar {type_def.name}"

    lines = _render_description(type_def.description)
    if type_def.kind is TypeKind.ENUM:
        lines.append(f"enum {type_def.name} {{")
        for value in type_def.enum_values:
            lines.extend(_render_description(value.description, "  "))
            lines.append(f"  {value.name}{_render_deprecation(value.deprecation_reason)}")
        lines.append("}")
        return "\n".join(lines)

    keyword = "input" if type_def.kind is TypeKind.INPUT_OBJECT else "type"
    lines.append(f"{keyword} {type_def.name} {{")
    for field in type_def.fields:
        lines.extend(_render_description(field.description, "  "))
        arguments = ""
        if field.arguments:
            rendered = []
            for argument in field.arguments:
                text = f"{argument.name}: {argument.type}"
                if argument.default is not None:
                    text += f" = {_render_default(argument.default, argument.type)}"
                rendered.append(text)
            arguments = f"({', '.join(rendered)})"
        lines.append(
            f"  {field.name}{arguments}: {field.type}{_render_deprecation(field.deprecation_reason)}"
        )
    lines.append("}")
    return "\n".join(lines)
