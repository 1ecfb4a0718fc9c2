"""Type mapping from OpenAPI properties to PHP types and (de)serialization expressions."""

from typing import List, Optional, Set, Tuple

from ..php import enum_case_name, php_literal, php_string

DATE_FORMATS = {
    "date": "'Y-m-d'",
    "date-time": "\\DateTimeInterface::ATOM",
}

SCALAR_TYPES = {
    "string": "string",
    "integer": "int",
    "number": "float",
    "boolean": "bool",
    "array": "array",
    "object": "array",
}

# Guards alias chains (alias -> alias -> ...) against self-reference
_MAX_ALIAS_DEPTH = 8


def _target(prop, document, depth=0):
    """Follow alias schemas to the property that actually describes the value."""
    if prop.ref and depth < _MAX_ALIAS_DEPTH:
        schema = document.schema(prop.ref)
        if schema is not None and schema.kind == "alias" and schema.alias_of is not None:
            return _target(schema.alias_of, document, depth + 1)
    return prop


def _ref_schema(prop, document):
    target = _target(prop, document)
    if target.ref:
        schema = document.schema(target.ref)
        if schema is not None and schema.kind in ("object", "enum"):
            return schema
    return None


def enum_cases(schema) -> List[Tuple[str, object]]:
    """(case name, value) pairs for a backed enum, with unique case names."""
    cases = []
    taken = set()
    for value in schema.enum_values:
        base = enum_case_name(value)
        name = base
        counter = 2
        while name in taken:
            name = f"{base}{counter}"
            counter += 1
        taken.add(name)
        cases.append((name, value))
    return cases


def default_literal(prop, document) -> Optional[str]:
    """PHP constant expression for the property's default, or None if it has none usable."""
    if not prop.has_default or prop.default is None:
        return None
    target = _target(prop, document)
    schema = _ref_schema(target, document)
    if schema is not None:
        if schema.is_enum:
            for case, value in enum_cases(schema):
                if value == prop.default:
                    return f"{schema.class_name}::{case}"
        return None
    if target.type == "string" and target.format in DATE_FORMATS:
        return None
    return php_literal(prop.default)


def is_nullable_value(prop, document) -> bool:
    """A DTO property is nullable when declared so, or when optional without a usable default."""
    return prop.nullable or (not prop.required and default_literal(prop, document) is None)


def _base_type(prop, document, profile, for_dto: bool) -> str:
    target = _target(prop, document)

    if target.one_of:
        names = []
        for name in target.one_of:
            schema = document.schema(name)
            if schema is None or schema.kind not in ("object", "enum"):
                return "mixed"
            names.append(schema.class_name)
        return "|".join(dict.fromkeys(names))

    schema = _ref_schema(target, document)
    if schema is not None:
        return schema.class_name

    if target.type == "string":
        if target.format == "binary":
            return profile.upload_class
        if for_dto and target.format in DATE_FORMATS:
            return "\\DateTimeImmutable"
        return "string"
    return SCALAR_TYPES.get(target.type, "mixed")


def php_type(prop, document, profile, for_dto: bool = True, nullable: Optional[bool] = None) -> str:
    """
    Native PHP type declaration for a property or parameter.

    for_dto=True maps date strings to \\DateTimeImmutable; parameters keep
    them as plain strings.
    """
    base = _base_type(prop, document, profile, for_dto)
    if base == "mixed":
        return base
    if nullable is None:
        nullable = is_nullable_value(prop, document) if for_dto else prop.optional
    if not nullable:
        return base
    if "|" in base:
        return base + "|null"
    return "?" + base


def doc_type(prop, document, profile, for_dto: bool = True, nullable: Optional[bool] = None) -> str:
    """Docblock type: adds element types for arrays and maps (Pet[], array<string, int>)."""
    target = _target(prop, document)
    if target.type == "array" and target.items is not None and not target.ref:
        item = doc_type(target.items, document, profile, for_dto, nullable=False)
        if item == "mixed":
            base = "array"
        elif "|" in item:
            base = f"({item})[]"
        else:
            base = f"{item}[]"
    elif target.type == "object" and not target.ref:
        value = "mixed"
        if target.additional is not None:
            value = doc_type(target.additional, document, profile, for_dto, nullable=False)
        base = f"array<string, {value}>"
    else:
        base = _base_type(prop, document, profile, for_dto)

    if base == "mixed":
        return base
    if nullable is None:
        nullable = is_nullable_value(prop, document) if for_dto else prop.optional
    return base + "|null" if nullable else base


def referenced_schemas(prop, document) -> Set[str]:
    """Schema names (objects and enums) a property's PHP type mentions, including array items."""
    found: Set[str] = set()

    def visit(p, depth=0):
        if p is None or depth > _MAX_ALIAS_DEPTH:
            return
        target = _target(p, document)
        for name in target.one_of:
            schema = document.schema(name)
            if schema is not None and schema.kind in ("object", "enum"):
                found.add(name)
        schema = _ref_schema(target, document)
        if schema is not None:
            found.add(schema.name)
        visit(target.items, depth + 1)
        visit(target.additional, depth + 1)

    visit(prop)
    return found


# --------------------------------------------------------------------------- #
# (De)serialization expressions used by DTO templates
# --------------------------------------------------------------------------- #
def convert_expr(prop, expr: str, document) -> str:
    """Convert a decoded JSON value `expr` into the PHP value a DTO holds."""
    target = _target(prop, document)
    schema = _ref_schema(target, document)
    if schema is not None:
        if schema.is_enum:
            return f"{schema.class_name}::from({expr})"
        return f"{schema.class_name}::fromArray({expr})"
    if target.type == "string" and target.format in DATE_FORMATS:
        return f"new \\DateTimeImmutable({expr})"
    inner = target.items if target.type == "array" else target.additional if target.type == "object" else None
    if inner is not None:
        converted = convert_expr(inner, "$item", document)
        if converted != "$item":
            return f"array_map(static fn ($item) => {converted}, {expr})"
    return expr


def _export(prop, expr: str, document) -> str:
    target = _target(prop, document)
    if target.one_of:
        schemas = [document.schema(name) for name in target.one_of]
        if all(s is not None and s.is_object for s in schemas):
            return f"{expr}->toArray()"
        return expr
    schema = _ref_schema(target, document)
    if schema is not None:
        if schema.is_enum:
            return f"{expr}->value"
        return f"{expr}->toArray()"
    if target.type == "string" and target.format in DATE_FORMATS:
        return f"{expr}->format({DATE_FORMATS[target.format]})"
    inner = target.items if target.type == "array" else target.additional if target.type == "object" else None
    if inner is not None:
        exported = _export(inner, "$item", document)
        if exported != "$item":
            return f"array_map(static fn ($item) => {exported}, {expr})"
    return expr


def hydrate_expr(prop, document, source: str = "$data") -> str:
    """Expression reading `prop` out of the `source` array, for DTO::fromArray()."""
    raw = f"{source}[{php_string(prop.name)}]"
    converted = convert_expr(prop, raw, document)
    default = default_literal(prop, document)
    fallback = default if default is not None else "null"

    if converted == raw:
        if default is not None or not prop.required:
            return f"{raw} ?? {fallback}"
        return raw
    if default is not None or not prop.required or prop.nullable:
        return f"isset({raw}) ? {converted} : {fallback}"
    return converted


def extract_expr(prop, document, value: Optional[str] = None) -> str:
    """Expression turning the DTO property back into array form, for DTO::toArray()."""
    value = value or f"$this->{prop.php_name}"
    exported = _export(prop, value, document)
    if exported == value:
        return value
    if is_nullable_value(prop, document):
        return f"{value} === null ? null : {exported}"
    return exported


def param_cast(param, expr: str, document) -> str:
    """Cast a raw request string (query/header/cookie) to the parameter's PHP type."""
    target = _target(param.field, document)
    schema = _ref_schema(target, document)
    if schema is not None and schema.is_enum:
        cast = f"{schema.class_name}::from({expr})"
    elif target.type == "integer":
        cast = f"(int) {expr}"
    elif target.type == "number":
        cast = f"(float) {expr}"
    elif target.type == "boolean":
        cast = f"filter_var({expr}, FILTER_VALIDATE_BOOLEAN)"
    elif target.type in ("array", "object"):
        cast = f"(array) {expr}"
    else:
        cast = expr

    if cast == expr:
        return expr
    if param.required and not param.field.nullable:
        return cast
    return f"{expr} === null ? null : {cast}"
