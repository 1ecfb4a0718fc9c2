"""Type mapping, validation rule compilation and the schema dependency graph."""

from .schema_graph import SchemaGraph
from .type_mapper import (
    convert_expr,
    default_literal,
    doc_type,
    enum_cases,
    extract_expr,
    hydrate_expr,
    is_nullable_value,
    param_cast,
    php_type,
    referenced_schemas,
)
from .validation_rules import (
    flatten_laravel_rules,
    laravel_rules,
    respect_rule,
    symfony_constraints,
)

__all__ = [
    "SchemaGraph",
    "convert_expr",
    "default_literal",
    "doc_type",
    "enum_cases",
    "extract_expr",
    "flatten_laravel_rules",
    "hydrate_expr",
    "is_nullable_value",
    "laravel_rules",
    "param_cast",
    "php_type",
    "referenced_schemas",
    "respect_rule",
    "symfony_constraints",
]
