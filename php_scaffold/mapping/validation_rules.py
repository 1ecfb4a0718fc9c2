"""
Validation rule compilation.

The same Property constraints are rendered in three dialects:
    laravel  -> Laravel/Lumen validation rule arrays
    symfony  -> Symfony Validator #[Assert\\...] attributes
    respect  -> Respect\\Validation fluent chains (Slim)
"""

from typing import Dict, List, Optional

from ..php import php_literal, php_regex, php_string
from .type_mapper import DATE_FORMATS, _ref_schema, _target

# Nested DTOs are expanded at most this deep
MAX_RULE_DEPTH = 3

LARAVEL_TYPE_RULES = {
    "string": "string",
    "integer": "integer",
    "number": "numeric",
    "boolean": "boolean",
    "array": "array",
    "object": "array",
}

LARAVEL_FORMAT_RULES = {
    "email": "email",
    "uuid": "uuid",
    "uri": "url",
    "url": "url",
    "date": "date_format:Y-m-d",
    "date-time": "date",
    "ipv4": "ipv4",
    "ipv6": "ipv6",
}

SYMFONY_FORMAT_CONSTRAINTS = {
    "email": "Assert\\Email",
    "uuid": "Assert\\Uuid",
    "uri": "Assert\\Url",
    "url": "Assert\\Url",
    "date": "Assert\\Date",
    "date-time": "Assert\\DateTime(format: \\DateTimeInterface::ATOM)",
    "ipv4": "Assert\\Ip(version: '4')",
    "ipv6": "Assert\\Ip(version: '6')",
}

RESPECT_FORMAT_RULES = {
    "email": "->email()",
    "uuid": "->uuid()",
    "uri": "->url()",
    "url": "->url()",
    "date": "->date('Y-m-d')",
    "date-time": "->dateTime()",
    "ipv4": "->ip()",
    "ipv6": "->ip()",
}


def _num(value) -> str:
    """Render a bound without a spurious '.0'."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return repr(value)


def _enum_values(prop, document) -> Optional[list]:
    target = _target(prop, document)
    schema = _ref_schema(target, document)
    if schema is not None and schema.is_enum:
        return list(schema.enum_values)
    if target.enum:
        return list(target.enum)
    return None


# --------------------------------------------------------------------------- #
# Laravel / Lumen
# --------------------------------------------------------------------------- #
def laravel_rules(prop, document, required: Optional[bool] = None) -> List[str]:
    """
    Laravel rule list for one value, as PHP expressions.

    Plain rules are quoted strings ("'required'"); Rule::in(...) is emitted
    as a call so enum values may contain commas.
    """
    required = prop.required if required is None else required
    target = _target(prop, document)
    schema = _ref_schema(target, document)
    constraints = target.constraints
    rules: List[str] = []

    if required and not prop.nullable:
        rules.append("required")
    elif required:
        rules.append("present")
    else:
        rules.append("sometimes")
    if prop.nullable or not required:
        rules.append("nullable")

    if schema is not None and schema.is_object:
        rules.append("array")
    elif schema is not None and schema.is_enum:
        rules.append("integer" if schema.enum_type == "integer" else "string")
    elif target.one_of:
        pass
    elif target.is_binary:
        rules.append("file")
    elif target.type in LARAVEL_TYPE_RULES:
        rules.append(LARAVEL_TYPE_RULES[target.type])
        if target.type == "string" and target.format in LARAVEL_FORMAT_RULES:
            rules.append(LARAVEL_FORMAT_RULES[target.format])

    if target.type == "string" and schema is None:
        if constraints.min_length is not None:
            rules.append(f"min:{constraints.min_length}")
        if constraints.max_length is not None:
            rules.append(f"max:{constraints.max_length}")
        if constraints.pattern:
            rules.append(f"regex:{php_regex(constraints.pattern)}")
    elif target.type in ("integer", "number"):
        if constraints.minimum is not None:
            op = "gt" if constraints.exclusive_minimum else "min"
            rules.append(f"{op}:{_num(constraints.minimum)}")
        if constraints.maximum is not None:
            op = "lt" if constraints.exclusive_maximum else "max"
            rules.append(f"{op}:{_num(constraints.maximum)}")
        if constraints.multiple_of is not None:
            rules.append(f"multiple_of:{_num(constraints.multiple_of)}")
    elif target.type == "array":
        if constraints.min_items is not None:
            rules.append(f"min:{constraints.min_items}")
        if constraints.max_items is not None:
            rules.append(f"max:{constraints.max_items}")

    expressions = [php_string(rule) for rule in rules]
    values = _enum_values(prop, document)
    if values:
        expressions.append(f"Rule::in({php_literal(values)})")
    return expressions


def flatten_laravel_rules(body, document) -> Dict[str, List[str]]:
    """
    Expand a request body into dot-notation rule keys.

    Pet body            -> {'name': [...], 'owner': [...], 'owner.email': [...]}
    array of Pet body   -> {'*': [...], '*.name': [...]}
    """
    rules: Dict[str, List[str]] = {}

    def walk(prop, key, depth, stack):
        if key:
            rules[key] = laravel_rules(prop, document)
        target = _target(prop, document)
        schema = _ref_schema(target, document)
        if depth >= MAX_RULE_DEPTH:
            return
        if schema is not None and schema.is_object:
            if schema.name in stack:
                return
            for child in schema.properties:
                if child.read_only:
                    continue
                walk(child, f"{key}.{child.name}" if key else child.name, depth + 1, stack + [schema.name])
        elif target.type == "array" and target.items is not None:
            item_key = f"{key}.*" if key else "*"
            walk(target.items, item_key, depth + 1, stack)
            if target.constraints.unique_items:
                rules[item_key].append(php_string("distinct"))

    target = _target(body, document)
    schema = _ref_schema(target, document)
    if schema is not None and schema.is_object:
        for child in schema.properties:
            if not child.read_only:
                walk(child, child.name, 1, [schema.name])
    elif target.type == "array" and target.items is not None:
        walk(target.items, "*", 1, [])
    return rules


# --------------------------------------------------------------------------- #
# Symfony
# --------------------------------------------------------------------------- #
def symfony_constraints(prop, document, for_dto: bool = True) -> List[str]:
    """#[Assert\\...] attributes for a DTO property or query parameter."""
    target = _target(prop, document)
    schema = _ref_schema(target, document)
    constraints = target.constraints
    attributes: List[str] = []

    if prop.required and not prop.nullable:
        attributes.append("Assert\\NotNull")

    if schema is not None and schema.is_object:
        attributes.append("Assert\\Valid")
    elif target.type == "array" and target.items is not None and _ref_schema(target.items, document) is not None:
        attributes.append("Assert\\Valid")

    if target.type == "string" and schema is None:
        skip_format = for_dto and target.format in DATE_FORMATS
        if target.format in SYMFONY_FORMAT_CONSTRAINTS and not skip_format:
            attributes.append(SYMFONY_FORMAT_CONSTRAINTS[target.format])
        bounds = []
        if constraints.min_length is not None:
            bounds.append(f"min: {constraints.min_length}")
        if constraints.max_length is not None:
            bounds.append(f"max: {constraints.max_length}")
        if bounds:
            attributes.append(f"Assert\\Length({', '.join(bounds)})")
        if constraints.pattern:
            attributes.append(f"Assert\\Regex({php_string(php_regex(constraints.pattern))})")
    elif target.type in ("integer", "number"):
        bounds = []
        if constraints.minimum is not None:
            if constraints.exclusive_minimum:
                attributes.append(f"Assert\\GreaterThan({_num(constraints.minimum)})")
            else:
                bounds.append(f"min: {_num(constraints.minimum)}")
        if constraints.maximum is not None:
            if constraints.exclusive_maximum:
                attributes.append(f"Assert\\LessThan({_num(constraints.maximum)})")
            else:
                bounds.append(f"max: {_num(constraints.maximum)}")
        if bounds:
            attributes.append(f"Assert\\Range({', '.join(bounds)})")
        if constraints.multiple_of is not None:
            attributes.append(f"Assert\\DivisibleBy({_num(constraints.multiple_of)})")
    elif target.type == "array":
        bounds = []
        if constraints.min_items is not None:
            bounds.append(f"min: {constraints.min_items}")
        if constraints.max_items is not None:
            bounds.append(f"max: {constraints.max_items}")
        if bounds:
            attributes.append(f"Assert\\Count({', '.join(bounds)})")
        if constraints.unique_items:
            attributes.append("Assert\\Unique")

    if target.enum and schema is None:
        attributes.append(f"Assert\\Choice({php_literal(list(target.enum))})")

    return [f"#[{attr}]" for attr in attributes]


# --------------------------------------------------------------------------- #
# Respect\Validation (Slim)
# --------------------------------------------------------------------------- #
def respect_rule(prop, document, loose: bool = False, _depth: int = 0, _stack=None, nullable=None) -> str:
    """
    Respect\\Validation chain for a value.

    loose=True accepts string representations (query strings), loose=False
    expects decoded JSON types.
    """
    stack = _stack or []
    target = _target(prop, document)
    schema = _ref_schema(target, document)
    constraints = target.constraints

    if schema is not None and schema.is_enum:
        chain = f"v::in({php_literal(list(schema.enum_values))})"
    elif schema is not None:
        chain = "v::arrayType()"
        if _depth < MAX_RULE_DEPTH and schema.name not in stack:
            for child in schema.properties:
                if child.read_only:
                    continue
                child_chain = respect_rule(child, document, loose, _depth + 1, stack + [schema.name])
                mandatory = "true" if child.required else "false"
                chain += f"->key({php_string(child.name)}, {child_chain}, {mandatory})"
    elif target.one_of or target.type is None:
        chain = "v::alwaysValid()"
    elif target.is_binary:
        chain = "v::instance(\\Psr\\Http\\Message\\UploadedFileInterface::class)"
    elif target.type == "string":
        chain = "v::stringType()" + RESPECT_FORMAT_RULES.get(target.format, "")
        if constraints.min_length is not None or constraints.max_length is not None:
            chain += f"->length({_opt(constraints.min_length)}, {_opt(constraints.max_length)})"
        if constraints.pattern:
            chain += f"->regex({php_string(php_regex(constraints.pattern))})"
    elif target.type in ("integer", "number"):
        if target.type == "integer":
            chain = "v::intVal()" if loose else "v::intType()"
        else:
            chain = "v::numericVal()" if loose else "v::number()"
        if constraints.minimum is not None:
            method = "greaterThan" if constraints.exclusive_minimum else "min"
            chain += f"->{method}({_num(constraints.minimum)})"
        if constraints.maximum is not None:
            method = "lessThan" if constraints.exclusive_maximum else "max"
            chain += f"->{method}({_num(constraints.maximum)})"
        if constraints.multiple_of is not None:
            chain += f"->multiple({_num(constraints.multiple_of)})"
    elif target.type == "boolean":
        chain = "v::boolVal()" if loose else "v::boolType()"
    elif target.type == "array":
        chain = "v::arrayType()"
        if constraints.min_items is not None or constraints.max_items is not None:
            chain += f"->length({_opt(constraints.min_items)}, {_opt(constraints.max_items)})"
        if constraints.unique_items:
            chain += "->unique()"
        if target.items is not None and _depth < MAX_RULE_DEPTH:
            item_chain = respect_rule(target.items, document, loose, _depth + 1, stack)
            if item_chain != "v::alwaysValid()":
                chain += f"->each({item_chain})"
    else:
        chain = "v::arrayType()"

    if target.enum and schema is None:
        chain += f"->in({php_literal(list(target.enum))})"

    if nullable is None:
        nullable = prop.nullable
    if nullable:
        chain = f"v::nullable({chain})"
    return chain


def _opt(value) -> str:
    return "null" if value is None else str(value)
