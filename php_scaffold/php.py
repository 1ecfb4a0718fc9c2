"""
PHP naming and literal helpers.

Identifiers coming from an OpenAPI document (operation ids, schema names,
property keys, enum values) are arbitrary strings; everything emitted into
PHP source goes through these functions first.
"""

import re

# Reserved words that cannot be used as class, interface or enum names.
PHP_RESERVED_WORDS = frozenset({
    "abstract", "and", "array", "as", "bool", "break", "callable", "case",
    "catch", "class", "clone", "const", "continue", "declare", "default",
    "die", "do", "echo", "else", "elseif", "empty", "enddeclare", "endfor",
    "endforeach", "endif", "endswitch", "endwhile", "enum", "eval", "exit",
    "extends", "false", "final", "finally", "float", "fn", "for", "foreach",
    "function", "global", "goto", "if", "implements", "include",
    "include_once", "instanceof", "insteadof", "int", "interface", "isset",
    "iterable", "list", "match", "mixed", "namespace", "never", "new",
    "null", "object", "or", "parent", "print", "private", "protected",
    "public", "readonly", "require", "require_once", "resource", "return",
    "self", "static", "string", "switch", "throw", "trait", "true", "try",
    "unset", "use", "var", "void", "while", "xor", "yield",
})

_WORD_SPLIT = re.compile(r"[^A-Za-z0-9]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_NAMESPACE_PART = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def split_words(text: str) -> list[str]:
    """Split an identifier-ish string into words (handles camel, snake, kebab, spaces)."""
    words = []
    for chunk in _WORD_SPLIT.split(str(text)):
        if chunk:
            words.extend(w for w in _CAMEL_BOUNDARY.split(chunk) if w)
    return words


def pascal_case(text: str) -> str:
    """'pet store' -> 'PetStore', 'list_pets' -> 'ListPets'."""
    return "".join(w[:1].upper() + w[1:] for w in split_words(text))


def camel_case(text: str) -> str:
    """'list_pets' -> 'listPets', 'PetId' -> 'petId'."""
    words = split_words(text)
    if not words:
        return ""
    head = words[0]
    head = head.lower() if head.isupper() and len(head) > 1 else head[:1].lower() + head[1:]
    return head + "".join(w[:1].upper() + w[1:] for w in words[1:])


def snake_case(text: str) -> str:
    """'listPets' -> 'list_pets'."""
    return "_".join(w.lower() for w in split_words(text))


def class_name(text: str, fallback: str = "Model") -> str:
    """
    Turn an arbitrary name into a valid PHP class name.

    Reserved words get a 'Model' prefix, names starting with a digit get
    the fallback prefix.
    """
    name = pascal_case(text)
    if not name:
        return fallback
    if name[0].isdigit():
        name = fallback + name
    if name.lower() in PHP_RESERVED_WORDS:
        name = "Model" + name
    return name


def method_name(text: str) -> str:
    """Turn an operationId into a camelCase PHP method name."""
    name = camel_case(text)
    if not name:
        return "operation"
    if name[0].isdigit():
        name = "call" + name[:1].upper() + name[1:]
    return name


def variable_name(text: str) -> str:
    """Turn a property/parameter key into a PHP variable name (without '$')."""
    name = camel_case(text)
    if not name:
        return "value"
    if name[0].isdigit():
        name = "v" + name
    if name == "this":
        name = "this_"
    return name


def enum_case_name(value) -> str:
    """Case name for a backed enum value: 'in-stock' -> 'InStock', 1 -> 'Value1'."""
    name = pascal_case(str(value))
    if not name or name[0].isdigit():
        name = "Value" + name
    if name.lower() in ("class",):
        name = name + "Value"
    return name


def is_valid_namespace(namespace: str) -> bool:
    """Check a PHP namespace such as 'App' or 'Acme\\PetStore'."""
    if not namespace:
        return False
    return all(_NAMESPACE_PART.match(part) for part in namespace.split("\\"))


def php_string(value: str) -> str:
    """Single-quoted PHP string literal."""
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def php_literal(value) -> str:
    """Render a Python value as a PHP literal expression."""
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return php_string(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(php_literal(v) for v in value) + "]"
    if isinstance(value, dict):
        items = ", ".join(f"{php_literal(k)} => {php_literal(v)}" for k, v in value.items())
        return f"[{items}]"
    return php_string(str(value))


def php_regex(pattern: str) -> str:
    """Wrap an ECMA-style pattern in '/' delimiters, escaping embedded slashes."""
    body = re.sub(r"(?<!\\)/", r"\\/", pattern)
    return f"/{body}/"


def unique_name(name: str, taken: set) -> str:
    """
    Return `name`, or `name2`, `name3`... if already taken. Adds the result to `taken`.

    PHP class and method names are case-insensitive, so `getPET` counts as taken
    once `getPet` is.
    """
    lowered = {t.lower() for t in taken}
    candidate = name
    counter = 2
    while candidate.lower() in lowered:
        candidate = f"{name}{counter}"
        counter += 1
    taken.add(candidate)
    return candidate
