"""
Unit tests for PHP naming and literal helpers.
"""

import pytest

from php_scaffold.php import (
    camel_case,
    class_name,
    enum_case_name,
    is_valid_namespace,
    method_name,
    pascal_case,
    php_literal,
    php_regex,
    php_string,
    snake_case,
    split_words,
    unique_name,
    variable_name,
)


class TestCaseConversion:
    """Test identifier case conversion."""

    @pytest.mark.parametrize("text,expected", [
        ("pet store", "PetStore"),
        ("list_pets", "ListPets"),
        ("showPetById", "ShowPetById"),
        ("x-request-id", "XRequestId"),
    ])
    def test_pascal_case(self, text, expected):
        assert pascal_case(text) == expected

    @pytest.mark.parametrize("text,expected", [
        ("list_pets", "listPets"),
        ("PetId", "petId"),
        ("X-Request-Id", "xRequestId"),
        ("URL", "url"),
    ])
    def test_camel_case(self, text, expected):
        assert camel_case(text) == expected

    def test_snake_case(self):
        assert snake_case("listPets") == "list_pets"
        assert snake_case("PetStore") == "pet_store"

    def test_split_words_handles_acronyms(self):
        assert split_words("HTMLParser") == ["HTML", "Parser"]


class TestNames:
    """Test PHP-safe names for classes, methods and variables."""

    def test_class_name_prefixes_reserved_words(self):
        assert class_name("class") == "ModelClass"
        assert class_name("list") == "ModelList"

    def test_class_name_prefixes_leading_digit(self):
        assert class_name("123abc") == "Model123abc"
        assert class_name("2fa", fallback="Api") == "Api2fa"

    def test_class_name_of_empty_string_uses_fallback(self):
        assert class_name("---") == "Model"

    def test_method_name(self):
        assert method_name("list_pets") == "listPets"
        assert method_name("123go") == "call123go"
        assert method_name("") == "operation"

    def test_variable_name(self):
        assert variable_name("node-id") == "nodeId"
        assert variable_name("1st") == "v1st"
        assert variable_name("this") == "this_"

    def test_enum_case_name(self):
        assert enum_case_name("in-stock") == "InStock"
        assert enum_case_name(1) == "Value1"
        assert enum_case_name("class") == "ClassValue"

    def test_is_valid_namespace(self):
        assert is_valid_namespace("App")
        assert is_valid_namespace("Acme\\PetStore")
        assert not is_valid_namespace("")
        assert not is_valid_namespace("1Bad")
        assert not is_valid_namespace("Acme\\\\Double")

    def test_unique_name(self):
        taken = {"Pet"}
        assert unique_name("Pet", taken) == "Pet2"
        assert unique_name("Pet", taken) == "Pet3"
        assert unique_name("Owner", taken) == "Owner"
        assert {"Pet", "Pet2", "Pet3", "Owner"} == taken

    def test_unique_name_ignores_case(self):
        taken = {"getPet"}
        assert unique_name("getPET", taken) == "getPET2"
        assert unique_name("GETPET", taken) == "GETPET3"
        assert {"getPet", "getPET2", "GETPET3"} == taken


class TestLiterals:
    """Test PHP literal rendering."""

    def test_php_string_escapes_quotes_and_backslashes(self):
        assert php_string("it's") == "'it\\'s'"
        assert php_string("a\\b") == "'a\\\\b'"

    def test_php_literal_scalars(self):
        assert php_literal(None) == "null"
        assert php_literal(True) == "true"
        assert php_literal(False) == "false"
        assert php_literal(3) == "3"
        assert php_literal(1.5) == "1.5"

    def test_php_literal_nested(self):
        assert php_literal({"a": [1, True, None]}) == "['a' => [1, true, null]]"

    def test_php_regex_escapes_delimiter(self):
        assert php_regex("^a/b$") == "/^a\\/b$/"
        assert php_regex("^a\\/b$") == "/^a\\/b$/"
