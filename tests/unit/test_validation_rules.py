"""
Unit tests for validation rule compilation (Laravel, Symfony, Respect).
"""

from php_scaffold.mapping import (
    flatten_laravel_rules,
    laravel_rules,
    respect_rule,
    symfony_constraints,
)


def prop(document, schema, name):
    return document.schema(schema).get_property(name)


class TestLaravelRules:
    """Test Laravel/Lumen rule arrays."""

    def test_required_string_with_length(self, petstore):
        assert laravel_rules(prop(petstore, "NewPet", "name"), petstore) == [
            "'required'", "'string'", "'min:1'", "'max:64'",
        ]

    def test_optional_nullable_string(self, petstore):
        assert laravel_rules(prop(petstore, "NewPet", "tag"), petstore) == [
            "'sometimes'", "'nullable'", "'string'",
        ]

    def test_component_enum_uses_rule_in(self, petstore):
        assert laravel_rules(prop(petstore, "NewPet", "status"), petstore) == [
            "'sometimes'", "'nullable'", "'string'", "Rule::in(['available', 'pending', 'sold'])",
        ]

    def test_inline_enum(self, petstore):
        rules = laravel_rules(prop(petstore, "Order", "status"), petstore)
        assert rules[-1] == "Rule::in(['placed', 'approved', 'delivered'])"

    def test_format_rule(self, petstore):
        assert laravel_rules(prop(petstore, "Owner", "email"), petstore) == [
            "'required'", "'string'", "'email'",
        ]

    def test_query_integer_bounds(self, petstore):
        limit = petstore.operation("listPets").query_params[0]
        assert laravel_rules(limit.field, petstore, required=limit.required) == [
            "'sometimes'", "'nullable'", "'integer'", "'min:1'", "'max:100'",
        ]

    def test_exclusive_minimum(self, tree):
        rules = laravel_rules(prop(tree, "Node", "weight"), tree)
        assert "'numeric'" in rules
        assert "'gt:0'" in rules

    def test_required_nullable_is_present(self, tree):
        label = prop(tree, "Node", "label")
        assert laravel_rules(label, tree, required=True)[:2] == ["'present'", "'nullable'"]


class TestFlattenLaravelRules:
    """Test dot-notation expansion of request bodies."""

    def test_object_body(self, petstore):
        body = petstore.operation("createPet").request_body
        rules = flatten_laravel_rules(body.field, petstore)
        assert list(rules) == [
            "name", "tag", "status", "tags", "tags.*", "owner", "owner.email", "owner.name",
        ]
        assert rules["tags.*"][-1] == "'distinct'"
        assert rules["owner"] == ["'sometimes'", "'nullable'", "'array'"]
        assert rules["owner.email"][0] == "'required'"

    def test_read_only_properties_skipped(self, petstore):
        body = petstore.operation("showPetById").success_response
        rules = flatten_laravel_rules(body.field, petstore)
        assert "id" not in rules
        assert "createdAt" in rules

    def test_self_reference_terminates(self, tree):
        response = tree.operation("getNode").success_response
        rules = flatten_laravel_rules(response.field, tree)
        assert "children" in rules
        assert "children.*" in rules
        assert not any(key.startswith("children.*.children.*.") for key in rules)

    def test_array_body(self, build_document):
        document = build_document("""
openapi: 3.0.3
info: {title: Bulk, version: '1'}
paths:
  /tags:
    post:
      operationId: createTags
      requestBody:
        required: true
        content:
          application/json:
            schema:
              type: array
              items:
                $ref: '#/components/schemas/Tag'
      responses:
        '204': {description: ok}
components:
  schemas:
    Tag:
      type: object
      required: [label]
      properties:
        label: {type: string}
""")
        body = document.operation("createTags").request_body
        rules = flatten_laravel_rules(body.field, document)
        assert list(rules) == ["*", "*.label"]
        assert rules["*.label"] == ["'required'", "'string'"]


class TestSymfonyConstraints:
    """Test Symfony Validator attributes."""

    def test_required_string(self, petstore):
        assert symfony_constraints(prop(petstore, "NewPet", "name"), petstore) == [
            "#[Assert\\NotNull]", "#[Assert\\Length(min: 1, max: 64)]",
        ]

    def test_nested_object_is_valid(self, petstore):
        assert symfony_constraints(prop(petstore, "NewPet", "owner"), petstore) == ["#[Assert\\Valid]"]

    def test_unique_items(self, petstore):
        assert symfony_constraints(prop(petstore, "NewPet", "tags"), petstore) == ["#[Assert\\Unique]"]

    def test_inline_enum_choice(self, petstore):
        assert symfony_constraints(prop(petstore, "Order", "status"), petstore) == [
            "#[Assert\\Choice(['placed', 'approved', 'delivered'])]",
        ]

    def test_date_format_only_outside_dtos(self, petstore):
        created = prop(petstore, "Pet", "createdAt")
        assert symfony_constraints(created, petstore) == []
        assert symfony_constraints(created, petstore, for_dto=False) == [
            "#[Assert\\DateTime(format: \\DateTimeInterface::ATOM)]",
        ]

    def test_query_range(self, petstore):
        limit = petstore.operation("listPets").query_params[0]
        assert symfony_constraints(limit.field, petstore, for_dto=False) == [
            "#[Assert\\Range(min: 1, max: 100)]",
        ]

    def test_exclusive_minimum(self, tree):
        assert symfony_constraints(prop(tree, "Node", "weight"), tree) == ["#[Assert\\GreaterThan(0)]"]

    def test_array_of_objects_is_valid(self, tree):
        assert symfony_constraints(prop(tree, "Node", "children"), tree) == ["#[Assert\\Valid]"]


class TestRespectRule:
    """Test Respect\\Validation chains."""

    def test_loose_query_integer(self, petstore):
        limit = petstore.operation("listPets").query_params[0]
        assert respect_rule(limit.field, petstore, loose=True) == "v::intVal()->min(1)->max(100)"

    def test_strict_string(self, petstore):
        assert respect_rule(prop(petstore, "NewPet", "name"), petstore) == "v::stringType()->length(1, 64)"

    def test_enum(self, petstore):
        assert respect_rule(prop(petstore, "NewPet", "status"), petstore) == (
            "v::in(['available', 'pending', 'sold'])"
        )

    def test_unique_array(self, petstore):
        assert respect_rule(prop(petstore, "NewPet", "tags"), petstore) == (
            "v::arrayType()->unique()->each(v::stringType())"
        )

    def test_nested_object_keys(self, petstore):
        assert respect_rule(prop(petstore, "NewPet", "owner"), petstore) == (
            "v::arrayType()->key('email', v::stringType()->email(), true)"
            "->key('name', v::stringType(), false)"
        )

    def test_nullable_wrapper(self, tree):
        assert respect_rule(prop(tree, "Node", "label"), tree) == "v::nullable(v::stringType())"

    def test_self_reference_terminates(self, tree):
        response = tree.operation("getNode").success_response
        chain = respect_rule(response.field, tree)
        assert chain.startswith("v::arrayType()->key('id', v::stringType()->uuid(), true)")
        assert "->key('children', v::arrayType()->each(v::arrayType()), false)" in chain
        assert "->key('weight', v::number()->greaterThan(0), false)" in chain
