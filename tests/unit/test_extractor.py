"""
Unit tests for extracting an ApiDocument from a raw OpenAPI document.
"""

import pytest

from php_scaffold.errors import SpecValidationError
from php_scaffold.spec import choose_content_type, derive_operation_id


class TestHelpers:
    """Test content negotiation and operation id derivation."""

    def test_choose_content_type_prefers_json(self):
        content = {"text/plain": {}, "application/json": {}}
        assert choose_content_type(content) == "application/json"

    def test_choose_content_type_vendor_json(self):
        content = {"text/plain": {}, "application/vnd.api+json": {}}
        assert choose_content_type(content) == "application/vnd.api+json"

    def test_choose_content_type_forms_then_first(self):
        assert choose_content_type({"text/plain": {}, "multipart/form-data": {}}) == "multipart/form-data"
        assert choose_content_type({"text/plain": {}, "text/csv": {}}) == "text/plain"
        assert choose_content_type({}) is None

    def test_derive_operation_id(self):
        assert derive_operation_id("get", "/pets/{petId}") == "getPetsByPetId"
        assert derive_operation_id("POST", "/store/orders") == "postStoreOrders"
        assert derive_operation_id("get", "/") == "getRoot"


class TestPetstoreExtraction:
    """Test the petstore document end to end through the extractor."""

    def test_document_metadata(self, petstore):
        assert petstore.title == "Petstore"
        assert petstore.version == "1.2.0"
        assert petstore.servers == ["https://api.example.com/v1"]

    def test_operations_in_document_order(self, petstore):
        assert [op.operation_id for op in petstore.operations] == [
            "listPets", "createPet", "showPetById", "deletePet", "placeOrder", "healthCheck",
        ]

    def test_operations_grouped_by_tag(self, petstore):
        grouped = petstore.operations_by_tag()
        assert list(grouped) == ["Pets", "Store", "Default"]
        assert [op.method_name for op in grouped["Pets"]] == [
            "listPets", "createPet", "showPetById", "deletePet",
        ]

    def test_untagged_operation_gets_default_tag(self, petstore):
        op = petstore.operation("healthCheck")
        assert op.tag == "default"
        assert op.tag_class == "Default"
        assert petstore.tags == {"pets": "Everything about pets", "store": "", "default": ""}

    def test_security_global_and_overridden(self, petstore):
        assert petstore.operation("listPets").security == []
        assert petstore.operation("createPet").security == ["bearerAuth"]
        scheme = petstore.security_schemes["bearerAuth"]
        assert scheme.type == "http"
        assert scheme.scheme == "bearer"

    def test_shared_path_parameters_merged(self, petstore):
        op = petstore.operation("showPetById")
        assert [(p.name, p.location, p.var_name) for p in op.parameters] == [
            ("petId", "path", "petId"),
            ("X-Request-Id", "header", "xRequestId"),
        ]
        pet_id = op.path_params[0]
        assert pet_id.required
        assert pet_id.field.type == "integer"

    def test_query_parameters(self, petstore):
        op = petstore.operation("listPets")
        limit, status = op.query_params
        assert limit.field.constraints.minimum == 1
        assert limit.field.constraints.maximum == 100
        assert not limit.required
        assert status.field.ref == "PetStatus"

    def test_success_responses(self, petstore):
        create = petstore.operation("createPet")
        assert create.success_status == 201
        assert create.success_response.field.ref == "Pet"
        assert create.returns_body

        delete = petstore.operation("deletePet")
        assert delete.success_status == 204
        assert not delete.returns_body

    def test_array_response(self, petstore):
        field = petstore.operation("listPets").success_response.field
        assert field.type == "array"
        assert field.items.ref == "Pet"

    def test_enum_schema(self, petstore):
        status = petstore.schema("PetStatus")
        assert status.is_enum
        assert status.enum_type == "string"
        assert status.enum_values == ["available", "pending", "sold"]

    def test_all_of_flattened_with_parents(self, petstore):
        pet = petstore.schema("Pet")
        assert pet.is_object
        assert pet.parents == ["NewPet"]
        assert [p.name for p in pet.properties] == ["name", "tag", "status", "tags", "owner", "id", "createdAt"]
        assert pet.get_property("name").required
        assert pet.get_property("id").required
        assert pet.get_property("id").read_only
        assert not pet.get_property("createdAt").required

    def test_property_details(self, petstore):
        new_pet = petstore.schema("NewPet")
        assert new_pet.get_property("tag").nullable
        tags = new_pet.get_property("tags")
        assert tags.constraints.unique_items
        assert tags.items.type == "string"
        assert new_pet.get_property("owner").ref == "Owner"

    def test_defaults_recorded(self, petstore):
        order = petstore.schema("Order")
        status = order.get_property("status")
        assert status.has_default
        assert status.default == "placed"
        assert status.enum == ["placed", "approved", "delivered"]
        assert order.get_property("complete").default is False

    def test_inline_request_body_hoisted(self, petstore):
        body = petstore.operation("placeOrder").request_body
        assert body.required
        assert body.content_type == "application/json"
        assert body.field.ref == "PlaceOrderRequest"
        hoisted = petstore.schema("PlaceOrderRequest")
        assert hoisted.source == "inline"
        assert [p.name for p in hoisted.properties if p.required] == ["petId", "quantity"]

    def test_inline_response_hoisted(self, petstore):
        field = petstore.operation("healthCheck").success_response.field
        assert field.ref == "HealthCheck200Response"
        assert petstore.schema("HealthCheck200Response").get_property("status").type == "string"


class TestOpenAPI31:
    """Test OpenAPI 3.1 specifics using the tree document."""

    def test_type_list_with_null_is_nullable(self, tree):
        label = tree.schema("Node").get_property("label")
        assert label.type == "string"
        assert label.nullable

    def test_numeric_exclusive_minimum(self, tree):
        weight = tree.schema("Node").get_property("weight")
        assert weight.constraints.minimum == 0
        assert weight.constraints.exclusive_minimum

    def test_self_reference(self, tree):
        children = tree.schema("Node").get_property("children")
        assert children.items.ref == "Node"

    def test_kebab_case_path_parameter(self, tree):
        param = tree.operation("getNode").path_params[0]
        assert param.name == "node-id"
        assert param.var_name == "nodeId"


class TestEdgeCases:
    """Test unusual but valid (and invalid) documents."""

    def test_duplicate_operation_ids_renamed(self, build_document):
        document = build_document("""
openapi: 3.0.3
info: {title: Dup, version: '1'}
paths:
  /a:
    get:
      operationId: getThing
      responses: {'200': {description: ok}}
  /b:
    get:
      operationId: getThing
      responses: {'200': {description: ok}}
""")
        assert [op.method_name for op in document.operations] == ["getThing", "getThing2"]
        assert document.operations[1].operation_id == "getThing2"

    def test_missing_operation_id_derived(self, build_document):
        document = build_document("""
openapi: 3.0.3
info: {title: NoIds, version: '1'}
paths:
  /users/{id}:
    get:
      parameters:
        - {name: id, in: path, required: true, schema: {type: string}}
      responses: {'200': {description: ok}}
""")
        assert document.operations[0].operation_id == "getUsersById"

    def test_skip_extension(self, build_document):
        document = build_document("""
openapi: 3.0.3
info: {title: Skip, version: '1'}
paths:
  /kept:
    get:
      operationId: kept
      responses: {'200': {description: ok}}
    post:
      operationId: skipped
      x-php-scaffold-skip: true
      responses: {'200': {description: ok}}
  /internal:
    x-php-scaffold-skip: true
    get:
      operationId: internal
      responses: {'200': {description: ok}}
""")
        assert [op.operation_id for op in document.operations] == ["kept"]

    def test_undeclared_path_placeholder_added_as_string(self, build_document):
        document = build_document("""
openapi: 3.0.3
info: {title: Loose, version: '1'}
paths:
  /files/{name}:
    get:
      operationId: getFile
      responses: {'200': {description: ok}}
""")
        param = document.operations[0].path_params[0]
        assert param.name == "name"
        assert param.field.type == "string"

    def test_declared_path_param_missing_from_template(self, build_document):
        with pytest.raises(SpecValidationError, match="not present in path template"):
            build_document("""
openapi: 3.0.3
info: {title: Bad, version: '1'}
paths:
  /files:
    get:
      operationId: getFile
      parameters:
        - {name: name, in: path, required: true, schema: {type: string}}
      responses: {'200': {description: ok}}
""")

    def test_reserved_variable_names_renamed(self, build_document):
        document = build_document("""
openapi: 3.0.3
info: {title: Vars, version: '1'}
paths:
  /search:
    get:
      operationId: search
      parameters:
        - {name: query, in: query, schema: {type: string}}
      responses: {'200': {description: ok}}
""")
        assert document.operations[0].parameters[0].var_name == "query2"

    def test_one_of_refs(self, build_document):
        document = build_document("""
openapi: 3.0.3
info: {title: Union, version: '1'}
paths: {}
components:
  schemas:
    Cat: {type: object, properties: {purrs: {type: boolean}}}
    Dog: {type: object, properties: {barks: {type: boolean}}}
    Owner:
      type: object
      properties:
        pet:
          oneOf:
            - $ref: '#/components/schemas/Cat'
            - $ref: '#/components/schemas/Dog'
""")
        assert document.schema("Owner").get_property("pet").one_of == ["Cat", "Dog"]

    def test_unknown_schema_ref(self, build_document):
        with pytest.raises(SpecValidationError, match="Unresolvable"):
            build_document("""
openapi: 3.0.3
info: {title: Bad, version: '1'}
paths: {}
components:
  schemas:
    Owner:
      type: object
      properties:
        pet: {$ref: '#/components/schemas/Missing'}
""")

    def test_case_insensitive_duplicates_renamed(self, build_document):
        document = build_document("""
openapi: 3.0.3
info: {title: Case, version: '1'}
paths:
  /pet:
    get:
      operationId: getPet
      responses: {'200': {description: ok}}
  /PET:
    get:
      operationId: getPET
      responses: {'200': {description: ok}}
components:
  schemas:
    Pet: {type: object, properties: {id: {type: integer}}}
    PET: {type: object, properties: {id: {type: integer}}}
""")
        assert [op.method_name for op in document.operations] == ["getPet", "getPET2"]
        assert [s.class_name for s in document.schemas.values()] == ["Pet", "PET2"]

    def test_default_response_never_success(self, build_document):
        document = build_document("""
openapi: 3.0.3
info: {title: Events, version: '1'}
paths:
  /events:
    get:
      operationId: listEvents
      responses:
        default: {description: unexpected error}
""")
        op = document.operations[0]
        assert [r.status for r in op.responses] == ["default"]
        assert op.success_response is None
        assert op.success_status == 200
        assert not op.returns_body

    def test_2xx_range_response(self, build_document):
        document = build_document("""
openapi: 3.0.3
info: {title: Range, version: '1'}
paths:
  /names:
    get:
      operationId: listNames
      responses:
        2XX:
          description: ok
          content: {application/json: {schema: {type: array, items: {type: string}}}}
        default: {description: error}
  /jobs:
    post:
      operationId: createJob
      responses:
        2XX: {description: ok}
        '202': {description: accepted}
""")
        names = document.operation("listNames")
        assert names.success_response.status == "2XX"
        assert names.success_status == 200
        assert names.returns_body

        assert document.operation("createJob").success_status == 202

    def test_inline_array_items_hoisted(self, build_document):
        document = build_document("""
openapi: 3.0.3
info: {title: Orders, version: '1'}
paths: {}
components:
  schemas:
    Order:
      type: object
      properties:
        lines:
          type: array
          items:
            type: object
            required: [sku]
            properties:
              sku: {type: string}
              quantity: {type: integer}
""")
        lines = document.schema("Order").get_property("lines")
        assert lines.type == "array"
        assert lines.items.ref == "OrderLinesItem"
        item = document.schema("OrderLinesItem")
        assert item.source == "inline"
        assert [p.name for p in item.properties if p.required] == ["sku"]

    def test_pointer_targets_hoisted_once(self, build_document):
        document = build_document("""
openapi: 3.0.3
info: {title: Pointers, version: '1'}
paths: {}
components:
  schemas:
    Order:
      type: object
      properties:
        shipping:
          type: object
          properties:
            city: {type: string}
    Invoice:
      type: object
      properties:
        billing: {$ref: '#/components/schemas/Order/properties/shipping'}
        delivery: {$ref: '#/components/schemas/Order/properties/shipping'}
""")
        invoice = document.schema("Invoice")
        assert invoice.get_property("billing").ref == "InvoiceBilling"
        assert invoice.get_property("delivery").ref == "InvoiceBilling"
        assert "InvoiceDelivery" not in document.schemas
        assert document.schema("InvoiceBilling").get_property("city").type == "string"
