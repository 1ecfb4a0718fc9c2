"""
Template context builders.

Every artifact template receives plain dicts/lists built here, so templates
never reach into the model or decide PHP types themselves. Framework-specific
request access (how a query string or a route argument is read) lives in
REQUEST_ACCESSORS.
"""

from typing import Any, Dict, Iterable, List, Optional

import yaml

from .. import __version__
from ..mapping import (
    convert_expr,
    default_literal,
    doc_type,
    enum_cases,
    extract_expr,
    flatten_laravel_rules,
    hydrate_expr,
    is_nullable_value,
    laravel_rules,
    param_cast,
    php_type,
    referenced_schemas,
    respect_rule,
    symfony_constraints,
)
from ..mapping.type_mapper import _ref_schema, _target
from ..php import php_literal, php_string, snake_case, unique_name

# How each framework reads a raw value out of the incoming request.
# {key} is a quoted PHP string, {var} a variable name without '$'.
REQUEST_ACCESSORS = {
    "laravel": {
        "path": "${var}",
        "query": "$request->query({key})",
        "header": "$request->header({key})",
        "cookie": "$request->cookie({key})",
    },
    "lumen": {
        "path": "${var}",
        "query": "$request->query({key})",
        "header": "$request->header({key})",
        "cookie": "$request->cookie({key})",
    },
    "symfony": {
        "path": "${var}",
        "query": "$query?->{var}",
        "header": "$request->headers->get({key})",
        "cookie": "$request->cookies->get({key})",
    },
    "slim": {
        "path": "$args[{key}]",
        "query": "($request->getQueryParams()[{key}] ?? null)",
        "header": "($request->getHeaderLine({key}) ?: null)",
        "cookie": "($request->getCookieParams()[{key}] ?? null)",
    },
}

LOCATION_ORDER = {"path": 0, "body": 1, "query": 2, "header": 3, "cookie": 4}

# Imports every controller of a framework needs regardless of its operations
CONTROLLER_USES = {
    "symfony": ["Symfony\\Bundle\\FrameworkBundle\\Controller\\AbstractController"],
    "slim": ["Psr\\Http\\Message\\ServerRequestInterface"],
}

ROUTES_USES = {
    "laravel": ["Illuminate\\Support\\Facades\\Route"],
    "slim": ["Slim\\App"],
}


def php_uses(fqcns: Iterable[str], current_namespace: str) -> List[str]:
    """Sorted, de-duplicated `use` targets, dropping same-namespace and global classes."""
    result = set()
    for fqcn in fqcns:
        fqcn = fqcn.lstrip("\\")
        head = fqcn.split(" as ", 1)[0]
        if "\\" not in head:
            continue
        if head.rsplit("\\", 1)[0] == current_namespace and " as " not in fqcn:
            continue
        result.add(fqcn)
    return sorted(result, key=str.lower)


def route_path(operation) -> str:
    """Path template with placeholders renamed to the PHP variable names."""
    path = operation.path
    for param in operation.path_params:
        path = path.replace("{" + param.name + "}", "{" + param.var_name + "}")
    return path


class ContextBuilder:
    """Builds template contexts for one document/framework/config combination."""

    def __init__(self, document, profile, config):
        self.document = document
        self.profile = profile
        self.config = config
        self.root = config.root_namespace
        self.accessors = REQUEST_ACCESSORS.get(profile.name, REQUEST_ACCESSORS["laravel"])

    # ------------------------------------------------------------------ #
    # Names
    # ------------------------------------------------------------------ #
    def namespace_of(self, kind: str) -> str:
        spec = self.profile.artifact(kind)
        return self.profile.namespace(spec, self.root) if spec else self.root

    def fqcn_of(self, kind: str, subject_class: str) -> str:
        spec = self.profile.artifact(kind)
        if spec is None:
            return f"{self.root}\\{subject_class}"
        return self.profile.fqcn(spec, self.root, subject_class)

    def class_of(self, kind: str, subject_class: str) -> str:
        spec = self.profile.artifact(kind)
        return self.profile.class_name(spec, subject_class) if spec else subject_class

    def schema_fqcn(self, name: str) -> str:
        schema = self.document.schema(name)
        kind = "enum" if schema.is_enum else "dto"
        return self.fqcn_of(kind, schema.class_name)

    def schema_uses(self, names: Iterable[str]) -> List[str]:
        return [self.schema_fqcn(name) for name in names if self.document.schema(name) is not None]

    # ------------------------------------------------------------------ #
    # Shared context
    # ------------------------------------------------------------------ #
    def base(self) -> Dict[str, Any]:
        return {
            "framework": self.profile.name,
            "framework_label": self.profile.label,
            "root_namespace": self.root,
            "strict_types": self.config.strict_types,
            "readonly_classes": self.config.readonly_classes,
            "php_version": self.config.php_version,
            "generator_version": __version__,
            "vars": dict(self.config.variables),
            "api": {
                "title": self.document.title,
                "version": self.document.version,
                "description": self.document.description,
                "servers": list(self.document.servers),
            },
        }

    def _class_context(self, kind: str, subject_class: str, uses: Iterable[str]) -> Dict[str, Any]:
        namespace = self.namespace_of(kind)
        ctx = self.base()
        ctx.update({
            "namespace": namespace,
            "class_name": self.class_of(kind, subject_class),
            "uses": php_uses(uses, namespace),
        })
        return ctx

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #
    def signature(self, operation) -> List[Dict[str, Any]]:
        """Interface method parameters: required before optional, then by location."""
        entries = []
        for param in operation.parameters:
            optional = not param.required or param.field.nullable
            entries.append({
                "name": param.name,
                "var": param.var_name,
                "location": param.location,
                "type": php_type(param.field, self.document, self.profile, for_dto=False, nullable=optional),
                "doc": doc_type(param.field, self.document, self.profile, for_dto=False, nullable=optional),
                "description": param.description,
                "optional": optional,
                "param": param,
            })
        body = operation.request_body
        if body is not None:
            optional = not body.required
            entries.append({
                "name": "body",
                "var": "body",
                "location": "body",
                "type": php_type(body.field, self.document, self.profile, nullable=optional),
                "doc": doc_type(body.field, self.document, self.profile, nullable=optional),
                "description": body.description or "Request body",
                "optional": optional,
                "param": None,
            })
        entries.sort(key=lambda e: (e["optional"], LOCATION_ORDER[e["location"]]))
        return entries

    def operation(self, operation) -> Dict[str, Any]:
        response = operation.success_response
        if operation.returns_body:
            return_type = php_type(response.field, self.document, self.profile, nullable=False)
            return_doc = doc_type(response.field, self.document, self.profile, nullable=False)
        else:
            return_type = return_doc = "void"

        return {
            "operation_id": operation.operation_id,
            "method": operation.method_name,
            "http_method": operation.http_method,
            "path": operation.path,
            "route_path": route_path(operation),
            "summary": operation.summary,
            "description": operation.description,
            "deprecated": operation.deprecated,
            "tag": operation.tag,
            "params": self.signature(operation),
            "return_type": return_type,
            "return_doc": return_doc,
            "returns_body": operation.returns_body,
            "status": operation.success_status,
            "security": list(operation.security),
            "has_validator": self.profile.has_validator(operation),
            "validator_class": self.class_of("validator", self.profile.operation_class(operation)),
        }

    def _operation_schema_refs(self, operation, include_response=True) -> set:
        names = set()
        for param in operation.parameters:
            names |= referenced_schemas(param.field, self.document)
        if operation.request_body is not None:
            names |= referenced_schemas(operation.request_body.field, self.document)
        if include_response and operation.returns_body:
            names |= referenced_schemas(operation.success_response.field, self.document)
        return names

    # ------------------------------------------------------------------ #
    # Tag-scoped artifacts
    # ------------------------------------------------------------------ #
    def api_interface(self, tag_class: str, operations) -> Dict[str, Any]:
        refs = set()
        for op in operations:
            refs |= self._operation_schema_refs(op)
        ctx = self._class_context("api_interface", tag_class, self.schema_uses(refs))
        ctx.update({
            "tag": operations[0].tag,
            "tag_description": self.document.tags.get(operations[0].tag, ""),
            "operations": [self.operation(op) for op in operations],
        })
        return ctx

    def controller(self, tag_class: str, operations) -> Dict[str, Any]:
        interface_fqcn = self.fqcn_of("api_interface", tag_class)
        uses = [interface_fqcn, self.profile.response_class] + CONTROLLER_USES.get(self.profile.name, [])
        op_contexts = []
        for op in operations:
            op_ctx = self.operation(op)
            self._add_controller_details(op, op_ctx)
            op_contexts.append(op_ctx)
            uses.extend(op_ctx["uses"])

        ctx = self._class_context("controller", tag_class, uses)
        ctx.update({
            "tag": operations[0].tag,
            "interface_class": self.class_of("api_interface", tag_class),
            "operations": op_contexts,
            "response_class": self.profile.response_class.rsplit("\\", 1)[-1],
        })
        return ctx

    def _validator_import(self, operation):
        """
        Local name and `use` target of an operation's validator class.

        Aliased when a schema class of the same short name (a hoisted
        PlaceOrderRequest body, say) would be imported next to it.
        """
        subject = self.profile.operation_class(operation)
        local = self.class_of("validator", subject)
        fqcn = self.fqcn_of("validator", subject)
        schema_classes = {s.class_name for s in self.document.schemas.values()}
        if local not in schema_classes:
            return local, fqcn
        alias = unique_name(f"{local}Validator", set(schema_classes))
        return alias, f"{fqcn} as {alias}"

    def _add_controller_details(self, operation, op_ctx: Dict[str, Any]) -> None:
        """Controller signature, call arguments and imports for one operation."""
        framework = self.profile.name
        body = operation.request_body
        uses: List[str] = []
        controller_params: List[tuple] = []  # (declaration, optional)
        needs_request = False
        validator_class, validator_import = self._validator_import(operation)

        body_arg = None
        body_schema = None
        body_is_list = False
        if body is not None:
            target = _target(body.field, self.document)
            body_schema = _ref_schema(target, self.document)
            if body_schema is None and target.type == "array" and target.items is not None:
                item_schema = _ref_schema(target.items, self.document)
                if item_schema is not None and item_schema.is_object:
                    body_schema, body_is_list = item_schema, True
            if body_schema is not None and not body_schema.is_object:
                body_schema, body_is_list = None, False
            uses.extend(self.schema_uses(referenced_schemas(body.field, self.document)))

        # Request injection and body access
        if framework == "symfony":
            if body is not None and body_schema is not None and not body.is_form:
                optional = not body.required
                attribute = "#[MapRequestPayload]"
                type_hint = body_schema.class_name
                if body_is_list:
                    attribute = f"#[MapRequestPayload(type: {body_schema.class_name}::class)]"
                    type_hint = "array"
                declaration = f"{attribute} {'?' if optional else ''}{type_hint} $body{' = null' if optional else ''}"
                controller_params.append((declaration, optional))
                uses.append("Symfony\\Component\\HttpKernel\\Attribute\\MapRequestPayload")
                body_arg = "$body"
            elif body is not None:
                needs_request = True
                raw = "$request->request->all()" if body.is_form else "$request->toArray()"
                body_arg = convert_expr(body.field, raw, self.document)
            if operation.header_params or [p for p in operation.parameters if p.location == "cookie"]:
                needs_request = True
            if op_ctx["has_validator"]:
                any_required = any(p.required for p in operation.query_params)
                if any_required:
                    declaration = f"#[MapQueryString] {validator_class} $query"
                else:
                    declaration = f"#[MapQueryString] ?{validator_class} $query = null"
                controller_params.append((declaration, not any_required))
                uses.append("Symfony\\Component\\HttpKernel\\Attribute\\MapQueryString")
                uses.append(validator_import)
            if needs_request:
                controller_params.insert(0, ("Request $request", False))
                uses.append("Symfony\\Component\\HttpFoundation\\Request")
        elif framework == "slim":
            if body is not None:
                body_arg = convert_expr(body.field, "(array) $request->getParsedBody()", self.document)
            if op_ctx["has_validator"]:
                uses.append(validator_import)
        else:
            # laravel / lumen
            if body is not None:
                if framework == "laravel" and op_ctx["has_validator"] and flatten_laravel_rules(body.field, self.document):
                    raw = "$request->validated()"
                else:
                    raw = "$request->all()"
                body_arg = convert_expr(body.field, raw, self.document)
            non_path = [p for p in operation.parameters if p.location != "path"]
            needs_request = body is not None or bool(non_path) or op_ctx["has_validator"]
            if needs_request:
                if framework == "laravel" and op_ctx["has_validator"]:
                    request_class = validator_class
                    uses.append(validator_import)
                else:
                    request_class = "Request"
                    uses.append("Illuminate\\Http\\Request")
                if framework == "lumen" and op_ctx["has_validator"]:
                    uses.append(validator_import)
                controller_params.insert(0, (f"{request_class} $request", False))

        # Route arguments are strings; cast them when calling the API
        if framework != "slim":
            path_declarations = [(f"string ${p.var_name}", False) for p in operation.path_params]
            insert_at = 1 if needs_request else 0
            controller_params[insert_at:insert_at] = path_declarations

        call_args = []
        for entry in op_ctx["params"]:
            if entry["location"] == "body":
                call_args.append(body_arg)
                continue
            param = entry["param"]
            # Route placeholders are renamed to the PHP variable names
            key = param.var_name if param.location == "path" else param.name
            raw = self.accessors[param.location].format(key=php_string(key), var=param.var_name)
            if framework == "symfony" and param.location == "query":
                call_args.append(raw)
            else:
                call_args.append(param_cast(param, raw, self.document))
            schema_refs = referenced_schemas(param.field, self.document)
            uses.extend(self.schema_uses(schema_refs))

        # Optional controller parameters must come last
        controller_params.sort(key=lambda item: item[1])

        op_ctx.update({
            "validator_class": validator_class,
            "controller_params": [declaration for declaration, _ in controller_params],
            "call_args": call_args,
            "needs_request": needs_request,
            "has_body": body is not None,
            "validates_query": bool(operation.query_params),
            "validates_body": body is not None and self.profile.validates_body,
            "uses": uses,
        })

    # ------------------------------------------------------------------ #
    # Schema-scoped artifacts
    # ------------------------------------------------------------------ #
    def dto(self, schema) -> Dict[str, Any]:
        refs = set()
        properties = []
        symfony = self.profile.rule_dialect == "symfony"
        for prop in schema.properties:
            refs |= referenced_schemas(prop, self.document)
            nullable = is_nullable_value(prop, self.document)
            default = default_literal(prop, self.document)
            if default is None and nullable and not prop.required:
                default = "null"
            attributes = symfony_constraints(prop, self.document) if symfony else []
            if symfony and prop.php_name != prop.name:
                attributes.append(f"#[SerializedName({php_string(prop.name)})]")
            properties.append({
                "name": prop.name,
                "key": php_string(prop.name),
                "var": prop.php_name,
                "type": php_type(prop, self.document, self.profile),
                "doc": doc_type(prop, self.document, self.profile),
                "description": prop.description,
                "required": prop.required,
                "nullable": nullable,
                "default": default,
                "read_only": prop.read_only,
                "write_only": prop.write_only,
                "hydrate": hydrate_expr(prop, self.document),
                "extract": extract_expr(prop, self.document),
                "attributes": attributes,
            })

        # Constructor parameters without a default first
        ordered = sorted(properties, key=lambda p: p["default"] is not None)

        uses = self.schema_uses(name for name in refs if name != schema.name)
        if any(a.startswith("#[Assert") for p in properties for a in p["attributes"]):
            uses.append("Symfony\\Component\\Validator\\Constraints as Assert")
        if any("SerializedName" in a for p in properties for a in p["attributes"]):
            uses.append("Symfony\\Component\\Serializer\\Attribute\\SerializedName")

        ctx = self._class_context("dto", schema.class_name, uses)
        ctx.update({
            "schema": schema.name,
            "description": schema.description,
            "deprecated": schema.deprecated,
            "parents": [self.document.schema(p).class_name for p in schema.parents if self.document.schema(p)],
            "properties": properties,
            "constructor": ordered,
        })
        return ctx

    def enum(self, schema) -> Dict[str, Any]:
        ctx = self._class_context("enum", schema.class_name, [])
        ctx.update({
            "schema": schema.name,
            "description": schema.description,
            "backing": "int" if schema.enum_type == "integer" else "string",
            "cases": [{"name": name, "value": php_literal(value)} for name, value in enum_cases(schema)],
        })
        return ctx

    # ------------------------------------------------------------------ #
    # Operation-scoped artifacts (validators)
    # ------------------------------------------------------------------ #
    def validator(self, operation) -> Dict[str, Any]:
        subject = self.profile.operation_class(operation)
        dialect = self.profile.rule_dialect
        body = operation.request_body
        uses: List[str] = []
        ctx_extra: Dict[str, Any] = {
            "operation_id": operation.operation_id,
            "method": operation.method_name,
            "http_method": operation.http_method,
            "path": operation.path,
        }

        if dialect == "laravel":
            rules: Dict[str, List[str]] = {}
            if body is not None:
                rules.update(flatten_laravel_rules(body.field, self.document))
            for param in operation.query_params:
                rules.setdefault(param.name, laravel_rules(param.field, self.document, required=param.required))
            if any(r.startswith("Rule::") for rule_list in rules.values() for r in rule_list):
                uses.append("Illuminate\\Validation\\Rule")
            ctx_extra["rules"] = [{"key": php_string(k), "rules": v} for k, v in rules.items()]
            if self.profile.name == "laravel":
                uses.append("Illuminate\\Foundation\\Http\\FormRequest")
        elif dialect == "symfony":
            properties = []
            for param in operation.query_params:
                optional = not param.required or param.field.nullable
                attributes = symfony_constraints(param.field, self.document, for_dto=False)
                if param.var_name != param.name:
                    attributes.append(f"#[SerializedName({php_string(param.name)})]")
                properties.append({
                    "name": param.name,
                    "var": param.var_name,
                    "type": php_type(param.field, self.document, self.profile, for_dto=False, nullable=optional),
                    "doc": doc_type(param.field, self.document, self.profile, for_dto=False, nullable=optional),
                    "description": param.description,
                    "default": "null" if optional else None,
                    "attributes": attributes,
                })
                uses.extend(self.schema_uses(referenced_schemas(param.field, self.document)))
            properties.sort(key=lambda p: p["default"] is not None)
            if any(a.startswith("#[Assert") for p in properties for a in p["attributes"]):
                uses.append("Symfony\\Component\\Validator\\Constraints as Assert")
            if any("SerializedName" in a for p in properties for a in p["attributes"]):
                uses.append("Symfony\\Component\\Serializer\\Attribute\\SerializedName")
            ctx_extra["properties"] = properties
        else:
            uses.append("Respect\\Validation\\Validator as v")
            uses.append("Respect\\Validation\\Validatable")
            uses.append("Respect\\Validation\\Exceptions\\NestedValidationException")
            uses.append("Psr\\Http\\Message\\ServerRequestInterface")
            ctx_extra["body_rule"] = (
                respect_rule(body.field, self.document, loose=False, nullable=False) if body is not None else None
            )
            ctx_extra["query_keys"] = [
                {
                    "key": php_string(param.name),
                    "rule": respect_rule(param.field, self.document, loose=True),
                    "mandatory": "true" if param.required else "false",
                }
                for param in operation.query_params
            ]

        ctx = self._class_context("validator", subject, uses)
        ctx.update(ctx_extra)
        ctx["summary"] = operation.summary
        return ctx

    # ------------------------------------------------------------------ #
    # Global artifacts
    # ------------------------------------------------------------------ #
    def _middleware(self, operation) -> List[str]:
        middleware: List[str] = []
        for scheme in operation.security:
            for item in self.config.security_middleware.get(scheme, []):
                if item not in middleware:
                    middleware.append(item)
        return middleware

    def routes(self) -> Dict[str, Any]:
        routes = []
        controllers = []
        for op in self.document.operations:
            controller_fqcn = self.fqcn_of("controller", op.tag_class)
            controllers.append(controller_fqcn)
            routes.append({
                "name": f"{snake_case(op.tag_class)}.{snake_case(op.method_name)}",
                "http_method": op.http_method,
                "verb": op.http_method.lower(),
                "path": route_path(op),
                "controller": self.class_of("controller", op.tag_class),
                "controller_fqcn": controller_fqcn,
                "action": op.method_name,
                "middleware": self._middleware(op),
                "middleware_php": php_literal(self._middleware(op)),
                "operation_id": op.operation_id,
            })

        ctx = self.base()
        ctx.update({
            "routes": routes,
            "uses": php_uses(controllers + ROUTES_USES.get(self.profile.name, []), ""),
        })
        if self.profile.name == "symfony":
            ctx["routes_yaml"] = self._symfony_routes_yaml(routes)
        return ctx

    @staticmethod
    def _symfony_routes_yaml(routes) -> str:
        document = {}
        for route in routes:
            document[route["name"]] = {
                "path": route["path"],
                "controller": f"{route['controller_fqcn']}::{route['action']}",
                "methods": [route["http_method"]],
            }
        return yaml.safe_dump(document, sort_keys=False, default_flow_style=False)

    def readme(self, artifacts=None) -> Dict[str, Any]:
        ctx = self.base()
        ctx.update({
            "operations": [
                {
                    "http_method": op.http_method,
                    "path": op.path,
                    "tag": op.tag,
                    "method": op.method_name,
                    "controller": self.class_of("controller", op.tag_class),
                    "summary": op.summary.replace("|", "\\|"),
                    "security": ", ".join(op.security),
                }
                for op in self.document.operations
            ],
            "schemas": [
                {"name": s.name, "class_name": s.class_name, "kind": s.kind, "source": s.source}
                for s in self.document.schemas.values()
                if s.kind in ("object", "enum")
            ],
            "security_schemes": [
                {"name": s.name, "type": s.type, "scheme": s.scheme or s.location or ""}
                for s in self.document.security_schemes.values()
            ],
            "files": sorted(a.path for a in artifacts or []),
        })
        return ctx
