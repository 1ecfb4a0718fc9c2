"""OpenAPI document loading and extraction into the generator's model."""

from pathlib import Path

from .extractor import DocumentExtractor, choose_content_type, derive_operation_id, extract_document
from .loader import OpenAPIParser, ensure_valid_document, load_openapi_spec, validate_document
from .model import (
    ApiDocument,
    Constraints,
    Operation,
    Parameter,
    Property,
    RequestBody,
    Response,
    Schema,
    SecurityScheme,
)


def load_document(path) -> ApiDocument:
    """Load, validate and extract an OpenAPI document in one step."""
    return extract_document(load_openapi_spec(Path(path)))


__all__ = [
    "ApiDocument",
    "Constraints",
    "DocumentExtractor",
    "OpenAPIParser",
    "Operation",
    "Parameter",
    "Property",
    "RequestBody",
    "Response",
    "Schema",
    "SecurityScheme",
    "choose_content_type",
    "derive_operation_id",
    "ensure_valid_document",
    "extract_document",
    "load_document",
    "load_openapi_spec",
    "validate_document",
]
