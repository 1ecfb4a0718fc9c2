"""
Pytest configuration and shared fixtures for the php-scaffold test suite.
"""

import shutil
import tempfile
from pathlib import Path

import pytest
import yaml

from php_scaffold.config import GeneratorConfig
from php_scaffold.spec import extract_document, load_document


@pytest.fixture(scope="session")
def fixtures_dir():
    """Return the directory holding sample OpenAPI documents."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def petstore_path(fixtures_dir):
    return fixtures_dir / "petstore.yaml"


@pytest.fixture(scope="session")
def tree_path(fixtures_dir):
    return fixtures_dir / "tree.json"


@pytest.fixture
def petstore(petstore_path):
    """The petstore document, extracted."""
    return load_document(petstore_path)


@pytest.fixture
def tree(tree_path):
    """A self-referencing OpenAPI 3.1 document, extracted."""
    return load_document(tree_path)


@pytest.fixture
def temp_output_dir():
    """Create a temporary directory for generated code output."""
    temp_dir = tempfile.mkdtemp(prefix="php_scaffold_test_")
    yield Path(temp_dir)
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def make_config():
    """Factory fixture for validated generator configs."""
    def _make(**kwargs) -> GeneratorConfig:
        return GeneratorConfig(**kwargs).validated()
    return _make


@pytest.fixture
def build_document():
    """Factory fixture to extract a document from a YAML string."""
    def _build(content: str):
        return extract_document(yaml.safe_load(content))
    return _build


@pytest.fixture
def minimal_spec():
    """Return a minimal valid OpenAPI document as a dict."""
    return {
        "openapi": "3.0.3",
        "info": {"title": "Minimal", "version": "1.0.0"},
        "paths": {
            "/ping": {
                "get": {
                    "operationId": "ping",
                    "responses": {"204": {"description": "pong"}},
                }
            }
        },
    }
