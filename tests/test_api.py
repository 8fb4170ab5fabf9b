"""Tests for the package-level entry points."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest
from conftest import components
from rich.console import Console
from rich.logging import RichHandler

import api_typegen
from api_typegen import generate, quick_generate, setup_logging, utils
from api_typegen.core.schema import SchemaStore
from api_typegen.core.synthesizer import Synthesizer
from api_typegen.core.templates import TemplateError, create_template_engine
from api_typegen.core.typespace import RegistryFrozenError, UnresolvableSchemaError
from api_typegen.logging_config import PACKAGE_LOGGER, get_logger


def test_generate_from_document(petstore: dict[str, Any]) -> None:
    result = generate(petstore)
    assert result.success
    assert "class Pet:" in result.code
    assert result.metadata["language"] == "python"
    assert result.metadata["enum_count"] == 1


def test_generate_from_file(tmp_path: Path, petstore: dict[str, Any]) -> None:
    path = tmp_path / "openapi.json"
    path.write_text(json.dumps(petstore), encoding="utf-8")
    result = generate(path, "manifest")
    assert result.success
    assert json.loads(result.code)["source"] == str(path)


def test_generate_failure_returns_no_code() -> None:
    """A fatal synthesis error fails the run without partial output."""
    document = components(
        {
            "Fine": {"type": "object", "properties": {"a": {"type": "string"}}},
            "Weird": {"type": "object", "properties": {"x": {"not": {"type": "string"}}}},
        }
    )
    result = generate(document)
    assert not result.success
    assert result.code == ""
    assert isinstance(result.exception, UnresolvableSchemaError)
    assert "Weird" in result.error_message


def test_generate_unresolved_reference() -> None:
    document = components(
        {"Broken": {"type": "object", "properties": {"a": {"$ref": "#/components/schemas/Nope"}}}}
    )
    result = generate(document)
    assert not result.success


def test_quick_generate(petstore: dict[str, Any]) -> None:
    code = quick_generate(json.dumps(petstore), package_name="pets")
    assert code.startswith('"""pets\n')


def test_quick_generate_raises_on_failure() -> None:
    document = components({"Weird": {"type": "object", "properties": {"x": {"not": {}}}}})
    with pytest.raises(RuntimeError):
        quick_generate(document)


def test_entry_points_after_freeze_are_rejected(petstore_store: SchemaStore) -> None:
    synthesizer = Synthesizer(petstore_store)
    synthesizer.add_entry_point("search request", {"type": "object", "properties": {"q": {"type": "string"}}}, True)
    synthesis = synthesizer.emit()
    assert "SearchRequest" in synthesis.names
    with pytest.raises(RegistryFrozenError):
        synthesizer.add_entry_point("late", {"type": "string"})


def test_setup_logging_installs_rich_handler() -> None:
    logger = logging.getLogger(PACKAGE_LOGGER)
    propagate = logger.propagate
    try:
        configured = setup_logging("DEBUG", console=Console(file=None, quiet=True))
        assert configured is logger
        assert any(isinstance(h, RichHandler) for h in logger.handlers)
        assert get_logger("core.typespace").name == "api_typegen.core.typespace"
    finally:
        logger.propagate = propagate
        logger.setLevel(logging.NOTSET)


def test_template_engine_errors() -> None:
    engine = create_template_engine()
    engine.add_template("hello.j2", "Hello {{ name | pascal_case }}")
    assert engine.template_exists("hello.j2")
    assert engine.render_template("hello.j2", {"name": "open api"}) == "Hello OpenApi"
    engine.add_template("bye.j2", "Bye {{ name }}")
    with pytest.raises(TemplateError):
        engine.render_template("bye.j2", {})
    with pytest.raises(TemplateError):
        engine.render_template("missing.j2", {})


def test_version() -> None:
    assert api_typegen.__version__ == "0.1.0"


def test_generate_from_url(monkeypatch: pytest.MonkeyPatch, petstore: dict[str, Any]) -> None:
    class Response:
        status_code = 200
        headers = {"content-type": "application/json"}

        def raise_for_status(self) -> None:
            pass

        def json(self) -> dict[str, Any]:
            return petstore

    monkeypatch.setattr(utils.requests, "get", lambda url, timeout: Response())
    result = generate("https://api.example.com/openapi.json", "manifest")
    assert result.success
    assert json.loads(result.code)["source"] == "https://api.example.com/openapi.json"


def test_render_string_uses_naming_filters() -> None:
    engine = create_template_engine()
    assert engine.render_string("{{ raw | struct_name }}.{{ raw | field_name }}", {"raw": "pet-status"}) == (
        "PetStatus.pet_status"
    )
    with pytest.raises(TemplateError):
        engine.render_string("{{ missing }}", {})
