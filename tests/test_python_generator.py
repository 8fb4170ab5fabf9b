"""Tests for the Python dataclass renderer."""

from __future__ import annotations

import dataclasses
import sys
import types
from typing import Any

import pytest

from api_typegen.core.config import load_config
from api_typegen.core.generator import generate_code
from api_typegen.core.synthesizer import synthesize
from api_typegen.languages.python import (
    PythonGenerator,
    create_python_generator,
    create_strict_dataclass_generator,
)


def _render(document: dict[str, Any], **overrides: Any) -> str:
    config = load_config("python", custom_config=overrides or None)
    result = generate_code(PythonGenerator(config), synthesize(document, config))
    assert result.success, result.error_message
    return result.code


def _load(code: str, monkeypatch: pytest.MonkeyPatch) -> types.ModuleType:
    """Execute generated code as an importable module."""
    module = types.ModuleType("generated_types")
    monkeypatch.setitem(sys.modules, module.__name__, module)
    exec(compile(code, "generated_types.py", "exec"), module.__dict__)
    return module


def test_module_header_and_imports(petstore: dict[str, Any]) -> None:
    code = _render(petstore)
    assert code.startswith('"""types\n')
    assert "from __future__ import annotations" in code
    assert "import dataclasses" in code
    assert "from datetime import date, datetime" in code
    assert "from enum import Enum" in code


def test_record_rendering(petstore: dict[str, Any]) -> None:
    code = _render(petstore)
    assert "@dataclasses.dataclass(kw_only=True)\nclass Pet:\n" in code
    assert '    """A pet."""' in code
    assert "    id: int = dataclasses.field(default=0, metadata=" in code
    assert "    tags: list[str] = dataclasses.field(default_factory=list, metadata=" in code
    assert "    owner: Owner | None = dataclasses.field(default=None, metadata=" in code
    assert "    status: PetStatus = dataclasses.field(default=PetStatus.NOOP, metadata=" in code


def test_enum_rendering(petstore: dict[str, Any]) -> None:
    code = _render(petstore)
    assert "class PetStatus(str, Enum):" in code
    assert '    AVAILABLE = "available"' in code
    assert '    NOOP = ""' in code
    assert "def _missing_(cls, value):" in code


def test_enums_precede_records(petstore: dict[str, Any]) -> None:
    code = _render(petstore)
    assert code.index("class PetStatus(") < code.index("class Pet:")


def test_generated_module_runs(petstore: dict[str, Any], monkeypatch: pytest.MonkeyPatch) -> None:
    """The generated module imports and its types behave as declared."""
    module = _load(_render(petstore), monkeypatch)

    pet = module.Pet()
    assert pet.id == 0
    assert pet.tags == []
    assert pet.status is module.PetStatus.NOOP
    assert pet.status.is_noop

    lost = module.PetStatus("lost")
    assert lost.is_fallthrough
    assert lost.value == "lost"
    assert module.PetStatus("sold") is module.PetStatus.SOLD

    request = module.CreatePetRequest()
    assert request.vaccinated is None

    page = module.PetResultsPage()
    assert page.items == []


def test_required_fields_have_no_default(shapes: dict[str, Any], monkeypatch: pytest.MonkeyPatch) -> None:
    module = _load(_render(shapes), monkeypatch)
    with pytest.raises(TypeError):
        module.Drawing()
    circle = module.ShapeCircle(data=module.ShapeCircleData(radius=2.0))
    assert circle.kind is module.ShapeCircleKind.NOOP


def test_tagged_union_rendering(shapes: dict[str, Any], monkeypatch: pytest.MonkeyPatch) -> None:
    code = _render(shapes)
    assert 'Shape = Union["ShapeCircle", "ShapeSquare"]' in code
    assert 'SHAPE_TAG = "kind"' in code
    assert 'SHAPE_CONTENT = "data"' in code

    module = _load(code, monkeypatch)
    assert module.SHAPE_VARIANTS == {"circle": module.ShapeCircle, "square": module.ShapeSquare}


def test_field_metadata_carries_wire_names(petstore: dict[str, Any], monkeypatch: pytest.MonkeyPatch) -> None:
    module = _load(_render(petstore), monkeypatch)
    metadata = {f.name: dict(f.metadata) for f in dataclasses.fields(module.Pet)}
    assert metadata["updated_at"] == {"wire_name": "updated_at", "skip": "is_none"}
    assert metadata["id"]["skip"] == "is_zero"


def test_positional_dataclasses_order_required_first(shapes: dict[str, Any]) -> None:
    code = _render(shapes, dataclass_kw_only=False)
    assert "@dataclasses.dataclass\nclass ShapeCircle:\n    data: ShapeCircleData" in code


def test_comments_can_be_disabled(petstore: dict[str, Any]) -> None:
    code = _render(petstore, add_comments=False)
    assert '"""A pet."""' not in code


def test_output_is_deterministic(petstore: dict[str, Any]) -> None:
    assert _render(petstore) == _render(petstore)


def test_flattened_record_warning() -> None:
    document = {
        "components": {
            "schemas": {
                "A": {"type": "object", "properties": {"a": {"type": "string"}}},
                "B": {"type": "object", "properties": {"b": {"type": "string"}}},
                "Both": {"allOf": [{"$ref": "#/components/schemas/A"}, {"$ref": "#/components/schemas/B"}]},
            }
        }
    }
    config = load_config("python")
    result = generate_code(PythonGenerator(config), synthesize(document, config))
    assert any("Both flattens" in warning for warning in result.warnings)
    assert result.metadata["record_count"] == 3


def test_create_python_generator_defaults() -> None:
    generator = create_python_generator()
    assert generator.language_name == "python"
    assert generator.file_extension == ".py"
    assert generator.python_config.dataclass_kw_only


def test_strict_dataclass_generator(petstore: dict[str, Any], monkeypatch: pytest.MonkeyPatch) -> None:
    """Frozen, slotted records reject attribute assignment."""
    generator = create_strict_dataclass_generator(package_name="pets")
    result = generate_code(generator, synthesize(petstore, generator.config))
    assert result.success, result.error_message
    assert "@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)" in result.code

    module = _load(result.code, monkeypatch)
    page = module.PetResultsPage()
    with pytest.raises(dataclasses.FrozenInstanceError):
        page.next_page = "2"
