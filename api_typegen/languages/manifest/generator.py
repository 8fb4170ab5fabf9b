"""
Manifest generator implementation.

Writes the synthesized definitions as a language-neutral JSON document:
one entry per type with its fields, type expressions and serialization
policies. Endpoint generators read it to pick request and response types.
"""

import json
from typing import Any, Dict, List

from ...core.config import GeneratorConfig
from ...core.generator import CodeGenerator
from ...core.synthesizer import Synthesis

MANIFEST_VERSION = 1


class ManifestGenerator(CodeGenerator):
    """Renders definitions as a JSON manifest."""

    def __init__(self, config: GeneratorConfig):
        super().__init__(config)
        self.indent = config.language_config.get("indent", config.indent_size)

    @property
    def language_name(self) -> str:
        return "manifest"

    @property
    def file_extension(self) -> str:
        return ".json"

    def build_manifest(self, synthesis: Synthesis) -> Dict[str, Any]:
        """The manifest as plain data."""
        types: List[Dict[str, Any]] = []
        for definition in synthesis.definitions:
            entry = definition.to_dict()
            entry["supports_default"] = synthesis.supports_default(definition.name)
            if not self.config.add_comments:
                entry.pop("description", None)
                for field in entry.get("fields", []):
                    field.pop("description", None)
            types.append(entry)

        return {
            "version": MANIFEST_VERSION,
            "package": self.config.package_name,
            "provider": self.config.provider_name or None,
            "source": synthesis.typespace.store.source,
            "types": types,
            "warnings": list(synthesis.warnings),
        }

    def generate(self, synthesis: Synthesis) -> str:
        return json.dumps(self.build_manifest(synthesis), indent=self.indent, ensure_ascii=False)
