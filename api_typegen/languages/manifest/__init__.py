"""
JSON manifest generator module.

Describes synthesized types for consumers written in other languages.
"""

from .generator import MANIFEST_VERSION, ManifestGenerator

__all__ = ["ManifestGenerator", "MANIFEST_VERSION"]
