"""
Output renderers.

This module contains the renderers for synthesized type definitions.
"""

from .manifest import ManifestGenerator
from .python import PythonGenerator, create_python_generator

__all__ = ["ManifestGenerator", "PythonGenerator", "create_python_generator"]
