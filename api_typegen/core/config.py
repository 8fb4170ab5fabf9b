"""
Configuration management for type synthesis and code generation.

Handles loading and merging configuration from JSON files, providing
defaults, provider profiles and validation for generator settings.
"""

import copy
import json
from dataclasses import MISSING, asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..logging_config import get_logger
from .naming import FORCED_STRING_FIELDS, RESERVED_FIELD_NAMES

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


# Records that callers must be able to build empty. These recur across every
# endpoint of the APIs they come from; the list is kept as data because the
# reason each entry was added is not recoverable.
DEFAULT_ALWAYS_DEFAULT_TYPES = [
    "PagesSourceHash",
    "PagesHttpsCertificate",
    "ErrorDetails",
    "EnvelopeDefinition",
    "Event",
    "User",
    "Group",
    "CalendarResource",
    "Building",
    "Repo",
    "Payload",
    "Actor",
    "File",
    "PostMailSendRequest",
    "FromEmailObject",
    "Personalizations",
    "DescriptionlessJobOptions",
    "DescriptionlessJobOptionsData",
    "DescriptionlessJobOptionsDataType",
    "SubmitJobOptions",
    "SubmitJobOptionsData",
    "SubmitJobOptionsAllOf",
    "DescriptionlessJobOptionsAllOf",
]

DEFAULT_PAGINATED_PATTERNS = ["Page", "*Page"]

DEFAULT_REQUEST_SUFFIXES = ["Request"]

DATETIME_RFC3339 = "rfc3339"
DATETIME_RFC3339_SECONDS = "rfc3339-seconds"

# Per-provider quirks, merged over the base configuration when
# ``provider_name`` matches.
PROVIDER_PROFILES: Dict[str, Dict[str, Any]] = {
    "Google Calendar": {
        # Rejects fractional seconds and the "Z" suffix on write.
        "datetime_output_format": DATETIME_RFC3339_SECONDS,
    },
    "Google Drive": {
        # Distinguishes an omitted boolean from false.
        "optional_booleans": True,
    },
    "GitHub": {
        # Branch protection needs these sent as explicit nulls to clear them.
        "keep_null_fields": [
            "required_pull_request_reviews",
            "required_status_checks",
            "restrictions",
        ],
    },
}


@dataclass
class GeneratorConfig:
    """Configuration for type synthesis and rendering."""

    # Output settings
    package_name: str = "types"

    # Source API
    provider_name: str = ""

    # Code style settings
    indent_size: int = 4
    line_ending: str = "\n"

    # Naming settings
    reserved_field_names: List[str] = field(
        default_factory=lambda: sorted(RESERVED_FIELD_NAMES)
    )
    forced_string_fields: List[str] = field(
        default_factory=lambda: sorted(FORCED_STRING_FIELDS)
    )

    # Default-constructible records
    always_default_types: List[str] = field(
        default_factory=lambda: list(DEFAULT_ALWAYS_DEFAULT_TYPES)
    )
    paginated_patterns: List[str] = field(
        default_factory=lambda: list(DEFAULT_PAGINATED_PATTERNS)
    )

    # Field policy
    request_suffixes: List[str] = field(
        default_factory=lambda: list(DEFAULT_REQUEST_SUFFIXES)
    )
    optional_booleans: bool = False
    keep_null_fields: List[str] = field(default_factory=list)
    datetime_output_format: str = DATETIME_RFC3339

    # Additional metadata
    add_comments: bool = True

    # Renderer-specific settings
    language_config: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.apply_provider_profile()

    def apply_provider_profile(self):
        """Fill settings the provider profile covers, where still at their default.

        A setting given explicitly (any value other than the field default)
        wins over the profile.
        """
        profile = PROVIDER_PROFILES.get(self.provider_name)
        if not profile:
            return
        defaults = {
            f.name: f.default if f.default is not MISSING else f.default_factory()
            for f in fields(self)
        }
        for key, value in profile.items():
            if getattr(self, key) == defaults[key]:
                setattr(self, key, copy.deepcopy(value))
        logger.debug(f"Applied provider profile for {self.provider_name}")


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Load default configurations for supported renderers."""
        self._configs["python"] = {
            "package_name": "types",
            "add_comments": True,
            "language_config": {
                "dataclass_kw_only": True,
                "dataclass_slots": False,
                "enum_case": "screaming_snake",
            },
        }

        self._configs["manifest"] = {
            "package_name": "types",
            "add_comments": True,
            "language_config": {"indent": 2},
        }

    def get_config(
        self,
        language: Optional[str] = None,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> GeneratorConfig:
        """
        Get complete configuration for a renderer.

        Args:
            language: Target renderer name (None for synthesis-only use)
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration
        """
        base_config = json.loads(json.dumps(self._configs.get(language or "", {})))

        if config_file:
            file_config = self._load_config_file(config_file)
            self._merge(base_config, file_config)

        if custom_config:
            self._merge(base_config, custom_config)

        return self._dict_to_config(base_config)

    @staticmethod
    def _merge(base: Dict[str, Any], overrides: Dict[str, Any]):
        for key, value in overrides.items():
            if key == "language_config" and isinstance(value, dict):
                base.setdefault("language_config", {}).update(value)
            else:
                base[key] = value

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        known_fields = {f.name for f in fields(GeneratorConfig)}

        config_args = {}
        language_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                language_args[key] = value

        # Unknown keys belong to the renderer.
        if language_args:
            existing = dict(config_args.get("language_config", {}))
            existing.update(language_args)
            config_args["language_config"] = existing

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(asdict(config), f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e

    def list_languages(self) -> list[str]:
        """Get list of renderers with default settings."""
        return list(self._configs.keys())

    def validate_config(self, config: GeneratorConfig) -> list[str]:
        """
        Validate a configuration.

        Returns:
            List of validation warnings
        """
        warnings = []

        if config.package_name and not config.package_name.isidentifier():
            warnings.append(f"Invalid package name: {config.package_name}")

        if config.datetime_output_format not in (
            DATETIME_RFC3339,
            DATETIME_RFC3339_SECONDS,
        ) and "%" not in config.datetime_output_format:
            warnings.append(
                f"Invalid datetime_output_format: {config.datetime_output_format}"
            )

        if config.provider_name and config.provider_name not in PROVIDER_PROFILES:
            warnings.append(f"No provider profile for: {config.provider_name}")

        return warnings


def load_config(
    language: Optional[str] = None,
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        language: Target renderer name
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration
    """
    return ConfigManager().get_config(language, custom_config, config_file)


# Example configuration file for reference
EXAMPLE_CONFIG = {
    "package_name": "calendar_types",
    "provider_name": "Google Calendar",
    "always_default_types": ["Event", "CalendarResource"],
    "paginated_patterns": ["Page", "*Page", "*List"],
    "dataclass_kw_only": True,
}
