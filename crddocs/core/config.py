"""Configuration loading for crddocs.

The configuration file is YAML and lists the repositories to document
together with per-CRD metadata:

    template_path: crd.md.j2
    source_repositories:
      - url: https://github.com/example/platform
        organization: example
        short_name: platform
        commit_reference: v1.2.0
        metadata:
          widgets.example.io:
            description: Widgets are composed of gadgets.
            hidden: false

A missing template_path falls back to the CRDDOCS_TEMPLATE_PATH environment
variable.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Union

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from crddocs.core.errors import ConfigError
from crddocs.core.schema.repository import (
    Configuration,
    CRDMetadata,
    Deprecation,
    ReplacedBy,
    SourceRepository,
)

ENV_PREFIX = "CRDDOCS"

# Shipped with the package, used when no template_path is configured
DEFAULT_TEMPLATE_PATH = Path(__file__).resolve().parent.parent / "docs" / "templates" / "crd.md.j2"


def load_config(config_path: Union[str, Path] = "config.yaml") -> Dict[str, Any]:
    """Load the raw configuration mapping from a YAML file.

    Args:
        config_path: Path to the configuration file

    Returns:
        Configuration dictionary (empty for an empty file)

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping
    """
    path = Path(config_path)

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"could not read configuration file {path}: {e}", path=path) from e

    try:
        data = YAML(typ="safe", pure=True).load(content)
    except YAMLError as e:
        raise ConfigError(f"could not parse configuration file {path}: {e}", path=path) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"configuration file {path} must hold a mapping", path=path)
    return data


def env_setting(raw: Dict[str, Any], key: str, default: str = "") -> str:
    """Return a top-level string setting, else ``CRDDOCS_<KEY>``, else ``default``."""
    value = raw.get(key)
    if value is None:
        value = os.environ.get(f"{ENV_PREFIX}_{key.upper()}")
    return default if value is None else str(value)


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def _as_flag(value: Any, key: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise TypeError(f"{key} must be a boolean, got {value!r}")
    return value


def _parse_metadata(data: Dict[str, Any]) -> CRDMetadata:
    deprecation = None
    raw_deprecation = data.get("deprecation")
    if raw_deprecation:
        replaced_by = None
        raw_replaced_by = raw_deprecation.get("replaced_by")
        if raw_replaced_by:
            replaced_by = ReplacedBy(
                full_name=str(raw_replaced_by.get("full_name") or ""),
                short_name=str(raw_replaced_by.get("short_name") or ""),
            )
        deprecation = Deprecation(
            info=str(raw_deprecation.get("info") or ""),
            replaced_by=replaced_by,
        )

    return CRDMetadata(
        hidden=_as_flag(data.get("hidden"), "hidden"),
        description=str(data.get("description") or ""),
        owner=_as_list(data.get("owner")),
        topics=_as_list(data.get("topics")),
        provider=_as_list(data.get("provider")),
        deprecation=deprecation,
    )


def _parse_repository(data: Dict[str, Any]) -> SourceRepository:
    metadata = {
        str(name): _parse_metadata(entry or {})
        for name, entry in (data.get("metadata") or {}).items()
    }
    return SourceRepository(
        url=str(data["url"]),
        organization=str(data["organization"]),
        short_name=str(data["short_name"]),
        commit_reference=str(data["commit_reference"]),
        metadata=metadata,
    )


def read_configuration(config_path: Union[str, Path]) -> Configuration:
    """Read and validate the configuration file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Parsed Configuration

    Raises:
        ConfigError: If the file cannot be loaded or an entry is malformed
    """
    raw = load_config(config_path)

    entries = raw.get("source_repositories") or []
    if not isinstance(entries, list):
        raise ConfigError(f"source_repositories in {config_path} must be a list", path=config_path)

    repositories = []
    for i, entry in enumerate(entries):
        try:
            repositories.append(_parse_repository(entry))
        except (KeyError, TypeError, AttributeError) as e:
            raise ConfigError(
                f"source_repositories[{i}] in {config_path} is malformed: {e!r}", path=config_path
            ) from e

    return Configuration(
        template_path=env_setting(raw, "template_path"),
        source_repositories=repositories,
    )


def resolve_template_path(config_path: Union[str, Path], template_path: str) -> Path:
    """Resolve the configured template path relative to the config file.

    Args:
        config_path: Path of the configuration file
        template_path: Template path as configured (may be empty)

    Returns:
        Template path; the packaged default when none is configured
    """
    if not template_path:
        return DEFAULT_TEMPLATE_PATH
    return Path(config_path).parent / template_path
