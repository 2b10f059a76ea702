"""Read Kubernetes definition objects from multi-document YAML files."""

import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from crddocs.core.errors import FileReadError, ParseError
from crddocs.k8s.constants import CRD_KIND, XRD_KIND
from crddocs.k8s.resources import CompositeResourceDefinition, CustomResourceDefinition

# A document separator is a line holding only "---"
DOCUMENT_SEPARATOR = re.compile(r"^---[ \t]*$", re.MULTILINE)

# Kinds the reader knows how to decode
KNOWN_KINDS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    XRD_KIND: CompositeResourceDefinition.from_dict,
    CRD_KIND: CustomResourceDefinition.from_dict,
}


def _create_yaml_instance() -> YAML:
    """Create a safe ruamel.yaml loader for definition files."""
    return YAML(typ="safe", pure=True)


def split_documents(content: str) -> List[str]:
    """Split YAML text into its documents on ``---`` separator lines."""
    return DOCUMENT_SEPARATOR.split(content)


def decode(document: str, yaml: Optional[YAML] = None) -> Any:
    """Decode one YAML document into a typed definition object.

    Args:
        document: Text of a single YAML document
        yaml: Loader to use (created when omitted)

    Returns:
        Decoded object, or None for an empty document

    Raises:
        ParseError: If the text is not valid YAML, is not a mapping, has
            an unregistered kind, or lacks required fields
    """
    yaml = yaml or _create_yaml_instance()
    try:
        manifest = yaml.load(document)
    except YAMLError as e:
        raise ParseError(f"invalid YAML: {e}") from e

    if manifest is None:
        return None
    if not isinstance(manifest, dict):
        raise ParseError(f"expected a mapping, got {type(manifest).__name__}")

    kind = manifest.get("kind")
    factory = KNOWN_KINDS.get(kind)
    if factory is None:
        raise ParseError(f"no kind {kind!r} is registered")

    try:
        return factory(manifest)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ParseError(f"cannot decode {kind}: {e}") from e


def read_definitions(file_path: Union[str, Path]) -> List[Any]:
    """Read all definition objects from a YAML file.

    The file is all-or-nothing: any document that fails to decode fails
    the whole file. Empty documents (for example after a trailing
    separator) are skipped.

    Args:
        file_path: Path to a YAML file

    Returns:
        Decoded objects in document order

    Raises:
        FileReadError: If the file cannot be read
        ParseError: If any document cannot be decoded
    """
    path = Path(file_path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(f"could not read CRD file {path}: {e}", path=path) from e

    yaml = _create_yaml_instance()
    definitions = []
    for document in split_documents(content):
        try:
            obj = decode(document, yaml)
        except ParseError as e:
            raise ParseError(f"could not parse CRD file {path}: {e}", path=path) from e
        if obj is not None:
            definitions.append(obj)

    return definitions
