"""Render CRD documentation pages with Jinja2 templates."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from crddocs.core.errors import EmitError
from crddocs.core.schema.annotation import AnnotationRecord
from crddocs.core.schema.repository import CRDMetadata
from crddocs.k8s.resources import CustomResourceDefinition

logger = logging.getLogger(__name__)


@dataclass
class Property:
    """One row in the property table of a version.

    Attributes:
        path: Dotted path from the schema root, e.g. ``.spec.replicas``;
              array items are written as ``[*]``
        name: Last path segment
        depth: Nesting level, 1 for top-level properties
        type: JSON schema type
        description: Property description
        default: Default value, if any
        enum: Allowed values, if restricted
        required: Whether the parent object lists this property as required
    """
    path: str
    name: str
    depth: int
    type: str = ""
    description: str = ""
    default: Any = None
    enum: List[Any] = field(default_factory=list)
    required: bool = False


@dataclass
class SchemaVersion:
    """Per-version data handed to the template."""
    version: str
    served: bool
    storage: bool
    properties: List[Property]
    annotations: List[AnnotationRecord]
    example_cr: str = ""


def flatten_properties(
    schema: Dict[str, Any], path: str = "", depth: int = 0, required: bool = False
) -> List[Property]:
    """Flatten a JSON schema into property rows sorted by path.

    Args:
        schema: JSON schema object to walk
        path: Path of ``schema`` itself (empty for the root)
        depth: Depth of ``schema`` itself (0 for the root)
        required: Whether ``schema`` is required by its parent

    Returns:
        Rows for ``schema`` (unless it is the root) and all its descendants
    """
    rows: List[Property] = []
    if path:
        rows.append(Property(
            path=path,
            name=path.rsplit(".", 1)[-1],
            depth=depth,
            type=str(schema.get("type") or ""),
            description=str(schema.get("description") or "").strip(),
            default=schema.get("default"),
            enum=list(schema.get("enum") or []),
            required=required,
        ))

    required_names = set(schema.get("required") or [])
    for name in sorted(schema.get("properties") or {}):
        rows.extend(flatten_properties(
            schema["properties"][name],
            path=f"{path}.{name}",
            depth=depth + 1,
            required=name in required_names,
        ))

    items = schema.get("items")
    if isinstance(items, dict):
        rows.extend(flatten_properties(items, path=f"{path}[*]", depth=depth + 1))

    return rows


def page_file_name(crd: CustomResourceDefinition) -> str:
    return f"{crd.names.plural}.{crd.group}.md"


def build_page_data(
    crd: CustomResourceDefinition,
    annotations: List[AnnotationRecord],
    metadata: CRDMetadata,
    example_crs: Dict[str, str],
    repo_url: str,
    repo_ref: str,
) -> Dict[str, Any]:
    """Assemble the template context for one CRD."""
    versions = []
    for v in crd.versions:
        versions.append(SchemaVersion(
            version=v.name,
            served=v.served,
            storage=v.storage,
            properties=flatten_properties(v.schema),
            annotations=[a for a in annotations if not a.crd_version or a.crd_version == v.name],
            example_cr=example_crs.get(v.name, ""),
        ))

    return {
        "title": crd.names.kind,
        "description": metadata.description,
        "full_name": crd.name,
        "short_name": crd.names.plural,
        "group": crd.group,
        "scope": crd.scope,
        "names": crd.names,
        "metadata": metadata,
        "owners": metadata.owner,
        "topics": metadata.topics,
        "providers": metadata.provider,
        "deprecation": metadata.deprecation,
        "annotations": annotations,
        "versions": versions,
        "source_repository": repo_url,
        "source_repository_ref": repo_ref,
    }


def render_page(template_path: Union[str, Path], data: Dict[str, Any]) -> str:
    """Render the page template with ``data``."""
    template_file = Path(template_path)
    env = Environment(
        loader=FileSystemLoader(str(template_file.parent)),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    return env.get_template(template_file.name).render(**data)


def write_page(
    crd: CustomResourceDefinition,
    annotations: List[AnnotationRecord],
    metadata: CRDMetadata,
    example_crs: Dict[str, str],
    output_folder: Union[str, Path],
    repo_url: str,
    repo_ref: str,
    template_path: Union[str, Path],
) -> Path:
    """Render and write the documentation page for one CRD.

    Args:
        crd: Derived CRD to document
        annotations: Annotation records that apply to this CRD
        metadata: Configured metadata of the CRD
        example_crs: Example custom resources keyed by version
        output_folder: Directory the page is written to
        repo_url: URL of the source repository
        repo_ref: Commit reference the CRD was read at
        template_path: Jinja2 template file

    Returns:
        Path of the written page

    Raises:
        EmitError: If rendering or writing fails
    """
    try:
        data = build_page_data(crd, annotations, metadata, example_crs, repo_url, repo_ref)
    except (TypeError, AttributeError, ValueError) as e:
        raise EmitError(f"could not build page data for {crd.name}: {e}", name=crd.name) from e

    try:
        content = render_page(template_path, data)
    except TemplateError as e:
        raise EmitError(f"could not render page for {crd.name} with {template_path}: {e}", name=crd.name) from e

    output_path = Path(output_folder) / page_file_name(crd)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise EmitError(f"could not write page for {crd.name} to {output_path}: {e}", name=crd.name) from e

    logger.info(f"Wrote {output_path}")
    return output_path
