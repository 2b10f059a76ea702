"""Collect annotation documentation from Go source comments.

Repositories document the annotations their CRDs support as comments on
string constants, for example::

    // support:
    //   - crd: widgets.example.io
    //     apiversion: v1alpha1
    //     release: Since 1.4.0
    // documentation:
    //   Sets the minimum number of gadgets kept warm.
    const WidgetWarmGadgets = "alpha.example.io/warm-gadgets"

Each entry of the ``support`` list becomes one AnnotationRecord.
"""

import logging
import re
import textwrap
from pathlib import Path
from typing import List, Optional, Union

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from crddocs.core.errors import AnnotationError
from crddocs.core.schema.annotation import AnnotationRecord

logger = logging.getLogger(__name__)

COMMENT_LINE = re.compile(r"^\s*//\s?(.*)$")
STRING_CONSTANT = re.compile(r'^\s*(?:const\s+)?([A-Za-z_]\w*)\s*(?:string\s*)?=\s*"([^"]*)"')


def _parse_comment(comment: List[str], annotation: str, source: Path) -> List[AnnotationRecord]:
    """Turn one doc comment into records; empty when it has no support list."""
    keys = [line.strip() for line in comment]
    if "support:" not in keys:
        return []

    support_start = keys.index("support:") + 1
    doc_start: Optional[int] = keys.index("documentation:") if "documentation:" in keys else None
    support_end = doc_start if doc_start is not None and doc_start >= support_start else len(comment)

    support_text = textwrap.dedent("\n".join(comment[support_start:support_end]))
    try:
        support = YAML(typ="safe", pure=True).load(support_text) or []
    except YAMLError as e:
        raise AnnotationError(f"invalid support block for {annotation} in {source}: {e}") from e
    if not isinstance(support, list):
        raise AnnotationError(f"support block for {annotation} in {source} must be a list")

    documentation = ""
    if doc_start is not None:
        doc_end = support_start - 1 if support_start - 1 > doc_start else len(comment)
        documentation = textwrap.dedent("\n".join(comment[doc_start + 1:doc_end])).strip()

    records = []
    for entry in support:
        if not isinstance(entry, dict) or not entry.get("crd"):
            raise AnnotationError(f"support entry for {annotation} in {source} has no crd")
        records.append(AnnotationRecord(
            annotation=annotation,
            crd_name=str(entry["crd"]),
            crd_version=str(entry.get("apiversion") or ""),
            release=str(entry.get("release") or ""),
            documentation=documentation,
        ))
    return records


def parse_source(content: str, source: Union[str, Path] = "<string>") -> List[AnnotationRecord]:
    """Extract annotation records from the text of one Go file.

    Raises:
        AnnotationError: If a support block is malformed
    """
    records: List[AnnotationRecord] = []
    comment: List[str] = []

    for line in content.splitlines():
        match = COMMENT_LINE.match(line)
        if match:
            comment.append(match.group(1))
            continue

        constant = STRING_CONSTANT.match(line)
        if constant and comment:
            records.extend(_parse_comment(comment, constant.group(2), Path(source)))
        comment = []

    return records


def collect_annotations(folder: Union[str, Path]) -> List[AnnotationRecord]:
    """Collect annotation records from all Go files below ``folder``.

    Args:
        folder: Directory holding the annotation Go sources

    Returns:
        Records from all files, in sorted file order

    Raises:
        AnnotationError: If the folder does not exist, a file cannot be
            read, or a support block is malformed
    """
    root = Path(folder)
    if not root.is_dir():
        raise AnnotationError(f"annotations folder {root} does not exist")

    records: List[AnnotationRecord] = []
    for path in sorted(root.rglob("*.go")):
        if path.name.endswith("_test.go"):
            continue
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise AnnotationError(f"could not read {path}: {e}") from e
        found = parse_source(content, path)
        logger.debug(f"Found {len(found)} annotation records in {path}")
        records.extend(found)

    return records
