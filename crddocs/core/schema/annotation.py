"""Annotation documentation records."""

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class AnnotationRecord:
    """Documentation of one annotation as supported by one CRD.

    Attributes:
        annotation: Annotation key, e.g. ``alpha.example.io/feature``
        crd_name: Full name of the CRD that supports the annotation
        crd_version: API version of the CRD, empty when all versions apply
        release: Release note, e.g. "Since 14.0.0"
        documentation: Explanatory text
    """
    annotation: str
    crd_name: str
    crd_version: str = ""
    release: str = ""
    documentation: str = ""


def filter_for_crd(
    records: Iterable[AnnotationRecord], crd_name: str, version: str = ""
) -> List[AnnotationRecord]:
    """Return the records that apply to a CRD.

    Args:
        records: All records collected from a repository
        crd_name: Full CRD name to match
        version: When given, also require a matching API version

    Returns:
        Matching records in their original order
    """
    return [
        r for r in records
        if r.crd_name == crd_name and (not version or r.crd_version == version)
    ]
