"""
Data models shared across crddocs: configuration and annotation records.
"""

from crddocs.core.schema.annotation import AnnotationRecord, filter_for_crd
from crddocs.core.schema.repository import (
    Configuration,
    CRDMetadata,
    Deprecation,
    ReplacedBy,
    SourceRepository,
)

__all__ = [
    "AnnotationRecord",
    "filter_for_crd",
    "Configuration",
    "CRDMetadata",
    "Deprecation",
    "ReplacedBy",
    "SourceRepository",
]
