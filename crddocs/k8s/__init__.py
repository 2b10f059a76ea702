"""Kubernetes domain support for crddocs.

This package holds the Kubernetes-specific pieces of the pipeline:
- resources: XRD and CRD dataclasses
- reader: multi-document YAML reader for definition files
- composite: XRD -> CRD derivation
- xcrd: generated boilerplate merged into every derived CRD
"""

from crddocs.k8s.composite import derive_crd
from crddocs.k8s.reader import read_definitions
from crddocs.k8s.resources import CompositeResourceDefinition, CustomResourceDefinition

__all__ = [
    "derive_crd",
    "read_definitions",
    "CompositeResourceDefinition",
    "CustomResourceDefinition",
]
