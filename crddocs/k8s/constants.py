"""Kubernetes and Crossplane constants shared across the k8s modules.

Kept in one place so the reader, the merger and the generator agree on
kind names without importing each other.
"""

# Crossplane composite resource definitions
XRD_API_GROUP = "apiextensions.crossplane.io"
XRD_API_VERSION = "apiextensions.crossplane.io/v1"
XRD_KIND = "CompositeResourceDefinition"

# Kubernetes custom resource definitions
CRD_API_VERSION = "apiextensions.k8s.io/v1"
CRD_KIND = "CustomResourceDefinition"

# Every CRD derived from an XRD is listed under this category
CATEGORY_COMPOSITE = "composite"

SCOPE_CLUSTER = "Cluster"
