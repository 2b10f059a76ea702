"""Shared helpers for building Kubernetes object references."""

from crddocs.k8s.resources import OwnerReference


def typed_reference_to(obj, api_version: str, kind: str) -> OwnerReference:
    """Build a reference to ``obj`` by type and name.

    Args:
        obj: Any object exposing ``metadata.name`` and ``metadata.uid``
        api_version: API version of the referenced object
        kind: Kind of the referenced object

    Returns:
        OwnerReference that is not yet a controller reference
    """
    return OwnerReference(
        api_version=api_version,
        kind=kind,
        name=obj.metadata.name,
        uid=obj.metadata.uid,
    )


def as_controller(ref: OwnerReference) -> OwnerReference:
    """Mark a reference as the controlling owner."""
    return OwnerReference(
        api_version=ref.api_version,
        kind=ref.kind,
        name=ref.name,
        uid=ref.uid,
        controller=True,
        block_owner_deletion=True,
    )
