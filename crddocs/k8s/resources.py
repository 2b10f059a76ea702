"""Typed Kubernetes objects handled by crddocs.

CompositeResourceDefinition (XRD) is the input read from a repository;
CustomResourceDefinition (CRD) is what the merger derives from it. Both
are plain dataclasses built from decoded YAML mappings, and both can be
turned back into manifest-shaped dicts.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from crddocs.k8s.constants import CRD_API_VERSION, CRD_KIND, XRD_API_VERSION, XRD_KIND

Schema = Dict[str, Any]


def _flag(data: Dict[str, Any], key: str) -> bool:
    """Read an optional boolean field, rejecting quoted or numeric values."""
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be a boolean, got {value!r}")
    return value


@dataclass(frozen=True)
class OwnerReference:
    """Reference from a derived object back to the object that produced it."""
    api_version: str
    kind: str
    name: str
    uid: str = ""
    controller: bool = False
    block_owner_deletion: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "uid": self.uid,
            "controller": self.controller,
            "blockOwnerDeletion": self.block_owner_deletion,
        }


@dataclass(frozen=True)
class ObjectMeta:
    """Subset of Kubernetes object metadata used by crddocs."""
    name: str
    uid: str = ""
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    owner_references: List[OwnerReference] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ObjectMeta":
        data = data or {}
        return cls(
            name=data["name"],
            uid=str(data.get("uid") or ""),
            labels=dict(data.get("labels") or {}),
            annotations=dict(data.get("annotations") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"name": self.name}
        if self.uid:
            result["uid"] = self.uid
        if self.labels:
            result["labels"] = dict(self.labels)
        if self.annotations:
            result["annotations"] = dict(self.annotations)
        if self.owner_references:
            result["ownerReferences"] = [ref.to_dict() for ref in self.owner_references]
        return result


@dataclass(frozen=True)
class Names:
    """Kind, plural and singular names of a resource type."""
    kind: str
    plural: str
    singular: str = ""
    list_kind: str = ""
    short_names: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Names":
        kind = data["kind"]
        return cls(
            kind=kind,
            plural=data["plural"],
            # Kubernetes defaults the singular name to the lowercased kind
            singular=data.get("singular") or kind.lower(),
            list_kind=data.get("listKind") or "",
            short_names=list(data.get("shortNames") or []),
            categories=list(data.get("categories") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "kind": self.kind,
            "plural": self.plural,
            "singular": self.singular,
        }
        if self.list_kind:
            result["listKind"] = self.list_kind
        if self.short_names:
            result["shortNames"] = list(self.short_names)
        if self.categories:
            result["categories"] = list(self.categories)
        return result


@dataclass(frozen=True)
class CompositeResourceValidation:
    """Validation block of an XRD version.

    The openAPIV3Schema is kept as raw JSON text, exactly as an API server
    would store an embedded raw extension. It is only parsed when a CRD is
    derived from it.
    """
    open_api_v3_schema: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompositeResourceValidation":
        raw = data.get("openAPIV3Schema")
        if isinstance(raw, (str, bytes)):
            text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        else:
            text = json.dumps(raw, default=str)
        return cls(open_api_v3_schema=text)


@dataclass(frozen=True)
class CompositeResourceDefinitionVersion:
    """One served version of an XRD."""
    name: str
    served: bool
    referenceable: bool
    additional_printer_columns: List[Dict[str, Any]] = field(default_factory=list)
    schema: Optional[CompositeResourceValidation] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompositeResourceDefinitionVersion":
        schema = data.get("schema")
        return cls(
            name=data["name"],
            served=_flag(data, "served"),
            referenceable=_flag(data, "referenceable"),
            additional_printer_columns=[dict(c) for c in data.get("additionalPrinterColumns") or []],
            schema=CompositeResourceValidation.from_dict(schema) if schema else None,
        )


@dataclass(frozen=True)
class CompositeResourceDefinition:
    """Crossplane CompositeResourceDefinition as read from a YAML file.

    Attributes:
        metadata: Object metadata; ``metadata.name`` is the dedup key
        group: API group of the composite resource
        names: Names of the composite resource
        versions: Versions in declaration order (at least one)
        claim_names: Names of the optional namespaced claim
    """
    metadata: ObjectMeta
    group: str
    names: Names
    versions: List[CompositeResourceDefinitionVersion]
    claim_names: Optional[Names] = None

    api_version = XRD_API_VERSION
    kind = XRD_KIND

    @property
    def name(self) -> str:
        return self.metadata.name

    @classmethod
    def from_dict(cls, manifest: Dict[str, Any]) -> "CompositeResourceDefinition":
        """Build an XRD from a decoded manifest.

        Raises:
            KeyError: If a required field is missing
            ValueError: If the definition declares no versions
        """
        spec = manifest["spec"]
        versions = [CompositeResourceDefinitionVersion.from_dict(v) for v in spec.get("versions") or []]
        if not versions:
            raise ValueError(f"{XRD_KIND} {manifest['metadata']['name']!r} declares no versions")
        claim_names = spec.get("claimNames")
        return cls(
            metadata=ObjectMeta.from_dict(manifest["metadata"]),
            group=spec["group"],
            names=Names.from_dict(spec["names"]),
            versions=versions,
            claim_names=Names.from_dict(claim_names) if claim_names else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        versions = []
        for v in self.versions:
            version: Dict[str, Any] = {
                "name": v.name,
                "served": v.served,
                "referenceable": v.referenceable,
            }
            if v.additional_printer_columns:
                version["additionalPrinterColumns"] = [dict(c) for c in v.additional_printer_columns]
            if v.schema is not None:
                version["schema"] = {"openAPIV3Schema": v.schema.open_api_v3_schema}
            versions.append(version)
        spec: Dict[str, Any] = {
            "group": self.group,
            "names": self.names.to_dict(),
            "versions": versions,
        }
        if self.claim_names is not None:
            spec["claimNames"] = self.claim_names.to_dict()
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
            "spec": spec,
        }


@dataclass
class CustomResourceDefinitionVersion:
    """One version of a CRD, carrying its full validation schema."""
    name: str
    served: bool
    storage: bool
    schema: Schema
    additional_printer_columns: List[Dict[str, Any]] = field(default_factory=list)
    subresources: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomResourceDefinitionVersion":
        return cls(
            name=data["name"],
            served=_flag(data, "served"),
            storage=_flag(data, "storage"),
            schema=dict((data.get("schema") or {}).get("openAPIV3Schema") or {}),
            additional_printer_columns=[dict(c) for c in data.get("additionalPrinterColumns") or []],
            subresources=dict(data.get("subresources") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "name": self.name,
            "served": self.served,
            "storage": self.storage,
            "schema": {"openAPIV3Schema": self.schema},
        }
        if self.additional_printer_columns:
            result["additionalPrinterColumns"] = self.additional_printer_columns
        if self.subresources:
            result["subresources"] = self.subresources
        return result


@dataclass
class CustomResourceDefinition:
    """Kubernetes CustomResourceDefinition."""
    metadata: ObjectMeta
    group: str
    names: Names
    scope: str
    versions: List[CustomResourceDefinitionVersion] = field(default_factory=list)

    api_version = CRD_API_VERSION
    kind = CRD_KIND

    @property
    def name(self) -> str:
        return self.metadata.name

    @classmethod
    def from_dict(cls, manifest: Dict[str, Any]) -> "CustomResourceDefinition":
        spec = manifest["spec"]
        return cls(
            metadata=ObjectMeta.from_dict(manifest["metadata"]),
            group=spec["group"],
            names=Names.from_dict(spec["names"]),
            scope=spec.get("scope", "Namespaced"),
            versions=[CustomResourceDefinitionVersion.from_dict(v) for v in spec.get("versions") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the CRD as a manifest dict, ready for YAML or JSON output."""
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
            "spec": {
                "group": self.group,
                "names": self.names.to_dict(),
                "scope": self.scope,
                "versions": [v.to_dict() for v in self.versions],
            },
        }
