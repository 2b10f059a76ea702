"""Generated schema fragments injected into every composite resource CRD.

These tables mirror what Crossplane adds to a CRD when it derives one from
a CompositeResourceDefinition. They are wrapped in a frozen Boilerplate
value so the merger can take them as an argument. Every accessor returns
a deep copy, so callers may mutate the result freely.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

Schema = Dict[str, Any]


def _string() -> Schema:
    return {"type": "string"}


BASE_PROPS: Schema = {
    "type": "object",
    "required": ["spec"],
    "properties": {
        "apiVersion": _string(),
        "kind": _string(),
        # api-server validates metadata itself
        "metadata": {"type": "object"},
        "spec": {"type": "object", "properties": {}},
        "status": {"type": "object", "properties": {}},
    },
}

COMPOSITE_SPEC_PROPS: Dict[str, Schema] = {
    "compositionRef": {
        "type": "object",
        "required": ["name"],
        "properties": {"name": _string()},
    },
    "compositionSelector": {
        "type": "object",
        "required": ["matchLabels"],
        "properties": {
            "matchLabels": {
                "type": "object",
                "additionalProperties": _string(),
            },
        },
    },
    "claimRef": {
        "type": "object",
        "required": ["apiVersion", "kind", "namespace", "name"],
        "properties": {
            "apiVersion": _string(),
            "kind": _string(),
            "namespace": _string(),
            "name": _string(),
        },
    },
    "resourceRefs": {
        "type": "array",
        "items": {
            "type": "object",
            "required": ["apiVersion", "kind", "name"],
            "properties": {
                "apiVersion": _string(),
                "name": _string(),
                "kind": _string(),
            },
        },
    },
    "writeConnectionSecretToRef": {
        "type": "object",
        "required": ["name", "namespace"],
        "properties": {
            "name": _string(),
            "namespace": _string(),
        },
    },
}

COMPOSITE_STATUS_PROPS: Dict[str, Schema] = {
    "conditions": {
        "description": "Conditions of the resource.",
        "type": "array",
        "items": {
            "type": "object",
            "required": ["lastTransitionTime", "reason", "status", "type"],
            "properties": {
                "lastTransitionTime": {"type": "string", "format": "date-time"},
                "message": _string(),
                "reason": _string(),
                "status": _string(),
                "type": _string(),
            },
        },
    },
    "connectionDetails": {
        "type": "object",
        "properties": {
            "lastPublishedTime": {"type": "string", "format": "date-time"},
        },
    },
}

COMPOSITE_PRINTER_COLUMNS: List[Dict[str, str]] = [
    {
        "name": "READY",
        "type": "string",
        "jsonPath": ".status.conditions[?(@.type=='Ready')].status",
    },
    {
        "name": "COMPOSITION",
        "type": "string",
        "jsonPath": ".spec.compositionRef.name",
    },
    {
        "name": "AGE",
        "type": "date",
        "jsonPath": ".metadata.creationTimestamp",
    },
]


@dataclass(frozen=True)
class Boilerplate:
    """Read-only table of generated CRD fragments.

    Attributes:
        base: Top-level openAPIV3Schema envelope; must hold ``spec`` and
              ``status`` object properties
        spec_props: Properties written into ``spec`` after the user's own
        status_props: Properties written into ``status`` after the user's own
        printer_columns: Columns appended after the user's printer columns
        spec_required: Required ``spec`` fields appended after the user's list
    """
    base: Schema = field(default_factory=lambda: copy.deepcopy(BASE_PROPS))
    spec_props: Dict[str, Schema] = field(default_factory=lambda: copy.deepcopy(COMPOSITE_SPEC_PROPS))
    status_props: Dict[str, Schema] = field(default_factory=lambda: copy.deepcopy(COMPOSITE_STATUS_PROPS))
    printer_columns: List[Dict[str, str]] = field(
        default_factory=lambda: copy.deepcopy(COMPOSITE_PRINTER_COLUMNS)
    )
    spec_required: Tuple[str, ...] = ()

    def base_props(self) -> Schema:
        """Return a fresh copy of the schema envelope."""
        return copy.deepcopy(self.base)

    def composite_spec_props(self) -> Dict[str, Schema]:
        return copy.deepcopy(self.spec_props)

    def composite_status_props(self) -> Dict[str, Schema]:
        return copy.deepcopy(self.status_props)

    def composite_printer_columns(self) -> List[Dict[str, str]]:
        return copy.deepcopy(self.printer_columns)

    def composite_spec_required(self) -> List[str]:
        return list(self.spec_required)


DEFAULT_BOILERPLATE = Boilerplate()
