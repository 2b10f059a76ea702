"""Derive a CustomResourceDefinition from a CompositeResourceDefinition.

The user's schema fragments are merged into the generated boilerplate from
crddocs.k8s.xcrd, one version at a time. The merge is a pure function:
the input XRD is never modified and the same input always yields the same
CRD.
"""

import copy
import json
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from crddocs.core.errors import SchemaParseError
from crddocs.k8s.constants import CATEGORY_COMPOSITE, SCOPE_CLUSTER, XRD_API_VERSION, XRD_KIND
from crddocs.k8s.resources import (
    CompositeResourceDefinition,
    CompositeResourceValidation,
    CustomResourceDefinition,
    CustomResourceDefinitionVersion,
    ObjectMeta,
)
from crddocs.k8s.utils import as_controller, typed_reference_to
from crddocs.k8s.xcrd import DEFAULT_BOILERPLATE, Boilerplate

Schema = Dict[str, Any]


def derive_crd(
    xrd: CompositeResourceDefinition, boilerplate: Boilerplate = DEFAULT_BOILERPLATE
) -> CustomResourceDefinition:
    """Derive the CRD for a composite resource from its XRD.

    For every version:

    - ``storage`` is taken from the XRD's ``referenceable`` flag.
    - Printer columns are the user's columns followed by the generated ones.
    - ``spec`` properties are the user's, overwritten by generated
      properties of the same name. ``spec.required`` is the user's list
      followed by the generated list, without deduplication.
    - ``status`` properties are merged the same way, but ``status.required``
      is replaced by the user's list (empty when none is declared).

    Args:
        xrd: CompositeResourceDefinition to expand
        boilerplate: Generated schema fragments to merge in

    Returns:
        Fully populated CustomResourceDefinition

    Raises:
        SchemaParseError: If any version's raw schema is malformed. No
            partial CRD is returned.
    """
    names = replace(
        xrd.names,
        short_names=list(xrd.names.short_names),
        categories=list(xrd.names.categories) + [CATEGORY_COMPOSITE],
    )
    metadata = ObjectMeta(
        name=xrd.metadata.name,
        labels=dict(xrd.metadata.labels),
        annotations=dict(xrd.metadata.annotations),
        owner_references=[as_controller(typed_reference_to(xrd, XRD_API_VERSION, XRD_KIND))],
    )
    crd = CustomResourceDefinition(
        metadata=metadata,
        group=xrd.group,
        names=names,
        scope=SCOPE_CLUSTER,
    )

    for vr in xrd.versions:
        raw = _load_schema("spec", vr.schema)
        schema = boilerplate.base_props()

        props, required = _extract_props("spec", raw)
        spec = schema["properties"]["spec"]
        spec["required"] = required + spec.get("required", []) + boilerplate.composite_spec_required()
        spec_props = spec.setdefault("properties", {})
        spec_props.update(props)
        spec_props.update(boilerplate.composite_spec_props())

        props, required = _extract_props("status", raw)
        status = schema["properties"]["status"]
        # NOTE: replaced, not concatenated like spec.required
        status["required"] = required
        status_props = status.setdefault("properties", {})
        status_props.update(props)
        status_props.update(boilerplate.composite_status_props())

        crd.versions.append(CustomResourceDefinitionVersion(
            name=vr.name,
            served=vr.served,
            storage=vr.referenceable,
            schema=schema,
            additional_printer_columns=(
                copy.deepcopy(vr.additional_printer_columns) + boilerplate.composite_printer_columns()
            ),
            subresources={"status": {}},
        ))

    return crd


def _load_schema(field: str, validation: Optional[CompositeResourceValidation]) -> Schema:
    """Parse the raw openAPIV3Schema of a version; empty when absent."""
    if validation is None:
        return {}

    try:
        schema = json.loads(validation.open_api_v3_schema)
    except (TypeError, ValueError) as e:
        raise SchemaParseError(f"cannot parse validation schema: {e}", field=field) from e

    if schema is None:
        return {}
    if not isinstance(schema, dict):
        raise SchemaParseError("cannot parse validation schema: not an object", field=field)
    return schema


def get_description(xrd: CompositeResourceDefinition) -> str:
    """Return the first top-level description among the XRD's version schemas."""
    for vr in xrd.versions:
        description = _load_schema("description", vr.schema).get("description")
        if description:
            return str(description).strip()
    return ""


def get_props(
    field: str, validation: Optional[CompositeResourceValidation]
) -> Tuple[Dict[str, Schema], List[str]]:
    """Extract one top-level property's children and required list.

    Args:
        field: Top-level property name, "spec" or "status"
        validation: Version validation, or None when none was declared

    Returns:
        Tuple of (properties, required). Both are fresh copies and empty
        when the validation or the field is absent.

    Raises:
        SchemaParseError: If the raw schema is not valid JSON or not
            shaped like a JSON schema object
    """
    return _extract_props(field, _load_schema(field, validation))


def _extract_props(field: str, schema: Schema) -> Tuple[Dict[str, Schema], List[str]]:
    properties = schema.get("properties") or {}
    if not isinstance(properties, dict):
        raise SchemaParseError(f"cannot get {field!r} properties from validation schema", field=field)

    sub = properties.get(field)
    if sub is None:
        return {}, []
    if not isinstance(sub, dict):
        raise SchemaParseError(f"cannot get {field!r} properties from validation schema", field=field)

    props = sub.get("properties") or {}
    required = sub.get("required") or []
    if not isinstance(props, dict) or not isinstance(required, list):
        raise SchemaParseError(f"cannot get {field!r} properties from validation schema", field=field)

    return copy.deepcopy(props), list(required)
