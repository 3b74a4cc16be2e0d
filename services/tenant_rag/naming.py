"""Collection naming for tenant vector namespaces.

Current scheme:  tenant_<label>_<resource kind>_<dimension>
Legacy scheme:   tenant_<raw tenant id>_docs   (no dimension suffix)

One collection exists per (tenant, dimension); a new embedding dimension
always gets a new collection instead of altering an existing one.
"""

import math
import re

DEFAULT_RESOURCE_KIND = "docs"
LEGACY_RESOURCE_KIND = "docs"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_token(value: str | None) -> str:
    """Lowercase value, collapse every run of characters outside [a-z0-9] into one
    underscore and trim underscores at both ends."""
    return _NON_ALNUM.sub("_", (value or "").lower()).strip("_")


def normalize_resource_kind(resource_kind: str | None) -> str:
    return normalize_token(resource_kind) or DEFAULT_RESOURCE_KIND


def validate_dimension(dimension) -> int:
    """Return dimension as int.

    Raises:
        ValueError: If dimension is not a positive, finite whole number (bools rejected).
    """
    if isinstance(dimension, bool):
        raise ValueError(f"Vector dimension must be a positive integer, got {dimension!r}.")
    if isinstance(dimension, float):
        if not math.isfinite(dimension) or not dimension.is_integer():
            raise ValueError(f"Vector dimension must be a positive integer, got {dimension!r}.")
        dimension = int(dimension)
    if not isinstance(dimension, int) or dimension <= 0:
        raise ValueError(f"Vector dimension must be a positive integer, got {dimension!r}.")
    return dimension


def resolve_collection_name(tenant_label: str, resource_kind: str | None, dimension: int) -> str:
    """Build the collection name for a tenant, resource kind and vector dimension.

    Args:
        tenant_label (str): Human-readable tenant name or raw tenant id.
        resource_kind (str | None): Kind of indexed resource; empty means "docs".
        dimension (int): Embedding dimension of the collection.

    Returns:
        str: E.g. "tenant_acme_corp_docs_768".

    Raises:
        ValueError: If the dimension is invalid or the label has no usable characters.
    """
    dimension = validate_dimension(dimension)
    label = normalize_token(tenant_label)
    if not label:
        raise ValueError(f"Tenant label {tenant_label!r} contains no usable characters for a collection name.")
    return f"tenant_{label}_{normalize_resource_kind(resource_kind)}_{dimension}"


def legacy_collection_name(tenant_id: str) -> str:
    """Name of the pre-dimension collection of a tenant, built from the raw tenant id."""
    return f"tenant_{tenant_id}_{LEGACY_RESOURCE_KIND}"


def candidate_collection_names(tenant_id: str, tenant_label: str, resource_kind: str | None, dimension: int) -> list[str]:
    """Ordered names under which a tenant's collection for `dimension` may exist.

    1. label based (the name new collections get)
    2. tenant-id based, for collections created while the label lookup was unavailable
    3. legacy unsuffixed name, only for the "docs" resource kind

    Returns:
        list[str]: Distinct names, most preferred first.
    """
    names = [resolve_collection_name(tenant_label, resource_kind, dimension)]
    if normalize_token(tenant_id):
        names.append(resolve_collection_name(tenant_id, resource_kind, dimension))
    if normalize_resource_kind(resource_kind) == LEGACY_RESOURCE_KIND:
        names.append(legacy_collection_name(tenant_id))
    return list(dict.fromkeys(names))


def is_tenant_collection(name: str, tenant_id: str, tenant_label: str, resource_kinds: list[str]) -> bool:
    """Return True if `name` is one of the tenant's collections, for any dimension.

    Matching is exact per (label, kind): "tenant_acme_docs_768" belongs to label
    "acme", "tenant_acme_corp_docs_768" does not.
    """
    if name == legacy_collection_name(tenant_id):
        return True
    labels = {token for token in (normalize_token(tenant_label), normalize_token(tenant_id)) if token}
    kinds = {normalize_resource_kind(kind) for kind in resource_kinds} or {DEFAULT_RESOURCE_KIND}
    for label in labels:
        for kind in kinds:
            if re.fullmatch(rf"tenant_{re.escape(label)}_{re.escape(kind)}_[1-9][0-9]*", name):
                return True
    return False


def is_managed_collection(name: str, resource_kinds: list[str]) -> bool:
    """Return True if `name` follows the current scheme for any tenant label."""
    kinds = {normalize_resource_kind(kind) for kind in resource_kinds} or {DEFAULT_RESOURCE_KIND}
    return any(
        re.fullmatch(rf"tenant_[a-z0-9]+(?:_[a-z0-9]+)*_{re.escape(kind)}_[1-9][0-9]*", name)
        for kind in kinds
    )
