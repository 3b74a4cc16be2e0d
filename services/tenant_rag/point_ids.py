"""Deterministic vector store point IDs for document chunks."""

import hashlib
import re
import uuid

_UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


def is_uuid(value: str) -> bool:
    """Return True if value is a UUID in canonical 8-4-4-4-12 hex form."""
    return bool(_UUID_PATTERN.fullmatch(value))


def make_chunk_id(tenant_id: str, document_id: str, chunk_index: int) -> str:
    """Build the external identifier of a chunk: "<tenant>_<document>_<index>"."""
    return f"{tenant_id}_{document_id}_{chunk_index}"


def derive_point_id(external_id: str) -> str:
    """Map an external chunk identifier to a UUID point ID.

    UUID-shaped input is returned unchanged. Anything else is hashed with SHA-1
    and the first 16 digest bytes become a version-5, RFC 4122 variant UUID, so
    the same external ID always maps to the same point and re-ingestion
    overwrites instead of duplicating.

    Changing this derivation would orphan every point already stored.

    Args:
        external_id (str): The external chunk identifier.

    Returns:
        str: Lowercase canonical UUID string (or the input, if already a UUID).
    """
    if is_uuid(external_id):
        return external_id
    digest = bytearray(hashlib.sha1(external_id.encode("utf-8")).digest()[:16])
    digest[6] = (digest[6] & 0x0F) | 0x50
    digest[8] = (digest[8] & 0x3F) | 0x80
    return str(uuid.UUID(bytes=bytes(digest)))
