"""Pydantic models for tenant documents and pipeline results.

Hierarchy:
  TenantDocument   — extracted document handed over by the upload collaborator.
  IngestionResult  — outcome of one ingestion, success or failure with its step.
  DeletionResult   — outcome of one document deletion.
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field


IngestionStep = Literal["parse", "embed", "collection", "vector"]


class TenantDocument(BaseModel):
    """Document text after extraction, owned by exactly one tenant.

    The text comes from an external parser; this core never reads files.
    """

    id: str = Field(min_length=1)
    filename: str
    content: str
    content_type: str = "text"
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class IngestionResult(BaseModel):
    """Outcome of ingesting a document.

    On failure `step` names where the pipeline stopped, so the caller can store
    an accurate document status:
      parse      — no chunks could be produced from the text.
      embed      — the embedding provider failed.
      collection — the tenant collection could not be resolved or created.
      vector     — vectors were computed but the store write failed.
    """

    success: bool
    document_id: str
    point_ids: list[str] = []
    collection: str | None = None
    chunk_count: int = 0
    step: IngestionStep | None = None
    error: str | None = None


class DeletionResult(BaseModel):
    """Outcome of deleting a document's vectors.

    Attributes:
        deleted_in: First collection that held points of the document, or None
            if no collection did. None is a normal outcome, not an error.
        swept: Every tenant collection that was checked.
    """

    deleted_in: str | None = None
    swept: list[str] = []
