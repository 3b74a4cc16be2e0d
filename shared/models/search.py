"""Pydantic models for retrieval requests and responses."""

from pydantic import BaseModel, Field


class SearchHit(BaseModel):
    """A single chunk returned from a tenant collection, highest score first."""

    content: str
    score: float


class SearchRequest(BaseModel):
    """Raw retrieval request."""

    tenant_id: str = Field(min_length=1)
    query: str = Field(min_length=1)
    limit: int | None = Field(default=None, gt=0)


class SearchResponse(BaseModel):
    query: str
    results: list[SearchHit]
    total: int


class ContextRequest(BaseModel):
    """Chat-side request for prompt context.

    rag_enabled carries the tenant's RAG flag; None means the tenant never set
    it and RAG_ENABLED_DEFAULT applies.
    """

    tenant_id: str = Field(min_length=1)
    query: str
    limit: int | None = Field(default=None, gt=0)
    rag_enabled: bool | None = None


class ContextResponse(BaseModel):
    """Assembled context for prompt augmentation; context is None when nothing is available."""

    context: str | None
    sources: int
