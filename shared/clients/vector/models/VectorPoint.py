"""VectorPoint model — payload stored alongside each document chunk in a tenant collection."""

from pydantic import BaseModel, ConfigDict, Field


class VectorPoint(BaseModel):
    """Payload stored alongside each vector chunk in a tenant collection.

    Serialised with camelCase keys (model_dump(by_alias=True)), the layout
    other services read from the store.

    The tenant_id field is mandatory: every search and delete filters on it,
    so a collection that is shared through a label collision still never
    leaks points across tenants.

    Attributes:
        content:          Raw text content of this chunk.
        tenant_id:        MANDATORY — owning tenant.
        doc_id:           External document identifier.
        filename:         Sanitised filename of the uploaded document.
        uploaded_at:      ISO-8601 upload timestamp.
        chunk_index:      Zero-based position of this chunk within the document.
        type:             Content type reported by the parser (e.g. "pdf").
        embedding_model:  Model that produced the vector.
        embedding_dim:    Vector dimension; equals the collection's vector size.
    """

    model_config = ConfigDict(populate_by_name=True)

    content: str
    tenant_id: str = Field(alias="tenantId", min_length=1)
    doc_id: str = Field(alias="docId")
    filename: str
    uploaded_at: str = Field(alias="uploadedAt")
    chunk_index: int = Field(alias="chunkIndex", ge=0)
    type: str = "text"

    embedding_model: str | None = Field(default=None, alias="embeddingModel")
    embedding_dim: int | None = Field(default=None, alias="embeddingDim")
