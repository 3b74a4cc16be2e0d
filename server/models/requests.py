from datetime import datetime

from pydantic import BaseModel, Field


class IngestRequest(BaseModel):
    """Extracted document handed over by the upload handler.

    Either `content` (chunked here) or `chunks` (already chunked) must carry text.
    """

    tenant_id: str = Field(min_length=1)
    document_id: str = Field(min_length=1)
    filename: str
    content: str = ""
    chunks: list[str] | None = None
    content_type: str = "text"
    uploaded_at: datetime | None = None
