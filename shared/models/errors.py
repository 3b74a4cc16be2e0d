"""Exception types shared by the clients and the retrieval services.

Configuration problems (missing credentials, invalid dimensions, unsupported
engines) are raised as plain ValueError.
"""


class EmbedModelUnavailableError(Exception):
    """The embedding provider rejected a model as unknown or unsupported.

    Attributes:
        model: The model that was rejected, or None when several were tried.
        tried: Every model attempted before giving up, in order.
    """

    def __init__(self, message: str, model: str | None = None, tried: list[str] | None = None):
        super().__init__(message)
        self.model = model
        self.tried = tried or []


class VectorStoreError(Exception):
    """The vector store answered with an unexpected status.

    Attributes:
        status_code: HTTP status returned by the store.
        detail: Response body excerpt.
    """

    def __init__(self, message: str, status_code: int | None = None, detail: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
