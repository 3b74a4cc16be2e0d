import logging

import pytest

from fakes import FakeQdrant, StubEmbedder, length_vector
from services.tenant_rag.DeletionService import DeletionService
from services.tenant_rag.IngestionService import IngestionService
from services.tenant_rag.RetrievalService import RetrievalService
from services.tenant_rag.TenantIndexManager import TenantIndexManager
from services.tenant_rag.TenantLabelResolver import TenantLabelResolver
from shared.clients.vector.qdrant.VectorClientQdrant import VectorClientQdrant
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger

_MANAGED_PREFIXES = ("EMBED_", "VECTOR_", "TENANT_", "RAG_", "APP_API_KEY")


@pytest.fixture(autouse=True)
def base_env(monkeypatch):
    """Start every test from a known environment."""
    import os

    for key in list(os.environ):
        if key.startswith(_MANAGED_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("VECTOR_ENGINE", "qdrant")
    monkeypatch.setenv("VECTOR_QDRANT_BASE_URL", "http://qdrant.test:6333")
    monkeypatch.setenv("RAG_ENABLED_DEFAULT", "true")
    monkeypatch.setenv("APP_API_KEY", "test-api-key")


@pytest.fixture
def helper_config() -> HelperConfig:
    return HelperConfig(logger=ColorLogger(logging.getLogger("tenant_rag.tests")))


@pytest.fixture
def fake_qdrant() -> FakeQdrant:
    return FakeQdrant()


@pytest.fixture
async def vector_client(helper_config, fake_qdrant):
    client = VectorClientQdrant(helper_config=helper_config)
    await client.boot(transport=fake_qdrant.transport())
    yield client
    await client.close()


@pytest.fixture
def embedder() -> StubEmbedder:
    return StubEmbedder(length_vector)


@pytest.fixture
def label_resolver(helper_config) -> TenantLabelResolver:
    return TenantLabelResolver(helper_config=helper_config)


@pytest.fixture
def index_manager(helper_config, vector_client, label_resolver) -> TenantIndexManager:
    return TenantIndexManager(helper_config=helper_config, vector_client=vector_client, label_resolver=label_resolver)


@pytest.fixture
def ingestion_service(helper_config, vector_client, embedder, index_manager) -> IngestionService:
    return IngestionService(helper_config, vector_client, embedder, index_manager)


@pytest.fixture
def retrieval_service(helper_config, vector_client, embedder, index_manager) -> RetrievalService:
    return RetrievalService(helper_config, vector_client, embedder, index_manager)


@pytest.fixture
def deletion_service(helper_config, vector_client, index_manager, label_resolver) -> DeletionService:
    return DeletionService(helper_config, vector_client, index_manager, label_resolver)
