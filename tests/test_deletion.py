import httpx
import pytest

from services.tenant_rag.DeletionService import DeletionService
from services.tenant_rag.TenantIndexManager import TenantIndexManager
from services.tenant_rag.TenantLabelResolver import TenantLabelResolver
from services.tenant_rag.point_ids import derive_point_id
from shared.clients.tenant.rest.TenantClientRest import TenantClientRest
from shared.models.document import TenantDocument
from shared.models.errors import VectorStoreError


def _legacy_point(tenant_id: str, doc_key: str, doc_id: str, index: int) -> dict:
    return {
        "id": derive_point_id(f"{tenant_id}_{doc_id}_{index}"),
        "vector": [1.0, 0.0, 0.0, 0.0],
        "payload": {"content": f"legacy {index}", "tenantId": tenant_id, doc_key: doc_id, "chunkIndex": index},
    }


async def test_delete_document_from_legacy_collection(deletion_service, fake_qdrant):
    fake_qdrant.add_collection("tenant_t1_docs", 4, [
        _legacy_point("t1", "documentId", "old-doc", 0),
        _legacy_point("t1", "documentId", "old-doc", 1),
        _legacy_point("t1", "docId", "keep-doc", 0),
    ])

    result = await deletion_service.do_delete_document("t1", "old-doc")

    assert result.deleted_in == "tenant_t1_docs"
    assert result.swept == ["tenant_t1_docs"]
    remaining = [p["payload"]["content"] for p in fake_qdrant.points("tenant_t1_docs").values()]
    assert remaining == ["legacy 0"]
    assert all(p["payload"].get("docId") == "keep-doc" for p in fake_qdrant.points("tenant_t1_docs").values())


async def test_delete_document_sweeps_every_dimension(ingestion_service, deletion_service, fake_qdrant):
    await ingestion_service.do_ingest("t1", TenantDocument(id="d1", filename="a.txt", content="alpha beta"))
    fake_qdrant.add_collection("tenant_t1_docs_768", 768, [
        {"id": "p-768", "vector": [0.0] * 768, "payload": {"tenantId": "t1", "docId": "d1", "chunkIndex": 0}},
    ])

    result = await deletion_service.do_delete_document("t1", "d1")

    assert result.deleted_in in ("tenant_t1_docs_4", "tenant_t1_docs_768")
    assert fake_qdrant.points("tenant_t1_docs_4") == {}
    assert fake_qdrant.points("tenant_t1_docs_768") == {}


async def test_delete_unknown_document_is_not_an_error(ingestion_service, deletion_service, fake_qdrant):
    await ingestion_service.do_ingest("t1", TenantDocument(id="d1", filename="a.txt", content="alpha beta"))

    result = await deletion_service.do_delete_document("t1", "missing")

    assert result.deleted_in is None
    assert len(fake_qdrant.points("tenant_t1_docs_4")) == 1


async def test_delete_document_without_collections(deletion_service):
    result = await deletion_service.do_delete_document("t1", "d1")

    assert result.deleted_in is None
    assert result.swept == []


async def test_delete_document_keeps_other_tenants_points(deletion_service, fake_qdrant):
    fake_qdrant.add_collection("tenant_t1_docs_4", 4, [
        _legacy_point("t1", "docId", "shared-id", 0),
        _legacy_point("t2", "docId", "shared-id", 0),
    ])

    await deletion_service.do_delete_document("t1", "shared-id")

    assert [p["payload"]["tenantId"] for p in fake_qdrant.points("tenant_t1_docs_4").values()] == ["t2"]


async def test_delete_tenant_drops_all_its_collections(deletion_service, fake_qdrant):
    for name in ("tenant_t1_docs", "tenant_t1_docs_4", "tenant_t1_docs_768", "tenant_t10_docs_4"):
        fake_qdrant.add_collection(name, 4, [_legacy_point("t1" if "t10" not in name else "t10", "docId", "d", 0)])

    await deletion_service.do_delete_tenant("t1")

    assert list(fake_qdrant.collections) == ["tenant_t10_docs_4"]
    # idempotent
    await deletion_service.do_delete_tenant("t1")


async def test_delete_tenant_keeps_shared_collection(deletion_service, fake_qdrant):
    fake_qdrant.add_collection("tenant_t1_docs_4", 4, [
        _legacy_point("t1", "docId", "d", 0),
        _legacy_point("other", "docId", "d", 0),
    ])

    await deletion_service.do_delete_tenant("t1")

    assert "tenant_t1_docs_4" in fake_qdrant.collections
    assert [p["payload"]["tenantId"] for p in fake_qdrant.points("tenant_t1_docs_4").values()] == ["other"]


async def test_delete_tenant_forgets_label(deletion_service, label_resolver):
    label_resolver._labels["t1"] = "Acme"

    await deletion_service.do_delete_tenant("t1")

    assert "t1" not in label_resolver._labels


async def test_listing_failure_propagates(deletion_service, fake_qdrant, monkeypatch):
    async def broken_list():
        raise VectorStoreError("list failed", status_code=503)

    monkeypatch.setattr(deletion_service._vector, "do_list_collections", broken_list)

    with pytest.raises(VectorStoreError):
        await deletion_service.do_delete_document("t1", "d1")


@pytest.fixture
async def unreachable_tenant_store(monkeypatch, helper_config):
    monkeypatch.setenv("TENANT_ENGINE", "rest")
    monkeypatch.setenv("TENANT_REST_BASE_URL", "http://tenants.test")
    client = TenantClientRest(helper_config=helper_config)
    await client.boot(transport=httpx.MockTransport(lambda request: httpx.Response(503, text="unavailable")))
    yield client
    await client.close()


async def _ingest_under_label(ingestion_service, label_resolver) -> None:
    label_resolver._labels["t1"] = "Acme Corp"
    await ingestion_service.do_ingest("t1", TenantDocument(id="d1", filename="a.txt", content="alpha beta"))


async def test_delete_document_finds_label_collection_when_lookup_fails(
    helper_config, vector_client, ingestion_service, label_resolver, fake_qdrant, unreachable_tenant_store
):
    await _ingest_under_label(ingestion_service, label_resolver)
    assert len(fake_qdrant.points("tenant_acme_corp_docs_4")) == 1

    resolver = TenantLabelResolver(helper_config=helper_config, tenant_client=unreachable_tenant_store)
    manager = TenantIndexManager(helper_config=helper_config, vector_client=vector_client, label_resolver=resolver)
    deletion = DeletionService(helper_config, vector_client, manager, resolver)

    result = await deletion.do_delete_document("t1", "d1")

    assert result.deleted_in == "tenant_acme_corp_docs_4"
    assert result.swept == ["tenant_acme_corp_docs_4"]
    assert fake_qdrant.points("tenant_acme_corp_docs_4") == {}


async def test_delete_tenant_drops_label_collection_when_lookup_fails(
    helper_config, vector_client, ingestion_service, label_resolver, fake_qdrant, unreachable_tenant_store
):
    await _ingest_under_label(ingestion_service, label_resolver)
    fake_qdrant.add_collection("tenant_globex_docs_4", 4, [_legacy_point("t2", "docId", "d", 0)])

    resolver = TenantLabelResolver(helper_config=helper_config, tenant_client=unreachable_tenant_store)
    manager = TenantIndexManager(helper_config=helper_config, vector_client=vector_client, label_resolver=resolver)

    await DeletionService(helper_config, vector_client, manager, resolver).do_delete_tenant("t1")

    assert list(fake_qdrant.collections) == ["tenant_globex_docs_4"]
