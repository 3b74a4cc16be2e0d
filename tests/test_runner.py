import logging

import pytest

from fakes import StubEmbedder, length_vector
from services.tenant_rag import tenant_rag_runner
from shared.clients.vector.qdrant.VectorClientQdrant import VectorClientQdrant
from shared.logging.logging_setup import ColorLogger


class BootableEmbedder(StubEmbedder):
    async def boot(self) -> None:
        pass

    async def close(self) -> None:
        pass


@pytest.fixture
def runner_env(monkeypatch, fake_qdrant):
    original_boot = VectorClientQdrant.boot

    async def boot(self, transport=None):
        await original_boot(self, transport=fake_qdrant.transport())

    class StubEmbedManager:
        def __init__(self, helper_config):
            pass

        def get_client(self):
            return BootableEmbedder(length_vector)

    monkeypatch.setattr(VectorClientQdrant, "boot", boot)
    monkeypatch.setattr(tenant_rag_runner, "EmbedClientManager", StubEmbedManager)
    monkeypatch.setattr(tenant_rag_runner, "setup_logging", lambda: ColorLogger(logging.getLogger("tenant_rag.runner_test")))


async def test_ingest_search_and_offboard(runner_env, fake_qdrant, tmp_path):
    source = tmp_path / "faq.txt"
    source.write_text("opening hours are nine to five", encoding="utf-8")

    assert await tenant_rag_runner.main(["ingest", "t1", "d1", str(source)]) == 0
    point = next(iter(fake_qdrant.points("tenant_t1_docs_4").values()))
    assert point["payload"]["filename"] == "faq.txt"
    assert point["payload"]["type"] == "txt"

    assert await tenant_rag_runner.main(["search", "t1", "hours", "--limit", "1"]) == 0
    assert await tenant_rag_runner.main(["delete-document", "t1", "d1"]) == 0
    assert fake_qdrant.points("tenant_t1_docs_4") == {}

    assert await tenant_rag_runner.main(["delete-tenant", "t1"]) == 0
    assert fake_qdrant.collections == {}


async def test_failed_ingest_exits_nonzero(runner_env, tmp_path):
    source = tmp_path / "empty.txt"
    source.write_text("   ", encoding="utf-8")

    assert await tenant_rag_runner.main(["ingest", "t1", "d1", str(source)]) == 1


def test_unknown_command_exits(runner_env):
    with pytest.raises(SystemExit):
        tenant_rag_runner._parse_args(["reindex", "t1"])
