import json

import httpx
import pytest

from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.embed.gemini.EmbedClientGemini import EmbedClientGemini
from shared.clients.embed.openai.EmbedClientOpenai import EmbedClientOpenai
from shared.clients.embed.together.EmbedClientTogether import EmbedClientTogether
from shared.models.errors import EmbedModelUnavailableError

GEMINI_LISTING = {
    "models": [
        {"name": "models/gemini-2.0-flash", "supportedGenerationMethods": ["generateContent"]},
        {"name": "models/gemini-embedding-001", "supportedGenerationMethods": ["embedContent", "countTextTokens"]},
        {"name": "models/text-embedding-005", "supportedGenerationMethods": ["embedContent"]},
    ]
}


def _not_found(model: str) -> httpx.Response:
    return httpx.Response(
        404,
        json={"error": {"code": 404, "message": f"models/{model} is not found for API version v1beta.", "status": "NOT_FOUND"}},
    )


class GeminiBackend:
    """Gemini API double; models in `working` answer with [index, dim-tag] vectors."""

    def __init__(self, working: dict[str, float]):
        self.working = working
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "GET" and path == "/v1beta/models":
            return httpx.Response(200, json=GEMINI_LISTING)
        model, method = path[len("/v1beta/models/"):].split(":")
        if model not in self.working:
            return _not_found(model)
        body = json.loads(request.content)
        tag = self.working[model]
        if method == "embedContent":
            return httpx.Response(200, json={"embedding": {"values": [0.0, tag]}})
        requests = body["requests"]
        return httpx.Response(200, json={"embeddings": [{"values": [float(i), tag]} for i, _ in enumerate(requests)]})

    def embed_paths(self) -> list[str]:
        return [r.url.path for r in self.requests if r.method == "POST"]


@pytest.fixture
def gemini_env(monkeypatch):
    monkeypatch.setenv("EMBED_ENGINE", "gemini")
    monkeypatch.setenv("EMBED_GEMINI_API_KEY", "g-key")
    monkeypatch.setenv("EMBED_GEMINI_BASE_URL", "http://gemini.test")


async def _booted_gemini(helper_config, backend: GeminiBackend) -> EmbedClientGemini:
    client = EmbedClientGemini(helper_config=helper_config)
    await client.boot(transport=httpx.MockTransport(backend.handler))
    return client


############### GEMINI ###############

async def test_gemini_single_and_batch_endpoints(helper_config, gemini_env):
    backend = GeminiBackend({"text-embedding-004": 7.0})
    client = await _booted_gemini(helper_config, backend)

    assert await client.do_embed("one") == [[0.0, 7.0]]
    assert await client.do_embed(["a", "b", "c"]) == [[0.0, 7.0], [1.0, 7.0], [2.0, 7.0]]
    assert backend.embed_paths() == [
        "/v1beta/models/text-embedding-004:embedContent",
        "/v1beta/models/text-embedding-004:batchEmbedContents",
    ]
    assert backend.requests[0].headers["x-goog-api-key"] == "g-key"
    await client.close()


async def test_gemini_falls_back_to_available_model(helper_config, gemini_env):
    backend = GeminiBackend({"gemini-embedding-001": 3.0})
    client = await _booted_gemini(helper_config, backend)

    vectors = await client.do_embed(["first chunk", "second chunk"])

    assert vectors == [[0.0, 3.0], [1.0, 3.0]]
    assert client.get_active_model() == "gemini-embedding-001"
    # the fallback stays active, the dead model is not retried
    await client.do_embed("again")
    assert backend.embed_paths()[-1] == "/v1beta/models/gemini-embedding-001:embedContent"
    await client.close()


async def test_gemini_uses_discovered_model_after_known_good_ones(helper_config, gemini_env):
    backend = GeminiBackend({"text-embedding-005": 5.0})
    client = await _booted_gemini(helper_config, backend)

    assert await client.do_embed("x") == [[0.0, 5.0]]
    assert [p.split("/")[-1] for p in backend.embed_paths()] == [
        "text-embedding-004:embedContent",
        "gemini-embedding-001:embedContent",
        "embedding-001:embedContent",
        "text-embedding-005:embedContent",
    ]
    await client.close()


async def test_gemini_configured_fallback_models_are_tried_last(helper_config, gemini_env, monkeypatch):
    monkeypatch.setenv("EMBED_GEMINI_FALLBACK_MODELS", "[custom-embed]")
    backend = GeminiBackend({"custom-embed": 9.0})
    client = await _booted_gemini(helper_config, backend)

    assert await client.do_embed("x") == [[0.0, 9.0]]
    assert client.get_active_model() == "custom-embed"
    await client.close()


async def test_gemini_raises_when_no_model_works(helper_config, gemini_env):
    backend = GeminiBackend({})
    client = await _booted_gemini(helper_config, backend)

    with pytest.raises(EmbedModelUnavailableError) as excinfo:
        await client.do_embed("x")

    assert excinfo.value.tried[0] == "text-embedding-004"
    assert "gemini-embedding-001" in excinfo.value.tried
    assert client.get_active_model() == "text-embedding-004"
    await client.close()


async def test_gemini_server_error_does_not_trigger_fallback(helper_config, gemini_env):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(500, json={"error": {"code": 500, "message": "Internal error"}})

    client = EmbedClientGemini(helper_config=helper_config)
    await client.boot(transport=httpx.MockTransport(handler))

    with pytest.raises(Exception) as excinfo:
        await client.do_embed("x")

    assert not isinstance(excinfo.value, EmbedModelUnavailableError)
    assert len(requests) == 1
    await client.close()


async def test_gemini_splits_batches(helper_config, gemini_env, monkeypatch):
    monkeypatch.setenv("EMBED_GEMINI_MAX_BATCH_SIZE", "2")
    backend = GeminiBackend({"text-embedding-004": 1.0})
    client = await _booted_gemini(helper_config, backend)

    vectors = await client.do_embed([f"t{i}" for i in range(5)])

    assert len(vectors) == 5
    assert [v[0] for v in vectors] == [0.0, 1.0, 0.0, 1.0, 0.0]
    assert len(backend.embed_paths()) == 3
    await client.close()


async def test_gemini_fetches_embedding_model_names(helper_config, gemini_env):
    backend = GeminiBackend({})
    client = await _booted_gemini(helper_config, backend)

    assert await client.do_fetch_model_names() == ["gemini-embedding-001", "text-embedding-005"]
    assert backend.requests[0].url.params["pageSize"] == "1000"
    await client.close()


def test_gemini_requires_api_key(helper_config, monkeypatch):
    monkeypatch.setenv("EMBED_ENGINE", "gemini")

    with pytest.raises(ValueError):
        EmbedClientGemini(helper_config=helper_config)


async def test_empty_input_makes_no_request(helper_config, gemini_env):
    backend = GeminiBackend({"text-embedding-004": 1.0})
    client = await _booted_gemini(helper_config, backend)

    assert await client.do_embed([]) == []
    assert backend.requests == []
    await client.close()


############### OPENAI / TOGETHER ###############

async def test_openai_orders_vectors_by_index(helper_config, monkeypatch):
    monkeypatch.setenv("EMBED_OPENAI_API_KEY", "sk-test")
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen.append(body)
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.url.path == "/v1/embeddings"
        data = [{"object": "embedding", "index": i, "embedding": [float(i), 1.0]} for i in range(len(body["input"]))]
        return httpx.Response(200, json={"object": "list", "data": list(reversed(data)), "model": body["model"]})

    client = EmbedClientOpenai(helper_config=helper_config)
    await client.boot(transport=httpx.MockTransport(handler))

    assert await client.do_embed(["a", "b", "c"]) == [[0.0, 1.0], [1.0, 1.0], [2.0, 1.0]]
    assert seen[0] == {"model": "text-embedding-3-small", "input": ["a", "b", "c"]}
    await client.close()


async def test_openai_model_error_in_400_body_triggers_fallback(helper_config, monkeypatch):
    monkeypatch.setenv("EMBED_OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("EMBED_MODEL", "retired-embed")

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json={"data": [{"id": "gpt-4o"}, {"id": "text-embedding-3-large"}]})
        body = json.loads(request.content)
        if body["model"] == "retired-embed":
            return httpx.Response(400, json={"error": {"message": "The model `retired-embed` does not exist", "code": "model_not_found"}})
        return httpx.Response(200, json={"data": [{"index": 0, "embedding": [0.5, 0.5]}]})

    client = EmbedClientOpenai(helper_config=helper_config)
    await client.boot(transport=httpx.MockTransport(handler))

    assert await client.do_embed("hello") == [[0.5, 0.5]]
    assert client.get_active_model() == "text-embedding-3-small"
    await client.close()


async def test_openai_unrelated_400_is_not_a_model_failure(helper_config, monkeypatch):
    monkeypatch.setenv("EMBED_OPENAI_API_KEY", "sk-test")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": {"message": "Input too long for this request"}})

    client = EmbedClientOpenai(helper_config=helper_config)
    await client.boot(transport=httpx.MockTransport(handler))

    with pytest.raises(Exception) as excinfo:
        await client.do_embed("hello")
    assert not isinstance(excinfo.value, EmbedModelUnavailableError)
    await client.close()


async def test_together_defaults_and_listing(helper_config, monkeypatch):
    monkeypatch.setenv("EMBED_TOGETHER_API_KEY", "tg-key")

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.host == "api.together.xyz"
        return httpx.Response(200, json=[
            {"id": "meta-llama/Llama-3-8b-chat-hf", "type": "chat"},
            {"id": "BAAI/bge-large-en-v1.5", "type": "embedding"},
        ])

    client = EmbedClientTogether(helper_config=helper_config)
    await client.boot(transport=httpx.MockTransport(handler))

    assert client.max_batch_size == 128
    assert client.get_active_model() == "nomic-ai/nomic-embed-text-v1.5"
    assert await client.do_fetch_model_names() == ["BAAI/bge-large-en-v1.5"]
    await client.close()


############### MANAGER ###############

def test_manager_builds_configured_engine(helper_config, gemini_env):
    client = EmbedClientManager(helper_config=helper_config).get_client()

    assert isinstance(client, EmbedClientGemini)
    assert client.get_engine_name() == "gemini"


def test_manager_rejects_unknown_engine(helper_config, monkeypatch):
    monkeypatch.setenv("EMBED_ENGINE", "word2vec")

    with pytest.raises(ValueError):
        EmbedClientManager(helper_config=helper_config)
