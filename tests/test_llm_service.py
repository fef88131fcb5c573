"""Tests for the Ollama-backed assistant."""

import json
import httpx
import pytest
from cvmaker.models.cv_models import Locale
from cvmaker.models.request_models import AssistantRequest, AssistantTask
from cvmaker.services.llm_service import AssistantService, OllamaSettings, build_prompt


def make_settings(**overrides) -> OllamaSettings:
    values = dict(
        ollama_base_url="http://ollama.test",
        ollama_model="llama2:3b",
        ollama_fallback_models="mistral:7b-instruct-q4_0,phi3:mini",
        ollama_timeout=5,
        ollama_max_tokens=256,
        ollama_temperature=0.5,
        ollama_top_p=0.9,
        ollama_api_key=None,
    )
    values.update(overrides)
    return OllamaSettings(**values)


def make_service(handler, **overrides) -> AssistantService:
    return AssistantService(make_settings(**overrides), transport=httpx.MockTransport(handler))


def test_fallback_models_setting():
    assert make_settings().fallback_models == ["mistral:7b-instruct-q4_0", "phi3:mini"]


def test_build_prompt_summary():
    request = AssistantRequest(
        task=AssistantTask.SUMMARY,
        language=Locale.EN,
        prompt="Marketing manager",
        cv={"personalInfo": {"firstName": "Anna"}},
    )
    prompt = build_prompt(request)

    assert "500 characters in English" in prompt
    assert '"firstName": "Anna"' in prompt
    assert prompt.endswith("Target role: Marketing manager")


def test_build_prompt_free_text():
    assert build_prompt(AssistantRequest(prompt="  How long should a CV be?  ")) == "How long should a CV be?"


@pytest.mark.asyncio
async def test_generate():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["payload"] = json.loads(request.content)
        return httpx.Response(200, json={"response": "Pieredzējis mārketinga speciālists."})

    service = make_service(handler)
    result = await service.generate(AssistantRequest(task=AssistantTask.SUMMARY, cv={"id": "cv-anna"}))

    assert result.success is True
    assert result.content == "Pieredzējis mārketinga speciālists."
    assert captured["url"] == "http://ollama.test/api/generate"
    payload = captured["payload"]
    assert payload["model"] == "llama2:3b"
    assert payload["stream"] is False
    assert payload["options"] == {"temperature": 0.5, "top_p": 0.9, "num_predict": 256}
    assert "latviešu" in payload["system"]


@pytest.mark.asyncio
async def test_api_key_is_sent():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer secret"
        return httpx.Response(200, json={"response": "ok"})

    result = await make_service(handler, ollama_api_key="secret").generate(AssistantRequest(prompt="Hi"))

    assert result.success is True


@pytest.mark.asyncio
async def test_generate_empty_prompt():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    result = await make_service(handler).generate(AssistantRequest(prompt="   "))

    assert result.success is False
    assert result.error == "Prompt is empty"


@pytest.mark.asyncio
async def test_generate_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    result = await make_service(handler).generate(AssistantRequest(prompt="Hi"))

    assert result.success is False
    assert result.error == "Ollama request timed out after 5s"


@pytest.mark.asyncio
async def test_generate_server_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "model crashed"})

    result = await make_service(handler).generate(AssistantRequest(prompt="Hi"))

    assert result.success is False
    assert result.error.startswith("Failed to communicate with Ollama")


@pytest.mark.asyncio
async def test_generate_unexpected_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"text": "wrong field"})

    result = await make_service(handler).generate(AssistantRequest(prompt="Hi"))

    assert result.success is False
    assert result.error.startswith("Unexpected response format")


def ollama_handler(models, version_status=200):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/version":
            return httpx.Response(version_status, json={"version": "0.1.32"})
        if request.url.path == "/api/tags":
            return httpx.Response(200, json={"models": [{"name": name} for name in models]})
        return httpx.Response(404)
    return handler


@pytest.mark.asyncio
async def test_health_ready():
    health = await make_service(ollama_handler(["llama2:3b"])).health()

    assert health.status == "healthy"
    assert health.details == "AI service ready"
    assert health.model == "llama2:3b"


@pytest.mark.asyncio
async def test_health_switches_to_fallback_model():
    service = make_service(ollama_handler(["phi3:mini"]))

    health = await service.health()

    assert health.status == "healthy"
    assert health.model == "phi3:mini"
    assert service.model == "phi3:mini"


@pytest.mark.asyncio
async def test_health_no_model():
    health = await make_service(ollama_handler(["codellama:7b"])).health()

    assert health.status == "unhealthy"
    assert health.details == "Required AI model not available"


@pytest.mark.asyncio
async def test_health_not_responding():
    health = await make_service(ollama_handler([], version_status=503)).health()

    assert health.status == "unhealthy"
    assert health.details == "Ollama service not responding"


@pytest.mark.asyncio
async def test_health_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    health = await make_service(handler).health()

    assert health.status == "unhealthy"
    assert health.details == "Cannot connect to Ollama service"
