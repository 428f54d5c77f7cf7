# tests/integration/test_translate_flow.py
"""端到端测试：协调器 + 真实后端实现 + 模拟的 HTTP 传输层。"""

import json
from unittest.mock import AsyncMock

import httpx
import pytest
from pytest_mock import MockerFixture

from resume_translator.backends.openrouter import OpenRouterBackend, OpenRouterBackendConfig
from resume_translator.bootstrap import create_translator
from resume_translator.config import TranslatorConfig
from resume_translator.types import Provider

RESUME = (
    "Senior engineer. Contact: ann@example.com or https://ann.dev/cv.\n\n"
    + "Built pipelines for {company} in `python`. " * 40
    + "\n\n"
    + "Mentored %d interns and led :team_name. " * 40
)


class FakeOpenRouter:
    """模拟 OpenRouter：第一次返回 429，之后把文本转成大写 JSON 回复。"""

    def __init__(self) -> None:
        self.requests: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        if len(self.requests) == 1:
            return httpx.Response(429, headers={"Retry-After": "1"})
        user = json.loads(payload["messages"][1]["content"])
        content = json.dumps({"text": user["text"].upper(), "detected": "en"})
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


@pytest.mark.asyncio
async def test_resume_is_translated_across_chunks(mocker: MockerFixture) -> None:
    sleep = mocker.patch("asyncio.sleep", new_callable=AsyncMock)
    remote = FakeOpenRouter()
    backend = OpenRouterBackend(
        OpenRouterBackendConfig(api_key="or-test"),
        client=httpx.AsyncClient(transport=httpx.MockTransport(remote)),
    )
    config = TranslatorConfig(active_backend="openrouter", chunk_chars=1000)
    translator = create_translator(config, backend=backend)

    async with translator:
        result = await translator.translate_text(RESUME, "ru", domain="summary")
        again = await translator.translate_text(RESUME, "ru", domain="summary")

    assert result.ok is True
    assert result.provider is Provider.REMOTE
    assert result.chunks > 1
    assert result.meta["detected"] == "en"
    sleep.assert_awaited_once_with(1.0)

    text = result.translated_text
    assert text is not None
    assert text.startswith("SENIOR ENGINEER. CONTACT: ann@example.com OR https://ann.dev/cv.\n\n")
    assert text.count("{company}") == 40
    assert text.count("`python`") == 40
    assert text.count("%d") == 40
    assert text.count(":team_name") == 40
    assert "__KEEP_" not in text
    assert len(remote.requests) == result.chunks + 1

    for payload in remote.requests:
        sent = json.loads(payload["messages"][1]["content"])["text"]
        assert len(sent) <= 1000
        assert "https://" not in sent

    assert again.provider is Provider.CACHE
    assert again.translated_text == text
