# resume_translator/remote.py
"""
本模块封装了对 chat-completions 风格远程接口的 HTTP 调用。

- 每次调用都有独立的截止时间，超时表现为 `RemoteTimeoutError`；
- 在 429/5xx、超时与传输错误上按重试预算重试，优先遵循 `Retry-After`，
  否则使用带上限的指数退避；
- 其余 4xx 立即以 `RemoteHTTPError` 终止。
"""

import asyncio
import json
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import httpx
import structlog
from pydantic import BaseModel, Field, model_validator

from resume_translator.exceptions import (
    RemoteBadResponseError,
    RemoteError,
    RemoteHTTPError,
    RemoteNetworkError,
    RemoteTimeoutError,
)

logger = structlog.get_logger(__name__)

DETAIL_LIMIT = 600

_JSON_FENCE = re.compile(r"```json([\s\S]*?)```", re.IGNORECASE)


class RetryPolicyConfig(BaseModel):
    """重试策略。`max_retries` 是首个请求之外的额外尝试次数。"""

    max_retries: int = Field(default=2, ge=0)
    initial_backoff: float = Field(default=0.4, gt=0)
    max_backoff: float = Field(default=3.0, gt=0)

    @model_validator(mode="after")
    def check_backoff_consistency(self) -> "RetryPolicyConfig":
        if self.max_backoff < self.initial_backoff:
            raise ValueError("max_backoff 必须大于或等于 initial_backoff")
        return self

    def backoff(self, attempt: int) -> float:
        """第 `attempt` 次重试（从 0 计）前的退避秒数。"""
        return min(self.initial_backoff * (2**attempt), self.max_backoff)


def is_retriable_status(status: int) -> bool:
    return status == 429 or 500 <= status < 600


def parse_retry_after(value: str | None) -> float | None:
    """解析 `Retry-After` 头（秒数或 HTTP 日期），无法解析时返回 None。"""
    if not value:
        return None
    value = value.strip()
    try:
        seconds = float(value)
    except ValueError:
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        seconds = (when - datetime.now(timezone.utc)).total_seconds()
    return seconds if seconds > 0 else None


def _decode_json(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError as e:
        raise RemoteBadResponseError(
            "远程服务返回了无效的 JSON", detail=response.text[:400]
        ) from e
    if not isinstance(body, dict):
        raise RemoteBadResponseError(
            "远程服务返回的 JSON 不是对象", detail=response.text[:400]
        )
    return body


async def post_chat_completion(
    client: httpx.AsyncClient,
    url: str,
    payload: dict[str, Any],
    *,
    headers: dict[str, str] | None = None,
    timeout: float = 25.0,
    retry_policy: RetryPolicyConfig | None = None,
) -> dict[str, Any]:
    """
    POST 一个 JSON 请求体并返回解码后的 JSON 响应。

    Args:
        client: 复用的 httpx 异步客户端。
        url: 完整的 chat-completions 地址。
        payload: 请求体。
        headers: 附加请求头（含鉴权）。
        timeout: 单次调用的总截止时间（秒）。
        retry_policy: 重试策略，缺省使用默认值。

    Raises:
        RemoteHTTPError: 不可重试的 4xx，或 429/5xx 耗尽重试预算。
        RemoteTimeoutError: 超时且耗尽重试预算。
        RemoteNetworkError: 传输错误且耗尽重试预算。
        RemoteBadResponseError: 响应体不是 JSON 对象。

    """
    policy = retry_policy or RetryPolicyConfig()
    attempt = 0
    while True:
        retry_after: float | None = None
        error: RemoteError
        try:
            response = await asyncio.wait_for(
                client.post(url, json=payload, headers=headers), timeout=timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            error = RemoteTimeoutError(f"远程调用在 {timeout}s 内未完成")
            error.__cause__ = e
        except httpx.TransportError as e:
            error = RemoteNetworkError(f"远程调用网络错误: {e.__class__.__name__}")
            error.__cause__ = e
        else:
            if response.is_success:
                return _decode_json(response)
            status = response.status_code
            error = RemoteHTTPError(
                f"remote_http_{status}", status=status, detail=response.text[:DETAIL_LIMIT]
            )
            if not is_retriable_status(status):
                raise error
            retry_after = parse_retry_after(response.headers.get("Retry-After"))

        if attempt >= policy.max_retries:
            raise error

        delay = retry_after if retry_after is not None else policy.backoff(attempt)
        logger.warning(
            "远程调用失败，准备重试",
            error=error.code,
            status=error.status,
            attempt=attempt + 1,
            delay=delay,
        )
        await asyncio.sleep(delay)
        attempt += 1


def extract_message_content(body: dict[str, Any]) -> str:
    """读取 `choices[0].message.content`，兼容字符串与分段列表两种格式。"""
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise RemoteBadResponseError(
            "响应中缺少 choices[0].message.content", detail=json.dumps(body)[:400]
        ) from e

    text = ""
    if isinstance(content, str):
        text = content
    elif isinstance(content, list):
        for part in content:
            if isinstance(part, dict) and isinstance(part.get("text"), str):
                text += part["text"]

    if not text.strip():
        raise RemoteBadResponseError("远程服务返回了空内容", detail=json.dumps(body)[:400])
    return text.strip()


def parse_structured_content(content: str) -> dict[str, Any] | None:
    """
    尽力把模型输出解析为 JSON 对象：整体解析、```json 围栏、最外层花括号。
    都失败时返回 None，由调用方按纯文本处理。
    """
    candidates = [content]
    fence = _JSON_FENCE.search(content)
    if fence:
        candidates.append(fence.group(1).strip())
    start, end = content.find("{"), content.rfind("}")
    if start != -1 and end > start:
        candidates.append(content[start : end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(parsed, dict):
            return parsed
    return None
