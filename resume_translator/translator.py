# resume_translator/translator.py
"""
本模块包含翻译流水线的主协调器。

流程：校验 → (短路 | 缓存命中 | 翻译)。翻译阶段依次执行
掩码 → 分块 → 逐块（顺序、带请求合并的）远程调用 → 拼接 → 还原 → 写缓存。
"""

import copy
from functools import partial
from typing import Any

import structlog

from resume_translator.backends.base import BaseTranslationBackend
from resume_translator.cache import CHUNKS, TRANSLATIONS, TranslationCache
from resume_translator.chunking import join_chunks, split_into_chunks
from resume_translator.config import TranslatorConfig
from resume_translator.exceptions import TextTooLongError, TranslatorError
from resume_translator.inflight import InFlightRegistry
from resume_translator.languages import (
    AUTO,
    detect_lang,
    lang_to_name,
    normalize_lang,
    validate_lang_code,
)
from resume_translator.masking import is_likely_html, mask_protect, unmask
from resume_translator.types import (
    BackendReply,
    BatchItem,
    ChunkState,
    Provider,
    StructureTranslation,
    TranslationRequest,
    TranslationResult,
)
from resume_translator.utils import fingerprint

logger = structlog.get_logger(__name__)

PARTIAL_FAILURE = "translate_partial_failure"


class Translator:
    """
    异步翻译协调器。

    缓存与请求合并表由构造方注入。同一请求内的分块严格顺序翻译，
    不同请求之间可以并发执行。
    """

    def __init__(
        self,
        config: TranslatorConfig,
        backend: BaseTranslationBackend[Any],
        cache: TranslationCache | None = None,
        inflight: InFlightRegistry[BackendReply] | None = None,
    ):
        self.config = config
        self.backend = backend
        self.cache = cache or TranslationCache(config.cache)
        self.inflight: InFlightRegistry[BackendReply] = inflight or InFlightRegistry()
        self.initialized = False

    async def initialize(self) -> None:
        if self.initialized:
            return
        await self.cache.initialize()
        await self.backend.initialize()
        self.initialized = True
        logger.info("翻译协调器初始化完成", backend=self.backend.name)

    async def close(self) -> None:
        if not self.initialized:
            return
        await self.backend.close()
        await self.cache.close()
        self.initialized = False
        logger.info("翻译协调器已关闭")

    async def __aenter__(self) -> "Translator":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _build_request(
        self,
        text: str,
        target_lang: str,
        source_lang: str,
        is_html: bool,
        domain: str,
        temperature: float | None,
        model: str | None,
        max_chars: int | None,
        chunk_chars: int | None,
        ttl: float | None,
    ) -> TranslationRequest:
        backend_config = self.backend.config
        return TranslationRequest(
            raw_text=text,
            source_lang=normalize_lang(source_lang),
            target_lang=validate_lang_code(target_lang),
            is_html=is_html,
            temperature=backend_config.temperature if temperature is None else temperature,
            model=model or backend_config.model,
            max_chars=max_chars or self.config.max_chars,
            chunk_chars=chunk_chars or self.config.chunk_chars,
            ttl=ttl or self.config.cache_ttl,
            domain=domain or "",
        )

    async def translate_text(
        self,
        text: str,
        target_lang: str,
        source_lang: str = AUTO,
        is_html: bool = False,
        domain: str = "",
        *,
        temperature: float | None = None,
        model: str | None = None,
        max_chars: int | None = None,
        chunk_chars: int | None = None,
        ttl: float | None = None,
    ) -> TranslationResult:
        """
        翻译一段文本。

        Raises:
            TargetLanguageError: 目标语言缺失或无效。
            TextTooLongError: 输入超过 `max_chars`。
            RemoteError: 已配置后端，但第一个分块就遇到了真实的远程错误。

        """
        request = self._build_request(
            text or "",
            target_lang,
            source_lang,
            is_html,
            domain,
            temperature,
            model,
            max_chars,
            chunk_chars,
            ttl,
        )
        raw = request.raw_text
        target_name = lang_to_name(request.target_lang)
        source_name = lang_to_name(request.source_lang)

        if not raw.strip():
            return TranslationResult(ok=True, translated_text="", provider=Provider.NOOP)

        source_hint = source_name
        if source_hint == AUTO:
            # 文字系统可确定语言时，自动识别也参与同语言短路
            script_lang = detect_lang(raw, strict=True)
            source_hint = lang_to_name(script_lang) if script_lang else AUTO
        if source_hint != AUTO and source_hint.lower() == target_name.lower():
            return TranslationResult(
                ok=True, translated_text=raw, provider=Provider.NOOP, chunks=1
            )

        if len(raw) > request.max_chars:
            raise TextTooLongError(limit=request.max_chars, length=len(raw))

        html = request.is_html or is_likely_html(raw)
        html_flag = "html" if html else "plain"
        cache_key = fingerprint(
            source_name, target_name, html_flag, request.model, request.domain, raw
        )
        log = logger.bind(target=request.target_lang, key=cache_key[:12])

        cached = await self.cache.get(cache_key, TRANSLATIONS)
        if cached is not None:
            log.debug("翻译缓存命中")
            return TranslationResult(
                ok=True, translated_text=cached, provider=Provider.CACHE, cached=True
            )

        masked = mask_protect(raw, is_html=html)
        chunks = split_into_chunks(masked.text, request.chunk_chars)
        states = [ChunkState.PENDING] * len(chunks)
        outputs: list[str] = []
        detected: str | None = None

        for index, chunk in enumerate(chunks):
            if not chunk.text.strip():
                # 纯空白分块原样保留，不发往后端
                states[index] = ChunkState.SUCCESS
                outputs.append(chunk.text)
                continue
            chunk_key = fingerprint(
                source_name,
                target_name,
                html_flag,
                request.model,
                request.domain,
                chunk.text,
            )
            states[index] = ChunkState.IN_FLIGHT
            try:
                reply = await self._translate_chunk(
                    chunk.text, chunk_key, request, source_name, target_name, html
                )
            except TranslatorError as e:
                states[index] = ChunkState.FAILURE
                log.warning(
                    "分块翻译失败",
                    chunk_index=index,
                    chunks=len(chunks),
                    error=e.code,
                    status=e.status,
                )
                if outputs:
                    # 已完成的前缀之间保留原始分隔符，末尾不追加分隔符
                    partial_text = join_chunks(chunks[: index - 1], outputs[:-1])
                    partial_text += outputs[-1]
                    return TranslationResult(
                        ok=False,
                        partial_text=unmask(partial_text, masked.restores),
                        failed_at_chunk_index=index,
                        error_code=PARTIAL_FAILURE,
                        status=e.status,
                        provider=Provider.REMOTE,
                        chunks=len(chunks),
                        meta={"chunk_states": [s.value for s in states]},
                    )
                if not self.backend.is_configured:
                    # 缺少凭据：返回原文，不抛出
                    log.warning("后端未配置，返回原文", backend=self.backend.name)
                    return TranslationResult(
                        ok=True,
                        translated_text=raw,
                        provider=Provider.FALLBACK,
                        chunks=len(chunks),
                    )
                raise
            states[index] = ChunkState.SUCCESS
            outputs.append(reply.text)
            detected = detected or reply.detected_lang
        detected = detected or detect_lang(raw)

        translated = unmask(join_chunks(chunks, outputs), masked.restores)
        await self.cache.set(cache_key, translated, ttl=request.ttl, category=TRANSLATIONS)
        log.info("翻译完成", chunks=len(chunks), chars=len(raw))
        return TranslationResult(
            ok=True,
            translated_text=translated,
            provider=Provider.REMOTE,
            chunks=len(chunks),
            cached=False,
            meta={
                "backend": self.backend.name,
                "model": request.model,
                "html": html,
                "source": source_name,
                "target": target_name,
                "domain": request.domain,
                "detected": detected,
            },
        )

    async def _translate_chunk(
        self,
        text: str,
        key: str,
        request: TranslationRequest,
        source_name: str,
        target_name: str,
        html: bool,
    ) -> BackendReply:
        """先查分块缓存，再通过请求合并表调用后端。"""
        cached = await self.cache.get(key, CHUNKS)
        if cached is not None:
            return BackendReply(text=cached)
        reply = await self.inflight.run(
            key,
            partial(
                self.backend.translate_chunk,
                text,
                source_name=source_name,
                target_name=target_name,
                is_html=html,
                temperature=request.temperature,
                model=request.model,
                domain=request.domain,
            ),
        )
        await self.cache.set(key, reply.text, ttl=request.ttl, category=CHUNKS)
        return reply

    async def translate_many(
        self,
        items: list[str | BatchItem],
        target_lang: str | None = None,
        source_lang: str = AUTO,
        is_html: bool = False,
        domain: str = "",
        **options: Any,
    ) -> list[TranslationResult]:
        """
        顺序地批量翻译，输出顺序与输入一致。

        单个条目的失败会被转换为 `ok=False` 的结果，不会中断整个批次。
        """
        results: list[TranslationResult] = []
        for index, raw_item in enumerate(items):
            item = raw_item if isinstance(raw_item, BatchItem) else BatchItem(text=raw_item)
            try:
                result = await self.translate_text(
                    item.text,
                    item.target_lang or target_lang or "",
                    item.source_lang or source_lang,
                    is_html if item.is_html is None else item.is_html,
                    domain if item.domain is None else item.domain,
                    **options,
                )
            except TranslatorError as e:
                logger.warning("批量条目翻译失败", index=index, error=e.code)
                result = TranslationResult(ok=False, error_code=e.code, status=e.status)
            except Exception:
                logger.error("批量条目发生未知错误", index=index, exc_info=True)
                result = TranslationResult(
                    ok=False, error_code="translate_failed", status=500
                )
            results.append(result)
        return results

    async def translate_structure(
        self,
        payload: Any,
        target_lang: str,
        source_lang: str = AUTO,
        **options: Any,
    ) -> StructureTranslation:
        """
        翻译嵌套文档（如整份简历 JSON）中所有非空字符串叶子，保持结构不变。

        翻译失败的字段保留原文，其路径记录在 `failed_paths` 中。
        """
        paths: list[tuple[Any, ...]] = []
        texts: list[str | BatchItem] = []
        _collect_strings(payload, (), paths, texts)

        results = await self.translate_many(texts, target_lang, source_lang, **options)

        output = copy.deepcopy(payload)
        failed: list[str] = []
        translated = 0
        for path, result in zip(paths, results):
            if result.ok and result.translated_text is not None:
                output = _assign(output, path, result.translated_text)
                translated += 1
            else:
                failed.append(_format_path(path))
        return StructureTranslation(
            ok=not failed, payload=output, translated_count=translated, failed_paths=failed
        )


def _collect_strings(
    node: Any, path: tuple[Any, ...], paths: list[tuple[Any, ...]], texts: list[Any]
) -> None:
    if isinstance(node, str):
        if node.strip():
            paths.append(path)
            texts.append(node)
    elif isinstance(node, list):
        for i, child in enumerate(node):
            _collect_strings(child, (*path, i), paths, texts)
    elif isinstance(node, dict):
        for key, child in node.items():
            _collect_strings(child, (*path, key), paths, texts)


def _assign(root: Any, path: tuple[Any, ...], value: str) -> Any:
    if not path:
        return value
    node = root
    for step in path[:-1]:
        node = node[step]
    node[path[-1]] = value
    return root


def _format_path(path: tuple[Any, ...]) -> str:
    out = ""
    for step in path:
        out += f"[{step}]" if isinstance(step, int) else (f".{step}" if out else str(step))
    return out or "$"
