# resume_translator/cache.py
"""本模块提供按类别划分的、带 TTL 的进程内缓存，用于减少重复的翻译请求。"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog
from cachetools import FIFOCache
from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)

TRANSLATIONS = "translations"
CHUNKS = "chunks"


class CacheCategoryConfig(BaseModel):
    """单个缓存类别的配置。`ttl` 以秒为单位。"""

    maxsize: int = Field(default=1000, gt=0)
    ttl: float = Field(default=24 * 3600, gt=0)


def _default_categories() -> dict[str, CacheCategoryConfig]:
    return {
        TRANSLATIONS: CacheCategoryConfig(maxsize=1000, ttl=24 * 3600),
        CHUNKS: CacheCategoryConfig(maxsize=5000, ttl=24 * 3600),
    }


class CacheConfig(BaseModel):
    """缓存配置模型。"""

    categories: dict[str, CacheCategoryConfig] = Field(
        default_factory=_default_categories
    )
    sweep_interval: float = Field(
        default=0, ge=0, description="后台清扫过期条目的间隔（秒），0 表示禁用"
    )


@dataclass(frozen=True)
class CacheEntry:
    """缓存条目：值、过期时间与插入时间（均为计时器读数）。"""

    value: str
    expires_at: float
    inserted_at: float


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0


class TranslationCache:
    """
    一个按类别划分的内存缓存。

    - 过期在访问时惰性检查，可选的后台任务会周期性清扫；
    - 每个类别有最大条目数，超出时最早插入的条目先被淘汰；
    - 所有操作都在事件循环内同步完成，不加锁。
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.config = config or CacheConfig()
        self._timer = timer
        self._buckets: dict[str, FIFOCache[str, CacheEntry]] = {}
        self._stats = CacheStats()
        self._sweeper: asyncio.Task[None] | None = None
        self._initialize_buckets()

    def _initialize_buckets(self) -> None:
        self._buckets = {
            name: FIFOCache(maxsize=cat.maxsize)
            for name, cat in self.config.categories.items()
        }

    def _bucket(self, category: str) -> FIFOCache[str, CacheEntry]:
        try:
            return self._buckets[category]
        except KeyError:
            raise KeyError(f"未知的缓存类别: {category!r}") from None

    async def initialize(self) -> None:
        """启动后台清扫任务（若已配置）。"""
        if self.config.sweep_interval and self._sweeper is None:
            self._sweeper = asyncio.create_task(self._sweep_loop())
            logger.debug("缓存清扫任务已启动", interval=self.config.sweep_interval)

    async def close(self) -> None:
        """停止后台清扫任务。缓存内容随进程结束而丢失。"""
        if self._sweeper is not None:
            self._sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweeper
            self._sweeper = None

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.sweep_interval)
            removed = self.purge_expired()
            if removed:
                logger.debug("已清扫过期缓存条目", removed=removed)

    def purge_expired(self) -> int:
        """删除所有已过期的条目，返回删除数量。"""
        now = self._timer()
        removed = 0
        for bucket in self._buckets.values():
            expired = [k for k, e in bucket.items() if e.expires_at <= now]
            for key in expired:
                del bucket[key]
            removed += len(expired)
        return removed

    async def get(self, key: str, category: str = TRANSLATIONS) -> str | None:
        """返回未过期的缓存值；不存在或已过期时返回 None。"""
        bucket = self._bucket(category)
        entry = bucket.get(key)
        if entry is not None and entry.expires_at <= self._timer():
            del bucket[key]
            entry = None
        if entry is None:
            self._stats.misses += 1
            return None
        self._stats.hits += 1
        return entry.value

    async def set(
        self,
        key: str,
        value: str,
        ttl: float | None = None,
        category: str = TRANSLATIONS,
    ) -> None:
        """写入一个条目。`ttl` 缺省时使用类别的默认 TTL。"""
        bucket = self._bucket(category)
        now = self._timer()
        lifetime = ttl if ttl is not None else self.config.categories[category].ttl
        # 重新写入已存在的键视为新插入，移到淘汰顺序的末尾
        bucket.pop(key, None)
        bucket[key] = CacheEntry(value=value, expires_at=now + lifetime, inserted_at=now)
        self._stats.sets += 1

    async def delete(self, key: str, category: str = TRANSLATIONS) -> bool:
        """删除一个条目，返回它是否存在。"""
        removed = self._bucket(category).pop(key, None) is not None
        if removed:
            self._stats.deletes += 1
        return removed

    async def clear(self) -> None:
        """清空所有类别。"""
        self._initialize_buckets()
        logger.info("翻译缓存已清空")

    def stats(self) -> dict[str, int]:
        """返回命中/未命中/写入/删除计数以及各类别当前条目数。"""
        data = {
            "hits": self._stats.hits,
            "misses": self._stats.misses,
            "sets": self._stats.sets,
            "deletes": self._stats.deletes,
        }
        for name, bucket in self._buckets.items():
            data[f"size_{name}"] = len(bucket)
        return data
