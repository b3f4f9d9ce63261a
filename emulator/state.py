"""Emulator state: the resource store and throttling injection."""

import asyncio
import time
from dataclasses import dataclass

import structlog
from fastapi import Request

from .config import EmulatorConfig
from .store import ResourceStore

logger = structlog.get_logger("emulator.state")


@dataclass
class ThrottleConfig:
    """Configuration for injected 429 responses."""

    remaining: int = 0
    retry_after_ms: int = 0


class ThrottleManager:
    """Answers a configured number of upcoming requests with 429."""

    def __init__(self):
        self._config = ThrottleConfig()
        self._lock = asyncio.Lock()

    async def should_throttle(self) -> bool:
        """
        Check whether the current request is throttled.

        Each throttled request consumes one from the remaining count.
        """
        async with self._lock:
            if self._config.remaining <= 0:
                return False
            self._config.remaining -= 1
            logger.debug("Request throttled", remaining=self._config.remaining)
            return True

    @property
    def retry_after_ms(self) -> int:
        return self._config.retry_after_ms

    async def set_count(self, count: int, retry_after_ms: int = 0) -> None:
        async with self._lock:
            self._config.remaining = max(0, count)
            self._config.retry_after_ms = max(0, retry_after_ms)
            logger.info(
                "Throttling activated",
                remaining=self._config.remaining,
                retry_after_ms=self._config.retry_after_ms,
            )

    async def reset(self) -> None:
        async with self._lock:
            self._config = ThrottleConfig()
            logger.info("Throttling reset")

    async def get_status(self) -> dict:
        async with self._lock:
            return {
                "remaining": self._config.remaining,
                "retry_after_ms": self._config.retry_after_ms,
            }


class EmulatorState:
    """Per-app state container."""

    def __init__(self, config: EmulatorConfig):
        self.config = config
        self.store = ResourceStore(default_offer_throughput=config.default_offer_throughput)
        self.throttle = ThrottleManager()
        self._startup_time = time.time()

    def get_uptime_seconds(self) -> float:
        return time.time() - self._startup_time


def get_state(request: Request) -> EmulatorState:
    """Dependency to get the emulator state from app state."""
    return request.app.state.emulator


def get_store(request: Request) -> ResourceStore:
    return request.app.state.emulator.store
