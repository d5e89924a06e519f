# config/cache.py
from typing import Optional
from redis.asyncio import Redis, from_url
from redis.asyncio.retry import Retry
from redis.backoff import AbstractBackoff
from redis.exceptions import ConnectionError, TimeoutError
from config.settings import settings


class LinearBackoff(AbstractBackoff):
    """
    Reconnect delay that grows by `step` per failed attempt, capped at `cap` (seconds).
    """

    def __init__(self, step: float = 0.2, cap: float = 3.0) -> None:
        self._step = step
        self._cap = cap

    def reset(self) -> None:
        pass

    def compute(self, failures: int) -> float:
        return min(max(failures, 1) * self._step, self._cap)


def create_redis(
    url: str = settings.REDIS_URL, password: Optional[str] = settings.REDIS_PASSWORD
) -> Redis:
    """
    Build a client without connecting; the first command opens the socket.
    """
    backoff = LinearBackoff(
        step=settings.REDIS_BACKOFF_STEP_MS / 1000.0,
        cap=settings.REDIS_BACKOFF_CAP_MS / 1000.0,
    )
    return from_url(
        url,
        password=password,
        encoding="utf-8",
        decode_responses=True,  # cache values are JSON text
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_keepalive=True,
        health_check_interval=30,
        retry=Retry(
            backoff,
            settings.REDIS_RETRIES,
            supported_errors=(ConnectionError, TimeoutError),
        ),
    )


async def close_redis(client: Optional[Redis]) -> None:
    if client is not None:
        await client.aclose()
