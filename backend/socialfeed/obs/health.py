"""Health check helpers for liveness and readiness probes."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Dict

from socialfeed.infra import postgres
from socialfeed.infra.redis import redis_client

LOGGER = logging.getLogger(__name__)


async def _redis_status(timeout: float = 0.2) -> Dict[str, Any]:
	start = perf_counter()
	try:
		await asyncio.wait_for(redis_client.ping(), timeout=timeout)
	except Exception as exc:  # pragma: no cover - depends on runtime
		LOGGER.warning("Redis readiness check failed", exc_info=True)
		return {"ok": False, "error": str(exc)}
	return {"ok": True, "latency_ms": round((perf_counter() - start) * 1000, 2)}


async def _postgres_status(timeout: float = 0.3) -> Dict[str, Any]:
	start = perf_counter()
	try:
		pool = await postgres.get_pool()
		async with pool.acquire() as conn:
			await asyncio.wait_for(conn.execute("SELECT 1"), timeout=timeout)
	except Exception as exc:  # pragma: no cover - depends on runtime
		LOGGER.warning("Postgres readiness query failed", exc_info=True)
		return {"ok": False, "error": str(exc)}
	return {"ok": True, "latency_ms": round((perf_counter() - start) * 1000, 2)}


async def readiness() -> Dict[str, Any]:
	"""Report dependency status; the identity cache is optional so redis never blocks readiness."""
	postgres_status, redis_status = await asyncio.gather(_postgres_status(), _redis_status())
	return {
		"ok": bool(postgres_status["ok"]),
		"postgres": postgres_status,
		"redis": redis_status,
	}
