"""Shared asyncpg pool for the feed read stores."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import asyncpg

from socialfeed.settings import settings

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.pool.Pool] = None


def pool_options() -> Dict[str, Any]:
	"""Pool arguments derived from settings.

	The feed only reads, so sessions default to read-only transactions and
	carry the service name for ``pg_stat_activity``.
	"""
	return {
		"dsn": settings.postgres_url,
		"min_size": settings.postgres_min_pool_size,
		"max_size": max(settings.postgres_max_pool_size, settings.postgres_min_pool_size),
		"command_timeout": settings.postgres_command_timeout,
		"server_settings": {
			"application_name": settings.service_name,
			"default_transaction_read_only": "on",
		},
	}


async def init_pool() -> asyncpg.pool.Pool:
	global _pool
	if _pool is None:
		options = pool_options()
		_pool = await asyncpg.create_pool(**options)
		logger.info(
			"postgres.pool_ready",
			extra={"min_size": options["min_size"], "max_size": options["max_size"]},
		)
	return _pool


def set_pool(pool: Optional[asyncpg.pool.Pool]) -> None:
	global _pool
	_pool = pool


async def get_pool() -> asyncpg.pool.Pool:
	if _pool is None:
		await init_pool()
	if _pool is None:
		raise RuntimeError("postgres pool is not initialised")
	return _pool


async def close_pool() -> None:
	global _pool
	pool, _pool = _pool, None
	if pool is not None:
		await pool.close()
		logger.info("postgres.pool_closed")
