"""
Page cache service: serves Drupal's cached JSON responses straight from Redis.
"""

import sys
import os
from typing import Dict, Optional

# Add shared directory to path
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import CorruptPayloadError, StoreUnavailableError
from shared.logging import set_cid_context

from .cache import DrupalCacheReader, EntryVerdict
from .store import create_store


class PageCacheService(BaseService):
    """Page cache service implementation."""

    def __init__(self, store=None, config: Optional[ServiceConfig] = None):
        super().__init__("pagecache", 8020, config=config)

        self.store = store if store is not None else create_store(self.config)
        self.reader = DrupalCacheReader(
            self.store,
            self.config.cid_template,
            page_bin=self.config.page_bin,
            tag_bin=self.config.tag_bin
        )

        @self.app.on_event("startup")
        async def _startup():
            try:
                await self.store.ping()
                self.logger.info("Redis store reachable", redis_url=self.config.redis_url)
            except RedisError as e:
                self.logger.warning("Redis store not reachable at startup", error=str(e))

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.store.close()
            self.logger.info("Redis store closed")

        self._setup_pagecache_routes()

        self.app.state.pagecache_service = self

    def _setup_pagecache_routes(self):
        """Set up page cache routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "pagecache",
                "message": "Drupal page cache reader",
                "version": "1.0.0",
                "cid_template": self.config.cid_template,
                "bins": {"page": self.config.page_bin, "tags": self.config.tag_bin}
            }

        @self.app.get("/cache/{cid:path}")
        async def get_cached_page(cid: str):
            """Return the cached payload for a Drupal cache id."""
            set_cid_context(cid)

            with self.metrics.time_lookup():
                try:
                    result = await self.reader.inspect(cid)
                except CorruptPayloadError:
                    self.metrics.record_lookup("corrupt")
                    raise
                except RedisError as e:
                    self.metrics.record_lookup("store_error")
                    raise StoreUnavailableError(details={"error": str(e)}) from e

            if result.hit:
                self.metrics.record_lookup("hit")
                self.logger.debug("Cache hit", key=result.key)
                return result.payload

            outcome = "miss" if result.verdict is EntryVerdict.ABSENT else "invalid"
            self.metrics.record_lookup(outcome)
            self.logger.debug("Cache miss", key=result.key, verdict=result.verdict.value)
            return JSONResponse(
                status_code=404,
                content={
                    "code": "CACHE_MISS",
                    "message": "No valid cache entry",
                    "details": {"key": result.key, "verdict": result.verdict.value}
                }
            )

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check Redis connectivity."""
        await self.store.ping()
        return {"redis": "ok"}


def create_app(store=None, config: Optional[ServiceConfig] = None):
    """Create page cache service application."""
    service = PageCacheService(store=store, config=config)
    return service.app


if __name__ == "__main__":
    service = PageCacheService()
    service.run()
