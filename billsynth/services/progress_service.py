import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class ProgressService:
    """Progress snapshots of running generations, kept in Redis with a TTL."""

    def __init__(self, redis_client: Optional[redis.Redis], ttl_seconds: int = 3600):
        self.redis = redis_client
        self.ttl = ttl_seconds

    @staticmethod
    def _key(run_id: str) -> str:
        return f"{run_id}_generation_progress"

    async def publish(self, run_id: str, state: str, **snapshot: Any) -> None:
        if self.redis is None:
            return
        payload = {"run_id": run_id, "state": state, **snapshot}
        try:
            await self.redis.set(self._key(run_id), json.dumps(payload), ex=self.ttl)
        except Exception as e:
            logger.warning(f"Progress write error for run '{run_id}': {e}", exc_info=True)

    async def fetch(self, run_id: str) -> Optional[Dict[str, Any]]:
        if self.redis is None:
            return None
        cached = await self.redis.get(self._key(run_id))
        return json.loads(cached) if cached else None
