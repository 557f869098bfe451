import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Dict, Optional

from billsynth.core.config import GenerationConfig
from billsynth.services.inventory import InventoryLedger

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Dict[str, Any]], Awaitable[None] | None]


class GenerationCancelled(Exception):
    """Raised at a checkpoint once the run's cancel token is set."""


class CancelToken:
    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class GenerationSession:
    """
    Everything one generation run owns: the ledger, the random source,
    tunables, the cancel flag and the progress sink. Nothing here is shared
    between runs.
    """

    def __init__(
        self,
        ledger: InventoryLedger,
        config: Optional[GenerationConfig] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        cancel_token: Optional[CancelToken] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.ledger = ledger
        self.config = config or GenerationConfig()
        self.rng = rng or random.Random(seed)
        self.cancel_token = cancel_token or CancelToken()
        self.on_progress = on_progress
        self.progress: Dict[str, Any] = {}

    async def checkpoint(self, **progress) -> None:
        """Yield to the event loop, publish progress, honour cancellation."""
        if progress:
            self.progress.update(progress)
            if self.on_progress is not None:
                try:
                    result = self.on_progress(dict(self.progress))
                    if asyncio.iscoroutine(result):
                        await result
                except Exception as e:
                    logger.warning(f"Progress callback failed: {e}")
        await asyncio.sleep(0)
        if self.cancel_token.cancelled:
            raise GenerationCancelled("Generation cancelled by request.")
