import asyncio
import enum

from ..utils.log_utils import get_logger

logger = get_logger(__name__)


class GateState(enum.Enum):
    LOADING = "loading"
    READY = "ready"


class ReadinessGate:
    """
    One-shot barrier between a batch load and callers reading the cache.

    ``reset()`` closes the gate for a new batch; ``mark_ready()`` opens it and
    releases every waiter at once. Waiting on an open gate returns after
    ``settle_ticks`` scheduling ticks, giving the host engine a chance to
    finish bookkeeping tied to the completed loads.
    """

    def __init__(self, settle_ticks: int = 1):
        if settle_ticks < 1:
            raise ValueError("settle_ticks must be at least 1")
        self.settle_ticks = settle_ticks
        self.state = GateState.LOADING
        self._event = asyncio.Event()

    @property
    def is_ready(self) -> bool:
        return self.state is GateState.READY

    def reset(self) -> None:
        if self.state is GateState.READY:
            logger.debug("Readiness gate closed for a new batch")
        self.state = GateState.LOADING
        self._event.clear()

    def mark_ready(self) -> None:
        self.state = GateState.READY
        self._event.set()
        logger.debug("Readiness gate opened")

    async def wait(self) -> None:
        """Suspend until the gate is open, then yield to the event loop."""
        await self._event.wait()
        for _ in range(self.settle_ticks):
            await asyncio.sleep(0)
