import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from PIL import Image

from .errors import LoadCancelled, StalledLoad, UnsupportedSource
from .models import ImageDescriptor
from ..api.base import HostEngine
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


@dataclass
class LoadRequest:
    """A single bitmap to load into the host engine."""
    key: str
    url: str


@dataclass
class LoadReport:
    """Outcome of a batch load: keys whose pixels were captured, and per-key faults."""
    loaded: List[str] = field(default_factory=list)
    faults: Dict[str, Exception] = field(default_factory=dict)
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.faults


def build_requests(descriptors: Iterable[ImageDescriptor]) -> List[LoadRequest]:
    """Expand descriptors into load requests: base image plus any extruded/normal variants."""
    return [
        LoadRequest(key, url)
        for descriptor in descriptors
        for key, url in descriptor.variant_urls()
    ]


def _is_pil_image(handle: Any) -> bool:
    return isinstance(handle, Image.Image)


class AssetLoader:
    """
    Fan-out/join loader for image batches.

    Every load is started before any is awaited. Completed loads whose handles
    are addressable pixel sources are captured into ``images`` for the
    derivation pass; everything else is reported per key.
    """

    def __init__(
        self,
        host: HostEngine,
        max_concurrent: int = 0,
        can_encode: Callable[[Any], bool] = _is_pil_image,
    ) -> None:
        self.host = host
        self.can_encode = can_encode
        self.images: Dict[str, Any] = {}
        # Semaphore for limiting loads the host services at once
        self.semaphore = asyncio.Semaphore(max_concurrent) if max_concurrent > 0 else None

    async def load_all(
        self,
        requests: List[LoadRequest],
        timeout: Optional[float] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> LoadReport:
        """
        Load every request concurrently and wait for all of them.

        Args:
            requests: Bitmaps to load.
            timeout: Seconds to wait for the whole batch. Loads still pending
                afterwards are cancelled and reported as StalledLoad.
                ``None`` waits indefinitely.
            cancel: Event that, once set, cancels pending loads and reports
                them as LoadCancelled.

        Returns:
            LoadReport with captured keys and per-key faults.
        """
        start_time = time.time()
        report = LoadReport()
        if not requests:
            return report

        logger.info(f"Starting load of {len(requests)} images")

        # Create tasks for all images before awaiting any of them
        tasks = {
            asyncio.ensure_future(self._load_single(request, report)): request
            for request in requests
        }
        joined = asyncio.gather(*tasks, return_exceptions=True)
        waiters = {joined}
        cancel_waiter = None
        if cancel is not None:
            cancel_waiter = asyncio.ensure_future(cancel.wait())
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
            if joined not in done:
                cancelled = cancel_waiter is not None and cancel_waiter in done
                await self._abandon(tasks, report, cancelled, timeout)
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()
            for task in tasks:
                task.cancel()
            await asyncio.gather(joined, return_exceptions=True)

        report.elapsed = time.time() - start_time
        logger.info(
            f"Completed load of {len(report.loaded)}/{len(requests)} images "
            f"in {report.elapsed:.2f}s ({len(report.faults)} faults)"
        )
        return report

    async def _abandon(
        self,
        tasks: Dict["asyncio.Future[None]", LoadRequest],
        report: LoadReport,
        cancelled: bool,
        timeout: Optional[float],
    ) -> None:
        """Cancel loads that have not finished and record why."""
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            request = tasks[task]
            task.cancel()
            if cancelled:
                fault = LoadCancelled(f"Load of {request.key} was cancelled", request.key)
            else:
                fault = StalledLoad(
                    f"Load of {request.key} from {request.url} did not complete within {timeout}s",
                    request.key,
                )
            report.faults[request.key] = fault
            logger.warning(str(fault))
        await asyncio.gather(*pending, return_exceptions=True)

    async def _load_single(self, request: LoadRequest, report: LoadReport) -> None:
        """Load one bitmap and capture its handle if it is rasterizable."""
        try:
            if self.semaphore is not None:
                async with self.semaphore:
                    await self.host.load_image(request.key, request.url)
            else:
                await self.host.load_image(request.key, request.url)
            handle = self.host.get_loaded_image(request.key)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            report.faults[request.key] = e
            logger.error(f"Failed to load {request.key} from {request.url}: {e}")
            return

        if not self.can_encode(handle):
            fault = UnsupportedSource(
                f"Loaded {request.key} is backed by {type(handle).__name__}, not addressable pixels",
                request.key,
            )
            report.faults[request.key] = fault
            logger.warning(str(fault))
            return

        self.images[request.key] = handle
        report.loaded.append(request.key)
        logger.debug(f"Captured {request.key}")

    def get(self, key: str) -> Optional[Any]:
        return self.images.get(key)

    def discard(self, key: str) -> None:
        self.images.pop(key, None)

    def clear(self) -> None:
        self.images.clear()
