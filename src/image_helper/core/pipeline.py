#!/usr/bin/env python3
"""
pipeline.py: Load-then-derive orchestration for image batches.

Provides ImagePipeline, a per-scene context object that loads a batch of image
descriptors into the host engine, derives encoded whole images, sub-region
crops and nine-slice fragments, and exposes them by key once the batch is
ready. Optional callbacks can be attached to monitor load and derivation
progress.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import InvalidGeometry, NotFound
from .geometry import full_rect, resolve_grid, slice_to_rect
from .image_cache import ArtifactCache
from .image_encoder import PillowRasterizer, Rasterizer
from .loader import AssetLoader, LoadReport, build_requests
from .models import (
    VARIANTS,
    ImageDescriptor,
    NineSliceData,
    NineSliceSpec,
    ParseDescriptor,
    Rect,
    variant_key,
)
from .nine_slice import build_nine_slice_data, validate_spec
from .readiness import ReadinessGate
from ..api.base import HostEngine
from ..config import PipelineConfig
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


@dataclass
class DerivedArtifacts:
    """Everything derived from one descriptor, ready to commit."""
    key: str
    images: Dict[str, str] = field(default_factory=dict)
    textures: List[str] = field(default_factory=list)
    nine_slices: Dict[str, NineSliceData] = field(default_factory=dict)


@dataclass
class BatchReport:
    """Result of one ``ImagePipeline.load`` call."""
    loaded: List[str] = field(default_factory=list)
    derived: List[str] = field(default_factory=list)
    faults: Dict[str, Exception] = field(default_factory=dict)
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.faults


class ImagePipeline:
    """
    Loads image batches and serves their derived artifacts.

    One pipeline is owned per scene or session; independent pipelines share
    no state. Only one batch should be loading at a time.
    """

    def __init__(
        self,
        host: HostEngine,
        rasterizer: Optional[Rasterizer] = None,
        config: Optional[PipelineConfig] = None,
    ):
        self.config = config or PipelineConfig()
        self.host = host
        self.rasterizer = rasterizer or PillowRasterizer(self.config.encode_format)
        self.cache = ArtifactCache(host)
        self.loader = AssetLoader(
            host,
            max_concurrent=self.config.max_concurrent_loads,
            can_encode=self.rasterizer.can_encode,
        )
        self.gate = ReadinessGate(self.config.settle_ticks)
        self.descriptors: List[ImageDescriptor] = []
        self.on_load_complete: Optional[Callable[[LoadReport], None]] = None
        self.on_derive_progress: Optional[Callable[[str, int, int], None]] = None
        self.on_ready: Optional[Callable[[], None]] = None
        self._loading = False
        self._cancel: Optional[asyncio.Event] = None

    def update_host(self, host: HostEngine) -> None:
        """Point the pipeline at a new host engine, e.g. after a scene change."""
        self.host = host
        self.cache.host = host
        self.loader.host = host

    @property
    def is_ready(self) -> bool:
        return self.gate.is_ready

    async def load(self, descriptors: List[ImageDescriptor]) -> BatchReport:
        """
        Load a batch, derive its artifacts and open the readiness gate.

        Artifacts are merged into those of earlier batches. Load and
        derivation faults are collected per key in the returned report.
        """
        if self._loading:
            logger.warning("load() called while another batch is loading; keys may collide")
        start_time = time.time()
        self._loading = True
        self._cancel = asyncio.Event()
        self.gate.reset()
        batch = list(descriptors)
        report = BatchReport()
        try:
            load_report = await self.loader.load_all(
                build_requests(batch),
                timeout=self.config.batch_timeout,
                cancel=self._cancel,
            )
            report.loaded = list(load_report.loaded)
            report.faults.update(load_report.faults)
            self.descriptors.extend(batch)
            if self.on_load_complete:
                self.on_load_complete(load_report)

            await self._derive_all(batch, report)
        finally:
            self._loading = False
            self._cancel = None
            self.gate.mark_ready()

        report.elapsed = time.time() - start_time
        logger.info(
            f"Batch ready: {len(report.derived)} derived, {len(report.faults)} faults "
            f"in {report.elapsed:.2f}s"
        )
        if self.on_ready:
            self.on_ready()
        return report

    def cancel(self) -> None:
        """Cancel the loads still pending in the current batch."""
        if self._cancel is not None:
            self._cancel.set()

    async def wait_ready(self) -> None:
        """Suspend until the current batch is fully derived."""
        await self.gate.wait()

    async def _derive_all(self, batch: List[ImageDescriptor], report: BatchReport) -> None:
        """Derive descriptors one at a time off the event loop, committing in batch order."""
        jobs: List[Tuple[ImageDescriptor, Any]] = []
        for descriptor in batch:
            source = self.loader.get(descriptor.key)
            if source is None:
                logger.debug(f"Skipping derivation of {descriptor.key}: no loaded pixels")
                continue
            jobs.append((descriptor, source))

        # Sequential: at most one encode runs at a time
        loop = asyncio.get_running_loop()
        total = len(jobs)
        for done, (descriptor, source) in enumerate(jobs, start=1):
            try:
                artifacts = await loop.run_in_executor(None, self._derive, descriptor, source)
            except Exception as e:
                report.faults[descriptor.key] = e
                logger.error(f"Failed to derive {descriptor.key}: {e}")
            else:
                try:
                    self._commit(artifacts)
                    report.derived.append(descriptor.key)
                except Exception as e:
                    report.faults[descriptor.key] = e
                    logger.error(f"Failed to register artifacts for {descriptor.key}: {e}")
            if self.on_derive_progress:
                self.on_derive_progress(descriptor.key, done, total)

        # Raw pixels are only needed while deriving
        for descriptor in batch:
            for key, _ in descriptor.variant_urls():
                self.loader.discard(key)

    def _derive(self, descriptor: ImageDescriptor, source: Any) -> DerivedArtifacts:
        """Encode one descriptor's whole image, variants, parse fragments and nine-slices."""
        reserved = {variant_key(descriptor.key, v) for v in VARIANTS}
        for parse in descriptor.parse:
            if parse.key in reserved:
                raise ValueError(f"Parse key {parse.key!r} collides with image {descriptor.key!r}")

        artifacts = DerivedArtifacts(descriptor.key)
        width, height = source.width, source.height

        artifacts.images[descriptor.key] = self.rasterizer.encode(source, width, height)
        for key, _ in descriptor.variant_urls()[1:]:
            variant = self.loader.get(key)
            if variant is not None:
                artifacts.images[key] = self.rasterizer.encode(variant, variant.width, variant.height)

        for parse in descriptor.parse:
            rect = self._resolve_rect(descriptor, parse, width, height)
            artifacts.images[parse.key] = self.rasterizer.encode(
                source, rect.width, rect.height, rect.x, rect.y
            )
            artifacts.textures.append(parse.key)

            spec = descriptor.resolve_nine_slice(parse)
            if spec is not None:
                artifacts.nine_slices[parse.key] = self._compose(
                    parse.key, source, spec, (rect.x, rect.y)
                )

        if descriptor.nine_slice is not None:
            artifacts.nine_slices[descriptor.key] = self._compose(
                descriptor.key, source, descriptor.nine_slice, (0, 0)
            )
        return artifacts

    def _resolve_rect(
        self, descriptor: ImageDescriptor, parse: ParseDescriptor, width: int, height: int
    ) -> Rect:
        strict = self.config.strict_bounds
        if parse.slice is not None:
            grid = resolve_grid(parse.slice, descriptor, self.config.default_grid)
            rect = slice_to_rect(width, parse.slice, grid, height if strict else None)
        elif parse.rect is not None:
            rect = parse.rect
            if rect.width <= 0 or rect.height <= 0:
                raise InvalidGeometry(f"Rect for {parse.key} has no area: {rect}", parse.key)
        else:
            return full_rect(width, height)

        if not rect.fits_within(width, height):
            if strict:
                raise InvalidGeometry(
                    f"Rect for {parse.key} {rect} exceeds source {width}x{height}", parse.key
                )
            logger.warning(f"Rect for {parse.key} {rect} extends past source {width}x{height}")
        return rect

    def _compose(
        self, key: str, source: Any, spec: NineSliceSpec, offset: Tuple[int, int]
    ) -> NineSliceData:
        bounds = (source.width, source.height)
        if self.config.strict_bounds:
            validate_spec(spec, offset, bounds)
        elif not Rect(offset[0], offset[1], spec.width, spec.height).fits_within(*bounds):
            logger.warning(f"Nine-slice for {key} extends past source {bounds[0]}x{bounds[1]}")
        return build_nine_slice_data(source, spec, self.rasterizer, offset)

    def _commit(self, artifacts: DerivedArtifacts) -> None:
        registered = []
        try:
            for key in artifacts.textures:
                self.host.register_encoded_texture(key, artifacts.images[key])
                registered.append(key)
        except Exception:
            for key in registered:
                self.host.remove_texture(key)
            raise
        for key, encoded in artifacts.images.items():
            self.cache.put(key, encoded)
        for key, data in artifacts.nine_slices.items():
            self.cache.put_nine_slice(key, data)

    def url(self, key: str, variant: str = "") -> str:
        """Encoded image for ``key`` (or its extruded/normal variant); "" on a miss."""
        return self.cache.url(key, variant)

    def nine_slice_data(self, key: str) -> NineSliceData:
        """Nine-slice fragments for overlay UI; an empty record on a miss."""
        return self.cache.nine_slice_data(key)

    def nine_slice(
        self,
        key: str,
        x: float = 0,
        y: float = 0,
        width: float = 100,
        height: float = 100,
    ) -> Optional[Any]:
        """Create a host display node drawing ``key`` as a nine-slice."""
        data = self.cache.lookup_nine_slice(key)
        if isinstance(data, NotFound):
            logger.error(str(data))
            return None
        return self.host.create_nine_slice_node(
            x,
            y,
            key,
            width,
            height,
            data.left_width,
            data.right_width,
            data.top_height,
            data.bottom_height,
        )

    def remove(self, key: str) -> None:
        """Remove ``key`` and its variants from the cache and the host engine."""
        self.cache.remove(key)
        for variant in VARIANTS:
            self.loader.discard(variant_key(key, variant))

    def clear(self) -> None:
        """Remove every descriptor ever loaded and reset all stores."""
        for descriptor in self.descriptors:
            for key in descriptor.keys():
                self.remove(key)
        self.descriptors = []
        self.cache.clear()
        self.loader.clear()
        logger.info("Cleared all image artifacts")
