"""
image_cache.py - keyed stores for encoded images and nine-slice data.

Keys are shared between whole images and their parse fragments, so a key
names exactly one artifact at a time. Misses never raise: ``url`` and
``nine_slice_data`` log and return an empty default, ``lookup`` and
``lookup_nine_slice`` return a ``NotFound`` instance.

Example:
    cache = ArtifactCache(host)
    cache.put("tile", data_url)
    result = cache.lookup("tile")
    if isinstance(result, NotFound):
        result = placeholder
"""

from typing import Any, Dict, List, Optional, Union

from .errors import NotFound
from .models import EXTRUDED_SUFFIX, NORMAL_SUFFIX, NineSliceData, variant_key
from ..api.base import HostEngine
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


class ArtifactCache:
    """Encoded images and nine-slice descriptors, keyed by string."""

    def __init__(self, host: Optional[HostEngine] = None):
        self.host = host
        self._images: Dict[str, str] = {}
        self._nine_slices: Dict[str, NineSliceData] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._images or key in self._nine_slices

    def keys(self) -> List[str]:
        return list(self._images)

    def put(self, key: str, encoded: str) -> None:
        if key in self._images:
            logger.debug(f"Replacing encoded image for {key}")
        self._images[key] = encoded

    def put_nine_slice(self, key: str, data: NineSliceData) -> None:
        self._nine_slices[key] = data

    def lookup(self, key: str, variant: str = "") -> Union[str, NotFound]:
        """Return the encoded image for ``key`` (or its variant), or a NotFound."""
        full_key = variant_key(key, variant)
        data = self._images.get(full_key)
        if data is None:
            return NotFound(f"Image data not found for key: {full_key}", full_key)
        return data

    def lookup_nine_slice(self, key: str) -> Union[NineSliceData, NotFound]:
        data = self._nine_slices.get(key)
        if data is None:
            return NotFound(f"Nine slice data not found for key: {key}", key)
        return data

    def url(self, key: str, variant: str = "") -> str:
        """Return the encoded image for ``key``, or "" after logging the miss."""
        result = self.lookup(key, variant)
        if isinstance(result, NotFound):
            logger.error(str(result))
            return ""
        return result

    # ``get`` is the plain-key spelling of ``url``.
    get = url

    def nine_slice_data(self, key: str) -> NineSliceData:
        """Return nine-slice data for ``key``, or an empty record after logging the miss."""
        result = self.lookup_nine_slice(key)
        if isinstance(result, NotFound):
            logger.error(str(result))
            return NineSliceData.empty()
        return result

    get_nine_slice = nine_slice_data

    def remove(self, key: str) -> None:
        """Delete ``key`` and its extruded/normal variants, their engine textures and the nine-slice data."""
        for variant in ("", EXTRUDED_SUFFIX, NORMAL_SUFFIX):
            full_key = variant_key(key, variant)
            if self.host is not None:
                self.host.remove_texture(full_key)
            self._images.pop(full_key, None)
        self._nine_slices.pop(key, None)

    def clear(self) -> None:
        self._images.clear()
        self._nine_slices.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "images": len(self._images),
            "nine_slices": len(self._nine_slices),
            "encoded_bytes": sum(len(v) for v in self._images.values()),
        }
