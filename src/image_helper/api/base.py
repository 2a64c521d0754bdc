"""
Host engine interface.

The pipeline never touches the rendering engine directly; it drives this
capability surface instead. Implementations load bitmaps keyed by name, keep
a texture store, and create display nodes from registered textures.
"""

from abc import ABC, abstractmethod
from typing import Any


class HostEngine(ABC):
    """Abstract base class for host rendering engines."""

    @abstractmethod
    async def load_image(self, key: str, url: str) -> None:
        """Load the bitmap at ``url`` into the texture store under ``key``.

        Returns once the engine signals completion.
        """

    @abstractmethod
    def get_loaded_image(self, key: str) -> Any:
        """Return the raw pixel source stored under ``key``.

        Raises:
            KeyError: If nothing is stored under ``key``.
        """

    @abstractmethod
    def register_encoded_texture(self, key: str, encoded: str) -> None:
        """Make an encoded fragment addressable as a texture under ``key``."""

    @abstractmethod
    def remove_texture(self, key: str) -> None:
        """Release the texture stored under ``key``. Unknown keys are ignored."""

    @abstractmethod
    def create_nine_slice_node(
        self,
        x: float,
        y: float,
        key: str,
        width: float,
        height: float,
        left_width: int,
        right_width: int,
        top_height: int,
        bottom_height: int,
    ) -> Any:
        """Instantiate a renderable nine-slice from a registered texture."""

    def has_texture(self, key: str) -> bool:
        try:
            self.get_loaded_image(key)
        except KeyError:
            return False
        return True
