"""
models.py: Data shapes describing an image batch and its derived artifacts.

Descriptors are usually written as JSON manifests using camelCase field
names; ``from_dict``/``to_dict`` translate between that form and the
dataclasses used internally.

Example manifest entry:
    {
        "key": "tiles",
        "url": "assets/tiles.png",
        "grid": [16, 16],
        "parse": [{"key": "tile_grass", "slice": {"pos": [0, 1]}}]
    }
"""

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

EXTRUDED_SUFFIX = "extruded"
NORMAL_SUFFIX = "normal"
VARIANTS = ("", EXTRUDED_SUFFIX, NORMAL_SUFFIX)

Grid = Tuple[int, int]


def variant_key(key: str, variant: str = "") -> str:
    """Return the cache key of ``key``'s variant (``tile`` -> ``tile_extruded``)."""
    if variant and variant not in VARIANTS:
        raise ValueError(f"Unknown image variant: {variant!r}")
    return f"{key}_{variant}" if variant else key


def _grid(value: Any) -> Optional[Grid]:
    if value is None:
        return None
    if len(value) != 2:
        raise ValueError(f"Grid must have two values, got {value!r}")
    return int(value[0]), int(value[1])


@dataclass(frozen=True)
class Rect:
    """Axis-aligned pixel rectangle in source image space."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def box(self) -> Tuple[int, int, int, int]:
        """Return the (left, top, right, bottom) box in PIL convention."""
        return self.x, self.y, self.right, self.bottom

    def fits_within(self, width: int, height: int) -> bool:
        return self.x >= 0 and self.y >= 0 and self.right <= width and self.bottom <= height

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rect":
        return cls(int(data["x"]), int(data["y"]), int(data["width"]), int(data["height"]))

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class SliceSpec:
    """Grid-cell address of a sub-image.

    ``pos`` is a linear row-major cell index, or a (start, end) pair naming
    the top-left and bottom-right cells of a rectangular block.
    """
    pos: Union[int, Tuple[int, ...]]
    grid: Optional[Grid] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SliceSpec":
        pos = data["pos"]
        if isinstance(pos, (list, tuple)):
            pos = tuple(int(p) for p in pos)
        else:
            pos = int(pos)
        return cls(pos=pos, grid=_grid(data.get("grid")))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"pos": list(self.pos) if isinstance(self.pos, tuple) else self.pos}
        if self.grid is not None:
            data["grid"] = list(self.grid)
        return data


# camelCase manifest name -> dataclass attribute
_NINE_SLICE_FIELDS = {
    "topHeight": "top_height",
    "centerHeight": "center_height",
    "bottomHeight": "bottom_height",
    "leftWidth": "left_width",
    "centerWidth": "center_width",
    "rightWidth": "right_width",
    "pixelated": "pixelated",
    "fill": "fill",
    "scale": "scale",
}


@dataclass(frozen=True)
class NineSliceSpec:
    """Border measurements of a 3x3 decomposition plus display hints."""
    top_height: int = 0
    center_height: int = 0
    bottom_height: int = 0
    left_width: int = 0
    center_width: int = 0
    right_width: int = 0
    pixelated: Optional[bool] = None
    fill: Optional[str] = None
    scale: Optional[str] = None

    def __post_init__(self):
        if self.fill is not None and self.fill not in ("repeat", "stretch"):
            raise ValueError(f"fill must be 'repeat' or 'stretch', got {self.fill!r}")

    @property
    def width(self) -> int:
        return self.left_width + self.center_width + self.right_width

    @property
    def height(self) -> int:
        return self.top_height + self.center_height + self.bottom_height

    def merged(self, override: Dict[str, Any]) -> "NineSliceSpec":
        """Return a copy with the fields named in ``override`` replacing ours.

        ``override`` uses manifest (camelCase) or attribute names.
        """
        changes = {}
        for name, value in override.items():
            attr = _NINE_SLICE_FIELDS.get(name, name)
            if attr not in _NINE_SLICE_FIELDS.values():
                raise ValueError(f"Unknown nine-slice field: {name!r}")
            changes[attr] = value
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NineSliceSpec":
        return cls().merged({k: v for k, v in data.items() if k != "src"})

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for name, attr in _NINE_SLICE_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                data[name] = value
        return data


@dataclass(frozen=True)
class NineSliceData:
    """A nine-slice spec together with its 9 encoded fragments.

    ``src`` is row-major from top-left to bottom-right.
    """
    spec: NineSliceSpec
    src: Tuple[str, ...] = ()

    def __getattr__(self, name: str) -> Any:
        # Expose the spec's measurements directly (data.left_width, ...).
        if name in _NINE_SLICE_FIELDS.values():
            return getattr(self.spec, name)
        raise AttributeError(name)

    @classmethod
    def empty(cls) -> "NineSliceData":
        return cls(spec=NineSliceSpec(), src=())

    def to_dict(self) -> Dict[str, Any]:
        data = self.spec.to_dict()
        data["src"] = list(self.src)
        return data


@dataclass
class ParseDescriptor:
    """A named fragment derived from its parent image.

    ``nine_slice`` is ``True`` to inherit the parent's spec, or a dict of
    fields laid over the parent's.
    """
    key: str
    slice: Optional[SliceSpec] = None
    rect: Optional[Rect] = None
    nine_slice: Union[bool, Dict[str, Any], None] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParseDescriptor":
        nine_slice = data.get("nineSlice")
        if nine_slice is not None and not isinstance(nine_slice, (bool, dict)):
            raise ValueError(f"parse[{data.get('key')}].nineSlice must be a bool or object")
        return cls(
            key=data["key"],
            slice=SliceSpec.from_dict(data["slice"]) if data.get("slice") else None,
            rect=Rect.from_dict(data["rect"]) if data.get("rect") else None,
            nine_slice=nine_slice,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"key": self.key}
        if self.slice is not None:
            data["slice"] = self.slice.to_dict()
        if self.rect is not None:
            data["rect"] = self.rect.to_dict()
        if self.nine_slice is not None:
            data["nineSlice"] = self.nine_slice
        return data


@dataclass
class ImageDescriptor:
    """A source image and the fragments to derive from it."""
    key: str
    url: str
    extruded: Optional[str] = None
    normal: Optional[str] = None
    grid: Optional[Grid] = None
    nine_slice: Optional[NineSliceSpec] = None
    parse: List[ParseDescriptor] = field(default_factory=list)

    def variant_urls(self) -> List[Tuple[str, str]]:
        """Return the (key, url) pairs to load for this descriptor."""
        urls = [(self.key, self.url)]
        if self.extruded:
            urls.append((variant_key(self.key, EXTRUDED_SUFFIX), self.extruded))
        if self.normal:
            urls.append((variant_key(self.key, NORMAL_SUFFIX), self.normal))
        return urls

    def keys(self) -> List[str]:
        """Return every cache key this descriptor can populate, parse keys first."""
        return [p.key for p in self.parse] + [self.key]

    def resolve_nine_slice(self, parse: ParseDescriptor) -> Optional[NineSliceSpec]:
        """Return the nine-slice spec a parse entry asks for, if any."""
        if parse.nine_slice is None or parse.nine_slice is False:
            return None
        if parse.nine_slice is True:
            return self.nine_slice
        return (self.nine_slice or NineSliceSpec()).merged(parse.nine_slice)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageDescriptor":
        if "key" not in data or "url" not in data:
            raise ValueError(f"Image descriptor needs 'key' and 'url': {data!r}")
        nine_slice = data.get("nineSlice")
        return cls(
            key=data["key"],
            url=data["url"],
            extruded=data.get("extruded"),
            normal=data.get("normal"),
            grid=_grid(data.get("grid")),
            nine_slice=NineSliceSpec.from_dict(nine_slice) if nine_slice else None,
            parse=[ParseDescriptor.from_dict(p) for p in data.get("parse") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"key": self.key, "url": self.url}
        if self.extruded:
            data["extruded"] = self.extruded
        if self.normal:
            data["normal"] = self.normal
        if self.grid is not None:
            data["grid"] = list(self.grid)
        if self.nine_slice is not None:
            data["nineSlice"] = self.nine_slice.to_dict()
        if self.parse:
            data["parse"] = [p.to_dict() for p in self.parse]
        return data


def load_manifest(path: Path) -> List[ImageDescriptor]:
    """Read image descriptors from a JSON manifest.

    The manifest is either a list of descriptors or an object with an
    ``images`` list. Relative local URLs are resolved against the manifest's
    directory.
    """
    path = Path(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("images", [])
    descriptors = [ImageDescriptor.from_dict(item) for item in data]
    base = path.parent
    for descriptor in descriptors:
        descriptor.url = _resolve_local(base, descriptor.url)
        if descriptor.extruded:
            descriptor.extruded = _resolve_local(base, descriptor.extruded)
        if descriptor.normal:
            descriptor.normal = _resolve_local(base, descriptor.normal)
    return descriptors


def _resolve_local(base: Path, url: str) -> str:
    if "://" in url or url.startswith("data:") or Path(url).is_absolute():
        return url
    return str(base / url)
