"""Configuration for the animated palette generator."""

import json
from dataclasses import dataclass, asdict, replace
from pathlib import Path
from typing import Any, Dict

# Tile animation settings
ANIMATION_COUNT = 3  # frames per animated tile
STRIDE = 4  # sprites between consecutive frames of one tile
CELL_SIZE = 24  # cell size in pixels

# Playback speed where 1.0 = 1s per frame, 2.0 = 0.5s, etc.
MIN_SPEED = 2.0
MAX_SPEED = MIN_SPEED

# Pixels per world unit, used for palette cell size
PIXELS_PER_UNIT = 100.0

# Output naming
PALETTE_SUFFIX = ".Palette"
TILES_FOLDER_SUFFIX = ".AnimatedTiles"
TILE_ASSET_EXTENSION = ".asset"

# Inputs the generator accepts as sprite sheets
IMAGE_EXTENSIONS = (".png", ".gif", ".bmp", ".tga", ".jpg", ".jpeg", ".webp")


@dataclass
class PaletteSettings:
    """Parameters for one palette generation run."""
    animation_count: int = ANIMATION_COUNT
    stride: int = STRIDE
    cell_size: int = CELL_SIZE
    min_speed: float = MIN_SPEED
    max_speed: float = MAX_SPEED

    def __post_init__(self):
        for name in ("animation_count", "stride", "cell_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if self.min_speed > self.max_speed:
            raise ValueError(
                f"min_speed ({self.min_speed}) must not exceed max_speed ({self.max_speed})"
            )

    @classmethod
    def from_json(cls, path: Path) -> "PaletteSettings":
        """Load settings from a JSON file.

        Keys missing from the file keep their defaults. When only
        min_speed is given, max_speed follows it as in with_min_speed.
        """
        with open(path) as f:
            data = json.load(f)

        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown settings in {path}: {', '.join(sorted(unknown))}")

        if "min_speed" in data and "max_speed" not in data:
            min_speed = data.pop("min_speed")
            return cls(**data).with_min_speed(min_speed)
        return cls(**data)

    def with_min_speed(self, min_speed: float) -> "PaletteSettings":
        """Copy with a new min_speed; max_speed follows it.

        A wider range already set here (max_speed above min_speed) is kept
        as long as it still covers the new min_speed.
        """
        if self.min_speed < self.max_speed and min_speed <= self.max_speed:
            return replace(self, min_speed=min_speed)
        return replace(self, min_speed=min_speed, max_speed=min_speed)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
