"""Asset stores: where sprites come from and where palettes and tiles go."""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import numpy as np
from PIL import Image

from .config import PIXELS_PER_UNIT
from .errors import InvalidInputType
from .sprite_order import SpriteRef, order_sprites, underscore_index_key
from .tile_assigner import AnimatedTileSpec, Coordinate


@dataclass
class PaletteHandle:
    """A tile palette under construction."""
    name: str
    path: Path
    cell_size: Tuple[float, float, float]
    tiles: Dict[Coordinate, Path] = field(default_factory=dict)


class AssetStore(ABC):
    """Operations the generator needs from its host."""

    @abstractmethod
    def load_ordered_sprites(self, source: Path, cell_size: int) -> List[SpriteRef]:
        """Load every `cell_size` sprite cut from `source`, ordered by name index."""

    @abstractmethod
    def read_sheet_width(self, source: Path) -> int:
        """Width of the source image in pixels."""

    @abstractmethod
    def create_palette(self, dest_dir: Path, name: str, cell_size: int) -> PaletteHandle:
        """Start a new, empty palette."""

    @abstractmethod
    def create_folder(self, dest_dir: Path, name: str) -> Path:
        """Create a folder and return the path actually used."""

    @abstractmethod
    def set_tile(self, palette: PaletteHandle, coordinate: Coordinate, asset_path: Path) -> None:
        """Place a persisted tile asset on the palette grid."""

    @abstractmethod
    def persist(self, tile: AnimatedTileSpec, path: Path) -> Path:
        """Write a tile asset."""

    @abstractmethod
    def save_palette(self, palette: PaletteHandle) -> Path:
        """Write the palette with every tile placed on it."""

    def log(self, message: str) -> None:
        print(message)


def palette_cell_size(cell_size: int) -> Tuple[float, float, float]:
    """Palette cell size in world units for a cell of `cell_size` pixels."""
    unit = cell_size / PIXELS_PER_UNIT
    return (unit, unit, unit)


def is_empty_cell(cell: Image.Image) -> bool:
    """True if every pixel of an RGBA cell is fully transparent."""
    alpha = np.asarray(cell)[:, :, 3]
    return not alpha.any()


def slice_sheet(
    sheet: Image.Image,
    stem: str,
    cell_size: int,
    skip_empty: bool = False
) -> List[SpriteRef]:
    """Cut a sheet into `cell_size` square sprites in row-major order.

    Sprites are named `<stem>_<index>` where index is the cell's grid
    position, so skipping empty cells leaves gaps in the numbering.
    Partial cells at the right and bottom edges are ignored.

    Args:
        sheet: RGBA sprite sheet
        stem: Name prefix for the sprites
        cell_size: Width and height of one cell in pixels
        skip_empty: Drop fully transparent cells

    Returns:
        List of sprites with their cropped images attached
    """
    width, height = sheet.size
    cols = width // cell_size
    rows = height // cell_size

    sprites = []
    for row in range(rows):
        for col in range(cols):
            left = col * cell_size
            top = row * cell_size
            cell = sheet.crop((left, top, left + cell_size, top + cell_size))

            if skip_empty and is_empty_cell(cell):
                continue

            sprites.append(SpriteRef(name=f"{stem}_{row * cols + col}", image=cell))

    return sprites


def unique_folder_name(dest_dir: Path, name: str, exists: Callable[[Path], bool]) -> Path:
    """First free `name`, `name 1`, `name 2`, ... under dest_dir."""
    candidate = dest_dir / name
    suffix = 1
    while exists(candidate):
        candidate = dest_dir / f"{name} {suffix}"
        suffix += 1
    return candidate


class FileAssetStore(AssetStore):
    """Asset store backed by image files and JSON assets on disk."""

    def __init__(
        self,
        skip_empty: bool = False,
        key: Callable[[str], int] = underscore_index_key
    ):
        """Initialize store.

        Args:
            skip_empty: Drop fully transparent cells when slicing
            key: Ordering key extracted from sprite names
        """
        self.skip_empty = skip_empty
        self.key = key

    def _open_sheet(self, source: Path) -> Image.Image:
        try:
            with Image.open(source) as img:
                return img.convert("RGBA")
        except (OSError, Image.DecompressionBombError) as e:
            raise InvalidInputType(f"{source} is not a readable image: {e}") from e

    def load_ordered_sprites(self, source: Path, cell_size: int) -> List[SpriteRef]:
        sheet = self._open_sheet(source)
        sprites = slice_sheet(sheet, Path(source).stem, cell_size, self.skip_empty)
        return order_sprites(sprites, key=self.key)

    def read_sheet_width(self, source: Path) -> int:
        return self._open_sheet(source).size[0]

    def create_palette(self, dest_dir: Path, name: str, cell_size: int) -> PaletteHandle:
        return PaletteHandle(
            name=name,
            path=Path(dest_dir) / f"{name}.json",
            cell_size=palette_cell_size(cell_size)
        )

    def create_folder(self, dest_dir: Path, name: str) -> Path:
        folder = unique_folder_name(Path(dest_dir), name, lambda p: p.exists())
        folder.mkdir(parents=True)
        return folder

    def set_tile(self, palette: PaletteHandle, coordinate: Coordinate, asset_path: Path) -> None:
        palette.tiles[coordinate] = asset_path

    def persist(self, tile: AnimatedTileSpec, path: Path) -> Path:
        """Write a tile as JSON plus one PNG per frame beside it.

        Args:
            tile: Tile to write
            path: Destination `.asset` path

        Returns:
            Path to the written asset
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        frames = []
        for frame_index, sprite in enumerate(tile.frames):
            if sprite is None:
                frames.append(None)
                continue

            entry = {"sprite": sprite.name}
            if isinstance(sprite.image, Image.Image):
                frame_path = path.with_name(f"{path.stem}_f{frame_index}.png")
                sprite.image.save(frame_path)
                entry["image"] = frame_path.name
            frames.append(entry)

        asset = {
            "name": path.stem,
            "index": tile.index,
            "coordinate": list(tile.coordinate),
            "min_speed": tile.min_speed,
            "max_speed": tile.max_speed,
            "frames": frames
        }
        with open(path, "w") as f:
            json.dump(asset, f, indent=2)

        return path

    def save_palette(self, palette: PaletteHandle) -> Path:
        palette.path.parent.mkdir(parents=True, exist_ok=True)

        cells = []
        for (x, y), asset_path in palette.tiles.items():
            try:
                asset = Path(asset_path).relative_to(palette.path.parent)
            except ValueError:
                asset = Path(asset_path)
            cells.append({"x": x, "y": y, "asset": asset.as_posix()})

        data = {
            "name": palette.name,
            "cell_layout": "Rectangle",
            "cell_sizing": "Automatic",
            "cell_swizzle": "XYZ",
            "cell_size": list(palette.cell_size),
            "cells": cells
        }
        with open(palette.path, "w") as f:
            json.dump(data, f, indent=2)

        return palette.path


class MemoryAssetStore(AssetStore):
    """In-memory store that records every call. Used for tests and dry runs."""

    def __init__(self, key: Callable[[str], int] = underscore_index_key):
        self.key = key
        self.sheets: Dict[Path, Tuple[List[SpriteRef], int]] = {}
        self.cell_sizes: List[int] = []
        self.folders: List[Path] = []
        self.palettes: Dict[Path, PaletteHandle] = {}
        self.persisted: Dict[Path, AnimatedTileSpec] = {}
        self.messages: List[str] = []

    def add_sheet(self, source: Path, sprite_names: List[str], width: int) -> None:
        """Register a fake sheet whose sprites have the given names."""
        sprites = [SpriteRef(name=name) for name in sprite_names]
        self.sheets[Path(source)] = (sprites, width)

    def _sheet(self, source: Path) -> Tuple[List[SpriteRef], int]:
        try:
            return self.sheets[Path(source)]
        except KeyError:
            raise InvalidInputType(f"{source} is not a known sheet")

    def load_ordered_sprites(self, source: Path, cell_size: int) -> List[SpriteRef]:
        sprites, _width = self._sheet(source)
        self.cell_sizes.append(cell_size)
        return order_sprites(sprites, key=self.key)

    def read_sheet_width(self, source: Path) -> int:
        return self._sheet(source)[1]

    def create_palette(self, dest_dir: Path, name: str, cell_size: int) -> PaletteHandle:
        palette = PaletteHandle(
            name=name,
            path=Path(dest_dir) / f"{name}.json",
            cell_size=palette_cell_size(cell_size)
        )
        self.palettes[palette.path] = palette
        return palette

    def create_folder(self, dest_dir: Path, name: str) -> Path:
        folder = unique_folder_name(Path(dest_dir), name, lambda p: p in self.folders)
        self.folders.append(folder)
        return folder

    def set_tile(self, palette: PaletteHandle, coordinate: Coordinate, asset_path: Path) -> None:
        palette.tiles[coordinate] = asset_path

    def persist(self, tile: AnimatedTileSpec, path: Path) -> Path:
        self.persisted[Path(path)] = tile
        return Path(path)

    def save_palette(self, palette: PaletteHandle) -> Path:
        return palette.path

    def log(self, message: str) -> None:
        self.messages.append(message)

    @property
    def created_anything(self) -> bool:
        return bool(self.folders or self.palettes or self.persisted)
