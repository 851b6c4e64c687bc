"""Drives palette generation for one or more sprite sheets."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from .asset_store import AssetStore, PaletteHandle
from .config import (
    IMAGE_EXTENSIONS,
    PALETTE_SUFFIX,
    TILE_ASSET_EXTENSION,
    TILES_FOLDER_SUFFIX,
    PaletteSettings
)
from .errors import InvalidInputType
from .tile_assigner import TileGrid, build_tile_grid


@dataclass
class GenerationResult:
    """What was written for one source sheet."""
    source: Path
    palette: PaletteHandle
    tiles_dir: Path
    grid: TileGrid
    asset_paths: List[Path]


def check_input_type(source: Path) -> None:
    """Raise InvalidInputType unless source looks like an image file."""
    if Path(source).suffix.lower() not in IMAGE_EXTENSIONS:
        raise InvalidInputType(f"Must use an image file, got {source}")


class AnimatedPaletteGenerator:
    """Builds an animated tile palette from each selected sprite sheet."""

    def __init__(self, store: AssetStore, settings: Optional[PaletteSettings] = None):
        """Initialize generator.

        Args:
            store: Where sprites are loaded from and assets written to
            settings: Tile parameters (defaults from config)
        """
        self.store = store
        self.settings = settings or PaletteSettings()

    def plan(self, source: Path) -> TileGrid:
        """Load a sheet and build its tile grid without writing anything.

        Raises:
            PaletteError: If the sheet can't be turned into tiles
        """
        check_input_type(source)

        s = self.settings
        sprites = self.store.load_ordered_sprites(source, s.cell_size)
        width = self.store.read_sheet_width(source)

        return build_tile_grid(
            sprites,
            animation_count=s.animation_count,
            stride=s.stride,
            sheet_width=width,
            cell_size=s.cell_size,
            min_speed=s.min_speed,
            max_speed=s.max_speed
        )

    def generate(self, sources: Iterable[Path]) -> List[GenerationResult]:
        """Generate a palette for each source in turn.

        The first failure of any kind is logged and re-raised; later sources
        are not processed. A validation failure leaves nothing written for
        its source.

        Args:
            sources: Sprite sheet paths

        Returns:
            One result per generated palette
        """
        results = []
        for source in sources:
            try:
                results.append(self.generate_one(Path(source)))
            except Exception as e:
                self.store.log(f"❌ Animated Palette: {e}")
                raise
        return results

    def generate_one(self, source: Path) -> GenerationResult:
        """Generate the palette and tile assets for a single sheet.

        Raises:
            PaletteError: If validation fails; no asset is created
        """
        s = self.settings
        dest_dir = source.parent
        stem = source.stem

        self.store.log(f"🎨 Animated Palette: {source}")

        # Everything is validated while building the grid, before any asset exists
        grid = self.plan(source)

        palette = self.store.create_palette(dest_dir, stem + PALETTE_SUFFIX, s.cell_size)

        # The store may pick a different folder name than requested
        tiles_dir = self.store.create_folder(dest_dir, stem + TILES_FOLDER_SUFFIX)

        asset_paths = []
        for tile in grid:
            asset_path = tiles_dir / f"{stem}_{tile.index}{TILE_ASSET_EXTENSION}"
            self.store.persist(tile, asset_path)
            self.store.set_tile(palette, tile.coordinate, asset_path)
            asset_paths.append(asset_path)

        self.store.save_palette(palette)

        self.store.log(
            f"✅ Animated Palette: Created tile palette and {len(grid)} animated tiles "
            f"of size {s.cell_size}x{s.cell_size} using a stride of {s.stride} "
            f"with {s.animation_count} sprites per tile."
        )

        return GenerationResult(
            source=source,
            palette=palette,
            tiles_dir=tiles_dir,
            grid=grid,
            asset_paths=asset_paths
        )
