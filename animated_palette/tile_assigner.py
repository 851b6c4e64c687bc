"""Map a sorted sprite sequence onto a grid of animated tiles.

Sprites are grouped `animation_count` at a time into animated tiles. Tiles
are laid out row-major, `chunk` columns per row, with rows growing
downward (row indices 0, -1, -2, ...). Frames are pulled from the flat
sequence with a stride, so a sheet whose animation frames sit in
neighbouring blocks of `stride` sprites is de-interleaved back into
per-tile frame lists.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .errors import DegenerateChunkWidth, InvalidSpriteCount, StrideOverflow
from .sprite_order import SpriteRef

Coordinate = Tuple[int, int]


@dataclass
class AnimatedTileSpec:
    """One animated tile: a fixed number of frame slots plus playback speed."""
    index: int
    coordinate: Coordinate
    frames: List[Optional[SpriteRef]]
    min_speed: float
    max_speed: float

    @property
    def is_complete(self) -> bool:
        return all(frame is not None for frame in self.frames)


@dataclass
class TileGrid:
    """Animated tiles in tile-index order along with their grid layout."""
    tiles: List[AnimatedTileSpec]
    chunk: int
    animation_count: int
    stride: int
    cells: Dict[Coordinate, AnimatedTileSpec] = field(init=False, repr=False)

    def __post_init__(self):
        self.cells = {tile.coordinate: tile for tile in self.tiles}

    def __len__(self) -> int:
        return len(self.tiles)

    def __iter__(self) -> Iterator[AnimatedTileSpec]:
        return iter(self.tiles)

    def at(self, coordinate: Coordinate) -> AnimatedTileSpec:
        return self.cells[coordinate]

    @property
    def rows(self) -> int:
        return (len(self.tiles) + self.chunk - 1) // self.chunk


def validate_sprite_count(sprites: Sequence[SpriteRef], animation_count: int) -> int:
    """Check that sprites split evenly into tiles.

    Returns:
        Total number of tiles

    Raises:
        InvalidSpriteCount: If there are no sprites or the count isn't a
            multiple of animation_count
    """
    if not sprites or len(sprites) % animation_count != 0:
        raise InvalidSpriteCount(
            f"Sprite count must be a multiple of animation count "
            f"({len(sprites)} sprites, {animation_count} frames per tile)"
        )
    return len(sprites) // animation_count


def compute_chunk(sheet_width: int, animation_count: int, cell_size: int) -> int:
    """Number of tile columns per palette row.

    Raises:
        DegenerateChunkWidth: If the sheet can't fit one tile per row
    """
    chunk = sheet_width // (animation_count * cell_size)
    if chunk <= 0:
        raise DegenerateChunkWidth(
            f"Sheet width {sheet_width}px is narrower than one tile row "
            f"({animation_count} x {cell_size}px)"
        )
    return chunk


def compute_grid(total_tiles: int, chunk: int) -> List[Coordinate]:
    """Grid coordinate for each tile index, row-major with `chunk` columns."""
    return [(j % chunk, -(j // chunk)) for j in range(total_tiles)]


def assign_sprites(
    sprites: Sequence[SpriteRef],
    tiles: List[AnimatedTileSpec],
    animation_count: int,
    stride: int
) -> None:
    """Route each sprite to its tile and frame slot using the stride rule.

    The sequence is read in blocks of `stride * animation_count` sprites.
    Inside a block, the sprite at offset `f * stride + t` becomes frame `f`
    of the block's tile `t`. As long as every tile index is in range, each slot
    receives exactly one sprite.

    Raises:
        StrideOverflow: If a sprite maps past the last tile
    """
    block = stride * animation_count
    for count, sprite in enumerate(sprites):
        k = count % stride + stride * (count // block)
        f = (count // stride) % animation_count
        if k >= len(tiles):
            raise StrideOverflow(
                f"Stride {stride} sends sprite {count} ({sprite.name}) to tile {k}, "
                f"but only {len(tiles)} tiles exist; sprite count should be a "
                f"multiple of stride x animation count ({block})"
            )
        tiles[k].frames[f] = sprite


def build_tile_grid(
    sprites: Sequence[SpriteRef],
    animation_count: int,
    stride: int,
    sheet_width: int,
    cell_size: int,
    min_speed: float,
    max_speed: float
) -> TileGrid:
    """Build the full tile grid for a sorted sprite sequence.

    Pure function: raises before returning anything if the inputs are
    inconsistent, so callers can validate before writing any asset.
    """
    total_tiles = validate_sprite_count(sprites, animation_count)
    chunk = compute_chunk(sheet_width, animation_count, cell_size)

    tiles = [
        AnimatedTileSpec(
            index=j,
            coordinate=coordinate,
            frames=[None] * animation_count,
            min_speed=min_speed,
            max_speed=max_speed
        )
        for j, coordinate in enumerate(compute_grid(total_tiles, chunk))
    ]
    assign_sprites(sprites, tiles, animation_count, stride)

    return TileGrid(tiles=tiles, chunk=chunk, animation_count=animation_count, stride=stride)
