"""Tests for the grid tile assigner."""

import pytest
from animated_palette.errors import DegenerateChunkWidth, InvalidSpriteCount, StrideOverflow
from animated_palette.sprite_order import SpriteRef
from animated_palette.tile_assigner import (
    AnimatedTileSpec,
    assign_sprites,
    build_tile_grid,
    compute_chunk,
    compute_grid,
    validate_sprite_count
)


def make_sprites(count, stem="s"):
    return [SpriteRef(name=f"{stem}{i}") for i in range(count)]


def frame_names(tile):
    return [sprite.name for sprite in tile.frames]


def build(sprites, animation_count=3, stride=3, sheet_width=216, cell_size=24):
    return build_tile_grid(
        sprites,
        animation_count=animation_count,
        stride=stride,
        sheet_width=sheet_width,
        cell_size=cell_size,
        min_speed=2.0,
        max_speed=2.0
    )


class TestValidation:
    def test_count_must_be_multiple_of_animation_count(self):
        """8 sprites can't be split into tiles of 3."""
        with pytest.raises(InvalidSpriteCount):
            validate_sprite_count(make_sprites(8), 3)

    def test_empty_sequence_rejected(self):
        with pytest.raises(InvalidSpriteCount):
            validate_sprite_count([], 3)

    def test_returns_tile_count(self):
        assert validate_sprite_count(make_sprites(12), 3) == 4

    def test_build_fails_without_output(self):
        """A bad sprite count raises instead of returning a partial grid."""
        with pytest.raises(InvalidSpriteCount):
            build(make_sprites(8))


class TestChunk:
    def test_chunk_from_sheet_width(self):
        """384px sheet with 3 frames of 24px gives 5 tiles per row."""
        assert compute_chunk(384, 3, 24) == 5

    def test_narrow_sheet_is_degenerate(self):
        with pytest.raises(DegenerateChunkWidth):
            compute_chunk(48, 3, 24)

    def test_degenerate_chunk_raised_by_build(self):
        with pytest.raises(DegenerateChunkWidth):
            build(make_sprites(9), sheet_width=60)


class TestComputeGrid:
    def test_row_major_with_rows_growing_down(self):
        coords = compute_grid(7, 3)
        assert coords == [
            (0, 0), (1, 0), (2, 0),
            (0, -1), (1, -1), (2, -1),
            (0, -2)
        ]

    @pytest.mark.parametrize("total_tiles,chunk", [(1, 1), (10, 5), (11, 4), (30, 7)])
    def test_coordinates_distinct_and_contiguous(self, total_tiles, chunk):
        """Coordinates fill a chunk-wide rectangle with no gaps or overlaps."""
        coords = compute_grid(total_tiles, chunk)

        assert len(set(coords)) == total_tiles
        for j, (x, y) in enumerate(coords):
            assert 0 <= x < chunk
            assert -y * chunk + x == j


class TestAssignSprites:
    def test_stride_deinterleaves_frames(self):
        """9 sprites, 3 frames, stride 3: tile t gets sprites t, t+3, t+6."""
        grid = build(make_sprites(9))

        assert len(grid) == 3
        assert frame_names(grid.tiles[0]) == ["s0", "s3", "s6"]
        assert frame_names(grid.tiles[1]) == ["s1", "s4", "s7"]
        assert frame_names(grid.tiles[2]) == ["s2", "s5", "s8"]

    def test_stride_one_groups_consecutive_sprites(self):
        grid = build(make_sprites(6), stride=1)

        assert frame_names(grid.tiles[0]) == ["s0", "s1", "s2"]
        assert frame_names(grid.tiles[1]) == ["s3", "s4", "s5"]

    def test_second_block_fills_next_tiles(self):
        """With stride 4 the second block of 12 sprites fills tiles 4-7."""
        grid = build(make_sprites(24), stride=4, sheet_width=288)

        assert frame_names(grid.tiles[0]) == ["s0", "s4", "s8"]
        assert frame_names(grid.tiles[3]) == ["s3", "s7", "s11"]
        assert frame_names(grid.tiles[4]) == ["s12", "s16", "s20"]
        assert frame_names(grid.tiles[7]) == ["s15", "s19", "s23"]

    @pytest.mark.parametrize("count,animation_count,stride", [
        (9, 3, 3),
        (24, 3, 4),
        (48, 3, 4),
        (12, 2, 2),
        (20, 4, 1),
        (10, 1, 5),
    ])
    def test_every_sprite_used_exactly_once(self, count, animation_count, stride):
        sprites = make_sprites(count)
        grid = build(
            sprites,
            animation_count=animation_count,
            stride=stride,
            sheet_width=animation_count * 24 * 4
        )

        assert len(grid) == count // animation_count
        assert all(tile.is_complete for tile in grid)
        assigned = [sprite for tile in grid for sprite in tile.frames]
        assert sorted(s.name for s in assigned) == sorted(s.name for s in sprites)

    def test_stride_past_last_tile_raises(self):
        """9 sprites with stride 4 would need a fourth tile."""
        with pytest.raises(StrideOverflow):
            build(make_sprites(9), stride=4)

    def test_assign_fills_given_tiles_in_place(self):
        tiles = [
            AnimatedTileSpec(index=j, coordinate=(j, 0), frames=[None, None],
                             min_speed=1.0, max_speed=1.0)
            for j in range(2)
        ]
        assign_sprites(make_sprites(4), tiles, animation_count=2, stride=2)

        assert frame_names(tiles[0]) == ["s0", "s2"]
        assert frame_names(tiles[1]) == ["s1", "s3"]


class TestTileGrid:
    def test_tiles_carry_speed_and_coordinates(self):
        grid = build_tile_grid(
            make_sprites(12),
            animation_count=3,
            stride=4,
            sheet_width=144,
            cell_size=24,
            min_speed=1.5,
            max_speed=3.0
        )

        assert grid.chunk == 2
        assert grid.rows == 2
        assert [tile.coordinate for tile in grid] == [(0, 0), (1, 0), (0, -1), (1, -1)]
        assert all(tile.min_speed == 1.5 and tile.max_speed == 3.0 for tile in grid)

    def test_lookup_by_coordinate(self):
        grid = build(make_sprites(9))
        assert grid.at((1, 0)) is grid.tiles[1]

    def test_build_does_not_mutate_input(self):
        sprites = make_sprites(9)
        before = list(sprites)
        build(sprites)
        assert sprites == before
