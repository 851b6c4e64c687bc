"""Command-line interface for the animated palette generator."""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from .asset_store import FileAssetStore
from .config import PaletteSettings
from .errors import PaletteError
from .generator import AnimatedPaletteGenerator


def add_settings_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('sources', type=Path, nargs='+', help='Sprite sheet images')
    parser.add_argument('--config', '-c', type=Path, default=None, help='Settings JSON')
    parser.add_argument('--animation-count', '-a', type=int, default=None)
    parser.add_argument('--stride', '-s', type=int, default=None)
    parser.add_argument('--cell-size', type=int, default=None)
    parser.add_argument('--min-speed', type=float, default=None)
    parser.add_argument('--max-speed', type=float, default=None)
    parser.add_argument('--skip-empty', action='store_true',
                        help='Ignore fully transparent cells')


def settings_from_args(args: argparse.Namespace) -> PaletteSettings:
    """Settings from --config (or defaults) with command-line overrides."""
    settings = PaletteSettings.from_json(args.config) if args.config else PaletteSettings()

    if args.min_speed is not None and args.max_speed is None:
        settings = settings.with_min_speed(args.min_speed)

    overrides = {
        name: getattr(args, name)
        for name in ('animation_count', 'stride', 'cell_size', 'min_speed', 'max_speed')
        if getattr(args, name) is not None
    }
    return replace(settings, **overrides)


def print_plan(source: Path, generator: AnimatedPaletteGenerator) -> None:
    grid = generator.plan(source)
    print(f"\n{source.name}: {len(grid)} tiles, {grid.chunk} per row, {grid.rows} row(s)")
    for tile in grid:
        frames = ', '.join(sprite.name if sprite else '-' for sprite in tile.frames)
        print(f"  tile {tile.index:3d} at {tile.coordinate}: {frames}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Animated Tile Palette Generator')
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Generate
    gen = subparsers.add_parser('generate', help='Write palettes and animated tiles')
    add_settings_arguments(gen)

    # Plan
    pl = subparsers.add_parser('plan', help='Show tile layout without writing anything')
    add_settings_arguments(pl)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = settings_from_args(args)
    except ValueError as e:
        print(f"❌ Invalid settings: {e}", file=sys.stderr)
        return 1

    store = FileAssetStore(skip_empty=args.skip_empty)
    generator = AnimatedPaletteGenerator(store, settings)

    try:
        if args.command == 'generate':
            generator.generate(args.sources)
        elif args.command == 'plan':
            for source in args.sources:
                print_plan(source, generator)
    except PaletteError as e:
        if args.command == 'plan':
            print(f"❌ Animated Palette: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
