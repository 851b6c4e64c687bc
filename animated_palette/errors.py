"""Errors raised while building an animated palette.

Every error is a validation failure on user input and is raised before
any palette or tile asset is written.
"""


class PaletteError(ValueError):
    """Base class for palette generation failures."""


class InvalidInputType(PaletteError):
    """Selected source is not an image."""


class InvalidSpriteCount(PaletteError):
    """Sprite count is not a multiple of the animation frame count."""


class DegenerateChunkWidth(PaletteError):
    """Sheet is too narrow to hold a single row of tiles."""


class StrideOverflow(PaletteError):
    """Stride routes a sprite to a tile index that does not exist."""
