"""Sprite references and the ordering applied before tile assignment."""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List

UNORDERED = -1


@dataclass(frozen=True)
class SpriteRef:
    """Opaque handle to one sprite cut from a sheet.

    `image` carries whatever payload the asset store attached (a PIL image
    for the filesystem store) and is ignored for equality.
    """
    name: str
    image: Any = field(default=None, compare=False, repr=False)


def underscore_index_key(name: str) -> int:
    """Parse the trailing index of a `name_<index>` sprite name.

    Names without an underscore, or whose suffix is not an integer, get
    UNORDERED so they sort ahead of indexed sprites.

    >>> underscore_index_key("grass_12")
    12
    >>> underscore_index_key("grass")
    -1
    """
    if "_" not in name:
        return UNORDERED
    suffix = name.rsplit("_", 1)[1]
    try:
        return int(suffix)
    except ValueError:
        return UNORDERED


def order_sprites(
    sprites: Iterable[SpriteRef],
    key: Callable[[str], int] = underscore_index_key
) -> List[SpriteRef]:
    """Sort sprites by the key extracted from their names.

    The sort is stable, so sprites sharing a key keep their input order
    and re-sorting an ordered sequence leaves it unchanged.
    """
    return sorted(sprites, key=lambda sprite: key(sprite.name))
