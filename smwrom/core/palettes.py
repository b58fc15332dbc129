"""
Super Mario World ROM - Color Palettes

A palette is a 16x16 grid of BGR555 colors. Three kinds exist:

- CustomColorPalette: all 256 colors stored explicitly, row-major.
- GlobalLevelColorPalette: colors shared by every level, stored as named
  sub-palettes that each cover a fixed rectangle of the grid.
- LevelColorPalette: per-level bg/fg/sprite sub-palettes plus a shared
  reference to the global palette for every cell it does not own.

Sub-palette storage inside a rectangle is column-major: the color at
(row, col) lives at index (col - first_col) * row_count + (row - first_row).
Parsed ROM data is row-major and gets transposed into that order on load.
"""

import threading
import weakref
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from .rom_reader import RomReader
from .rom_slice import RomSlice, SnesSlice
from .rom_utils import SnesAddress

# Type alias for RGB color
RGBColor = Tuple[int, int, int]

BGR555_SIZE = 2
PALETTE_ROWS = 16
PALETTE_COLS = 16
PALETTE_LENGTH = PALETTE_ROWS * PALETTE_COLS


@dataclass(frozen=True)
class Bgr555:
    """15-bit color: 0bbbbbgg gggrrrrr. Bit 15 is ignored by the console."""

    value: int

    def __post_init__(self):
        object.__setattr__(self, "value", self.value & 0x7FFF)

    @property
    def red(self) -> int:
        return self.value & 0x1F

    @property
    def green(self) -> int:
        return (self.value >> 5) & 0x1F

    @property
    def blue(self) -> int:
        return (self.value >> 10) & 0x1F

    def to_rgb(self) -> RGBColor:
        """Expand to 8 bits per channel (replicating the top bits)."""
        return tuple((c << 3) | (c >> 2) for c in (self.red, self.green, self.blue))

    def __str__(self):
        return f"{self.value:04X}"


UNSET_COLOR = Bgr555(0)


# ============================================================================
# Rectangles and Dispatch
# ============================================================================


@dataclass(frozen=True)
class PaletteRect:
    """Rectangle of palette cells. Both ranges are half-open."""

    rows: range
    cols: range

    def contains(self, row: int, col: int) -> bool:
        return row in self.rows and col in self.cols

    def index_of(self, row: int, col: int) -> int:
        """Column-major index of (row, col) inside the rectangle."""
        return (col - self.cols.start) * len(self.rows) + (row - self.rows.start)

    def __len__(self):
        return len(self.rows) * len(self.cols)

    def cells(self) -> Iterator[Tuple[int, int]]:
        """Cells in row-major order (the order colors are stored in ROM)."""
        for row in self.rows:
            for col in self.cols:
                yield row, col


def rect(first_row: int, last_row: int, first_col: int, last_col: int) -> PaletteRect:
    """Build a rectangle from inclusive bounds."""
    return PaletteRect(range(first_row, last_row + 1), range(first_col, last_col + 1))


# (rectangle, name of the backing list attribute), in priority order
RegionLayout = Sequence[Tuple[PaletteRect, str]]


def locate_region(layout: RegionLayout, row: int, col: int) -> Optional[Tuple[str, int]]:
    """
    Find which sub-palette owns a cell.

    Args:
        layout: Ordered (rectangle, attribute name) pairs; first match wins
        row: Palette row (0-15)
        col: Palette column (0-15)

    Returns:
        (attribute name, index into that list), or None if no rectangle
        contains the cell
    """
    for region_rect, name in layout:
        if region_rect.contains(row, col):
            return name, region_rect.index_of(row, col)
    return None


def fill_region(storage: List[Bgr555], region_rect: PaletteRect, colors: Sequence[Bgr555]):
    """
    Store row-major colors into a column-major sub-palette.

    Args:
        storage: Backing list for the sub-palette
        region_rect: Rectangle the sub-palette covers
        colors: Colors in row-major order; at most len(region_rect) are used
    """
    for (row, col), color in zip(region_rect.cells(), colors):
        storage[region_rect.index_of(row, col)] = color


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < PALETTE_ROWS and 0 <= col < PALETTE_COLS


def _check_bounds(row: int, col: int):
    if not in_bounds(row, col):
        raise ValueError(f"Palette cell ({row}, {col}) out of range 0-15")


def read_colors(reader: RomReader, region: RomSlice) -> List[Bgr555]:
    """
    Read little-endian BGR555 colors covering a region.

    Args:
        reader: ROM to read from
        region: Slice whose size is a multiple of BGR555_SIZE

    Returns:
        List of size // 2 colors
    """
    cursor = reader.cursor_at(region.begin)
    return [Bgr555(cursor.read_u16_le()) for _ in range(region.size // BGR555_SIZE)]


@dataclass(frozen=True)
class IndexedPaletteTable:
    """
    Table of fixed-size palette records selected by a small index.

    Level headers pick their back-area color and bg/fg/sprite palettes
    this way: record ``i`` starts at ``base + record_size * i``.
    """

    base: SnesAddress
    record_size: int

    def record(self, index: int) -> RomSlice:
        return SnesSlice(self.base, self.record_size).skip_forward(index)

    def read(self, reader: RomReader, index: int) -> List[Bgr555]:
        return read_colors(reader, self.record(index))


# ============================================================================
# ROM Layout
# ============================================================================

ADDR_BACK_AREA_COLORS = SnesAddress(0x00B0A0)
ADDR_BG_PALETTES = SnesAddress(0x00B0B0)
ADDR_FG_PALETTES = SnesAddress(0x00B190)
ADDR_SPRITE_PALETTES = SnesAddress(0x00B318)
ADDR_WTF_PALETTES = SnesAddress(0x00B250)
ADDR_PLAYER_PALETTES = SnesAddress(0x00B2C8)
ADDR_LAYER3_PALETTES = SnesAddress(0x00B170)
ADDR_BERRY_PALETTES = SnesAddress(0x00B674)
ADDR_ANIMATED_COLOR = SnesAddress(0x00B60C)

RECT_BG = rect(0x0, 0x1, 0x2, 0x7)
RECT_FG = rect(0x2, 0x3, 0x2, 0x7)
RECT_SPRITE = rect(0xE, 0xF, 0x2, 0x7)

RECT_ANIMATED = rect(0x6, 0x6, 0x4, 0x4)
RECT_PLAYERS = rect(0x8, 0x8, 0x6, 0xF)
RECT_LAYER3 = rect(0x0, 0x1, 0x8, 0xF)
RECT_BERRY_UPPER = rect(0x2, 0x4, 0x9, 0xF)
RECT_BERRY_LOWER = rect(0x9, 0xB, 0x9, 0xF)
RECT_WTF = rect(0x4, 0xD, 0x2, 0x7)

PALETTE_BG_SIZE = 0x18
PALETTE_FG_SIZE = 0x18
PALETTE_SPRITE_SIZE = 0x18
PALETTE_WTF_SIZE = BGR555_SIZE * len(RECT_WTF)
PALETTE_PLAYER_SIZE = 4 * 0x14
PALETTE_LAYER3_SIZE = 0x20
PALETTE_BERRY_SIZE = 3 * 0x0E
PALETTE_ANIMATED_SIZE = 8 * BGR555_SIZE

PALETTE_BG_LENGTH = PALETTE_BG_SIZE // BGR555_SIZE
PALETTE_FG_LENGTH = PALETTE_FG_SIZE // BGR555_SIZE
PALETTE_SPRITE_LENGTH = PALETTE_SPRITE_SIZE // BGR555_SIZE
PALETTE_WTF_LENGTH = PALETTE_WTF_SIZE // BGR555_SIZE
PALETTE_PLAYER_LENGTH = PALETTE_PLAYER_SIZE // BGR555_SIZE
PALETTE_LAYER3_LENGTH = PALETTE_LAYER3_SIZE // BGR555_SIZE
PALETTE_BERRY_LENGTH = PALETTE_BERRY_SIZE // BGR555_SIZE
PALETTE_ANIMATED_LENGTH = PALETTE_ANIMATED_SIZE // BGR555_SIZE

BACK_AREA_COLORS = IndexedPaletteTable(ADDR_BACK_AREA_COLORS, BGR555_SIZE)
BG_PALETTES = IndexedPaletteTable(ADDR_BG_PALETTES, PALETTE_BG_SIZE)
FG_PALETTES = IndexedPaletteTable(ADDR_FG_PALETTES, PALETTE_FG_SIZE)
SPRITE_PALETTES = IndexedPaletteTable(ADDR_SPRITE_PALETTES, PALETTE_SPRITE_SIZE)

# The animated color sits inside the wtf rectangle, so it is checked first
GLOBAL_LAYOUT: RegionLayout = (
    (RECT_ANIMATED, "animated"),
    (RECT_PLAYERS, "players"),
    (RECT_LAYER3, "layer3"),
    (RECT_BERRY_UPPER, "berry"),
    (RECT_BERRY_LOWER, "berry"),
    (RECT_WTF, "wtf"),
)

LEVEL_LAYOUT: RegionLayout = (
    (RECT_BG, "bg"),
    (RECT_FG, "fg"),
    (RECT_SPRITE, "sprite"),
)


# ============================================================================
# Palettes
# ============================================================================


class ColorPalette(ABC):
    """Readable and writable 16x16 color grid."""

    @abstractmethod
    def get_color_at(self, row: int, col: int) -> Optional[Bgr555]:
        """
        Get the color at a cell.

        Returns:
            The color, or None if (row, col) is outside the 16x16 grid
        """

    @abstractmethod
    def set_color_at(self, row: int, col: int, color: Bgr555) -> None:
        """
        Set the color at a cell.

        Raises:
            ValueError: If (row, col) is outside the 16x16 grid
        """

    def set_colors(self, colors: Sequence[Bgr555], region_rect: PaletteRect):
        """Write row-major colors into a rectangle, one cell at a time."""
        for (row, col), color in zip(region_rect.cells(), colors):
            self.set_color_at(row, col, color)

    def to_grid(self) -> List[List[Optional[Bgr555]]]:
        """Return the palette as 16 rows of 16 colors."""
        return [
            [self.get_color_at(row, col) for col in range(PALETTE_COLS)]
            for row in range(PALETTE_ROWS)
        ]


class _RegionPalette(ColorPalette):
    """Palette built from rectangular sub-palettes with a fallback."""

    LAYOUT: RegionLayout = ()

    def get_color_at(self, row: int, col: int) -> Optional[Bgr555]:
        if not in_bounds(row, col):
            return None
        location = locate_region(self.LAYOUT, row, col)
        if location is None:
            return self._fallback_get(row, col)
        name, index = location
        return getattr(self, name)[index]

    def set_color_at(self, row: int, col: int, color: Bgr555) -> None:
        _check_bounds(row, col)
        location = locate_region(self.LAYOUT, row, col)
        if location is None:
            self._fallback_set(row, col, color)
            return
        name, index = location
        getattr(self, name)[index] = color

    def _fallback_get(self, row: int, col: int) -> Optional[Bgr555]:
        return UNSET_COLOR

    def _fallback_set(self, row: int, col: int, color: Bgr555) -> None:
        pass


class CustomColorPalette(ColorPalette):
    """Fully explicit palette: back-area color followed by 256 colors."""

    SIZE = BGR555_SIZE * (1 + PALETTE_LENGTH)

    def __init__(self, back_area_color: Bgr555, colors: Sequence[Bgr555]):
        if len(colors) != PALETTE_LENGTH:
            raise ValueError(f"Custom palette needs {PALETTE_LENGTH} colors, got {len(colors)}")
        self.back_area_color = back_area_color
        self.colors = list(colors)

    @classmethod
    def parse(cls, reader: RomReader, addr) -> "CustomColorPalette":
        """
        Read a custom palette stored contiguously at addr.

        Args:
            reader: ROM to read from
            addr: PcAddress or SnesAddress of the back-area color

        Returns:
            Parsed palette
        """
        colors = read_colors(reader, RomSlice(addr, cls.SIZE))
        return cls(colors[0], colors[1:])

    @staticmethod
    def index_at(row: int, col: int) -> int:
        return (row * PALETTE_COLS) + col

    def get_color_at(self, row: int, col: int) -> Optional[Bgr555]:
        if not in_bounds(row, col):
            return None
        return self.colors[self.index_at(row, col)]

    def set_color_at(self, row: int, col: int, color: Bgr555) -> None:
        _check_bounds(row, col)
        self.colors[self.index_at(row, col)] = color


class GlobalLevelColorPalette(_RegionPalette):
    """
    Colors shared by every level.

    Level palettes hold it by reference. ``share(holder)`` registers a holder
    for as long as that object stays alive; writes routed through a level
    palette only land here while there is a single live holder.
    """

    LAYOUT = GLOBAL_LAYOUT

    def __init__(
        self,
        wtf: Sequence[Bgr555] = (),
        players: Sequence[Bgr555] = (),
        layer3: Sequence[Bgr555] = (),
        berry: Sequence[Bgr555] = (),
        animated: Sequence[Bgr555] = (),
    ):
        self.wtf = _sized(wtf, PALETTE_WTF_LENGTH)
        self.players = _sized(players, PALETTE_PLAYER_LENGTH)
        self.layer3 = _sized(layer3, PALETTE_LAYER3_LENGTH)
        self.berry = _sized(berry, PALETTE_BERRY_LENGTH)
        self.animated = _sized(animated, PALETTE_ANIMATED_LENGTH)
        self._holders = 0
        # Reentrant: a holder finalizer can run from garbage collection
        # while this thread is inside set_color_if_exclusive
        self._lock = threading.RLock()

    @classmethod
    def parse(cls, reader: RomReader) -> "GlobalLevelColorPalette":
        """
        Read the global palette from its fixed ROM locations.

        Raises:
            SnesToPcError: If a palette address is not mapped to ROM
            RomParseError: If a palette runs past the end of the ROM
        """
        wtf = read_colors(reader, SnesSlice(ADDR_WTF_PALETTES, PALETTE_WTF_SIZE))
        players = read_colors(reader, SnesSlice(ADDR_PLAYER_PALETTES, PALETTE_PLAYER_SIZE))
        layer3 = read_colors(reader, SnesSlice(ADDR_LAYER3_PALETTES, PALETTE_LAYER3_SIZE))
        berry = read_colors(reader, SnesSlice(ADDR_BERRY_PALETTES, PALETTE_BERRY_SIZE))
        animated = read_colors(reader, SnesSlice(ADDR_ANIMATED_COLOR, PALETTE_ANIMATED_SIZE))

        palette = cls(players=players, animated=animated)
        fill_region(palette.wtf, RECT_WTF, wtf)
        fill_region(palette.layer3, RECT_LAYER3, layer3)
        fill_region(palette.berry, RECT_BERRY_UPPER, berry)
        fill_region(palette.berry, RECT_BERRY_LOWER, berry)
        return palette

    @staticmethod
    def is_color_animated_at(row: int, col: int) -> bool:
        return RECT_ANIMATED.contains(row, col)

    def share(self, holder) -> "GlobalLevelColorPalette":
        """
        Register holder as sharing this palette and return self.

        The registration is dropped automatically once holder is garbage
        collected.

        Args:
            holder: Object keeping a reference to this palette; must
                support weak references
        """
        with self._lock:
            self._holders += 1
        finalizer = weakref.finalize(holder, self._release)
        finalizer.atexit = False
        return self

    def _release(self):
        with self._lock:
            self._holders -= 1

    @property
    def holders(self) -> int:
        return self._holders

    def set_color_if_exclusive(self, row: int, col: int, color: Bgr555) -> bool:
        """
        Write a color only while at most one holder shares this palette.

        Returns:
            True if the write was applied
        """
        with self._lock:
            if self._holders > 1:
                return False
            self.set_color_at(row, col, color)
            return True


class LevelColorPalette(_RegionPalette):
    """Per-level palette; cells it does not own come from the global palette."""

    LAYOUT = LEVEL_LAYOUT

    def __init__(
        self,
        global_palette: GlobalLevelColorPalette,
        back_area_color: Bgr555 = UNSET_COLOR,
        bg: Sequence[Bgr555] = (),
        fg: Sequence[Bgr555] = (),
        sprite: Sequence[Bgr555] = (),
    ):
        self.global_palette = global_palette.share(self)
        self.back_area_color = back_area_color
        self.bg = _sized(bg, PALETTE_BG_LENGTH)
        self.fg = _sized(fg, PALETTE_FG_LENGTH)
        self.sprite = _sized(sprite, PALETTE_SPRITE_LENGTH)

    @classmethod
    def parse(
        cls, reader: RomReader, header, global_palette: GlobalLevelColorPalette
    ) -> "LevelColorPalette":
        """
        Read a level's palette using the selectors from its primary header.

        Args:
            reader: ROM to read from
            header: PrimaryLevelHeader with back_area_color, palette_bg,
                palette_fg and palette_sprite selectors
            global_palette: Shared global palette

        Raises:
            SnesToPcError: If a palette address is not mapped to ROM
            RomParseError: If a palette runs past the end of the ROM
        """
        back_area_color = BACK_AREA_COLORS.read(reader, header.back_area_color)[0]
        bg = BG_PALETTES.read(reader, header.palette_bg)
        fg = FG_PALETTES.read(reader, header.palette_fg)
        sprite = SPRITE_PALETTES.read(reader, header.palette_sprite)

        palette = cls(global_palette, back_area_color)
        fill_region(palette.bg, RECT_BG, bg)
        fill_region(palette.fg, RECT_FG, fg)
        fill_region(palette.sprite, RECT_SPRITE, sprite)
        return palette

    def _fallback_get(self, row: int, col: int) -> Optional[Bgr555]:
        return self.global_palette.get_color_at(row, col)

    def _fallback_set(self, row: int, col: int, color: Bgr555) -> None:
        self.global_palette.set_color_if_exclusive(row, col, color)


def _sized(colors: Sequence[Bgr555], length: int) -> List[Bgr555]:
    colors = list(colors)
    if len(colors) > length:
        raise ValueError(f"Sub-palette holds {length} colors, got {len(colors)}")
    return colors + [UNSET_COLOR] * (length - len(colors))
