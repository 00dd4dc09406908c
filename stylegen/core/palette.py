"""Palette modules: color layout, checksum, sample theme and the runtime palette model.

A palette module declares only colors. Each color gets an index in
declaration order; that order fixes the binary cache layout (4 bytes per
color, RGBA, ascending index), so it must stay stable for a given file.

Palette mirrors the class written into the generated source. Each slot
moves INITIAL -> CREATED (declared default) or INITIAL/CREATED -> LOADED
(explicit override, cache load, or copy from a loaded fallback).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property

from stylegen.core.collector import CrossReferenceTables
from stylegen.core.emitter import LiteralEmitter
from stylegen.core.encoding import hash_crc32, palette_color_value
from stylegen.core.errors import TypeResolutionError
from stylegen.core.matcher import PaletteMatcher
from stylegen.core.types import Color, Module, TypeTag, Value

RGBA = tuple[int, int, int, int]

SAMPLE_THEME_HEADER = """\
//
// This is a sample theme file.
// It was generated from the '{source}' palette file.
//
// Every line sets one color: `name: #rrggbb;`, `name: #rrggbbaa;`
// or `name: otherName;` to copy a color that is already set.
// Lines ending in `// otherName;` show the color it falls back to.
//

"""


def color_fallback_name(value: Value) -> str:
    """Alias target if the color is an alias, otherwise its declared fallback."""
    if value.is_alias:
        return value.copy_of[-1]
    return value.as_color().fallback


@dataclass
class PaletteEntry:
    name: str
    index: int
    color: Color  # resolved declared default
    value: Value  # as declared, possibly an alias
    fallback_index: int = -1


@dataclass
class PaletteLayout:
    module: Module
    entries: list[PaletteEntry] = field(default_factory=list)

    @classmethod
    def from_module(cls, module: Module) -> PaletteLayout:
        layout = cls(module=module)
        indices: dict[str, int] = {}
        for index, variable in enumerate(module.variables):
            name = variable.name[-1]
            if not name.isascii():
                raise TypeResolutionError(f'{name}: palette color names must be ASCII')
            if variable.value.tag != TypeTag.COLOR:
                raise TypeResolutionError(f'{name}: palette modules may only declare colors')
            color = module.resolve(variable.value).as_color()
            # Fallbacks can only point backwards, indices holds earlier colors only
            fallback_index = indices.get(color_fallback_name(variable.value), -1)
            indices[name] = index
            layout.entries.append(
                PaletteEntry(
                    name=name,
                    index=index,
                    color=color,
                    value=variable.value,
                    fallback_index=fallback_index,
                )
            )
        return layout

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def indices(self) -> dict[str, int]:
        return {e.name: e.index for e in self.entries}

    @cached_property
    def matcher(self) -> PaletteMatcher:
        return PaletteMatcher(self.indices)

    def checksum_source(self, emitter: LiteralEmitter | None = None) -> str:
        if emitter is None:
            emitter = LiteralEmitter(self.module, CrossReferenceTables())
        return ''.join(f'&{e.name}:{emitter.assignment_literal(e.value)}' for e in self.entries)

    @cached_property
    def checksum(self) -> int:
        return hash_crc32(self.checksum_source())

    def sample_theme(self, source_name: str = 'colors.palette') -> str:
        lines = [SAMPLE_THEME_HEADER.format(source=source_name)]
        for entry in self.entries:
            color_string = palette_color_value(entry.color)
            if entry.fallback_index >= 0:
                fallback = self.entries[entry.fallback_index]
                if color_string == palette_color_value(fallback.color):
                    lines.append(f'{entry.name}: {fallback.name};\n')
                else:
                    lines.append(f'{entry.name}: #{color_string}; // {fallback.name};\n')
            else:
                lines.append(f'{entry.name}: #{color_string};\n')
        return ''.join(lines)


class SlotStatus(Enum):
    INITIAL = 'initial'
    CREATED = 'created'
    LOADED = 'loaded'


def _check_rgba(rgba: RGBA) -> RGBA:
    if len(rgba) != 4 or any(not 0 <= int(c) <= 255 for c in rgba):
        raise ValueError(f'color channels must be four bytes, got {rgba!r}')
    return (int(rgba[0]), int(rgba[1]), int(rgba[2]), int(rgba[3]))


class Palette:
    """Runtime palette: one slot per declared color.

    Created not finalized; finalize() (or save()) computes every slot that
    was not explicitly set. Single writer; readers must not overlap writes.
    """

    def __init__(self, layout: PaletteLayout):
        self.layout = layout
        self._colors: list[RGBA | None] = [None] * layout.count
        self._status: list[SlotStatus] = [SlotStatus.INITIAL] * layout.count
        self._ready = False

    @property
    def count(self) -> int:
        return self.layout.count

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def checksum(self) -> int:
        return self.layout.checksum

    def status(self, index: int) -> SlotStatus:
        return self._status[index]

    def color(self, index: int) -> RGBA | None:
        return self._colors[index]

    def color_by_name(self, name: str) -> RGBA | None:
        index = self.layout.matcher.lookup(name)
        return self._colors[index] if index >= 0 else None

    def _compute(self, index: int, fallback_index: int, value: RGBA) -> None:
        if self._status[index] != SlotStatus.INITIAL:
            return
        # A fallback only wins once it holds an explicitly loaded color
        if fallback_index >= 0 and self._status[fallback_index] == SlotStatus.LOADED:
            self._status[index] = SlotStatus.LOADED
            self._colors[index] = self._colors[fallback_index]
        else:
            self._status[index] = SlotStatus.CREATED
            self._colors[index] = value

    def finalize(self) -> None:
        if self._ready:
            return
        self._ready = True
        for entry in self.layout.entries:
            self._compute(entry.index, entry.fallback_index, entry.color.rgba())

    def _set_data(self, index: int, value: RGBA) -> None:
        self._colors[index] = value
        self._status[index] = SlotStatus.LOADED

    def set_color(self, name: str, rgba: RGBA) -> bool:
        rgba = _check_rgba(rgba)
        index = self.layout.matcher.lookup(name)
        if index < 0:
            return False
        self._set_data(index, rgba)
        return True

    def set_color_from(self, name: str, from_name: str) -> bool:
        index = self.layout.matcher.lookup(name)
        from_index = self.layout.matcher.lookup(from_name)
        if index < 0 or from_index < 0 or self._status[from_index] != SlotStatus.LOADED:
            return False
        self._set_data(index, self._colors[from_index])
        return True

    def save(self) -> bytes:
        if not self._ready:
            self.finalize()
        result = bytearray()
        for rgba in self._colors:
            result.extend(rgba)
        return bytes(result)

    def load(self, cache: bytes) -> bool:
        if len(cache) != self.count * 4:
            return False
        for i in range(self.count):
            self._set_data(i, tuple(cache[i * 4 : i * 4 + 4]))
        return True

    def assign(self, other: Palette) -> Palette:
        """Take every loaded slot of `other`; reset the rest and re-finalize if needed."""
        if other.layout.checksum != self.layout.checksum:
            raise ValueError('cannot assign palettes built from different declarations')
        was_ready = self._ready
        for i in range(self.count):
            if other._status[i] == SlotStatus.LOADED:
                self._set_data(i, other._colors[i])
            elif self._status[i] != SlotStatus.INITIAL:
                self._colors[i] = None
                self._status[i] = SlotStatus.INITIAL
                self._ready = False
        if was_ready and not self._ready:
            self.finalize()
        return self

    def release(self) -> int:
        """Drop every computed or loaded slot. Returns how many were released."""
        released = 0
        for i in range(self.count):
            if self._status[i] != SlotStatus.INITIAL:
                self._colors[i] = None
                self._status[i] = SlotStatus.INITIAL
                released += 1
        self._ready = False
        return released


class MainPalette:
    """The application's active palette plus the hook that invalidates palette-derived resources."""

    def __init__(self, layout: PaletteLayout, reset_icons: Callable[[], None] | None = None):
        self.palette = Palette(layout)
        self._reset_icons = reset_icons or (lambda: None)

    def save(self) -> bytes:
        return self.palette.save()

    def load(self, cache: bytes) -> bool:
        if self.palette.load(cache):
            self._reset_icons()
            return True
        return False

    def set_color(self, name: str, rgba: RGBA) -> bool:
        return self.palette.set_color(name, rgba)

    def set_color_from(self, name: str, from_name: str) -> bool:
        return self.palette.set_color_from(name, from_name)

    def apply(self, other: Palette) -> None:
        self.palette.assign(other)
        self._reset_icons()
