"""Tests for stylegen.core.palette: layout, checksum, sample theme and runtime slots."""

import zlib

import pytest
from conftest import PIXELS, color, var
from stylegen.core.errors import TypeResolutionError
from stylegen.core.palette import MainPalette, Palette, PaletteLayout, SlotStatus
from stylegen.core.types import Module, Value

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
BLUE = (64, 138, 203, 255)
RED = (200, 0, 0, 255)


def _signed(value: int) -> int:
    return value - 0x100000000 if value & 0x80000000 else value


@pytest.fixture
def layout(palette_module):
    return PaletteLayout.from_module(palette_module)


class TestLayout:
    def test_indices_follow_declaration_order(self, layout):
        assert layout.indices == {'windowBg': 0, 'windowFg': 1, 'windowBgOver': 2, 'activeButtonBg': 3}

    def test_fallback_indices(self, layout):
        assert [e.fallback_index for e in layout.entries] == [-1, -1, 0, 1]

    def test_alias_resolved_for_default(self, layout):
        assert layout.entries[2].color.rgba() == WHITE

    def test_forward_fallback_ignored(self):
        module = Module(
            'colors.palette',
            variables=[var('first', color(1, 1, 1, fallback='second')), var('second', color(2, 2, 2))],
        )
        assert PaletteLayout.from_module(module).entries[0].fallback_index == -1

    def test_only_colors(self):
        module = Module('colors.palette', variables=[var('gap', Value(PIXELS, 4))])
        with pytest.raises(TypeResolutionError):
            PaletteLayout.from_module(module)

    def test_non_ascii_name_rejected(self):
        module = Module('colors.palette', variables=[var('fond\u00e9', color(1, 2, 3))])
        with pytest.raises(TypeResolutionError, match='ASCII'):
            PaletteLayout.from_module(module)

    def test_checksum_source(self, layout):
        assert layout.checksum_source() == (
            '&windowBg:{ 255, 255, 255, 255 }'
            '&windowFg:{ 0, 0, 0, 255 }'
            '&windowBgOver:st::windowBg.clone()'
            '&activeButtonBg:{ 64, 138, 203, 255 }'
        )

    def test_checksum_is_crc32_of_source(self, layout):
        assert layout.checksum == _signed(zlib.crc32(layout.checksum_source().encode('utf-8')))

    def test_checksum_tracks_literals(self, palette_module, layout):
        assert PaletteLayout.from_module(palette_module).checksum == layout.checksum
        palette_module.variables[1] = var('windowFg', color(0, 0, 1))
        assert PaletteLayout.from_module(palette_module).checksum != layout.checksum

    def test_sample_theme(self, layout):
        theme = layout.sample_theme('colors.palette')
        assert "generated from the 'colors.palette' palette file" in theme
        assert theme.endswith(
            'windowBg: #ffffff;\n'
            'windowFg: #000000;\n'
            'windowBgOver: windowBg;\n'
            'activeButtonBg: #408acb; // windowFg;\n'
        )


class TestPalette:
    def test_created_not_ready(self, layout):
        palette = Palette(layout)
        assert not palette.ready
        assert all(palette.status(i) == SlotStatus.INITIAL for i in range(palette.count))

    def test_finalize_uses_defaults(self, layout):
        palette = Palette(layout)
        palette.finalize()
        assert palette.ready
        assert [palette.color(i) for i in range(4)] == [WHITE, BLACK, WHITE, BLUE]
        assert all(palette.status(i) == SlotStatus.CREATED for i in range(4))

    def test_loaded_fallback_wins(self, layout):
        palette = Palette(layout)
        assert palette.set_color('windowFg', RED)
        palette.finalize()
        assert palette.color_by_name('activeButtonBg') == RED
        assert palette.status(3) == SlotStatus.LOADED

    def test_created_fallback_does_not_win(self, layout):
        palette = Palette(layout)
        palette.finalize()
        assert palette.color_by_name('activeButtonBg') == BLUE

    def test_finalize_idempotent(self, layout):
        palette = Palette(layout)
        palette.finalize()
        before = [palette.color(i) for i in range(4)]
        palette.finalize()
        assert [palette.color(i) for i in range(4)] == before

    def test_set_color_unknown_name(self, layout):
        assert not Palette(layout).set_color('nope', RED)

    def test_set_color_bad_channels(self, layout):
        with pytest.raises(ValueError):
            Palette(layout).set_color('windowBg', (256, 0, 0, 255))

    def test_set_color_from_requires_loaded_source(self, layout):
        palette = Palette(layout)
        palette.finalize()
        assert not palette.set_color_from('windowBgOver', 'windowFg')
        palette.set_color('windowFg', RED)
        assert palette.set_color_from('windowBgOver', 'windowFg')
        assert palette.color_by_name('windowBgOver') == RED
        assert palette.status(2) == SlotStatus.LOADED

    def test_save_finalizes(self, layout):
        palette = Palette(layout)
        data = palette.save()
        assert palette.ready
        assert data == bytes(WHITE + BLACK + WHITE + BLUE)

    def test_load_round_trip(self, layout):
        source = Palette(layout)
        source.set_color('windowBg', RED)
        cache = source.save()

        target = Palette(layout)
        assert target.load(cache)
        assert target.color(0) == RED
        assert all(target.status(i) == SlotStatus.LOADED for i in range(4))

    def test_save_load_save_on_fresh_palette(self, layout):
        first = Palette(layout).save()
        restored = Palette(layout)
        assert restored.load(first)
        assert restored.save() == first

    def test_load_rejects_thirteen_bytes_for_three_colors(self):
        module = Module(
            'colors.palette',
            variables=[var('a', color(1, 1, 1)), var('b', color(2, 2, 2)), var('c', color(3, 3, 3))],
        )
        palette = Palette(PaletteLayout.from_module(module))
        assert not palette.load(bytes(13))
        assert palette.load(bytes(12))

    def test_load_rejects_wrong_length(self, layout):
        palette = Palette(layout)
        assert not palette.load(bytes(13))
        assert not palette.load(bytes(20))
        assert palette.status(0) == SlotStatus.INITIAL

    def test_assign_takes_loaded_and_recomputes_rest(self, layout):
        theme = Palette(layout)
        theme.set_color('windowFg', RED)

        current = Palette(layout)
        current.set_color('windowBg', RED)
        current.finalize()

        current.assign(theme)
        assert current.ready
        assert current.color(0) == WHITE
        assert current.status(0) == SlotStatus.CREATED
        assert current.color(1) == RED
        assert current.color(3) == RED

    def test_assign_rejects_other_declarations(self, layout):
        other = PaletteLayout.from_module(Module('other.palette', variables=[var('x', color(1, 2, 3))]))
        with pytest.raises(ValueError):
            Palette(layout).assign(Palette(other))

    def test_release(self, layout):
        palette = Palette(layout)
        palette.finalize()
        assert palette.release() == 4
        assert not palette.ready
        assert palette.release() == 0


class TestMainPalette:
    def test_load_resets_icons_on_success_only(self, layout):
        resets = []
        main = MainPalette(layout, reset_icons=lambda: resets.append(1))
        assert not main.load(b'\x00')
        assert resets == []
        assert main.load(Palette(layout).save())
        assert resets == [1]

    def test_apply_resets_icons(self, layout):
        resets = []
        main = MainPalette(layout, reset_icons=lambda: resets.append(1))
        other = Palette(layout)
        other.set_color('windowBg', RED)
        main.apply(other)
        assert resets == [1]
        assert main.palette.color(0) == RED

    def test_set_color_delegates(self, layout):
        main = MainPalette(layout)
        assert main.set_color('windowFg', RED)
        assert main.set_color_from('windowBg', 'windowFg')
        assert main.save()[:4] == bytes(RED)
