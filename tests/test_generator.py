"""Tests for stylegen.core.generator: header/source rendering and module output."""

from pathlib import Path

import pytest
from conftest import COLOR, PIXELS, alias, color, var
from stylegen.core.encoding import hash_crc32
from stylegen.core.errors import ResourceValidationError
from stylegen.core.generator import Generator, generate_module, generate_tree, initialization_order
from stylegen.core.types import Icon, IconPart, Module, Point, Type, TypeTag, Value
from stylegen.core.writer import ProjectInfo


def _generator(module: Module, out: str = 'gen') -> Generator:
    return Generator(module, f'{out}/{module.base_name}', ProjectInfo(source=module.filepath))


class TestStyleHeader:
    @pytest.fixture
    def header(self, style_module):
        return _generator(style_module).write_header()

    def test_banner_and_include(self, header):
        assert header.startswith('/*\nWARNING!')
        assert '#pragma once\n\n#include "ui/style/style_core.h"\n' in header

    def test_init_declaration(self, header):
        assert 'namespace internal {\n\nvoid init_style_widgets();\n' in header

    def test_struct_definition(self, header):
        assert (
            'struct FlatButton {\n'
            '\tFlatButton clone() const {\n'
            '\t\treturn { bg.clone(), height, size };\n'
            '\t}\n'
            '\n'
            '\tstyle::color bg;\n'
            '\tint height;\n'
            '\tstyle::size size;\n'
            '};\n'
        ) in header

    def test_refs(self, header):
        assert 'namespace st {\n' in header
        assert 'extern const style::color &windowBg;\n' in header
        assert 'extern const int &buttonHeight;\n' in header
        assert 'extern const style::FlatButton &menuButton;\n' in header


class TestStyleSource:
    @pytest.fixture
    def source(self, style_module):
        return _generator(style_module).write_source()

    def test_own_header_included(self, source):
        assert '#include "style_widgets.h"\n' in source

    def test_storage_defaults(self, source):
        assert 'bool inited = false;\n' in source
        assert 'style::FlatButton _sendButton = { { Qt::Uninitialized }, 0, { 0, 0 } };\n' in source
        assert 'int _buttonHeight = 0;\n' in source

    def test_ref_definitions(self, source):
        assert 'const style::color &windowBg(_windowBg);\n' in source

    def test_shared_px_defined_once(self, source):
        assert source.count('int px12 = 12;\n') == 1
        assert 'int pxm12 = -12;\n' in source

    def test_px_scaling(self, source):
        assert 'void initPxValues() {\n\tif (cRetina()) return;\n\n\tswitch (cScale()) {\n' in source
        assert '\tcase dbisOneAndQuarter:\n\t\tpxm12 = -15;\n\t\tpx8 = 10;\n' in source
        assert '\tcase dbisTwo:\n' in source
        assert '\tcase dbisOne:\n' not in source

    def test_font_families(self, source):
        assert 'int font1index;\nint font2index;\n' in source
        assert '\tfont1index = style::internal::registerFontFamily("Open Sans");\n' in source

    def test_icon_mask(self, source):
        assert 'const uchar iconMask1Data[] = {\n0x47, 0x45' in source
        assert 'IconMask iconMask1(iconMask1Data);\n' in source

    def test_init_function(self, source):
        assert (
            'void init_style_widgets() {\n'
            '\tif (inited) return;\n'
            '\tinited = true;\n'
            '\n'
            '\tinitPxValues();\n'
            '\tinitFontFamilies();\n'
            '\n'
        ) in source

    def test_assignments(self, source):
        assert '\t_buttonHeight = px12;\n' in source
        assert '\t_normalFont = { px13, 0, font1index };\n' in source
        assert '\t_sendButton = { st::windowBg.clone(), px34, { px40, px34 } };\n' in source
        assert '\t_menuButton = st::sendButton.clone();\n' in source


class TestPaletteOutput:
    @pytest.fixture
    def generator(self, palette_module):
        return _generator(palette_module)

    def test_header_class(self, generator):
        header = generator.write_header()
        assert 'class palette {\n' in header
        assert '\tinline const color &windowBgOver() const { return _colors[2]; };\n' in header
        assert '\tStatus _status[4] = { Status::Initial };\n' in header
        assert 'namespace main_palette {\n' in header

    def test_compute_lines(self, generator):
        source = generator.write_source()
        assert '\tcompute(0, -1, {255, 255, 255, 255});\n' in source
        assert '\tcompute(2, 0, {255, 255, 255, 255});\n' in source
        assert '\tcompute(3, 1, {64, 138, 203, 255});\n' in source

    def test_checksum(self, generator):
        source = generator.write_source()
        expected = hash_crc32(generator.palette.checksum_source())
        assert f'int32 palette::Checksum() {{\n\treturn {expected};\n}}\n' in source

    def test_storage_and_refs(self, generator):
        source = generator.write_source()
        assert 'style::palette _palette;\n' in source
        assert 'const style::color &windowBg(_palette.windowBg());\n' in source
        assert '\t_palette.finalize();\n' in source
        assert 'initPxValues' not in source

    def test_matcher_embedded(self, generator):
        assert 'int getPaletteIndex(QLatin1String name) {\n' in generator.write_source()

    def test_sample_theme_only_for_palettes(self, style_module):
        with pytest.raises(ValueError):
            _generator(style_module).write_sample_theme()


class TestInitializationOrder:
    def test_dependencies_first_once(self):
        c = Module('c.style')
        b = Module('b.style', includes=[c])
        a = Module('a.style', includes=[b, c])
        assert initialization_order(a) == [c, b, a]


class TestGenerateModule:
    def test_writes_header_and_source(self, style_module, tmp_path: Path):
        report = generate_module(style_module, str(tmp_path))
        assert (tmp_path / 'style_widgets.h').is_file()
        assert (tmp_path / 'style_widgets.cpp').is_file()
        assert report.written_count == 2
        assert report.px_value_count == 8
        assert report.font_families == ['Open Sans', 'Open Sans Semibold']
        assert report.checksum is None

    def test_second_run_unchanged(self, style_module, tmp_path: Path):
        generate_module(style_module, str(tmp_path))
        assert generate_module(style_module, str(tmp_path)).written_count == 0

    def test_failure_writes_nothing(self, tmp_path: Path):
        module = Module(
            'broken.style',
            variables=[
                var('iconFg', color(0, 0, 0)),
                var(
                    'missingIcon',
                    Value(
                        Type(TypeTag.ICON),
                        Icon([IconPart('missing', alias(COLOR, 'iconFg'), Value(Type(TypeTag.POINT), Point(0, 0)))]),
                    ),
                ),
            ],
        )
        with pytest.raises(ResourceValidationError):
            generate_module(module, str(tmp_path / 'out'), icons_root=str(tmp_path))
        assert not (tmp_path / 'out').exists()

    def test_palette_sample_theme(self, palette_module, tmp_path: Path):
        theme = tmp_path / 'colors.tdesktop-theme'
        report = generate_module(palette_module, str(tmp_path), sample_theme_path=str(theme))
        assert report.checksum is not None
        assert theme.read_text(encoding='utf-8').endswith('activeButtonBg: #408acb; // windowFg;\n')
        assert (tmp_path / 'palette.cpp').is_file()


class TestGenerateTree:
    def test_includes_generated_first(self, tmp_path: Path):
        basic = Module('basic.style', variables=[var('defaultGap', Value(PIXELS, 4))])
        widgets = Module('widgets.style', variables=[var('panelGap', alias(PIXELS, 'defaultGap'))], includes=[basic])
        reports = generate_tree(widgets, str(tmp_path), project_name='codegen_style')
        assert [r.base_name for r in reports] == ['style_basic', 'style_widgets']

        source = (tmp_path / 'style_widgets.cpp').read_text(encoding='utf-8')
        assert '#include "style_basic.h"\n' in source
        assert '\tinit_style_basic();\n' in source
        assert '\t_panelGap = st::defaultGap;\n' in source
        assert "Created from 'widgets.style' by 'codegen_style'" in source


class TestSinglePxValue:
    def test_base_constant_and_scaled_entries(self):
        module = Module('sizes.style', variables=[var('a', Value(PIXELS, 8))])
        source = _generator(module).write_source()
        assert 'int px8 = 8;\n' in source
        assert '\tcase dbisOneAndQuarter:\n\t\tpx8 = 10;\n\tbreak;\n' in source
        assert '\tcase dbisOneAndHalf:\n\t\tpx8 = 12;\n\tbreak;\n' in source
        assert '\tcase dbisTwo:\n\t\tpx8 = 16;\n\tbreak;\n' in source
        assert '\t_a = px8;\n' in source
