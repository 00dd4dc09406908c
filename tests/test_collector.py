"""Tests for stylegen.core.collector: shared px, font family and icon mask tables."""

import pytest
from conftest import PIXELS, alias, var
from stylegen.core.collector import CrossReferenceTables, collect_unique_values, px_adjustments
from stylegen.core.errors import TypeResolutionError
from stylegen.core.scale import Scale
from stylegen.core.types import Margins, Module, Type, TypeTag, Value


class TestCollectUniqueValues:
    def test_px_values_deduplicated(self, style_module):
        tables = collect_unique_values(style_module)
        # 12 is declared twice but collected once; -12 is distinct
        assert tables.sorted_px_values() == [-12, 0, 2, 8, 12, 13, 34, 40]

    def test_font_families_first_seen_one_based(self, style_module):
        tables = collect_unique_values(style_module)
        assert tables.font_families == {'Open Sans': 1, 'Open Sans Semibold': 2}

    def test_empty_family_not_registered(self):
        tables = CrossReferenceTables()
        tables.add_font_family('')
        assert tables.font_families == {}

    def test_icon_masks(self, style_module):
        assert collect_unique_values(style_module).icon_masks == {'size://16,20': 1}

    def test_aliases_skipped(self):
        module = Module(
            'a.style',
            variables=[var('x', Value(PIXELS, 5)), var('y', alias(PIXELS, 'x'))],
        )
        assert collect_unique_values(module).px_values == {5}

    def test_margins(self):
        module = Module('a.style', variables=[var('m', Value(Type(TypeTag.MARGINS), Margins(1, 2, 3, 1)))])
        assert collect_unique_values(module).sorted_px_values() == [1, 2, 3]

    def test_struct_without_fields_fails(self):
        module = Module('a.style', variables=[var('b', Value(Type(TypeTag.STRUCT, ('Button',))))])
        with pytest.raises(TypeResolutionError):
            collect_unique_values(module)

    def test_empty_module(self):
        assert collect_unique_values(Module('a.style')).is_empty()


class TestPxAdjustments:
    def test_baseline_excluded(self):
        result = px_adjustments({8})
        assert Scale.ONE not in result
        assert result[Scale.ONE_AND_QUARTER] == [(8, 10)]
        assert result[Scale.ONE_AND_HALF] == [(8, 12)]
        assert result[Scale.TWO] == [(8, 16)]

    def test_unchanged_values_omitted(self):
        # 0 and 1 stay the same at 125%
        assert px_adjustments({0, 1})[Scale.ONE_AND_QUARTER] == []

    def test_sorted(self):
        pairs = px_adjustments({20, -4, 8})[Scale.TWO]
        assert [v for v, _ in pairs] == [-4, 8, 20]
