"""Unique-resource collection: shared px constants, font families and icon masks.

collect_unique_values() walks every variable of a module once, recursing into
struct fields and icon parts. Aliased values are skipped; their resources were
collected where the target was declared. The resulting tables must be complete
before any literal is emitted, the emitter refuses to guess a missing index.
"""

from dataclasses import dataclass, field

from stylegen.core.errors import TypeResolutionError
from stylegen.core.scale import BASELINE, SCALES, Scale, px_adjust
from stylegen.core.types import Module, TypeTag, Value, Variable


@dataclass
class CrossReferenceTables:
    px_values: set[int] = field(default_factory=set)
    font_families: dict[str, int] = field(default_factory=dict)  # family -> 1-based index
    icon_masks: dict[str, int] = field(default_factory=dict)  # file spec -> 1-based index

    def is_empty(self) -> bool:
        return not (self.px_values or self.font_families or self.icon_masks)

    def sorted_px_values(self) -> list[int]:
        return sorted(self.px_values)

    def add_font_family(self, family: str) -> None:
        if family and family not in self.font_families:
            self.font_families[family] = len(self.font_families) + 1

    def add_icon_mask(self, filename: str) -> None:
        if filename not in self.icon_masks:
            self.icon_masks[filename] = len(self.icon_masks) + 1


def _collect_value(name: str, value: Value, tables: CrossReferenceTables) -> None:
    if value.is_alias:
        return

    tag = value.tag
    px = tables.px_values
    if tag == TypeTag.PIXELS:
        px.add(value.as_int())
    elif tag == TypeTag.POINT:
        v = value.as_point()
        px.update((v.x, v.y))
    elif tag == TypeTag.SIZE:
        v = value.as_size()
        px.update((v.width, v.height))
    elif tag == TypeTag.MARGINS:
        v = value.as_margins()
        px.update((v.left, v.top, v.right, v.bottom))
    elif tag == TypeTag.FONT:
        v = value.as_font()
        px.add(v.size)
        tables.add_font_family(v.family)
    elif tag == TypeTag.ICON:
        for part in value.as_icon().parts:
            # Offsets may alias a declared point; only literal offsets carry new px values
            if not part.offset.is_alias:
                offset = part.offset.as_point()
                px.update((offset.x, offset.y))
            tables.add_icon_mask(part.filename)
    elif tag == TypeTag.STRUCT:
        fields = value.fields()
        if fields is None:
            raise TypeResolutionError(f'{name}: struct value has no field list')
        for f in fields:
            _collect_value('.'.join(f.name), f.value, tables)


def collect_unique_values(module: Module) -> CrossReferenceTables:
    """Build the px / font family / icon mask tables for `module`."""
    tables = CrossReferenceTables()
    for variable in module.variables:
        collect_variable(variable, tables)
    return tables


def collect_variable(variable: Variable, tables: CrossReferenceTables) -> None:
    _collect_value('.'.join(variable.name), variable.value, tables)


def px_adjustments(
    px_values: set[int], scales: tuple[Scale, ...] = SCALES
) -> dict[Scale, list[tuple[int, int]]]:
    """Per non-baseline scale, the (base, adjusted) pairs whose adjustment is not a no-op."""
    result: dict[Scale, list[tuple[int, int]]] = {}
    for scale in scales:
        if scale == BASELINE:
            continue
        entries = []
        for value in sorted(px_values):
            adjusted = px_adjust(value, scale)
            if adjusted != value:
                entries.append((value, adjusted))
        result[scale] = entries
    return result
