"""Typed value to C++ literal emission.

All three entry points are pure functions of the module tree and the
collected cross-reference tables. Failures raise instead of returning an
empty literal, so the caller can abort the module without partial output.
"""

from stylegen.core.collector import CrossReferenceTables
from stylegen.core.encoding import string_to_encoded_string
from stylegen.core.errors import TypeResolutionError, UnresolvedReferenceError
from stylegen.core.types import OWNING_TAGS, Module, Type, TypeTag, Value

_TARGET_TYPES: dict[TypeTag, str] = {
    TypeTag.INT: 'int',
    TypeTag.DOUBLE: 'double',
    TypeTag.PIXELS: 'int',
    TypeTag.STRING: 'QString',
    TypeTag.COLOR: 'style::color',
    TypeTag.POINT: 'style::point',
    TypeTag.SIZE: 'style::size',
    TypeTag.CURSOR: 'style::cursor',
    TypeTag.ALIGN: 'style::align',
    TypeTag.MARGINS: 'style::margins',
    TypeTag.FONT: 'style::font',
    TypeTag.ICON: 'style::icon',
}

_DEFAULT_LITERALS: dict[TypeTag, str] = {
    TypeTag.INT: '0',
    TypeTag.DOUBLE: '0.',
    TypeTag.PIXELS: '0',
    TypeTag.STRING: 'QString()',
    TypeTag.COLOR: '{ Qt::Uninitialized }',
    TypeTag.POINT: '{ 0, 0 }',
    TypeTag.SIZE: '{ 0, 0 }',
    TypeTag.CURSOR: 'style::cur_default',
    TypeTag.ALIGN: 'style::al_topleft',
    TypeTag.MARGINS: '{ 0, 0, 0, 0 }',
    TypeTag.FONT: '{ Qt::Uninitialized }',
    TypeTag.ICON: '{ Qt::Uninitialized }',
}


def px_value_name(value: int) -> str:
    """Name of the shared scaled constant for a px value: px12, pxm12 for -12."""
    return f'pxm{-value}' if value < 0 else f'px{value}'


def _format_double(value: float) -> str:
    # Six significant digits, like a default-formatted stream
    return f'{value:g}'


class LiteralEmitter:
    def __init__(self, module: Module, tables: CrossReferenceTables):
        self.module = module
        self.tables = tables

    def type_to_target_type(self, type_: Type) -> str:
        if type_.tag == TypeTag.STRUCT:
            if not type_.name or self.module.find_struct(type_.name) is None:
                raise TypeResolutionError(f'unknown struct {".".join(type_.name)}')
            return f'style::{type_.name[-1]}'
        if type_.tag not in _TARGET_TYPES:
            raise TypeResolutionError(f'no target type for {type_.tag.value}')
        return _TARGET_TYPES[type_.tag]

    def default_literal(self, type_: Type) -> str:
        if type_.tag == TypeTag.STRUCT:
            struct = self.module.find_struct(type_.name)
            if struct is None:
                raise TypeResolutionError(f'unknown struct {".".join(type_.name)}')
            fields = [self.default_literal(f.type) for f in struct.fields]
            return '{ ' + ', '.join(fields) + ' }'
        if type_.tag not in _DEFAULT_LITERALS:
            raise TypeResolutionError(f'no default value for {type_.tag.value}')
        return _DEFAULT_LITERALS[type_.tag]

    def assignment_literal(self, value: Value) -> str:
        if value.is_alias:
            if self.module.find_variable(value.copy_of) is None:
                raise UnresolvedReferenceError(f'unknown value {".".join(value.copy_of)}')
            result = f'st::{value.copy_of[-1]}'
            # Colors and structs own storage; an alias gets its own copy
            if value.tag in OWNING_TAGS:
                result += '.clone()'
            return result

        tag = value.tag
        if tag == TypeTag.INT:
            return str(value.as_int())
        if tag == TypeTag.DOUBLE:
            return _format_double(value.as_double())
        if tag == TypeTag.PIXELS:
            return px_value_name(value.as_int())
        if tag == TypeTag.STRING:
            return f'qsl({string_to_encoded_string(value.as_string())})'
        if tag == TypeTag.CURSOR:
            return f'style::cur_{value.as_string()}'
        if tag == TypeTag.ALIGN:
            return f'style::al_{value.as_string()}'
        if tag == TypeTag.COLOR:
            c = value.as_color()
            return f'{{ {c.red}, {c.green}, {c.blue}, {c.alpha} }}'
        if tag == TypeTag.POINT:
            p = value.as_point()
            return f'{{ {px_value_name(p.x)}, {px_value_name(p.y)} }}'
        if tag == TypeTag.SIZE:
            s = value.as_size()
            return f'{{ {px_value_name(s.width)}, {px_value_name(s.height)} }}'
        if tag == TypeTag.MARGINS:
            m = value.as_margins()
            names = ', '.join(px_value_name(v) for v in (m.left, m.top, m.right, m.bottom))
            return f'{{ {names} }}'
        if tag == TypeTag.FONT:
            return self._font_literal(value)
        if tag == TypeTag.ICON:
            return self._icon_literal(value)
        if tag == TypeTag.STRUCT:
            fields = value.fields()
            if fields is None:
                raise TypeResolutionError(f'struct {".".join(value.type.name)} value has no field list')
            return '{ ' + ', '.join(self.assignment_literal(f.value) for f in fields) + ' }'
        raise TypeResolutionError(f'cannot emit a literal for {tag.value}')

    def _font_literal(self, value: Value) -> str:
        font = value.as_font()
        family = '0'
        if font.family:
            index = self.tables.font_families.get(font.family)
            if index is None:
                raise UnresolvedReferenceError(f'font family {font.family!r} was not collected')
            family = f'font{index}index'
        return f'{{ {px_value_name(font.size)}, {font.flags}, {family} }}'

    def _icon_literal(self, value: Value) -> str:
        icon = value.as_icon()
        if not icon.parts:
            return '{}'
        parts = []
        for part in icon.parts:
            index = self.tables.icon_masks.get(part.filename)
            if index is None:
                raise UnresolvedReferenceError(f'icon mask {part.filename!r} was not collected')
            color = self.assignment_literal(part.color)
            offset = self.assignment_literal(part.offset)
            parts.append(f'MonoIcon{{ &iconMask{index}, {color}, {offset} }}')
        return '{ ' + ', '.join(parts) + ' }'
