"""Loader for parsed module trees in JSON interchange form.

The style DSL parser hands over its result as one JSON document per module:

    {
      "file": "widgets.style",
      "includes": ["basic.json"],
      "structs": [
        {"name": "FlatButton", "fields": [
          {"name": "color", "type": "color"},
          {"name": "height", "type": "pixels"}
        ]}
      ],
      "variables": [
        {"name": "buttonHeight", "type": "pixels", "value": 34},
        {"name": "windowBg", "type": "color", "value": "#ffffff"},
        {"name": "windowBgOver", "type": "color", "value": {"hex": "#f2f2f2", "fallback": "windowBg"}},
        {"name": "menuBg", "copy_of": "windowBg"},
        {"name": "sendButton", "type": {"struct": "FlatButton"},
         "value": {"color": {"copy_of": "windowBg"}, "height": 34}}
      ]
    }

Includes are module objects or paths relative to the including file.
Alias types may be omitted; they are taken from the aliased variable.
"""

import json
from pathlib import Path
from typing import Any

from stylegen.core.errors import TypeResolutionError, UnresolvedReferenceError
from stylegen.core.types import (
    Color,
    Field,
    Font,
    Icon,
    IconPart,
    Margins,
    Module,
    Point,
    Size,
    Struct,
    StructField,
    Type,
    TypeTag,
    Value,
    Variable,
)


def parse_tree_file(path: str) -> Module:
    """Load a module tree from disk."""
    with open(path, encoding='utf-8') as f:
        text = f.read()
    return parse_tree_string(text, base_dir=str(Path(path).parent))


def parse_tree_string(text: str, base_dir: str = '.') -> Module:
    return build_module(json.loads(text), base_dir)


def _full_name(name: str) -> tuple[str, ...]:
    return tuple(name.split('.'))


def _parse_type(raw: Any) -> Type:
    if isinstance(raw, dict) and 'struct' in raw:
        return Type(TypeTag.STRUCT, _full_name(raw['struct']))
    try:
        tag = TypeTag(raw)
    except ValueError:
        raise TypeResolutionError(f'unknown type {raw!r}') from None
    if tag in (TypeTag.STRUCT, TypeTag.INVALID):
        raise TypeResolutionError(f'type {raw!r} needs a struct name')
    return Type(tag)


def parse_color(raw: Any) -> Color:
    """`#rgb`, `#rrggbb`, `#rrggbbaa`, [r, g, b(, a)] or {"hex": ..., "fallback": ...}."""
    fallback = ''
    if isinstance(raw, dict):
        fallback = raw.get('fallback', '')
        raw = raw.get('hex')
    if isinstance(raw, list) and len(raw) in (3, 4):
        return Color(*(int(c) for c in raw), fallback=fallback)
    if isinstance(raw, str):
        digits = raw.lstrip('#')
        if len(digits) == 3:
            digits = ''.join(c * 2 for c in digits)
        if len(digits) in (6, 8):
            try:
                channels = [int(digits[i : i + 2], 16) for i in range(0, len(digits), 2)]
            except ValueError:
                channels = []
            if channels:
                return Color(*channels, fallback=fallback)
    raise TypeResolutionError(f'bad color {raw!r}')


def _pair(raw: Any, what: str) -> tuple[int, int]:
    if not isinstance(raw, list) or len(raw) != 2:
        raise TypeResolutionError(f'bad {what} {raw!r}')
    return int(raw[0]), int(raw[1])


class _ModuleBuilder:
    def __init__(self, module: Module):
        self.module = module

    def alias(self, type_: Type | None, target: str) -> Value:
        name = _full_name(target)
        variable = self.module.find_variable(name)
        if variable is None:
            raise UnresolvedReferenceError(f'unknown value {target}')
        if type_ is None:
            type_ = variable.value.type
        elif type_ != variable.value.type:
            raise TypeResolutionError(f'{target} is {variable.value.tag.value}, not {type_.tag.value}')
        return Value(type_, copy_of=name)

    def value(self, type_: Type, raw: Any) -> Value:
        if isinstance(raw, dict) and 'copy_of' in raw:
            return self.alias(type_, raw['copy_of'])

        tag = type_.tag
        if tag in (TypeTag.INT, TypeTag.PIXELS):
            return Value(type_, int(raw))
        if tag == TypeTag.DOUBLE:
            return Value(type_, float(raw))
        if tag in (TypeTag.STRING, TypeTag.CURSOR, TypeTag.ALIGN):
            return Value(type_, str(raw))
        if tag == TypeTag.COLOR:
            return Value(type_, parse_color(raw))
        if tag == TypeTag.POINT:
            return Value(type_, Point(*_pair(raw, 'point')))
        if tag == TypeTag.SIZE:
            return Value(type_, Size(*_pair(raw, 'size')))
        if tag == TypeTag.MARGINS:
            if not isinstance(raw, list) or len(raw) != 4:
                raise TypeResolutionError(f'bad margins {raw!r}')
            return Value(type_, Margins(*(int(v) for v in raw)))
        if tag == TypeTag.FONT:
            return Value(type_, Font(size=int(raw['size']), flags=int(raw.get('flags', 0)), family=raw.get('family', '')))
        if tag == TypeTag.ICON:
            return Value(type_, Icon([self.icon_part(p) for p in raw]))
        if tag == TypeTag.STRUCT:
            return Value(type_, self.struct_fields(type_, raw))
        raise TypeResolutionError(f'cannot build a {tag.value} value')

    def icon_part(self, raw: dict) -> IconPart:
        color_type = Type(TypeTag.COLOR)
        point_type = Type(TypeTag.POINT)
        color = raw.get('color', '#000000')
        offset = raw.get('offset', [0, 0])
        # A bare name (no leading #) refers to a declared color or point
        color_value = (
            self.alias(color_type, color)
            if isinstance(color, str) and not color.startswith('#')
            else self.value(color_type, color)
        )
        offset_value = self.alias(point_type, offset) if isinstance(offset, str) else self.value(point_type, offset)
        return IconPart(filename=raw['file'], color=color_value, offset=offset_value)

    def struct_fields(self, type_: Type, raw: Any) -> list[Field]:
        struct = self.module.find_struct(type_.name)
        if struct is None:
            raise TypeResolutionError(f'unknown struct {".".join(type_.name)}')
        if not isinstance(raw, dict) or set(raw) != {f.name for f in struct.fields}:
            raise TypeResolutionError(f'{".".join(type_.name)} value does not match its declared fields')
        return [Field(name=(f.name,), value=self.value(f.type, raw[f.name])) for f in struct.fields]


def build_module(data: dict, base_dir: str = '.') -> Module:
    """Build a Module from an already-decoded JSON document."""
    module = Module(filepath=data.get('file', 'module.style'))
    for include in data.get('includes', []):
        if isinstance(include, str):
            module.includes.append(parse_tree_file(str(Path(base_dir) / include)))
        else:
            module.includes.append(build_module(include, base_dir))

    for raw in data.get('structs', []):
        fields = [StructField(name=f['name'], type=_parse_type(f['type'])) for f in raw.get('fields', [])]
        module.structs.append(Struct(name=_full_name(raw['name']), fields=fields))

    builder = _ModuleBuilder(module)
    for raw in data.get('variables', []):
        type_ = _parse_type(raw['type']) if 'type' in raw else None
        if 'copy_of' in raw:
            value = builder.alias(type_, raw['copy_of'])
        elif type_ is None:
            raise TypeResolutionError(f'{raw.get("name")}: variable needs a type or copy_of')
        else:
            value = builder.value(type_, raw.get('value'))
        module.variables.append(Variable(name=_full_name(raw['name']), value=value))
    return module
