"""Value model for parsed style modules: TypeTag, Type, Value, Variable, Struct, Module."""

from __future__ import annotations

import copy
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from PIL import Image

from stylegen.core.errors import TypeResolutionError, UnresolvedReferenceError

FullName = tuple[str, ...]


class TypeTag(Enum):
    INVALID = 'invalid'
    INT = 'int'
    DOUBLE = 'double'
    PIXELS = 'pixels'
    STRING = 'string'
    COLOR = 'color'
    POINT = 'point'
    SIZE = 'size'
    CURSOR = 'cursor'
    ALIGN = 'align'
    MARGINS = 'margins'
    FONT = 'font'
    ICON = 'icon'
    STRUCT = 'struct'


# Tags whose generated storage must be deep-copied when aliased
OWNING_TAGS = frozenset({TypeTag.COLOR, TypeTag.STRUCT})


@dataclass(frozen=True)
class Type:
    tag: TypeTag
    name: FullName = ()  # struct name, only for TypeTag.STRUCT


@dataclass
class Color:
    red: int
    green: int
    blue: int
    alpha: int = 255
    fallback: str = ''  # name of the palette color this one inherits from, if any

    def rgba(self) -> tuple[int, int, int, int]:
        return (self.red, self.green, self.blue, self.alpha)


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class Size:
    width: int
    height: int


@dataclass(frozen=True)
class Margins:
    left: int
    top: int
    right: int
    bottom: int


@dataclass(frozen=True)
class Font:
    size: int  # pixels
    flags: int
    family: str = ''


@dataclass
class IconPart:
    filename: str  # path, or size://W,H; may carry -modifier suffixes
    color: Value
    offset: Value


@dataclass
class Icon:
    parts: list[IconPart] = field(default_factory=list)


@dataclass
class Field:
    """One named field of a struct value."""

    name: FullName
    value: Value


@dataclass(frozen=True)
class StructField:
    """One field of a struct declaration."""

    name: str
    type: Type


@dataclass
class Value:
    """A literal of its type tag or an alias (copy_of) of another declared value, never both."""

    type: Type
    data: Any = None
    copy_of: FullName = ()

    def __post_init__(self) -> None:
        if self.copy_of and self.data is not None:
            raise ValueError(f'value aliasing {".".join(self.copy_of)} cannot also carry a literal')

    @property
    def tag(self) -> TypeTag:
        return self.type.tag

    @property
    def is_alias(self) -> bool:
        return bool(self.copy_of)

    def _expect(self, *tags: TypeTag) -> Any:
        if self.tag not in tags or self.is_alias:
            raise TypeResolutionError(f'expected {"/".join(t.value for t in tags)} literal, got {self.tag.value}')
        return self.data

    def as_int(self) -> int:
        return self._expect(TypeTag.INT, TypeTag.PIXELS)

    def as_double(self) -> float:
        return self._expect(TypeTag.DOUBLE)

    def as_string(self) -> str:
        return self._expect(TypeTag.STRING, TypeTag.CURSOR, TypeTag.ALIGN)

    def as_color(self) -> Color:
        return self._expect(TypeTag.COLOR)

    def as_point(self) -> Point:
        return self._expect(TypeTag.POINT)

    def as_size(self) -> Size:
        return self._expect(TypeTag.SIZE)

    def as_margins(self) -> Margins:
        return self._expect(TypeTag.MARGINS)

    def as_font(self) -> Font:
        return self._expect(TypeTag.FONT)

    def as_icon(self) -> Icon:
        return self._expect(TypeTag.ICON)

    def fields(self) -> list[Field] | None:
        """Struct field values, or None when the struct payload is absent or malformed."""
        if self.tag != TypeTag.STRUCT or self.is_alias:
            return None
        if not isinstance(self.data, list) or not all(isinstance(f, Field) for f in self.data):
            return None
        return self.data

    def clone(self) -> Value:
        """Copy of this value; Color and Struct payloads are deep-copied."""
        if self.tag in OWNING_TAGS and not self.is_alias:
            return Value(self.type, copy.deepcopy(self.data))
        return Value(self.type, self.data, self.copy_of)


@dataclass
class Variable:
    name: FullName
    value: Value


@dataclass
class Struct:
    name: FullName
    fields: list[StructField] = field(default_factory=list)


@dataclass
class Module:
    """One parsed style file: variables, struct declarations and included modules, all ordered."""

    filepath: str
    variables: list[Variable] = field(default_factory=list)
    structs: list[Struct] = field(default_factory=list)
    includes: list[Module] = field(default_factory=list)

    @property
    def is_palette(self) -> bool:
        return Path(self.filepath).suffix == '.palette'

    @property
    def base_name(self) -> str:
        """Generated file base name: `palette` for *.palette, else style_<name>."""
        stem = Path(self.filepath).name.split('.')[0]
        return 'palette' if self.is_palette else f'style_{stem}'

    def has_variables(self) -> bool:
        return bool(self.variables)

    def has_structs(self) -> bool:
        return bool(self.structs)

    def has_includes(self) -> bool:
        return bool(self.includes)

    def find_struct_in_module(self, name: FullName, module: Module) -> Struct | None:
        """Find a struct declared directly in `module` (includes are not searched)."""
        for struct in module.structs:
            if struct.name == name:
                return struct
        return None

    def find_struct(self, name: FullName) -> Struct | None:
        """Find a struct in this module or, depth-first, in its includes."""
        found = self.find_struct_in_module(name, self)
        if found is not None:
            return found
        for include in self.includes:
            found = include.find_struct(name)
            if found is not None:
                return found
        return None

    def find_variable_in_module(self, name: FullName, module: Module) -> Variable | None:
        for variable in module.variables:
            if variable.name == name:
                return variable
        return None

    def find_variable(self, name: FullName) -> Variable | None:
        found = self.find_variable_in_module(name, self)
        if found is not None:
            return found
        for include in self.includes:
            found = include.find_variable(name)
            if found is not None:
                return found
        return None

    def resolve(self, value: Value) -> Value:
        """Follow alias chains to the literal value they borrow."""
        seen: set[FullName] = set()
        while value.is_alias:
            if value.copy_of in seen:
                raise UnresolvedReferenceError(f'alias cycle through {".".join(value.copy_of)}')
            seen.add(value.copy_of)
            target = self.find_variable(value.copy_of)
            if target is None:
                raise UnresolvedReferenceError(f'unknown value {".".join(value.copy_of)}')
            value = target.value
        return value


class Modifier:
    """A self-registering icon modifier.

    Usage in a modifier module:

        modifier = Modifier(name='invert', help='Invert colour channels')

        @modifier.apply
        def apply(png100, png200):
            ...
            return png100, png200
    """

    def __init__(self, name: str, help: str = ''):
        self.name = name
        self.help = help
        self._apply_fn: Callable | None = None

    def apply(self, fn: Callable) -> Callable:
        """Decorator to register the transform function."""
        self._apply_fn = fn
        return fn

    def execute(self, png100: Image.Image, png200: Image.Image) -> tuple[Image.Image, Image.Image]:
        """Transform a 1x/2x image pair, returning the new pair."""
        if self._apply_fn is None:
            raise RuntimeError(f'Modifier {self.name} has no apply function')
        return self._apply_fn(png100, png200)


@dataclass
class GenerationReport:
    """Accumulates what one module's generation produced, for text/JSON output."""

    module_path: str = ''
    base_name: str = ''
    is_palette: bool = False
    variable_count: int = 0
    px_value_count: int = 0
    font_families: list[str] = field(default_factory=list)
    icon_masks: list[str] = field(default_factory=list)
    checksum: int | None = None
    artifacts: dict[str, dict[str, Any]] = field(default_factory=dict)

    def add_artifact(self, path: str, written: bool, size: int) -> None:
        """Record an output file and whether it was rewritten."""
        self.artifacts[path] = {'written': written, 'bytes': size}

    @property
    def written_count(self) -> int:
        return sum(1 for a in self.artifacts.values() if a['written'])
