"""Shared module-tree fixtures."""

import pytest
from stylegen.core.types import (
    Color,
    Field,
    Font,
    Icon,
    IconPart,
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

COLOR = Type(TypeTag.COLOR)
PIXELS = Type(TypeTag.PIXELS)
POINT = Type(TypeTag.POINT)


def var(name: str, value: Value) -> Variable:
    return Variable(name=(name,), value=value)


def color(r: int, g: int, b: int, a: int = 255, fallback: str = '') -> Value:
    return Value(COLOR, Color(r, g, b, a, fallback=fallback))


def alias(type_: Type, target: str) -> Value:
    return Value(type_, copy_of=(target,))


@pytest.fixture
def palette_module() -> Module:
    return Module(
        filepath='colors.palette',
        variables=[
            var('windowBg', color(255, 255, 255)),
            var('windowFg', color(0, 0, 0)),
            var('windowBgOver', alias(COLOR, 'windowBg')),
            var('activeButtonBg', color(64, 138, 203, fallback='windowFg')),
        ],
    )


@pytest.fixture
def style_module() -> Module:
    """A style module exercising px sharing, fonts, icons and structs."""
    button = Type(TypeTag.STRUCT, ('FlatButton',))
    return Module(
        filepath='widgets.style',
        structs=[
            Struct(
                ('FlatButton',),
                [StructField('bg', COLOR), StructField('height', PIXELS), StructField('size', Type(TypeTag.SIZE))],
            )
        ],
        variables=[
            var('windowBg', color(255, 255, 255)),
            var('buttonHeight', Value(PIXELS, 12)),
            var('buttonSkip', Value(PIXELS, -12)),
            var('buttonPadding', Value(PIXELS, 12)),
            var('normalFont', Value(Type(TypeTag.FONT), Font(size=13, flags=0, family='Open Sans'))),
            var('semiboldFont', Value(Type(TypeTag.FONT), Font(size=13, flags=1, family='Open Sans Semibold'))),
            var('plainFont', Value(Type(TypeTag.FONT), Font(size=8, flags=0))),
            var(
                'backIcon',
                Value(
                    Type(TypeTag.ICON),
                    Icon([IconPart('size://16,20', alias(COLOR, 'windowBg'), Value(POINT, Point(0, 2)))]),
                ),
            ),
            var(
                'sendButton',
                Value(
                    button,
                    [
                        Field(('bg',), alias(COLOR, 'windowBg')),
                        Field(('height',), Value(PIXELS, 34)),
                        Field(('size',), Value(Type(TypeTag.SIZE), Size(40, 34))),
                    ],
                ),
            ),
            var('menuButton', alias(button, 'sendButton')),
        ],
    )
