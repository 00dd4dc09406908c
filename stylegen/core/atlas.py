"""Icon mask atlas composition.

Every distinct icon file spec referenced by a module becomes one mask blob
embedded in the generated source:

- `size://W,H` declares a blank W x H mask, no bitmap is read.
- otherwise `<path>.png` (100%) and `<path>@2x.png` (200%) are loaded, any
  `-modifier` suffixes are applied in order, and 125% / 150% variants are
  resampled from the 200% image. The four are packed into one canvas:

      +-----------+------+
      |   200%    | 100% |
      +------+----+------+
      | 150% |125%|
      +------+----+

  The canvas is pre-filled opaque black so padding is reproducible, then
  encoded as PNG.
"""

import io
import struct
from collections.abc import Callable
from pathlib import Path

from PIL import Image, ImageColor

from stylegen.core.errors import ResourceValidationError, UnresolvedReferenceError
from stylegen.core.scale import Scale, px_adjust
from stylegen.core.types import Modifier

SIZE_PREFIX = 'size://'
GENERATE_TAG = b'GENERATE:'
SIZE_TAG = b'SIZE:'
SENTINEL_COLOR = 'black'

ModifierResolver = Callable[[str], Modifier | None]


def split_modifiers(filespec: str) -> tuple[str, list[str]]:
    """`icons/back-flip_horizontal-invert` -> ('icons/back', ['flip_horizontal', 'invert'])."""
    path, *modifiers = filespec.split('-')
    return path, modifiers


def parse_size_spec(filespec: str) -> tuple[int, int]:
    dimensions = filespec[len(SIZE_PREFIX) :].split(',')
    try:
        width, height = int(dimensions[0]), int(dimensions[1])
    except (IndexError, ValueError):
        raise ResourceValidationError(filespec, 'bad dimensions') from None
    if width <= 0 or height <= 0:
        raise ResourceValidationError(filespec, 'bad dimensions')
    return width, height


def icon_mask_value_size(width: int, height: int) -> bytes:
    """Blank mask marker: tags followed by big-endian int32 width and height."""
    return GENERATE_TAG + SIZE_TAG + struct.pack('>ii', width, height)


def _open_image(path: Path) -> Image.Image:
    try:
        image = Image.open(path)
        image.load()
    except OSError:
        raise ResourceValidationError(str(path), 'could not open icon file') from None
    return image


def load_icon_pair(path: str, icons_root: str | None = None) -> tuple[Image.Image, Image.Image]:
    """Load and validate the 100% / 200% images for an icon path (without extension)."""
    base = Path(path)
    if icons_root and not base.is_absolute():
        base = Path(icons_root) / base
    path100 = base.with_name(base.name + '.png')
    path200 = base.with_name(base.name + '@2x.png')

    png100 = _open_image(path100)
    png200 = _open_image(path200)
    if png100.mode != png200.mode:
        raise ResourceValidationError(str(path100), '1x and 2x icons have different format')
    if png100.width * 2 != png200.width or png100.height * 2 != png200.height:
        raise ResourceValidationError(
            str(path100),
            f'bad icons size, 1x: {png100.width}x{png100.height}, 2x: {png200.width}x{png200.height}',
        )
    return png100, png200


def apply_modifiers(
    png100: Image.Image,
    png200: Image.Image,
    names: list[str],
    resolve_modifier: ModifierResolver,
) -> tuple[Image.Image, Image.Image]:
    for name in names:
        modifier = resolve_modifier(name)
        if modifier is None:
            raise UnresolvedReferenceError(f'unknown icon modifier {name!r}')
        png100, png200 = modifier.execute(png100, png200)
    return png100, png200


def compose_atlas(png100: Image.Image, png200: Image.Image) -> Image.Image:
    """Pack the 200/100/150/125% variants into one canvas."""
    if png100.width * 2 != png200.width or png100.height * 2 != png200.height:
        raise ResourceValidationError(
            'atlas',
            f'bad icons size, 1x: {png100.width}x{png100.height}, 2x: {png200.width}x{png200.height}',
        )
    if png100.mode != png200.mode:
        raise ResourceValidationError('atlas', '1x and 2x icons have different format')
    # Paletted and bilevel images cannot be resampled smoothly
    if png100.mode in ('P', '1'):
        png100, png200 = png100.convert('RGBA'), png200.convert('RGBA')

    size125 = (px_adjust(png100.width, Scale.ONE_AND_QUARTER), px_adjust(png100.height, Scale.ONE_AND_QUARTER))
    size150 = (px_adjust(png100.width, Scale.ONE_AND_HALF), px_adjust(png100.height, Scale.ONE_AND_HALF))
    png125 = png200.resize(size125, Image.Resampling.BILINEAR)
    png150 = png200.resize(size150, Image.Resampling.BILINEAR)

    mode = png100.mode
    canvas = Image.new(
        mode,
        (png200.width + png100.width, png200.height + png150.height),
        ImageColor.getcolor(SENTINEL_COLOR, mode),
    )
    # paste without a mask replaces destination pixels, alpha included
    canvas.paste(png200, (0, 0))
    canvas.paste(png100, (png200.width, 0))
    canvas.paste(png150, (0, png200.height))
    canvas.paste(png125, (png150.width, png200.height))
    return canvas


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format='PNG')
    return buffer.getvalue()


def icon_mask_value_png(
    filespec: str,
    resolve_modifier: ModifierResolver,
    icons_root: str | None = None,
) -> bytes:
    path, modifiers = split_modifiers(filespec)
    png100, png200 = load_icon_pair(path, icons_root)
    png100, png200 = apply_modifiers(png100, png200, modifiers, resolve_modifier)
    return encode_png(compose_atlas(png100, png200))


def icon_mask_data(
    filespec: str,
    resolve_modifier: ModifierResolver,
    icons_root: str | None = None,
) -> bytes:
    """Mask blob for an icon part file spec: blank-size marker or composed PNG atlas."""
    if filespec.startswith(SIZE_PREFIX):
        return icon_mask_value_size(*parse_size_spec(filespec))
    return icon_mask_value_png(filespec, resolve_modifier, icons_root)
