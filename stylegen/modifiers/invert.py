"""Invert the colour channels of both icon resolutions, keeping alpha.

Works on L, LA, RGB and RGBA masks; any other mode (paletted, bilevel, ...)
is converted to RGBA first. Alpha is left untouched so the mask shape stays
the same.

Example icon path:
    icons/settings-invert
"""

import numpy as np
from PIL import Image

from stylegen.core.types import Modifier

modifier = Modifier(
    name='invert',
    help='Invert colour channels of the 1x and 2x images, alpha unchanged.',
)


INVERTIBLE_MODES = ('L', 'LA', 'RGB', 'RGBA')


def _invert(image: Image.Image) -> Image.Image:
    if image.mode not in INVERTIBLE_MODES:
        image = image.convert('RGBA')
    arr = np.array(image)
    if image.mode in ('LA', 'RGBA'):
        arr[..., :-1] = 255 - arr[..., :-1]
    else:
        arr = 255 - arr
    return Image.fromarray(arr)


@modifier.apply
def apply(png100: Image.Image, png200: Image.Image) -> tuple[Image.Image, Image.Image]:
    return _invert(png100), _invert(png200)
