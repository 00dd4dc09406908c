"""Mirror both icon resolutions left to right.

Example icon path:
    icons/arrow_back-flip_horizontal
"""

from PIL import Image

from stylegen.core.types import Modifier

modifier = Modifier(
    name='flip_horizontal',
    help='Mirror the 1x and 2x images left to right.',
)


@modifier.apply
def apply(png100: Image.Image, png200: Image.Image) -> tuple[Image.Image, Image.Image]:
    flip = Image.Transpose.FLIP_LEFT_RIGHT
    return png100.transpose(flip), png200.transpose(flip)
