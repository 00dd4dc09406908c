"""Mirror both icon resolutions top to bottom.

Example icon path:
    icons/arrow_down-flip_vertical
"""

from PIL import Image

from stylegen.core.types import Modifier

modifier = Modifier(
    name='flip_vertical',
    help='Mirror the 1x and 2x images top to bottom.',
)


@modifier.apply
def apply(png100: Image.Image, png200: Image.Image) -> tuple[Image.Image, Image.Image]:
    flip = Image.Transpose.FLIP_TOP_BOTTOM
    return png100.transpose(flip), png200.transpose(flip)
