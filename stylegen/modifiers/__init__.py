"""Auto-discovery of icon modifier modules.

Every .py file in this package that defines a `modifier` object is
auto-registered by stylegen.registry.discover(). A modifier is named in an
icon file spec as a `-name` suffix: `icons/back-flip_horizontal`.

The explicit imports below keep these modules in frozen binaries, where
pkgutil.iter_modules cannot find them at runtime.
"""

# Hidden imports, keep this list in sync with modifier modules
import stylegen.modifiers.flip_horizontal as _flip_horizontal  # noqa: F401
import stylegen.modifiers.flip_vertical as _flip_vertical  # noqa: F401
import stylegen.modifiers.invert as _invert  # noqa: F401
