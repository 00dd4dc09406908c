"""Icon modifier auto-discovery and registration.

Scans stylegen/modifiers/ for modules that define a `modifier` object
of type Modifier. Collects them into a dict keyed by name.

Handles both normal Python (pkgutil.iter_modules) and frozen binaries
(where iter_modules returns nothing, so the known module list is imported
instead).
"""

import importlib
import pkgutil

from stylegen.core.types import Modifier

_registry: dict[str, Modifier] = {}

# Known modifier module names, fallback for frozen binaries
_MODIFIER_MODULES = [
    'flip_horizontal',
    'flip_vertical',
    'invert',
]


def discover() -> dict[str, Modifier]:
    """Import all modifier modules and return the registry."""
    if _registry:
        return _registry

    import stylegen.modifiers as pkg

    found_modules = [
        modname for _importer, modname, _ispkg in pkgutil.iter_modules(pkg.__path__) if not modname.startswith('_')
    ]
    if not found_modules:
        found_modules = _MODIFIER_MODULES

    for modname in found_modules:
        module = importlib.import_module(f'stylegen.modifiers.{modname}')
        mod = getattr(module, 'modifier', None)
        if isinstance(mod, Modifier):
            _registry[mod.name] = mod

    return _registry


def resolve(name: str) -> Modifier | None:
    """Look up a modifier by name, None when it is not registered."""
    return discover().get(name)


def get(name: str) -> Modifier:
    """Get a modifier by name."""
    reg = discover()
    if name not in reg:
        raise KeyError(f'Unknown modifier: {name}. Available: {", ".join(sorted(reg))}')
    return reg[name]


def all_modifiers() -> dict[str, Modifier]:
    """Return all registered modifiers."""
    return discover()
