"""Exception types raised while generating a style module.

Every failure aborts the current module's generation. Nothing is retried.
"""


class StyleGenError(Exception):
    """Base class for all generation failures."""


class TypeResolutionError(StyleGenError):
    """Unknown tag, missing struct shape, or struct field arity/type mismatch."""


class UnresolvedReferenceError(StyleGenError):
    """Alias to an unknown name, or a font family / icon mask / modifier missing from its table."""


class ResourceValidationError(StyleGenError):
    """Icon image unreadable, format mismatch, bad size ratio, or malformed size:// dimensions."""

    def __init__(self, path: str, message: str):
        super().__init__(f'{path}: {message}')
        self.path = path


class GenerationIOError(StyleGenError):
    """A generated artifact could not be read back or written."""

    def __init__(self, path: str, cause: OSError):
        super().__init__(f'{path}: {cause.strerror or cause}')
        self.path = path
        self.cause = cause
