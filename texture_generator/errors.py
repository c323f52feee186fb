# texture_generator/errors.py

"""Exception types raised by the texture generator."""


class TextureConfigError(ValueError):
    """A module, builder, gradient or renderer was configured with invalid values.

    Raised at construction time, before any rendering starts.
    """


class GraphCycleError(TextureConfigError):
    """The module graph references itself through one of its children."""


class DescriptionError(ValueError):
    """A graph description file could not be turned back into a graph."""


class RenderCancelledError(RuntimeError):
    """The cancellation flag was set while a map was being generated."""
