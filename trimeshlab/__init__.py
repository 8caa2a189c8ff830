"""Half-edge triangle meshes, subdivision, mesh file I/O and discrete electric fields."""

__version__ = "0.1.0"

__all__ = ["__version__"]