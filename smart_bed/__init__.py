"""Smart bed control device backend."""

__version__ = "1.0.0"
