"""Recipe catalogue backend: configuration, models, ranges, storage and e-mail."""

__version__ = "0.1.0"