"""
urlshortener package initializer.
"""

from . import manager
from . import storage

__version__ = "0.1.0"

__all__ = ["manager", "storage", "__version__"]
