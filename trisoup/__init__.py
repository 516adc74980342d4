"""Top-level package for trisoup."""

from . import tsa as _tsa

__all__ = ["tsa", "__version__", "get_version"]

__version__ = _tsa.__version__
get_version = _tsa.get_version
