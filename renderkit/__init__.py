"""renderkit - response rendering helpers for FastAPI handlers"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("renderkit")
except PackageNotFoundError:
    __version__ = "dev"
