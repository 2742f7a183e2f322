"""System dashboard FastAPI service."""
from importlib.metadata import version

from .api import create_app
from .builder import API_VERSION

__all__ = ["create_app", "__version__"]

try:
    __version__ = version("system-dashboard-api")
except Exception:  # pragma: no cover - fallback when package metadata missing
    __version__ = API_VERSION
