from .filters import CredentialFilter
from .formatters import DevFormatter, JSONFormatter
from .setup import setup_logging

__all__ = [
    "CredentialFilter",
    "DevFormatter",
    "JSONFormatter",
    "setup_logging",
]
