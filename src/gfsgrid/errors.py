"""
Exceptions raised by gfsgrid.
"""


class GFSGridError(Exception):
    """Base class for gfsgrid failures."""


class ConfigError(GFSGridError, ValueError):
    """Raised when a request cannot be mapped onto the GFS dataset."""


class NetworkError(GFSGridError):
    """Raised when the NOMADS server cannot be reached or rejects a request."""


class ParseError(GFSGridError, ValueError):
    """Raised when an ASCII response is malformed or internally inconsistent."""
