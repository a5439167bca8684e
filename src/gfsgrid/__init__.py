"""
gfsgrid: Python package for retrieving gridded GFS forecasts from NOMADS.

This package provides tools to request subsets of NOAA Global Forecast System
fields from the GrADS Data Server and parse the ASCII responses into
records, nested lookups and labelled arrays.
"""

__version__ = "2025.10.0"

from .errors import ConfigError, GFSGridError, NetworkError, ParseError
from .gfs import GridRecord, GridResult, get_grid_data, parse_response
from .grid import GeoRequest, Resolution
from .times import noaa_time_to_datetime

__all__ = [
    "ConfigError",
    "GFSGridError",
    "GeoRequest",
    "GridRecord",
    "GridResult",
    "NetworkError",
    "ParseError",
    "Resolution",
    "get_grid_data",
    "noaa_time_to_datetime",
    "parse_response",
]
