"""
Request geometry for the GFS GrADS Data Server.

This module maps a geographic request (latitude/longitude ranges, forecast
date and cycle) onto the integer grid indices used by the NOMADS OPeNDAP
``.ascii`` endpoint and builds the corresponding request URL.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

import numpy as np
import pandas as pd

from gfsgrid.errors import ConfigError

NOMADS_URL = "https://nomads.ncep.noaa.gov/dods"

# Index of the vertical level requested for pressure-level fields
LEVEL_SLOT = 1

CYCLE_HOURS = ("00", "06", "12", "18")

# GFS single-level variable definitions
GFS_SURFACE_FIELDS = {
    "4lftxsfc": ("Best (4 layer) lifted index", "K"),
    "acpcpsfc": ("Convective precipitation", "kg/m^2"),
    "albdosfc": ("Albedo", "%"),
    "apcpsfc": ("Total precipitation", "kg/m^2"),
    "capesfc": ("Convective available potential energy", "J/kg"),
    "cfrzrsfc": ("Categorical freezing rain", "-"),
    "cicepsfc": ("Categorical ice pellets", "-"),
    "cinsfc": ("Convective inhibition", "J/kg"),
    "cpratsfc": ("Convective precipitation rate", "kg/m^2/s"),
    "crainsfc": ("Categorical rain", "-"),
    "csnowsfc": ("Categorical snow", "-"),
    "cwatclm": ("Cloud water (entire atmosphere)", "kg/m^2"),
    "dlwrfsfc": ("Downward long-wave radiation flux", "W/m^2"),
    "dpt2m": ("Dew point temperature at 2 m", "K"),
    "dswrfsfc": ("Downward short-wave radiation flux", "W/m^2"),
    "gustsfc": ("Wind speed (gust) at surface", "m/s"),
    "hgtsfc": ("Geopotential height at surface", "gpm"),
    "hpblsfc": ("Planetary boundary layer height", "m"),
    "icecsfc": ("Ice cover", "proportion"),
    "landsfc": ("Land cover (1=land, 0=sea)", "proportion"),
    "lhtflsfc": ("Latent heat net flux", "W/m^2"),
    "pratesfc": ("Precipitation rate", "kg/m^2/s"),
    "pressfc": ("Pressure at surface", "Pa"),
    "prmslmsl": ("Pressure reduced to mean sea level", "Pa"),
    "pwatclm": ("Precipitable water (entire atmosphere)", "kg/m^2"),
    "rh2m": ("Relative humidity at 2 m", "%"),
    "shtflsfc": ("Sensible heat net flux", "W/m^2"),
    "snodsfc": ("Snow depth", "m"),
    "spfh2m": ("Specific humidity at 2 m", "kg/kg"),
    "tcdcclm": ("Total cloud cover (entire atmosphere)", "%"),
    "tmax2m": ("Maximum temperature at 2 m", "K"),
    "tmin2m": ("Minimum temperature at 2 m", "K"),
    "tmp2m": ("Temperature at 2 m", "K"),
    "tmpsfc": ("Temperature at surface", "K"),
    "ugrd10m": ("U-component of wind at 10 m", "m/s"),
    "vgrd10m": ("V-component of wind at 10 m", "m/s"),
    "visfc": ("Visibility at surface", "m"),
    "weasdsfc": ("Water equivalent of accumulated snow depth", "kg/m^2"),
}

# GFS pressure-level variable definitions
GFS_PRESSURE_FIELDS = {
    "absvprs": ("Absolute vorticity", "1/s"),
    "clwmrprs": ("Cloud mixing ratio", "kg/kg"),
    "dzdtprs": ("Vertical velocity (geometric)", "m/s"),
    "grleprs": ("Graupel", "kg/kg"),
    "hgtprs": ("Geopotential height", "gpm"),
    "icmrprs": ("Ice water mixing ratio", "kg/kg"),
    "o3mrprs": ("Ozone mixing ratio", "kg/kg"),
    "rhprs": ("Relative humidity", "%"),
    "rwmrprs": ("Rain mixing ratio", "kg/kg"),
    "snmrprs": ("Snow mixing ratio", "kg/kg"),
    "spfhprs": ("Specific humidity", "kg/kg"),
    "tmpprs": ("Temperature", "K"),
    "ugrdprs": ("U-component of wind", "m/s"),
    "vgrdprs": ("V-component of wind", "m/s"),
    "vvelprs": ("Vertical velocity (pressure)", "Pa/s"),
}

FIELDS = {**GFS_SURFACE_FIELDS, **GFS_PRESSURE_FIELDS}

LEVEL_FIELDS = frozenset(GFS_PRESSURE_FIELDS)


def wrap_lons(lons):
    """
    Wrap longitude values to -180 to 180 degree range.

    Parameters
    ----------
    lons : float or np.ndarray
        Longitude values in degrees

    Returns
    -------
    float or np.ndarray
        Longitude values wrapped to [-180, 180) range
    """
    return ((lons + 180) % 360) - 180


class Resolution(Enum):
    """Horizontal resolutions published by the GFS GrADS Data Server."""

    DEG_1P00 = "1p00"
    DEG_0P50 = "0p50"
    DEG_0P25 = "0p25"

    @property
    def step(self) -> float:
        """Grid spacing in degrees."""
        return {"1p00": 1.0, "0p50": 0.5, "0p25": 0.25}[self.value]

    @classmethod
    def parse(cls, value: "Resolution | str | float") -> "Resolution":
        """
        Resolve a resolution from its dataset name or grid spacing.

        Parameters
        ----------
        value : Resolution, str or float
            ``"1p00"``, ``"0p50"``, ``"0p25"`` or the matching step in degrees.

        Returns
        -------
        Resolution

        Raises
        ------
        ConfigError
            If ``value`` does not name a published resolution.
        """
        if isinstance(value, cls):
            return value
        for res in cls:
            if isinstance(value, str) and value == res.value:
                return res
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                if float(value) == res.step:
                    return res
        valid = ", ".join(res.value for res in cls)
        raise ConfigError(f"Unrecognized resolution {value!r}, expected one of {valid}")


def _format_date(value) -> str:
    if value is None:
        raise ConfigError("A forecast date is required")
    if isinstance(value, (int, np.integer)):
        value = str(value)  # YYYYMMDD, not an epoch
    try:
        ts = pd.Timestamp(value)
    except (ValueError, TypeError) as e:
        raise ConfigError(f"Invalid forecast date {value!r}") from e
    if pd.isna(ts):
        raise ConfigError(f"Invalid forecast date {value!r}")
    return ts.strftime("%Y%m%d")


def _format_cycle(value) -> str:
    try:
        hour = int(value)
    except (ValueError, TypeError) as e:
        raise ConfigError(f"Invalid cycle hour {value!r}") from e
    cycle = f"{hour:02d}"
    if cycle not in CYCLE_HOURS:
        raise ConfigError(
            f"Invalid cycle hour {value!r}, expected one of {', '.join(CYCLE_HOURS)}"
        )
    return cycle


def _as_range(name: str, value: Sequence[float]) -> tuple[float, float]:
    try:
        start, end = (float(v) for v in value)
    except (ValueError, TypeError) as e:
        raise ConfigError(f"{name} must be a pair of numbers, got {value!r}") from e
    if not (math.isfinite(start) and math.isfinite(end)):
        raise ConfigError(f"{name} must be finite, got {value!r}")
    return start, end


@dataclass(frozen=True)
class IndexBounds:
    """
    Inclusive grid index bounds of a request.

    Parameters
    ----------
    lat_start, lat_end : int
        Latitude indices, counted from -90 degrees.
    lon_start, lon_end : int
        Longitude indices, counted eastward from 0 degrees.
    has_level : bool
        True if the field is defined on pressure levels.
    """

    lat_start: int
    lat_end: int
    lon_start: int
    lon_end: int
    has_level: bool = False

    @property
    def altitude(self) -> str:
        """Level selector inserted after the time slice."""
        return f"[{LEVEL_SLOT}]" if self.has_level else ""


@dataclass(frozen=True)
class GeoRequest:
    """
    A geographic and temporal GFS request.

    Parameters
    ----------
    resolution : Resolution or str or float
        Dataset resolution.
    forecast_date : str or date
        Model run date, e.g. ``"20240215"``, ``"2024-02-15"`` or a ``date``.
    cycle_hour : str or int
        Model cycle, one of 00, 06, 12 or 18.
    lat_range : Sequence[float]
        Two latitudes in degrees, in any order. Use the same value twice
        for a single point.
    lon_range : Sequence[float]
        Two longitudes in degrees, in any order. Any real value is accepted
        and wrapped into 0..360.
    forward_step_count : int
        Number of additional 6-hour steps after the cycle.
    field : str
        GFS field name, see ``FIELDS``.
    convert_times : bool
        Convert time values to ``datetime`` in the result.

    Raises
    ------
    ConfigError
        If any parameter cannot be mapped onto the dataset.
    """

    resolution: Resolution
    forecast_date: str
    cycle_hour: str
    lat_range: tuple[float, float]
    lon_range: tuple[float, float]
    forward_step_count: int = 0
    field: str = "gustsfc"
    convert_times: bool = True

    LAT_OFFSET: ClassVar[float] = 90.0

    def __post_init__(self):
        """Validate and normalize request parameters."""
        resolution = Resolution.parse(self.resolution)

        if self.field not in FIELDS:
            raise ConfigError(f"Unrecognized field {self.field!r}")

        lat_range = _as_range("lat_range", self.lat_range)
        if any(lat < -90.0 or lat > 90.0 for lat in lat_range):
            raise ConfigError(f"Latitudes must lie within -90..90, got {lat_range}")

        steps = self.forward_step_count
        if isinstance(steps, bool) or not isinstance(steps, (int, np.integer)):
            raise ConfigError(f"forward_step_count must be an integer, got {steps!r}")
        if steps < 0:
            raise ConfigError(f"forward_step_count must be non-negative, got {steps}")

        object.__setattr__(self, "resolution", resolution)
        object.__setattr__(self, "forecast_date", _format_date(self.forecast_date))
        object.__setattr__(self, "cycle_hour", _format_cycle(self.cycle_hour))
        object.__setattr__(self, "lat_range", lat_range)
        object.__setattr__(self, "lon_range", _as_range("lon_range", self.lon_range))
        object.__setattr__(self, "forward_step_count", int(steps))

    @property
    def has_level(self) -> bool:
        return self.field in LEVEL_FIELDS

    def index_bounds(self) -> IndexBounds:
        """
        Compute the dataset grid indices covering the requested area.

        Latitudes are shifted onto 0..180 and longitudes wrapped onto 0..360
        before dividing by the grid step. Start indices are floored and end
        indices ceiled so the index range always covers the requested range.
        A longitude range crossing the 0/360 seam is not split, it covers the
        span between the two wrapped values.

        Returns
        -------
        IndexBounds
        """
        step = self.resolution.step

        lats = [lat + self.LAT_OFFSET for lat in self.lat_range]
        lons = [(lon + 360) % 360 for lon in self.lon_range]

        return IndexBounds(
            lat_start=math.floor(min(lats) / step),
            lat_end=math.ceil(max(lats) / step),
            lon_start=math.floor(min(lons) / step),
            lon_end=math.ceil(max(lons) / step),
            has_level=self.has_level,
        )

    @property
    def query(self) -> str:
        """OPeNDAP constraint expression, e.g. ``rh2m[0:5][522:522][1144:1144]``."""
        b = self.index_bounds()
        return (
            f"{self.field}[0:{self.forward_step_count}]{b.altitude}"
            f"[{b.lat_start}:{b.lat_end}][{b.lon_start}:{b.lon_end}]"
        )

    def url(self, base_url: str = NOMADS_URL) -> str:
        """
        Build the full ``.ascii`` request URL.

        Parameters
        ----------
        base_url : str
            Root of the GrADS Data Server, without trailing slash.

        Returns
        -------
        str
        """
        res = self.resolution.value
        return (
            f"{base_url.rstrip('/')}/gfs_{res}/gfs{self.forecast_date}"
            f"/gfs_{res}_{self.cycle_hour}z.ascii?{self.query}"
        )
