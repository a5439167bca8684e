"""
GFS forecast retrieval from the NOMADS GrADS Data Server.

This module provides the ``get_grid_data`` coroutine, which requests a
subset of a GFS field as ASCII, and ``parse_response``, which turns such a
response into a ``GridResult`` of flat records, a nested lookup and
labelled array views.
"""

import itertools
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta, timezone
from functools import cached_property
from typing import Any, ClassVar

import httpx
import numpy as np
import pandas as pd
import xarray as xr

from gfsgrid.errors import NetworkError, ParseError
from gfsgrid.grid import FIELDS, NOMADS_URL, GeoRequest, Resolution, wrap_lons
from gfsgrid.records import AxisSet, parse_data, split_lines
from gfsgrid.times import noaa_time_to_datetime

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0

Fetcher = Callable[[str], Awaitable[str]]


@dataclass(frozen=True)
class GridRecord:
    """
    A single forecast value.

    Parameters
    ----------
    time : datetime or float
        Valid time, as a UTC datetime or raw fractional days.
    lat : float
        Latitude in degrees north.
    lon : float
        Longitude in degrees east, -180..180.
    value : float
        Field value.
    """

    time: datetime | float
    lat: float
    lon: float
    value: float


@dataclass(frozen=True, eq=False)
class GridResult:
    """
    Parsed GFS subset.

    Parameters
    ----------
    field : str
        GFS field name.
    url : str
        URL the data was requested from.
    records : tuple[GridRecord, ...]
        One record per value, ordered by time, then latitude, then longitude.
    times : tuple
        Valid times, as UTC datetimes or raw fractional days.
    lats : tuple[float, ...]
        Latitudes in degrees north.
    lons : tuple[float, ...]
        Longitudes in degrees east, -180..180.
    levels : tuple[float, ...]
        Pressure levels in hPa, empty for single-level fields.
    data : np.ndarray
        Read-only values with dimensions (time, lat, lon).
    """

    field: str
    url: str
    records: tuple[GridRecord, ...]
    times: tuple
    lats: tuple[float, ...]
    lons: tuple[float, ...]
    levels: tuple[float, ...]
    data: np.ndarray

    COORD_ATTRS: ClassVar[dict[str, dict[str, str]]] = {
        "time": {"long_name": "time", "standard_name": "time"},
        "lat": {
            "units": "degrees_north",
            "long_name": "latitude",
            "standard_name": "latitude",
        },
        "lon": {
            "units": "degrees_east",
            "long_name": "longitude",
            "standard_name": "longitude",
        },
        "level": {
            "units": "hPa",
            "long_name": "pressure",
            "standard_name": "air_pressure",
            "positive": "down",
        },
    }

    @cached_property
    def lookup(self) -> dict[Any, dict[float, dict[float, float]]]:
        """
        Values nested by time, latitude and longitude.

        Returns
        -------
        dict
            ``lookup[time][lat][lon] -> value``, keyed like ``records``.
        """
        lookup = {}
        for rec in self.records:
            lookup.setdefault(rec.time, {}).setdefault(rec.lat, {})[rec.lon] = rec.value
        return lookup

    def to_dataframe(self) -> pd.DataFrame:
        """
        Records as a DataFrame with columns time, lat, lon and value.
        """
        return pd.DataFrame(
            [asdict(rec) for rec in self.records],
            columns=["time", "lat", "lon", "value"],
        )

    def to_xarray(self) -> xr.DataArray:
        """
        Load the data into an xarray DataArray.

        Returns
        -------
        xr.DataArray
            DataArray with dimensions (time, lat, lon). Pressure-level fields
            carry a scalar ``level`` coordinate.

        Raises
        ------
        ParseError
            If the result holds more than one pressure level.
        """
        if len(self.levels) > 1:
            raise ParseError(
                f"Expected at most one pressure level, got {len(self.levels)}"
            )

        times = self.times
        if times and isinstance(times[0], datetime):
            times = pd.DatetimeIndex(times).tz_convert(None)

        attrs = self.COORD_ATTRS
        coords = {
            "time": ("time", times, attrs["time"]),
            "lat": ("lat", list(self.lats), attrs["lat"]),
            "lon": ("lon", list(self.lons), attrs["lon"]),
        }
        if len(self.levels) == 1:
            coords["level"] = ((), self.levels[0], attrs["level"])

        long_name, units = FIELDS.get(self.field, (self.field, None))
        da_attrs = {"long_name": long_name, "source": self.url}
        if units is not None:
            da_attrs["units"] = units

        return xr.DataArray(
            data=self.data,
            dims=("time", "lat", "lon"),
            coords=coords,
            name=self.field,
            attrs=da_attrs,
        )


def assemble(
    axes: AxisSet,
    data: np.ndarray,
    convert_times: bool = True,
    url: str = "",
    field: str = "",
) -> GridResult:
    """
    Combine footer axes and data into a ``GridResult``.

    Parameters
    ----------
    axes : AxisSet
        Axes parsed from the response footer.
    data : np.ndarray
        Values with dimensions (time, lat, lon).
    convert_times : bool
        Convert time values to UTC datetimes.
    url : str
        Request URL.
    field : str
        GFS field name.

    Returns
    -------
    GridResult

    Raises
    ------
    ParseError
        If the shape of ``data`` does not match the axes, or a time value
        cannot be converted to a datetime.
    """
    if data.shape != axes.shape:
        raise ParseError(f"Data shape {data.shape} does not match axes {axes.shape}")

    if convert_times:
        times = []
        for t in axes.time:
            try:
                times.append(noaa_time_to_datetime(t))
            except (OverflowError, ValueError) as e:
                raise ParseError(
                    f"Time value {t} outside the representable range"
                ) from e
        times = tuple(times)
    else:
        times = tuple(axes.time)
    lons = tuple(float(wrap_lons(lon)) for lon in axes.lon)

    data = np.array(data, dtype=np.float64)
    data.setflags(write=False)

    records = tuple(
        GridRecord(
            time=times[t],
            lat=axes.lat[j],
            lon=lons[i],
            value=float(data[t, j, i]),
        )
        for t, j, i in itertools.product(
            range(len(times)), range(len(axes.lat)), range(len(lons))
        )
    )

    return GridResult(
        field=field,
        url=url,
        records=records,
        times=times,
        lats=tuple(axes.lat),
        lons=lons,
        levels=tuple(axes.level),
        data=data,
    )


def parse_response(
    text: str, url: str = "", convert_times: bool = True, field: str | None = None
) -> GridResult:
    """
    Parse a GrADS Data Server ASCII response.

    Parameters
    ----------
    text : str
        Raw response text.
    url : str
        Request URL, kept on the result.
    convert_times : bool
        Convert time values to UTC datetimes.
    field : str, optional
        Field name. Read from the header line if not given.

    Returns
    -------
    GridResult

    Raises
    ------
    ParseError
        If the response is malformed.
    """
    axes = AxisSet.from_text(text)
    data = parse_data(text, axes.footer_boundary_line, axes.shape)
    if field is None:
        field = split_lines(text)[0].split(",")[0].strip()
    logger.debug("Parsed %s with shape %s", field, data.shape)
    return assemble(axes, data, convert_times=convert_times, url=url, field=field)


async def fetch_text(
    url: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """
    Fetch a URL as text.

    Parameters
    ----------
    url : str
        URL to request.
    client : httpx.AsyncClient, optional
        Client to send the request with. A new client is opened if not given.
    timeout : float
        Timeout in seconds, used when opening a new client.

    Returns
    -------
    str

    Raises
    ------
    NetworkError
        If the request fails, the server responds with an error status or
        the response is not text.
    """
    logger.info("Requesting %s", url)
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as new_client:
                response = await new_client.get(url)
        else:
            response = await client.get(url)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise NetworkError(f"Request to {url} failed: {e}") from e

    content_type = response.headers.get("content-type", "text/plain")
    if not content_type.startswith("text/"):
        raise NetworkError(f"Expected a text response from {url}, got {content_type}")

    logger.debug("Received %.1f KB", len(response.content) / 1024)
    return response.text


def default_forecast_date() -> str:
    """Yesterday's date in UTC as YYYYMMDD."""
    return (datetime.now(timezone.utc) - timedelta(days=1)).strftime("%Y%m%d")


async def get_grid_data(
    resolution: Resolution | str = "1p00",
    forecast_date: str | date | None = None,
    cycle_hour: str | int = "00",
    lat_range: Sequence[float] = (42, 43),
    lon_range: Sequence[float] = (-73, -74),
    forward_step_count: int = 0,
    field: str = "gustsfc",
    convert_times: bool = True,
    *,
    fetch: Fetcher | None = None,
    base_url: str = NOMADS_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> GridResult:
    """
    Request a GFS field for an area and parse the response.

    Parameters
    ----------
    resolution : Resolution or str
        ``"1p00"``, ``"0p50"`` or ``"0p25"``.
    forecast_date : str or date, optional
        Model run date. Defaults to yesterday (UTC).
    cycle_hour : str or int
        Model cycle, one of 00, 06, 12 or 18.
    lat_range : Sequence[float]
        Latitude range in degrees. Use the same value twice for a single point.
    lon_range : Sequence[float]
        Longitude range in degrees. Use the same value twice for a single point.
    forward_step_count : int
        Number of 6-hourly steps to include after the cycle.
    field : str
        GFS field name, see ``gfsgrid.grid.FIELDS``.
    convert_times : bool
        Convert time values to UTC datetimes.
    fetch : callable, optional
        Coroutine function taking a URL and returning the response text.
        Defaults to ``fetch_text``.
    base_url : str
        Root of the GrADS Data Server.
    timeout : float
        Request timeout in seconds for the default fetcher.

    Returns
    -------
    GridResult

    Raises
    ------
    ConfigError
        If the request parameters are invalid. Raised before any request.
    NetworkError
        If the request fails.
    ParseError
        If the response is malformed.
    """
    if forecast_date is None:
        forecast_date = default_forecast_date()

    request = GeoRequest(
        resolution=resolution,
        forecast_date=forecast_date,
        cycle_hour=cycle_hour,
        lat_range=lat_range,
        lon_range=lon_range,
        forward_step_count=forward_step_count,
        field=field,
        convert_times=convert_times,
    )
    url = request.url(base_url)

    if fetch is None:
        text = await fetch_text(url, timeout=timeout)
    else:
        text = await fetch(url)

    return parse_response(
        text, url=url, convert_times=request.convert_times, field=request.field
    )
