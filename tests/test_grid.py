"""Tests for gfsgrid.grid module."""

from datetime import date

import numpy as np
import pytest

from gfsgrid.errors import ConfigError
from gfsgrid.grid import (
    FIELDS,
    LEVEL_FIELDS,
    GeoRequest,
    IndexBounds,
    Resolution,
    wrap_lons,
)


def make_request(**kwargs) -> GeoRequest:
    params = {
        "resolution": "0p25",
        "forecast_date": "20240801",
        "cycle_hour": "06",
        "lat_range": (40.5, 40.5),
        "lon_range": (-74, -74),
        "forward_step_count": 5,
        "field": "rh2m",
    }
    params.update(kwargs)
    return GeoRequest(**params)


class TestWrapLons:
    """Tests for wrap_lons function."""

    def test_wrap_lons_positive(self):
        """Test wrapping 0..360 longitudes."""
        lons = np.array([0, 90, 180, 270, 286, 359])
        expected = np.array([0, 90, -180, -90, -74, -1])
        np.testing.assert_array_equal(wrap_lons(lons), expected)

    def test_wrap_lons_scalar(self):
        """Test wrapping a single longitude."""
        assert wrap_lons(286.0) == -74.0
        assert wrap_lons(286.25) == -73.75
        assert wrap_lons(10.0) == 10.0


class TestResolution:
    """Tests for Resolution enum."""

    def test_steps(self):
        assert Resolution.DEG_1P00.step == 1.0
        assert Resolution.DEG_0P50.step == 0.5
        assert Resolution.DEG_0P25.step == 0.25

    def test_parse_name(self):
        assert Resolution.parse("0p25") is Resolution.DEG_0P25
        assert Resolution.parse("1p00") is Resolution.DEG_1P00

    def test_parse_step(self):
        assert Resolution.parse(0.5) is Resolution.DEG_0P50
        assert Resolution.parse(1) is Resolution.DEG_1P00

    def test_parse_enum(self):
        assert Resolution.parse(Resolution.DEG_0P50) is Resolution.DEG_0P50

    @pytest.mark.parametrize("value", ["0p10", "1.0", 0.1, None, True])
    def test_parse_invalid(self, value):
        with pytest.raises(ConfigError, match="Unrecognized resolution"):
            Resolution.parse(value)


class TestFields:
    """Tests for the field catalog."""

    def test_level_fields_are_pressure_fields(self):
        assert "ugrdprs" in LEVEL_FIELDS
        assert "tmpprs" in LEVEL_FIELDS
        assert "rh2m" not in LEVEL_FIELDS
        assert "gustsfc" not in LEVEL_FIELDS

    def test_level_fields_in_catalog(self):
        assert LEVEL_FIELDS <= set(FIELDS)

    def test_catalog_entries(self):
        long_name, units = FIELDS["rh2m"]
        assert long_name == "Relative humidity at 2 m"
        assert units == "%"


class TestGeoRequest:
    """Tests for GeoRequest normalization and validation."""

    def test_normalization(self):
        request = make_request(cycle_hour=6, resolution=0.25, lat_range=[40, 41])
        assert request.cycle_hour == "06"
        assert request.resolution is Resolution.DEG_0P25
        assert request.lat_range == (40.0, 41.0)
        assert request.convert_times is True

    @pytest.mark.parametrize(
        "value", ["20240801", "2024-08-01", date(2024, 8, 1), 20240801]
    )
    def test_forecast_date_formats(self, value):
        assert make_request(forecast_date=value).forecast_date == "20240801"

    def test_is_frozen(self):
        request = make_request()
        with pytest.raises(AttributeError):
            request.field = "tmp2m"

    def test_invalid_resolution(self):
        with pytest.raises(ConfigError):
            make_request(resolution="2p00")

    def test_invalid_field(self):
        with pytest.raises(ConfigError, match="Unrecognized field"):
            make_request(field="notafield")

    @pytest.mark.parametrize("cycle", ["03", 24, "noon", None])
    def test_invalid_cycle(self, cycle):
        with pytest.raises(ConfigError):
            make_request(cycle_hour=cycle)

    @pytest.mark.parametrize("steps", [-1, 1.5, "5", True])
    def test_invalid_forward_step_count(self, steps):
        with pytest.raises(ConfigError):
            make_request(forward_step_count=steps)

    def test_invalid_latitude(self):
        with pytest.raises(ConfigError, match="Latitudes"):
            make_request(lat_range=(40, 91))

    def test_invalid_range(self):
        with pytest.raises(ConfigError):
            make_request(lon_range=(-74,))
        with pytest.raises(ConfigError):
            make_request(lon_range=(float("nan"), 1))

    def test_invalid_date(self):
        with pytest.raises(ConfigError):
            make_request(forecast_date="not a date")


class TestIndexBounds:
    """Tests for GeoRequest.index_bounds."""

    def test_single_point(self):
        bounds = make_request().index_bounds()
        assert bounds == IndexBounds(
            lat_start=522, lat_end=522, lon_start=1144, lon_end=1144, has_level=False
        )

    def test_longitude_wrap(self):
        """(-74 + 360) / 0.25 = 1144."""
        bounds = make_request(lon_range=(-74, -74)).index_bounds()
        assert bounds.lon_start == bounds.lon_end == 1144

    def test_range_order_independent(self):
        a = make_request(lat_range=(42, 43), lon_range=(-73, -74), resolution="1p00")
        b = make_request(lat_range=(43, 42), lon_range=(-74, -73), resolution="1p00")
        assert a.index_bounds() == b.index_bounds()
        bounds = a.index_bounds()
        assert (bounds.lat_start, bounds.lat_end) == (132, 133)
        assert (bounds.lon_start, bounds.lon_end) == (286, 287)

    def test_covers_range(self):
        """Start is floored and end ceiled so off-grid points are covered."""
        bounds = make_request(lat_range=(-84.1, -84.1)).index_bounds()
        assert (bounds.lat_start, bounds.lat_end) == (23, 24)

        bounds = make_request(lon_range=(5.9, 6.1), resolution="0p50").index_bounds()
        assert (bounds.lon_start, bounds.lon_end) == (11, 13)

    def test_seam_not_split(self):
        """A range across 0 degrees spans the wrapped min and max."""
        bounds = make_request(lon_range=(-1, 1), resolution="1p00").index_bounds()
        assert (bounds.lon_start, bounds.lon_end) == (1, 359)

    def test_large_longitudes(self):
        bounds = make_request(lon_range=(-434, 646), resolution="1p00").index_bounds()
        assert (bounds.lon_start, bounds.lon_end) == (286, 286)

    def test_has_level(self):
        assert make_request(field="ugrdprs").index_bounds().has_level is True
        assert make_request(field="rh2m").index_bounds().has_level is False


class TestURL:
    """Tests for request URL construction."""

    def test_surface_field(self):
        url = make_request().url()
        assert url == (
            "https://nomads.ncep.noaa.gov/dods/gfs_0p25/gfs20240801"
            "/gfs_0p25_06z.ascii?rh2m[0:5][522:522][1144:1144]"
        )

    def test_level_field(self):
        request = make_request(field="ugrdprs", forward_step_count=0)
        assert request.query == "ugrdprs[0:0][1][522:522][1144:1144]"

    def test_base_url(self):
        url = make_request(resolution="1p00", cycle_hour=0).url("http://localhost/dods/")
        assert url.startswith("http://localhost/dods/gfs_1p00/gfs20240801/gfs_1p00_00z.ascii?")
        assert url.endswith("rh2m[0:5][130:131][286:286]")
