"""Shared ASCII responses for gfsgrid tests."""

import pytest

SURFACE_RESPONSE = """gustsfc, [3][5][3]
[0][0], 9.750155, 11.150156, 12.450156
[0][1], 6.5501556, 2.7501557, 11.550156
[0][2], 2.4501557, 1.2501557, 12.750155
[0][3], 10.350156, 6.6501555, 11.550156
[0][4], 9.850156, 4.1501555, 9.250155

[1][0], 11.936633, 13.5366335, 14.0366335
[1][1], 12.5366335, 12.336634, 13.5366335
[1][2], 11.636634, 4.036633, 10.236633
[1][3], 14.736633, 11.836634, 10.5366335
[1][4], 12.636634, 10.336634, 10.336634

[2][0], 11.822627, 15.622626, 15.322626
[2][1], 13.522626, 14.722626, 13.222626
[2][2], 12.322627, 13.922626, 15.622626
[2][3], 13.722626, 13.222626, 14.122626
[2][4], 11.822627, 10.9226265, 10.722627


time, [3]
738931.125, 738931.25, 738931.375
lat, [5]
41.0, 41.5, 42.0, 42.5, 43.0
lon, [3]
286.0, 286.5, 287.0
"""

LEVEL_RESPONSE = """ugrdprs, [6][1][1][1]
[0][0][0], 14.75332


[1][0][0], 16.159197


[2][0][0], 14.124465


[3][0][0], 12.463874


[4][0][0], 10.394353


[5][0][0], 10.046526



time, [6]
738933.25, 738933.375, 738933.5, 738933.625, 738933.75, 738933.875
lev, [1]
975.0
lat, [1]
40.5
lon, [1]
286.0
"""

RH2M_RESPONSE = """rh2m, [6][1][1]
[0][0], 71.2

[1][0], 68.5

[2][0], 55.25

[3][0], 49.75

[4][0], 63.0

[5][0], 80.125


time, [6]
739099.25, 739099.5, 739099.75, 739100.0, 739100.25, 739100.5
lat, [1]
40.5
lon, [1]
286.0
"""


@pytest.fixture
def surface_response():
    return SURFACE_RESPONSE


@pytest.fixture
def level_response():
    return LEVEL_RESPONSE


@pytest.fixture
def rh2m_response():
    return RH2M_RESPONSE
