"""
GrADS time axis conversion.

The GrADS Data Server reports time as fractional days since ``1-1-1 00:00``
where day 1 is 0001-01-01 itself, so 738931.25 is 2024-02-15 06:00 UTC.
"""

import math
from datetime import datetime, timedelta, timezone

EPOCH = datetime(1, 1, 1, tzinfo=timezone.utc)

MINUTES_PER_DAY = 60 * 24


def noaa_time_to_datetime(noaa_time: float) -> datetime:
    """
    Convert a GrADS fractional-day time value to a UTC datetime.

    Parameters
    ----------
    noaa_time : float
        Days since 0001-01-01, counting that day as day 1. The fraction
        encodes the time of day.

    Returns
    -------
    datetime
        Timezone-aware UTC datetime. Sub-minute precision is carried by
        ``timedelta`` as fractional minutes.

    Raises
    ------
    OverflowError
        If the result falls outside years 1 to 9999, including any
        ``noaa_time`` below 1.
    """
    # Day 1 is the epoch itself
    result = EPOCH + timedelta(days=math.floor(noaa_time - 1))

    day_frac = noaa_time - math.floor(noaa_time)
    minutes = day_frac * MINUTES_PER_DAY
    hours = math.floor(minutes / 60)
    minutes -= hours * 60

    return result + timedelta(hours=hours, minutes=minutes)
