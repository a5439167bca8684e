"""
GrADS Data Server ASCII response parsing.

An ``.ascii`` response consists of a header line, a data block and an axis
footer::

    gustsfc, [3][5][3]
    [0][0], 9.750155, 11.150156, 12.450156
    ...
    [2][4], 11.822627, 10.9226265, 10.722627


    time, [3]
    738931.125, 738931.25, 738931.375
    lat, [5]
    41.0, 41.5, 42.0, 42.5, 43.0
    lon, [3]
    286.0, 286.5, 287.0

Time blocks in the data block are separated by blank lines, and the footer
is separated from the data block by two consecutive blank lines.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from gfsgrid.errors import ParseError


def split_lines(text: str) -> list[str]:
    """Split a response into lines, keeping empty lines."""
    return text.replace("\r\n", "\n").split("\n")


def parse_values(line: str) -> tuple[float, ...]:
    """
    Parse a comma separated line of numbers.

    Raises
    ------
    ParseError
        If any value is not a number.
    """
    try:
        return tuple(float(value) for value in line.split(","))
    except ValueError as e:
        raise ParseError(f"Invalid numeric values: {line!r}") from e


def _parse_row(row: str) -> tuple[float, ...]:
    # Drop the leading [t][lat] label
    _, sep, values = row.partition(",")
    if not sep:
        raise ParseError(f"Invalid data row: {row!r}")
    return parse_values(values)


@dataclass(frozen=True)
class AxisSet:
    """
    Coordinate axes listed in the footer of an ASCII response.

    Parameters
    ----------
    time : tuple[float, ...]
        Fractional days since 0001-01-01.
    lat : tuple[float, ...]
        Latitudes in degrees north.
    lon : tuple[float, ...]
        Longitudes in degrees east, 0..360.
    level : tuple[float, ...]
        Pressure levels in hPa, empty for single-level fields.
    footer_boundary_line : int
        Index of the first of the two blank lines ending the data block.
    """

    time: tuple[float, ...]
    lat: tuple[float, ...]
    lon: tuple[float, ...]
    level: tuple[float, ...]
    footer_boundary_line: int

    LABELS: ClassVar[dict[str, str]] = {
        "time": "time",
        "lat": "lat",
        "lon": "lon",
        "lev": "level",
    }

    @classmethod
    def from_text(cls, text: str) -> "AxisSet":
        """
        Extract the axes from the footer of an ASCII response.

        The lines are scanned upward from the end. Each footer section is a
        label line (``lat, [5]``) followed by a single line of values, in
        any section order. Scanning stops at the first pair of consecutive
        blank lines, which marks the end of the data block. Blank lines
        inside the data block are never reached.

        Parameters
        ----------
        text : str
            Raw response text.

        Returns
        -------
        AxisSet

        Raises
        ------
        ParseError
            If the footer boundary is missing or an axis cannot be parsed.
        """
        lines = split_lines(text)
        axes = {name: () for name in cls.LABELS.values()}

        boundary = None
        for i in range(len(lines) - 2, -1, -1):
            if lines[i] == "" and lines[i + 1] == "":
                boundary = i
                break
            for label, name in cls.LABELS.items():
                if lines[i].startswith(label):
                    axes[name] = parse_values(lines[i + 1])

        if boundary is None:
            raise ParseError("No footer found, the response is malformed or truncated")

        return cls(**axes, footer_boundary_line=boundary)

    @property
    def shape(self) -> tuple[int, int, int]:
        """Expected data shape (time, lat, lon)."""
        return len(self.time), len(self.lat), len(self.lon)


def parse_data(text: str, boundary: int, shape: Sequence[int]) -> np.ndarray:
    """
    Rebuild the (time, lat, lon) data array from an ASCII response.

    Parameters
    ----------
    text : str
        Raw response text.
    boundary : int
        Line index where the data block ends, see ``AxisSet.footer_boundary_line``.
    shape : Sequence[int]
        Expected (time, lat, lon) sizes from the footer.

    Returns
    -------
    np.ndarray
        Array of shape ``shape`` and dtype float64.

    Raises
    ------
    ParseError
        If the data block does not match ``shape`` or holds a non-numeric value.
    """
    nt, nlat, nlon = shape

    # Skip the header line
    block = "\n".join(split_lines(text)[1:boundary])

    blocks = []
    for chunk in block.split("\n\n"):
        rows = [line for line in chunk.split("\n") if line.strip()]
        if not rows:
            continue
        blocks.append([_parse_row(row) for row in rows])

    if len(blocks) != nt:
        raise ParseError(f"Expected {nt} time blocks, found {len(blocks)}")
    for t, rows in enumerate(blocks):
        if len(rows) != nlat:
            raise ParseError(
                f"Expected {nlat} latitude rows in time block {t}, found {len(rows)}"
            )
        for j, values in enumerate(rows):
            if len(values) != nlon:
                raise ParseError(
                    f"Expected {nlon} longitude values in row [{t}][{j}], "
                    f"found {len(values)}"
                )

    return np.array(blocks, dtype=np.float64).reshape(nt, nlat, nlon)
