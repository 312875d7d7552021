""" Great circle distance and coordinate formatting """
import math
from typing import Literal

from clabedge.common.constants import CTE

_HEMISPHERES: dict[str, tuple[str, str]] = {
    'lat': ('N', 'S'),
    'lon': ('E', 'W')
}


def _check_coordinate(name: str, value: float):
    if value is None or not math.isfinite(value):
        raise ValueError(f'{name} must be a finite number, got {value}')


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Distance in metres between two points given in decimal degrees, on a spherical Earth
    """
    for name, value in (('lat1', lat1), ('lon1', lon1), ('lat2', lat2), ('lon2', lon2)):
        _check_coordinate(name, value)

    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = math.sin(d_lat / 2) ** 2 + \
        math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    return CTE.EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def to_dms(decimal: float, axis: Literal['lat', 'lon']) -> str:
    """
    Formats decimal degrees as degrees, minutes and seconds, e.g. 52°31'12.03"N

    Args:
        decimal: signed decimal degrees
        axis: 'lat' for N/S or 'lon' for E/W

    Returns:
        the DMS string, seconds with two decimals
    """
    _check_coordinate(axis, decimal)
    if axis not in _HEMISPHERES:
        raise ValueError(f'Unknown axis {axis}, expected lat or lon')

    # Work in hundredths of a second so 59.999 rounds up into the next minute
    hundredths = round(abs(decimal) * 3600 * 100)
    degrees, rest = divmod(hundredths, 3600 * 100)
    minutes, seconds = divmod(rest, 60 * 100)

    positive, negative = _HEMISPHERES[axis]
    direction = positive if decimal >= 0 else negative
    return f'{degrees}°{minutes}\'{seconds / 100:.2f}"{direction}'


def format_coordinates(lat: float, lon: float, fmt: Literal['decimal', 'dms'] = 'decimal') -> str:
    match fmt:
        case 'dms':
            return f'{to_dms(lat, "lat")}, {to_dms(lon, "lon")}'
        case 'decimal':
            _check_coordinate('lat', lat)
            _check_coordinate('lon', lon)
            return f'{lat:.6f}, {lon:.6f}'
        case _:
            raise ValueError(f'Unknown coordinate format {fmt}')
