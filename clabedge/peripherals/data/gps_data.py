""" GNSS data structures """
from typing import Literal

from pydantic import Field

from clabedge.common.clabedge_base_model import ClabEdgeBaseModel
from clabedge.conversions.geo import format_coordinates, haversine_distance

# gpsd TPV modes: 0 unknown, 1 no fix, 2 2D, 3 3D
FIX_MIN_MODE: int = 2


class GpsPosition(ClabEdgeBaseModel):
    latitude:   float | None = None
    longitude:  float | None = None
    altitude:   float | None = None
    speed:      float | None = None     # m/s
    heading:    float | None = None     # degrees from true north
    climb:      float | None = None     # m/s
    mode:       int = 0
    time:       str | None = None

    @property
    def fix(self) -> bool:
        return self.mode >= FIX_MIN_MODE and self.latitude is not None and self.longitude is not None

    def distance_to(self, other: 'GpsPosition') -> float:
        """
        Great circle distance in metres to another position

        Raises:
            ValueError: if either position has no coordinates
        """
        if None in (self.latitude, self.longitude, other.latitude, other.longitude):
            raise ValueError('Both positions need latitude and longitude')
        return haversine_distance(self.latitude, self.longitude, other.latitude, other.longitude)

    def formatted(self, fmt: Literal['decimal', 'dms'] = 'decimal') -> str | None:
        if self.latitude is None or self.longitude is None:
            return None
        return format_coordinates(self.latitude, self.longitude, fmt)


class Satellite(ClabEdgeBaseModel):
    prn:        int | None = None
    elevation:  float | None = None
    azimuth:    float | None = None
    snr:        float | None = None
    used:       bool = False


class SatelliteReport(ClabEdgeBaseModel):
    satellites: list[Satellite] = Field(default_factory=list)

    @property
    def visible(self) -> int:
        return len(self.satellites)

    @property
    def used(self) -> int:
        return sum(1 for s in self.satellites if s.used)
