""" Analog input data structures """
import math
from typing import Annotated, Literal, Union

from pydantic import Field
from strenum import StrEnum

from clabedge.common.clabedge_base_model import ClabEdgeBaseModel, ClabEdgeStaticModel


class SensorType(StrEnum):
    PT100 = 'PT100'
    PT1000 = 'PT1000'


class InputType(StrEnum):
    CURRENT = 'current'
    VOLTAGE = 'voltage'


class Calibrated(ClabEdgeStaticModel):
    """ The IIO driver exposes a scale (and maybe an offset): value = (raw + offset) * scale """
    kind:   Literal['calibrated'] = 'calibrated'
    scale:  float
    offset: float = 0.0


class Uncalibrated(ClabEdgeStaticModel):
    """ No scale available, conversions use a fixed fallback formula for the known ADC part """
    kind:   Literal['uncalibrated'] = 'uncalibrated'


Calibration = Annotated[Union[Calibrated, Uncalibrated], Field(discriminator='kind')]


def calibration_from(scale: float | None = None, offset: float | None = None) -> Calibrated | Uncalibrated:
    """
    Builds the calibration variant from optional sysfs values. A missing, zero or non finite scale means there is
    no usable calibration.
    """
    if scale is None or scale == 0 or not math.isfinite(scale):
        return Uncalibrated()
    if offset is None or not math.isfinite(offset):
        offset = 0.0
    return Calibrated(scale=scale, offset=offset)


class AnalogChannelDescriptor(ClabEdgeStaticModel):
    """ One ADC channel found while scanning the IIO devices """
    device_id:      str
    device_name:    str | None = None
    channel_name:   str
    raw_value_path: str
    scale:          float | None = None
    offset:         float | None = None

    @property
    def calibration(self) -> Calibrated | Uncalibrated:
        return calibration_from(self.scale, self.offset)


class ScaledReading(ClabEdgeBaseModel):
    """ valid is a plausibility check against the nominal range of the input, not a hardware fault flag """
    raw:                int
    physical_value:     float
    unit:               str
    percent_of_range:   float
    valid:              bool
    calibrated:         bool = False

    device:             str | None = None
    channel:            str | None = None
    scaled:             float | None = None
    scaled_unit:        str | None = None


class TemperatureReading(ClabEdgeBaseModel):
    raw:            int
    celsius:        float
    fahrenheit:     float
    kelvin:         float
    sensor_type:    SensorType
    unit:           str = '°C'
    calibrated:     bool = False

    device:         str | None = None
    channel:        str | None = None
