"""
Raw ADC code to physical unit conversions for the analog add-on inputs.

Every conversion takes the channel calibration explicitly. A Calibrated channel uses the IIO formula
(raw + offset) * scale, an Uncalibrated one uses the fixed fallback formula of the ADC part fitted on the board.
"""
import logging
import math

from clabedge.common.clabedge_logging import get_clabedge_logger
from clabedge.common.constants import CTE
from clabedge.common.exceptions import InvalidReferenceError
from clabedge.models.analog import (Calibrated, Uncalibrated, ScaledReading, SensorType,
                                    TemperatureReading)

logger: logging.Logger = get_clabedge_logger(__name__)


def _check_finite(name: str, value: float):
    if value is None or not math.isfinite(value):
        raise ValueError(f'{name} must be a finite number, got {value}')


def _calibrated_value(raw: int, calibration: Calibrated) -> float:
    _check_finite('scale', calibration.scale)
    _check_finite('offset', calibration.offset)
    return (raw + calibration.offset) * calibration.scale


def current_to_percent(current_ma: float) -> float:
    """ 4-20 mA loop value to percent of range, clamped to [0, 100] """
    _check_finite('current', current_ma)
    if current_ma < CTE.CURRENT_LOOP_MIN_MA:
        return 0.0
    if current_ma > CTE.CURRENT_LOOP_MAX_MA:
        return 100.0
    span = CTE.CURRENT_LOOP_MAX_MA - CTE.CURRENT_LOOP_MIN_MA
    return round((current_ma - CTE.CURRENT_LOOP_MIN_MA) / span * 100, 1)


def raw_to_current_ma(raw: int, calibration: Calibrated | Uncalibrated = Uncalibrated()) -> ScaledReading:
    """
    Converts a raw code of a current loop input into mA

    Args:
        raw: ADC code
        calibration: channel calibration

    Returns:
        ScaledReading in mA, valid when inside the loop range plus tolerance
    """
    _check_finite('raw', raw)

    match calibration:
        case Calibrated():
            current = _calibrated_value(raw, calibration)
        case _:
            # MAX11108 transfer function
            current = raw * CTE.CURRENT_FALLBACK_FACTOR

    return ScaledReading(raw=raw,
                         physical_value=round(current, 3),
                         unit='mA',
                         percent_of_range=current_to_percent(current),
                         valid=CTE.CURRENT_VALID_MIN_MA <= current <= CTE.CURRENT_VALID_MAX_MA,
                         calibrated=isinstance(calibration, Calibrated))


def raw_to_voltage(raw: int,
                   calibration: Calibrated | Uncalibrated = Uncalibrated(),
                   max_voltage: float = CTE.DEFAULT_MAX_VOLTAGE) -> ScaledReading:
    """
    Converts a raw code of a voltage input into V. Calibrated IIO channels report mV.

    Raises:
        InvalidReferenceError: if max_voltage is not a positive finite number
    """
    if max_voltage is None or not math.isfinite(max_voltage) or max_voltage <= 0:
        raise InvalidReferenceError(f'Reference voltage must be positive, got {max_voltage}')
    _check_finite('raw', raw)

    match calibration:
        case Calibrated():
            voltage = _calibrated_value(raw, calibration) / 1000
        case _:
            voltage = raw / CTE.ADC_FULL_SCALE * max_voltage

    return ScaledReading(raw=raw,
                         physical_value=round(voltage, 3),
                         unit='V',
                         percent_of_range=round(voltage / max_voltage * 100, 1),
                         valid=CTE.VOLTAGE_VALID_MIN_V <= voltage <= max_voltage + CTE.VOLTAGE_VALID_MARGIN_V,
                         calibrated=isinstance(calibration, Calibrated))


def _rtd_r0(sensor_type: SensorType | str) -> float:
    match SensorType(sensor_type):
        case SensorType.PT1000:
            return CTE.PT1000_R0
        case _:
            return CTE.PT100_R0


def raw_to_celsius(raw: int,
                   calibration: Calibrated | Uncalibrated = Uncalibrated(),
                   sensor_type: SensorType | str = SensorType.PT100) -> TemperatureReading:
    """
    Converts a raw RTD code into a temperature.

    Calibrated channels already report milli degrees Celsius. Without calibration the raw code is taken as the
    resistance in milliohms and converted with the linear approximation R = R0 * (1 + alpha * T), which drifts away
    from Callendar-Van Dusen at the ends of the range. Such readings carry calibrated=False.

    Raises:
        ValueError: on an unknown sensor type or a non finite input
    """
    _check_finite('raw', raw)
    r0 = _rtd_r0(sensor_type)

    match calibration:
        case Calibrated():
            celsius = _calibrated_value(raw, calibration) / 1000
        case _:
            resistance = raw / 1000
            celsius = (resistance / r0 - 1) / CTE.RTD_ALPHA
            logger.debug(f'Uncalibrated {sensor_type} reading, linear approximation used: {resistance} Ohm')

    return TemperatureReading(raw=raw,
                              celsius=round(celsius, 1),
                              fahrenheit=round(celsius * 9 / 5 + 32, 1),
                              kelvin=round(celsius + 273.15, 1),
                              sensor_type=SensorType(sensor_type),
                              calibrated=isinstance(calibration, Calibrated))


def rescale(percent: float, min_value: float, max_value: float, decimals: int = 2) -> float:
    """ Linear interpolation of a 0-100 percent value into [min_value, max_value] """
    for name, value in (('percent', percent), ('min_value', min_value), ('max_value', max_value)):
        _check_finite(name, value)
    if decimals < 0:
        raise ValueError(f'decimals must not be negative, got {decimals}')

    return round(min_value + (percent / 100) * (max_value - min_value), decimals)
