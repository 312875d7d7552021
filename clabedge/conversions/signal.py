""" Radio signal strength helpers shared by the WiFi and cellular adapters """
import math

# LTE RSRP quality tiers, dBm lower bounds (inclusive)
RSRP_TIERS: list[tuple[float, str]] = [
    (-80, 'excellent'),
    (-90, 'good'),
    (-100, 'fair'),
    (-110, 'poor')
]
RSRP_WORST_TIER: str = 'very poor'

# RSRP reporting range used for the quality percentage
RSRP_MIN_DBM: float = -140
RSRP_SPAN_DB: float = 96


def _check_dbm(value: float):
    if value is None or not math.isfinite(value):
        raise ValueError(f'Signal level must be a finite number, got {value}')


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def dbm_to_percent(dbm: float) -> int:
    """ -100 dBm or less is 0 %, -50 dBm or more is 100 % """
    _check_dbm(dbm)
    return int(clamp(2 * (dbm + 100), 0, 100))


def rsrp_rating(rsrp: float) -> str:
    _check_dbm(rsrp)
    for lower_bound, rating in RSRP_TIERS:
        if rsrp >= lower_bound:
            return rating
    return RSRP_WORST_TIER


def rsrp_to_percent(rsrp: float) -> int:
    _check_dbm(rsrp)
    return int(clamp(round((rsrp - RSRP_MIN_DBM) / RSRP_SPAN_DB * 100), 0, 100))
