import math

import pytest

from clabedge.conversions.signal import clamp, dbm_to_percent, rsrp_rating, rsrp_to_percent


@pytest.mark.parametrize('dbm, percent', [(-58, 84), (-50, 100), (-40, 100), (-100, 0), (-110, 0), (-75, 50)])
def test_dbm_to_percent(dbm, percent):
    assert dbm_to_percent(dbm) == percent


@pytest.mark.parametrize('rsrp, rating', [(-70, 'excellent'), (-80, 'excellent'), (-80.5, 'good'), (-81, 'good'),
                                          (-85, 'good'), (-90, 'good'), (-91, 'fair'), (-92, 'fair'),
                                          (-100, 'fair'), (-110, 'poor'), (-120, 'very poor')])
def test_rsrp_rating(rsrp, rating):
    assert rsrp_rating(rsrp) == rating


def test_rsrp_to_percent():
    assert rsrp_to_percent(-92) == 50
    assert rsrp_to_percent(-44) == 100
    assert rsrp_to_percent(-150) == 0
    assert rsrp_to_percent(-30) == 100


def test_clamp():
    assert clamp(5, 0, 3) == 3
    assert clamp(-1, 0, 3) == 0
    assert clamp(2, 0, 3) == 2


def test_non_finite():
    for func in (dbm_to_percent, rsrp_rating, rsrp_to_percent):
        with pytest.raises(ValueError):
            func(math.nan)


def test_dbm_to_percent_monotonic():
    previous = dbm_to_percent(-121)
    for dbm in range(-120, -30):
        current = dbm_to_percent(dbm)
        assert current >= previous
        assert 0 <= current <= 100
        previous = current


def test_rsrp_to_percent_monotonic():
    percents = [rsrp_to_percent(rsrp) for rsrp in range(-150, -29)]
    assert percents == sorted(percents)
