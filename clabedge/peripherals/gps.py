"""
GNSS position and satellites from gpsd, read with gpspipe in JSON watch mode
"""
import json
import logging

from clabedge.common.clabedge_logging import get_clabedge_logger
from clabedge.common.constants import CTE
from clabedge.common.utils import check_output, execute_cmd
from clabedge.peripherals.data.gps_data import GpsPosition, Satellite, SatelliteReport

logger: logging.Logger = get_clabedge_logger(__name__)


def _reports(gpspipe_output: str, report_class: str):
    """ Yields the gpsd JSON reports of one class ('TPV', 'SKY'...), skipping lines that are not JSON """
    for line in (gpspipe_output or '').splitlines():
        line = line.strip()
        if not line.startswith('{'):
            continue
        try:
            report = json.loads(line)
        except json.JSONDecodeError:
            logger.debug(f'Skipping malformed gpsd line: {line[:80]}')
            continue
        if isinstance(report, dict) and report.get('class') == report_class:
            yield report


def parse_tpv(gpspipe_output: str) -> GpsPosition | None:
    """
    Position of the first TPV report. Reports with a fix are preferred over earlier ones without.

    Returns:
        GpsPosition, None if the output holds no TPV report
    """
    first: GpsPosition | None = None
    for report in _reports(gpspipe_output, 'TPV'):
        position = GpsPosition(latitude=report.get('lat'),
                               longitude=report.get('lon'),
                               altitude=report.get('altMSL', report.get('alt')),
                               speed=report.get('speed'),
                               heading=report.get('track'),
                               climb=report.get('climb'),
                               mode=report.get('mode') or 0,
                               time=report.get('time'))
        if position.fix:
            return position
        first = first or position
    return first


def parse_sky(gpspipe_output: str) -> SatelliteReport:
    """ Satellites of the first SKY report that lists any """
    for report in _reports(gpspipe_output, 'SKY'):
        satellites = report.get('satellites')
        if not satellites:
            continue
        return SatelliteReport(satellites=[Satellite(prn=s.get('PRN'),
                                                     elevation=s.get('el'),
                                                     azimuth=s.get('az'),
                                                     snr=s.get('ss'),
                                                     used=bool(s.get('used', False)))
                                           for s in satellites])
    return SatelliteReport()


class GpsReceiver:
    """
    Reads from a running gpsd. Starting gpsd on the receiver device is left to the system.

    Reports are restricted to the configured device through the gpsd source argument (host:port:device) of
    gpspipe, so a gpsd serving several receivers only answers for this one. device=None reads every device.
    """
    _GPSPIPE: str = 'gpspipe'

    def __init__(self, device: str | None = '/dev/ttyUSB1', timeout: int = 10,
                 host: str = CTE.GPSD_HOST, port: int = CTE.GPSD_PORT):
        self.device: str | None = device
        self.timeout: int = timeout
        self.host: str = host
        self.port: int = port

    @property
    def source(self) -> str:
        if self.device:
            return f'{self.host}:{self.port}:{self.device}'
        return f'{self.host}:{self.port}'

    def _watch(self, reports: int) -> str:
        return check_output([self._GPSPIPE, '-w', '-n', str(reports), self.source], timeout=self.timeout)

    def is_available(self) -> bool:
        result = execute_cmd(['pgrep', 'gpsd'])
        return result is not None and result.returncode == 0 and bool(result.stdout.strip())

    def get_position(self, reports: int = 5) -> GpsPosition | None:
        return parse_tpv(self._watch(reports))

    def get_satellites(self, reports: int = 10) -> SatelliteReport:
        return parse_sky(self._watch(reports))
