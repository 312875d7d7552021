"""
LTE modem status through ModemManager (mmcli)
"""
import logging
import re

from clabedge.common.clabedge_logging import get_clabedge_logger
from clabedge.common.exceptions import CommandError
from clabedge.common.utils import check_output, execute_cmd
from clabedge.conversions.signal import rsrp_rating, rsrp_to_percent
from clabedge.peripherals.data.cellular_data import CellularSignal, ConnectionStatus, ModemInfo, SimInfo
from clabedge.peripherals.ethernet import parse_ip_json

logger: logging.Logger = get_clabedge_logger(__name__)

_MODEM_INDEX = re.compile(r'/Modem/(\d+)')
_SIM_PATH = re.compile(r'primary sim path:\s*(\S+)', re.IGNORECASE)
_SIGNAL_QUALITY = re.compile(r'signal quality:\s*(\d+)', re.IGNORECASE)
_SIGNAL_FIELDS: dict[str, re.Pattern] = {
    'rsrp': re.compile(r'rsrp:\s*([-\d.]+)', re.IGNORECASE),
    'rsrq': re.compile(r'rsrq:\s*([-\d.]+)', re.IGNORECASE),
    'rssi': re.compile(r'rssi:\s*([-\d.]+)', re.IGNORECASE),
    'sinr': re.compile(r'(?:snr|s/n):\s*([-\d.]+)', re.IGNORECASE)
}

_MODEM_INFO_KEYS: dict[str, str] = {
    'manufacturer': 'manufacturer',
    'model': 'model',
    'revision': 'revision',
    'imei': 'equipment id',
    'state': 'state',
    'power_state': 'power state',
    'access_tech': 'access tech',
    'operator_name': 'operator name',
    'operator_code': 'operator code'
}


def extract_value(text: str, key: str) -> str | None:
    """
    Value of a 'key: value' line of mmcli output. The key must start the line or follow the '|' column separator,
    so 'state' does not pick up 'power state'.
    """
    match = re.search(rf'(?:^|\|)[ \t]*{re.escape(key)}:[ \t]*(.+)$', text, re.IGNORECASE | re.MULTILINE)
    return match.group(1).strip() if match else None


def parse_modem_index(mmcli_list: str) -> int | None:
    """ Index of the first modem of 'mmcli -L', None if no modem is listed """
    match = _MODEM_INDEX.search(mmcli_list or '')
    return int(match.group(1)) if match else None


def _to_float(value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        return None


def parse_signal(mmcli_signal: str) -> CellularSignal:
    """
    Parses 'mmcli -m N --signal-get'. Figures missing from the output stay None.
    """
    signal = CellularSignal()
    for field, pattern in _SIGNAL_FIELDS.items():
        match = pattern.search(mmcli_signal or '')
        if match:
            setattr(signal, field, _to_float(match.group(1)))

    if signal.rsrp is not None:
        signal.quality = rsrp_to_percent(signal.rsrp)
        signal.rating = rsrp_rating(signal.rsrp)
    return signal


def parse_modem_info(text: str) -> ModemInfo:
    info = ModemInfo(**{field: extract_value(text, key) for field, key in _MODEM_INFO_KEYS.items()})
    match = _SIGNAL_QUALITY.search(text)
    if match:
        info.signal_quality = int(match.group(1))
    return info


def parse_sim_path(text: str) -> str | None:
    match = _SIM_PATH.search(text)
    if not match or match.group(1) == '--':
        return None
    return match.group(1)


def parse_sim_info(text: str) -> SimInfo:
    return SimInfo(imsi=extract_value(text, 'imsi'),
                   iccid=extract_value(text, 'iccid'),
                   operator_name=extract_value(text, 'operator name'),
                   operator_code=extract_value(text, 'operator code'))


class CellularModem:
    """
    Queries the first modem handled by ModemManager. Every query looks the modem up again, indexes change when the
    modem re-enumerates.
    """
    _MMCLI: str = 'mmcli'

    def __init__(self, interface: str = 'wwan0'):
        self.interface: str = interface

    def is_available(self) -> bool:
        result = execute_cmd([self._MMCLI, '-L'])
        return result is not None and result.returncode == 0 and parse_modem_index(result.stdout) is not None

    def modem_index(self) -> int:
        index = parse_modem_index(check_output([self._MMCLI, '-L']))
        if index is None:
            raise CommandError([self._MMCLI, '-L'], output='No modem found')
        return index

    def get_signal_strength(self) -> CellularSignal:
        index = self.modem_index()
        return parse_signal(check_output([self._MMCLI, '-m', str(index), '--signal-get']))

    def get_modem_info(self) -> ModemInfo:
        index = self.modem_index()
        info = parse_modem_info(check_output([self._MMCLI, '-m', str(index)]))
        info.modem_index = index
        return info

    def get_sim_info(self) -> SimInfo | None:
        """ None if no SIM card is inserted """
        index = self.modem_index()
        sim_path = parse_sim_path(check_output([self._MMCLI, '-m', str(index)]))
        if sim_path is None:
            logger.info('No SIM card found')
            return None
        return parse_sim_info(check_output([self._MMCLI, '-i', sim_path]))

    def get_connection_status(self) -> ConnectionStatus:
        index = self.modem_index()
        output = check_output([self._MMCLI, '-m', str(index)])
        state = extract_value(output, 'state')
        status = ConnectionStatus(connected=state == 'connected',
                                  state=state,
                                  access_tech=extract_value(output, 'access tech'),
                                  operator_name=extract_value(output, 'operator name'))

        if status.connected:
            result = execute_cmd(['ip', '-j', 'addr', 'show', self.interface])
            if result is not None and result.returncode == 0:
                status.ip_address = parse_ip_json(result.stdout, self.interface).ip
            else:
                logger.warning(f'Could not read the address of {self.interface}')
        return status
