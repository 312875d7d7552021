""" WiFi signal level and scanning through wireless-tools and NetworkManager """
import logging
import re

from clabedge.common.clabedge_logging import get_clabedge_logger
from clabedge.common.utils import check_output, execute_cmd
from clabedge.conversions.signal import dbm_to_percent
from clabedge.peripherals.data.network_data import WifiNetwork, WifiSignal

logger: logging.Logger = get_clabedge_logger(__name__)

_SIGNAL_LEVEL = re.compile(r'Signal level[=:](-?\d+)')

SCAN_FIELDS: list[str] = ['SSID', 'BSSID', 'MODE', 'CHAN', 'FREQ', 'RATE', 'SIGNAL', 'SECURITY']


def parse_signal_level(iwconfig: str) -> WifiSignal:
    """ Signal level of 'iwconfig IFACE'. Empty WifiSignal when not associated """
    match = _SIGNAL_LEVEL.search(iwconfig or '')
    if not match:
        return WifiSignal()
    dbm = int(match.group(1))
    return WifiSignal(dbm=dbm, percent=dbm_to_percent(dbm))


def _split_terse(line: str) -> list[str]:
    """ Splits one nmcli terse line on unescaped ':'. A backslash makes the next character literal """
    fields = []
    current = []
    escaped = False
    for char in line:
        if escaped:
            current.append(char)
            escaped = False
        elif char == '\\':
            escaped = True
        elif char == ':':
            fields.append(''.join(current))
            current = []
        else:
            current.append(char)
    fields.append(''.join(current))
    return fields


def _to_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def parse_scan(nmcli_terse: str) -> list[WifiNetwork]:
    """
    Parses 'nmcli -t -f SSID,BSSID,MODE,CHAN,FREQ,RATE,SIGNAL,SECURITY device wifi list'.
    Hidden networks (no SSID) are skipped.

    Returns:
        the networks, strongest first
    """
    networks = []
    for line in (nmcli_terse or '').splitlines():
        if not line.strip():
            continue
        parts = _split_terse(line)
        parts += [''] * (len(SCAN_FIELDS) - len(parts))
        if not parts[0]:
            continue

        networks.append(WifiNetwork(ssid=parts[0],
                                    bssid=parts[1] or None,
                                    mode=parts[2] or None,
                                    channel=_to_int(parts[3]),
                                    frequency=parts[4] or None,
                                    rate=parts[5] or None,
                                    signal=_to_int(parts[6]) or 0,
                                    security=parts[7] or 'Open'))

    networks.sort(key=lambda n: n.signal, reverse=True)
    return networks


class WifiInterface:
    def __init__(self, interface: str = 'wlan0'):
        self.interface: str = interface

    def get_signal(self) -> WifiSignal:
        result = execute_cmd(['iwconfig', self.interface])
        if result is None or result.returncode != 0:
            logger.warning(f'Cannot read the signal level of {self.interface}')
            return WifiSignal()
        return parse_signal_level(result.stdout)

    def scan(self, rescan: bool = True) -> list[WifiNetwork]:
        if rescan:
            result = execute_cmd(['nmcli', 'device', 'wifi', 'rescan', 'ifname', self.interface])
            if result is None or result.returncode != 0:
                logger.debug(f'Rescan of {self.interface} not performed, listing cached results')

        return parse_scan(check_output(['nmcli', '-t', '-f', ','.join(SCAN_FIELDS), 'device', 'wifi', 'list',
                                        'ifname', self.interface]))
