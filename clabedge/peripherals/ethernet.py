"""
Wired interface addressing and traffic counters.

Addresses come from the JSON output of iproute2 (ip -j addr show IFACE), counters from
/sys/class/net/IFACE/statistics.
"""
import json
import logging

from clabedge.common.clabedge_logging import get_clabedge_logger
from clabedge.common.constants import SysfsPaths
from clabedge.common.exceptions import DeviceAccessError
from clabedge.common.file_operations import read_sysfs_value
from clabedge.common.utils import check_output
from clabedge.conversions.network import cidr_to_netmask
from clabedge.peripherals.data.network_data import InterfaceAddress, InterfaceStatistics

logger: logging.Logger = get_clabedge_logger(__name__)

STATISTICS_COUNTERS: list[str] = ['rx_bytes', 'tx_bytes', 'rx_packets', 'tx_packets', 'rx_errors', 'tx_errors']


def _is_up(link: dict) -> bool:
    operstate = link.get('operstate')
    if operstate == 'UP':
        return True
    # Point to point links (wwan, ppp) report UNKNOWN while carrying traffic
    return operstate == 'UNKNOWN' and 'LOWER_UP' in link.get('flags', [])


def parse_ip_json(output: str, interface: str | None = None) -> InterfaceAddress:
    """
    Parses 'ip -j addr show [IFACE]'. Only the first IPv4 address is reported.

    Args:
        output: command output, a JSON list with one object per link
        interface: link to report when the output lists several. The first one otherwise

    Returns:
        InterfaceAddress, fields left None when missing from the output
    """
    try:
        links = json.loads(output or '[]')
    except json.JSONDecodeError as ex:
        logger.warning(f'Cannot parse ip output: {ex}')
        return InterfaceAddress(interface=interface)

    if not isinstance(links, list):
        links = [links]
    links = [link for link in links if isinstance(link, dict)]
    if interface:
        links = [link for link in links if link.get('ifname') == interface] or links
    if not links:
        return InterfaceAddress(interface=interface)

    link = links[0]
    address = InterfaceAddress(interface=link.get('ifname') or interface, up=_is_up(link))
    if link.get('link_type', 'ether') == 'ether' and link.get('address'):
        address.mac = link['address'].lower()

    for addr_info in link.get('addr_info', []):
        if addr_info.get('family') != 'inet' or not addr_info.get('local'):
            continue
        address.ip = addr_info['local']
        address.cidr = addr_info.get('prefixlen')
        if address.cidr is not None:
            try:
                address.netmask = cidr_to_netmask(address.cidr)
            except ValueError:
                logger.warning(f'Invalid prefix length {address.cidr} in ip output')
        break

    return address


def get_interface_address(interface: str = 'eth0') -> InterfaceAddress:
    return parse_ip_json(check_output(['ip', '-j', 'addr', 'show', interface]), interface)


def read_statistics(interface: str = 'eth0', root_fs: str = '') -> InterfaceStatistics:
    """
    Reads the kernel traffic counters of an interface.

    Raises:
        DeviceAccessError: the interface does not exist or a counter cannot be read
    """
    statistics_dir = SysfsPaths(root_fs).NET_CLASS / interface / 'statistics'
    if not statistics_dir.is_dir():
        raise DeviceAccessError(statistics_dir, f'no interface {interface}')

    counters = {}
    for counter in STATISTICS_COUNTERS:
        value = read_sysfs_value(statistics_dir / counter)
        try:
            counters[counter] = int(value)
        except (TypeError, ValueError):
            raise DeviceAccessError(statistics_dir / counter, f'unexpected value {value!r}') from None

    return InterfaceStatistics(interface=interface,
                               rx_mb=round(counters['rx_bytes'] / 1024 / 1024, 2),
                               tx_mb=round(counters['tx_bytes'] / 1024 / 1024, 2),
                               **counters)


class EthernetInterface:
    """ One wired interface """

    def __init__(self, interface: str = 'eth0', root_fs: str = ''):
        self.interface: str = interface
        self.root_fs: str = root_fs

    def get_address(self) -> InterfaceAddress:
        return get_interface_address(self.interface)

    def get_statistics(self) -> InterfaceStatistics:
        return read_statistics(self.interface, self.root_fs)
