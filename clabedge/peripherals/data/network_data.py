""" WiFi and wired interface data structures """
from clabedge.common.clabedge_base_model import ClabEdgeBaseModel


class WifiSignal(ClabEdgeBaseModel):
    dbm:        int | None = None
    percent:    int | None = None


class WifiNetwork(ClabEdgeBaseModel):
    """ One access point of an nmcli scan """
    ssid:       str = ''
    bssid:      str | None = None
    mode:       str | None = None
    channel:    int | None = None
    frequency:  str | None = None
    rate:       str | None = None
    signal:     int = 0
    security:   str = 'Open'


class InterfaceAddress(ClabEdgeBaseModel):
    """ IPv4 configuration of one interface, from ip -j addr show """
    interface:  str | None = None
    ip:         str | None = None
    cidr:       int | None = None
    netmask:    str | None = None
    mac:        str | None = None
    up:         bool = False


class InterfaceStatistics(ClabEdgeBaseModel):
    """ Kernel traffic counters of one interface since it came up """
    interface:  str
    rx_bytes:   int = 0
    tx_bytes:   int = 0
    rx_packets: int = 0
    tx_packets: int = 0
    rx_errors:  int = 0
    tx_errors:  int = 0
    rx_mb:      float = 0.0
    tx_mb:      float = 0.0
