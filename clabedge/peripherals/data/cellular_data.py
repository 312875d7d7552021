""" Cellular modem data structures """
from clabedge.common.clabedge_base_model import ClabEdgeBaseModel


class CellularSignal(ClabEdgeBaseModel):
    """ LTE signal figures as reported by ModemManager. quality and rating derive from rsrp """
    rsrp:       float | None = None
    rsrq:       float | None = None
    rssi:       float | None = None
    sinr:       float | None = None
    quality:    int | None = None
    rating:     str | None = None


class ModemInfo(ClabEdgeBaseModel):
    modem_index:    int | None = None
    manufacturer:   str | None = None
    model:          str | None = None
    revision:       str | None = None
    imei:           str | None = None
    state:          str | None = None
    power_state:    str | None = None
    signal_quality: int | None = None
    access_tech:    str | None = None
    operator_name:  str | None = None
    operator_code:  str | None = None


class SimInfo(ClabEdgeBaseModel):
    imsi:           str | None = None
    iccid:          str | None = None
    operator_name:  str | None = None
    operator_code:  str | None = None


class ConnectionStatus(ClabEdgeBaseModel):
    connected:      bool = False
    state:          str | None = None
    access_tech:    str | None = None
    operator_name:  str | None = None
    ip_address:     str | None = None
