import logging

from pydantic_settings import SettingsConfigDict

from clabedge.common.settings_parser import ClabEdgeBaseSettings
from clabedge.hardware.detector import detect_resolution
from clabedge.hardware.registry import resolve_profile
from clabedge.models.hardware import ProfileResolution
from clabedge.peripherals.analog import AnalogInputs
from clabedge.peripherals.cellular import CellularModem
from clabedge.peripherals.ethernet import EthernetInterface
from clabedge.peripherals.gpio import GpioController
from clabedge.peripherals.gps import GpsReceiver
from clabedge.peripherals.serial import UartModeSwitch
from clabedge.peripherals.system import SystemMonitor
from clabedge.peripherals.wifi import WifiInterface

logger: logging.Logger = logging.getLogger(__name__)


class GatewaySettings(ClabEdgeBaseSettings):
    """
    Gateway settings. Read from environment variables prefixed with CLABEDGE_ (CLABEDGE_MODEL_ID,
    CLABEDGE_ROOT_FS...) or from a TOML file with GatewaySettings.from_toml. The log level is not a setting,
    CLABEDGE_LOG_LEVEL is read together with the command line arguments.

    The adapter factories below build the peripherals with the configured interfaces, devices and root
    filesystem.

    Attributes:
        model_id: hardware model to use. When None the model is detected from the device tree.
        root_fs: prefix of the host filesystem, for running inside a container with the host mounted.
        debug: debug logging, also to file.
        log_path: directory for the per-module log files.
        disable_file_logging: only log to console.
        wifi_interface: WiFi network interface.
        ethernet_interface: wired network interface.
        cellular_interface: WWAN network interface created by the modem.
        gps_device: serial device of the GNSS receiver, as known to gpsd.
    """
    model_config = SettingsConfigDict(env_prefix='CLABEDGE_', protected_namespaces=())

    model_id: str | None = None
    root_fs: str = ''

    debug: bool = False
    log_path: str = '/var/log/clabedge'
    disable_file_logging: bool = False

    wifi_interface: str = 'wlan0'
    ethernet_interface: str = 'eth0'
    cellular_interface: str = 'wwan0'
    gps_device: str = '/dev/ttyUSB1'

    def resolve_model(self) -> ProfileResolution:
        """
        Resolves the hardware profile, either from the configured model id or by detection.

        Returns: ProfileResolution
        """
        if self.model_id:
            resolution = resolve_profile(self.model_id)
            if not resolution.known:
                logger.warning(f'Configured model {self.model_id} is not known, using {resolution.model_id}')
            return resolution

        return detect_resolution(root_fs=self.root_fs)

    def gpio(self, use_gpiotools: bool | None = None) -> GpioController:
        return GpioController(self.resolve_model().profile, root_fs=self.root_fs, use_gpiotools=use_gpiotools)

    def uart_mode_switch(self) -> UartModeSwitch:
        return UartModeSwitch(self.resolve_model().profile, root_fs=self.root_fs)

    def analog_inputs(self) -> AnalogInputs:
        return AnalogInputs(root_fs=self.root_fs)

    def wifi(self) -> WifiInterface:
        return WifiInterface(self.wifi_interface)

    def ethernet(self) -> EthernetInterface:
        return EthernetInterface(self.ethernet_interface, root_fs=self.root_fs)

    def cellular(self) -> CellularModem:
        return CellularModem(self.cellular_interface)

    def gps(self) -> GpsReceiver:
        return GpsReceiver(self.gps_device)

    def system(self) -> SystemMonitor:
        return SystemMonitor(root_fs=self.root_fs)
