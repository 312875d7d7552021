class ClabEdgeError(Exception):
    """ Base class of every error raised by clabedge """
    ...


class UnknownPinError(ClabEdgeError, LookupError):
    """
    A pin, channel or port name was requested that the hardware profile does not define. This is a configuration
    error on the caller side, not a runtime fault of the device.
    """
    def __init__(self, kind: str, name: str | int, model_id: str | None = None):
        self.kind = kind
        self.name = name
        self.model_id = model_id
        where = f' on {model_id}' if model_id else ''
        super().__init__(f"Unknown {kind}: {name}{where}")


class UnsupportedFeatureError(ClabEdgeError):
    """ The hardware model does not have the requested peripheral (LED, UART mode switch...) """
    def __init__(self, feature: str, model_id: str):
        self.feature = feature
        self.model_id = model_id
        super().__init__(f"{feature} not supported on {model_id}")


class InvalidReferenceError(ClabEdgeError, ValueError):
    """ A reference or range value that would make a conversion meaningless (zero, negative, NaN) """
    ...


class CommandError(ClabEdgeError):
    def __init__(self, command: list[str] | str, returncode: int | None = None, output: str | None = None):
        self.command = command
        self.returncode = returncode
        self.output = output
        cmd = ' '.join(command) if isinstance(command, list) else command
        detail = f': {output.strip()}' if output else ''
        super().__init__(f"Command '{cmd}' failed ({returncode}){detail}")


class DeviceAccessError(ClabEdgeError):
    """ A sysfs attribute of a device could not be read or written """
    def __init__(self, path, reason: str | None = None):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot access {path}" + (f": {reason}" if reason else ''))
