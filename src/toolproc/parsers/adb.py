"""Parsers for Android debug bridge (adb) listings.

toolproc parsers v0.1.0

Supported commands:
- adb devices [-l]                    -> AdbDevice
- adb shell pm list packages [-f|-U|-i] -> PackageEntry
- adb shell pm path <package>         -> device path (str)
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = [
    "AdbDevice",
    "AdbDevicesParser",
    "PackageEntry",
    "PackageListParser",
    "PackagePathParser",
]

PACKAGE_PREFIX = "package:"

# adb prints this header before the device table
DEVICES_HEADER = "List of devices attached"

NO_PERMISSIONS_STATE = "no permissions"


@dataclass(frozen=True)
class AdbDevice:
    """A device line from `adb devices -l`.

    Attributes:
        serial: Device serial
        state: device / offline / unauthorized / recovery / no permissions ...
        properties: key:value pairs (product, model, device, transport_id, usb)
    """

    serial: str
    state: str
    properties: dict[str, str] = field(default_factory=dict)

    @property
    def is_online(self) -> bool:
        return self.state == "device"

    @property
    def model(self) -> str:
        return self.properties.get("model", "")


@dataclass(frozen=True)
class PackageEntry:
    """A package line from `pm list packages`.

    Attributes:
        name: Package name
        path: APK path on the device (only with -f)
        uid: Package uid (only with -U)
        installer: Installer package (only with -i)
    """

    name: str
    path: str = ""
    uid: int | None = None
    installer: str | None = None


class AdbDevicesParser:
    """Parses `adb devices [-l]` output.

    Skips the table header, daemon start-up notices and blank lines.
    """

    def parse_line(self, line: str) -> AdbDevice | None:
        stripped = line.strip()
        if not stripped or stripped.startswith("*") or stripped == DEVICES_HEADER:
            return None

        parts = stripped.split(None, 1)
        if len(parts) < 2:
            raise ValueError(f"device line without state: {stripped!r}")
        serial, rest = parts

        if rest.startswith(NO_PERMISSIONS_STATE):
            return AdbDevice(serial=serial, state=NO_PERMISSIONS_STATE)

        state, *tokens = rest.split()
        properties: dict[str, str] = {}
        for token in tokens:
            key, sep, value = token.partition(":")
            if sep:
                properties[key] = value
        return AdbDevice(serial=serial, state=state, properties=properties)


class PackageListParser:
    """Parses `pm list packages` output, with or without -f, -U and -i."""

    def parse_line(self, line: str) -> PackageEntry | None:
        stripped = line.strip()
        if not stripped.startswith(PACKAGE_PREFIX):
            return None

        fields = stripped[len(PACKAGE_PREFIX):].split()
        if not fields:
            return None
        head, *extras = fields

        # -f: "<path>=<name>"; the path itself may contain '='
        path, sep, name = head.rpartition("=")
        if not sep:
            path, name = "", head

        uid: int | None = None
        installer: str | None = None
        for extra in extras:
            if extra.startswith("uid:"):
                value = extra[len("uid:"):]
                # malformed uid is left unset
                if value.isdigit():
                    uid = int(value)
            elif extra.startswith("installer="):
                installer = extra[len("installer="):]

        return PackageEntry(name=name, path=path, uid=uid, installer=installer)


class PackagePathParser:
    """Parses `pm path <package>` output into device paths."""

    def parse_line(self, line: str) -> str | None:
        stripped = line.strip()
        if not stripped.startswith(PACKAGE_PREFIX):
            return None
        return stripped[len(PACKAGE_PREFIX):] or None
