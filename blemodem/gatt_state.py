"""Modem state: UUID bases, dynamic GATT services and characteristics, device config."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

__all__ = [
    "MAX_UUID_BASES",
    "MAX_SERVICES",
    "MAX_CHARACTERISTICS",
    "MAX_DEVICE_NAME_LEN",
    "StateError",
    "UuidBasesExhausted",
    "ServicesExhausted",
    "CharacteristicsExhausted",
    "NameTooLong",
    "InvalidHandle",
    "UuidBase",
    "ServiceType",
    "ServiceInfo",
    "CharacteristicInfo",
    "ConnectionParams",
    "AdvertisingState",
    "ConnectionState",
    "DeviceConfig",
    "ModemState",
]

MAX_UUID_BASES = 4
"""Maximum number of registered vendor UUID bases."""

MAX_SERVICES = 16
"""Maximum number of dynamic services."""

MAX_CHARACTERISTICS = 64
"""Maximum number of dynamic characteristics."""

MAX_DEVICE_NAME_LEN = 32
"""Maximum device name length, in UTF-8 bytes."""

_UUID_BASE_LEN = 16
_ADDR_LEN = 6


class StateError(Exception):
    """Base class for modem state failures."""


class UuidBasesExhausted(StateError):
    """No room for another UUID base."""


class ServicesExhausted(StateError):
    """No room for another service."""


class CharacteristicsExhausted(StateError):
    """No room for another characteristic."""


class NameTooLong(StateError):
    """Device name exceeds the allowed length."""


class InvalidHandle(StateError):
    """Handle is unknown or already in use."""


@dataclass(frozen=True)
class UuidBase:
    """A registered 128-bit vendor UUID base and the handle it was given."""

    base: bytes
    handle: int


class ServiceType(IntEnum):
    PRIMARY = 1
    SECONDARY = 2


@dataclass(frozen=True)
class ServiceInfo:
    handle: int
    uuid: Any
    service_type: ServiceType


@dataclass(frozen=True)
class CharacteristicInfo:
    service_handle: int
    value_handle: int
    cccd_handle: int
    sccd_handle: int
    uuid: Any
    properties: int


@dataclass
class ConnectionParams:
    """Preferred connection parameters (intervals in 1.25 ms, timeout in 10 ms units)."""

    min_conn_interval: int = 24
    max_conn_interval: int = 40
    slave_latency: int = 0
    conn_sup_timeout: int = 400


class AdvertisingState(Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    ACTIVE = "active"
    STOPPING = "stopping"


@dataclass
class ConnectionState:
    connected: bool
    conn_handle: int
    peer_addr: bytes
    peer_addr_type: int
    mtu: int
    rssi_reporting: bool = False


@dataclass
class DeviceConfig:
    device_name: str = ""
    device_addr: bytes = bytes(_ADDR_LEN)
    addr_type: int = 0
    tx_power: int = 0
    preferred_conn_params: ConnectionParams = field(default_factory=ConnectionParams)


class ModemState:
    """Global state of the modem's dynamic GATT database and device settings."""

    def __init__(self) -> None:
        self.uuid_bases: list[UuidBase] = []
        self.services: list[ServiceInfo] = []
        self.characteristics: list[CharacteristicInfo] = []
        self.connection: ConnectionState | None = None
        self.advertising_state = AdvertisingState.STOPPED
        self.device_config = DeviceConfig()
        self.char_to_service_map: dict[int, int] = {}

    def register_uuid_base(self, base: bytes) -> int:
        """Register a 128-bit UUID base and return its handle."""
        base = bytes(base)
        if len(base) != _UUID_BASE_LEN:
            raise ValueError(f"UUID base must be {_UUID_BASE_LEN} bytes, got {len(base)}")
        if len(self.uuid_bases) >= MAX_UUID_BASES:
            raise UuidBasesExhausted(f"at most {MAX_UUID_BASES} UUID bases")
        handle = len(self.uuid_bases)
        self.uuid_bases.append(UuidBase(base, handle))
        return handle

    def get_uuid_base(self, handle: int) -> UuidBase | None:
        if 0 <= handle < len(self.uuid_bases):
            return self.uuid_bases[handle]
        return None

    def add_service(self, handle: int, uuid: Any, service_type: ServiceType) -> None:
        """Record a service; raises InvalidHandle if the handle is taken."""
        if len(self.services) >= MAX_SERVICES:
            raise ServicesExhausted(f"at most {MAX_SERVICES} services")
        if any(s.handle == handle for s in self.services):
            raise InvalidHandle(f"service handle {handle} already in use")
        self.services.append(ServiceInfo(handle, uuid, ServiceType(service_type)))

    def get_service(self, handle: int) -> ServiceInfo | None:
        return next((s for s in self.services if s.handle == handle), None)

    def remove_service(self, handle: int) -> None:
        """Remove a service and every characteristic that belongs to it."""
        service = self.get_service(handle)
        if service is None:
            raise InvalidHandle(f"no service with handle {handle}")
        self.services.remove(service)
        owned = [c for c, s in self.char_to_service_map.items() if s == handle]
        for char_handle in owned:
            del self.char_to_service_map[char_handle]
            found = self.get_characteristic_by_handle(char_handle)
            if found is not None:
                self.characteristics.remove(found)

    def add_characteristic(self, char_info: CharacteristicInfo) -> None:
        if len(self.characteristics) >= MAX_CHARACTERISTICS:
            raise CharacteristicsExhausted(f"at most {MAX_CHARACTERISTICS} characteristics")
        self.char_to_service_map[char_info.value_handle] = char_info.service_handle
        self.characteristics.append(char_info)

    def get_characteristic_by_handle(self, handle: int) -> CharacteristicInfo | None:
        return next((c for c in self.characteristics if c.value_handle == handle), None)

    def get_service_handle_for_char(self, char_handle: int) -> int | None:
        return self.char_to_service_map.get(char_handle)

    @property
    def device_name(self) -> str:
        return self.device_config.device_name

    def set_device_name(self, name: str) -> None:
        """Set the device name; raises NameTooLong beyond 32 UTF-8 bytes."""
        if len(name.encode("utf-8")) > MAX_DEVICE_NAME_LEN:
            raise NameTooLong(f"device name longer than {MAX_DEVICE_NAME_LEN} bytes")
        self.device_config.device_name = name

    @property
    def device_address(self) -> tuple[bytes, int]:
        return self.device_config.device_addr, self.device_config.addr_type

    def set_device_address(self, addr: bytes, addr_type: int) -> None:
        addr = bytes(addr)
        if len(addr) != _ADDR_LEN:
            raise ValueError(f"device address must be {_ADDR_LEN} bytes, got {len(addr)}")
        self.device_config.device_addr = addr
        self.device_config.addr_type = addr_type

    def clear_gatt_data(self) -> None:
        """Forget all dynamic services and characteristics."""
        self.services.clear()
        self.characteristics.clear()
        self.char_to_service_map.clear()