"""Bonding storage: bonded peers and their system attributes (CCCD states)."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MAX_BONDED_DEVICES = 2
"""Maximum number of bonded devices."""

MAX_SYS_ATTR_SIZE = 64
"""Maximum size of the system attributes blob, in bytes."""

_ADDR_LEN = 6


class BondingError(Exception):
    """Base class for bonding failures."""


class BondingTableFull(BondingError):
    """No room for another bonded device."""


class DeviceNotFound(BondingError):
    """No bonded device with the given connection handle."""


class InvalidData(BondingError):
    """System attributes data is too large."""


@dataclass
class BondedDevice:
    """A bonded peer."""

    conn_handle: int
    peer_addr: bytes
    addr_type: int
    sys_attr_data: bytes = b""


class BondingStorage:
    """Bonded devices keyed by connection handle, limited in number."""

    def __init__(self, capacity: int = MAX_BONDED_DEVICES) -> None:
        self._capacity = capacity
        self._devices: dict[int, BondedDevice] = {}

    def add_bonded_device(self, conn_handle: int, peer_addr: bytes, addr_type: int) -> None:
        """Bond a device; an existing entry for the handle is replaced.

        Raises BondingTableFull when a new handle does not fit.
        """
        peer_addr = bytes(peer_addr)
        if len(peer_addr) != _ADDR_LEN:
            raise ValueError(f"peer address must be {_ADDR_LEN} bytes, got {len(peer_addr)}")
        if conn_handle not in self._devices and len(self._devices) >= self._capacity:
            logger.debug("bonding table full, cannot add device %d", conn_handle)
            raise BondingTableFull(f"bonding table full ({self._capacity} devices)")
        self._devices[conn_handle] = BondedDevice(conn_handle, peer_addr, addr_type)
        logger.debug("added bonded device %d (count %d)", conn_handle, len(self._devices))

    def set_system_attributes(self, conn_handle: int, sys_attr_data: bytes) -> None:
        """Store system attributes for a bonded device.

        Raises DeviceNotFound for unknown handles and InvalidData when the data
        exceeds MAX_SYS_ATTR_SIZE; existing data is then left unchanged.
        """
        device = self._devices.get(conn_handle)
        if device is None:
            logger.warning("system attributes for unknown device %d", conn_handle)
            raise DeviceNotFound(f"no bonded device for handle {conn_handle}")
        if len(sys_attr_data) > MAX_SYS_ATTR_SIZE:
            raise InvalidData(
                f"system attributes too large ({len(sys_attr_data)} > {MAX_SYS_ATTR_SIZE} bytes)"
            )
        device.sys_attr_data = bytes(sys_attr_data)
        logger.debug("updated system attributes for %d (%d bytes)", conn_handle, len(sys_attr_data))

    def get_system_attributes(self, conn_handle: int) -> bytes | None:
        """Return the stored system attributes, or None if not bonded."""
        device = self._devices.get(conn_handle)
        return None if device is None else device.sys_attr_data

    def remove_bonded_device(self, conn_handle: int) -> None:
        """Forget a bonded device; raises DeviceNotFound if it is unknown."""
        if self._devices.pop(conn_handle, None) is None:
            logger.warning("attempted to remove unknown bonded device %d", conn_handle)
            raise DeviceNotFound(f"no bonded device for handle {conn_handle}")
        logger.debug("removed bonded device %d", conn_handle)

    def device_count(self) -> int:
        """Number of bonded devices."""
        return len(self._devices)

    def is_device_bonded(self, conn_handle: int) -> bool:
        """Whether a device with this handle is bonded."""
        return conn_handle in self._devices

    def bonded_handles(self) -> list[int]:
        """Handles of all bonded devices, in insertion order."""
        return list(self._devices)

    def device_info(self, conn_handle: int) -> BondedDevice | None:
        """Return a copy of a bonded device's record, or None."""
        device = self._devices.get(conn_handle)
        return None if device is None else dataclasses.replace(device)