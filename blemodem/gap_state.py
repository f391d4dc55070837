"""GAP state: device identity, advertising configuration and connection status."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

MAX_DEVICE_NAME_LEN = 32
"""Maximum device name length (GAP specification limit)."""

MAX_ADV_DATA_LEN = 31
"""Maximum legacy advertising data length (BLE specification)."""

DEFAULT_DEVICE_NAME = b"BLE_Modem"

INVALID_CONN_HANDLE = 0xFFFF
DEFAULT_ATT_MTU = 23

FLAG_CONNECTED = 0x01
FLAG_RSSI_REPORTING = 0x02
FLAG_BONDED = 0x04
FLAG_ENCRYPTED = 0x08


class AdvState(IntEnum):
    """Advertising state."""

    STOPPED = 0
    STARTING = 1
    ACTIVE = 2
    STOPPING = 3


@dataclass
class ConnectionParams:
    """Preferred connection parameters, in SoftDevice units."""

    min_conn_interval: int = 24  # 1.25 ms units: 30 ms
    max_conn_interval: int = 40  # 1.25 ms units: 50 ms
    slave_latency: int = 0
    conn_sup_timeout: int = 400  # 10 ms units: 4 s


def _truncate(data: bytes, limit: int) -> bytes:
    return bytes(data[:limit])


@dataclass
class GapState:
    """State of the GAP layer.

    A plain instance starts with an empty device name; ``GapState.default()``
    starts with the standard modem name.
    """

    device_addr: bytes = bytes(6)
    addr_type: int = 0  # 0 = public, 1 = random
    adv_handle: int = 0
    adv_interval_min: int = 160  # 0.625 ms units: 100 ms
    adv_interval_max: int = 320  # 0.625 ms units: 200 ms
    adv_timeout: int = 0  # 10 ms units, 0 = no timeout
    preferred_conn_params: ConnectionParams = field(default_factory=ConnectionParams)
    conn_handle: int = INVALID_CONN_HANDLE
    peer_addr: bytes = bytes(6)
    peer_addr_type: int = 0
    current_mtu: int = DEFAULT_ATT_MTU
    tx_power: int = 0
    status_flags: int = 0
    _device_name: bytes = field(default=b"", repr=False)
    _adv_data: bytes = field(default=b"", repr=False)
    _scan_response: bytes = field(default=b"", repr=False)
    _adv_state: AdvState = field(default=AdvState.STOPPED, repr=False)

    @classmethod
    def default(cls) -> GapState:
        """Return a state carrying the default device name."""
        state = cls()
        state.set_device_name(DEFAULT_DEVICE_NAME)
        return state

    @property
    def adv_state(self) -> AdvState:
        return self._adv_state

    def set_adv_state(self, state: AdvState | int) -> None:
        """Set the advertising state; raises ValueError for unknown values."""
        self._adv_state = AdvState(state)

    @property
    def is_connected(self) -> bool:
        return bool(self.status_flags & FLAG_CONNECTED)

    def set_connected(self, connected: bool) -> None:
        """Mark the link connected or disconnected.

        Disconnecting also invalidates the connection handle.
        """
        if connected:
            self.status_flags |= FLAG_CONNECTED
        else:
            self.status_flags &= ~FLAG_CONNECTED & 0xFF
            self.conn_handle = INVALID_CONN_HANDLE

    @property
    def device_name(self) -> bytes:
        return self._device_name

    def set_device_name(self, name: bytes) -> None:
        """Set the device name, truncated to MAX_DEVICE_NAME_LEN bytes."""
        self._device_name = _truncate(name, MAX_DEVICE_NAME_LEN)

    @property
    def adv_data(self) -> bytes:
        return self._adv_data

    def set_adv_data(self, data: bytes) -> None:
        """Set advertising data, truncated to MAX_ADV_DATA_LEN bytes."""
        self._adv_data = _truncate(data, MAX_ADV_DATA_LEN)

    @property
    def scan_response(self) -> bytes:
        return self._scan_response

    def set_scan_response(self, data: bytes) -> None:
        """Set scan response data, truncated to MAX_ADV_DATA_LEN bytes."""
        self._scan_response = _truncate(data, MAX_ADV_DATA_LEN)