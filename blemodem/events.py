"""BLE events forwarded to the host, their wire format and host callbacks."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Callable, ClassVar

logger = logging.getLogger(__name__)

MAX_EVENT_CALLBACKS = 4
"""Maximum number of registered event callbacks."""

MAX_WRITE_DATA_LEN = 64
"""Maximum data carried by a GATTS write event."""

EVT_GAP_CONNECTED = 0x11
EVT_GAP_DISCONNECTED = 0x12
EVT_GATTS_WRITE = 0x50
EVT_GATTS_READ = 0x51
EVT_GATTS_EXCHANGE_MTU_REQUEST = 0x52
EVT_GATTS_CCCD_WRITE = 0x53

EventCallback = Callable[[bytes, int], None]


class EventError(Exception):
    """An event could not be built, serialized or registered."""


def _u16(value: int) -> bytes:
    try:
        return struct.pack("<H", value)
    except struct.error as exc:
        raise EventError(f"value {value} does not fit in 16 bits") from exc


def _u8(value: int) -> bytes:
    try:
        return struct.pack("<B", value)
    except struct.error as exc:
        raise EventError(f"value {value} does not fit in 8 bits") from exc


class BleModemEvent:
    """Base class for BLE events sent to the host."""

    event_code: ClassVar[int]

    def serialize(self) -> bytes:
        """Return the wire form: event code, a zero byte, then the body."""
        return bytes((self.event_code, 0x00)) + self._body()

    def _body(self) -> bytes:
        raise NotImplementedError


@dataclass(frozen=True)
class Connected(BleModemEvent):
    conn_handle: int
    peer_addr: bytes
    addr_type: int

    event_code: ClassVar[int] = EVT_GAP_CONNECTED

    def __post_init__(self) -> None:
        if len(self.peer_addr) != 6:
            raise EventError(f"peer address must be 6 bytes, got {len(self.peer_addr)}")
        object.__setattr__(self, "peer_addr", bytes(self.peer_addr))

    def _body(self) -> bytes:
        return _u16(self.conn_handle) + _u8(self.addr_type) + self.peer_addr


@dataclass(frozen=True)
class Disconnected(BleModemEvent):
    conn_handle: int
    reason: int

    event_code: ClassVar[int] = EVT_GAP_DISCONNECTED

    def _body(self) -> bytes:
        return _u16(self.conn_handle) + _u8(self.reason)


@dataclass(frozen=True)
class GattsWrite(BleModemEvent):
    conn_handle: int
    char_handle: int
    data: bytes

    event_code: ClassVar[int] = EVT_GATTS_WRITE

    def __post_init__(self) -> None:
        if len(self.data) > MAX_WRITE_DATA_LEN:
            raise EventError(
                f"write data too large ({len(self.data)} > {MAX_WRITE_DATA_LEN} bytes)"
            )
        object.__setattr__(self, "data", bytes(self.data))

    def _body(self) -> bytes:
        return (
            _u16(self.conn_handle)
            + _u16(self.char_handle)
            + _u8(len(self.data))
            + self.data
        )


@dataclass(frozen=True)
class GattsRead(BleModemEvent):
    conn_handle: int
    char_handle: int

    event_code: ClassVar[int] = EVT_GATTS_READ

    def _body(self) -> bytes:
        return _u16(self.conn_handle) + _u16(self.char_handle)


@dataclass(frozen=True)
class MtuExchange(BleModemEvent):
    conn_handle: int
    client_mtu: int
    server_mtu: int

    event_code: ClassVar[int] = EVT_GATTS_EXCHANGE_MTU_REQUEST

    def _body(self) -> bytes:
        return _u16(self.conn_handle) + _u16(self.client_mtu) + _u16(self.server_mtu)


@dataclass(frozen=True)
class CccdWrite(BleModemEvent):
    conn_handle: int
    char_handle: int
    notifications: bool
    indications: bool

    event_code: ClassVar[int] = EVT_GATTS_CCCD_WRITE

    def _body(self) -> bytes:
        cccd_value = int(bool(self.notifications)) | (int(bool(self.indications)) << 1)
        return _u16(self.conn_handle) + _u16(self.char_handle) + _u8(cccd_value)


def create_disconnected_event(conn_handle: int, reason: int) -> Disconnected:
    return Disconnected(conn_handle, reason)


def create_gatts_write_event(conn_handle: int, char_handle: int, data: bytes) -> GattsWrite:
    """Build a write event; raises EventError if the data is too large."""
    return GattsWrite(conn_handle, char_handle, bytes(data))


def create_cccd_write_event(
    conn_handle: int, char_handle: int, notifications: bool, indications: bool
) -> CccdWrite:
    return CccdWrite(conn_handle, char_handle, notifications, indications)


@dataclass
class _CallbackEntry:
    callback: EventCallback
    context: int
    active: bool = True


class CallbackRegistry:
    """Callbacks that receive every serialized event, each with its own context."""

    def __init__(self, capacity: int = MAX_EVENT_CALLBACKS) -> None:
        self._capacity = capacity
        self._entries: list[_CallbackEntry] = []

    def __len__(self) -> int:
        return sum(entry.active for entry in self._entries)

    def register_callback(self, callback: EventCallback, context: int) -> None:
        """Register a callback; raises EventError when the registry is full."""
        if len(self._entries) >= self._capacity:
            for entry in self._entries:
                if not entry.active:
                    entry.callback, entry.context, entry.active = callback, context, True
                    return
            raise EventError(f"callback registry full ({self._capacity} callbacks)")
        self._entries.append(_CallbackEntry(callback, context))

    def clear_callbacks(self) -> None:
        self._entries.clear()

    def dispatch_event(self, event_data: bytes) -> None:
        """Call every active callback with the event data and its context."""
        for entry in self._entries:
            if entry.active:
                entry.callback(event_data, entry.context)