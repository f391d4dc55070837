"""Connection management: active links, their parameters and host events."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import queue
from dataclasses import dataclass, field
from typing import Any, Iterator

logger = logging.getLogger(__name__)

MAX_CONNECTIONS = 2
"""Maximum number of simultaneous connections."""

EVENT_QUEUE_CAPACITY = 8
"""Capacity of the queue that carries connection events to the host."""

_QUEUE_FULL = (queue.Full, asyncio.QueueFull)


@dataclass(frozen=True)
class ConnectionParams:
    """Connection parameters, in link-layer units."""

    min_conn_interval: int = 24  # 1.25 ms units: 30 ms
    max_conn_interval: int = 40  # 1.25 ms units: 50 ms
    slave_latency: int = 0
    supervision_timeout: int = 400  # 10 ms units: 4 s


@dataclass
class ConnectionInfo:
    """An active connection."""

    handle: int
    mtu: int
    conn_params: ConnectionParams = field(default_factory=ConnectionParams)


class ConnectionEvent:
    """Base class for connection events forwarded to the host."""

    handle: int


@dataclass(frozen=True)
class Connected(ConnectionEvent):
    handle: int
    params: ConnectionParams


@dataclass(frozen=True)
class Disconnected(ConnectionEvent):
    handle: int
    reason: int


@dataclass(frozen=True)
class ParamsUpdated(ConnectionEvent):
    handle: int
    params: ConnectionParams


@dataclass(frozen=True)
class MtuChanged(ConnectionEvent):
    handle: int
    mtu: int


class ConnectionError(Exception):  # noqa: A001 - domain name kept on purpose
    """Base class for connection management failures."""


class ConnectionNotFound(ConnectionError):
    """No connection with the given handle."""


class ConnectionMapFull(ConnectionError):
    """No room for another connection."""


class InvalidHandle(ConnectionError):
    """Connection handle 0 is reserved and invalid."""


class DuplicateHandle(ConnectionError):
    """A connection with this handle already exists."""


class ConnectionManager:
    """Tracks active connections and reports changes to an optional event queue.

    The event queue is any object with ``put_nowait``; when it is full the event
    is dropped and logged, and the operation itself still succeeds.
    """

    def __init__(self, capacity: int = MAX_CONNECTIONS) -> None:
        self._capacity = capacity
        self._connections: dict[int, ConnectionInfo] = {}
        self._event_queue: Any = None

    def set_event_queue(self, queue: Any) -> None:
        """Set the queue that receives events destined for the host."""
        self._event_queue = queue

    def _emit(self, event: ConnectionEvent) -> None:
        if self._event_queue is None:
            return
        try:
            self._event_queue.put_nowait(event)
        except _QUEUE_FULL:
            logger.error("failed to forward %s event - queue full", type(event).__name__)

    def add_connection(self, handle: int, mtu: int) -> None:
        """Register a new connection with default parameters."""
        logger.debug("adding connection with handle %d", handle)
        if handle == 0:
            raise InvalidHandle("connection handle 0 is reserved")
        if handle in self._connections:
            raise DuplicateHandle(f"connection handle {handle} already exists")
        if len(self._connections) >= self._capacity:
            raise ConnectionMapFull(f"connection map full ({self._capacity} connections)")
        info = ConnectionInfo(handle, mtu)
        self._connections[handle] = info
        logger.debug("added connection %d with MTU %d", handle, mtu)
        self._emit(Connected(handle, info.conn_params))

    def remove_connection(self, handle: int, reason: int) -> None:
        """Forget a connection; raises ConnectionNotFound if it is unknown."""
        if self._connections.pop(handle, None) is None:
            raise ConnectionNotFound(f"no connection with handle {handle}")
        logger.debug("removed connection %d (reason %d)", handle, reason)
        self._emit(Disconnected(handle, reason))

    def get_connection(self, handle: int) -> ConnectionInfo | None:
        """Return a copy of the connection's record, or None."""
        info = self._connections.get(handle)
        return None if info is None else dataclasses.replace(info)

    def is_connected(self, handle: int) -> bool:
        return handle in self._connections

    def connection_count(self) -> int:
        return len(self._connections)

    def _require(self, handle: int) -> ConnectionInfo:
        try:
            return self._connections[handle]
        except KeyError:
            raise ConnectionNotFound(f"no connection with handle {handle}") from None

    def update_mtu(self, handle: int, mtu: int) -> None:
        """Record a new ATT MTU for a connection."""
        self._require(handle).mtu = mtu
        logger.debug("updated MTU for connection %d to %d", handle, mtu)
        self._emit(MtuChanged(handle, mtu))

    def update_params(self, handle: int, params: ConnectionParams) -> None:
        """Record new connection parameters for a connection."""
        self._require(handle).conn_params = params
        logger.debug("updated parameters for connection %d", handle)
        self._emit(ParamsUpdated(handle, params))

    def active_handles(self) -> Iterator[int]:
        """Iterate over the handles of active connections, in insertion order."""
        return iter(list(self._connections))