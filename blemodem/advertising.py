"""Advertising control: commands from the host, data buffers and requested state."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum, IntEnum

from .gap_state import MAX_ADV_DATA_LEN, AdvState, GapState

logger = logging.getLogger(__name__)

MAX_COMBINED_ADV_DATA = MAX_ADV_DATA_LEN * 2
"""Room for advertising data plus scan response data."""

ADV_COMMAND_QUEUE_CAPACITY = 4
"""Number of advertising commands that may wait to be processed."""

DEFAULT_ADV_INTERVAL = 400
"""Default advertising interval in 0.625 ms units (250 ms)."""


class Phy(IntEnum):
    """Radio PHY used for advertising."""

    M1 = 1
    M2 = 2
    CODED = 4


class FilterPolicy(Enum):
    """Which scanners and initiators the advertiser accepts."""

    ANY = "any"
    SCAN_REQUESTS = "scan_requests"
    CONNECT_REQUESTS = "connect_requests"
    BOTH = "both"


class AdvertisingError(Exception):
    """An advertising command or configuration could not be accepted."""

    def __init__(self, message: str, command: AdvCommand | None = None) -> None:
        super().__init__(message)
        self.command = command


class AdvCommand:
    """Base class for advertising commands."""

    handle: int


@dataclass(frozen=True)
class StartAdvertising(AdvCommand):
    handle: int
    conn_cfg_tag: int


@dataclass(frozen=True)
class StopAdvertising(AdvCommand):
    handle: int


@dataclass(frozen=True)
class ConfigureAdvertising(AdvCommand):
    handle: int
    data_present: bool


@dataclass(frozen=True)
class PeripheralConfig:
    """Parameters used when advertising as a connectable peripheral."""

    primary_phy: Phy = Phy.M1
    secondary_phy: Phy = Phy.M1
    tx_power: int = 0  # dBm
    timeout: int | None = None
    max_events: int | None = None
    interval: int = DEFAULT_ADV_INTERVAL
    filter_policy: FilterPolicy = FilterPolicy.ANY


class AdvController:
    """Holds advertising data, configuration and whether advertising is requested."""

    def __init__(self) -> None:
        self._config = PeripheralConfig()
        self._adv_data = b""
        self._scan_data = b""
        self.advertising_requested = False
        self.handle = 0

    @property
    def adv_data(self) -> bytes:
        return self._adv_data

    @property
    def scan_data(self) -> bytes:
        return self._scan_data

    @property
    def config(self) -> PeripheralConfig:
        return self._config

    def configure_data(self, adv_data: bytes, scan_data: bytes) -> None:
        """Store advertising and scan response data.

        Raises AdvertisingError when both together exceed MAX_COMBINED_ADV_DATA;
        the stored data is then left unchanged.
        """
        adv_data, scan_data = bytes(adv_data), bytes(scan_data)
        total = len(adv_data) + len(scan_data)
        if total > MAX_COMBINED_ADV_DATA:
            raise AdvertisingError(
                f"advertising data too large ({total} > {MAX_COMBINED_ADV_DATA} bytes)"
            )
        self._adv_data = adv_data
        self._scan_data = scan_data

    def start_advertising(self, handle: int, conn_cfg_tag: int) -> None:
        """Request advertising on the given set handle."""
        self.advertising_requested = True
        self.handle = handle
        logger.debug("advertising start requested for handle %d (tag %d)", handle, conn_cfg_tag)

    def stop_advertising(self, handle: int) -> None:
        """Withdraw the request, if it is for the current handle."""
        if self.handle == handle:
            self.advertising_requested = False
            logger.debug("advertising stop requested for handle %d", handle)

    def update_config(self, config: PeripheralConfig) -> None:
        self._config = config

    def apply_command(self, command: AdvCommand, gap_state: GapState) -> None:
        """Carry out a command, keeping the GAP state in step."""
        if isinstance(command, StartAdvertising):
            self.start_advertising(command.handle, command.conn_cfg_tag)
            gap_state.set_adv_state(AdvState.STARTING)
            gap_state.adv_handle = command.handle
        elif isinstance(command, StopAdvertising):
            self.stop_advertising(command.handle)
            gap_state.set_adv_state(AdvState.STOPPING)
        elif isinstance(command, ConfigureAdvertising):
            if command.data_present:
                self.configure_data(gap_state.adv_data, gap_state.scan_response)
                logger.debug("advertising data configured for handle %d", command.handle)
            self.handle = command.handle
        else:
            raise TypeError(f"unknown advertising command: {command!r}")


class AdvCommandQueue:
    """Bounded first-in first-out queue of advertising commands."""

    def __init__(self, capacity: int = ADV_COMMAND_QUEUE_CAPACITY) -> None:
        self._capacity = capacity
        self._commands: deque[AdvCommand] = deque()

    def __len__(self) -> int:
        return len(self._commands)

    def send_command(self, command: AdvCommand) -> None:
        """Queue a command without waiting; raises AdvertisingError when full."""
        if len(self._commands) >= self._capacity:
            raise AdvertisingError("advertising command queue full", command)
        self._commands.append(command)

    def try_receive(self) -> AdvCommand | None:
        """Take the oldest command, or return None if there is none."""
        return self._commands.popleft() if self._commands else None