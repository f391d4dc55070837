# blemodem

In-memory state and wire encoding for a Bluetooth Low Energy peripheral
modem. The package keeps track of the modem's GAP identity, its bonded peers,
its live connections and its dynamic GATT services. It also holds the
advertising request state and encodes BLE events into the little-endian byte
layout that is sent to the host.

The package needs only the standard library.

## Installation

```
pip install .
```

To install the test dependencies and run the tests:

```
pip install .[test]
pytest
```

## Modules

### `blemodem.gap_state`

`GapState` is a dataclass that holds the GAP layer's state:

- the device name (`set_device_name`, truncated to 32 bytes)
- the advertising data and scan response data (`set_adv_data` and
  `set_scan_response`, each truncated to 31 bytes)
- the advertising state (`AdvState`: `STOPPED`, `STARTING`, `ACTIVE`,
  `STOPPING`). `set_adv_state` raises `ValueError` for an unknown value.
- the connection flag (`set_connected`). Disconnecting also resets
  `conn_handle` to `0xFFFF`.
- the preferred `ConnectionParams`, the MTU (default 23), the TX power and the
  status flags

A plain `GapState()` has an empty device name. `GapState.default()` sets the
name to `b"BLE_Modem"`.

### `blemodem.bonding`

`BondingStorage` keeps at most two bonded devices (`BondedDevice`), keyed by
connection handle. Each device carries a system-attributes blob (CCCD states)
of up to 64 bytes. Errors derive from `BondingError`:

- `BondingTableFull` when the table has no room for a new handle
- `DeviceNotFound` when the handle is unknown
- `InvalidData` when the system attributes are too large; the stored data is
  then left as it was

`device_info` returns a copy of a device's record. `bonded_handles` lists the
handles in insertion order.

### `blemodem.connection`

`ConnectionManager` tracks up to two connections (`ConnectionInfo`). Handle 0
is rejected with `InvalidHandle` and a repeated handle with `DuplicateHandle`.
A full map raises `ConnectionMapFull` and an unknown handle raises
`ConnectionNotFound`. All of these derive from this module's own
`ConnectionError`.

`set_event_queue` attaches any object that has `put_nowait`, such as
`queue.Queue` or `asyncio.Queue`. The manager then puts `Connected`,
`Disconnected`, `MtuChanged` and `ParamsUpdated` events on that queue. If the
queue is full, the event is dropped and logged, and the operation itself still
succeeds.

### `blemodem.events`

The `BleModemEvent` variants are `Connected`, `Disconnected`, `GattsWrite`,
`GattsRead`, `MtuExchange` and `CccdWrite`. `serialize()` returns the event
code, a zero byte, and then the body in little-endian form. A `GattsWrite`
carries at most 64 bytes of data. Values that do not fit their field raise
`EventError`.

The helpers `create_disconnected_event`, `create_gatts_write_event` and
`create_cccd_write_event` build events.

`CallbackRegistry` holds up to four callbacks. Each one is called as
`callback(event_bytes, context)` by `dispatch_event`.

### `blemodem.gatt_state`

`ModemState` is the registry of:

- UUID bases (at most 4, 16 bytes each; the handle is the registration index)
- services (at most 16)
- characteristics (at most 64)

`remove_service` also drops the service's characteristics. Device settings
live in `DeviceConfig`, and a device name longer than 32 UTF-8 bytes raises
`NameTooLong`. Errors derive from `StateError`.

### `blemodem.advertising`

`AdvController` stores the advertising data and scan response data, which
together may be at most 62 bytes. It also holds the `PeripheralConfig` and
whether advertising is requested.

`apply_command` carries out a `StartAdvertising`, `StopAdvertising` or
`ConfigureAdvertising` command and keeps a `GapState` in step with it.
`AdvCommandQueue` is a first-in, first-out queue that holds up to four
commands. When it is full, `send_command` raises `AdvertisingError`.

## Example

```python
from blemodem.advertising import AdvController, StartAdvertising
from blemodem.connection import ConnectionManager
from blemodem.events import create_gatts_write_event
from blemodem.gap_state import AdvState, GapState

event = create_gatts_write_event(0x9ABC, 0xDEF0, b"\x01\x02\x03")
assert event.serialize() == bytes(
    [0x50, 0x00, 0xBC, 0x9A, 0xF0, 0xDE, 0x03, 0x01, 0x02, 0x03]
)

manager = ConnectionManager()
manager.add_connection(1, 23)
assert manager.is_connected(1)

gap = GapState.default()
controller = AdvController()
controller.apply_command(StartAdvertising(handle=0, conn_cfg_tag=1), gap)
assert controller.advertising_requested
assert gap.adv_state is AdvState.STARTING
```

## What this package does not do

This package only models the modem's state and event format. It does not:

- talk to a radio or a BLE stack
- advertise or accept connections
- run a GATT server
- send events to a host over any transport

To do any of these, a program feeds these objects from its own BLE stack and
sends the output of `BleModemEvent.serialize()` itself. All state lives in
memory, and nothing is persisted between runs.