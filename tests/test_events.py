import pytest
from hypothesis import given
from hypothesis import strategies as st

from blemodem.events import (
    MAX_EVENT_CALLBACKS,
    CallbackRegistry,
    CccdWrite,
    Connected,
    Disconnected,
    EventError,
    GattsRead,
    GattsWrite,
    MtuExchange,
    create_cccd_write_event,
    create_disconnected_event,
    create_gatts_write_event,
)


def test_ble_modem_event_types():
    connected = Connected(1, bytes([0x12, 0x34, 0x56, 0x78, 0x9A, 0xBC]), 0)
    assert connected.conn_handle == 1
    assert connected.peer_addr == bytes([0x12, 0x34, 0x56, 0x78, 0x9A, 0xBC])
    assert connected.addr_type == 0

    write = GattsWrite(1, 20, bytes([0xAA, 0xBB, 0xCC]))
    assert (write.conn_handle, write.char_handle) == (1, 20)
    assert write.data == bytes([0xAA, 0xBB, 0xCC])

    disconnected = Disconnected(1, 0x13)
    assert (disconnected.conn_handle, disconnected.reason) == (1, 0x13)

    cccd = CccdWrite(1, 25, True, False)
    assert (cccd.conn_handle, cccd.char_handle) == (1, 25)
    assert cccd.notifications is True
    assert cccd.indications is False


def test_event_serialization():
    data = Connected(0x1234, bytes([0xAA, 0xBB, 0xCC, 0xDD, 0xEE, 0xFF]), 1).serialize()
    assert data[0] == 0x11 and data[1] == 0x00
    assert data[2] == 0x34 and data[3] == 0x12
    assert data[4] == 1
    assert data[5] == 0xAA
    assert data[10] == 0xFF

    disc = Disconnected(0x5678, 0x13).serialize()
    assert disc[0] == 0x12 and disc[1] == 0x00
    assert disc[2] == 0x78 and disc[3] == 0x56
    assert disc[4] == 0x13

    write = GattsWrite(0x9ABC, 0xDEF0, bytes([0x01, 0x02, 0x03])).serialize()
    assert write[0] == 0x50 and write[1] == 0x00
    assert write[2] == 0xBC and write[3] == 0x9A
    assert write[4] == 0xF0 and write[5] == 0xDE
    assert write[6] == 3
    assert write[7:10] == bytes([0x01, 0x02, 0x03])


def test_event_creation_helpers():
    disc = create_disconnected_event(42, 0x16)
    assert disc == Disconnected(42, 0x16)

    write = create_gatts_write_event(123, 456, bytes([0xDE, 0xAD, 0xBE, 0xEF]))
    assert write.conn_handle == 123
    assert write.char_handle == 456
    assert write.data == bytes([0xDE, 0xAD, 0xBE, 0xEF])

    cccd = create_cccd_write_event(789, 321, True, False)
    assert cccd == CccdWrite(789, 321, True, False)

    event_queue = [disc, write, cccd]
    assert [type(e) for e in event_queue] == [Disconnected, GattsWrite, CccdWrite]


def test_event_size_limits():
    max_data = bytes(range(64))
    serialized = GattsWrite(1, 2, max_data).serialize()
    assert serialized[6] == 64
    assert len(serialized) == 7 + 64
    assert serialized[7] == 0
    assert serialized[70] == 63

    read = GattsRead(0xFFFE, 0xFFFD).serialize()
    assert read[0] == 0x51 and read[1] == 0x00
    assert read[2] == 0xFE and read[3] == 0xFF
    assert read[4] == 0xFD and read[5] == 0xFF

    mtu = MtuExchange(1, 512, 247).serialize()
    assert mtu[4] == 0x00 and mtu[5] == 0x02
    assert mtu[6] == 0xF7 and mtu[7] == 0x00

    cccd = CccdWrite(1, 2, True, True).serialize()
    assert cccd[6] == 0x03


def test_write_data_over_limit_rejected():
    with pytest.raises(EventError):
        create_gatts_write_event(1, 2, bytes(65))
    with pytest.raises(EventError):
        GattsWrite(1, 2, bytes(65))


def test_out_of_range_handle_rejected():
    with pytest.raises(EventError):
        Disconnected(0x10000, 0x13).serialize()


@given(
    st.lists(
        st.tuples(st.integers(1, 63), st.integers(1, 999)),
        min_size=1,
        max_size=4,
    )
)
def test_event_data_integrity(cases):
    for size, handle in cases:
        payload = bytes(i % 256 for i in range(size))
        event = GattsWrite(handle, 100 + size, payload)
        data = event.serialize()
        assert data[0] == 0x50 and data[1] == 0x00
        assert data[2] == handle & 0xFF
        assert data[3] == handle >> 8
        char_handle = 100 + size
        assert data[4] == char_handle & 0xFF
        assert data[5] == char_handle >> 8
        assert data[6] == size
        assert data[7:] == payload


def test_event_transmission_reliability():
    events = [
        (Connected(0x1234, bytes([0xDE, 0xAD, 0xBE, 0xEF, 0xCA, 0xFE]), 1), 0x11),
        (Disconnected(0x1234, 0x13), 0x12),
        (GattsRead(0x5678, 0x9ABC), 0x51),
        (MtuExchange(0xDEF0, 247, 23), 0x52),
        (CccdWrite(0x1111, 0x2222, False, True), 0x53),
    ]
    for event, code in events:
        data = event.serialize()
        assert len(data) >= 2
        assert data[0] == code
        assert data[1] == 0x00


@pytest.mark.parametrize("handle", [0x0000, 0x0001, 0xFFFE, 0xFFFF])
def test_handle_edge_cases(handle):
    data = Disconnected(handle, 0x08).serialize()
    assert (data[3] << 8) | data[2] == handle


def test_connection_event_integration():
    peer_addr = bytes([0x12, 0x34, 0x56, 0x78, 0x9A, 0xBC])
    serialized = Connected(42, peer_addr, 1).serialize()
    assert len(serialized) == 11
    assert serialized[0] == 0x11 and serialized[1] == 0x00
    assert serialized[2] == 42 and serialized[3] == 0
    assert serialized[4] == 1
    assert serialized[5:11] == peer_addr

    disc = create_disconnected_event(42, 0x13)
    assert disc == Disconnected(42, 0x13)
    disc_serialized = disc.serialize()
    assert serialized[2:4] == disc_serialized[2:4]
    assert serialized[0] != disc_serialized[0]

    write = create_gatts_write_event(42, 100, bytes([0xFF, 0xEE, 0xDD, 0xCC])).serialize()
    assert write[2] == 42 and write[3] == 0
    assert write[0] == 0x50


def test_callbacks_receive_data_and_context():
    calls = []
    registry = CallbackRegistry()
    registry.register_callback(lambda data, ctx: calls.append((data, ctx)), 7)
    registry.register_callback(lambda data, ctx: calls.append((data, ctx)), 9)
    payload = Disconnected(1, 0x13).serialize()
    registry.dispatch_event(payload)
    assert calls == [(payload, 7), (payload, 9)]


def test_callback_registry_full_and_clear():
    registry = CallbackRegistry()
    calls = []
    for ctx in range(MAX_EVENT_CALLBACKS):
        registry.register_callback(lambda data, c: calls.append(c), ctx)
    with pytest.raises(EventError):
        registry.register_callback(lambda data, c: calls.append(c), 99)
    registry.clear_callbacks()
    registry.dispatch_event(b"\x12\x00")
    assert calls == []
    registry.register_callback(lambda data, c: calls.append(c), 5)
    registry.dispatch_event(b"\x12\x00")
    assert calls == [5]