import pytest
from hypothesis import given
from hypothesis import strategies as st

from blemodem.gap_state import (
    FLAG_CONNECTED,
    MAX_ADV_DATA_LEN,
    MAX_DEVICE_NAME_LEN,
    AdvState,
    ConnectionParams,
    GapState,
)


def test_plain_state_has_empty_name_and_defaults():
    state = GapState()
    assert state.device_name == b""
    assert state.conn_handle == 0xFFFF
    assert state.current_mtu == 23
    assert state.adv_interval_min == 160
    assert state.adv_interval_max == 320
    assert state.adv_state is AdvState.STOPPED
    assert state.is_connected is False


def test_default_state_carries_modem_name():
    assert GapState.default().device_name == b"BLE_Modem"


def test_connection_params_defaults():
    params = ConnectionParams()
    assert (params.min_conn_interval, params.max_conn_interval) == (24, 40)
    assert params.slave_latency == 0
    assert params.conn_sup_timeout == 400
    assert GapState().preferred_conn_params == params


@pytest.mark.parametrize("state", list(AdvState))
def test_adv_state_round_trip(state):
    gap = GapState()
    gap.set_adv_state(state)
    assert gap.adv_state is state


def test_adv_state_accepts_integer_value():
    gap = GapState()
    gap.set_adv_state(int(AdvState.ACTIVE))
    assert gap.adv_state is AdvState.ACTIVE


def test_adv_state_rejects_unknown_value():
    with pytest.raises(ValueError):
        GapState().set_adv_state(99)


def test_connect_and_disconnect_resets_handle():
    gap = GapState()
    gap.conn_handle = 5
    gap.set_connected(True)
    assert gap.is_connected
    assert gap.status_flags & FLAG_CONNECTED
    assert gap.conn_handle == 5
    gap.set_connected(False)
    assert not gap.is_connected
    assert gap.conn_handle == 0xFFFF


def test_disconnect_keeps_other_flags():
    gap = GapState()
    gap.status_flags = 0x0F
    gap.set_connected(False)
    assert gap.status_flags == 0x0F & ~FLAG_CONNECTED


def test_long_name_truncated():
    name = b"N" * (MAX_DEVICE_NAME_LEN + 8)
    gap = GapState()
    gap.set_device_name(name)
    assert gap.device_name == name[:MAX_DEVICE_NAME_LEN]


def test_shorter_name_replaces_longer():
    gap = GapState.default()
    gap.set_device_name(b"ab")
    assert gap.device_name == b"ab"


@given(st.binary(max_size=80))
def test_adv_data_is_prefix(data):
    gap = GapState()
    gap.set_adv_data(data)
    assert gap.adv_data == data[:MAX_ADV_DATA_LEN]
    assert len(gap.adv_data) <= MAX_ADV_DATA_LEN


@given(st.binary(max_size=80))
def test_scan_response_is_prefix(data):
    gap = GapState()
    gap.set_scan_response(data)
    assert gap.scan_response == data[:MAX_ADV_DATA_LEN]
    assert gap.adv_data == b""


@given(st.binary(max_size=MAX_DEVICE_NAME_LEN))
def test_name_within_limit_round_trips(name):
    gap = GapState()
    gap.set_device_name(name)
    assert gap.device_name == name


def test_set_device_name_accepts_bytearray():
    gap = GapState()
    gap.set_device_name(bytearray(b"abc"))
    assert gap.device_name == b"abc"