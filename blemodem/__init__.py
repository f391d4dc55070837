"""In-memory state and event encoding for a BLE peripheral modem."""

__version__ = "0.1.0"
__all__ = ["advertising", "bonding", "connection", "events", "gap_state", "gatt_state"]