"""HTTP/3 SETTINGS frame contents."""

from __future__ import annotations

import io
from enum import IntEnum

from wtserver import quicvarint
from wtserver.h3.frames import Frame, FrameType

_MAX_SETTINGS_FRAME_SIZE = 8 * (1 << 10)


class SettingID(IntEnum):
    """Known HTTP/3 setting identifiers."""

    QPACK_MAX_TABLE_CAPACITY = 0x1
    MAX_FIELD_SECTION_SIZE = 0x6
    QPACK_BLOCKED_STREAMS = 0x7
    H3_DATAGRAM_05 = 0xFFD277
    ENABLE_WEBTRANSPORT = 0x2B603742


class SettingsError(ValueError):
    """Raised for a malformed SETTINGS frame."""


def setting_name(setting_id: int) -> str:
    """Return a readable name for *setting_id*, or its hex form if unknown."""
    try:
        return SettingID(setting_id).name
    except ValueError:
        return hex(setting_id)


class SettingsMap(dict):
    """Mapping of setting identifier to value."""

    def from_frame(self, frame: Frame) -> SettingsMap:
        """Add the settings carried by *frame* to this map and return it."""
        if frame.length > _MAX_SETTINGS_FRAME_SIZE:
            raise SettingsError(f"unexpected size for SETTINGS frame: {frame.length}")
        data = bytes(frame.data)
        reader = io.BytesIO(data)
        while reader.tell() < len(data):
            try:
                setting_id = quicvarint.read(reader)
                value = quicvarint.read(reader)
            except EOFError as exc:
                raise SettingsError(f"truncated SETTINGS frame: {exc}") from exc
            if setting_id in self:
                raise SettingsError(f"duplicate setting: {setting_id}")
            self[setting_id] = value
        return self

    def to_frame(self) -> Frame:
        """Encode this map as a SETTINGS frame."""
        data = b"".join(
            quicvarint.encode(int(setting_id)) + quicvarint.encode(value)
            for setting_id, value in self.items()
        )
        return Frame(type=FrameType.SETTINGS, length=len(data), data=data)