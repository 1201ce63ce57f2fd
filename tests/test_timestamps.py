# tests/test_timestamps.py

import time

from cryptofiend.connection.timestamps import TimestampGenerator


def test_timestamp_format():
    """Timestamps are integer epoch milliseconds."""
    generator = TimestampGenerator()
    timestamp = generator.generate()
    assert isinstance(timestamp, int)

    now_ms = int(time.time() * 1000)
    assert abs(timestamp - now_ms) < 1000


def test_offset_shifts_timestamps():
    generator = TimestampGenerator(offset_ms=-5000)
    now_ms = int(time.time() * 1000)
    assert abs(generator.generate() - (now_ms - 5000)) < 1000


def test_adjust_tracks_server_clock():
    generator = TimestampGenerator()
    server_ms = int(time.time() * 1000) + 60_000

    offset = generator.adjust(server_ms)

    assert 59_000 < offset <= 60_000
    assert generator.offset_ms == offset
    assert abs(generator.generate() - server_ms) < 1000
