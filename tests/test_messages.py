import pytest

from sv2upstream.messages import (
    ExtendedExtranonce,
    NewExtendedMiningJob,
    Protocol,
    Sv2MiningConnection,
)


def _job(min_ntime):
    return NewExtendedMiningJob(
        channel_id=1,
        job_id=2,
        min_ntime=min_ntime,
        version=0x20000000,
        version_rolling_allowed=True,
    )


def test_mining_protocol_lookup_by_value():
    assert Protocol(0) is Protocol.MiningProtocol
    with pytest.raises(ValueError):
        Protocol(255)


def test_job_without_min_ntime_is_future():
    assert _job(None).is_future() is True


def test_job_with_min_ntime_is_not_future():
    assert _job(1_700_000_000).is_future() is False


def test_mining_connection_is_immutable():
    conn = Sv2MiningConnection(2, 4, 0)
    with pytest.raises(AttributeError):
        conn.version = 3
    assert conn == Sv2MiningConnection(2, 4, 0)


def test_extended_extranonce_keeps_prefix_and_ranges():
    prefix = b"\x01\x02\x03\x04"
    r0, r1, r2 = range(0, 4), range(4, 8), range(8, 16)
    ext = ExtendedExtranonce.from_upstream_extranonce(prefix, r0, r1, r2)
    assert ext.inner[: len(prefix)] == prefix
    assert len(ext.inner) == r2.stop
    assert (ext.range_0, ext.range_1, ext.range_2) == (r0, r1, r2)
    assert set(ext.inner[len(prefix):]) == {0}


def test_extended_extranonce_rejects_gaps():
    with pytest.raises(ValueError):
        ExtendedExtranonce.from_upstream_extranonce(
            b"\x01\x02", range(0, 2), range(3, 6), range(6, 10)
        )


def test_extended_extranonce_rejects_prefix_mismatch():
    with pytest.raises(ValueError):
        ExtendedExtranonce.from_upstream_extranonce(
            b"\x01\x02\x03", range(0, 2), range(2, 6), range(6, 10)
        )


def test_extended_extranonce_rejects_overlong():
    with pytest.raises(ValueError):
        ExtendedExtranonce.from_upstream_extranonce(
            b"\x00" * 16, range(0, 16), range(16, 24), range(24, 40)
        )


def test_extended_extranonce_rejects_nonzero_start():
    with pytest.raises(ValueError):
        ExtendedExtranonce.from_upstream_extranonce(
            b"\x01", range(1, 2), range(2, 4), range(4, 8)
        )