import pytest

from sv2upstream.utils import proxy_extranonce1_len


@pytest.mark.parametrize("channel, downstream", [(16, 8), (32, 0), (4, 4), (20, 7)])
def test_proxy_len_fills_the_gap(channel, downstream):
    assert proxy_extranonce1_len(channel, downstream) + downstream == channel


def test_equal_sizes_leave_no_room():
    assert proxy_extranonce1_len(12, 12) == 0


def test_whole_channel_for_proxy_when_miner_takes_nothing():
    assert proxy_extranonce1_len(16, 0) == 16


def test_miner_larger_than_channel_is_rejected():
    with pytest.raises(ValueError):
        proxy_extranonce1_len(4, 8)