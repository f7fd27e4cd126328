"""Small helpers shared by the upstream components."""


def proxy_extranonce1_len(channel_extranonce2_size: int, downstream_extranonce2_len: int) -> int:
    """Return how many extranonce bytes the proxy itself adds.

    This is the channel's extranonce space minus the part left for the
    miner to roll.
    """
    remaining = channel_extranonce2_size - downstream_extranonce2_len
    if remaining < 0:
        raise ValueError(
            f"downstream extranonce2 length {downstream_extranonce2_len} exceeds "
            f"channel extranonce size {channel_extranonce2_size}"
        )
    return remaining