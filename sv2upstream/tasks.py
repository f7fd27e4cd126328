"""Long-running work against the upstream: handshake, shares, incoming jobs."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .errors import (
    InvalidExtranonce,
    NotFoundChannelId,
    NoUpstreamsConnected,
    ProtocolErrorMessage,
    UpstreamIncoming,
)
from .handlers import Upstream, setup_connection_message
from .messages import (
    ExtendedExtranonce,
    NewExtendedMiningJob,
    OpenExtendedMiningChannel,
    OpenExtendedMiningChannelSuccess,
    OpenMiningChannelError,
    SetNewPrevHash,
    SubmitSharesError,
    SubmitSharesExtended,
    UpdateChannel,
    UpdateChannelError,
    CloseChannel,
)
from .utils import proxy_extranonce1_len

logger = logging.getLogger(__name__)

_USER_IDENTITY = "ABC"
_OPEN_CHANNEL_MAX_TARGET = (2**64 - 1).to_bytes(32, "little")
_UPDATE_CHANNEL_MAX_TARGET = b"\xff" * 32
_DIFF_MANAGEMENT_DELAY = 10


@dataclass(frozen=True)
class Status:
    """An error that stopped one of the upstream tasks."""

    task: str
    error: BaseException


async def _report(upstream: Upstream, task: str, error: BaseException) -> None:
    logger.error("TERMINATING %s: %r", task, error)
    await upstream.tx_status.put(Status(task, error))


async def connect(upstream: Upstream, min_version: int, max_version: int) -> None:
    """Set up the connection and ask the upstream for an extended channel."""
    setup = setup_connection_message(min_version, max_version, False)
    await upstream.connection.send(setup)

    reply = await upstream.connection.recv()
    upstream.handle_message_common(reply)

    open_channel = OpenExtendedMiningChannel(
        request_id=0,
        user_identity=_USER_IDENTITY,
        nominal_hash_rate=upstream.difficulty_config.channel_nominal_hashrate,
        max_target=_OPEN_CHANNEL_MAX_TARGET,
        min_extranonce_size=upstream.min_extranonce_size,
    )
    # From now on the downstreams manage the channel hashrate.
    upstream.difficulty_config.channel_nominal_hashrate = 0.0
    await upstream.connection.send(open_channel)


async def try_update_hashrate(upstream: Upstream) -> None:
    """Send UpdateChannel if the nominal hashrate changed, then wait one interval."""
    if upstream.channel_id is None:
        raise NotFoundChannelId()
    config = upstream.difficulty_config
    interval = config.channel_diff_update_interval
    new_hashrate = config.channel_nominal_hashrate

    if upstream.last_sent_hashrate != new_hashrate:
        update = UpdateChannel(
            channel_id=upstream.channel_id,
            nominal_hash_rate=new_hashrate,
            maximum_target=_UPDATE_CHANNEL_MAX_TARGET,
        )
        await upstream.connection.send(update)
        upstream.last_sent_hashrate = new_hashrate

    await asyncio.sleep(interval)


async def submit_share(upstream: Upstream, share: SubmitSharesExtended) -> SubmitSharesExtended:
    """Stamp a share with the current channel and job ids and send it upstream."""
    if upstream.channel_id is None:
        raise NotFoundChannelId()
    share.channel_id = upstream.channel_id
    share.job_id = upstream.current_job_id()
    await upstream.connection.send(share)
    return share


def _extended_extranonce(
    upstream: Upstream, message: OpenExtendedMiningChannelSuccess
) -> ExtendedExtranonce:
    prefix = bytes(message.extranonce_prefix)
    prefix_len = len(prefix)
    upstream.upstream_extranonce1_size = prefix_len
    miner_extranonce2_size = upstream.min_extranonce_size
    tproxy_e1_len = proxy_extranonce1_len(message.extranonce_size, miner_extranonce2_size)
    range_0 = range(0, prefix_len)
    range_1 = range(prefix_len, prefix_len + tproxy_e1_len)
    range_2 = range(prefix_len + tproxy_e1_len, prefix_len + message.extranonce_size)
    try:
        return ExtendedExtranonce.from_upstream_extranonce(prefix, range_0, range_1, range_2)
    except ValueError as err:
        raise InvalidExtranonce(
            f"Impossible to create a valid extended extranonce from {prefix!r} "
            f"{range_0!r} {range_1!r} {range_2!r}: {err}"
        ) from err


async def process_incoming(upstream: Upstream, message: Any) -> Optional[Any]:
    """Handle one message from the upstream and route what comes out of it."""
    try:
        result = upstream.handle_message_mining(message)
    except Exception as err:
        raise UpstreamIncoming(err) from err

    if result is None:
        return None
    if isinstance(result, OpenExtendedMiningChannelSuccess):
        extended = _extended_extranonce(upstream, result)
        await upstream.tx_extranonce.put((extended, result.channel_id))
    elif isinstance(result, NewExtendedMiningJob):
        upstream.job_id = result.job_id
        await upstream.tx_new_ext_mining_job.put(result)
    elif isinstance(result, SetNewPrevHash):
        await upstream.tx_set_new_prev_hash.put(result)
    elif isinstance(result, CloseChannel):
        logger.error("Received CloseChannel from upstream")
        raise NoUpstreamsConnected()
    elif isinstance(result, (OpenMiningChannelError, UpdateChannelError, SubmitSharesError)):
        logger.error("Upstream sent a protocol error message")
        raise ProtocolErrorMessage(result)
    else:
        raise UpstreamIncoming(
            TypeError(f"unexpected handler result {type(result).__name__}")
        )
    return result


async def _submit_loop(upstream: Upstream) -> None:
    while True:
        share = await upstream.rx_submit_shares.get()
        try:
            await submit_share(upstream, share)
        except Exception as err:
            await _report(upstream, "handle_submit", err)
            return


async def _incoming_loop(upstream: Upstream) -> None:
    while True:
        message = await upstream.connection.recv()
        try:
            await process_incoming(upstream, message)
        except Exception as err:
            await _report(upstream, "parse_incoming", err)
            return


async def _diff_management_loop(upstream: Upstream) -> None:
    await asyncio.sleep(_DIFF_MANAGEMENT_DELAY)
    while True:
        try:
            await try_update_hashrate(upstream)
        except Exception as err:
            await _report(upstream, "start_diff_management", err)
            return


def handle_submit(upstream: Upstream) -> asyncio.Task:
    """Start forwarding shares from the bridge to the upstream."""
    task = asyncio.get_running_loop().create_task(_submit_loop(upstream))
    upstream.task_collector.append((task, "handle_submit"))
    return task


def parse_incoming(upstream: Upstream) -> tuple[asyncio.Task, asyncio.Task]:
    """Start the hashrate updater and the handler for upstream messages."""
    loop = asyncio.get_running_loop()
    diff_task = loop.create_task(_diff_management_loop(upstream))
    upstream.task_collector.append((diff_task, "start_diff_management"))
    incoming_task = loop.create_task(_incoming_loop(upstream))
    upstream.task_collector.append((incoming_task, "parse_incoming"))
    return diff_task, incoming_task