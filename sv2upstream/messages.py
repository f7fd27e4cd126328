"""Messages exchanged with the upstream role on the mining protocol."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

MAX_EXTRANONCE_LEN = 32


class Protocol(enum.IntEnum):
    """Sub-protocols that a connection can be set up for."""

    MiningProtocol = 0
    JobDeclarationProtocol = 1
    TemplateDistributionProtocol = 2


@dataclass(frozen=True)
class Sv2MiningConnection:
    """Parameters negotiated while setting up the connection."""

    version: int
    setup_connection_flags: int
    setup_connection_success_flags: int


@dataclass
class SetupConnection:
    protocol: Protocol
    min_version: int
    max_version: int
    flags: int
    endpoint_host: bytes
    endpoint_port: int
    vendor: str = ""
    hardware_version: str = ""
    firmware: str = ""
    device_id: str = ""


@dataclass
class SetupConnectionSuccess:
    used_version: int
    flags: int


@dataclass
class OpenExtendedMiningChannel:
    request_id: int
    user_identity: str
    nominal_hash_rate: float
    max_target: bytes
    min_extranonce_size: int


@dataclass
class OpenExtendedMiningChannelSuccess:
    request_id: int
    channel_id: int
    target: bytes
    extranonce_size: int
    extranonce_prefix: bytes


@dataclass
class OpenMiningChannelError:
    request_id: int
    error_code: str


@dataclass
class UpdateChannel:
    channel_id: int
    nominal_hash_rate: float
    maximum_target: bytes


@dataclass
class UpdateChannelError:
    channel_id: int
    error_code: str


@dataclass
class CloseChannel:
    channel_id: int
    reason_code: str = ""


@dataclass
class SubmitSharesExtended:
    channel_id: int
    sequence_number: int
    job_id: int
    nonce: int
    ntime: int
    version: int
    extranonce: bytes


@dataclass
class SubmitSharesSuccess:
    channel_id: int
    last_sequence_number: int
    new_submits_accepted_count: int
    new_shares_sum: int


@dataclass
class SubmitSharesError:
    channel_id: int
    sequence_number: int
    error_code: str


@dataclass
class NewExtendedMiningJob:
    channel_id: int
    job_id: int
    min_ntime: Optional[int]
    version: int
    version_rolling_allowed: bool
    merkle_path: list[bytes] = field(default_factory=list)
    coinbase_tx_prefix: bytes = b""
    coinbase_tx_suffix: bytes = b""

    def is_future(self) -> bool:
        """A job without a minimum ntime waits for a later prev hash."""
        return self.min_ntime is None


@dataclass
class SetNewPrevHash:
    channel_id: int
    job_id: int
    prev_hash: bytes
    min_ntime: int
    nbits: int


@dataclass
class SetCustomMiningJobSuccess:
    channel_id: int
    request_id: int
    job_id: int


@dataclass
class SetTarget:
    channel_id: int
    maximum_target: bytes


@dataclass(frozen=True)
class ExtendedExtranonce:
    """Extranonce split into upstream, proxy and miner parts.

    ``range_0`` holds the upstream prefix, ``range_1`` the bytes the proxy
    adds and ``range_2`` the bytes the miner rolls.
    """

    inner: bytes
    range_0: range
    range_1: range
    range_2: range

    @classmethod
    def from_upstream_extranonce(
        cls, prefix: bytes, range_0: range, range_1: range, range_2: range
    ) -> "ExtendedExtranonce":
        """Build from the upstream prefix and three contiguous ranges."""
        for part in (range_0, range_1, range_2):
            if part.step != 1 or part.stop < part.start:
                raise ValueError(f"invalid extranonce range {part!r}")
        if range_0.start != 0:
            raise ValueError("the upstream range must start at 0")
        if range_0.stop != range_1.start or range_1.stop != range_2.start:
            raise ValueError("extranonce ranges must be contiguous")
        if range_2.stop > MAX_EXTRANONCE_LEN:
            raise ValueError(
                f"extranonce length {range_2.stop} exceeds {MAX_EXTRANONCE_LEN}"
            )
        prefix = bytes(prefix)
        if len(prefix) != len(range_0):
            raise ValueError(
                f"prefix length {len(prefix)} does not match range {range_0!r}"
            )
        inner = prefix + bytes(range_2.stop - len(prefix))
        return cls(inner, range_0, range_1, range_2)