"""State of the upstream connection and handlers for the messages it sends."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .connection import UpstreamConnection
from .errors import (
    InvalidExtranonceSize,
    NoValidJob,
    NoValidTranslatorJob,
    ProxyError,
)
from .messages import (
    CloseChannel,
    NewExtendedMiningJob,
    OpenExtendedMiningChannelSuccess,
    OpenMiningChannelError,
    Protocol,
    SetCustomMiningJobSuccess,
    SetNewPrevHash,
    SetTarget,
    SetupConnection,
    SetupConnectionSuccess,
    SubmitSharesError,
    SubmitSharesSuccess,
    UpdateChannelError,
)
from .utils import proxy_extranonce1_len

logger = logging.getLogger(__name__)

_FLAGS_WORK_SELECTION_DISABLED = 0b0000_0000_0000_0000_0000_0000_0000_0100
_FLAGS_WORK_SELECTION_ENABLED = 0b0000_0000_0000_0000_0000_0000_0000_0110
_ENDPOINT_HOST = b"0.0.0.0"
_ENDPOINT_PORT = 50
DEFAULT_UPSTREAM_EXTRANONCE1_SIZE = 16


@dataclass
class UpstreamDifficultyConfig:
    """Hashrate reported to the upstream and how often it is refreshed."""

    channel_diff_update_interval: int
    channel_nominal_hashrate: float


def setup_connection_message(
    min_version: int, max_version: int, work_selection_enabled: bool
) -> SetupConnection:
    """Build the first message of the handshake with the upstream."""
    flags = (
        _FLAGS_WORK_SELECTION_ENABLED
        if work_selection_enabled
        else _FLAGS_WORK_SELECTION_DISABLED
    )
    return SetupConnection(
        protocol=Protocol.MiningProtocol,
        min_version=min_version,
        max_version=max_version,
        flags=flags,
        endpoint_host=_ENDPOINT_HOST,
        endpoint_port=_ENDPOINT_PORT,
        vendor="",
        hardware_version="",
        firmware="",
        device_id="",
    )


def _error_code(code: Any) -> str:
    if isinstance(code, (bytes, bytearray)):
        try:
            return bytes(code).decode("utf-8")
        except UnicodeDecodeError:
            return "unknown error code"
    return str(code)


@dataclass(eq=False)
class Upstream:
    """Connection state towards a single upstream role.

    Handlers return the message that has to be dealt with internally
    (forwarded to the bridge or reported), or ``None`` when nothing more
    is to be done with it.
    """

    min_extranonce_size: int
    difficulty_config: UpstreamDifficultyConfig
    connection: UpstreamConnection = field(default_factory=UpstreamConnection)
    target: bytearray = field(default_factory=bytearray)
    rx_submit_shares: asyncio.Queue = field(default_factory=asyncio.Queue)
    tx_set_new_prev_hash: asyncio.Queue = field(default_factory=asyncio.Queue)
    tx_new_ext_mining_job: asyncio.Queue = field(default_factory=asyncio.Queue)
    tx_extranonce: asyncio.Queue = field(default_factory=asyncio.Queue)
    tx_status: asyncio.Queue = field(default_factory=asyncio.Queue)
    task_collector: list = field(default_factory=list)
    channel_id: Optional[int] = None
    job_id: Optional[int] = None
    last_job_id: Optional[int] = None
    extranonce_prefix: Optional[bytes] = None
    last_sent_hashrate: Optional[float] = None
    upstream_extranonce1_size: int = DEFAULT_UPSTREAM_EXTRANONCE1_SIZE
    is_new_job_handled: bool = True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Upstream):
            return NotImplemented
        return self.channel_id == other.channel_id

    __hash__ = None  # type: ignore[assignment]

    def is_work_selection_enabled(self) -> bool:
        """Work selection is left to the upstream pool."""
        return False

    def current_job_id(self) -> int:
        """Return the job id shares must be submitted against."""
        if self.is_work_selection_enabled():
            if self.last_job_id is None:
                raise NoValidTranslatorJob()
            return self.last_job_id
        if self.job_id is None:
            raise NoValidJob()
        return self.job_id

    # --- dispatch -------------------------------------------------------

    def handle_message_common(self, message: Any) -> None:
        """Handle a connection-level message from the upstream."""
        if isinstance(message, SetupConnectionSuccess):
            return self.handle_setup_connection_success(message)
        raise ProxyError(
            f"unexpected common message from upstream: {type(message).__name__}"
        )

    def handle_message_mining(self, message: Any) -> Optional[Any]:
        """Route a mining message to its handler."""
        handler = self._mining_handlers().get(type(message))
        if handler is None:
            raise ProxyError(
                f"unexpected mining message from upstream: {type(message).__name__}"
            )
        return handler(message)

    def _mining_handlers(self) -> dict[type, Callable[[Any], Optional[Any]]]:
        return {
            OpenExtendedMiningChannelSuccess: self.handle_open_extended_mining_channel_success,
            OpenMiningChannelError: self.handle_open_mining_channel_error,
            UpdateChannelError: self.handle_update_channel_error,
            CloseChannel: self.handle_close_channel,
            SubmitSharesSuccess: self.handle_submit_shares_success,
            SubmitSharesError: self.handle_submit_shares_error,
            NewExtendedMiningJob: self.handle_new_extended_mining_job,
            SetNewPrevHash: self.handle_set_new_prev_hash,
            SetCustomMiningJobSuccess: self.handle_set_custom_mining_job_success,
            SetTarget: self.handle_set_target,
        }

    # --- common messages ------------------------------------------------

    def handle_setup_connection_success(self, message: SetupConnectionSuccess) -> None:
        logger.info(
            "Received SetupConnectionSuccess: version=%s, flags=%s",
            message.used_version,
            format(message.flags, "b"),
        )
        return None

    # --- mining messages ------------------------------------------------

    def handle_open_extended_mining_channel_success(
        self, message: OpenExtendedMiningChannelSuccess
    ) -> OpenExtendedMiningChannelSuccess:
        logger.info(
            "Received OpenExtendedMiningChannelSuccess with request id: %s and channel id: %s",
            message.request_id,
            message.channel_id,
        )
        if self.min_extranonce_size > message.extranonce_size:
            raise InvalidExtranonceSize(self.min_extranonce_size, message.extranonce_size)
        tproxy_e1_len = proxy_extranonce1_len(
            message.extranonce_size, self.min_extranonce_size
        )
        if self.min_extranonce_size + tproxy_e1_len < message.extranonce_size:
            raise InvalidExtranonceSize(self.min_extranonce_size, message.extranonce_size)
        self.target[:] = bytes(message.target)
        logger.info("Up: Successfully Opened Extended Mining Channel")
        self.channel_id = message.channel_id
        self.extranonce_prefix = bytes(message.extranonce_prefix)
        return message

    def handle_open_mining_channel_error(
        self, message: OpenMiningChannelError
    ) -> OpenMiningChannelError:
        logger.error(
            "Received OpenExtendedMiningChannelError with error code %s",
            _error_code(message.error_code),
        )
        return message

    def handle_update_channel_error(self, message: UpdateChannelError) -> UpdateChannelError:
        logger.error(
            "Received UpdateChannelError with error code %s",
            _error_code(message.error_code),
        )
        return message

    def handle_close_channel(self, message: CloseChannel) -> CloseChannel:
        logger.info("Received CloseChannel for channel id: %s", message.channel_id)
        return message

    def handle_submit_shares_success(self, message: SubmitSharesSuccess) -> None:
        logger.info("Received SubmitSharesSuccess")
        logger.debug("SubmitSharesSuccess: %s", message)
        return None

    def handle_submit_shares_error(self, message: SubmitSharesError) -> None:
        logger.error(
            "Received SubmitSharesError with error code %s",
            _error_code(message.error_code),
        )
        return None

    def handle_new_extended_mining_job(
        self, message: NewExtendedMiningJob
    ) -> Optional[NewExtendedMiningJob]:
        logger.info(
            "Received new extended mining job for channel id: %s with job id: %s is_future: %s",
            message.channel_id,
            message.job_id,
            message.is_future(),
        )
        if self.is_work_selection_enabled():
            return None
        self.is_new_job_handled = False
        if not message.version_rolling_allowed:
            logger.warning("Version rolling is not allowed for job %s", message.job_id)
        return message

    def handle_set_new_prev_hash(self, message: SetNewPrevHash) -> Optional[SetNewPrevHash]:
        logger.info(
            "Received SetNewPrevHash channel id: %s, job id: %s",
            message.channel_id,
            message.job_id,
        )
        if self.is_work_selection_enabled():
            return None
        return message

    def handle_set_custom_mining_job_success(
        self, message: SetCustomMiningJobSuccess
    ) -> None:
        logger.info(
            "Received SetCustomMiningJobSuccess for channel id: %s for job id: %s",
            message.channel_id,
            message.job_id,
        )
        self.last_job_id = message.job_id
        return None

    def handle_set_target(self, message: SetTarget) -> None:
        logger.info("Received SetTarget for channel id: %s", message.channel_id)
        self.target[:] = bytes(message.maximum_target)
        return None