"""Errors raised while talking to the upstream role."""

from __future__ import annotations


class ProxyError(Exception):
    """Base class for every error raised by the upstream side of the proxy."""


class NotFoundChannelId(ProxyError):
    """No mining channel has been opened yet."""

    def __init__(self) -> None:
        super().__init__("no channel id: the mining channel is not open")


class NoValidJob(ProxyError):
    """No job has been received from the upstream yet."""

    def __init__(self) -> None:
        super().__init__("no valid job received from upstream")


class NoValidTranslatorJob(ProxyError):
    """No custom job has been acknowledged by the upstream yet."""

    def __init__(self) -> None:
        super().__init__("no valid custom job acknowledged by upstream")


class InvalidExtranonceSize(ProxyError):
    """The channel's extranonce size cannot satisfy the requested minimum."""

    def __init__(self, min_extranonce_size: int, extranonce_size: int) -> None:
        self.min_extranonce_size = min_extranonce_size
        self.extranonce_size = extranonce_size
        super().__init__(
            f"invalid extranonce size: requested minimum {min_extranonce_size}, "
            f"channel extranonce size {extranonce_size}"
        )


class InvalidExtranonce(ProxyError):
    """An extended extranonce could not be built."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class NoUpstreamsConnected(ProxyError):
    """The upstream closed the channel; no upstream is left."""

    def __init__(self) -> None:
        super().__init__("no upstreams connected")


class UpstreamIncoming(ProxyError):
    """Handling a message coming from the upstream failed."""

    def __init__(self, error: BaseException) -> None:
        self.error = error
        super().__init__(f"error handling upstream message: {error!r}")
        self.__cause__ = error


class ProtocolErrorMessage(ProxyError):
    """The upstream answered with a protocol error message."""

    def __init__(self, message: object) -> None:
        self.message = message
        super().__init__(f"upstream sent protocol error: {message!r}")