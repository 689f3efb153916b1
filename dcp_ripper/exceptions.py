"""
Custom exception classes for DCP Ripper.
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class DcpRipperError(Exception):
    """Base exception for DCP processing errors."""

    def __init__(
        self,
        detail: str,
        error_code: str = "UNKNOWN_ERROR",
        context: Optional[Dict[str, Any]] = None
    ):
        self.detail = detail
        self.error_code = error_code
        self.context = context or {}

        logger.error(
            f"DcpRipperError: {error_code} - {detail}",
            extra={"error_code": error_code, "context": self.context}
        )

        super().__init__(detail)


class PlaylistParseError(DcpRipperError):
    """Raised when a composition playlist is not a usable document."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            detail=f"Cannot parse playlist {path}: {reason}",
            error_code="PLAYLIST_PARSE_ERROR",
            context={"path": str(path), "reason": reason}
        )


class UnsupportedLayoutError(DcpRipperError):
    """Raised when a remap strategy can't handle the input channel count."""

    def __init__(self, strategy: str, channels: int, reason: str):
        super().__init__(
            detail=f"Strategy '{strategy}' can't remap {channels} channels: {reason}",
            error_code="UNSUPPORTED_LAYOUT",
            context={"strategy": strategy, "channels": channels}
        )


class OutputLocationError(DcpRipperError):
    """Raised when an output folder can't be derived for a composition."""

    def __init__(self, title: str, reason: str):
        super().__init__(
            detail=f"Can't output {title}: {reason}",
            error_code="OUTPUT_LOCATION_ERROR",
            context={"title": title}
        )


class RemixerError(DcpRipperError):
    """Raised when an external remixer breaks the block streaming contract."""

    def __init__(self, detail: str, **context):
        super().__init__(
            detail=detail,
            error_code="REMIXER_ERROR",
            context=context
        )
