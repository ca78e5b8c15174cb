"""Canonical request-outcome record produced by the format adapters.

Both the XML and the CSV adapter build records through :meth:`Record.create`
so that label, result code and message truncation is identical for every
source format and reports built from different formats stay comparable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Tuple

#: Marker appended to truncated text fields.
TRUNCATION_MARKER = ".."

LABEL_LENGTH = 70
RESULT_CODE_LENGTH = 70
MESSAGE_LENGTH = 255


def truncate(value: Optional[str], limit: int) -> str:
    """Cut ``value`` to at most ``limit`` characters.

    Values longer than ``limit`` keep their first ``limit - 2`` characters
    followed by ``".."``. ``None`` becomes the empty string.

    Examples:
        >>> truncate("abcdef", 5)
        'abc..'
        >>> truncate("abc", 5)
        'abc'
    """
    if value is None:
        return ""
    if len(value) <= limit:
        return value
    return value[: limit - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER


@dataclass(frozen=True)
class AssertionFailure:
    """A failed or errored assertion attached to a sample.

    Attributes:
        name: Assertion name; used as the result code when classifying.
        message: Failure message; used as the response message.
    """

    name: str
    message: str = ""


@dataclass(frozen=True)
class Record:
    """One observed request outcome.

    Attributes:
        label: Request label, truncated.
        timestamp: Time the request was issued (timezone aware).
        duration_ms: Elapsed time in milliseconds.
        success: Whether the request was reported successful.
        result_code: Result code, truncated; empty when absent.
        response_message: Response message, truncated; empty when absent.
        bytes_received: Response size in bytes, or None when the source format
            did not provide one.
        assertion_failures: Failed assertions in document order.
    """

    label: str
    timestamp: datetime
    duration_ms: int
    success: bool
    result_code: str = ""
    response_message: str = ""
    bytes_received: Optional[int] = None
    assertion_failures: Tuple[AssertionFailure, ...] = field(default_factory=tuple)

    @classmethod
    def create(
        cls,
        label: Optional[str],
        timestamp: datetime,
        duration_ms: int,
        success: bool,
        result_code: Optional[str] = None,
        response_message: Optional[str] = None,
        bytes_received: Optional[int] = None,
        assertion_failures: Iterable[AssertionFailure] = (),
        label_length: int = LABEL_LENGTH,
        result_code_length: int = RESULT_CODE_LENGTH,
        message_length: int = MESSAGE_LENGTH,
    ) -> "Record":
        """Build a record, applying the shared truncation rules.

        Raises:
            ValueError: If ``duration_ms`` or ``bytes_received`` is negative.
        """
        if duration_ms < 0:
            raise ValueError(f"duration_ms must be >= 0, got {duration_ms}")
        if bytes_received is not None and bytes_received < 0:
            raise ValueError(f"bytes_received must be >= 0, got {bytes_received}")
        failures = tuple(
            AssertionFailure(
                name=truncate(f.name, result_code_length),
                message=truncate(f.message, message_length),
            )
            for f in assertion_failures
        )
        return cls(
            label=truncate(label, label_length),
            timestamp=timestamp,
            duration_ms=int(duration_ms),
            success=bool(success),
            result_code=truncate(result_code, result_code_length),
            response_message=truncate(response_message, message_length),
            bytes_received=None if bytes_received is None else int(bytes_received),
            assertion_failures=failures,
        )

    def classification(self) -> Tuple[str, str]:
        """Return ``(result_code, message)`` describing a failure.

        The first assertion failure takes precedence over the record's own
        result code and response message.
        """
        if self.assertion_failures:
            first = self.assertion_failures[0]
            return first.name, first.message
        return self.result_code, self.response_message
