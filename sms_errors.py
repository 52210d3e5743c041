"""
SMS Decoder Exceptions
======================

Every rejection raised while walking a CP/RP/TPDU/UDH frame derives from
SMSDecodeError. The `check` attribute names the sanity check that failed
and ends up in the session summary, e.g. "FAILED SANITY CHECK (SMS_UDH_LEN)".
"""

from typing import Optional


class SMSDecodeError(ValueError):
    """Base class for all frame rejections."""

    check = "SMS"

    def __init__(self, message: str, check: Optional[str] = None):
        super().__init__(message)
        if check is not None:
            self.check = check

    def __str__(self) -> str:
        return f"{super().__str__()} ({self.check})"


class TruncatedInput(SMSDecodeError):
    """A declared length runs past the bytes actually captured."""

    def __init__(self, check: str, needed: int, available: int):
        super().__init__(
            f"PDU too short: need {needed} bytes, have {available}", check
        )
        self.needed = needed
        self.available = available


class InconsistentFragment(SMSDecodeError):
    """Concatenation IE with a fragment index above the fragment count."""

    def __init__(self, check: str, this_fragment: int, total_fragments: int):
        super().__init__(
            f"Fragment {this_fragment} exceeds total {total_fragments}", check
        )
        self.this_fragment = this_fragment
        self.total_fragments = total_fragments


class MisplacedAddress(SMSDecodeError):
    """RP address present on the side of the link where it is not allowed."""


class OversizedUserData(SMSDecodeError):
    """User data larger than the configured capacity."""


class UnrecognizedType(SMSDecodeError):
    """Message type outside the known set. Never fatal for a session."""

    def __init__(self, layer: str, value: int):
        super().__init__(f"Unrecognized {layer} message type 0x{value:02X}", f"{layer}_TYPE")
        self.layer = layer
        self.value = value
