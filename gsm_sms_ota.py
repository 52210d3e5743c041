#!/usr/bin/env python3
"""
OTA security envelope tagging (GSM 03.48 / ETSI TS 102 225)
==========================================================

SMS carrying SIM toolkit commands wrap them in a secured packet:

Command Packet (SC -> SIM):
    CPL(2) CHL(1) SPI(2) KIc(1) KID(1) TAR(3) CNTR(5) PCNTR(1) RC/CC/DS ...

Response Packet (SIM -> SC):
    RPL(2) RHL(1) TAR(3) CNTR(5) PCNTR(1) Status(1) RC/CC/DS ...

Only the header fields are rendered as tags. Nothing is deciphered or
verified; counters and checksums are reported as opaque hex.
"""

import logging
from typing import Optional

from sms_meta import MessageDraft

logger = logging.getLogger(__name__)

# Command packet offsets
CP_SPI1 = 3
CP_SPI2 = 4
CP_KIC = 5
CP_KID = 6
CP_TAR = 7
CP_CNTR = 10

# Response packet offsets
RP_TAR = 3
RP_CNTR = 6
RP_STATUS = 12
RP_SIGNATURE = 13

TAR_LENGTH = 3
CNTR_LENGTH = 5
MAX_SIGNATURE_LENGTH = 16

SPI_CIPHERED = 0x04

COUNTER_POLICIES = {
    0: "NO_CNTR",
    1: "CNTR_AV",
    2: "CNTR_HI",
    3: "CNTR_+1",
}

CHECKSUM_MODES = {
    0: "NOCC",
    1: "RC",
    2: "CC",
    3: "DS",
}

# KIc / KID bits 3..2 when bits 1..0 select DES
KIC_DES_ALGORITHMS = {
    0: "1DES-CBC",
    1: "3DES-2K",
    2: "3DES-3K",
    3: "1DES-ECB",
}

KID_DES_ALGORITHMS = {
    0: "1DES-CBC",
    1: "3DES-2K",
    2: "3DES-3K",
    3: "RESERVED",
}


class SecurityEnvelopeView:
    """Read-only window onto a secured packet header.

    Fields are read by absolute offset; a field that does not fit in the
    captured bytes comes back as None.
    """

    def __init__(self, data: bytes):
        self._data = memoryview(data).toreadonly()

    def __len__(self) -> int:
        return len(self._data)

    def byte(self, offset: int) -> Optional[int]:
        if offset >= len(self._data):
            return None
        return self._data[offset]

    def field(self, offset: int, size: int) -> Optional[bytes]:
        if offset + size > len(self._data):
            return None
        return self._data[offset:offset + size].tobytes()


def _algorithm(key_indicator: Optional[int], des_algorithms: dict, label: str) -> str:
    if key_indicator is None:
        return f"{label} --"
    selector = key_indicator & 0x03
    if selector == 0:
        return "IMPLICIT"
    if selector == 1:
        return des_algorithms[(key_indicator >> 2) & 0x03]
    if selector == 2:
        return "RESERVED"
    return "PROPRIET"


def _tag_tar(draft: MessageDraft, view: SecurityEnvelopeView, offset: int) -> None:
    tar = view.field(offset, TAR_LENGTH)
    if tar is None:
        draft.annotate("TAR --")
    else:
        draft.annotate(f"TAR {tar.hex().upper()}")


def decode_command_packet(draft: MessageDraft, data: bytes) -> None:
    """Tag the header of a Command Packet (outbound envelope).

    Fields missing from a truncated packet are tagged with "--".
    """
    view = SecurityEnvelopeView(data)
    logger.debug(f"Command packet header ({len(view)} bytes): {bytes(data[:CP_CNTR]).hex()}")

    spi1 = view.byte(CP_SPI1)
    if spi1 is None:
        draft.annotate("SPI --")
        _tag_tar(draft, view, CP_TAR)
        return

    draft.annotate(COUNTER_POLICIES[(spi1 >> 3) & 0x03])

    ciphered = bool(spi1 & SPI_CIPHERED)
    if ciphered:
        draft.annotate("ENC")
        draft.annotate(_algorithm(view.byte(CP_KIC), KIC_DES_ALGORITHMS, "KIC"))
    else:
        draft.annotate("NOENC")

    checksum_mode = spi1 & 0x03
    draft.annotate(CHECKSUM_MODES[checksum_mode])
    if checksum_mode:
        draft.annotate(_algorithm(view.byte(CP_KID), KID_DES_ALGORITHMS, "KID"))

    _tag_tar(draft, view, CP_TAR)

    if ciphered:
        counter = view.field(CP_CNTR, CNTR_LENGTH)
        if counter is None:
            draft.annotate("CNTR --")
        else:
            draft.annotate(f"CNTR {counter.hex().upper()}")


def decode_response_packet(draft: MessageDraft, data: bytes) -> None:
    """Tag the header of a Response Packet (inbound envelope)."""
    view = SecurityEnvelopeView(data)
    _tag_tar(draft, view, RP_TAR)

    status = view.byte(RP_STATUS)
    if status is None:
        draft.annotate("POR --")
    else:
        draft.annotate(f"POR {status:02X}")

    if len(view) > RP_SIGNATURE:
        signature_length = min(MAX_SIGNATURE_LENGTH, len(view) - RP_SIGNATURE)
        signature = view.field(RP_SIGNATURE, signature_length)
        draft.annotate(f"CC {signature.hex().upper()}")
    else:
        draft.annotate("CC --")
