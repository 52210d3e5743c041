#!/usr/bin/env python3
"""GSM RP-DATA parser (3GPP TS 24.011 section 7.3.1).

RP-DATA body, after the RP message type and reference octets:

    [RP-OA len][RP-OA...][RP-DA len][RP-DA...][RP-UD len][TPDU...]

The network side fills in the originator (SMSC) address and leaves the
destination empty; the mobile side does the opposite. The TP message type
of the embedded TPDU decides whether it is handed to the TPDU decoder.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from gsm_sms_apdu import decode_tpdu
from session import Session
from sms_codec import ByteCursor, decode_address
from sms_config import DEFAULT_CONFIG, DecoderConfig
from sms_errors import MisplacedAddress, TruncatedInput
from sms_meta import DecodedMessage, Direction

logger = logging.getLogger(__name__)

TP_MTI_MASK = 0x03


@dataclass(frozen=True)
class RPLayout:
    """Which RP address may be present, and the TP message types per direction"""
    direction: Direction
    originator_allowed: bool
    destination_allowed: bool
    tpdu_types: Tuple[str, str, str, str]
    tpdu_carrier: int  # TP-MTI handed to the TPDU decoder


RP_LAYOUTS: Dict[Direction, RPLayout] = {
    Direction.FROM_NETWORK: RPLayout(
        direction=Direction.FROM_NETWORK,
        originator_allowed=True,
        destination_allowed=False,
        tpdu_types=("DELIVER", "SUBMIT-REPORT", "STATUS-REPORT", "RESERVED"),
        tpdu_carrier=0,
    ),
    Direction.FROM_MOBILE: RPLayout(
        direction=Direction.FROM_MOBILE,
        originator_allowed=False,
        destination_allowed=True,
        tpdu_types=("DELIVER-REPORT", "SUBMIT", "COMMAND", "RESERVED"),
        tpdu_carrier=1,
    ),
}


def _read_rp_address(cursor: ByteCursor, allowed: bool, check: str) -> str:
    """Read an RP address IE: [len][TOA][BCD...]; empty string when len is 0."""
    addr_len = cursor.read_u8("SMS_RP_ADDR")
    if not addr_len:
        return ""
    if not allowed:
        raise MisplacedAddress(f"RP address of {addr_len} bytes on the wrong side", check)
    address = decode_address(cursor.read(addr_len, "SMS_RP_ADDR"), addr_len, semi_octets=False)
    logger.debug(f"RP address: {address}")
    return address


def decode_rp_data(
    session: Session,
    data: bytes,
    direction: Direction,
    config: DecoderConfig = DEFAULT_CONFIG,
) -> Optional[DecodedMessage]:
    """Decode an RP-DATA body and its TPDU.

    Returns the message appended to the session, or None when the TPDU is
    of a type that carries no user data.
    """
    layout = RP_LAYOUTS[direction]
    cursor = ByteCursor(data)

    # originating (SMSC) address
    smsc = _read_rp_address(cursor, layout.originator_allowed, "SMS_SMSC_MO")
    # destination (SMSC) address
    smsc = _read_rp_address(cursor, layout.destination_allowed, "SMS_SMSC_MT") or smsc

    # RP-User-Data length and value
    ud_len = cursor.read_u8("SMS_RP_UD")
    if ud_len == 0:
        raise TruncatedInput("SMS_RP_UD", 1, 0)
    tpdu = cursor.read(ud_len, "SMS_RP_UD")

    tp_mti = tpdu[0] & TP_MTI_MASK
    session.append_summary(f"-{layout.tpdu_types[tp_mti]}")
    logger.debug(f"RP-DATA {direction.name}: TP-MTI {tp_mti}, RP-UD {ud_len} bytes")

    if tp_mti != layout.tpdu_carrier:
        return None
    return decode_tpdu(session, tpdu, direction, smsc, config)
