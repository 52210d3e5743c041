#!/usr/bin/env python3
"""
GSM SMS CP/RP dispatch (3GPP TS 24.011)
=======================================

Entry point for SMS frames captured on the DTAP control channel:

    [PD/TI][CP-MT][CP-UD len][RP-MTI][RP-MR][RP body...]

CP-DATA frames are unwrapped to the RP layer; RP-DATA bodies go on to the
RP-DATA / TPDU decoders. Every rejection below this layer is turned into a
"FAILED SANITY CHECK" note on the session summary, so one bad frame never
disturbs what the session already holds.
"""

import logging
from typing import Dict, NamedTuple, Optional

from gsm_rp_sms_apdu import decode_rp_data
from session import Session
from sms_codec import ByteCursor
from sms_config import DEFAULT_CONFIG, DecoderConfig
from sms_errors import SMSDecodeError, TruncatedInput, UnrecognizedType
from sms_meta import DecodedMessage, Direction

logger = logging.getLogger(__name__)

# CP message types (24.011 section 8.1.3)
CP_MT_MASK = 0x1F
CP_DATA = 0x01
CP_ACK = 0x04
CP_ERROR = 0x10

# RP message types (24.011 section 8.2.2)
RP_MT_MASK = 0x07
RP_DATA_MO = 0x00
RP_DATA_MT = 0x01
RP_ACK_MO = 0x02
RP_ACK_MT = 0x03
RP_ERROR_MO = 0x04
RP_ERROR_MT = 0x05
RP_SMMA_MO = 0x06


class RPMessageType(NamedTuple):
    summary: str
    mobile_originated: bool  # which SMS transfer the message belongs to
    direction: Optional[Direction] = None  # set for RP-DATA only


RP_MESSAGE_TYPES: Dict[int, RPMessageType] = {
    RP_DATA_MO: RPMessageType("SMS RP-DATA", True, Direction.FROM_MOBILE),
    RP_DATA_MT: RPMessageType("SMS RP-DATA", False, Direction.FROM_NETWORK),
    RP_ACK_MO: RPMessageType("SMS RP-ACK", False),
    RP_ACK_MT: RPMessageType("SMS RP-ACK", True),
    RP_ERROR_MO: RPMessageType("SMS RP-ERROR", False),
    RP_ERROR_MT: RPMessageType("SMS RP-ERROR", True),
    RP_SMMA_MO: RPMessageType("SMS RP-SMMA", True),
}

CP_SUMMARIES = {
    CP_ACK: "SMS CP-ACK",
    CP_ERROR: "SMS CP-ERROR",
}


def _mark_transfer(session: Session, mobile_originated: bool) -> None:
    if mobile_originated:
        session.mo = True
    else:
        session.mt = True


def decode_cp_data(
    session: Session,
    data: bytes,
    config: DecoderConfig = DEFAULT_CONFIG,
) -> Optional[DecodedMessage]:
    """Decode a CP-DATA body: [CP-UD len][RP-MTI][RP-MR][RP body...]"""
    cursor = ByteCursor(data)
    cp_len = cursor.read_u8("SMS_CP_LEN")
    rpdu = ByteCursor(cursor.read(cp_len, "SMS_CP_LEN"))

    rp_mti = rpdu.read_u8("SMS_RP_LEN") & RP_MT_MASK
    rp_type = RP_MESSAGE_TYPES.get(rp_mti)
    if rp_type is None:
        raise UnrecognizedType("RP", rp_mti)
    rp_mr = rpdu.read_u8("SMS_RP_LEN")

    session.set_summary(rp_type.summary)
    logger.debug(f"{rp_type.summary} MTI=0x{rp_mti:02X} MR={rp_mr}")

    message = None
    if rp_type.direction is not None:
        message = decode_rp_data(session, rpdu.rest(), rp_type.direction, config)
    _mark_transfer(session, rp_type.mobile_originated)
    return message


def decode_sms(
    session: Session,
    dtap: bytes,
    length: Optional[int] = None,
    config: Optional[DecoderConfig] = None,
) -> Optional[DecodedMessage]:
    """Decode one captured SMS DTAP frame into `session`.

    Returns the DecodedMessage appended to the session, or None when the
    frame carried no SMS-DELIVER / SMS-SUBMIT or was rejected.
    """
    config = config or DEFAULT_CONFIG
    session.has_sms = True

    try:
        if length is not None:
            if length > len(dtap):
                raise TruncatedInput("SMS_DTAP_LEN", length, len(dtap))
            dtap = dtap[:length]

        cursor = ByteCursor(dtap)
        cursor.skip(1, "SMS_DTAP_LEN")  # protocol discriminator / transaction id
        cp_mti = cursor.read_u8("SMS_DTAP_LEN") & CP_MT_MASK

        if cp_mti == CP_DATA:
            return decode_cp_data(session, cursor.rest(), config)
        if cp_mti in CP_SUMMARIES:
            session.set_summary(CP_SUMMARIES[cp_mti])
            return None
        raise UnrecognizedType("CP", cp_mti)

    except UnrecognizedType as e:
        logger.info(f"Session {session.id}: {e}")
        session.unknown = True
    except SMSDecodeError as e:
        logger.warning(f"Session {session.id}: SMS frame rejected: {e}")
        session.append_summary(f" FAILED SANITY CHECK ({e.check})")
    return None
