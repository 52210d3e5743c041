#!/usr/bin/env python3
"""
GSM SMS TPDU Metadata Decoder
=============================

Decodes SMS-DELIVER (network -> mobile) and SMS-SUBMIT (mobile -> network)
headers (GSM 03.40 sections 9.2.2.1 / 9.2.2.2) into a DecodedMessage and
routes the user data to the UDH parser or the text classifier.

    SMS-DELIVER: [flags][TP-OA][TP-PID][TP-DCS][TP-SCTS(7)][TP-UDL][TP-UD]
    SMS-SUBMIT:  [flags][TP-MR][TP-DA][TP-PID][TP-DCS][TP-VP(0/1/7)][TP-UDL][TP-UD]
"""

import logging
from dataclasses import dataclass
from typing import Dict

from gsm_sms_dcs import classify_alphabet, classify_class
from gsm_sms_text import decode_text
from gsm_sms_udh import decode_udh
from session import Session
from sms_codec import ByteCursor, decode_address
from sms_config import DEFAULT_CONFIG, DecoderConfig
from sms_errors import OversizedUserData
from sms_meta import NO_ADDRESS, Alphabet, DecodedMessage, Direction, MessageDraft, SMSTimestamp

logger = logging.getLogger(__name__)

# First octet
TP_UDHI = 0x40
TP_VPF_SHIFT = 3
TP_VPF_MASK = 0x03

# TP-VP octets per TP-VPF (none / enhanced / relative / absolute)
VALIDITY_PERIOD_LENGTHS = {
    0: 0,
    1: 7,
    2: 1,
    3: 7,
}

TIMESTAMP_LENGTH = 7


@dataclass(frozen=True)
class TPDULayout:
    """Direction dependent field layout of the TPDUs carrying user data"""
    direction: Direction
    pdu_type: str
    address_label: str
    has_message_reference: bool
    has_validity_period: bool
    has_timestamp: bool


TPDU_LAYOUTS: Dict[Direction, TPDULayout] = {
    Direction.FROM_NETWORK: TPDULayout(
        direction=Direction.FROM_NETWORK,
        pdu_type="SMS-DELIVER",
        address_label="FROM",
        has_message_reference=False,
        has_validity_period=False,
        has_timestamp=True,
    ),
    Direction.FROM_MOBILE: TPDULayout(
        direction=Direction.FROM_MOBILE,
        pdu_type="SMS-SUBMIT",
        address_label="TO",
        has_message_reference=True,
        has_validity_period=True,
        has_timestamp=False,
    ),
}


def _bcd_to_int(bcd_byte: int) -> int:
    """Convert semi-octet swapped BCD byte to integer.

    GSM 03.40 encodes digits with the least significant nibble first
    (i.e. the two decimal digits within a byte are swapped compared
    to normal BCD). Example: byte 0x52 represents digits "25".
    """
    low = bcd_byte & 0x0F   # units
    high = (bcd_byte >> 4) & 0x0F  # tens
    return low * 10 + high


def parse_timestamp(timestamp_bytes: bytes) -> SMSTimestamp:
    """Parse SMS timestamp (TP-SCTS), 7 bytes YYMMDDHHMMSSZ"""
    year = _bcd_to_int(timestamp_bytes[0])
    month = _bcd_to_int(timestamp_bytes[1])
    day = _bcd_to_int(timestamp_bytes[2])
    hour = _bcd_to_int(timestamp_bytes[3])
    minute = _bcd_to_int(timestamp_bytes[4])
    second = _bcd_to_int(timestamp_bytes[5])

    # Timezone offset (semi-octet swapped, with sign bit in low nibble bit 3)
    tz_octet = timestamp_bytes[6]
    sign_negative = (tz_octet & 0x08) != 0
    tz_quarter_hours = (tz_octet & 0x07) * 10 + ((tz_octet & 0xF0) >> 4)
    timezone_offset = tz_quarter_hours * 15  # Convert to minutes
    if sign_negative:
        timezone_offset = -timezone_offset

    # Validate timestamp values
    if not (1 <= month <= 12):
        logger.warning(f"Invalid month: {month}, using 1")
        month = 1
    if not (1 <= day <= 31):
        logger.warning(f"Invalid day: {day}, using 1")
        day = 1
    if not (0 <= hour <= 23):
        logger.warning(f"Invalid hour: {hour}, using 0")
        hour = 0
    if not (0 <= minute <= 59):
        logger.warning(f"Invalid minute: {minute}, using 0")
        minute = 0
    if not (0 <= second <= 59):
        logger.warning(f"Invalid second: {second}, using 0")
        second = 0

    timestamp = SMSTimestamp(year, month, day, hour, minute, second, timezone_offset)
    logger.debug(f"Parsed timestamp: {timestamp}")
    return timestamp


def septets_to_octets(length: int) -> int:
    return (length * 7 + 7) // 8


def decode_tpdu(
    session: Session,
    tpdu: bytes,
    direction: Direction,
    smsc: str = "",
    config: DecoderConfig = DEFAULT_CONFIG,
) -> DecodedMessage:
    """Decode one SMS-DELIVER / SMS-SUBMIT and append it to the session.

    Raises an SMSDecodeError subclass if the TPDU is inconsistent; in that
    case nothing is appended to the session's message list.
    """
    layout = TPDU_LAYOUTS[direction]
    cursor = ByteCursor(tpdu)
    logger.debug(f"Parsing {layout.pdu_type} ({len(tpdu)} bytes): {tpdu.hex().upper()}")

    draft = MessageDraft(direction=direction, smsc_address=smsc or NO_ADDRESS)

    flags = cursor.read_u8("SMS_TPDU_LEN")
    draft.has_user_data_header = bool(flags & TP_UDHI)
    tp_vpf = (flags >> TP_VPF_SHIFT) & TP_VPF_MASK

    if layout.has_message_reference:
        draft.message_reference = cursor.read_u8("SMS_TPDU_LEN")

    # TP-OA / TP-DA: [digits][TOA][BCD...]
    digit_count = cursor.read_u8("SMS_TPDU_ADDR")
    address_field = cursor.read((digit_count + 1) // 2 + 1, "SMS_TPDU_ADDR")
    draft.peer_address = decode_address(address_field, digit_count, semi_octets=True)
    session.append_summary(f", {layout.address_label} {draft.peer_address}")

    draft.protocol_id = cursor.read_u8("SMS_TPDU_LEN")
    draft.dcs = cursor.read_u8("SMS_TPDU_LEN")

    if layout.has_validity_period:
        cursor.skip(VALIDITY_PERIOD_LENGTHS[tp_vpf], "SMS_TPDU_VP")

    if layout.has_timestamp:
        draft.timestamp = parse_timestamp(cursor.read(TIMESTAMP_LENGTH, "SMS_TPDU_SCTS"))

    draft.length = cursor.read_u8("SMS_TPDU_LEN")
    draft.alphabet, draft.compressed = classify_alphabet(draft.dcs)
    draft.message_class = classify_class(draft.dcs)

    logger.debug(
        f"{layout.pdu_type}: PID=0x{draft.protocol_id:02X} DCS=0x{draft.dcs:02X} "
        f"UDHI={draft.has_user_data_header} UDL={draft.length} alphabet={draft.alphabet.name}")

    if draft.alphabet == Alphabet.DEFAULT_7BIT and not draft.compressed:
        octets = septets_to_octets(draft.length)
    else:
        octets = draft.length
    # Data length sanity check, declared user data must be fully captured
    user_data = cursor.read(octets, "SMS_UDL")
    if len(user_data) > config.max_user_data_length:
        raise OversizedUserData(
            f"User data of {len(user_data)} bytes exceeds {config.max_user_data_length}",
            "SMS_UD_SIZE",
        )
    draft.raw_user_data = user_data

    if draft.has_user_data_header:
        decode_udh(draft, user_data, config)
    else:
        decode_text(draft, user_data, septets=draft.length, config=config)

    return session.add_message(draft)
