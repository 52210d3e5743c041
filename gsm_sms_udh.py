#!/usr/bin/env python3
"""
User Data Header parser (GSM 03.40 section 9.2.3.24)
====================================================

    [UDHL][IEI][IEDL][IED...][IEI][IEDL][IED...]...[user data...]

Walks the information elements, records concatenation / port / OTA
markers on the draft, then hands the remaining user data to either the
OTA envelope tagger or the text classifier.
"""

import logging

from gsm_sms_ota import decode_command_packet, decode_response_packet
from gsm_sms_text import decode_text
from sms_codec import ByteCursor, decode_address
from sms_config import DEFAULT_CONFIG, DecoderConfig
from sms_errors import InconsistentFragment, TruncatedInput
from sms_meta import MessageDraft

logger = logging.getLogger(__name__)

# Information Element Identifiers
IEI_CONCAT_8BIT = 0x00
IEI_SPECIAL_SMS = 0x01
IEI_PORT_8BIT = 0x04
IEI_PORT_16BIT = 0x05
IEI_SMSC_CONTROL = 0x06
IEI_UDH_SOURCE = 0x07
IEI_CONCAT_16BIT = 0x08
IEI_TEXT_FORMATTING = 0x0A
IEI_REPLY_ADDRESS = 0x22
IEI_LANGUAGE_SHIFT = 0x24
IEI_OTA_COMMAND = 0x70
IEI_OTA_RESPONSE = 0x71
IEI_SMSC_SPECIFIC = 0xDA

# Required IEDL per IEI; IEIs not listed accept any length
IE_LENGTHS = {
    IEI_CONCAT_8BIT: 3,
    IEI_SPECIAL_SMS: 2,
    IEI_PORT_8BIT: 2,
    IEI_PORT_16BIT: 4,
    IEI_SMSC_CONTROL: 1,
    IEI_UDH_SOURCE: 1,
    IEI_CONCAT_16BIT: 4,
    IEI_LANGUAGE_SHIFT: 1,
    IEI_OTA_COMMAND: 0,
    IEI_OTA_RESPONSE: 0,
}


def _handle_ie(draft: MessageDraft, iei: int, value: bytes, header_len: int) -> None:
    if iei in IE_LENGTHS and len(value) != IE_LENGTHS[iei]:
        logger.info(f"UDH-IEI 0x{iei:02x} with bad length {len(value)}, skipped")
        draft.annotate(f"IEI_{iei:02X}_BAD_LEN")
        return

    if iei == IEI_CONCAT_8BIT:
        ref, total_frags, this_frag = value[0], value[1], value[2]
        if this_frag > total_frags:
            raise InconsistentFragment("SMS_FRAG_8", this_frag, total_frags)
        logger.debug(f"Concatenated SMS ref={ref} part {this_frag}/{total_frags}")
        draft.annotate(f"[{this_frag}/{total_frags}]")
        draft.is_concatenated_fragment = True
    elif iei == IEI_CONCAT_16BIT:
        ref = (value[0] << 8) | value[1]
        total_frags, this_frag = value[2], value[3]
        if this_frag > total_frags:
            raise InconsistentFragment("SMS_FRAG_16", this_frag, total_frags)
        logger.debug(f"Concatenated SMS ref={ref} part {this_frag}/{total_frags}")
        draft.annotate(f"[{this_frag}/{total_frags}]")
        draft.is_concatenated_fragment = True
    elif iei == IEI_PORT_8BIT:
        draft.annotate(f"PORT8 {value[1]}->{value[0]}")
    elif iei == IEI_PORT_16BIT:
        dest_port = (value[0] << 8) | value[1]
        src_port = (value[2] << 8) | value[3]
        draft.annotate(f"PORT16 {src_port}->{dest_port}")
    elif iei in (IEI_SPECIAL_SMS, IEI_SMSC_CONTROL, IEI_UDH_SOURCE, IEI_TEXT_FORMATTING):
        pass
    elif iei == IEI_REPLY_ADDRESS:
        # [digit count][TOA][BCD...]
        if not value:
            draft.annotate("REPLY_ADDR=")
            return
        reply_to = decode_address(value[1:], value[0], semi_octets=True)
        draft.annotate(f"REPLY_ADDR={reply_to}")
    elif iei == IEI_LANGUAGE_SHIFT:
        draft.annotate(f"LANG_SHIFT={value[0]}")
    elif iei == IEI_OTA_COMMAND:
        draft.is_ota_envelope = True
        draft.ota_command = True
    elif iei == IEI_OTA_RESPONSE:
        draft.is_ota_envelope = True
        draft.ota_command = False
    elif iei == IEI_SMSC_SPECIFIC:
        # must fit inside the header it was announced in
        if len(value) > header_len:
            logger.info(f"SMSC-specific IE of {len(value)} bytes in a {header_len} byte header, skipped")
            draft.annotate(f"IEI_{iei:02X}_BAD_LEN")
            return
        logger.info(f"SMSC-specific {value.hex()}")
    else:
        logger.info(f"Unhandled UDH-IEI 0x{iei:02x}, vlen={len(value)}: {value.hex()}")


def decode_udh(draft: MessageDraft, payload: bytes, config: DecoderConfig = DEFAULT_CONFIG) -> None:
    """Parse the UDH at the start of `payload` and dispatch the user data after it."""
    if len(payload) == 0:
        draft.annotate("<NO DATA>")
        return

    header_len = payload[0]
    if header_len > len(payload) - 1:
        raise TruncatedInput("SMS_UDH_LEN", header_len + 1, len(payload))

    user_data = payload[1 + header_len:]

    cursor = ByteCursor(payload, offset=1)
    while cursor.offset < 1 + header_len:
        iei = cursor.read_u8("UDH_IEI_LEN")
        vlen = cursor.read_u8("UDH_IEI_LEN")
        value = cursor.read(vlen, "UDH_IEI_LEN")
        _handle_ie(draft, iei, value, header_len)

    if draft.is_ota_envelope:
        draft.annotate("OTA")
        if draft.ota_command:
            decode_command_packet(draft, user_data)
        else:
            decode_response_packet(draft, user_data)
    else:
        decode_text(draft, user_data, config=config)
