"""User data classification per alphabet.

Text is never copied into the annotation, only a marker saying what kind
of payload was seen. 8-bit payloads are checked against the OTA PID/DCS
values.
"""

import logging
from typing import Optional

from sms_codec import unpack_7bit
from sms_config import DEFAULT_CONFIG, DecoderConfig
from sms_meta import Alphabet, MessageDraft

logger = logging.getLogger(__name__)


def decode_text(
    draft: MessageDraft,
    payload: bytes,
    septets: Optional[int] = None,
    config: DecoderConfig = DEFAULT_CONFIG,
) -> None:
    """Annotate `draft` with the kind of user data in `payload`.

    septets: declared character count for default alphabet payloads; when
    None it is derived from the payload size.
    """
    if len(payload) == 0:
        draft.annotate("<NO DATA>")
        return

    if draft.compressed:
        draft.annotate("<COMPRESSED DATA>")
        return

    if draft.alphabet == Alphabet.DEFAULT_7BIT:
        text = unpack_7bit(payload, config.max_text_length, septets)
        if text:
            logger.debug(f"7-bit text: {len(text)} chars")
            draft.annotate("TEXT_7BIT")
        else:
            draft.annotate("<FAILED TO DECODE TEXT>")
    elif draft.alphabet == Alphabet.UCS2:
        draft.annotate("TEXT_16BIT")
    else:
        # 8-bit data or unknown alphabet
        if draft.protocol_id in config.ota_pids or draft.dcs in config.ota_dcs:
            logger.debug(f"OTA indicated by PID {draft.protocol_id} / DCS {draft.dcs}")
            draft.annotate("OTA")
            draft.is_ota_envelope = True
        draft.annotate("DATA_8BIT")
