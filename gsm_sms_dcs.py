"""
TP-DCS classification (GSM 03.38 section 4)

Only the coding groups the decoder cares about are mapped; anything else
comes back as Alphabet.UNKNOWN / MessageClass.NONE.
"""

from typing import Tuple

from sms_meta import Alphabet, MessageClass

DCS_COMPRESSED = 0x20
DCS_CLASS_PRESENT = 0x10

# General data coding, bits 3..2
_GENERAL_ALPHABETS = {
    0: Alphabet.DEFAULT_7BIT,
    1: Alphabet.DATA_8BIT,
    2: Alphabet.UCS2,
}


def classify_class(dcs: int) -> MessageClass:
    coding_group = (dcs >> 4) & 0x0F

    if (coding_group & 0x0C) == 0:
        # DCS 00xx xxxx
        if dcs & DCS_CLASS_PRESENT:
            return MessageClass(dcs & 0x03)
    elif coding_group == 0x0F:
        # DCS 1111 xxxx
        return MessageClass(dcs & 0x03)

    return MessageClass.NONE


def classify_alphabet(dcs: int) -> Tuple[Alphabet, bool]:
    """Return (alphabet, compressed) for a TP-DCS octet."""
    coding_group = (dcs >> 4) & 0x0F

    if dcs == 0x00:
        return Alphabet.DEFAULT_7BIT, False

    if (coding_group & 0x0C) == 0:
        alphabet = _GENERAL_ALPHABETS.get((dcs >> 2) & 0x03, Alphabet.UNKNOWN)
        return alphabet, bool(dcs & DCS_COMPRESSED)
    if coding_group in (0x0C, 0x0D):
        # Message waiting, discard / store
        return Alphabet.DEFAULT_7BIT, False
    if coding_group == 0x0E:
        # Message waiting, store, UCS2
        return Alphabet.UCS2, False
    if coding_group == 0x0F:
        if dcs & 0x04:
            return Alphabet.DATA_8BIT, False
        return Alphabet.DEFAULT_7BIT, False

    return Alphabet.UNKNOWN, False
