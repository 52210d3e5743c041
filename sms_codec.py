#!/usr/bin/env python3
"""Low-level field codecs shared by the SMS layers.

- ByteCursor: (offset, remaining) reader that refuses to read past its buffer
- decode_address: semi-octet swapped BCD / alphanumeric address decoding
- unpack_7bit: GSM 03.38 default alphabet unpacking
"""

import logging
from typing import Optional

from sms_errors import TruncatedInput

logger = logging.getLogger(__name__)

# GSM 03.38 default alphabet
GSM7_ALPHABET = (
    '@£$¥èéùìòÇ\nØø\rÅåΔ_ΦΓΛΩΠΨΣΘΞ\x1bÆæßÉ !"#¤%&\'()*+,-./'
    '0123456789:;<=>?¡ABCDEFGHIJKLMNOPQRSTUVWXYZÄÖÑÜ§¿'
    'abcdefghijklmnopqrstuvwxyzäöñüà'
)

# GSM 03.38 extension table (after 0x1B escape)
GSM7_EXTENSION = {
    0x0A: '\f',
    0x14: '^',
    0x28: '{',
    0x29: '}',
    0x2F: '\\',
    0x3C: '[',
    0x3D: '~',
    0x3E: ']',
    0x40: '|',
    0x65: '€',
}

GSM7_ESCAPE = 0x1B

# TS 24.008 BCD number digits; 0xF is filler
BCD_DIGITS = "0123456789*#abc"

TON_INTERNATIONAL = 0x10
TON_ALPHANUMERIC = 0x50
TON_MASK = 0x70


class ByteCursor:
    """Sequential reader over a captured byte range.

    Every read is validated against the remaining length first; a short
    buffer raises TruncatedInput labelled with the caller's check name.
    """

    def __init__(self, data: bytes, offset: int = 0):
        self._data = bytes(data)
        self.offset = offset

    @property
    def remaining(self) -> int:
        return max(len(self._data) - self.offset, 0)

    def require(self, size: int, check: str) -> None:
        if size > self.remaining:
            raise TruncatedInput(check, size, self.remaining)

    def read_u8(self, check: str) -> int:
        self.require(1, check)
        value = self._data[self.offset]
        self.offset += 1
        return value

    def read(self, size: int, check: str) -> bytes:
        self.require(size, check)
        chunk = self._data[self.offset:self.offset + size]
        self.offset += size
        return chunk

    def skip(self, size: int, check: str) -> None:
        self.require(size, check)
        self.offset += size

    def rest(self) -> bytes:
        chunk = self._data[self.offset:]
        self.offset = len(self._data)
        return chunk


def _decode_bcd(bcd_bytes: bytes, digit_count: int) -> str:
    """Decode semi-octet swapped BCD digits, low nibble first."""
    digits: list[str] = []
    for byte in bcd_bytes:
        for nibble in (byte & 0x0F, (byte >> 4) & 0x0F):
            if len(digits) >= digit_count or nibble == 0x0F:
                return ''.join(digits)
            digits.append(BCD_DIGITS[nibble])
    return ''.join(digits)


def decode_address(field: bytes, length: int, semi_octets: bool = True, max_output: int = 32) -> str:
    """Decode an address value starting at its type-of-address octet.

    semi_octets=True: `length` counts digits (TP-OA/TP-DA, alternate reply
    address). semi_octets=False: `length` counts octets including the TOA
    (RP-OA/RP-DA). Truncated fields decode as far as the bytes go; an
    unusable field yields an empty string.
    """
    if length == 0 or not field:
        return ""

    toa = field[0]
    if semi_octets:
        byte_len = (length + 1) // 2
        digit_count = length
    else:
        byte_len = length - 1
        digit_count = byte_len * 2

    body = field[1:1 + byte_len]
    if len(body) < byte_len:
        logger.debug(f"Address truncated: need {byte_len} bytes, have {len(body)}")

    if (toa & TON_MASK) == TON_ALPHANUMERIC:
        if semi_octets:
            char_len = (length * 4) // 7
        else:
            char_len = (len(body) * 8) // 7
        return unpack_7bit(body, max_output, char_len) or ""

    number = _decode_bcd(body, min(digit_count, max_output))
    if number and (toa & TON_MASK) == TON_INTERNATIONAL:
        return f"+{number}"
    return number


def unpack_7bit(packed_bytes: bytes, max_output: int, septets: Optional[int] = None) -> Optional[str]:
    """Decode 7-bit packed data (GSM 03.38).

    `septets` is the declared character count; it is clipped to what the
    bytes can actually hold. Returns None when nothing can be decoded.
    """
    available = (len(packed_bytes) * 8) // 7
    char_count = available if septets is None else min(septets, available)
    if char_count <= 0 or max_output <= 0:
        return None

    result: list[str] = []
    escaped = False
    for i in range(char_count):
        bit_index = i * 7
        byte_index = bit_index // 8
        shift = bit_index % 8

        # Extract 7 bits across one or two bytes
        current_byte = packed_bytes[byte_index]
        next_byte = packed_bytes[byte_index + 1] if (byte_index + 1) < len(packed_bytes) else 0
        char_code = ((current_byte >> shift) | (next_byte << (8 - shift))) & 0x7F

        if escaped:
            result.append(GSM7_EXTENSION.get(char_code, GSM7_ALPHABET[char_code]))
            escaped = False
        elif char_code == GSM7_ESCAPE:
            escaped = True
        else:
            result.append(GSM7_ALPHABET[char_code])

        if len(result) >= max_output:
            break

    return ''.join(result) or None
