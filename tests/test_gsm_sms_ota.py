"""
Unit tests for the OTA security envelope taggers.
"""

from gsm_sms_ota import SecurityEnvelopeView, decode_command_packet, decode_response_packet

from sms_frames import COMMAND_PACKET


def command_packet(spi1, kic, kid, spi2=0x21):
    header = bytes([0x00, 0x20, 0x15, spi1, spi2, kic, kid]) + bytes.fromhex('B00010')
    return header + bytes.fromhex('0000000001') + b'\x00'


class TestSecurityEnvelopeView:
    """Tests for SecurityEnvelopeView."""

    def test_fields_inside_view(self):
        view = SecurityEnvelopeView(bytes(range(8)))
        assert len(view) == 8
        assert view.byte(7) == 7
        assert view.field(2, 3) == b'\x02\x03\x04'

    def test_fields_outside_view(self):
        view = SecurityEnvelopeView(bytes(range(8)))
        assert view.byte(8) is None
        assert view.field(6, 3) is None


class TestCommandPacket:
    """Tests for decode_command_packet."""

    def test_ciphered_with_checksum(self, make_draft):
        draft = make_draft()
        decode_command_packet(draft, COMMAND_PACKET)
        assert draft.annotation == [
            'CNTR_HI', 'ENC', '3DES-2K', 'CC', '3DES-2K', 'TAR B00010', 'CNTR 0000000001',
        ]

    def test_no_security(self, make_draft):
        draft = make_draft()
        decode_command_packet(draft, command_packet(spi1=0x00, kic=0x00, kid=0x00))
        assert draft.annotation == ['NO_CNTR', 'NOENC', 'NOCC', 'TAR B00010']

    def test_reserved_and_proprietary_algorithms(self, make_draft):
        draft = make_draft()
        decode_command_packet(draft, command_packet(spi1=0x06, kic=0x02, kid=0x03))
        assert draft.annotation[:5] == ['NO_CNTR', 'ENC', 'RESERVED', 'CC', 'PROPRIET']

    def test_des_ecb_ciphering_and_reserved_kid(self, make_draft):
        draft = make_draft()
        decode_command_packet(draft, command_packet(spi1=0x1D, kic=0x0D, kid=0x0D))
        assert draft.annotation[:5] == ['CNTR_+1', 'ENC', '1DES-ECB', 'RC', 'RESERVED']

    def test_implicit_algorithms(self, make_draft):
        draft = make_draft()
        decode_command_packet(draft, command_packet(spi1=0x0F, kic=0x00, kid=0x00))
        assert draft.annotation[:5] == ['CNTR_AV', 'ENC', 'IMPLICIT', 'DS', 'IMPLICIT']

    def test_truncated_counter(self, make_draft):
        draft = make_draft()
        decode_command_packet(draft, COMMAND_PACKET[:12])
        assert draft.annotation[-2:] == ['TAR B00010', 'CNTR --']

    def test_truncated_before_tar(self, make_draft):
        draft = make_draft()
        decode_command_packet(draft, COMMAND_PACKET[:9])
        assert draft.annotation == [
            'CNTR_HI', 'ENC', '3DES-2K', 'CC', '3DES-2K', 'TAR --', 'CNTR --',
        ]

    def test_truncated_before_key_indicators(self, make_draft):
        draft = make_draft()
        decode_command_packet(draft, COMMAND_PACKET[:5])
        assert draft.annotation == ['CNTR_HI', 'ENC', 'KIC --', 'CC', 'KID --', 'TAR --', 'CNTR --']

    def test_truncated_before_spi(self, make_draft):
        draft = make_draft()
        decode_command_packet(draft, COMMAND_PACKET[:2])
        assert draft.annotation == ['SPI --', 'TAR --']


class TestResponsePacket:
    """Tests for decode_response_packet."""

    def test_short_packet_has_no_signature(self, make_draft):
        draft = make_draft()
        decode_response_packet(draft, bytes(range(10)))
        assert draft.annotation == ['TAR 030405', 'POR --', 'CC --']

    def test_signature_length_from_total_length(self, make_draft):
        draft = make_draft()
        decode_response_packet(draft, bytes(range(20)))
        assert draft.annotation == ['TAR 030405', 'POR 0C', 'CC 0D0E0F10111213']

    def test_header_only(self, make_draft):
        draft = make_draft()
        decode_response_packet(draft, bytes(range(13)))
        assert draft.annotation == ['TAR 030405', 'POR 0C', 'CC --']

    def test_signature_capped_at_16_bytes(self, make_draft):
        draft = make_draft()
        decode_response_packet(draft, bytes(range(40)))
        assert draft.annotation[-1] == 'CC ' + bytes(range(13, 29)).hex().upper()

    def test_truncated_before_tar(self, make_draft):
        draft = make_draft()
        decode_response_packet(draft, bytes(range(4)))
        assert draft.annotation == ['TAR --', 'POR --', 'CC --']

    def test_empty_packet(self, make_draft):
        draft = make_draft()
        decode_response_packet(draft, b'')
        assert draft.annotation == ['TAR --', 'POR --', 'CC --']
