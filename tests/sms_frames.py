"""Builders for the CP/RP/TPDU frames used across the tests."""

# TP address +12345678901: [digits][TOA][BCD...]
PEER_ADDRESS = bytes.fromhex("0B912143658709F1")
PEER_NUMBER = "+12345678901"

# RP address IE +1234: [len][TOA][BCD...]
SMSC_ADDRESS = bytes.fromhex("03912143")
SMSC_NUMBER = "+1234"

# 24-10-19 12:34:56 UTC
SCTS = bytes.fromhex("42019121436500")

# "hi" packed in the GSM default alphabet
TEXT_HI = bytes.fromhex("E834")

# Command packet: CNTR_HI, 3DES-2K ciphering, CC with 3DES-2K, TAR B00010
#   CPL  CHL SPI  KIc KID TAR    CNTR       PCNTR data
COMMAND_PACKET = bytes.fromhex("0020 15 1621 15 15 B00010 0000000001 00 AABBCCDD")

OTA_COMMAND_UDH = bytes.fromhex("027000")
OTA_RESPONSE_UDH = bytes.fromhex("027100")

RP_DATA_MO = 0x00
RP_DATA_MT = 0x01


def build_deliver(ud=b"", udl=None, *, pid=0x00, dcs=0x00, udhi=False, address=PEER_ADDRESS):
    flags = 0x04 | (0x40 if udhi else 0x00)
    udl = len(ud) if udl is None else udl
    return bytes([flags]) + address + bytes([pid, dcs]) + SCTS + bytes([udl]) + ud


def build_submit(ud=b"", udl=None, *, pid=0x00, dcs=0x00, udhi=False, vpf=0, vp=b"", mr=0x2A,
                 address=PEER_ADDRESS):
    flags = 0x01 | (vpf << 3) | (0x40 if udhi else 0x00)
    udl = len(ud) if udl is None else udl
    return bytes([flags, mr]) + address + bytes([pid, dcs]) + vp + bytes([udl]) + ud


def build_rp_mt(tpdu, smsc=SMSC_ADDRESS):
    """RP-DATA body as sent by the network: originator set, destination empty"""
    return smsc + b"\x00" + bytes([len(tpdu)]) + tpdu


def build_rp_mo(tpdu, smsc=SMSC_ADDRESS):
    """RP-DATA body as sent by the mobile: originator empty, destination set"""
    return b"\x00" + smsc + bytes([len(tpdu)]) + tpdu


def build_cp_data(rp_type, rp_body=b"", rp_mr=0x05):
    rpdu = bytes([rp_type, rp_mr]) + rp_body
    return bytes([0x09, 0x01, len(rpdu)]) + rpdu
