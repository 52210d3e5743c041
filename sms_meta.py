"""
Decoded SMS metadata
====================

One DecodedMessage is produced per successfully parsed TPDU. While the
layers below the TPDU are still working on it the state lives in a
MessageDraft; the session freezes the draft once it assigns a sequence
number, after which the record is never touched again.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

NO_ADDRESS = "<NO ADDRESS>"


class Direction(Enum):
    FROM_NETWORK = "from_network"
    FROM_MOBILE = "from_mobile"


class Alphabet(IntEnum):
    """TP-DCS character set (values follow DCS bits 2-3)"""
    DEFAULT_7BIT = 0
    DATA_8BIT = 1
    UCS2 = 2
    UNKNOWN = 3


class MessageClass(IntEnum):
    DISPLAY = 0
    MOBILE_EQUIPMENT = 1
    SIM = 2
    TERMINAL_EQUIPMENT = 3
    NONE = 4


@dataclass
class SMSTimestamp:
    """SMS Timestamp (TP-SCTS)"""
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int
    timezone_offset: int  # in minutes

    def __str__(self):
        return (f"{self.year:02d}-{self.month:02d}-{self.day:02d} "
                f"{self.hour:02d}:{self.minute:02d}:{self.second:02d} "
                f"TZ(min):{self.timezone_offset}")


@dataclass(frozen=True)
class DecodedMessage:
    """Decoded SMS metadata record"""
    sequence: int
    direction: Direction
    peer_address: str
    smsc_address: str
    protocol_id: int
    dcs: int
    alphabet: Alphabet
    compressed: bool
    message_class: MessageClass
    length: int
    raw_user_data: bytes = b""
    has_user_data_header: bool = False
    is_concatenated_fragment: bool = False
    is_ota_envelope: bool = False
    annotation: Tuple[str, ...] = ()
    message_reference: Optional[int] = None
    timestamp: Optional[SMSTimestamp] = None

    @property
    def from_network(self) -> bool:
        return self.direction is Direction.FROM_NETWORK

    @property
    def info(self) -> str:
        """Annotation trace rendered as text"""
        return " ".join(self.annotation)

    @property
    def raw_hex(self) -> str:
        return self.raw_user_data.hex().upper()


@dataclass
class MessageDraft:
    """Mutable decode state for the TPDU currently being parsed"""
    direction: Direction
    peer_address: str = ""
    smsc_address: str = NO_ADDRESS
    protocol_id: int = 0
    dcs: int = 0
    alphabet: Alphabet = Alphabet.UNKNOWN
    compressed: bool = False
    message_class: MessageClass = MessageClass.NONE
    length: int = 0
    raw_user_data: bytes = b""
    has_user_data_header: bool = False
    is_concatenated_fragment: bool = False
    is_ota_envelope: bool = False
    # set by the OTA command/response UDH markers
    ota_command: bool = False
    message_reference: Optional[int] = None
    timestamp: Optional[SMSTimestamp] = None
    annotation: List[str] = field(default_factory=list)

    def annotate(self, tag: str) -> None:
        logger.debug(f"annotate: {tag}")
        self.annotation.append(tag)

    def freeze(self, sequence: int) -> DecodedMessage:
        return DecodedMessage(
            sequence=sequence,
            direction=self.direction,
            peer_address=self.peer_address,
            smsc_address=self.smsc_address,
            protocol_id=self.protocol_id,
            dcs=self.dcs,
            alphabet=self.alphabet,
            compressed=self.compressed,
            message_class=self.message_class,
            length=self.length,
            raw_user_data=bytes(self.raw_user_data),
            has_user_data_header=self.has_user_data_header,
            is_concatenated_fragment=self.is_concatenated_fragment,
            is_ota_envelope=self.is_ota_envelope,
            annotation=tuple(self.annotation),
            message_reference=self.message_reference,
            timestamp=self.timestamp,
        )
