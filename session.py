"""Per-capture session accumulator.

Holds the running, human readable description of the frame being decoded,
the SMS flags the CP/RP layers raise, and the list of decoded messages
(most recent first).
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sms_meta import DecodedMessage, MessageDraft

logger = logging.getLogger(__name__)


@dataclass
class Session:
    id: int = 0
    summary: str = ""
    has_sms: bool = False
    mo: bool = False
    mt: bool = False
    unknown: bool = False
    messages: List[DecodedMessage] = field(default_factory=list)

    def append_summary(self, text: str) -> None:
        self.summary += text

    def set_summary(self, text: str) -> None:
        self.summary = text

    @property
    def latest(self) -> Optional[DecodedMessage]:
        return self.messages[0] if self.messages else None

    def add_message(self, draft: MessageDraft) -> DecodedMessage:
        """Freeze `draft` with the next sequence number and put it at the head."""
        sequence = self.messages[0].sequence + 1 if self.messages else 0
        message = draft.freeze(sequence)
        self.messages.insert(0, message)
        logger.debug(f"Session {self.id}: stored SMS #{sequence} ({message.info})")
        return message
