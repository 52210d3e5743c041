"""
Shared test fixtures for the SMS decoder tests.
"""

import pytest

from session import Session
from sms_config import DecoderConfig
from sms_meta import Alphabet, Direction, MessageDraft


@pytest.fixture
def session():
    """Empty session accumulator."""
    return Session(id=7)


@pytest.fixture
def config():
    return DecoderConfig()


@pytest.fixture
def make_draft():
    """Factory for drafts positioned after the TPDU header."""

    def _make(alphabet=Alphabet.DATA_8BIT, *, pid=0x00, dcs=0x04, compressed=False,
              direction=Direction.FROM_NETWORK):
        return MessageDraft(
            direction=direction,
            protocol_id=pid,
            dcs=dcs,
            alphabet=alphabet,
            compressed=compressed,
        )

    return _make
