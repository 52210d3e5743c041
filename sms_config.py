"""YAML configuration for the SMS metadata decoder."""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

import yaml

# PID / DCS values seen on SIM toolkit OTA traffic
OTA_PIDS = frozenset({124, 127})
OTA_DCS = frozenset({22, 246})

MAX_USER_DATA_LENGTH = 140
MAX_TEXT_LENGTH = 255


@dataclass(frozen=True)
class DecoderConfig:
    ota_pids: FrozenSet[int] = field(default=OTA_PIDS)
    ota_dcs: FrozenSet[int] = field(default=OTA_DCS)
    max_user_data_length: int = MAX_USER_DATA_LENGTH
    max_text_length: int = MAX_TEXT_LENGTH

    @classmethod
    def from_dict(cls, section: Optional[Dict[str, Any]]) -> "DecoderConfig":
        section = section or {}
        return cls(
            ota_pids=frozenset(section.get("ota_pids", OTA_PIDS)),
            ota_dcs=frozenset(section.get("ota_dcs", OTA_DCS)),
            max_user_data_length=int(section.get("max_user_data_length", MAX_USER_DATA_LENGTH)),
            max_text_length=int(section.get("max_text_length", MAX_TEXT_LENGTH)),
        )


DEFAULT_CONFIG = DecoderConfig()


def load_config(path='config.yaml'):
    with open(path) as f:
        return yaml.safe_load(f) or {}
