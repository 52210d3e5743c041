#!/usr/bin/env python3
"""Decode a capture of SMS DTAP frames and print / store the SMS metadata.

The capture is a text file with one hex encoded DTAP frame per line.
Blank lines and lines starting with '#' are ignored.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
from typing import Iterator

from gsm_cp_sms_apdu import decode_sms
from session import Session
from sms_config import DecoderConfig, load_config
from sms_store import SMSStore, to_insert_statement

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'
logger = logging.getLogger("sms_meta")


def read_frames(path: str) -> Iterator[bytes]:
    with open(path) as f:
        for lineno, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            try:
                yield bytes.fromhex(line.replace(' ', ''))
            except ValueError as e:
                logger.error("%s:%d: invalid hex frame: %s", path, lineno, e)


def decode_capture(session: Session, path: str, config: DecoderConfig) -> None:
    for frame_no, frame in enumerate(read_frames(path), 1):
        session.set_summary("")
        message = decode_sms(session, frame, config=config)
        print(f"#{frame_no}: {session.summary}")
        if message:
            print(f"    SMS {message.sequence}: {message.info}")


async def _async_main(args: argparse.Namespace) -> None:
    config = load_config(args.config) if os.path.exists(args.config) else {}

    level = logging.DEBUG if args.verbose else config.get('logging', {}).get('level', 'INFO')
    logging.basicConfig(level=level, format=LOG_FORMAT)

    decoder_config = DecoderConfig.from_dict(config.get('decoder'))
    session = Session(id=args.session_id)
    decode_capture(session, args.capture, decoder_config)

    logger.info("Session %d: %d SMS decoded (MO=%s MT=%s unknown=%s)",
                session.id, len(session.messages), session.mo, session.mt, session.unknown)

    if args.sql:
        for message in reversed(session.messages):
            print(to_insert_statement(session.id, message))

    db_path = args.db or config.get('store', {}).get('db_path')
    if db_path:
        store = SMSStore(db_path)
        await store.init_db()
        await store.add_session(session)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Decode SMS metadata from captured DTAP frames")
    parser.add_argument('capture', help='Text file with one hex DTAP frame per line')
    parser.add_argument('-c', '--config', default='config.yaml', help='YAML configuration file')
    parser.add_argument('--session-id', type=int, default=0, help='Session id used for stored records')
    parser.add_argument('--sql', action='store_true', help='Print INSERT statements for the decoded SMS')
    parser.add_argument('--db', default=None, help='SQLite database path (overrides store.db_path)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable DEBUG logging')
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    asyncio.run(_async_main(args))


if __name__ == '__main__':
    main()
