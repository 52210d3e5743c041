import logging
from typing import Optional

import aiosqlite

from session import Session
from sms_meta import DecodedMessage

logger = logging.getLogger(__name__)

NO_DATA = "'<NO DATA>'"

COLUMNS = (
    "id",
    "sequence",
    "from_network",
    "pid",
    "dcs",
    "alphabet",
    "class",
    "udhi",
    "ota",
    "concat",
    "smsc",
    "msisdn",
    "info",
    "length",
    "data",
)

ALPHABET_COMPRESSED = 0x80


def quote(value: Optional[str]) -> str:
    """Quote a string as an SQL literal, or NULL."""
    if value is None:
        return "NULL"
    return "'" + value.replace("\x00", "").replace("'", "''") + "'"


def to_insert_statement(session_id: int, message: DecodedMessage) -> str:
    """Build the INSERT statement storing one decoded message."""
    alphabet = int(message.alphabet)
    if message.compressed:
        alphabet |= ALPHABET_COMPRESSED

    if message.length:
        data = f"X'{message.raw_hex}'"
    else:
        data = NO_DATA

    values = (
        str(int(session_id)),
        str(message.sequence),
        str(int(message.from_network)),
        str(message.protocol_id),
        str(message.dcs),
        str(alphabet),
        str(int(message.message_class)),
        str(int(message.has_user_data_header)),
        str(int(message.is_ota_envelope)),
        str(int(message.is_concatenated_fragment)),
        quote(message.smsc_address),
        quote(message.peer_address),
        quote(message.info),
        str(message.length),
        data,
    )
    return f"INSERT INTO sms_meta ({','.join(COLUMNS)}) VALUES ({','.join(values)});"


class SMSStore:
    def __init__(self, db_path):
        self.db_path = db_path

    async def init_db(self):
        async with aiosqlite.connect(self.db_path) as db:
            # Check if the current schema already exists
            tbl_info = await db.execute_fetchall("PRAGMA table_info(sms_meta);")
            existing_cols = {row[1] for row in tbl_info}

            if existing_cols and set(COLUMNS).issubset(existing_cols):
                await db.commit()
                return

            if existing_cols:
                logger.warning("sms_meta schema outdated – recreating table (stored messages will be lost)")
                await db.execute("DROP TABLE IF EXISTS sms_meta;")

            await db.execute('''
                CREATE TABLE sms_meta (
                    id INTEGER NOT NULL,
                    sequence INTEGER NOT NULL,
                    from_network INTEGER,
                    pid INTEGER,
                    dcs INTEGER,
                    alphabet INTEGER,
                    class INTEGER,
                    udhi INTEGER,
                    ota INTEGER,
                    concat INTEGER,
                    smsc TEXT,
                    msisdn TEXT,
                    info TEXT,
                    length INTEGER,
                    data BLOB,
                    PRIMARY KEY (id, sequence)
                );
            ''')
            await db.commit()

    async def add(self, session_id, message):
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(to_insert_statement(session_id, message))
            await db.commit()

    async def add_session(self, session: Session):
        # oldest first, matching sequence order
        async with aiosqlite.connect(self.db_path) as db:
            for message in reversed(session.messages):
                await db.execute(to_insert_statement(session.id, message))
            await db.commit()
        logger.info("Stored %d SMS for session %d", len(session.messages), session.id)

    async def get(self, session_id):
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                'SELECT * FROM sms_meta WHERE id = ? ORDER BY sequence', (session_id,)
            ) as cursor:
                return await cursor.fetchall()
