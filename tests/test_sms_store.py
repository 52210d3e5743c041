"""
Unit tests for the SQL export and the aiosqlite backed store.
"""

import aiosqlite
import pytest

from gsm_cp_sms_apdu import decode_sms
from sms_meta import Alphabet
from sms_store import SMSStore, quote, to_insert_statement

from sms_frames import RP_DATA_MT, TEXT_HI, build_cp_data, build_deliver, build_rp_mt


def deliver_frame(ud=TEXT_HI, udl=2, dcs=0x00):
    return build_cp_data(RP_DATA_MT, build_rp_mt(build_deliver(ud, udl, dcs=dcs)))


class TestQuote:
    """Tests for quote."""

    def test_plain(self):
        assert quote("TEXT_7BIT") == "'TEXT_7BIT'"

    def test_single_quotes_doubled(self):
        assert quote("it's") == "'it''s'"

    def test_nul_dropped(self):
        assert quote("a\x00b") == "'ab'"

    def test_none(self):
        assert quote(None) == "NULL"


class TestInsertStatement:
    """Tests for to_insert_statement."""

    def test_text_message(self, session):
        message = decode_sms(session, deliver_frame())
        assert to_insert_statement(session.id, message) == (
            "INSERT INTO sms_meta (id,sequence,from_network,pid,dcs,alphabet,class,udhi,ota,concat,"
            "smsc,msisdn,info,length,data) VALUES "
            "(7,0,1,0,0,0,4,0,0,0,'+1234','+12345678901','TEXT_7BIT',2,X'E834');"
        )

    def test_no_data_sentinel(self, session):
        message = decode_sms(session, deliver_frame(b'', 0))
        statement = to_insert_statement(session.id, message)
        assert statement.endswith(",'<NO DATA>',0,'<NO DATA>');")

    def test_compressed_alphabet_flag(self, session):
        message = decode_sms(session, deliver_frame(dcs=0x20))
        assert message.alphabet == Alphabet.DEFAULT_7BIT
        assert ",128,4," in to_insert_statement(session.id, message)


class TestSMSStore:
    """Tests for SMSStore."""

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path, session):
        for _ in range(3):
            decode_sms(session, deliver_frame())

        store = SMSStore(str(tmp_path / 'sms.db'))
        await store.init_db()
        await store.add_session(session)

        rows = await store.get(session.id)
        assert [row['sequence'] for row in rows] == [0, 1, 2]
        assert rows[0]['msisdn'] == '+12345678901'
        assert rows[0]['info'] == 'TEXT_7BIT'
        assert bytes(rows[0]['data']) == TEXT_HI

    @pytest.mark.asyncio
    async def test_init_is_idempotent(self, tmp_path, session):
        store = SMSStore(str(tmp_path / 'sms.db'))
        await store.init_db()
        await store.add(session.id, decode_sms(session, deliver_frame()))
        await store.init_db()
        assert len(await store.get(session.id)) == 1

    @pytest.mark.asyncio
    async def test_outdated_schema_is_recreated(self, tmp_path, session):
        db_path = str(tmp_path / 'sms.db')
        async with aiosqlite.connect(db_path) as db:
            await db.execute("CREATE TABLE sms_meta (id INTEGER, info TEXT);")
            await db.commit()

        store = SMSStore(db_path)
        await store.init_db()
        await store.add(session.id, decode_sms(session, deliver_frame()))
        assert len(await store.get(session.id)) == 1
