"""Tests for the SettingsStore."""

import asyncio
import sqlite3

import pytest

from guildstore.database.db_connection import ConnectionManager
from guildstore.datatypes.discord_datatypes import ChannelID, GuildID
from guildstore.datatypes.server_settings import (
    GuildRole,
    ServerSettings,
    SystemAnnouncement,
    SystemAnnouncementType,
)
from guildstore.exceptions import SettingsValidationError
from guildstore.settings.settings_store import SettingsStore


def make_settings(guild_id="123", language="de-DE", kind=SystemAnnouncementType.ROLE_CHANGE,
                  channel_id="999", roles=None) -> ServerSettings:
    if roles is None:
        roles = [GuildRole(role_type="admin", role_id="111"), GuildRole(role_type="member", role_id="222")]
    return ServerSettings(
        guild_id=guild_id,
        language=language,
        system_announcement=SystemAnnouncement(
            system_announcement_type=kind,
            announcement_room_channel_id=channel_id,
        ),
        guild_roles=roles,
    )


class TestLoad:

    @pytest.mark.asyncio
    async def test_unknown_guild_returns_defaults(self, store):
        settings = await store.load("unknown-guild")

        assert settings == ServerSettings(guild_id="unknown-guild")
        assert settings.guild_id == "unknown-guild"
        assert settings.language == "en-US"
        assert settings.system_announcement.system_announcement_type is SystemAnnouncementType.NONE
        assert settings.system_announcement.announcement_room_channel_id is None
        assert settings.guild_roles == []

    @pytest.mark.asyncio
    async def test_load_does_not_create_a_record(self, store):
        await store.load("42")

        assert await store.load_all() == []

    @pytest.mark.asyncio
    async def test_load_accepts_int_and_wrapped_ids(self, store):
        await store.update(make_settings(guild_id="555"))

        assert (await store.load(555)).language == "de-DE"
        assert (await store.load(GuildID("555"))).language == "de-DE"

    @pytest.mark.asyncio
    async def test_overlong_guild_id_is_not_checked_on_load(self, store):
        guild_id = "9" * 40

        settings = await store.load(guild_id)

        assert settings == ServerSettings(guild_id=guild_id)

    @pytest.mark.asyncio
    async def test_roles_without_settings_row_are_not_loaded(self, store, db_path):
        conn = sqlite3.connect(db_path)
        conn.execute("INSERT INTO guild_roles (guild_id, role_id, role_type) VALUES ('77', '1', 'admin')")
        conn.commit()
        conn.close()

        assert await store.load("77") == ServerSettings(guild_id="77")


class TestUpdate:

    @pytest.mark.asyncio
    async def test_round_trip(self, store):
        settings = make_settings()

        await store.update(settings)
        loaded = await store.load("123")

        assert loaded == settings
        assert loaded.system_announcement.announcement_room_channel_id == ChannelID("999")
        assert [str(role.role_id) for role in loaded.guild_roles] == ["111", "222"]

    @pytest.mark.asyncio
    async def test_role_order_does_not_matter(self, store):
        roles = [GuildRole(role_type="member", role_id="222"), GuildRole(role_type="admin", role_id="111")]

        await store.update(make_settings(roles=roles))

        assert await store.load("123") == make_settings()

    @pytest.mark.asyncio
    async def test_read_modify_write_with_appended_roles(self, store):
        settings = await store.load("123")
        settings.guild_roles.append(GuildRole(role_type="member", role_id="2"))
        settings.guild_roles.append(GuildRole(role_type="admin", role_id="1"))

        await store.update(settings)
        loaded = await store.load("123")

        assert loaded == settings
        assert [role.role_type for role in loaded.guild_roles] == ["admin", "member"]

    @pytest.mark.asyncio
    async def test_second_update_fully_replaces_first(self, store):
        await store.update(make_settings())
        replacement = make_settings(
            language="fr-FR",
            kind=SystemAnnouncementType.NONE,
            channel_id=None,
            roles=[GuildRole(role_type="helper", role_id="333")],
        )

        await store.update(replacement)
        loaded = await store.load("123")

        assert loaded == replacement
        assert loaded.system_announcement.announcement_room_channel_id is None
        assert [role.role_type for role in loaded.guild_roles] == ["helper"]

    @pytest.mark.asyncio
    async def test_update_with_no_roles_clears_roles(self, store, db_path):
        await store.update(make_settings())

        await store.update(make_settings(roles=[]))

        assert (await store.load("123")).guild_roles == []
        conn = sqlite3.connect(db_path)
        count = conn.execute("SELECT COUNT(*) FROM guild_roles WHERE guild_id = '123'").fetchone()[0]
        conn.close()
        assert count == 0

    @pytest.mark.asyncio
    async def test_update_only_touches_its_own_guild(self, store):
        first = make_settings(guild_id="1")
        second = make_settings(guild_id="2", language="nl-NL", roles=[GuildRole(role_type="admin", role_id="9")])
        await store.update(first)
        await store.update(second)

        await store.update(make_settings(guild_id="1", roles=[]))

        assert await store.load("2") == second

    @pytest.mark.asyncio
    async def test_enum_is_persisted_by_name(self, store, db_path):
        await store.update(make_settings(kind=SystemAnnouncementType.UPDATES))

        conn = sqlite3.connect(db_path)
        row = conn.execute(
            "SELECT system_announcement_type FROM server_settings WHERE guild_id = '123'"
        ).fetchone()
        conn.close()
        assert row[0] == "UPDATES"

    @pytest.mark.asyncio
    async def test_roles_failure_rolls_back_settings(self, store, monkeypatch):
        original = make_settings()
        await store.update(original)

        async def broken_replace(conn, guild_id, roles):
            await conn.execute("DELETE FROM guild_roles WHERE guild_id = ?", (str(guild_id),))
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(store._guild_roles_repo, "replace", broken_replace)

        with pytest.raises(sqlite3.OperationalError):
            await store.update(make_settings(language="fr-FR", roles=[]))

        assert await store.load("123") == original

    @pytest.mark.asyncio
    async def test_store_usable_after_failed_update(self, store, monkeypatch):
        async def broken_upsert(conn, row):
            raise sqlite3.IntegrityError("constraint failed")

        monkeypatch.setattr(store._server_settings_repo, "upsert", broken_upsert)
        with pytest.raises(sqlite3.IntegrityError):
            await store.update(make_settings())
        monkeypatch.undo()

        await store.update(make_settings(language="it-IT"))

        assert (await store.load("123")).language == "it-IT"

    @pytest.mark.asyncio
    async def test_concurrent_updates_last_writer_wins(self, store):
        a = make_settings(language="aa-AA", roles=[GuildRole(role_type="a", role_id="1")])
        b = make_settings(language="bb-BB", roles=[GuildRole(role_type="b", role_id="2")])

        await asyncio.gather(store.update(a), store.update(b))

        assert await store.load("123") == b


class TestValidation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "settings, field",
        [
            (make_settings(guild_id="1" * 25), "guild_id"),
            (make_settings(language="en-US-x"), "language"),
            (make_settings(language=" "), "language"),
            (make_settings(channel_id="2" * 25), "announcement_room_channel_id"),
            (make_settings(roles=[GuildRole(role_type="admin", role_id="3" * 25)]), "guild_roles"),
            (make_settings(roles=[GuildRole(role_type="x" * 33, role_id="3")]), "guild_roles"),
            (make_settings(roles=[GuildRole(role_type="", role_id="3")]), "guild_roles"),
            (
                make_settings(roles=[GuildRole(role_type="admin", role_id="1"), GuildRole(role_type=None, role_id="2")]),
                "guild_roles",
            ),
            (
                make_settings(roles=[GuildRole(role_type="a", role_id="3"), GuildRole(role_type="b", role_id="3")]),
                "guild_roles",
            ),
        ],
    )
    async def test_invalid_settings_are_rejected_and_not_written(self, store, settings, field):
        with pytest.raises(SettingsValidationError) as excinfo:
            await store.update(settings)

        assert excinfo.value.field == field
        assert isinstance(excinfo.value, ValueError)
        assert await store.load_all() == []

    @pytest.mark.asyncio
    async def test_boundary_lengths_are_accepted(self, store):
        settings = make_settings(
            guild_id="1" * 24,
            language="pt-BR",
            channel_id="2" * 24,
            roles=[GuildRole(role_type="r" * 32, role_id="3" * 24)],
        )

        await store.update(settings)

        assert await store.load("1" * 24) == settings


class TestLoadAll:

    @pytest.mark.asyncio
    async def test_empty_store(self, store):
        assert await store.load_all() == []

    @pytest.mark.asyncio
    async def test_returns_last_written_value_per_guild(self, store):
        expected = {}
        for guild_id in ("3", "1", "2"):
            settings = make_settings(
                guild_id=guild_id,
                roles=[GuildRole(role_type="admin", role_id=f"{guild_id}00")],
            )
            await store.update(settings)
            expected[guild_id] = settings

        overwrite = make_settings(guild_id="1", language="es-ES", roles=[])
        await store.update(overwrite)
        expected["1"] = overwrite

        loaded = await store.load_all()

        assert len(loaded) == 3
        assert {str(s.guild_id): s for s in loaded} == expected

    @pytest.mark.asyncio
    async def test_guild_without_roles_gets_empty_list(self, store):
        await store.update(make_settings(guild_id="10", roles=[]))

        [loaded] = await store.load_all()

        assert loaded.guild_roles == []


class TestLegacyRows:

    @pytest.mark.asyncio
    async def test_unknown_announcement_type_reads_as_none(self, store, db_path):
        conn = sqlite3.connect(db_path)
        conn.execute(
            "INSERT INTO server_settings (guild_id, language, system_announcement_type) VALUES (?, ?, ?)",
            ("88", "en-GB", "LEGACY_TYPE"),
        )
        conn.commit()
        conn.close()

        settings = await store.load("88")

        assert settings.language == "en-GB"
        assert settings.system_announcement.system_announcement_type is SystemAnnouncementType.NONE

    @pytest.mark.asyncio
    async def test_row_with_column_defaults(self, store, db_path):
        conn = sqlite3.connect(db_path)
        conn.execute("INSERT INTO server_settings (guild_id) VALUES ('99')")
        conn.commit()
        conn.close()

        assert await store.load("99") == ServerSettings(guild_id="99")


@pytest.mark.asyncio
async def test_store_requires_open_connection():
    store = SettingsStore(connection=ConnectionManager())

    with pytest.raises(RuntimeError):
        await store.load("1")
    with pytest.raises(RuntimeError):
        await store.update(make_settings())
