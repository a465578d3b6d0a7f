"""
guildstore - per-guild settings persistence for a Discord bot

Core Components:

- **SettingsStore**: load every guild's settings, load one guild with
  default-on-miss, and upsert a guild's full record together with its role
  bindings in one transaction
- **Repositories**: SQL for the server_settings and guild_roles tables
- **Database**: a single long-lived aiosqlite connection with serialised
  transaction and snapshot-read scopes, plus schema creation
- **Datatypes**: ServerSettings, SystemAnnouncement, GuildRole, Discord
  identifier wrappers and Coords

Usage:
    from guildstore.database import database
    from guildstore.settings import settings_store

    await database.initialize()
    settings = await settings_store.load(guild_id)
"""
