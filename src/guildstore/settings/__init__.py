"""Per-guild settings persistence: the SettingsStore and its repositories."""
from guildstore.settings.settings_store import SettingsStore, settings_store, validate_settings

__all__ = [
    "SettingsStore",
    "settings_store",
    "validate_settings",
]
