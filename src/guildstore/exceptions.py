"""Exceptions raised by guildstore."""


class GuildStoreError(Exception):
    """Base exception for guildstore errors."""
    pass


class SettingsValidationError(GuildStoreError, ValueError):
    """A settings record does not fit the persisted schema."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid '{field}': {message}")
