"""Shared helpers for guildstore (logging)."""
