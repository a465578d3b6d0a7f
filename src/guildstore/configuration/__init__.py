"""
Configuration management for guildstore.

- **app_configuration.py**: YAML configuration loader for process-wide
  settings (database file location, SQLite busy timeout). Falls back to
  defaults on a missing or malformed config file.

Logging is configured from environment variables in ``guildstore.util.logger``
because the configuration loader itself logs.
"""
