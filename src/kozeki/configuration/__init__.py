"""
Configuration management for Kozeki.

- **app_configuration.py**: YAML configuration loader (``./config/app_config.yml``)
  read under a shared file lock. Provides the chat command keywords, presence
  text and the moderation settings block. Falls back to built-in defaults on
  missing or malformed files.

- **moderation_settings.py**: Typed accessors for the ``moderation:`` block
  (default mute duration and reason, suspicious account threshold, audit log
  page size).

Secrets (the bot token and the mod-log channel id) come from the process
environment, loaded once at startup by :mod:`kozeki.main`.
"""
