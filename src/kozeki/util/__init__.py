"""
Utility functions and helpers for Kozeki.

- **logger.py**: Centralized logging configuration with colored console output
  through prompt_toolkit, a rotating per-session log file, and suppression of
  Discord's internal logging noise.

- **discord_utils.py**: Stateless Discord helpers: the moderator permission
  gate, bot capability and role hierarchy checks, mention parsing, member
  resolution and duration/uptime formatting.
"""
