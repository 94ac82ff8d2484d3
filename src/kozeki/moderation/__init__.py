"""
Moderation package for Kozeki.

- **command_parser.py**: Turns raw message text into a CommandInvocation and
  duration tokens into milliseconds.
- **moderation_actions.py**: Dispatch table and handlers for mute, unmute,
  ban and unban.
- **audit_report.py**: The info lookup built from Discord's audit log.
- **mod_log.py**: Best-effort mod-log channel sink.
"""
