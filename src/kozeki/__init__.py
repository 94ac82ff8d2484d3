"""
Kozeki - Discord Moderation Assistant

Kozeki listens for short chat commands from server moderators and carries out
the matching moderation action through Discord's API, posting a record of each
action to a mod-log channel.

Core Components:

- **Command Listener**: Gates every guild message on the moderator permission
  bits, parses ``km`` / ``kum`` / ``kb`` / ``kub`` / ``ki`` commands and hands
  them to a dispatch table of handlers
- **Moderation Actions**: Timeout, timeout removal, ban and unban, each with
  bot capability checks and a role hierarchy check for timeouts
- **User Info**: Account age, join age and ban/unban/timeout history read
  from the guild audit log
- **Mod Log**: Fire-and-forget embeds describing every action taken
- **/info**: Version, uptime and the command list

Usage:
    from kozeki.main import main
    main()
"""

import time

__version__ = "1.2.0"

# Reference point for the process uptime shown by /info
PROCESS_STARTED_AT = time.monotonic()
