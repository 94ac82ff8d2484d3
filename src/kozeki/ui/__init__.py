"""
UI helpers for Kozeki.

- **action_embed.py**: Embeds for mod-log posts, the info report and the
  ``/info`` slash command.
"""
