"""
Discord-facing layer of Kozeki: cogs that receive gateway events and hand them
to the moderation package.
"""
