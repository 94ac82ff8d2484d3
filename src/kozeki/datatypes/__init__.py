"""Transient data structures shared across the command pipeline."""
