"""Keeps subscribed feeds fresh and merges their items newest-first."""
