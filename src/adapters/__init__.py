"""Integration adapters for notigate.

Adapters implement the core ports with HTTP, SQLite and Telegram so the core
never imports any of them directly.
"""
