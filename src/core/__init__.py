"""Core domain package for notigate.

Core contains date resolution, identifier minting and the scheduling engine
without any Telegram, HTTP or storage-specific code, keeping the business
logic portable.
"""
