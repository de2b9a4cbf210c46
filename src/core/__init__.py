"""Core domain package for channelbot.

Core contains the registry, feed dedup and command pipeline without any
Reddit, YouTube or storage-specific code, keeping the business logic portable.
"""
