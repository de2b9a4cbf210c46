"""Adapters binding the core ports to Reddit, YouTube and SQLite."""
