"""Streaming XML tokenization and record assembly."""
