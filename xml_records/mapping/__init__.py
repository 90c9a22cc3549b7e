"""Conversion of captured text into typed column values."""
