"""Concurrency tests."""
