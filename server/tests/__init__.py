"""Tests for the studio booking service."""
