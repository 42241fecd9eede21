"""Shared builders for unit tests."""
