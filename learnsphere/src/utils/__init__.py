"""Utility helpers (retry and backoff)."""
