"""Utility helpers for tts-convert (timing)."""
