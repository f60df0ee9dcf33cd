"""Data models for gitsync."""
