"""Data models shared across the harness."""
