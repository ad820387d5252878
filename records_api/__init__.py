"""File-backed users/posts API."""
