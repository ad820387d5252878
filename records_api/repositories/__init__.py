"""
Persistence adapters.

Users and posts are kept as JSON collections on disk. Services go through the
record store here rather than touching the files.
"""
