"""
Core utilities shared across the records API.

This package hosts configuration, logging setup, the error taxonomy,
security primitives (password hashing, session tokens) and the mailer.
Routers/services should depend on these instead of reading os.environ or
talking to SMTP directly.
"""
