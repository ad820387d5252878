"""
Use cases for the records API.

Each service orchestrates the record stores to implement business rules
(login, register, create/list/delete posts, update profile). Routers call
these services instead of reading or writing the JSON collections directly.
"""
