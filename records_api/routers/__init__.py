"""
FastAPI routers grouped by domain (auth, posts, profile).

Each module exposes an APIRouter included by ``records_api.app.create_app``.
Services are looked up on ``app.state`` so tests can build isolated apps.
"""
