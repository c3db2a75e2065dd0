"""
pytest suite for the Candle Shop backend.

Test categories:
- unit: services, models and middleware against an in-memory database
- api: HTTP endpoints through the FastAPI app
- integration: multi-step order lifecycles over HTTP
"""
