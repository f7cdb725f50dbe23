"""
FastAPI routers exposing repositories over HTTP.

Each module exposes a router builder that can be included in the application
created by ``recordstore.app_factory``.
"""
