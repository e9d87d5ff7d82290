"""Cartwise: hybrid product recommendation engine.

This package provides a backend service for generating product suggestions
for shoppers using collaborative filtering, content-based filtering and
popularity-driven fallbacks over an order/feedback catalog.

Modules:
    api: FastAPI application and REST API endpoints
    recommender: scoring strategies and the recommendation engine
    store: catalog entities, store ports and the in-memory adapter
"""

__version__ = "0.1.0"
