"""FastAPI application module for Cartwise.

This module contains the FastAPI application, route handlers, and API
endpoints for the recommendation service. It exposes personalized and
public product listings over the recommendation engine.
"""
