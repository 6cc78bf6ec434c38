"""Business logic services.

This module contains service-layer functions that implement business logic.
Services are called by route handlers and orchestrate database operations.
Import the submodules directly (e.g. ``from huddle.services import relationships``).
"""
