"""AI Personal Safety Guardian application package.

This package contains the FastAPI routes, services and schemas for the
safety assessment backend. Subpackages include:
- api: FastAPI route definitions and error handlers
- core: configuration, logging and error types
- services: classifiers, keyword analysis, route planner, Gemini client
- schemas: Pydantic models
- workers: periodic housekeeping
"""

__all__ = [
    "api",
    "core",
    "services",
    "schemas",
    "workers",
]

__version__ = "1.0.0"
