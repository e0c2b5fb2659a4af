"""Service layer: request validation, caching and response formatting."""
