"""Database models, connections and repositories."""
