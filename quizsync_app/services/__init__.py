"""Application-level services."""
