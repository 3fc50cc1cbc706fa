"""Application package: configuration, persistence, services and HTTP routes."""
