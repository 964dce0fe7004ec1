"""CLI package for interacting with the telemetry service."""
