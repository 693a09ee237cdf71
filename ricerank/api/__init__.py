"""RICE Prioritizer HTTP API."""
