"""Observability – logging configuration for the resolution engine."""
