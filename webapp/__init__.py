"""Scan HTTP API."""
