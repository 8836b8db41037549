"""Credential setup for the AI assistant GitHub Action."""

__version__ = "0.1.0"
