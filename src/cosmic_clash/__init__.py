"""Cosmic Clash: entity classification and contest orchestration engine."""

__version__ = "0.1.0"
