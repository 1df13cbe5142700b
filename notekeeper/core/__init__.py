"""Configuration, logging, exceptions and resilience helpers."""
