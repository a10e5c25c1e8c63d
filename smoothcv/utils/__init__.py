"""Configuration, logging and error-handling utilities."""
