"""Configuration: settings, logging, source definitions and prompts."""
