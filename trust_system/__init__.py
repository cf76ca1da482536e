"""Claim verification and trust-scoring pipeline."""

__version__ = "0.1.0"
