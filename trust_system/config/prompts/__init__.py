"""Prompt and instruction templates for external classification services."""

from trust_system.config.prompts.extraction_prompts import CLAIM_EXTRACTION_INSTRUCTION

__all__ = ["CLAIM_EXTRACTION_INSTRUCTION"]
