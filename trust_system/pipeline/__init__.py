"""Timer-triggered jobs and their run gate."""

from trust_system.pipeline.run_gate import RunGate, run_gate
from trust_system.pipeline.verification_pipeline import VerificationPipeline

__all__ = ["RunGate", "VerificationPipeline", "run_gate"]
