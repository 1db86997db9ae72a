"""
config.py — Guided Component Forge
===================================
Environment-driven settings plus the loop configuration model.
"""

import os
import pathlib

from dotenv import load_dotenv
from pydantic import BaseModel, Field

_ = load_dotenv()

# Groq model used for every generation / evaluation call
GROQ_MODEL = os.getenv("GROQ_MODEL", "openai/gpt-oss-120b")
GROQ_TEMPERATURE = float(os.getenv("GROQ_TEMPERATURE", "0.2"))

# Root folder that receives <kebab-name>/ component directories
OUTPUT_ROOT = pathlib.Path(os.getenv("CODEGEN_OUTPUT_DIR", "output"))

# Step-level retries for a single LLM call (identical inputs each attempt)
LLM_MAX_ATTEMPTS = int(os.getenv("CODEGEN_LLM_ATTEMPTS", "3"))

# Build validator process limits (seconds / attempts)
INSTALL_TIMEOUT = int(os.getenv("CODEGEN_INSTALL_TIMEOUT", "120"))
INSTALL_ATTEMPTS = int(os.getenv("CODEGEN_INSTALL_ATTEMPTS", "2"))
TSC_TIMEOUT = int(os.getenv("CODEGEN_TSC_TIMEOUT", "60"))


class LoopConfig(BaseModel):
    """
    Bounds of the generate → check → judge loop.
    Passed into the controller so tests can run it with small limits.
    """
    max_iterations: int = Field(3, ge=1, description="Upper bound on generation rounds")
    min_score: float = Field(
        90, ge=0, le=100,
        description="Quality gate: judge score needed to accept an iteration",
    )
    accept_fallback_evaluation: bool = Field(
        True,
        description=(
            "Whether an unparsable judge reply (fallback score) may pass the "
            "quality gate. When False the iteration is retried instead."
        ),
    )
