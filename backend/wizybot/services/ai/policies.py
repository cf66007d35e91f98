from enum import Enum


class ValidationFailurePolicy(str, Enum):
    """What an LLM-driven operation does when the model output fails validation"""
    PROPAGATE = "propagate"
    RETURN_EMPTY = "return_empty"
