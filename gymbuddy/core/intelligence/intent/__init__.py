"""Intent classification module."""

from .types import Intent, Confidence, IntentResult
from .rules import IntentRule, DEFAULT_RULES
from .classifier import (
    IntentClassifier,
    get_intent_classifier,
    classify_intent,
)

__all__ = [
    # Types
    "Intent",
    "Confidence",
    "IntentResult",
    # Rules
    "IntentRule",
    "DEFAULT_RULES",
    # Classifier
    "IntentClassifier",
    "get_intent_classifier",
    "classify_intent",
]
