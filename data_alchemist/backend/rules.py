"""Rules and priorities configuration exported from the rules card."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

DEFAULT_WEIGHTS: Dict[str, int] = {
    'accuracy': 80,
    'completeness': 70,
    'consistency': 90,
}

AI_RULE_PREFIX = 'AI Rule: '


def manual_rule(field_type: str, validation_type: str) -> str:
    """Describe a rule picked from the manual rule builder."""
    return f"{field_type}: {validation_type}"


def ai_rule(text: str) -> str:
    return f"{AI_RULE_PREFIX}{text.strip()}"


def build_rules_config(rules: List[str], weights: Optional[Dict[str, int]] = None) -> Dict[str, Any]:
    """Assemble the exported rules configuration.

    Weights not supplied fall back to :data:`DEFAULT_WEIGHTS`.  The
    timestamp is the current UTC time in ISO 8601 format.
    """
    merged = dict(DEFAULT_WEIGHTS)
    if weights:
        merged.update({k: int(v) for k, v in weights.items() if k in DEFAULT_WEIGHTS})
    return {
        'rules': list(rules),
        'weights': merged,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }
