"""Prompts for rule-guided trajectory classification."""

import json
from typing import Any, Dict, List

SYSTEM_PROMPT = "You are a trajectory analysis expert. Respond only with valid JSON."

CLASSIFICATION_PROMPT = """Classify the seeker's recent direction vs the provider's trajectory_rules.

Output STRICT JSON ONLY:
{{
  "indicator_type": "drift"|"leap"|"stall"|"steady",
  "matched_rule_index": number|null,
  "reason": string
}}

Inputs:
- recent_messages: {recent_messages}
- provider_config.trajectory_rules: {trajectory_rules}

Rules:
- drift: repetition/rumination in same stage without new behavior
- leap: jumping to advanced outcomes before foundations
- stall: active talk without cognitive/behavioral shift across several turns
- steady: normal incremental movement

If none match: {{"indicator_type":"steady","matched_rule_index":null,"reason":"no rule matched"}}."""


def build_classification_messages(
    recent_messages: List[Dict[str, str]],
    trajectory_rules: List[Dict[str, Any]]
) -> List[Dict[str, str]]:
    """Build the chat-completion message list for one classification call."""
    prompt = CLASSIFICATION_PROMPT.format(
        recent_messages=json.dumps(recent_messages, ensure_ascii=False),
        trajectory_rules=json.dumps(trajectory_rules, ensure_ascii=False)
    )
    
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]
