"""Word lists and thresholds used by the trajectory heuristics."""

from dataclasses import dataclass
from typing import FrozenSet, Tuple


@dataclass(frozen=True)
class HeuristicVocabulary:
    """Immutable word sets consumed by the heuristic checks.

    Kept as a value object so a provider or locale can supply its own lists
    without touching module state.
    """
    
    stop_words: FrozenSet[str]
    action_words: Tuple[str, ...]
    
    def is_stop_word(self, token: str) -> bool:
        """Check if token is a stop word."""
        return token in self.stop_words
    
    def mentions_action(self, text: str) -> bool:
        """Check if text contains any action word as a substring."""
        lowered = text.lower()
        return any(word in lowered for word in self.action_words)


@dataclass(frozen=True)
class HeuristicThresholds:
    """Numeric limits for the heuristic checks."""
    
    min_seeker_messages: int = 3
    window_size: int = 5
    repetition_min_count: int = 3
    repetition_min_keywords: int = 2
    repetition_top_keywords: int = 3
    stall_min_messages: int = 5
    stall_action_ratio: float = 0.4
    disengagement_min_messages: int = 3
    disengagement_max_avg_length: float = 50.0


DEFAULT_STOP_WORDS: FrozenSet[str] = frozenset({
    "the", "and", "but", "for", "with", "this", "that", "have", "from",
    "they", "what", "when", "been", "their", "said", "each", "which",
    "about", "would", "there", "could", "other", "into", "than", "then",
    "them", "these", "some", "just", "like", "also", "can", "not", "are",
    "was", "were", "will", "more",
})

DEFAULT_ACTION_WORDS: Tuple[str, ...] = (
    "will", "going", "plan", "start", "begin", "try", "attempt", "commit",
    "decide", "choose", "change", "do", "make", "create", "build",
)

DEFAULT_VOCABULARY = HeuristicVocabulary(
    stop_words=DEFAULT_STOP_WORDS,
    action_words=DEFAULT_ACTION_WORDS,
)

DEFAULT_THRESHOLDS = HeuristicThresholds()
