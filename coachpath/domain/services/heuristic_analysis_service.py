"""Deterministic trajectory heuristics (first classification tier)."""

import math
import re
from typing import Dict, List, Optional, Sequence

from ..entities import Message, ProgressIndicator
from ..value_objects import (
    HeuristicVocabulary, HeuristicThresholds, DEFAULT_VOCABULARY, DEFAULT_THRESHOLDS
)

_NON_WORD = re.compile(r"[^\w\s]")


class HeuristicAnalysisService:
    """Domain service running cheap text checks over recent seeker messages.
    
    Checks run in a fixed order and the first match wins:
    keyword repetition (drift), no progress (stall), disengagement (drift).
    """
    
    def __init__(
        self,
        vocabulary: HeuristicVocabulary = DEFAULT_VOCABULARY,
        thresholds: HeuristicThresholds = DEFAULT_THRESHOLDS
    ):
        self.vocabulary = vocabulary
        self.thresholds = thresholds
    
    def analyze(
        self,
        session_id: str,
        messages: Sequence[Message],
        engagement_id: Optional[str] = None
    ) -> Optional[ProgressIndicator]:
        """Run all checks and return the first finding, if any."""
        
        window = self.seeker_window(messages)
        if window is None:
            return None
        
        keywords = self.check_keyword_repetition(window)
        if keywords:
            return ProgressIndicator.from_keyword_repetition(
                session_id, keywords, engagement_id=engagement_id
            )
        
        if len(window) >= self.thresholds.stall_min_messages:
            action_count = self.check_no_progress(window)
            if action_count is not None:
                return ProgressIndicator.from_no_progress(
                    session_id, action_count, len(window), engagement_id=engagement_id
                )
        
        avg_length = self.check_disengagement(window)
        if avg_length is not None:
            return ProgressIndicator.from_disengagement(
                session_id, avg_length, engagement_id=engagement_id
            )
        
        return None
    
    def seeker_window(self, messages: Sequence[Message]) -> Optional[List[Message]]:
        """Most recent seeker messages, or None if there are too few."""
        seeker_messages = [msg for msg in messages if msg.is_seeker_message]
        
        if len(seeker_messages) < self.thresholds.min_seeker_messages:
            return None
        
        return seeker_messages[-self.thresholds.window_size:]
    
    def tokenize(self, text: str) -> List[str]:
        """Lowercase, strip punctuation and drop short and stop words."""
        words = _NON_WORD.sub(" ", text.lower()).split()
        return [
            word for word in words
            if len(word) >= 3 and not self.vocabulary.is_stop_word(word)
        ]
    
    def check_keyword_repetition(self, window: Sequence[Message]) -> Optional[List[str]]:
        """Return the top repeated keywords, or None if fewer than required."""
        
        # dict keeps first-seen order, so the sort below breaks ties by it
        counts: Dict[str, int] = {}
        for message in window:
            for word in self.tokenize(message.content):
                counts[word] = counts.get(word, 0) + 1
        
        repeated = [
            (word, count) for word, count in counts.items()
            if count >= self.thresholds.repetition_min_count
        ]
        repeated.sort(key=lambda item: item[1], reverse=True)
        keywords = [word for word, _ in repeated[:self.thresholds.repetition_top_keywords]]
        
        if len(keywords) >= self.thresholds.repetition_min_keywords:
            return keywords
        
        return None
    
    def check_no_progress(self, window: Sequence[Message]) -> Optional[int]:
        """Return the action-message count if too few messages talk about acting."""
        action_count = sum(
            1 for message in window if self.vocabulary.mentions_action(message.content)
        )
        
        if action_count < len(window) * self.thresholds.stall_action_ratio:
            return action_count
        
        return None
    
    def check_disengagement(self, window: Sequence[Message]) -> Optional[int]:
        """Return the rounded average length if replies are short."""
        if len(window) < self.thresholds.disengagement_min_messages:
            return None
        
        avg_length = sum(msg.get_message_length() for msg in window) / len(window)
        
        if avg_length < self.thresholds.disengagement_max_avg_length:
            # Half-up rounding
            return int(math.floor(avg_length + 0.5))
        
        return None
