"""AI agents package."""

from kgb_assistant.agents.ai_agents import (
    PromotionAgent,
    PromotionAgentError,
    PromotionCandidate,
    PromotionSuggestion,
    PromotionSuggestionResult,
    candidate_from_record,
)

__all__ = [
    "PromotionAgent",
    "PromotionAgentError",
    "PromotionCandidate",
    "PromotionSuggestion",
    "PromotionSuggestionResult",
    "candidate_from_record",
]
