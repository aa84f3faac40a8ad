from .reputation_service import ReputationService, decide_action_for_score

__all__ = ["ReputationService", "decide_action_for_score"]
