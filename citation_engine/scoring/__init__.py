"""Citation authority scoring."""

from .authority_scorer import AuthorityScorer, calculate_authority_score

__all__ = ["AuthorityScorer", "calculate_authority_score"]
