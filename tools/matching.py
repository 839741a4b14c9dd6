from functools import reduce
from typing import Any, Optional, Sequence, Union

from tools.models import DealHit, LeadHit, MatchCandidate

Hit = Union[LeadHit, DealHit]

TITLE_WEIGHT = 3
ORGANIZATION_WEIGHT = 2
PERSON_WEIGHT = 1


def _contains(value: Optional[str], term_lower: str) -> bool:
    return term_lower in (value or "").lower()


def score_hit(hit: Hit, term: str) -> int:
    """Additive case-insensitive match score of a hit against the search term."""
    term_lower = term.lower()
    score = 0
    if _contains(hit.title, term_lower):
        score += TITLE_WEIGHT
    if _contains(hit.organization_name(), term_lower):
        score += ORGANIZATION_WEIGHT
    if _contains(hit.person_name(), term_lower):
        score += PERSON_WEIGHT
    return score


def remote_score_higher(score: Optional[float], other: Optional[float]) -> bool:
    """Strict comparison of remote scores; a missing score never compares greater."""
    if score is None or other is None:
        return False
    return score > other


def _outranks(candidate: MatchCandidate, best: MatchCandidate) -> bool:
    if candidate.score != best.score:
        return candidate.score > best.score
    return remote_score_higher(candidate.result_score, best.result_score)


def find_best_match(items: Sequence[Hit], term: str) -> Optional[MatchCandidate]:
    """
    Rank every hit by local score, breaking ties on the remote result score.

    The fold starts from a sentinel scoring -1, so any non-empty list yields a
    candidate even when nothing matches the term. Earlier hits win full ties.

    Args:
        items: Hits of one search
        term: Search term

    Returns:
        Best candidate, or None for an empty or non-list input
    """
    if not isinstance(items, (list, tuple)) or not items:
        return None

    sentinel = MatchCandidate(hit=None, score=-1, result_score=-1)

    def keep_better(best: MatchCandidate, hit: Hit) -> MatchCandidate:
        candidate = MatchCandidate(hit=hit, score=score_hit(hit, term), result_score=hit.result_score)
        return candidate if _outranks(candidate, best) else best

    best = reduce(keep_better, items, sentinel)
    return best if best.hit is not None else None


def find_best_gated_match(items: Any, term: str) -> Optional[Hit]:
    """
    Pick among hits matching the term in at least one field.

    The first matching hit is kept unless a later matching hit carries a
    non-zero remote score strictly above it.
    """
    if not isinstance(items, (list, tuple)):
        return None

    best = None
    for hit in items:
        if score_hit(hit, term) == 0:
            continue
        if best is None or (hit.result_score and remote_score_higher(hit.result_score, best.result_score)):
            best = hit
    return best


def pick_summary_target(best_lead: Optional[Hit], best_deal: Optional[Hit]) -> Optional[Hit]:
    """Lead wins only without a deal or with a strictly higher remote score."""
    if best_lead is not None and (best_deal is None or remote_score_higher(best_lead.result_score, best_deal.result_score)):
        return best_lead
    return best_deal
