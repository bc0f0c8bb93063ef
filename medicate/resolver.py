"""
Consensus over scored candidates.

Responsibilities:
- Group candidates by cleaned name.
- Rank groups, rewarding repetition across sources.
- Derive a confidence level from the gap between the top two groups.

Non-Responsibilities:
- No network access.
- No logging or persistence.

Invariant:
This module must be deterministic given the same inputs.
"""

from typing import Any, Dict, Iterable, List, Optional, Union

from .models import Group, RankedGroup, RawCandidate, Resolution, ScoredCandidate
from .normalize import clean_product_name
from .scoring import score_candidate

REPETITION_BONUS = 3
MAX_ALTERNATIVES = 5

SINGLE_GROUP_CONFIDENCE = 0.96
# (minimum gap, confidence), checked top-down
CONFIDENCE_STEPS = (
    (20, 0.97),
    (10, 0.90),
    (5, 0.80),
)
FLOOR_CONFIDENCE = 0.60


def group_candidates(scored: Iterable[ScoredCandidate]) -> List[Group]:
    """Partition candidates by case-insensitive cleaned name, in first-seen order."""
    groups: Dict[str, Group] = {}
    for candidate in scored:
        key = candidate.cleaned.lower()
        group = groups.get(key)
        if group is None:
            group = groups[key] = Group(name=candidate.cleaned)
        group.add(candidate)
    return list(groups.values())


def final_score(group: Group) -> float:
    return group.total_score / group.count + group.count * REPETITION_BONUS


def rank_groups(groups: Iterable[Group]) -> List[RankedGroup]:
    ranked = [RankedGroup(group=g, final_score=final_score(g)) for g in groups if g.count]
    # sorted() is stable, so exact ties keep encounter order
    return sorted(ranked, key=lambda r: r.final_score, reverse=True)


def confidence_from_gap(best: RankedGroup, second: Optional[RankedGroup]) -> float:
    if second is None:
        return SINGLE_GROUP_CONFIDENCE
    diff = best.final_score - second.final_score
    for threshold, confidence in CONFIDENCE_STEPS:
        if diff >= threshold:
            return confidence
    return FLOOR_CONFIDENCE


def aggregate(scored: Iterable[ScoredCandidate]) -> Optional[Resolution]:
    """Pick the winning product name; None when there is nothing to pick from."""
    ranked = rank_groups(group_candidates(scored))
    if not ranked:
        return None

    best = ranked[0]
    second = ranked[1] if len(ranked) > 1 else None
    return Resolution(
        name=best.name,
        confidence=confidence_from_gap(best, second),
        sample_url=best.sample_url,
        candidates=ranked[:MAX_ALTERNATIVES],
    )


def analyse_candidate(item: Union[RawCandidate, Dict[str, Any]]) -> Optional[ScoredCandidate]:
    candidate = item if isinstance(item, RawCandidate) else RawCandidate.from_item(item)
    return score_candidate(candidate, clean_product_name(candidate.title))


def score_all(items: Iterable[Union[RawCandidate, Dict[str, Any]]]) -> List[ScoredCandidate]:
    """Normalize and score every item, dropping those with no usable name."""
    scored = []
    for item in items:
        analysed = analyse_candidate(item)
        if analysed is not None:
            scored.append(analysed)
    return scored


def pick_best(items: Iterable[Union[RawCandidate, Dict[str, Any]]]) -> Optional[Resolution]:
    """Run the full normalize -> score -> aggregate pipeline over raw search items."""
    return aggregate(score_all(items))
