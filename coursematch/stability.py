"""
Check a matching against the preferences it was computed from.

Solving consumes preference lists, so these functions work on name-keyed
snapshots taken before the solve (see `problem.snapshot`).
"""

from typing import Dict, List, Mapping, Sequence, Tuple

from coursematch.registry import Matching


def course_assignments(matching: Matching) -> Dict[str, List[str]]:
    """Invert an applicant-keyed matching into course -> applicants."""
    assigned: Dict[str, List[str]] = {}
    for applicant, courses in matching.items():
        for course in courses:
            assigned.setdefault(course, []).append(applicant)
    return assigned


def blocking_pairs(
    applicant_prefs: Mapping[str, Sequence[str]],
    course_prefs: Mapping[str, Sequence[str]],
    capacities: Mapping[str, int],
    matching: Matching,
) -> List[Tuple[str, str]]:
    """
    Every (applicant, course) pair that would both rather be matched to each other.

    A pair only blocks when each side lists the other. The applicant must prefer
    the course to its current one (or be unmatched); the course must have a free
    seat or hold someone it ranks below the applicant.
    """
    held = course_assignments(matching)
    course_rank = {c: {a: r for r, a in enumerate(prefs)} for c, prefs in course_prefs.items()}
    pairs = []

    for applicant, prefs in applicant_prefs.items():
        current = matching.get(applicant) or []
        for course in prefs:
            if course in current:
                break  # everything further down is worse than what it has
            ranks = course_rank.get(course, {})
            if applicant not in ranks:
                continue
            holders = held.get(course, [])
            if len(holders) < capacities.get(course, 1):
                pairs.append((applicant, course))
            elif any(ranks.get(h, len(ranks)) > ranks[applicant] for h in holders):
                pairs.append((applicant, course))

    return pairs


def is_stable(
    applicant_prefs: Mapping[str, Sequence[str]],
    course_prefs: Mapping[str, Sequence[str]],
    capacities: Mapping[str, int],
    matching: Matching,
) -> bool:
    return not blocking_pairs(applicant_prefs, course_prefs, capacities, matching)
