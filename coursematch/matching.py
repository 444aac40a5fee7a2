"""Capacitated deferred acceptance (Roth–Shapley) in both proposing orientations."""

import logging
from enum import Enum
from typing import Callable, List, Optional, Union

from coursematch.errors import InvalidOrientationError
from coursematch.models import INFINITE_RANK, Entity, Optimisation
from coursematch.registry import Matching, Registry, delete_pair

logger = logging.getLogger(__name__)

# Picks the index of the next applicant to take from the free list
FreeListOrder = Callable[[List[Entity]], int]


class Orientation(str, Enum):
    APPLICANT = "applicant"
    COURSE = "course"


def _last(free: List[Entity]) -> int:
    return len(free) - 1


def _count_matched(matching: Matching) -> int:
    return sum(1 for courses in matching.values() if courses)


def solve_applicant_optimal(
    problem: Optimisation,
    order: Optional[FreeListOrder] = None,
    registry: Optional[Registry] = None,
) -> Matching:
    """Run applicant-proposing DA; returns the applicant-optimal stable matching.

    Consumes the preference lists of `problem`. Pass a `registry` to inspect the
    final engagements afterwards.
    """
    pick = order or _last
    registry = registry if registry is not None else Registry(problem.entities())
    free: List[Entity] = [a for a in problem.applicants if a.has_preference()]
    steps = 0

    while free:
        applicant = free.pop(pick(free))
        course = applicant.top_preference()
        if course is None:
            continue
        steps += 1

        if course.rank(applicant) == INFINITE_RANK:
            # The course never listed this applicant
            logger.debug("%s is not acceptable to %s", applicant.name, course.name)
            applicant.remove_preference(course)
            free.append(applicant)
            continue

        registry.engage(applicant, course)
        logger.debug("%s proposes to %s", applicant.name, course.name)

        if registry.is_over_capacity(course):
            evicted = registry.worst_partner(course)
            registry.disengage(evicted, course)
            free.append(evicted)
            logger.debug("%s evicts %s", course.name, evicted.name)

        if registry.is_full(course):
            worst = registry.worst_partner(course)
            for successor in course.successors_of(worst):
                delete_pair(successor, course)

    matching = registry.extract_matching()
    logger.info(
        "Applicant-optimal solve: %d applicants, %d courses, %d proposals, %d matched",
        len(problem.applicants), len(problem.courses), steps, _count_matched(matching),
    )
    return matching


def solve_course_optimal(problem: Optimisation, registry: Optional[Registry] = None) -> Matching:
    """Run course-proposing DA; returns the course-optimal stable matching.

    Courses offer seats down their lists. An applicant always accepts a new
    offer, since every course it ranks below its current hold has already been
    struck from its list.
    """
    registry = registry if registry is not None else Registry(problem.entities())
    steps = 0
    sweeps = 0

    progressed = True
    while progressed:
        progressed = False
        sweeps += 1
        for course in problem.courses:
            if not registry.is_available(course):
                continue
            applicant = registry.available_preference(course)
            progressed = True
            steps += 1

            if applicant.rank(course) == INFINITE_RANK:
                logger.debug("%s does not rank %s", applicant.name, course.name)
                delete_pair(course, applicant)
                continue

            if registry.is_else_assigned(course, applicant):
                held = registry.current_match(applicant)
                registry.disengage(held, applicant)
                logger.debug("%s leaves %s for %s", applicant.name, held.name, course.name)

            registry.engage(course, applicant)
            logger.debug("%s offers a seat to %s", course.name, applicant.name)

            for successor in applicant.successors_of(course):
                delete_pair(successor, applicant)

    matching = registry.extract_matching()
    logger.info(
        "Course-optimal solve: %d applicants, %d courses, %d offers in %d sweeps, %d matched",
        len(problem.applicants), len(problem.courses), steps, sweeps, _count_matched(matching),
    )
    return matching


def solve(problem: Optimisation, orientation: Union[Orientation, str] = Orientation.APPLICANT) -> Matching:
    try:
        orientation = Orientation(orientation)
    except ValueError:
        raise InvalidOrientationError(
            f"Unknown orientation {orientation!r}; expected one of "
            f"{', '.join(o.value for o in Orientation)}"
        ) from None

    if orientation is Orientation.APPLICANT:
        return solve_applicant_optimal(problem)
    return solve_course_optimal(problem)
