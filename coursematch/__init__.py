"""Stable many-to-one matching of applicants to capacitated courses."""

from coursematch.errors import (
    DuplicatePreferenceError,
    InvalidCapacityError,
    InvalidOrientationError,
    MatchingError,
    ProblemFormatError,
    UnknownEntityError,
)
from coursematch.matching import Orientation, solve, solve_applicant_optimal, solve_course_optimal
from coursematch.models import Entity, Optimisation, Role
from coursematch.problem import (
    build_problem,
    clone_problem,
    create_applicant,
    create_course,
    create_entity,
    describe,
    to_string,
)
from coursematch.registry import Registry, extract_matching

__version__ = "0.1.0"
