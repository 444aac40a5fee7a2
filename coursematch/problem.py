"""Building, copying, loading and printing matching problems."""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from coursematch import config
from coursematch.errors import ProblemFormatError, UnknownEntityError
from coursematch.models import Entity, Optimisation, Role

logger = logging.getLogger(__name__)

CAPACITY_COLUMN = "Capacity"


# --- construction ---

def create_entity(name: str, capacity: int = 1, role: Role = Role.APPLICANT) -> Entity:
    return Entity(name=name, role=role, capacity=capacity)


def create_applicant(name: str) -> Entity:
    return create_entity(name)


def create_course(name: str, capacity: int = config.DEFAULT_CAPACITY) -> Entity:
    return create_entity(name, capacity, Role.COURSE)


def _wire(entity: Entity, names: Iterable[str], others: Mapping[str, Entity]) -> None:
    for name in names:
        if name not in others:
            raise UnknownEntityError(f"{entity.name} ranks unknown entity {name!r}")
        entity.add_preference(others[name])


def build_problem(
    applicant_prefs: Mapping[str, Sequence[str]],
    course_prefs: Mapping[str, Sequence[str]],
    capacities: Optional[Mapping[str, int]] = None,
) -> Optimisation:
    """Create entities from name-keyed preference lists, most preferred first."""
    shared = set(applicant_prefs) & set(course_prefs)
    if shared:
        raise ProblemFormatError(
            f"Names must be unique across applicants and courses: {', '.join(sorted(shared))}"
        )
    capacities = capacities or {}
    applicants = {name: create_applicant(name) for name in applicant_prefs}
    courses = {
        name: create_course(name, int(capacities.get(name, config.DEFAULT_CAPACITY)))
        for name in course_prefs
    }
    for name, prefs in applicant_prefs.items():
        _wire(applicants[name], prefs, courses)
    for name, prefs in course_prefs.items():
        _wire(courses[name], prefs, applicants)
    return Optimisation(courses=list(courses.values()), applicants=list(applicants.values()))


def create_best_course_problem(n_residents: int, capacities: Sequence[int]) -> Optimisation:
    """Residents rank hospitals in order; hospitals rank residents in reverse order."""
    applicants = [create_applicant(f"Resident-{i}") for i in range(n_residents)]
    courses = [create_course(f"Hospital number {i}", c) for i, c in enumerate(capacities)]

    for resident in applicants:
        resident.add_preferences(courses)
    reversed_residents = applicants[::-1]
    for hospital in courses:
        hospital.add_preferences(reversed_residents)

    return Optimisation(courses=courses, applicants=applicants)


def random_problem(
    n_applicants: int,
    capacities: Sequence[int],
    seed: Optional[int] = None,
    list_length: Optional[int] = None,
) -> Optimisation:
    """Uniformly random strict preferences on both sides.

    `list_length` truncates every applicant's list, leaving some pairs unacceptable.
    """
    rng = np.random.default_rng(seed)
    applicants = [create_applicant(f"A{i}") for i in range(n_applicants)]
    courses = [create_course(f"C{j}", c) for j, c in enumerate(capacities)]
    length = len(courses) if list_length is None else min(list_length, len(courses))

    for applicant in applicants:
        order = rng.permutation(len(courses))[:length]
        applicant.add_preferences(courses[j] for j in order)
    for course in courses:
        order = rng.permutation(n_applicants)
        course.add_preferences(applicants[i] for i in order)

    return Optimisation(courses=courses, applicants=applicants)


# --- copies ---

def snapshot(problem: Optimisation) -> Dict[str, List[str]]:
    """Current preference names of every entity, keyed by entity name."""
    return {e.name: [p.name for p in e.preferences] for e in problem.entities()}


def clone_problem(problem: Optimisation) -> Optimisation:
    """Fresh entities with the same names, capacities and remaining preferences."""
    prefs = snapshot(problem)
    applicant_prefs = {a.name: prefs[a.name] for a in problem.applicants}
    course_prefs = {c.name: prefs[c.name] for c in problem.courses}
    capacities = {c.name: c.capacity for c in problem.courses}
    return build_problem(applicant_prefs, course_prefs, capacities)


# --- presentation ---

def describe(entity: Entity) -> str:
    capacity = f" (capacity={entity.capacity})" if entity.capacity > 1 else ""
    names = ", ".join(p.name for p in entity.preferences)
    return f"{entity.name}{capacity} prefers: {names}"


def to_string(problem: Optimisation) -> Dict[str, List[str]]:
    return {
        "courses": [describe(c) for c in problem.courses],
        "applicants": [describe(a) for a in problem.applicants],
    }


# --- tables ---

def read_table(file_obj) -> pd.DataFrame:
    """Read an uploaded Excel or CSV file."""
    filename = (getattr(file_obj, "filename", None) or getattr(file_obj, "name", "") or "").lower()

    if filename.endswith(".xlsx") or filename.endswith(".xls"):
        return pd.read_excel(file_obj, engine="openpyxl" if filename.endswith(".xlsx") else None)
    elif filename.endswith(".csv"):
        return pd.read_csv(file_obj, encoding="utf-8-sig")
    else:
        raise ProblemFormatError(
            f"Unsupported file format {filename!r}; expected one of {', '.join(config.ALLOWED_EXTENSIONS)}"
        )


def _ranked_names(df: pd.DataFrame) -> Dict[str, List[str]]:
    """
    Read a rank matrix:
    - first column: entity name
    - other columns: names of the other side
    - values: integer ranks, 1 = most preferred, blank = not acceptable
    """
    if df.empty or len(df.columns) < 1:
        raise ProblemFormatError("Ranking table is empty")

    name_col = df.columns[0]
    rank_cols = [c for c in df.columns[1:] if str(c).strip() != CAPACITY_COLUMN]
    result: Dict[str, List[str]] = {}

    for row_number, row in df.iterrows():
        name = str(row[name_col]).strip()
        if not name or name.lower() == "nan":
            continue
        if name in result:
            raise ProblemFormatError(f"Duplicate row for {name!r}")

        ranked = []
        for col in rank_cols:
            value = row[col]
            if pd.isna(value) or str(value).strip() == "":
                continue
            try:
                ranked.append((float(value), str(col).strip()))
            except (TypeError, ValueError):
                raise ProblemFormatError(
                    f"Row {row_number} ({name}): rank {value!r} for {col!r} is not a number"
                ) from None

        # sorted() is stable, so equal ranks keep column order
        result[name] = [other for _, other in sorted(ranked, key=lambda item: item[0])]

    return result


def problem_from_rank_tables(
    applicants_df: pd.DataFrame,
    courses_df: pd.DataFrame,
    capacities: Optional[Mapping[str, int]] = None,
) -> Optimisation:
    applicant_prefs = _ranked_names(applicants_df)
    course_prefs = _ranked_names(courses_df)

    if capacities is None:
        capacities = {}
        if CAPACITY_COLUMN in [str(c).strip() for c in courses_df.columns]:
            name_col = courses_df.columns[0]
            cap_col = next(c for c in courses_df.columns if str(c).strip() == CAPACITY_COLUMN)
            for _, row in courses_df.iterrows():
                name = str(row[name_col]).strip()
                if name in course_prefs and pd.notna(row[cap_col]):
                    try:
                        capacities[name] = int(row[cap_col])
                    except (TypeError, ValueError):
                        raise ProblemFormatError(f"Capacity of {name!r} is not an integer") from None

    logger.info(
        "Loaded %d applicants and %d courses from rank tables",
        len(applicant_prefs), len(course_prefs),
    )
    return build_problem(applicant_prefs, course_prefs, capacities)
