import logging
import math
import random

import pytest

from coursematch.errors import InvalidOrientationError
from coursematch.matching import Orientation, solve, solve_applicant_optimal, solve_course_optimal
from coursematch.problem import build_problem, clone_problem, create_best_course_problem, random_problem, snapshot
from coursematch.registry import Registry
from coursematch.stability import blocking_pairs, is_stable

SOLVERS = [solve_applicant_optimal, solve_course_optimal]


def _profile(problem):
    prefs = snapshot(problem)
    applicant_prefs = {a.name: prefs[a.name] for a in problem.applicants}
    course_prefs = {c.name: prefs[c.name] for c in problem.courses}
    capacities = {c.name: c.capacity for c in problem.courses}
    return applicant_prefs, course_prefs, capacities


def _is_subsequence(shorter, longer):
    it = iter(longer)
    return all(item in it for item in shorter)


@pytest.mark.parametrize("solver", SOLVERS)
def test_higher_ranked_applicant_takes_the_seat(contested_seat, solver):
    assert solver(contested_seat) == {"A1": [], "A2": ["C1"]}


@pytest.mark.parametrize("solver", SOLVERS)
def test_course_fills_capacity_in_its_order(oversubscribed_course, solver):
    assert solver(oversubscribed_course) == {"A": ["X"], "B": ["X"], "C": []}


@pytest.mark.parametrize("solver", SOLVERS)
def test_applicant_without_preferences_stays_unmatched(solver):
    problem = build_problem({"A": [], "B": ["C1"]}, {"C1": ["A", "B"]})
    assert solver(problem) == {"A": [], "B": ["C1"]}


@pytest.mark.parametrize("solver", SOLVERS)
def test_disjoint_pairs_do_not_interfere(solver):
    problem = build_problem(
        {"A1": ["C1"], "A2": ["C2"]},
        {"C1": ["A1"], "C2": ["A2"]},
        {"C1": 2, "C2": 1},
    )
    assert solver(problem) == {"A1": ["C1"], "A2": ["C2"]}


@pytest.mark.parametrize("solver", SOLVERS)
def test_hospitals_example(hospitals, solver):
    assert solver(hospitals) == {
        "A": ["C"],
        "S": ["M"],
        "D": ["C"],
        "J": ["G"],
        "L": ["M"],
    }


@pytest.mark.parametrize("solver", SOLVERS)
def test_unacceptable_applicant_is_not_admitted(solver):
    # X never listed B, so B may not take its spare seat
    problem = build_problem({"A": ["X"], "B": ["X"]}, {"X": ["A"]}, {"X": 2})
    assert solver(problem) == {"A": ["X"], "B": []}


def test_best_course_problem_fills_every_seat():
    problem = create_best_course_problem(10, [3, 3, 4])
    matching = solve_applicant_optimal(problem)
    assert sum(1 for courses in matching.values() if courses) == 10
    # Every resident ranks hospital 0 first; it keeps the three it ranks highest
    assert [r for r, c in matching.items() if c == ["Hospital number 0"]] == [
        "Resident-7", "Resident-8", "Resident-9",
    ]


@pytest.mark.parametrize("solver", SOLVERS)
@pytest.mark.parametrize("seed", range(15))
def test_random_profiles_are_stable(solver, seed):
    problem = random_problem(12, [2, 3, 1, 4], seed=seed, list_length=3)
    applicant_prefs, course_prefs, capacities = _profile(problem)

    matching = solver(problem)

    assert blocking_pairs(applicant_prefs, course_prefs, capacities, matching) == []
    assert is_stable(applicant_prefs, course_prefs, capacities, matching)


@pytest.mark.parametrize("solver", SOLVERS)
@pytest.mark.parametrize("seed", range(10))
def test_capacity_and_unit_demand(solver, seed):
    problem = random_problem(15, [1, 2, 3], seed=seed)
    registry = Registry(problem.entities())

    matching = solver(problem, registry=registry)

    for entity in problem.entities():
        assert registry.number_of_matches(entity) <= entity.capacity
    assert all(len(courses) <= 1 for courses in matching.values())
    assert set(matching) == {a.name for a in problem.applicants}


@pytest.mark.parametrize("solver", SOLVERS)
def test_preference_lists_only_shrink(solver):
    problem = random_problem(10, [2, 2, 3], seed=7, list_length=2)
    before = snapshot(problem)

    solver(problem)

    after = snapshot(problem)
    for name, prefs in after.items():
        assert _is_subsequence(prefs, before[name])


@pytest.mark.parametrize("seed", range(5))
def test_applicant_optimal_ignores_proposal_order(seed):
    problem = random_problem(14, [3, 2, 2, 4], seed=seed, list_length=3)
    rng = random.Random(seed)
    orders = [
        None,
        lambda free: 0,
        lambda free: rng.randrange(len(free)),
    ]

    results = [solve_applicant_optimal(clone_problem(problem), order=o) for o in orders]

    assert results[0] == results[1] == results[2]


@pytest.mark.parametrize("seed", range(8))
def test_applicants_weakly_prefer_their_optimal_matching(seed):
    problem = random_problem(10, [2, 2, 3], seed=seed, list_length=3)
    applicant_prefs, _, _ = _profile(problem)

    applicant_side = solve_applicant_optimal(clone_problem(problem))
    course_side = solve_course_optimal(clone_problem(problem))

    def rank(name, matching):
        held = matching[name]
        return applicant_prefs[name].index(held[0]) if held else math.inf

    for name in applicant_prefs:
        assert rank(name, applicant_side) <= rank(name, course_side)


def test_solving_is_destructive(hospitals):
    original = snapshot(clone_problem(hospitals))

    first = solve_applicant_optimal(hospitals)
    consumed = snapshot(hospitals)
    second = solve_applicant_optimal(hospitals)

    assert consumed != original
    assert second == first
    assert snapshot(hospitals) == consumed


def test_clone_can_be_solved_again(hospitals):
    fresh = clone_problem(hospitals)
    first = solve_course_optimal(hospitals)
    assert solve_course_optimal(fresh) == first


@pytest.mark.parametrize("orientation", ["applicant", "course", Orientation.APPLICANT, Orientation.COURSE])
def test_solve_dispatch(contested_seat, orientation):
    assert solve(contested_seat, orientation) == {"A1": [], "A2": ["C1"]}


def test_solve_rejects_unknown_orientation(contested_seat):
    with pytest.raises(InvalidOrientationError):
        solve(contested_seat, "sideways")


def test_solve_logs_summary(contested_seat, caplog):
    caplog.set_level(logging.INFO, logger="coursematch.matching")
    solve_applicant_optimal(contested_seat)
    assert "Applicant-optimal solve: 2 applicants, 1 courses" in caplog.text
