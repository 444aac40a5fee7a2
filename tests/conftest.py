import pytest

from coursematch.problem import build_problem


@pytest.fixture
def contested_seat():
    """Two applicants want the one seat of C1, which prefers A2."""
    return build_problem(
        {"A1": ["C1"], "A2": ["C1"]},
        {"C1": ["A2", "A1"]},
    )


@pytest.fixture
def oversubscribed_course():
    return build_problem(
        {"A": ["X"], "B": ["X"], "C": ["X"]},
        {"X": ["A", "B", "C"]},
        {"X": 2},
    )


@pytest.fixture
def hospitals():
    """Five residents, three hospitals with two seats each."""
    return build_problem(
        {
            "A": ["C"],
            "S": ["C", "M"],
            "D": ["C", "M", "G"],
            "J": ["C", "G", "M"],
            "L": ["M", "C", "G"],
        },
        {
            "M": ["D", "L", "S", "J"],
            "C": ["D", "A", "S", "L", "J"],
            "G": ["D", "J", "L"],
        },
        {"M": 2, "C": 2, "G": 2},
    )
