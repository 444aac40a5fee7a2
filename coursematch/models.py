"""Participants of a matching problem and their ranked preference lists."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from coursematch.errors import DuplicatePreferenceError, InvalidCapacityError

INFINITE_RANK = math.inf


class Role(str, Enum):
    APPLICANT = "applicant"
    COURSE = "course"


@dataclass(eq=False)
class Entity:
    """One applicant or course.

    `preferences` holds the other side's entities, most preferred first, and
    only ever shrinks once solving starts. `rank_table` maps each remaining
    preference's name to its index in `preferences`.
    """
    name: str
    role: Role = Role.APPLICANT
    capacity: int = 1
    preferences: List["Entity"] = field(default_factory=list, repr=False)
    rank_table: Dict[str, int] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        if self.capacity <= 0:
            raise InvalidCapacityError(
                f"{self.name}: capacity must be at least 1, got {self.capacity}"
            )
        if self.role is Role.APPLICANT and self.capacity != 1:
            raise InvalidCapacityError(
                f"{self.name}: applicants have unit demand, got capacity {self.capacity}"
            )

    @property
    def is_applicant(self) -> bool:
        return self.role is Role.APPLICANT

    def add_preference(self, other: "Entity") -> None:
        if other.name in self.rank_table:
            raise DuplicatePreferenceError(
                f"{other.name} is already in the preference list of {self.name}"
            )
        self.preferences.append(other)
        self.rank_table[other.name] = len(self.preferences) - 1

    def add_preferences(self, others: Iterable["Entity"]) -> None:
        for other in others:
            self.add_preference(other)

    def remove_preference(self, other: "Entity") -> None:
        """Drop `other` and shift every later preference up one rank. Absent is a no-op."""
        index = self.rank_table.pop(other.name, None)
        if index is None:
            return
        del self.preferences[index]
        for later in self.preferences[index:]:
            self.rank_table[later.name] -= 1

    def top_preference(self) -> Optional["Entity"]:
        return self.preferences[0] if self.preferences else None

    def next_preference(self) -> Optional["Entity"]:
        """Pop the most preferred entity, or None once the list is exhausted."""
        top = self.top_preference()
        if top is not None:
            self.remove_preference(top)
        return top

    def has_preference(self) -> bool:
        return len(self.preferences) > 0

    def rank(self, other: "Entity") -> float:
        return self.rank_table.get(other.name, INFINITE_RANK)

    def prefers(self, first: "Entity", second: "Entity") -> bool:
        return self.rank(first) < self.rank(second)

    def successors_of(self, after: "Entity") -> List["Entity"]:
        """Every remaining preference ranked strictly worse than `after`."""
        index = self.rank_table.get(after.name)
        if index is None:
            return []
        return self.preferences[index + 1:]


@dataclass
class Optimisation:
    courses: List[Entity] = field(default_factory=list)
    applicants: List[Entity] = field(default_factory=list)

    def entities(self) -> List[Entity]:
        return self.applicants + self.courses
