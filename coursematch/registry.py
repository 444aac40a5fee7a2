"""Tentative engagements between applicants and courses during a solve."""

import logging
from typing import Dict, Iterable, List, Optional

from coursematch import config
from coursematch.errors import UnknownEntityError
from coursematch.models import Entity

logger = logging.getLogger(__name__)

Matching = Dict[str, List[str]]


def delete_pair(first: Entity, second: Entity) -> None:
    """Remove the preference edge between two entities in both directions."""
    first.remove_preference(second)
    second.remove_preference(first)


class Registry:
    """
    Maps every entity name to the entities it is currently engaged with.

    Engagements are symmetric: engaging a course with an applicant records each
    in the other's list. Capacity is never checked here; the engine evicts.
    """

    def __init__(self, entities: Iterable[Entity] = (), strict: Optional[bool] = None):
        self.strict = config.STRICT_REGISTRY if strict is None else strict
        self.engagements: Dict[str, List[Entity]] = {}
        self.entities: Dict[str, Entity] = {}
        for entity in entities:
            self._track(entity)

    def _track(self, entity: Entity) -> None:
        known = self.entities.get(entity.name)
        if known is None:
            self.entities[entity.name] = entity
            self.engagements[entity.name] = []
        elif known is not entity:
            raise UnknownEntityError(f"Another entity is already registered as {entity.name!r}")

    # --- mutations ---

    def engage(self, first: Entity, second: Entity) -> None:
        self._track(first)
        self._track(second)
        self.engagements[first.name].append(second)
        self.engagements[second.name].append(first)

    def disengage(self, first: Entity, second: Entity) -> None:
        if not self.is_engaged(first, second):
            if self.strict:
                raise UnknownEntityError(f"{first.name} and {second.name} are not engaged")
            return
        self.engagements[first.name] = [e for e in self.engagements[first.name] if e.name != second.name]
        self.engagements[second.name] = [e for e in self.engagements[second.name] if e.name != first.name]

    # --- queries ---

    def number_of_matches(self, entity: Entity) -> int:
        return len(self.engagements.get(entity.name, ()))

    def is_full(self, entity: Entity) -> bool:
        return self.number_of_matches(entity) >= entity.capacity

    def is_over_capacity(self, entity: Entity) -> bool:
        return self.number_of_matches(entity) > entity.capacity

    def is_under_subscribed(self, entity: Entity) -> bool:
        return self.number_of_matches(entity) < entity.capacity

    def is_unmatched(self, entity: Entity) -> bool:
        return self.number_of_matches(entity) == 0

    def current_partners(self, entity: Entity) -> List[Entity]:
        return list(self.engagements.get(entity.name, ()))

    def current_match(self, entity: Entity) -> Optional[Entity]:
        partners = self.engagements.get(entity.name)
        return partners[0] if partners else None

    def is_engaged(self, first: Entity, second: Entity) -> bool:
        return any(e.name == second.name for e in self.engagements.get(first.name, ()))

    def is_else_assigned(self, course: Entity, applicant: Entity) -> bool:
        """True when `applicant` holds a course other than `course`."""
        held = self.current_match(applicant)
        return held is not None and held.name != course.name

    def worst_partner(self, entity: Entity) -> Optional[Entity]:
        """The engaged partner `entity` ranks lowest; the first one wins a tie."""
        worst = None
        worst_rank = -1
        for partner in self.engagements.get(entity.name, ()):
            rank = entity.rank(partner)
            if rank > worst_rank:
                worst, worst_rank = partner, rank
        return worst

    def available_preference(self, course: Entity) -> Optional[Entity]:
        """First remaining preference of `course` it does not already hold."""
        for candidate in course.preferences:
            if not self.is_engaged(course, candidate):
                return candidate
        return None

    def is_available(self, course: Entity) -> bool:
        """Can `course` still make an offer: room left and someone left to ask."""
        return self.is_under_subscribed(course) and self.available_preference(course) is not None

    def all_satisfied(self, entities: Iterable[Entity]) -> bool:
        return all(not self.is_unmatched(e) or not e.has_preference() for e in entities)

    # --- result ---

    def extract_matching(self) -> Matching:
        """Applicant name -> names of the courses it holds (zero or one)."""
        return {
            name: [partner.name for partner in self.engagements[name]]
            for name, entity in self.entities.items()
            if entity.is_applicant
        }


def extract_matching(registry: Registry) -> Matching:
    return registry.extract_matching()
