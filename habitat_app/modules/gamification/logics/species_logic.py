"""
Species Logic - which adoptable species a learner has unlocked.

NO database, NO Flask, NO model dependencies allowed.
"""
from typing import Any, Collection, Iterable, List


def is_unlocked(units_required: int, units_completed: int) -> bool:
    return (units_required or 0) <= units_completed


def eligible_species(candidates: Iterable[Any], units_completed: int, adopted_ids: Collection[int]) -> List[Any]:
    """
    Candidates unlocked by ``units_completed`` that are not adopted yet.

    Each candidate needs ``species_id`` and ``units_required``; the result is
    ordered by threshold, lowest first.
    """
    unlocked = [
        species for species in candidates
        if species.species_id not in adopted_ids and is_unlocked(species.units_required, units_completed)
    ]
    return sorted(unlocked, key=lambda species: (species.units_required or 0, species.species_id))
