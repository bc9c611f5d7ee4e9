"""
Event Handlers for Gamification Module.

Listens to signals from the completion flow. Challenge contributions and
species adoptions are side effects of a first completion; a failure here is
logged and never undoes the completion itself.
"""
from flask import current_app

from habitat_app.core.signals import unit_completed, xp_awarded


@unit_completed.connect
def on_unit_completed(sender, **kwargs):
    """
    Feed environmental challenges and unlock species from a first completion.

    Expected kwargs:
        - user_id: int
        - unit_id: str
        - ecosystem: str | None
        - region_codes: list[str]
        - xp_awarded: int

    Returns {'challenges': [...], 'species_unlocked': [...]}.
    """
    from .services.challenge_service import ChallengeService
    from .services.species_service import SpeciesService

    user_id = kwargs.get('user_id')
    ecosystem = kwargs.get('ecosystem')
    outcome = {'challenges': [], 'species_unlocked': []}
    if not user_id or not ecosystem:
        return outcome

    try:
        outcome['challenges'] = ChallengeService.contribute_from_unit(
            user_id=user_id,
            unit_id=kwargs.get('unit_id'),
            ecosystem=ecosystem,
            region_codes=kwargs.get('region_codes') or [],
        )
    except Exception as e:
        current_app.logger.error(f"[Gamification] Error contributing to challenges: {e}", exc_info=True)

    challenge_id = outcome['challenges'][0]['challenge_id'] if outcome['challenges'] else None
    try:
        outcome['species_unlocked'] = SpeciesService.unlock_for_ecosystem(
            user_id, ecosystem, challenge_id=challenge_id
        )
    except Exception as e:
        current_app.logger.error(f"[Gamification] Error unlocking species: {e}", exc_info=True)

    return outcome


@xp_awarded.connect
def on_xp_awarded(sender, **kwargs):
    current_app.logger.debug(
        f"[Gamification] XP awarded: user={kwargs.get('user_id')}, "
        f"amount={kwargs.get('amount')}, total={kwargs.get('new_total')}"
    )
