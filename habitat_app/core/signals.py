"""
Central Signal Registry for Event-Driven Architecture.

Uses blinker (Flask's signal backend) to enable decoupled
communication between modules.

Usage:
    # Publisher (sender)
    from habitat_app.core.signals import unit_completed
    unit_completed.send(None, user_id=1, unit_id='marine-01', ...)

    # Subscriber (receiver) - in module's events.py
    @unit_completed.connect
    def on_unit_completed(sender, **kwargs):
        ...
"""
from blinker import Namespace

learning_signals = Namespace()

# Signal: Fired once per (learner, unit) when a unit is completed for the first time
# Payload includes: user_id, unit_id, ecosystem, region_codes, xp_awarded
unit_completed = learning_signals.signal('unit_completed')

# Signal: Fired when XP is added to a learner's cumulative total
# Payload includes: user_id, amount, reason, new_total
xp_awarded = learning_signals.signal('xp_awarded')
