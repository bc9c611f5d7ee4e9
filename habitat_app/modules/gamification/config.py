# modules/gamification/config.py
"""
Threshold tables for the gamification module.

Labels (names, emoji) are display configuration; only the thresholds carry
meaning for the classifier.
"""

# Assessment tiers (overall speech-assessment score, 0..100).
ASSESSMENT_TIER_EXPLORER = 'explorer'
ASSESSMENT_TIER_PRO = 'pro'
ASSESSMENT_TIER_PREMIUM = 'premium'
ASSESSMENT_TIERS = (ASSESSMENT_TIER_EXPLORER, ASSESSMENT_TIER_PRO, ASSESSMENT_TIER_PREMIUM)

# Green Scale: total units completed -> level.
# No level starts between 11 and 24.
GREEN_SCALE_LEVELS = [
    {'min': 0, 'name': 'New Recruit', 'badge': '🌿'},
    {'min': 5, 'name': 'Nature Friend', 'badge': '🍃'},
    {'min': 10, 'name': 'Eco Explorer', 'badge': '🌱'},
    {'min': 25, 'name': 'Green Warrior', 'badge': '🛡️'},
    {'min': 30, 'name': 'Environmental Hero', 'badge': '⭐'},
    {'min': 50, 'name': 'Eco Champion', 'badge': '🏆'},
]

# Ecosystem badges: units completed in one ecosystem -> badge.
ECOSYSTEM_BADGE_THRESHOLDS = (1, 3, 6, 10)

ECOSYSTEM_BADGES = {
    'marine': ['Tide Pool Explorer 🐚', 'Coral Protector 🪸', 'Deep Sea Guardian 🐋', 'Marine Master 🌊'],
    'forest': ['Seedling Tender 🌱', 'Tree Hugger 🌳', 'Forest Ranger 🦉', 'Woodland Master 🍃'],
    'polar': ['Ice Walker 🧊', 'Penguin Friend 🐧', 'Polar Guardian 🐻‍❄️', 'Polar Master ❄️'],
    'grassland': ['Prairie Walker 🌾', 'Savanna Scout 🦓', 'Grassland Guardian 🦁', 'Plains Master 🌅'],
    'mountains': ['Valley Explorer ⛰️', 'Peak Climber 🏔️', 'Alpine Guardian 🦅', 'Mountain Master 🏔️'],
    'freshwater': ['Stream Walker 💧', 'River Guardian 🏞️', 'Lake Protector 🦆', 'Freshwater Master 🌊'],
}

ECOSYSTEMS = tuple(ECOSYSTEM_BADGES)


class GamificationDefaultConfig:
    """Fallback values when the Flask app config does not set a key."""

    AT_RISK_AFTER_DAYS = 7
    ASSESSMENT_PRO_MIN = 65
    ASSESSMENT_PREMIUM_MIN = 80
    LEADERBOARD_DEFAULT_LIMIT = 20
    LEADERBOARD_MAX_LIMIT = 100
