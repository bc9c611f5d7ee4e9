# modules/scoring/config.py

class ScoringDefaultConfig:
    """
    Default configuration for the Scoring Module.
    Acts as a fallback when the Flask app config does not override a key.
    """

    # --- Completion ---
    PASS_THRESHOLD_PERCENT = 60

    # --- Gap fill (partial credit) ---
    GAP_FILL_XP_PER_CORRECT = 10

    # --- Situational challenge sets ---
    CHALLENGE_XP_PER_CORRECT = 15

    # --- Shared bonus for a perfect multi-item score ---
    PERFECT_SCORE_BONUS = 20

    # --- Single-answer steps (one situational question, multiple choice, reading) ---
    SINGLE_ANSWER_XP = 20

    # --- AI-graded steps when the grader sends no XP ---
    EXTERNAL_GRADED_DEFAULT_XP = 10

    # --- Levels ---
    XP_PER_LEVEL = 100
