from .progress_service import ProgressService
from .completion_service import CompletionService
from .challenge_service import ChallengeService
from .leaderboard_service import LeaderboardService
from .species_service import SpeciesService

__all__ = ['ProgressService', 'CompletionService', 'ChallengeService', 'LeaderboardService', 'SpeciesService']
