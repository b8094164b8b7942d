"""Application-wide constants and configuration values.

This module centralizes the magic numbers used by the quiz pool generator,
the turn scheduler and the HTTP layer.
"""

# Game Configuration
QUESTIONS_PER_PLAYER = 10
"""Number of questions in one player's turn."""

OPTION_COUNT = 4
"""Number of answer options shown with each question (correct + distractors)."""

DISTRACTOR_COUNT = OPTION_COUNT - 1
"""Number of incorrect answer options to draw for each question."""

WRONG_ANSWER_PENALTY_SECONDS = 10
"""Seconds added to a player's turn time for every wrong answer."""

MAX_PLAYERS = 8
"""Upper bound on players in a single game."""

DEFAULT_PLAYER_NAME = "Player {number}"
"""Template for default player names. {number} is 1-based."""

DIFFICULTY_LEVELS = (1, 2, 3, 4)
"""Difficulty tiers partitioning the vocabulary store."""

# Distractor Selection
SAME_CATEGORY_MIN_CANDIDATES = 10
"""Distinct same-category candidates required before restricting distractors to that category."""

# Failure-Weighted Sampling
MIN_WEIGHT = 1
"""Floor applied to every entry's sampling weight."""

WRONG_COUNT_WEIGHT = 3
"""Weight added per historical wrong answer."""

WRONG_RATE_WEIGHT = 5
"""Weight added per unit of historical wrong-answer rate (0.0-1.0)."""

MIN_ATTEMPTS_FOR_STATS = 2
"""Attempts a word needs before its failure statistics are trusted."""

# Active Games
MAX_ACTIVE_GAMES = 1000
"""Games held in memory at once; the least recently used game is evicted beyond this."""

GAME_IDLE_TIMEOUT_SECONDS = 2 * 60 * 60
"""Games untouched for this long are dropped."""

# Word Search
SEARCH_MIN_LENGTH = 2
"""Search terms shorter than this return no results."""

SEARCH_RESULT_LIMIT = 100
"""Maximum number of words returned by a search."""

# Run History
RECENT_RUN_HISTORY_LIMIT = 10
"""Number of recent runs returned by the bootstrap endpoint."""

# Cookie Configuration
COOKIE_NAME = "syn_uid"
"""Name of the cookie used to store the player id."""

# Rate Limiting
GAME_START_RATE_LIMIT = "10/minute"
"""Maximum number of game starts allowed per minute per client."""

ANSWER_SUBMISSION_RATE_LIMIT = "60/minute"
"""Maximum number of answer submissions allowed per minute per client."""

DEFAULT_RATE_LIMIT = "100/minute"
"""Default request budget per client."""
