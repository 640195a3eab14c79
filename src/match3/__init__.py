"""Timed match-three board engine with round control and a daily leaderboard."""

__version__ = "0.1.0"
