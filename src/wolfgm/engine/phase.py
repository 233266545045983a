"""Phase enum for game state machine."""

from enum import Enum


class Phase(Enum):
    """Game phases in order of progression."""

    SETUP = "setup"
    NIGHT = "night"
    DAWN = "dawn"
    DAY_DISCUSSION = "day_discussion"
    DAY_VOTE = "day_vote"
    EXECUTION = "execution"
    GAME_OVER = "game_over"
