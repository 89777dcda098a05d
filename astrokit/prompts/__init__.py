"""Question graph and answer sources"""

from astrokit.prompts.graph import CONFIRMATIONS, QUESTIONS, QuestionGraph
from astrokit.prompts.sources import AnswerSource, FileAnswerSource, InteractiveSource

__all__ = [
    "CONFIRMATIONS",
    "QUESTIONS",
    "QuestionGraph",
    "AnswerSource",
    "FileAnswerSource",
    "InteractiveSource",
]
