"""Speech analysis: delivery metrics and coaching feedback"""

from .feedback import SpeechFeedback, generate_feedback
from .metrics import (
    FillerWordInstance,
    MetricsEngine,
    Pause,
    RapidWord,
    SpeakingPace,
    SpeechMetrics,
    WordTiming,
    calculate_clarity_score,
    calculate_speech_metrics,
    calculate_words_per_minute,
    classify_speaking_pace,
    detect_filler_words,
    detect_long_pauses,
    detect_pauses,
    find_rapid_words,
    most_common_filler,
    tokenize,
)

__all__ = [
    "MetricsEngine",
    "SpeechMetrics",
    "WordTiming",
    "FillerWordInstance",
    "Pause",
    "RapidWord",
    "SpeakingPace",
    "SpeechFeedback",
    "generate_feedback",
    "calculate_clarity_score",
    "calculate_speech_metrics",
    "calculate_words_per_minute",
    "classify_speaking_pace",
    "detect_filler_words",
    "detect_long_pauses",
    "detect_pauses",
    "find_rapid_words",
    "most_common_filler",
    "tokenize",
]
