"""Speech metrics

Pure functions turning a transcript, optional word timings and a duration
into ``SpeechMetrics``. Invalid input (None, NaN, negative values) degrades
to zero-valued results instead of raising.
"""

import math
import re
from collections import Counter
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.services.config import ConfigKeys
from ..core.services.config.constants import Metrics
from ..utils import LogCategory, app_logger

_TOKEN_RE = re.compile(r"[\w']+", re.UNICODE)


@dataclass(frozen=True)
class WordTiming:
    """One recognized word with its time span in seconds"""

    word: str
    start_time: float
    end_time: float
    confidence: Optional[float] = None


@dataclass(frozen=True)
class FillerWordInstance:
    word: str
    timestamp: float


@dataclass(frozen=True)
class Pause:
    start_time: float
    end_time: float
    duration: float
    word_before: str = ""
    word_after: str = ""


@dataclass(frozen=True)
class RapidWord:
    """Word at the centre of a window spoken above the rate threshold"""

    word: str
    start_time: float
    end_time: float
    words_per_minute: int


class SpeakingPace(Enum):
    SLOW = "slow"
    MODERATE = "moderate"
    FAST = "fast"


@dataclass
class SpeechMetrics:
    """Delivery metrics of one recording

    ``total_filler_words`` always equals the sum of ``filler_word_counts``
    and ``clarity_score`` is always within [0, 100].
    """

    words_per_minute: float = 0.0
    total_words: int = 0
    duration_seconds: float = 0.0
    filler_word_counts: Dict[str, int] = field(default_factory=dict)
    total_filler_words: int = 0
    filler_word_percentage: float = 0.0
    avg_pause_duration: float = 0.0
    pauses_per_minute: float = 0.0
    clarity_score: int = 0
    pauses: List[Pause] = field(default_factory=list)
    filler_instances: List[FillerWordInstance] = field(default_factory=list)

    @classmethod
    def empty(cls, duration_seconds: float = 0.0) -> "SpeechMetrics":
        return cls(duration_seconds=_safe_number(duration_seconds))

    @property
    def pace(self) -> SpeakingPace:
        return classify_speaking_pace(self.words_per_minute)

    def to_dict(self) -> dict:
        return asdict(self)


def _safe_number(value) -> float:
    """Finite non-negative float, 0.0 for anything else"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def tokenize(text: Optional[str]) -> List[str]:
    """Lower-cased word tokens with surrounding punctuation stripped"""
    if not text:
        return []
    return _TOKEN_RE.findall(str(text).lower())


def _normalize_word(word: Optional[str]) -> str:
    return " ".join(tokenize(word))


def _valid_timings(word_timings: Optional[Iterable[WordTiming]]) -> List[WordTiming]:
    if not word_timings:
        return []
    valid = []
    for timing in word_timings:
        start = getattr(timing, "start_time", None)
        end = getattr(timing, "end_time", None)
        try:
            if math.isfinite(float(start)) and math.isfinite(float(end)):
                valid.append(timing)
        except (TypeError, ValueError):
            continue
    return valid


def _filler_phrases(filler_words: Optional[Iterable[str]]) -> List[Tuple[str, ...]]:
    """Dictionary entries as token tuples, longest first"""
    words = Metrics.ENGLISH_FILLER_WORDS if filler_words is None else filler_words
    phrases = {tuple(tokenize(entry)) for entry in words}
    phrases.discard(())
    return sorted(phrases, key=lambda p: (-len(p), p))


def calculate_words_per_minute(total_words: int, duration_seconds: float) -> float:
    duration = _safe_number(duration_seconds)
    if duration <= 0:
        return 0.0
    return _safe_number(total_words) / duration * 60


def detect_filler_words(
    transcript: Optional[str],
    word_timings: Optional[Sequence[WordTiming]] = None,
    filler_words: Optional[Iterable[str]] = None,
    phrase_gap: float = Metrics.PHRASE_GAP_SECONDS,
    duration_seconds: float = 0.0,
) -> List[FillerWordInstance]:
    """Filler words and phrases in speaking order

    With word timings, a multi-word phrase matches only when its tokens are
    consecutive and each gap between them is at most ``phrase_gap`` seconds.
    At each position the longest matching phrase wins. Without timings the
    transcript tokens are used and timestamps are spread evenly over
    ``duration_seconds``.
    """
    phrases = _filler_phrases(filler_words)
    if not phrases:
        return []

    timings = _valid_timings(word_timings)
    if timings:
        tokens = []
        for timing in timings:
            word = _normalize_word(timing.word)
            if word:
                tokens.append((word, float(timing.start_time), float(timing.end_time)))
    else:
        words = tokenize(transcript)
        duration = _safe_number(duration_seconds)
        step = duration / len(words) if words else 0.0
        tokens = [(word, i * step, i * step) for i, word in enumerate(words)]

    instances = []
    i = 0
    while i < len(tokens):
        matched = None
        for phrase in phrases:
            span = tokens[i:i + len(phrase)]
            if len(span) != len(phrase):
                continue
            if any(token[0] != part for token, part in zip(span, phrase)):
                continue
            if any(
                span[j + 1][1] - span[j][2] > phrase_gap for j in range(len(span) - 1)
            ):
                continue
            matched = phrase
            break

        if matched is None:
            i += 1
            continue
        instances.append(FillerWordInstance(" ".join(matched), tokens[i][1]))
        i += len(matched)

    return instances


def detect_pauses(
    word_timings: Optional[Sequence[WordTiming]],
    threshold: float = Metrics.PAUSE_THRESHOLD,
) -> List[Pause]:
    """Gaps between consecutive words longer than ``threshold`` seconds"""
    timings = _valid_timings(word_timings)
    pauses = []
    for current, following in zip(timings, timings[1:]):
        gap = float(following.start_time) - float(current.end_time)
        if gap > threshold:
            pauses.append(
                Pause(
                    start_time=float(current.end_time),
                    end_time=float(following.start_time),
                    duration=gap,
                    word_before=current.word,
                    word_after=following.word,
                )
            )
    return pauses


def detect_long_pauses(
    word_timings: Optional[Sequence[WordTiming]],
    threshold: float = Metrics.LONG_PAUSE_THRESHOLD,
) -> List[Pause]:
    return detect_pauses(word_timings, threshold)


def calculate_segment_rate(words: Sequence[WordTiming]) -> Optional[int]:
    """Words per minute across ``words``, None when the span is empty"""
    if not words:
        return None
    span = float(words[-1].end_time) - float(words[0].start_time)
    if span <= 0:
        return None
    return round_half_up(len(words) / (span / 60))


def find_rapid_words(
    word_timings: Optional[Sequence[WordTiming]],
    window: int = Metrics.RAPID_WINDOW,
    threshold_wpm: float = Metrics.RAPID_THRESHOLD_WPM,
) -> List[RapidWord]:
    """Words whose surrounding ``window`` words run faster than ``threshold_wpm``"""
    timings = _valid_timings(word_timings)
    if window < 2 or len(timings) < window:
        return []

    rapid = []
    for i in range(len(timings) - window + 1):
        rate = calculate_segment_rate(timings[i:i + window])
        if rate is not None and rate > threshold_wpm:
            centre = timings[i + window // 2]
            rapid.append(
                RapidWord(
                    word=centre.word,
                    start_time=float(centre.start_time),
                    end_time=float(centre.end_time),
                    words_per_minute=rate,
                )
            )
    return rapid


def calculate_clarity_score(
    filler_percentage: float,
    pauses_per_minute: float,
    words_per_minute: float,
) -> int:
    """Weighted 0-100 blend of filler, pause and pace subscores"""
    filler_score = max(0.0, 100 - _safe_number(filler_percentage) * 5)
    pause_score = max(
        0.0,
        100 - abs(_safe_number(pauses_per_minute) - Metrics.TARGET_PAUSES_PER_MINUTE) * 5,
    )
    pace_score = max(
        0.0, 100 - abs(_safe_number(words_per_minute) - Metrics.TARGET_WPM) * 0.5
    )

    score = round_half_up(
        filler_score * Metrics.FILLER_WEIGHT
        + pause_score * Metrics.PAUSE_WEIGHT
        + pace_score * Metrics.PACE_WEIGHT
    )
    return min(100, max(0, score))


def classify_speaking_pace(words_per_minute: float) -> SpeakingPace:
    if words_per_minute < Metrics.SLOW_PACE_WPM:
        return SpeakingPace.SLOW
    if words_per_minute > Metrics.FAST_PACE_WPM:
        return SpeakingPace.FAST
    return SpeakingPace.MODERATE


def most_common_filler(filler_word_counts: Dict[str, int]) -> Optional[str]:
    """Most frequent filler; the first one seen wins a tie"""
    best, best_count = None, 0
    for word, count in filler_word_counts.items():
        if count > best_count:
            best, best_count = word, count
    return best


def calculate_speech_metrics(
    transcript: Optional[str],
    word_timings: Optional[Sequence[WordTiming]],
    duration_seconds: float,
    filler_words: Optional[Iterable[str]] = None,
    pause_threshold: float = Metrics.PAUSE_THRESHOLD,
    phrase_gap: float = Metrics.PHRASE_GAP_SECONDS,
) -> SpeechMetrics:
    duration = _safe_number(duration_seconds)
    timings = _valid_timings(word_timings)
    total_words = len(timings) if timings else len(tokenize(transcript))
    if total_words == 0:
        return SpeechMetrics.empty(duration)

    fillers = detect_filler_words(
        transcript, timings, filler_words, phrase_gap, duration_seconds=duration
    )
    counts = dict(Counter(instance.word for instance in fillers))
    total_fillers = sum(counts.values())

    pauses = detect_pauses(timings, pause_threshold)
    total_pause_duration = sum(p.duration for p in pauses)
    avg_pause = total_pause_duration / len(pauses) if pauses else 0.0

    wpm = calculate_words_per_minute(total_words, duration)
    pauses_per_minute = len(pauses) / duration * 60 if duration > 0 else 0.0
    filler_percentage = total_fillers / total_words * 100

    # Rates are undefined without a duration
    clarity = (
        calculate_clarity_score(filler_percentage, pauses_per_minute, wpm)
        if duration > 0
        else 0
    )

    return SpeechMetrics(
        words_per_minute=wpm,
        total_words=total_words,
        duration_seconds=duration,
        filler_word_counts=counts,
        total_filler_words=total_fillers,
        filler_word_percentage=filler_percentage,
        avg_pause_duration=avg_pause,
        pauses_per_minute=pauses_per_minute,
        clarity_score=clarity,
        pauses=pauses,
        filler_instances=fillers,
    )


class MetricsEngine:
    """Configured front end to the metric functions; never raises"""

    def __init__(
        self,
        filler_words: Optional[Iterable[str]] = None,
        pause_threshold: float = Metrics.PAUSE_THRESHOLD,
        phrase_gap: float = Metrics.PHRASE_GAP_SECONDS,
        long_pause_threshold: float = Metrics.LONG_PAUSE_THRESHOLD,
        rapid_window: int = Metrics.RAPID_WINDOW,
        rapid_threshold_wpm: float = Metrics.RAPID_THRESHOLD_WPM,
    ):
        self.filler_words = list(
            Metrics.ENGLISH_FILLER_WORDS if filler_words is None else filler_words
        )
        self.pause_threshold = pause_threshold
        self.phrase_gap = phrase_gap
        self.long_pause_threshold = long_pause_threshold
        self.rapid_window = rapid_window
        self.rapid_threshold_wpm = rapid_threshold_wpm

    @classmethod
    def from_config(cls, config) -> "MetricsEngine":
        return cls(
            filler_words=config.get_setting(
                ConfigKeys.METRICS_FILLER_WORDS, Metrics.ENGLISH_FILLER_WORDS
            ),
            pause_threshold=config.get_setting(
                ConfigKeys.METRICS_PAUSE_THRESHOLD, Metrics.PAUSE_THRESHOLD
            ),
            phrase_gap=config.get_setting(
                ConfigKeys.METRICS_PHRASE_GAP_SECONDS, Metrics.PHRASE_GAP_SECONDS
            ),
            long_pause_threshold=config.get_setting(
                ConfigKeys.METRICS_LONG_PAUSE_THRESHOLD, Metrics.LONG_PAUSE_THRESHOLD
            ),
            rapid_window=config.get_setting(
                ConfigKeys.METRICS_RAPID_WINDOW, Metrics.RAPID_WINDOW
            ),
            rapid_threshold_wpm=config.get_setting(
                ConfigKeys.METRICS_RAPID_THRESHOLD_WPM, Metrics.RAPID_THRESHOLD_WPM
            ),
        )

    def analyze(
        self,
        transcript: Optional[str],
        word_timings: Optional[Sequence[WordTiming]] = None,
        duration_seconds: float = 0.0,
    ) -> SpeechMetrics:
        try:
            metrics = calculate_speech_metrics(
                transcript,
                word_timings,
                duration_seconds,
                filler_words=self.filler_words,
                pause_threshold=self.pause_threshold,
                phrase_gap=self.phrase_gap,
            )
        except (TypeError, ValueError, AttributeError) as e:
            app_logger.log_error(e, "metrics_analyze")
            return SpeechMetrics.empty(duration_seconds)

        app_logger.debug(
            "Speech metrics computed",
            LogCategory.METRICS,
            context={
                "total_words": metrics.total_words,
                "wpm": round(metrics.words_per_minute, 1),
                "fillers": metrics.total_filler_words,
                "clarity": metrics.clarity_score,
            },
            component="metrics",
        )
        return metrics

    def long_pauses(self, word_timings: Optional[Sequence[WordTiming]]) -> List[Pause]:
        return detect_long_pauses(word_timings, self.long_pause_threshold)

    def rapid_words(self, word_timings: Optional[Sequence[WordTiming]]) -> List[RapidWord]:
        return find_rapid_words(word_timings, self.rapid_window, self.rapid_threshold_wpm)
