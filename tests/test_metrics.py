"""Speech metrics tests"""

import math

import numpy as np
import pytest

from speakbetter.analysis import (
    MetricsEngine,
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
from speakbetter.analysis.metrics import round_half_up


def timed(words, word_length=0.3, gap=0.1, start=0.0):
    """Evenly spaced WordTimings"""
    timings = []
    t = start
    for word in words:
        timings.append(WordTiming(word, t, t + word_length))
        t += word_length + gap
    return timings


class TestFillerWords:
    """Filler detection"""

    def test_fillers_in_transcript(self):
        """Test um, uh and like are found in speaking order"""
        instances = detect_filler_words("This is um a test with uh some like filler words")

        assert [i.word for i in instances] == ["um", "uh", "like"]

    def test_filler_percentage_over_timed_words(self):
        """Test three fillers among nine timed words give 33.3 percent"""
        words = ["this", "um", "is", "a", "test", "uh", "some", "like", "fillers"]
        timings = timed(words)

        metrics = calculate_speech_metrics(" ".join(words), timings, 3.6)

        assert metrics.total_filler_words == 3
        assert metrics.total_words == 9
        assert metrics.filler_word_percentage == pytest.approx(33.3, abs=0.05)

    def test_transcript_only_counts_every_token(self):
        """Test without timings the transcript tokens are the word count"""
        metrics = calculate_speech_metrics(
            "This is um a test with uh some like filler words", None, 5.0
        )

        assert metrics.total_words == 11
        assert metrics.total_filler_words == 3
        assert metrics.filler_word_percentage == pytest.approx(300 / 11)

    def test_multi_word_phrase_is_one_filler(self):
        """Test "you know" counts once, not as two words"""
        instances = detect_filler_words("well you know it works")

        assert [i.word for i in instances] == ["well", "you know"]

    def test_phrase_split_by_long_gap(self):
        """Test a phrase whose words are far apart in time does not match"""
        timings = [
            WordTiming("kind", 0.0, 0.2),
            WordTiming("of", 2.0, 2.2),
            WordTiming("kind", 3.0, 3.2),
            WordTiming("of", 3.3, 3.5),
        ]

        instances = detect_filler_words(None, timings)

        assert [(i.word, i.timestamp) for i in instances] == [("kind of", 3.0)]

    def test_counts_keyed_by_dictionary_form(self):
        """Test case and punctuation do not split the counts"""
        metrics = calculate_speech_metrics("Um, UM. um! I mean... i MEAN", None, 10.0)

        assert metrics.filler_word_counts == {"um": 3, "i mean": 2}

    def test_total_matches_counts(self):
        """Test the total always equals the sum of per-word counts"""
        metrics = calculate_speech_metrics(
            "so like I mean you know basically it was like literally fine", None, 6.0
        )

        assert metrics.total_filler_words == sum(metrics.filler_word_counts.values())

    def test_custom_dictionary(self):
        """Test a caller-supplied filler list replaces the default"""
        instances = detect_filler_words("euh bon alors euh", filler_words=["euh", "alors"])

        assert [i.word for i in instances] == ["euh", "alors", "euh"]

    def test_timestamps_without_timings(self):
        """Test transcript-only instances are spread over the duration"""
        instances = detect_filler_words("um a b um", duration_seconds=8.0)

        assert [i.timestamp for i in instances] == [0.0, 6.0]


class TestPaceAndPauses:
    """Rate, pauses and pace classification"""

    def test_words_per_minute(self):
        """Test eight words in three seconds is 160 wpm"""
        assert calculate_words_per_minute(8, 3) == pytest.approx(160.0)

    def test_wpm_zero_duration(self):
        """Test a zero duration never divides by zero"""
        assert calculate_words_per_minute(8, 0) == 0.0

    def test_single_pause(self):
        """Test a 0.6 second gap is one pause"""
        timings = [WordTiming("alpha", 1.5, 2.0), WordTiming("beta", 2.6, 3.0)]

        pauses = detect_pauses(timings)

        assert len(pauses) == 1
        assert pauses[0].duration == pytest.approx(0.6)
        assert (pauses[0].word_before, pauses[0].word_after) == ("alpha", "beta")

    def test_gap_at_threshold_is_not_a_pause(self):
        """Test a gap equal to the threshold is ignored"""
        timings = [WordTiming("a", 0.0, 1.0), WordTiming("b", 1.5, 2.0)]

        assert detect_pauses(timings, threshold=0.5) == []

    def test_long_pauses(self):
        """Test only gaps over 1.5 seconds are long pauses"""
        timings = [
            WordTiming("a", 0.0, 1.0),
            WordTiming("b", 2.0, 2.5),
            WordTiming("c", 4.5, 5.0),
        ]

        long_pauses = detect_long_pauses(timings)

        assert [p.start_time for p in long_pauses] == [2.5]

    @pytest.mark.parametrize(
        "wpm,pace",
        [(100, SpeakingPace.SLOW), (120, SpeakingPace.MODERATE),
         (160, SpeakingPace.MODERATE), (161, SpeakingPace.FAST)],
    )
    def test_pace_classification(self, wpm, pace):
        """Test pace band boundaries"""
        assert classify_speaking_pace(wpm) is pace

    def test_rapid_words(self):
        """Test the centre word of a fast window is reported"""
        timings = [
            WordTiming("slow", 0.0, 1.0),
            WordTiming("one", 3.0, 3.1),
            WordTiming("two", 3.15, 3.25),
            WordTiming("three", 3.3, 3.4),
        ]

        rapid = find_rapid_words(timings)

        assert [r.word for r in rapid] == ["two"]
        assert rapid[0].words_per_minute == 450

    def test_no_rapid_words_in_short_input(self):
        """Test fewer words than the window yields nothing"""
        assert find_rapid_words([WordTiming("a", 0, 0.1)]) == []


class TestClarity:
    """Clarity score"""

    def test_ideal_delivery_scores_100(self):
        """Test no fillers, target pauses and target pace give 100"""
        assert calculate_clarity_score(0, 4, 150) == 100

    def test_weighted_blend(self):
        """Test the 40/30/30 weighting"""
        # filler 50, pause 90, pace 90
        assert calculate_clarity_score(10, 6, 170) == 74

    @pytest.mark.parametrize("args", [(100, 100, 1000), (0, 0, 0), (-5, -1, -20)])
    def test_score_is_bounded(self, args):
        """Test extreme inputs stay within 0..100"""
        assert 0 <= calculate_clarity_score(*args) <= 100

    def test_score_is_bounded_for_random_inputs(self):
        """Test random filler, pause and pace values always score 0..100"""
        rng = np.random.default_rng(7)
        for filler, pauses, wpm in rng.uniform(-50, 500, size=(500, 3)):
            score = calculate_clarity_score(filler, pauses, wpm)

            assert isinstance(score, int)
            assert 0 <= score <= 100

    def test_round_half_up(self):
        """Test halves round up rather than to even"""
        assert round_half_up(72.5) == 73
        assert round_half_up(73.5) == 74
        assert round_half_up(72.49) == 72


class TestSpeechMetrics:
    """End-to-end metric computation"""

    def test_empty_input_is_all_zero(self):
        """Test zero words produce zeroed metrics"""
        metrics = calculate_speech_metrics("", [], 12.0)

        assert metrics.total_words == 0
        assert metrics.words_per_minute == 0.0
        assert metrics.filler_word_percentage == 0.0
        assert metrics.clarity_score == 0
        assert metrics.duration_seconds == 12.0

    def test_invalid_duration(self):
        """Test NaN and negative durations are treated as zero"""
        for duration in (float("nan"), -3.0, None):
            metrics = calculate_speech_metrics("hello there", None, duration)
            assert metrics.words_per_minute == 0.0
            assert metrics.clarity_score == 0
            assert not math.isnan(metrics.pauses_per_minute)

    def test_invalid_timings_are_skipped(self):
        """Test timings with NaN or missing times are ignored"""
        timings = [
            WordTiming("good", 0.0, 0.5),
            WordTiming("bad", float("nan"), 1.0),
            WordTiming("fine", 0.6, 1.0),
        ]

        metrics = calculate_speech_metrics(None, timings, 1.0)

        assert metrics.total_words == 2

    def test_pause_metrics(self):
        """Test pause rate and average over a timed recording"""
        timings = [
            WordTiming("a", 0.0, 1.0),
            WordTiming("b", 2.0, 3.0),
            WordTiming("c", 5.0, 6.0),
        ]

        metrics = calculate_speech_metrics("a b c", timings, 30.0)

        assert len(metrics.pauses) == 2
        assert metrics.avg_pause_duration == pytest.approx(1.5)
        assert metrics.pauses_per_minute == pytest.approx(4.0)

    def test_to_dict(self):
        """Test serialization keeps the counts"""
        metrics = calculate_speech_metrics("um hello", None, 1.0)

        data = metrics.to_dict()

        assert data["filler_word_counts"] == {"um": 1}
        assert data["total_words"] == 2

    def test_most_common_filler_tie(self):
        """Test the first filler wins a tie"""
        assert most_common_filler({"so": 2, "um": 2, "uh": 1}) == "so"
        assert most_common_filler({}) is None

    def test_tokenize(self):
        """Test punctuation is stripped and apostrophes kept"""
        assert tokenize("Don't STOP, okay?") == ["don't", "stop", "okay"]


class TestMetricsEngine:
    """Configured engine"""

    def test_analyze(self):
        """Test the engine computes the same metrics as the function"""
        engine = MetricsEngine()
        timings = timed(["we", "um", "ship", "today"])

        metrics = engine.analyze("we um ship today", timings, 2.0)

        assert metrics == calculate_speech_metrics("we um ship today", timings, 2.0)

    def test_analyze_never_raises(self):
        """Test garbage input degrades to empty metrics"""
        engine = MetricsEngine()

        metrics = engine.analyze("hello", [object(), 42], "not a number")

        assert isinstance(metrics, SpeechMetrics)
        assert metrics.words_per_minute == 0.0

    def test_from_config(self, config):
        """Test configured thresholds are applied"""
        config.set_setting("metrics.pause_threshold", 2.0)
        config.set_setting("metrics.filler_words", ["basically"])
        engine = MetricsEngine.from_config(config)
        timings = [WordTiming("um", 0.0, 0.5), WordTiming("basically", 1.5, 2.0)]

        metrics = engine.analyze("um basically", timings, 2.0)

        assert metrics.pauses == []
        assert metrics.filler_word_counts == {"basically": 1}

    def test_rapid_and_long_pause_helpers(self):
        """Test the engine exposes long pauses and rapid words"""
        engine = MetricsEngine(long_pause_threshold=1.0, rapid_threshold_wpm=100)
        timings = timed(["a", "b", "c"], word_length=0.1, gap=0.05) + [
            WordTiming("d", 3.0, 3.2)
        ]

        assert len(engine.long_pauses(timings)) == 1
        assert [r.word for r in engine.rapid_words(timings)] == ["b"]
