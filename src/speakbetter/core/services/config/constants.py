"""Fixed constants shared by the recording, metrics and visualization layers."""


class Audio:
    """Audio configuration constants."""

    SAMPLE_RATES = [8000, 16000, 22050, 44100, 48000]
    DEFAULT_SAMPLE_RATE = 44100
    DEFAULT_CHUNK_SIZE = 1024

    MAX_RECORDING_DURATION = 300
    SILENCE_THRESHOLD = 0.05

    SAMPLER_INTERVAL_MS = 100
    FINALIZE_TIMEOUT = 1.0

    # Chunks used for the live RMS level
    LEVEL_WINDOW_CHUNKS = 5

    NOISE_HIGHPASS_HZ = 80
    NORMALIZE_TARGET_RMS = 0.8
    NORMALIZE_MAX_GAIN = 10.0


class Metrics:
    """Speech metrics constants."""

    ENGLISH_FILLER_WORDS = [
        "um",
        "uh",
        "ah",
        "er",
        "like",
        "you know",
        "so",
        "actually",
        "basically",
        "literally",
        "I mean",
        "right",
        "well",
        "kind of",
        "sort of",
        "anyway",
        "okay",
        "hmm",
        "mmm",
    ]

    PAUSE_THRESHOLD = 0.5
    LONG_PAUSE_THRESHOLD = 1.5
    PHRASE_GAP_SECONDS = 0.75

    SLOW_PACE_WPM = 120
    FAST_PACE_WPM = 160
    TARGET_WPM = 150
    TARGET_PAUSES_PER_MINUTE = 4

    RAPID_WINDOW = 3
    RAPID_THRESHOLD_WPM = 180

    FILLER_WEIGHT = 0.4
    PAUSE_WEIGHT = 0.3
    PACE_WEIGHT = 0.3


class Visualization:
    """Visualization drawing constants."""

    DEFAULT_WIDTH = 300
    DEFAULT_HEIGHT = 100
    BACKGROUND_COLOR = "transparent"
    FOREGROUND_COLOR = "#4A55A2"
    GRID_COLOR = "rgba(74, 85, 162, 0.2)"

    BAR_COUNT = 64
    BAR_WIDTH = 2
    BAR_GAP = 1
    BAR_RADIUS = 2
    LINE_WIDTH = 2
    NORMALIZATION_FACTOR = 0.8

    GRID_HORIZONTAL_LINES = 4
    GRID_VERTICAL_LINES = 10

    MINIMAL_SAMPLE_COUNT = 128

    VOLUME_BAR_RATIO = 0.8
    VOLUME_FONT = "bold 16px sans-serif"
    VOLUME_TEXT_COLOR = "#333333"

    TIMELINE_COLOR = "#CCCCCC"
    MARKER_FONT = "12px sans-serif"
    MARKER_COLOR = "#999999"
    WORD_FONT = "14px sans-serif"
    WORD_COLOR = "#888888"
    CURRENT_WORD_COLOR = "#4A55A2"
    PLAYHEAD_COLOR = "#FF6B6B"


class Lifecycle:
    """Visualization context lifecycle constants."""

    SWEEP_INTERVAL = 60.0
    IDLE_TIMEOUT = 300.0
    MEMORY_LOW_PERCENT = 85.0
    MEMORY_CRITICAL_PERCENT = 95.0
