"""Default configuration"""

from typing import Any, Dict

from .constants import Audio, Lifecycle, Metrics, Visualization


def get_default_config() -> Dict[str, Any]:
    """Build a fresh default configuration

    Returns:
        Nested default configuration dictionary
    """
    return {
        "recording": {
            "sample_rate": Audio.DEFAULT_SAMPLE_RATE,
            "channels": 1,
            "chunk_size": Audio.DEFAULT_CHUNK_SIZE,
            "max_duration": Audio.MAX_RECORDING_DURATION,
            "auto_stop": True,
            "silence_threshold": Audio.SILENCE_THRESHOLD,
            "sampler_interval_ms": Audio.SAMPLER_INTERVAL_MS,
            "finalize_timeout": Audio.FINALIZE_TIMEOUT,
            "normalize": False,
            "reduce_noise": False,
        },
        "metrics": {
            "filler_words": list(Metrics.ENGLISH_FILLER_WORDS),
            "pause_threshold": Metrics.PAUSE_THRESHOLD,
            "phrase_gap_seconds": Metrics.PHRASE_GAP_SECONDS,
            "long_pause_threshold": Metrics.LONG_PAUSE_THRESHOLD,
            "rapid_window": Metrics.RAPID_WINDOW,
            "rapid_threshold_wpm": Metrics.RAPID_THRESHOLD_WPM,
        },
        "visualization": {
            "width": Visualization.DEFAULT_WIDTH,
            "height": Visualization.DEFAULT_HEIGHT,
            "background_color": Visualization.BACKGROUND_COLOR,
            "foreground_color": Visualization.FOREGROUND_COLOR,
            "grid_color": Visualization.GRID_COLOR,
            "show_grid": False,
            "bar_count": Visualization.BAR_COUNT,
            "bar_width": Visualization.BAR_WIDTH,
            "bar_gap": Visualization.BAR_GAP,
            "bar_radius": Visualization.BAR_RADIUS,
            "line_width": Visualization.LINE_WIDTH,
            "normalization_factor": Visualization.NORMALIZATION_FACTOR,
            "gradient": [],
            "default_tier": "standard",
        },
        "lifecycle": {
            "sweep_interval": Lifecycle.SWEEP_INTERVAL,
            "idle_timeout": Lifecycle.IDLE_TIMEOUT,
            "memory_low_percent": Lifecycle.MEMORY_LOW_PERCENT,
            "memory_critical_percent": Lifecycle.MEMORY_CRITICAL_PERCENT,
        },
        "logging": {
            "level": "INFO",
            "console_output": False,
            "enabled_categories": [],
            "file": None,
        },
    }
