"""Configuration key constants - typed access to dotted config paths

Usage:
    config.get_setting(ConfigKeys.RECORDING_SAMPLE_RATE)
    config.get_setting(ConfigKeys.VISUALIZATION_BAR_COUNT, 64)
"""


class ConfigKeys:
    """Central definition of every configuration path"""

    # ==================== Recording ====================
    RECORDING_SAMPLE_RATE = "recording.sample_rate"
    """Capture sample rate (int): Hz"""

    RECORDING_CHANNELS = "recording.channels"
    """Capture channel count (int)"""

    RECORDING_CHUNK_SIZE = "recording.chunk_size"
    """Frames per device read (int)"""

    RECORDING_MAX_DURATION = "recording.max_duration"
    """Maximum session length (float | None): seconds"""

    RECORDING_AUTO_STOP = "recording.auto_stop"
    """Stop automatically at max_duration (bool)"""

    RECORDING_SILENCE_THRESHOLD = "recording.silence_threshold"
    """Audio level below which the session is flagged silent (float): 0.0-1.0"""

    RECORDING_SAMPLER_INTERVAL_MS = "recording.sampler_interval_ms"
    """Live level/duration sampler period (int): milliseconds"""

    RECORDING_FINALIZE_TIMEOUT = "recording.finalize_timeout"
    """Upper bound on the device flush during stop (float): seconds"""

    RECORDING_NORMALIZE = "recording.normalize"
    """RMS-normalize the stopped buffer (bool)"""

    RECORDING_REDUCE_NOISE = "recording.reduce_noise"
    """High-pass filter the stopped buffer (bool)"""

    # ==================== Metrics ====================
    METRICS_FILLER_WORDS = "metrics.filler_words"
    """Filler dictionary (List[str]): single words and multi-word phrases"""

    METRICS_PAUSE_THRESHOLD = "metrics.pause_threshold"
    """Minimum gap counted as a pause (float): seconds"""

    METRICS_PHRASE_GAP_SECONDS = "metrics.phrase_gap_seconds"
    """Largest gap allowed between words of a filler phrase (float): seconds"""

    METRICS_LONG_PAUSE_THRESHOLD = "metrics.long_pause_threshold"
    """Gap reported as a long pause (float): seconds"""

    METRICS_RAPID_WINDOW = "metrics.rapid_window"
    """Words per rapid-speech window (int)"""

    METRICS_RAPID_THRESHOLD_WPM = "metrics.rapid_threshold_wpm"
    """Local rate above which a window is rapid (float): words per minute"""

    # ==================== Visualization ====================
    VISUALIZATION_WIDTH = "visualization.width"
    """Surface width (int): pixels"""

    VISUALIZATION_HEIGHT = "visualization.height"
    """Surface height (int): pixels"""

    VISUALIZATION_BACKGROUND_COLOR = "visualization.background_color"
    """Background color (str): CSS color or "transparent" """

    VISUALIZATION_FOREGROUND_COLOR = "visualization.foreground_color"
    """Foreground color (str): CSS color"""

    VISUALIZATION_GRID_COLOR = "visualization.grid_color"
    """Grid color (str): CSS color"""

    VISUALIZATION_SHOW_GRID = "visualization.show_grid"
    """Draw the grid where the tier allows it (bool)"""

    VISUALIZATION_BAR_COUNT = "visualization.bar_count"
    """Frequency bar count (int)"""

    VISUALIZATION_BAR_WIDTH = "visualization.bar_width"
    """Frequency bar width (float): pixels, 0 = derive from width"""

    VISUALIZATION_BAR_GAP = "visualization.bar_gap"
    """Gap between bars (float): pixels"""

    VISUALIZATION_BAR_RADIUS = "visualization.bar_radius"
    """Bar corner radius (float): pixels"""

    VISUALIZATION_LINE_WIDTH = "visualization.line_width"
    """Waveform stroke width (float): pixels"""

    VISUALIZATION_NORMALIZATION_FACTOR = "visualization.normalization_factor"
    """Amplitude scale (float): 0.0-1.0"""

    VISUALIZATION_GRADIENT = "visualization.gradient"
    """Gradient colors (List[str]): empty = solid foreground"""

    VISUALIZATION_DEFAULT_TIER = "visualization.default_tier"
    """Tier used when neither caller nor device decides (str): "minimal" | "standard" | "high" | "maximum" """

    # ==================== Lifecycle ====================
    LIFECYCLE_SWEEP_INTERVAL = "lifecycle.sweep_interval"
    """Leak sweep period (float): seconds"""

    LIFECYCLE_IDLE_TIMEOUT = "lifecycle.idle_timeout"
    """Idle time after which a context is reported as leaked (float): seconds"""

    LIFECYCLE_MEMORY_LOW_PERCENT = "lifecycle.memory_low_percent"
    """System memory use reported as LOW pressure (float): percent"""

    LIFECYCLE_MEMORY_CRITICAL_PERCENT = "lifecycle.memory_critical_percent"
    """System memory use reported as CRITICAL pressure (float): percent"""

    # ==================== Logging ====================
    LOGGING_LEVEL = "logging.level"
    """Minimum log level (str): "DEBUG" | "INFO" | "WARNING" | "ERROR" """

    LOGGING_CONSOLE_OUTPUT = "logging.console_output"
    """Deliver records to loguru's console handler (bool)"""

    LOGGING_ENABLED_CATEGORIES = "logging.enabled_categories"
    """Enabled categories (List[str]): empty = all"""

    LOGGING_FILE = "logging.file"
    """Log file path (str | None)"""
