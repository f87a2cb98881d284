"""Quality tiers and the policy that picks one

The base tier comes from, in order: an explicit per-call tier, the device
capability descriptor, the configured default. Power mode and memory
pressure are applied on top of it, memory pressure last.
"""

import os
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Union

import psutil

from ..core.services.config import ConfigKeys
from ..core.services.config.constants import Lifecycle, Visualization
from ..utils import ConfigurationError, app_logger

_GIB = 1024 ** 3


class QualityTier(IntEnum):
    """Ordered: MINIMAL < STANDARD < HIGH < MAXIMUM"""

    MINIMAL = 0
    STANDARD = 1
    HIGH = 2
    MAXIMUM = 3

    @classmethod
    def from_name(cls, name: Union[str, "QualityTier"]) -> "QualityTier":
        if isinstance(name, QualityTier):
            return name
        try:
            return cls[str(name).strip().upper()]
        except KeyError:
            raise ConfigurationError(
                f"Unknown quality tier: {name!r}",
                key=ConfigKeys.VISUALIZATION_DEFAULT_TIER,
            ) from None


@dataclass(frozen=True)
class QualityProfile:
    """What a tier allows; ``None`` means unlimited"""

    tier: QualityTier
    max_samples: Optional[int]
    show_grid: bool
    animate: bool
    max_bar_count: Optional[int]
    word_limit: Optional[int]


PROFILES = {
    QualityTier.MINIMAL: QualityProfile(
        QualityTier.MINIMAL,
        max_samples=Visualization.MINIMAL_SAMPLE_COUNT,
        show_grid=False,
        animate=False,
        max_bar_count=16,
        word_limit=5,
    ),
    QualityTier.STANDARD: QualityProfile(
        QualityTier.STANDARD,
        max_samples=None,
        show_grid=True,
        animate=False,
        max_bar_count=None,
        word_limit=20,
    ),
    QualityTier.HIGH: QualityProfile(
        QualityTier.HIGH,
        max_samples=None,
        show_grid=True,
        animate=True,
        max_bar_count=None,
        word_limit=50,
    ),
    QualityTier.MAXIMUM: QualityProfile(
        QualityTier.MAXIMUM,
        max_samples=None,
        show_grid=True,
        animate=True,
        max_bar_count=None,
        word_limit=None,
    ),
}


def profile_for(tier: QualityTier) -> QualityProfile:
    return PROFILES[QualityTier(tier)]


class PowerMode(Enum):
    NORMAL = "normal"
    BATTERY_SAVING = "battery_saving"
    HIGH_PERFORMANCE = "high_performance"


class MemoryPressure(IntEnum):
    NORMAL = 0
    LOW = 1
    CRITICAL = 2


@dataclass(frozen=True)
class DeviceCapabilities:
    """Injected description of the host device"""

    cpu_count: int
    total_memory_bytes: int
    low_end: bool = False

    @classmethod
    def detect(cls) -> "DeviceCapabilities":
        capabilities = cls(
            cpu_count=os.cpu_count() or 1,
            total_memory_bytes=psutil.virtual_memory().total,
        )
        app_logger.log_visualization_event(
            "Device capabilities detected",
            {
                "cpu_count": capabilities.cpu_count,
                "total_memory_gb": round(capabilities.total_memory_bytes / _GIB, 1),
            },
        )
        return capabilities

    def suggested_tier(self) -> Optional[QualityTier]:
        """MINIMAL for low-end devices, HIGH for high-end ones, else no opinion"""
        if (
            self.low_end
            or self.cpu_count <= 2
            or self.total_memory_bytes < 2 * _GIB
        ):
            return QualityTier.MINIMAL
        if self.cpu_count >= 8 and self.total_memory_bytes >= 8 * _GIB:
            return QualityTier.HIGH
        return None


@dataclass
class RenderEnvironment:
    """Runtime conditions the tier is clamped against"""

    power_mode: PowerMode = PowerMode.NORMAL
    memory_pressure: MemoryPressure = MemoryPressure.NORMAL


def resolve_tier(
    explicit: Optional[QualityTier] = None,
    capabilities: Optional[DeviceCapabilities] = None,
    default: QualityTier = QualityTier.STANDARD,
    environment: Optional[RenderEnvironment] = None,
) -> QualityTier:
    if explicit is not None:
        tier = QualityTier(explicit)
    else:
        suggested = capabilities.suggested_tier() if capabilities else None
        tier = suggested if suggested is not None else QualityTier(default)

    if environment is None:
        return tier

    if environment.power_mode is PowerMode.BATTERY_SAVING:
        tier = QualityTier.MINIMAL
    elif environment.power_mode is PowerMode.HIGH_PERFORMANCE:
        tier = QualityTier.MAXIMUM

    if environment.memory_pressure is MemoryPressure.CRITICAL:
        tier = QualityTier.MINIMAL
    elif environment.memory_pressure is MemoryPressure.LOW:
        tier = min(tier, QualityTier.STANDARD)

    return tier


class MemoryPressureMonitor:
    """Maps system memory usage onto a MemoryPressure level"""

    def __init__(
        self,
        low_percent: float = Lifecycle.MEMORY_LOW_PERCENT,
        critical_percent: float = Lifecycle.MEMORY_CRITICAL_PERCENT,
    ):
        if critical_percent < low_percent:
            raise ConfigurationError(
                "memory_critical_percent must not be below memory_low_percent",
                key=ConfigKeys.LIFECYCLE_MEMORY_CRITICAL_PERCENT,
            )
        self.low_percent = low_percent
        self.critical_percent = critical_percent
        self._last_level = MemoryPressure.NORMAL

    @classmethod
    def from_config(cls, config) -> "MemoryPressureMonitor":
        return cls(
            low_percent=config.get_setting(
                ConfigKeys.LIFECYCLE_MEMORY_LOW_PERCENT, Lifecycle.MEMORY_LOW_PERCENT
            ),
            critical_percent=config.get_setting(
                ConfigKeys.LIFECYCLE_MEMORY_CRITICAL_PERCENT,
                Lifecycle.MEMORY_CRITICAL_PERCENT,
            ),
        )

    def classify(self, used_percent: float) -> MemoryPressure:
        if used_percent >= self.critical_percent:
            return MemoryPressure.CRITICAL
        if used_percent >= self.low_percent:
            return MemoryPressure.LOW
        return MemoryPressure.NORMAL

    def read(self) -> MemoryPressure:
        return self.classify(psutil.virtual_memory().percent)

    def poll(self) -> Optional[MemoryPressure]:
        """Current level if it changed since the last poll, else None"""
        level = self.read()
        if level is self._last_level:
            return None
        self._last_level = level
        return level
