"""Host application interfaces"""

from abc import ABC, abstractmethod


class IHostEnvironment(ABC):
    """What the core needs to know about the hosting application"""

    @abstractmethod
    def is_backgrounded(self) -> bool:
        """True while the host app is not in the foreground"""


class ForegroundHost(IHostEnvironment):
    """Host that never goes to the background (desktop, tests)"""

    def is_backgrounded(self) -> bool:
        return False
