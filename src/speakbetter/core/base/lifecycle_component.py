"""Lifecycle base class for components that own a resource

Subclasses implement ``_do_start``/``_do_stop``; the base class tracks the
state and logs every transition.
"""

from abc import ABC, abstractmethod
from enum import Enum

from ...utils import app_logger


class ComponentState(Enum):
    """3-state component lifecycle"""

    STOPPED = "stopped"
    RUNNING = "running"
    ERROR = "error"


class LifecycleComponent(ABC):
    """Base class for lifecycle-managed components

    Usage:
        class SweepService(LifecycleComponent):
            def __init__(self):
                super().__init__("SweepService")

            def _do_start(self) -> bool:
                self._timer.start()
                return True

            def _do_stop(self) -> bool:
                self._timer.stop()
                return True
    """

    def __init__(self, component_name: str):
        self._component_name = component_name
        self._state = ComponentState.STOPPED

    def start(self) -> bool:
        """Start the component

        Returns:
            True if the component is running afterwards
        """
        if self._state == ComponentState.RUNNING:
            return True

        try:
            success = self._do_start()
        except Exception as e:
            self._state = ComponentState.ERROR
            app_logger.log_error(e, f"{self._component_name}_start")
            return False

        self._state = ComponentState.RUNNING if success else ComponentState.ERROR
        app_logger.log_lifecycle_event(
            f"{self._component_name} {'started' if success else 'failed to start'}",
            {"component": self._component_name},
        )
        return success

    def stop(self) -> bool:
        """Stop the component

        Returns:
            True if the component is stopped afterwards
        """
        if self._state == ComponentState.STOPPED:
            return True

        try:
            success = self._do_stop()
        except Exception as e:
            self._state = ComponentState.ERROR
            app_logger.log_error(e, f"{self._component_name}_stop")
            return False

        self._state = ComponentState.STOPPED if success else ComponentState.ERROR
        app_logger.log_lifecycle_event(
            f"{self._component_name} {'stopped' if success else 'failed to stop'}",
            {"component": self._component_name},
        )
        return success

    @abstractmethod
    def _do_start(self) -> bool:
        pass

    @abstractmethod
    def _do_stop(self) -> bool:
        pass

    @property
    def is_running(self) -> bool:
        return self._state == ComponentState.RUNNING

    @property
    def state(self) -> ComponentState:
        return self._state

    @property
    def component_name(self) -> str:
        return self._component_name
