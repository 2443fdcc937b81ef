"""
Cycle ID management for tracing export cycles.
Every export cycle gets its own ID so all log records it emits can be grouped.
"""
import uuid
import logging
from typing import Optional
from contextvars import ContextVar

# Context variable for the current export cycle ID (thread-safe)
_cycle_id_var: ContextVar[Optional[str]] = ContextVar(
    'cycle_id', default=None
)

# Context variable for component name
_component_var: ContextVar[Optional[str]] = ContextVar(
    'component', default=None
)


def generate_cycle_id() -> str:
    """
    Generate a new unique cycle ID.

    Returns:
        Short hex string taken from a UUID4 (e.g., "a1b2c3d4e5f6")
    """
    return uuid.uuid4().hex[:12]


def set_cycle_id(cycle_id: str) -> None:
    """Set the cycle ID for the current context."""
    _cycle_id_var.set(cycle_id)


def get_cycle_id() -> Optional[str]:
    """Get the cycle ID from the current context, or None if not set."""
    return _cycle_id_var.get()


def clear_cycle_id() -> None:
    """Clear the cycle ID from the current context."""
    _cycle_id_var.set(None)


def set_component(component: str) -> None:
    """
    Set the component name for the current context.

    Args:
        component: Component name (e.g., "exporter", "scheduler")
    """
    _component_var.set(component)


def get_component() -> Optional[str]:
    return _component_var.get()


class CycleFilter(logging.Filter):
    """
    Logging filter that injects cycle_id and component into log records.
    Reads from ContextVar so every log statement inside an export cycle
    carries the cycle ID without explicit passing.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.cycle_id = get_cycle_id() or ""
        record.component = get_component() or ""
        return True


class CycleContext:
    """
    Context manager scoping a cycle ID to one export cycle.
    Restores the previous cycle ID on exit.

    Usage:
        with CycleContext() as ctx:
            logger.info("exporting")  # record carries ctx.cycle_id
    """

    def __init__(self, cycle_id: Optional[str] = None):
        """
        Initialize cycle context.

        Args:
            cycle_id: Specific cycle ID. If None, a new one is generated.
        """
        self.cycle_id = cycle_id or generate_cycle_id()
        self._previous_id: Optional[str] = None

    def __enter__(self) -> 'CycleContext':
        self._previous_id = get_cycle_id()
        set_cycle_id(self.cycle_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._previous_id is not None:
            set_cycle_id(self._previous_id)
        else:
            clear_cycle_id()
