"""Decorator utilities guarding :class:`~kubequest_sim.session.DebugSession` transitions."""

from __future__ import annotations

import functools
import inspect
from typing import Any, Callable, TypeVar

from kubequest_sim.core import SimulationStateError
from kubequest_sim.models import SimulationStatus

F = TypeVar("F", bound=Callable[..., Any])


def requires_status(
    *allowed: SimulationStatus,
    operation: str | None = None,
) -> Callable[[F], F]:
    """Decorator that rejects a method call unless ``self.simulation_status`` is allowed.

    Works for both plain and ``async`` methods.  The check runs before the
    method body, so a rejected call has no side effects.

    Args:
        allowed:   Statuses in which the wrapped method may run.
        operation: Human-readable verb used in the error message.  Defaults
                   to the method name with underscores replaced by spaces.

    Raises:
        SimulationStateError: when the current status is not in *allowed*.

    Example::

        @requires_status(SimulationStatus.paused, operation="resume")
        def resume_simulation(self) -> None:
            ...
    """
    permitted = frozenset(SimulationStatus(status) for status in allowed)

    def decorator(func: F) -> F:
        label = operation or func.__name__.replace("_", " ")

        def guard(instance: Any) -> None:
            status = SimulationStatus(instance.simulation_status)
            if status not in permitted:
                raise SimulationStateError(status, label)

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                guard(self)
                return await func(self, *args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            guard(self)
            return func(self, *args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = ["requires_status"]
