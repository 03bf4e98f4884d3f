"""
Strategy registry: maps an event's configured strategy to its implementation.

The orchestrator resolves strategy classes through this registry, so a
new algorithm can be plugged in with ``register_strategy`` without
touching the dispatch code.
"""

import logging
from typing import Type

from booking_engine.routing.strategies import (
    BaseStrategy,
    CollectiveStrategy,
    RoundRobinStrategy,
    SmartStrategy,
)
from booking_engine.schemas.event_schema import AssignmentStrategy

logger = logging.getLogger(__name__)

_STRATEGY_REGISTRY: dict[AssignmentStrategy, Type[BaseStrategy]] = {}


def register_strategy(strategy: AssignmentStrategy, implementation: Type[BaseStrategy]) -> None:
    """Register (or replace) the implementation for a strategy."""
    _STRATEGY_REGISTRY[strategy] = implementation
    logger.debug("Strategy registered: %s -> %s", strategy.value, implementation.__name__)


def get_strategy(strategy: AssignmentStrategy) -> Type[BaseStrategy]:
    """Return the implementation for a strategy.

    Raises:
        KeyError: If the strategy has no registered implementation.
    """
    if strategy not in _STRATEGY_REGISTRY:
        registered = [s.value for s in _STRATEGY_REGISTRY]
        raise KeyError(f"Strategy '{strategy.value}' not registered. Available: {registered}")
    return _STRATEGY_REGISTRY[strategy]


def get_registered_strategies() -> list[AssignmentStrategy]:
    return list(_STRATEGY_REGISTRY.keys())


def _auto_register() -> None:
    """Register the built-in team strategies. Called once at import time."""
    register_strategy(AssignmentStrategy.COLLECTIVE, CollectiveStrategy)
    register_strategy(AssignmentStrategy.ROUND_ROBIN, RoundRobinStrategy)
    register_strategy(AssignmentStrategy.SMART, SmartStrategy)


_auto_register()
