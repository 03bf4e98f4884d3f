from booking_engine.routing.insights import RoutingInsights, RoutingNotEnabledError
from booking_engine.routing.orchestrator import (
    AssignmentConfigurationError,
    AssignmentOrchestrator,
    EventNotFoundError,
)
from booking_engine.routing.registry import get_registered_strategies, get_strategy, register_strategy
from booking_engine.routing.rules import RuleEvaluator
from booking_engine.routing.scoring import (
    LegacyFreeformScoring,
    MatchScorer,
    QualificationFormScoring,
    ScoringStrategy,
)
from booking_engine.routing.state_machine import (
    AssignmentState,
    AssignmentStateMachine,
    AssignmentTrigger,
    InvalidTransitionError,
)
from booking_engine.routing.strategies import (
    CollectiveStrategy,
    RoundRobinStrategy,
    SmartStrategy,
)

__all__ = [
    "AssignmentOrchestrator", "EventNotFoundError", "AssignmentConfigurationError",
    "register_strategy", "get_strategy", "get_registered_strategies",
    "RuleEvaluator",
    "MatchScorer", "ScoringStrategy", "QualificationFormScoring", "LegacyFreeformScoring",
    "AssignmentStateMachine", "AssignmentState", "AssignmentTrigger", "InvalidTransitionError",
    "CollectiveStrategy", "RoundRobinStrategy", "SmartStrategy",
    "RoutingInsights", "RoutingNotEnabledError",
]
