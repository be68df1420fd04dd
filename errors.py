"""
Rewards engine exceptions
The engine itself raises almost nothing: malformed session data contributes
zero instead of failing. What is raised here signals a programming error.
"""


class RewardsEngineError(Exception):
    """Base class for rewards engine errors."""


class UnknownConditionError(RewardsEngineError):
    """A badge condition (or special kind) has no evaluator registered."""

    def __init__(self, condition):
        self.condition = condition
        super().__init__(f"No evaluator registered for condition {condition!r}")
