"""
Registry Lifecycle Stages.

This module provides the stage machine that gates registry operations.

Key features:
- Three ordered stages: Configuration -> PluginsInitialisation -> Ready
- Forward-only, single-step transitions
- Equality and inequality gates for operations
"""

from collections.abc import Callable
from enum import Enum


class StageError(Exception):
    """Raised when an operation is invoked in a stage that forbids it."""

    def __init__(self, operation: str, stage: "Stage"):
        self.operation = operation
        self.stage = stage
        super().__init__(
            f'Executing "{operation}" in "{stage.value}" stage is forbidden'
        )


class Stage(Enum):
    """Registry lifecycle stage."""

    CONFIGURATION = "Configuration"
    PLUGINS_INITIALISATION = "PluginsInitialisation"
    READY = "Ready"


_ORDER = [Stage.CONFIGURATION, Stage.PLUGINS_INITIALISATION, Stage.READY]


def stages_equal(current: Stage, stage: Stage) -> bool:
    return current is stage


def stages_not_equal(current: Stage, stage: Stage) -> bool:
    return current is not stage


class StageMachine:
    """
    Forward-only lifecycle stage holder.

    Operations declare which stages they are legal in through `expect`
    (legal only in the given stage) or `forbid` (legal in every stage but
    the given one). Both raise StageError carrying the operation name and
    the current stage.
    """

    def __init__(self):
        self._stage = Stage.CONFIGURATION

    @property
    def stage(self) -> Stage:
        return self._stage

    def advance(self, target: Stage) -> None:
        """
        Move to the next stage.

        Args:
            target: Stage to enter; must directly follow the current one

        Raises:
            StageError: If target is not the immediate successor
        """
        index = _ORDER.index(self._stage)
        if index + 1 >= len(_ORDER) or _ORDER[index + 1] is not target:
            raise StageError(f"advance to {target.value}", self._stage)
        self._stage = target

    def check(
        self,
        operation: str,
        stage: Stage,
        is_forbidden: Callable[[Stage, Stage], bool],
    ) -> None:
        """Raise StageError if is_forbidden(current, stage) holds."""
        if is_forbidden(self._stage, stage):
            raise StageError(operation, self._stage)

    def expect(self, operation: str, stage: Stage) -> None:
        """Allow operation only while in the given stage."""
        self.check(operation, stage, stages_not_equal)

    def forbid(self, operation: str, stage: Stage) -> None:
        """Allow operation in every stage except the given one."""
        self.check(operation, stage, stages_equal)

    def __repr__(self) -> str:
        return f"StageMachine({self._stage.value})"
