"""
Extension Point Store.

This module provides the named collections plugins contribute items to.

Key features:
- First registration of a name wins, later ones are ignored
- Items are appended in invocation order
- Per-point transform applied on every read
- Access gated by the registry stage machine
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from plugworks.core.stages import Stage, StageMachine
from plugworks.logging_config import get_logger

Item = dict[str, Any]
Transform = Callable[[Item], Any]

logger = get_logger("core.extension")


class ExtensionPointError(Exception):
    """Raised when attaching to an extension point that does not exist."""

    pass


def identity(item: Item) -> Any:
    return item


@dataclass
class ExtensionPoint:
    """
    A named collection of contributed items.

    Attributes:
        name: Extension point name
        transform: Function applied to each item on read
        items: Contributed items, in contribution order
    """

    name: str
    transform: Transform = identity
    items: list[Item] = field(default_factory=list)

    def apply(self) -> list[Any]:
        return [self.transform(item) for item in self.items]


class ExtensionPointStore:
    """
    Extension point storage.

    Registration is allowed in any stage but Ready, attaching only while
    plugins initialise, and reading at any time.
    """

    def __init__(self, stages: StageMachine):
        """
        Initialize ExtensionPointStore.

        Args:
            stages: Stage machine gating store access
        """
        self._stages = stages
        self._points: dict[str, ExtensionPoint] = {}

    def register(self, name: str, transform: Transform | None = None) -> None:
        """
        Register an extension point.

        Registering a name that already exists leaves the first
        registration (and its transform) in place.

        Args:
            name: Extension point name
            transform: Per-item read transform (default: identity)

        Raises:
            StageError: If the registry is Ready
        """
        logger.trace("registerExtensionPoint {}", name)

        self._stages.forbid("registerExtensionPoint", Stage.READY)

        if name not in self._points:
            self._points[name] = ExtensionPoint(name, transform or identity)

    def attach(self, name: str, item: Item) -> None:
        """
        Append an item to an extension point.

        Args:
            name: Extension point name
            item: Item to contribute

        Raises:
            StageError: If plugins are not initialising
            ExtensionPointError: If the extension point is not registered
        """
        logger.trace("attachToExtensionPoint {}", name)

        self._stages.expect("attachToExtensionPoint", Stage.PLUGINS_INITIALISATION)

        point = self._points.get(name)
        if point is None:
            raise ExtensionPointError(f'No extension point with name "{name}"')

        point.items.append(item)

    def apply(self, name: str) -> list[Any] | None:
        """
        Read an extension point with its transform applied.

        Args:
            name: Extension point name

        Returns:
            New list of transformed items, or None if the name is unknown
        """
        logger.trace("applyExtensionPoint {}", name)

        point = self._points.get(name)
        if point is None:
            return None

        return point.apply()

    def names(self) -> list[str]:
        """List registered extension point names."""
        return list(self._points)

    def __contains__(self, name: object) -> bool:
        return name in self._points

    def __len__(self) -> int:
        return len(self._points)
