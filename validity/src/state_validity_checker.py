#!/usr/bin/env python3
"""
State Validity Checker Module

Abstract contract used by planners to ask whether a state is admissible:
- Binary validity (mandatory for every checker)
- Signed clearance to the nearest invalid state (optional)
- Gradient direction away from invalidity (optional)

Only is_valid() has to be implemented. The richer queries have default
implementations layered on it, so a minimal checker can be used through
every call shape. The defaults issue two separate queries (clearance, then
validity) and are not atomic; checkers that can answer both in a single pass
should override the composed calls directly.

Implementations must be thread safe: planner worker threads call the same
instance concurrently.

Author: Robot Control Team
"""

import numpy as np
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

try:
    from .validity_capabilities import ValidityCapabilities
except ImportError:
    from validity_capabilities import ValidityCapabilities

logger = logging.getLogger(__name__)


class StateValidityError(Exception):
    """Raised when a checker cannot evaluate a state."""
    pass


class StateValidityChecker(ABC):
    """
    Abstract definition for a class checking the validity of states.

    The space information instance is borrowed: it must outlive the checker
    and is never modified by it.
    """

    def __init__(self, si, capabilities: Optional[ValidityCapabilities] = None):
        """
        Initialize state validity checker.

        Args:
            si: SpaceInformation instance this checker operates on
            capabilities: Capabilities of the concrete checker (all False if None)
        """
        self.si = si
        self._capabilities = capabilities if capabilities is not None else ValidityCapabilities()

        for mismatch in find_capability_mismatches(self):
            logger.warning(f"{type(self).__name__}: {mismatch}")

    @abstractmethod
    def is_valid(self, state: np.ndarray) -> bool:
        """
        Return True if the state is valid.

        Usually this means at least collision checking. If the space can
        produce states outside its bounds (interpolation, propagation), this
        should also call si.satisfies_bounds().
        """

    def is_valid_with_clearance(self, state: np.ndarray) -> Tuple[bool, float]:
        """
        Check validity and report the distance to the nearest invalid state.

        Returns:
            Tuple of (is_valid, clearance)
        """
        dist = self.clearance(state)
        return self.is_valid(state), dist

    def is_valid_with_gradient(self, state: np.ndarray,
                               gradient: np.ndarray) -> Tuple[bool, float, bool]:
        """
        Check validity, report clearance and, if available, the gradient.

        Args:
            state: State to check
            gradient: Tangent-space buffer, updated in place only when a
                gradient is available

        Returns:
            Tuple of (is_valid, clearance, gradient_available)
        """
        dist, gradient_available = self.clearance_with_gradient(state, gradient)
        return self.is_valid(state), dist, gradient_available

    def clearance(self, state: np.ndarray) -> float:
        """
        Report the distance to the nearest invalid state.

        A negative value is the penetration depth of an invalid state.
        Returns 0.0 when no clearance information is available.
        """
        return 0.0

    def clearance_with_gradient(self, state: np.ndarray,
                                gradient: np.ndarray) -> Tuple[float, bool]:
        """
        Report clearance and, if available, write the direction that moves
        the state away from invalidity into gradient.

        Returns:
            Tuple of (clearance, gradient_available)
        """
        return self.clearance(state), False

    def get_capabilities(self) -> ValidityCapabilities:
        """Return the capabilities of this state validity checker."""
        return self._capabilities

    @property
    def capabilities(self) -> ValidityCapabilities:
        return self._capabilities


class AllValidChecker(StateValidityChecker):
    """The simplest state validity checker: all states are valid."""

    def is_valid(self, state: np.ndarray) -> bool:
        return True


class FunctionValidityChecker(StateValidityChecker):
    """Adapter turning plain callables into a state validity checker."""

    def __init__(self, si, validity_fn: Callable[[np.ndarray], bool],
                 clearance_fn: Optional[Callable[[np.ndarray], float]] = None,
                 capabilities: Optional[ValidityCapabilities] = None):
        """
        Args:
            si: SpaceInformation instance
            validity_fn: Returns True for valid states
            clearance_fn: Optional signed clearance function
            capabilities: Capabilities advertised for clearance_fn
        """
        if not callable(validity_fn):
            raise TypeError(f"validity_fn must be callable, got {type(validity_fn).__name__}")

        self.validity_fn = validity_fn
        self.clearance_fn = clearance_fn
        super().__init__(si, capabilities)

        if clearance_fn is None and self._capabilities.has_clearance:
            logger.warning("FunctionValidityChecker advertises clearance but has no clearance function")

    def is_valid(self, state: np.ndarray) -> bool:
        return bool(self.validity_fn(state))

    def clearance(self, state: np.ndarray) -> float:
        if self.clearance_fn is None:
            return 0.0
        return float(self.clearance_fn(state))


def _overrides(checker: StateValidityChecker, method_name: str) -> bool:
    """Check whether the checker's class replaces a default method."""
    return getattr(type(checker), method_name) is not getattr(StateValidityChecker, method_name)


def find_capability_mismatches(checker: StateValidityChecker) -> List[str]:
    """
    Find capability flags that promise features the checker never implements.

    Returns:
        List of human readable mismatch descriptions (empty if consistent)
    """
    capabilities = checker.get_capabilities()
    mismatches = []

    if capabilities.has_clearance and not _overrides(checker, 'clearance'):
        mismatches.append("clearance advertised but clearance() is not overridden")

    if capabilities.has_gradient_computation and not _overrides(checker, 'clearance_with_gradient'):
        mismatches.append("gradient computation advertised but clearance_with_gradient() is not overridden")

    return mismatches
