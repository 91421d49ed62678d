#!/usr/bin/env python3
"""
Composite and Monitored Validity Checkers

- CompositeValidityChecker: a state is valid only if every member checker
  accepts it (joint limits, environment collision, custom constraints...)
- MonitoredValidityChecker: forwards to another checker and keeps
  thread-safe query statistics

Author: Robot Control Team
"""

import math
import threading
import logging
from typing import Any, Dict, Sequence, Tuple

import numpy as np

try:
    from .state_validity_checker import StateValidityChecker
    from .validity_capabilities import ValidityCapabilities
except ImportError:
    from state_validity_checker import StateValidityChecker
    from validity_capabilities import ValidityCapabilities

logger = logging.getLogger(__name__)


def _combine_capabilities(checkers: Sequence[StateValidityChecker]) -> ValidityCapabilities:
    """Capabilities the composition can honestly advertise."""
    specs = [c.get_capabilities() for c in checkers]
    if not specs:
        return ValidityCapabilities()

    exact = all(s.has_exact_clearance for s in specs)
    bounded = not exact and all(s.has_exact_clearance or s.has_bounded_approximate_clearance for s in specs)
    approximate = not (exact or bounded) and any(s.has_clearance for s in specs)
    return ValidityCapabilities(
        has_exact_clearance=exact,
        has_bounded_approximate_clearance=bounded,
        has_approximate_clearance=approximate,
        has_gradient_computation=all(s.has_gradient_computation for s in specs)
    )


class CompositeValidityChecker(StateValidityChecker):
    """Validity checker combining several checkers with logical AND."""

    def __init__(self, si, checkers: Sequence[StateValidityChecker]):
        """
        Args:
            si: SpaceInformation instance shared by all members
            checkers: Member checkers, evaluated in order
        """
        self.checkers = tuple(checkers)
        super().__init__(si, _combine_capabilities(self.checkers))

        logger.info(f"Composite validity checker initialized with {len(self.checkers)} checkers: "
                    f"{[type(c).__name__ for c in self.checkers]}")

    def is_valid(self, state: np.ndarray) -> bool:
        for checker in self.checkers:
            if not checker.is_valid(state):
                logger.debug(f"State rejected by {type(checker).__name__}")
                return False
        return True

    def _rejected_without_clearance(self, state: np.ndarray) -> bool:
        """True if a member that reports no clearance rejects the state."""
        return any(not c.get_capabilities().has_clearance and not c.is_valid(state)
                   for c in self.checkers)

    def clearance(self, state: np.ndarray) -> float:
        """
        Minimum clearance over members; 0.0 if no member reports clearance.

        A state rejected by a member without clearance information is
        reported at 0.0 at most, never with a positive distance.
        """
        if not self.capabilities.has_clearance:
            return 0.0
        dist = min((c.clearance(state) for c in self.checkers
                    if c.get_capabilities().has_clearance), default=0.0)
        if dist > 0 and self._rejected_without_clearance(state):
            return 0.0
        return dist

    def clearance_with_gradient(self, state: np.ndarray,
                                gradient: np.ndarray) -> Tuple[float, bool]:
        """Clearance and gradient of the member closest to invalidity."""
        if not self.capabilities.has_clearance:
            return 0.0, False

        best_dist, best_gradient, available = math.inf, None, False
        for checker in self.checkers:
            if not checker.get_capabilities().has_clearance:
                continue
            candidate = np.zeros_like(gradient)
            dist, has_gradient = checker.clearance_with_gradient(state, candidate)
            if dist < best_dist:
                best_dist, available = dist, has_gradient
                best_gradient = candidate if has_gradient else None

        # the rejecting member gives no direction to escape along
        if best_dist > 0 and self._rejected_without_clearance(state):
            return 0.0, False

        if available:
            gradient[:] = best_gradient
        return best_dist, available


class MonitoredValidityChecker(StateValidityChecker):
    """Checker wrapper that counts validity and clearance queries."""

    def __init__(self, checker: StateValidityChecker):
        self.checker = checker
        self._stats_lock = threading.RLock()
        self.stats = self._empty_statistics()
        super().__init__(checker.si, checker.get_capabilities())

    @staticmethod
    def _empty_statistics() -> Dict[str, int]:
        return {
            'validity_checks': 0,
            'valid_states': 0,
            'invalid_states': 0,
            'clearance_queries': 0,
            'gradients_computed': 0
        }

    def _record_validity(self, valid: bool):
        with self._stats_lock:
            self.stats['validity_checks'] += 1
            if valid:
                self.stats['valid_states'] += 1
            else:
                self.stats['invalid_states'] += 1

    def _record_clearance(self, gradient_available: bool = False):
        with self._stats_lock:
            self.stats['clearance_queries'] += 1
            if gradient_available:
                self.stats['gradients_computed'] += 1

    def is_valid(self, state: np.ndarray) -> bool:
        valid = self.checker.is_valid(state)
        self._record_validity(valid)
        return valid

    def is_valid_with_clearance(self, state: np.ndarray) -> Tuple[bool, float]:
        valid, dist = self.checker.is_valid_with_clearance(state)
        self._record_validity(valid)
        self._record_clearance()
        return valid, dist

    def is_valid_with_gradient(self, state: np.ndarray,
                               gradient: np.ndarray) -> Tuple[bool, float, bool]:
        valid, dist, available = self.checker.is_valid_with_gradient(state, gradient)
        self._record_validity(valid)
        self._record_clearance(available)
        return valid, dist, available

    def clearance(self, state: np.ndarray) -> float:
        dist = self.checker.clearance(state)
        self._record_clearance()
        return dist

    def clearance_with_gradient(self, state: np.ndarray,
                                gradient: np.ndarray) -> Tuple[float, bool]:
        dist, available = self.checker.clearance_with_gradient(state, gradient)
        self._record_clearance(available)
        return dist, available

    def get_statistics(self) -> Dict[str, Any]:
        """Get a snapshot of the query statistics."""
        with self._stats_lock:
            stats = dict(self.stats)

        checks = stats['validity_checks']
        stats['valid_fraction'] = stats['valid_states'] / checks if checks else 0.0
        return stats

    def reset_statistics(self):
        with self._stats_lock:
            self.stats = self._empty_statistics()
