#!/usr/bin/env python3
"""
Space Information Module

Shared context for one planning problem over a bounded real vector space:
- Dimensionality and bounds of the state space
- Bound checking and enforcement
- Ownership of the state validity checker
- Discretized straight-line motion checking

Checkers only borrow the space information; the space information owns
the checker installed with set_state_validity_checker().

Author: Robot Control Team
"""

import math
import logging
from typing import Any, Dict, Optional, Sequence

import numpy as np

try:
    from .state_validity_checker import StateValidityChecker, AllValidChecker, FunctionValidityChecker
    from .validity_config import load_validity_config
except ImportError:
    from state_validity_checker import StateValidityChecker, AllValidChecker, FunctionValidityChecker
    from validity_config import load_validity_config

logger = logging.getLogger(__name__)


class SpaceInformationError(Exception):
    """Custom exception for invalid space definitions."""
    pass


class SpaceInformation:
    """Space information for a bounded real vector state space."""

    def __init__(self, lower_bounds: Sequence[float], upper_bounds: Sequence[float],
                 longest_valid_segment_fraction: float = 0.01):
        """
        Initialize space information.

        Args:
            lower_bounds: Lower bound for each dimension
            upper_bounds: Upper bound for each dimension
            longest_valid_segment_fraction: Motion check resolution as a
                fraction of the maximum extent of the space
        """
        self.lower_bounds = np.asarray(lower_bounds, dtype=float)
        self.upper_bounds = np.asarray(upper_bounds, dtype=float)

        if self.lower_bounds.ndim != 1 or self.lower_bounds.size == 0:
            raise SpaceInformationError("Bounds must be non-empty 1D sequences")
        if self.lower_bounds.shape != self.upper_bounds.shape:
            raise SpaceInformationError(
                f"Bounds dimension mismatch: {self.lower_bounds.size} lower vs {self.upper_bounds.size} upper")
        if np.any(self.lower_bounds > self.upper_bounds):
            raise SpaceInformationError("Lower bounds must not exceed upper bounds")
        if not 0.0 < longest_valid_segment_fraction <= 1.0:
            raise SpaceInformationError(
                f"longest_valid_segment_fraction must be in (0, 1], got {longest_valid_segment_fraction}")

        self.longest_valid_segment_fraction = float(longest_valid_segment_fraction)
        self._state_validity_checker = None

        logger.info(f"Space information initialized with {self.dimension} dimensions")

    @classmethod
    def from_config(cls, config_path: Optional[str] = None) -> 'SpaceInformation':
        """Create space information from the 'space' section of constraints.yaml."""
        space = load_validity_config(config_path).get('space') or {}
        if not isinstance(space, dict):
            raise SpaceInformationError(f"'space' section must be a mapping, got {type(space).__name__}")
        try:
            return cls(space['lower_bounds'], space['upper_bounds'],
                       space.get('longest_valid_segment_fraction', 0.01))
        except KeyError as e:
            raise SpaceInformationError(f"Missing space setting: {e}")
        except (TypeError, ValueError) as e:
            raise SpaceInformationError(f"Malformed space setting: {e}")

    @property
    def dimension(self) -> int:
        return int(self.lower_bounds.size)

    def get_maximum_extent(self) -> float:
        """Largest distance between two states of the space."""
        return float(np.linalg.norm(self.upper_bounds - self.lower_bounds))

    def satisfies_bounds(self, state: np.ndarray) -> bool:
        """Check if state lies within the space bounds."""
        state = np.asarray(state, dtype=float)
        if state.shape != self.lower_bounds.shape:
            return False
        return bool(np.all(state >= self.lower_bounds) and np.all(state <= self.upper_bounds))

    def enforce_bounds(self, state: np.ndarray) -> np.ndarray:
        """Return a copy of state clipped to the space bounds."""
        return np.clip(np.asarray(state, dtype=float), self.lower_bounds, self.upper_bounds)

    def allocate_state(self) -> np.ndarray:
        return np.zeros(self.dimension)

    def allocate_gradient(self) -> np.ndarray:
        """Allocate a tangent-space buffer for gradient queries."""
        return np.zeros(self.dimension)

    def distance(self, state1: np.ndarray, state2: np.ndarray) -> float:
        return float(np.linalg.norm(np.asarray(state2, dtype=float) - np.asarray(state1, dtype=float)))

    def interpolate(self, state1: np.ndarray, state2: np.ndarray, t: float) -> np.ndarray:
        """Linear interpolation between two states, t in [0, 1]."""
        state1 = np.asarray(state1, dtype=float)
        state2 = np.asarray(state2, dtype=float)
        return (1 - t) * state1 + t * state2

    def set_state_validity_checker(self, checker) -> None:
        """
        Install the state validity checker for this space.

        Args:
            checker: StateValidityChecker, callable(state) -> bool, or None to reset
        """
        if checker is None or isinstance(checker, StateValidityChecker):
            self._state_validity_checker = checker
        elif callable(checker):
            self._state_validity_checker = FunctionValidityChecker(self, checker)
        else:
            raise TypeError(f"Expected StateValidityChecker or callable, got {type(checker).__name__}")

        if checker is not None:
            logger.info(f"State validity checker set: {type(self._state_validity_checker).__name__}")

    def get_state_validity_checker(self) -> StateValidityChecker:
        """Return the installed checker, installing AllValidChecker if none was set."""
        if self._state_validity_checker is None:
            logger.warning("No state validity checker specified, all states are considered valid")
            self._state_validity_checker = AllValidChecker(self)
        return self._state_validity_checker

    def is_valid(self, state: np.ndarray) -> bool:
        return self.get_state_validity_checker().is_valid(state)

    def check_motion(self, state1: np.ndarray, state2: np.ndarray) -> bool:
        """
        Check the straight-line motion between two states.

        The segment is discretized so that consecutive checked states are at most
        longest_valid_segment_fraction * maximum extent apart. Both endpoints
        are checked.
        """
        checker = self.get_state_validity_checker()
        segment_length = self.longest_valid_segment_fraction * self.get_maximum_extent()
        dist = self.distance(state1, state2)

        num_segments = int(math.ceil(dist / segment_length)) if segment_length > 0 else 1
        num_segments = max(1, num_segments)

        for i in range(num_segments + 1):
            t = i / num_segments
            if not checker.is_valid(self.interpolate(state1, state2, t)):
                logger.debug(f"Motion invalid at t={t:.3f}")
                return False

        return True

    def get_space_summary(self) -> Dict[str, Any]:
        """Get summary of the space configuration."""
        checker = self._state_validity_checker
        return {
            'dimension': self.dimension,
            'lower_bounds': self.lower_bounds.tolist(),
            'upper_bounds': self.upper_bounds.tolist(),
            'maximum_extent': self.get_maximum_extent(),
            'longest_valid_segment_fraction': self.longest_valid_segment_fraction,
            'state_validity_checker': type(checker).__name__ if checker is not None else None
        }
