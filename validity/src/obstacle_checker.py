#!/usr/bin/env python3
"""
Obstacle Validity Checker Module

Geometric state validity checkers for real vector spaces:
- Sphere and axis-aligned box obstacles with exact signed distance
- Point cloud obstacles with nearest-neighbor clearance (scipy cKDTree)
- Optional bound checking folded into validity and clearance

Both checkers hold only read-only data after construction, so concurrent
queries need no locking.

Author: Robot Control Team
"""

import math
import logging
from abc import abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial import cKDTree

try:
    from .state_validity_checker import StateValidityChecker, StateValidityError
    from .validity_capabilities import ValidityCapabilities
    from .validity_config import ValidityConfigError, load_validity_config
except ImportError:
    from state_validity_checker import StateValidityChecker, StateValidityError
    from validity_capabilities import ValidityCapabilities
    from validity_config import ValidityConfigError, load_validity_config

logger = logging.getLogger(__name__)


class ObstacleType(Enum):
    """Supported obstacle shapes."""
    SPHERE = "sphere"
    BOX = "box"


@dataclass
class Obstacle:
    """Obstacle in the state space."""
    name: str
    type: ObstacleType
    center: np.ndarray
    radius: float = 0.0               # sphere only
    size: Optional[np.ndarray] = None  # box only, full edge lengths

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Obstacle':
        """Create obstacle from a constraints.yaml 'obstacles.list' entry."""
        name = data.get('name', 'unnamed')
        try:
            obs_type = ObstacleType(data.get('type', 'box'))
        except ValueError:
            raise ValidityConfigError(f"Unsupported obstacle type '{data.get('type')}' for '{name}'")

        if 'center' not in data:
            raise ValidityConfigError(f"Obstacle '{name}' has no center")
        center = np.asarray(data['center'], dtype=float)

        if obs_type == ObstacleType.SPHERE:
            radius = float(data.get('radius', 0.05))
            if radius <= 0:
                raise ValidityConfigError(f"Sphere '{name}' radius must be positive, got {radius}")
            return cls(name, obs_type, center, radius=radius)

        size = np.asarray(data.get('size', [0.1] * center.size), dtype=float)
        if size.shape != center.shape or np.any(size <= 0):
            raise ValidityConfigError(f"Box '{name}' size must be positive and match center dimension")
        return cls(name, obs_type, center, size=size)

    @property
    def dimension(self) -> int:
        return int(self.center.size)

    def signed_distance(self, state: np.ndarray,
                        with_gradient: bool = False) -> Tuple[float, Optional[np.ndarray]]:
        """
        Signed distance from state to the obstacle surface.

        Negative inside the obstacle. The gradient is the unit direction
        that increases the distance.
        """
        offset = state - self.center

        if self.type == ObstacleType.SPHERE:
            norm = float(np.linalg.norm(offset))
            dist = norm - self.radius
            if not with_gradient:
                return dist, None
            gradient = np.zeros_like(offset)
            if norm > 0:
                gradient = offset / norm
            else:
                gradient[0] = 1.0  # center: any direction escapes
            return dist, gradient

        q = np.abs(offset) - self.size / 2
        outside = float(np.linalg.norm(np.maximum(q, 0.0)))
        inside = float(min(np.max(q), 0.0))
        dist = outside + inside
        if not with_gradient:
            return dist, None

        direction = np.where(offset >= 0, 1.0, -1.0)
        if outside > 0:
            gradient = direction * np.maximum(q, 0.0) / outside
        else:
            gradient = np.zeros_like(offset)
            axis = int(np.argmax(q))  # nearest face
            gradient[axis] = direction[axis]
        return dist, gradient


def build_obstacles(config: Dict[str, Any]) -> List[Obstacle]:
    """Build obstacles from the 'obstacles' section of a validity config."""
    obstacles_config = config.get('obstacles', {}) or {}
    if not obstacles_config.get('enabled', False):
        return []
    return [Obstacle.from_dict(entry) for entry in obstacles_config.get('list', []) or []]


def _bounds_clearance(si, state: np.ndarray,
                      with_gradient: bool = False) -> Tuple[float, Optional[np.ndarray]]:
    """Signed distance from state to the boundary of the space bounds."""
    to_lower = state - si.lower_bounds
    to_upper = si.upper_bounds - state
    margins = np.minimum(to_lower, to_upper)
    axis = int(np.argmin(margins))
    dist = float(margins[axis])
    if not with_gradient:
        return dist, None
    gradient = np.zeros_like(state)
    gradient[axis] = 1.0 if to_lower[axis] <= to_upper[axis] else -1.0
    return dist, gradient


class _GeometricChecker(StateValidityChecker):
    """Shared state handling for the geometric checkers."""

    def __init__(self, si, capabilities: ValidityCapabilities, check_bounds: bool = True):
        self.check_bounds = check_bounds
        super().__init__(si, capabilities)

    def _prepare_state(self, state: np.ndarray) -> np.ndarray:
        state = np.asarray(state, dtype=float)
        if state.shape != (self.si.dimension,):
            raise StateValidityError(f"Expected state of dimension {self.si.dimension}, got shape {state.shape}")
        if not np.all(np.isfinite(state)):
            raise StateValidityError("State contains non-finite values")
        return state

    @abstractmethod
    def _obstacle_clearance(self, state: np.ndarray,
                            with_gradient: bool) -> Tuple[float, Optional[np.ndarray]]:
        """Signed distance to the nearest obstacle and its gradient."""

    def _evaluate(self, state: np.ndarray, with_gradient: bool) -> Tuple[bool, float, Optional[np.ndarray]]:
        """Single pass: validity, overall clearance and its gradient."""
        state = self._prepare_state(state)
        dist, gradient = self._obstacle_clearance(state, with_gradient)
        valid = dist > 0

        if self.check_bounds:
            valid = valid and self.si.satisfies_bounds(state)
            bounds_dist, bounds_gradient = _bounds_clearance(self.si, state, with_gradient)
            if bounds_dist < dist:
                dist, gradient = bounds_dist, bounds_gradient

        return valid, dist, gradient

    def is_valid(self, state: np.ndarray) -> bool:
        return self._evaluate(state, False)[0]

    def is_valid_with_clearance(self, state: np.ndarray) -> Tuple[bool, float]:
        valid, dist, _ = self._evaluate(state, False)
        return valid, dist

    def is_valid_with_gradient(self, state: np.ndarray,
                               gradient: np.ndarray) -> Tuple[bool, float, bool]:
        valid, dist, grad = self._evaluate(state, True)
        if grad is None:
            return valid, dist, False
        gradient[:] = grad
        return valid, dist, True

    def clearance(self, state: np.ndarray) -> float:
        return self._evaluate(state, False)[1]

    def clearance_with_gradient(self, state: np.ndarray,
                                gradient: np.ndarray) -> Tuple[float, bool]:
        _, dist, available = self.is_valid_with_gradient(state, gradient)
        return dist, available


class ObstacleValidityChecker(_GeometricChecker):
    """Exact clearance checker for sphere and box obstacles."""

    def __init__(self, si, obstacles: Sequence[Obstacle], check_bounds: bool = True):
        """
        Initialize obstacle validity checker.

        Args:
            si: SpaceInformation instance
            obstacles: Obstacles, each matching the space dimension
            check_bounds: Treat states outside the space bounds as invalid
        """
        for obstacle in obstacles:
            if obstacle.dimension != si.dimension:
                raise ValidityConfigError(
                    f"Obstacle '{obstacle.name}' has dimension {obstacle.dimension}, space has {si.dimension}")
        self.obstacles = tuple(obstacles)

        capabilities = ValidityCapabilities(has_exact_clearance=True, has_gradient_computation=True)
        super().__init__(si, capabilities, check_bounds)

        logger.info(f"Obstacle validity checker initialized with {len(self.obstacles)} obstacles")

    @classmethod
    def from_config(cls, si, config_path: Optional[str] = None,
                    check_bounds: bool = True) -> 'ObstacleValidityChecker':
        """Create checker from the 'obstacles' section of constraints.yaml."""
        return cls(si, build_obstacles(load_validity_config(config_path)), check_bounds)

    def _obstacle_clearance(self, state: np.ndarray,
                            with_gradient: bool) -> Tuple[float, Optional[np.ndarray]]:
        best_dist, best_gradient, nearest = math.inf, None, None
        for obstacle in self.obstacles:
            dist, gradient = obstacle.signed_distance(state, with_gradient)
            if dist < best_dist:
                best_dist, best_gradient, nearest = dist, gradient, obstacle
        if nearest is not None:
            logger.debug("Nearest obstacle '%s' at %.4f", nearest.name, best_dist)
        return best_dist, best_gradient

    def get_nearest_obstacle(self, state: np.ndarray) -> Optional[Obstacle]:
        """Return the obstacle closest to state (None without obstacles)."""
        state = self._prepare_state(state)
        if not self.obstacles:
            return None
        return min(self.obstacles, key=lambda o: o.signed_distance(state)[0])


class PointCloudValidityChecker(_GeometricChecker):
    """
    Checker for obstacles sampled as a point cloud.

    Each point is inflated by radius. Clearance is measured to the nearest
    sampled point, so it approximates the distance to the real surface.
    """

    def __init__(self, si, points: np.ndarray, radius: float = 0.02, check_bounds: bool = True):
        points = np.asarray(points, dtype=float)
        if points.ndim != 2 or points.shape[0] == 0 or points.shape[1] != si.dimension:
            raise ValidityConfigError(
                f"Point cloud must have shape (N, {si.dimension}), got {points.shape}")
        if radius < 0:
            raise ValidityConfigError(f"Point radius must be non-negative, got {radius}")

        self.points = points
        self.radius = float(radius)
        self._tree = cKDTree(points)

        capabilities = ValidityCapabilities(has_approximate_clearance=True, has_gradient_computation=True)
        super().__init__(si, capabilities, check_bounds)

        logger.info(f"Point cloud validity checker initialized with {len(points)} points, radius {radius:.3f}")

    def _obstacle_clearance(self, state: np.ndarray,
                            with_gradient: bool) -> Tuple[float, Optional[np.ndarray]]:
        nearest_dist, idx = self._tree.query(state)
        dist = float(nearest_dist) - self.radius
        if not with_gradient:
            return dist, None

        gradient = np.zeros_like(state)
        if nearest_dist > 0:
            gradient = (state - self.points[idx]) / nearest_dist
        else:
            gradient[0] = 1.0
        return dist, gradient
