#!/usr/bin/env python3
"""
State Validity Package - Source Module

Pluggable state validity checking for motion planners.

This package provides:
- The StateValidityChecker contract with default clearance/gradient composition
- Capability descriptors advertising optional checker features
- Space information with bounds and discretized motion checking
- Geometric, composite and monitored checker implementations

Author: Robot Control Team
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Robot Control Team"

# Base modules first, concrete checkers depend on them
from .validity_capabilities import ValidityCapabilities
from .state_validity_checker import (
    StateValidityChecker,
    StateValidityError,
    AllValidChecker,
    FunctionValidityChecker,
    find_capability_mismatches
)
from .validity_config import ValidityConfigError, load_validity_config
from .space_information import SpaceInformation, SpaceInformationError
from .obstacle_checker import (
    Obstacle,
    ObstacleType,
    ObstacleValidityChecker,
    PointCloudValidityChecker,
    build_obstacles
)
from .composite_checker import CompositeValidityChecker, MonitoredValidityChecker

__all__ = [
    'ValidityCapabilities',
    'StateValidityChecker',
    'StateValidityError',
    'AllValidChecker',
    'FunctionValidityChecker',
    'find_capability_mismatches',
    'ValidityConfigError',
    'load_validity_config',
    'SpaceInformation',
    'SpaceInformationError',
    'Obstacle',
    'ObstacleType',
    'ObstacleValidityChecker',
    'PointCloudValidityChecker',
    'build_obstacles',
    'CompositeValidityChecker',
    'MonitoredValidityChecker'
]

# Package metadata
__title__ = "state_validity"
__description__ = "State validity checking contract for motion planning"
__license__ = "MIT"
