"""
State Validity Package
======================

Seam between geometry-agnostic planners and domain-specific validity checks.

Package Structure:
- src/: Core source code modules
- tests/: Unit tests

Main Components:
- StateValidityChecker: Contract queried by planners (validity, clearance, gradient)
- ValidityCapabilities: Flags advertising optional checker features
- SpaceInformation: Bounds, checker ownership and motion checking
- Geometric, composite and monitored checkers

Author: Robot Control Team
"""

__version__ = "1.0.0"
__author__ = "Robot Control Team"

from .src import (
    ValidityCapabilities,
    StateValidityChecker,
    StateValidityError,
    AllValidChecker,
    FunctionValidityChecker,
    SpaceInformation,
    SpaceInformationError,
    ObstacleValidityChecker,
    PointCloudValidityChecker,
    CompositeValidityChecker,
    MonitoredValidityChecker
)

__all__ = [
    'ValidityCapabilities',
    'StateValidityChecker',
    'StateValidityError',
    'AllValidChecker',
    'FunctionValidityChecker',
    'SpaceInformation',
    'SpaceInformationError',
    'ObstacleValidityChecker',
    'PointCloudValidityChecker',
    'CompositeValidityChecker',
    'MonitoredValidityChecker'
]
