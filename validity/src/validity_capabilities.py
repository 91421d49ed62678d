#!/usr/bin/env python3
"""
Validity Capabilities Module

Descriptor advertising which optional queries a state validity checker
supports. Planners read it to decide whether clearance or gradient queries
are worth making; the checkers themselves never enforce it.

Author: Robot Control Team
"""

from typing import Dict
from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class ValidityCapabilities:
    """Properties that a state validity checker may have."""
    has_exact_clearance: bool = False
    has_bounded_approximate_clearance: bool = False  # lower bound on the true distance
    has_approximate_clearance: bool = False
    has_gradient_computation: bool = False

    @property
    def has_clearance(self) -> bool:
        """True if any kind of clearance information is reported."""
        return (self.has_exact_clearance or
                self.has_bounded_approximate_clearance or
                self.has_approximate_clearance)

    def to_dict(self) -> Dict[str, bool]:
        """Get capabilities as a plain dictionary."""
        return asdict(self)
