#!/usr/bin/env python3
"""
Unit Tests for State Validity Checker Contract

Test suite covering:
- Default clearance and gradient composition
- AllValidChecker baseline behavior
- Consistency between validity call shapes
- Idempotence over random states
- Concurrent queries on one checker instance
- Capability mismatch detection

Author: Robot Control Team
"""

import sys
import os
import unittest
import dataclasses
import numpy as np
from concurrent.futures import ThreadPoolExecutor

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from validity.src.validity_capabilities import ValidityCapabilities
from validity.src.space_information import SpaceInformation
from validity.src.state_validity_checker import (
    StateValidityChecker, AllValidChecker, FunctionValidityChecker,
    find_capability_mismatches
)


class HalfSpaceChecker(StateValidityChecker):
    """States with a positive first coordinate are valid. No clearance."""

    def __init__(self, si):
        super().__init__(si)
        self.calls = []

    def is_valid(self, state):
        self.calls.append('is_valid')
        return bool(state[0] > 0)


class ClearanceOnlyChecker(HalfSpaceChecker):
    """Half-space checker reporting exact clearance but no gradient."""

    def __init__(self, si):
        StateValidityChecker.__init__(self, si, ValidityCapabilities(has_exact_clearance=True))
        self.calls = []

    def clearance(self, state):
        self.calls.append('clearance')
        return float(state[0])


class GradientChecker(ClearanceOnlyChecker):
    """Half-space checker with gradient along the first axis."""

    def __init__(self, si):
        StateValidityChecker.__init__(
            self, si, ValidityCapabilities(has_exact_clearance=True, has_gradient_computation=True))
        self.calls = []

    def clearance_with_gradient(self, state, gradient):
        gradient[:] = 0.0
        gradient[0] = 1.0
        return self.clearance(state), True


class OverclaimingChecker(StateValidityChecker):
    """Advertises clearance and gradient without implementing either."""

    def __init__(self, si):
        super().__init__(si, ValidityCapabilities(has_approximate_clearance=True,
                                                  has_gradient_computation=True))

    def is_valid(self, state):
        return True


def random_states(si, count, seed=7):
    rng = np.random.default_rng(seed)
    return [rng.uniform(si.lower_bounds, si.upper_bounds) for _ in range(count)]


class TestContract(unittest.TestCase):
    """Test cases for the abstract contract and its defaults."""

    def setUp(self):
        self.si = SpaceInformation([-1.0, -1.0, -1.0], [1.0, 1.0, 1.0])

    def test_is_valid_is_mandatory(self):
        """A checker without is_valid cannot be instantiated."""
        with self.assertRaises(TypeError):
            StateValidityChecker(self.si)

    def test_space_information_is_borrowed(self):
        checker = HalfSpaceChecker(self.si)
        self.assertIs(checker.si, self.si)

    def test_capabilities_default_to_false(self):
        capabilities = HalfSpaceChecker(self.si).get_capabilities()
        self.assertEqual(capabilities, ValidityCapabilities())
        self.assertFalse(capabilities.has_clearance)

    def test_default_clearance_is_zero(self):
        checker = HalfSpaceChecker(self.si)
        for state in random_states(self.si, 20):
            valid, dist = checker.is_valid_with_clearance(state)
            self.assertEqual(dist, 0.0)
            self.assertEqual(valid, checker.is_valid(state))

    def test_default_composition_queries_clearance_then_validity(self):
        checker = ClearanceOnlyChecker(self.si)
        valid, dist = checker.is_valid_with_clearance(np.array([0.25, 0.0, 0.0]))

        self.assertTrue(valid)
        self.assertAlmostEqual(dist, 0.25)
        self.assertEqual(checker.calls, ['clearance', 'is_valid'])

    def test_default_gradient_leaves_buffer_untouched(self):
        checker = ClearanceOnlyChecker(self.si)
        gradient = np.full(3, np.nan)

        valid, dist, available = checker.is_valid_with_gradient(np.array([-0.5, 0.2, 0.1]), gradient)

        self.assertFalse(valid)
        self.assertAlmostEqual(dist, -0.5)
        self.assertFalse(available)
        self.assertTrue(np.all(np.isnan(gradient)))

    def test_default_clearance_with_gradient_falls_back_to_clearance(self):
        checker = ClearanceOnlyChecker(self.si)
        gradient = self.si.allocate_gradient()
        dist, available = checker.clearance_with_gradient(np.array([0.4, 0.0, 0.0]), gradient)

        self.assertAlmostEqual(dist, 0.4)
        self.assertFalse(available)

    def test_gradient_override_is_used_by_composed_call(self):
        checker = GradientChecker(self.si)
        gradient = self.si.allocate_gradient()

        valid, dist, available = checker.is_valid_with_gradient(np.array([0.3, -0.2, 0.0]), gradient)

        self.assertTrue(valid)
        self.assertAlmostEqual(dist, 0.3)
        self.assertTrue(available)
        np.testing.assert_array_equal(gradient, [1.0, 0.0, 0.0])

    def test_call_shapes_agree_on_validity(self):
        """Validity from every call shape agrees for an unchanged environment."""
        for checker in (HalfSpaceChecker(self.si), ClearanceOnlyChecker(self.si), GradientChecker(self.si)):
            for state in random_states(self.si, 50):
                gradient = self.si.allocate_gradient()
                expected = checker.is_valid(state)
                self.assertEqual(checker.is_valid_with_clearance(state)[0], expected)
                self.assertEqual(checker.is_valid_with_gradient(state, gradient)[0], expected)

    def test_repeated_queries_are_identical(self):
        checker = GradientChecker(self.si)
        for state in random_states(self.si, 100, seed=11):
            self.assertEqual(checker.is_valid(state), checker.is_valid(state))
            self.assertEqual(checker.clearance(state), checker.clearance(state))


class TestAllValidChecker(unittest.TestCase):
    """Test cases for the all-valid baseline."""

    def setUp(self):
        self.si = SpaceInformation([-2.0, -2.0], [2.0, 2.0])
        self.checker = AllValidChecker(self.si)

    def test_capabilities_all_false(self):
        capabilities = self.checker.get_capabilities()
        self.assertFalse(capabilities.has_exact_clearance)
        self.assertFalse(capabilities.has_bounded_approximate_clearance)
        self.assertFalse(capabilities.has_approximate_clearance)
        self.assertFalse(capabilities.has_gradient_computation)

    def test_every_state_is_valid(self):
        for state in random_states(self.si, 100):
            gradient = np.full(2, np.nan)
            self.assertTrue(self.checker.is_valid(state))
            self.assertEqual(self.checker.clearance(state), 0.0)
            valid, dist, available = self.checker.is_valid_with_gradient(state, gradient)
            self.assertTrue(valid)
            self.assertEqual(dist, 0.0)
            self.assertFalse(available)
            self.assertTrue(np.all(np.isnan(gradient)))

    def test_out_of_bounds_state_is_valid(self):
        """Bounds are not checked by the baseline."""
        self.assertTrue(self.checker.is_valid(np.array([10.0, -10.0])))

    def test_no_capability_mismatches(self):
        self.assertEqual(find_capability_mismatches(self.checker), [])


class TestConcurrency(unittest.TestCase):
    """Test cases for concurrent access to one checker instance."""

    def setUp(self):
        self.si = SpaceInformation([-1.0, -1.0, -1.0], [1.0, 1.0, 1.0])

    def test_concurrent_queries_match_single_thread(self):
        checker = GradientChecker(self.si)
        state = np.array([0.2, 0.1, -0.3])
        expected = checker.is_valid_with_clearance(state)
        capabilities_before = checker.get_capabilities()

        def query_task(_):
            gradient = self.si.allocate_gradient()
            return checker.is_valid_with_clearance(state), checker.is_valid_with_gradient(state, gradient)

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(query_task, range(200)))

        for with_clearance, with_gradient in results:
            self.assertEqual(with_clearance, expected)
            self.assertEqual(with_gradient, (expected[0], expected[1], True))

        self.assertEqual(checker.get_capabilities(), capabilities_before)

    def test_capabilities_cannot_be_modified(self):
        capabilities = AllValidChecker(self.si).get_capabilities()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            capabilities.has_exact_clearance = True


class TestCapabilityMismatches(unittest.TestCase):
    """Test cases for capability consistency reporting."""

    def setUp(self):
        self.si = SpaceInformation([0.0], [1.0])

    def test_overclaiming_checker_is_reported(self):
        with self.assertLogs('validity.src.state_validity_checker', level='WARNING') as logs:
            checker = OverclaimingChecker(self.si)

        mismatches = find_capability_mismatches(checker)
        self.assertEqual(len(mismatches), 2)
        self.assertEqual(len(logs.records), 2)
        self.assertIn("clearance_with_gradient", mismatches[1])

    def test_overclaiming_checker_still_degrades_to_defaults(self):
        with self.assertLogs('validity.src.state_validity_checker', level='WARNING'):
            checker = OverclaimingChecker(self.si)

        gradient = self.si.allocate_gradient()
        self.assertEqual(checker.is_valid_with_gradient(np.array([0.5]), gradient), (True, 0.0, False))

    def test_consistent_checkers_report_nothing(self):
        self.assertEqual(find_capability_mismatches(ClearanceOnlyChecker(self.si)), [])
        self.assertEqual(find_capability_mismatches(GradientChecker(self.si)), [])


class TestFunctionValidityChecker(unittest.TestCase):
    """Test cases for the callable adapter."""

    def setUp(self):
        self.si = SpaceInformation([-1.0, -1.0], [1.0, 1.0])

    def test_validity_function_is_used(self):
        checker = FunctionValidityChecker(self.si, lambda s: s[0] + s[1] < 1.0)
        self.assertTrue(checker.is_valid(np.array([0.2, 0.2])))
        self.assertFalse(checker.is_valid(np.array([0.8, 0.8])))
        self.assertEqual(checker.clearance(np.array([0.2, 0.2])), 0.0)

    def test_clearance_function_is_used(self):
        checker = FunctionValidityChecker(
            self.si, lambda s: np.linalg.norm(s) > 0.5,
            clearance_fn=lambda s: np.linalg.norm(s) - 0.5,
            capabilities=ValidityCapabilities(has_exact_clearance=True))

        valid, dist = checker.is_valid_with_clearance(np.array([0.0, 0.75]))
        self.assertTrue(valid)
        self.assertAlmostEqual(dist, 0.25)

    def test_non_callable_rejected(self):
        with self.assertRaises(TypeError):
            FunctionValidityChecker(self.si, "not callable")

    def test_advertised_clearance_without_function_warns(self):
        with self.assertLogs('validity.src.state_validity_checker', level='WARNING'):
            FunctionValidityChecker(self.si, lambda s: True,
                                    capabilities=ValidityCapabilities(has_exact_clearance=True))


if __name__ == '__main__':
    unittest.main(verbosity=2)
