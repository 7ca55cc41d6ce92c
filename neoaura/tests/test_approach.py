import unittest

import numpy as np
import pytest

from neoaura import (
    EARTH_ELEMENTS,
    ApproachKind,
    ConfigurationError,
    OrbitalElements,
    closest_approach_scan,
    earth_state_at,
    find_all_crossings,
    find_closest_approach,
    make_search_config,
)

FAR_BODY = OrbitalElements(a=2.5, e=0.05, i=3.0, Omega=80.0, omega=40.0, M0=10.0, n=0.9856 / 2.5**1.5)

# Earth's orbit tilted by 5 deg about the node line: the two bodies meet at the nodes
INCLINED_TWIN = EARTH_ELEMENTS._replace(i=5.0)

# Earth's orbit, trailing by ~2.9 deg of mean anomaly (~0.05 AU)
TRAILING_TWIN = EARTH_ELEMENTS._replace(M0=-np.rad2deg(0.05))


class TestFindClosestApproach(unittest.TestCase):

    def test_identical_orbits_collide_immediately(self):
        event = find_closest_approach(EARTH_ELEMENTS, EARTH_ELEMENTS)
        self.assertIsNotNone(event)
        self.assertEqual(event.kind, ApproachKind.COLLISION)
        self.assertEqual(event.time, 0.0)
        self.assertLess(event.distance, 1e-12)

    def test_distant_body_returns_none(self):
        self.assertIsNone(find_closest_approach(EARTH_ELEMENTS, FAR_BODY, threshold=0.01))

    def test_fine_pass_finds_node_crossing(self):
        event = find_closest_approach(EARTH_ELEMENTS, INCLINED_TWIN, horizon_days=365.0, threshold=1e-4)
        self.assertIsNotNone(event)
        self.assertIn(event.kind, (ApproachKind.COLLISION, ApproachKind.THRESHOLD_CROSSING))
        self.assertLess(event.distance, 1e-4)
        self.assertTrue(0.0 <= event.time <= 365.0)
        self.assertAlmostEqual(
            event.distance, np.linalg.norm(event.position_a - event.position_b), places=15)

    def test_refine_band_without_crossing_returns_none(self):
        self.assertIsNone(find_closest_approach(EARTH_ELEMENTS, TRAILING_TWIN, horizon_days=400.0))

    def test_coarse_hit_is_a_threshold_crossing(self):
        event = find_closest_approach(EARTH_ELEMENTS, INCLINED_TWIN, horizon_days=365.0, threshold=0.005)
        self.assertEqual(event.kind, ApproachKind.THRESHOLD_CROSSING)
        self.assertLess(event.distance, 0.005)
        self.assertEqual(event.time, np.floor(event.time))

    def test_custom_config(self):
        config = make_search_config(coarse_step=2.0, fine_step=0.05)
        event = find_closest_approach(EARTH_ELEMENTS, INCLINED_TWIN, horizon_days=365.0,
                                      threshold=1e-4, config=config)
        self.assertLess(event.distance, 1e-4)

    def test_deterministic(self):
        a = find_closest_approach(EARTH_ELEMENTS, INCLINED_TWIN, horizon_days=365.0, threshold=1e-4)
        b = find_closest_approach(EARTH_ELEMENTS, INCLINED_TWIN, horizon_days=365.0, threshold=1e-4)
        self.assertEqual(a.time, b.time)
        self.assertEqual(a.distance, b.distance)


def test_thresholds_come_from_config():
    config = make_search_config(approach_threshold=0.06, crossing_threshold=0.06, crossing_step=2.0)
    event = find_closest_approach(EARTH_ELEMENTS, TRAILING_TWIN, horizon_days=400.0, config=config)
    assert event.kind == ApproachKind.THRESHOLD_CROSSING
    assert event.time == 0.0

    crossings = find_all_crossings(EARTH_ELEMENTS, TRAILING_TWIN, horizon_days=10.0, config=config)
    assert [c.time for c in crossings] == [0.0, 2.0, 4.0, 6.0, 8.0, 10.0]
    # Explicit arguments still win
    assert find_all_crossings(EARTH_ELEMENTS, TRAILING_TWIN, horizon_days=10.0, threshold=0.01,
                              config=config) == []


def test_state_snapshot_is_not_an_orbit():
    snapshot = earth_state_at(0.0)
    with pytest.raises(ConfigurationError):
        find_closest_approach(EARTH_ELEMENTS, snapshot, horizon_days=30.0)
    with pytest.raises(ConfigurationError):
        find_all_crossings(snapshot, EARTH_ELEMENTS, horizon_days=30.0)


def test_horizon_over_cap_is_rejected():
    with pytest.raises(ConfigurationError):
        find_closest_approach(EARTH_ELEMENTS, FAR_BODY, horizon_days=365.0 * 6)
    with pytest.raises(ConfigurationError):
        find_all_crossings(EARTH_ELEMENTS, FAR_BODY, horizon_days=-1.0)


def test_degenerate_orbit_is_rejected_before_sampling():
    hyperbolic = FAR_BODY._replace(e=1.3)
    assert find_closest_approach(EARTH_ELEMENTS, hyperbolic) is None
    assert find_all_crossings(hyperbolic, EARTH_ELEMENTS) == []
    assert closest_approach_scan(EARTH_ELEMENTS, hyperbolic) is None


def test_all_crossings_of_identical_orbits():
    crossings = find_all_crossings(EARTH_ELEMENTS, EARTH_ELEMENTS, horizon_days=10.0, step=0.5)
    assert len(crossings) == 21
    assert [c.time for c in crossings] == [0.5 * k for k in range(21)]
    assert all(c.kind == ApproachKind.THRESHOLD_CROSSING for c in crossings)


def test_all_crossings_empty_for_distant_body():
    assert find_all_crossings(EARTH_ELEMENTS, FAR_BODY) == []


def test_closest_approach_scan_identical_orbits():
    event = closest_approach_scan(EARTH_ELEMENTS, EARTH_ELEMENTS, horizon_days=30.0)
    assert event.kind == ApproachKind.CLOSEST_APPROACH
    assert event.distance == pytest.approx(0.0, abs=1e-12)


def test_closest_approach_scan_refines_node_crossing():
    coarse = closest_approach_scan(EARTH_ELEMENTS, INCLINED_TWIN, horizon_days=365.0, refine=False)
    refined = closest_approach_scan(EARTH_ELEMENTS, INCLINED_TWIN, horizon_days=365.0)
    assert refined.distance <= coarse.distance
    assert refined.distance < 1e-6
    assert abs(refined.time - coarse.time) <= 0.1 + 1e-9


def test_closest_approach_scan_trailing_twin():
    event = closest_approach_scan(EARTH_ELEMENTS, TRAILING_TWIN, horizon_days=400.0)
    assert 0.04 < event.distance < 0.06


if __name__ == '__main__':
    unittest.main()
