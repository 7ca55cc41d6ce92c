import math
import unittest

import numpy as np
import pydantic
import pytest

from neoaura import (
    DEFLECTION_METHODS,
    EARTH_ELEMENTS,
    EARTH_RADIUS_AU,
    KMPAU,
    AsteroidOrbitState,
    ConfigurationError,
    DebugOverrides,
    DeflectionMethodId,
    OrbitalElements,
    compute_deflection,
    deflection_stats,
    get_deflection_method,
    position_at,
    state_from_orbit,
)
from neoaura.deflection import required_velocity_change, success_probability


def _state(**changes):
    values = dict(
        eccentricity=0.209,
        inclination=9.899,
        semi_major_axis=1.412,
        velocity=12.0,
        position=(0.03, 0.04, 0.0),
        miss_distance=0.05,
    )
    values.update(changes)
    return AsteroidOrbitState(**values)


def _finite_orbit(orbit):
    scalars = (orbit.eccentricity, orbit.inclination, orbit.semi_major_axis,
               orbit.velocity, orbit.miss_distance)
    return all(math.isfinite(x) for x in scalars) and all(math.isfinite(x) for x in orbit.position)


class TestComputeDeflection(unittest.TestCase):

    def test_kinetic_impactor_one_year_out(self):
        state = _state()
        result = compute_deflection(state, DeflectionMethodId.KINETIC, 365.0, rng=np.random.default_rng(0))

        self.assertNotEqual(result.new_orbit.miss_distance, state.miss_distance)
        self.assertGreater(result.energy_required, 0.0)
        self.assertEqual(result.method, "Kinetic Impactor")
        self.assertEqual(result.confidence, 0.85)
        self.assertEqual(result.time_to_deflection, 24)
        self.assertEqual(result.original_orbit, state)

        # Linear displacement of a tenth of the required change over a year
        required = (0.05 * KMPAU - 10.0 * 6371.0) / (365.0 * 86400.0) / 0.8
        self.assertAlmostEqual(np.linalg.norm(result.delta_v), 0.1 * required, places=12)
        expected_miss = 0.05 + 0.1 * required * 365.0 * 86400.0 / KMPAU
        self.assertAlmostEqual(result.new_orbit.miss_distance, expected_miss, places=12)

    def test_pushes_away_from_target(self):
        state = _state()
        result = compute_deflection(state, "nuclear", 100.0, rng=np.random.default_rng(1))
        dv = np.asarray(result.delta_v)
        self.assertGreater(np.dot(dv, state.position), 0.0)
        cos_angle = np.dot(dv, state.position) / (np.linalg.norm(dv) * np.linalg.norm(state.position))
        # 1.0 deg catalogue angle attenuated to 0.1 deg
        self.assertAlmostEqual(math.degrees(math.acos(min(1.0, cos_angle))), 0.1, places=6)

    def test_clamps_hold(self):
        result = compute_deflection(_state(), "gravity", 30.0, rng=np.random.default_rng(2))
        orbit = result.new_orbit
        self.assertTrue(0.1 <= orbit.eccentricity <= 0.9)
        self.assertTrue(0.0 <= orbit.inclination <= 180.0)
        self.assertGreaterEqual(orbit.semi_major_axis, 0.5)
        self.assertGreaterEqual(orbit.velocity, 0.1)

    def test_inclination_nudged(self):
        result = compute_deflection(_state(), "kinetic", 30.0, overrides=DebugOverrides(force_success=True))
        self.assertAlmostEqual(result.new_orbit.inclination, 9.899 + 0.5 * 0.01)

    def test_never_returns_non_finite_orbit(self):
        states = [
            _state(),
            _state(position=(0.0, 0.0, 0.0)),
            _state(velocity=0.0),
            _state(miss_distance=0.0),
            _state(position=(0.0, 0.0, 0.02)),
            _state(position=(1e-12, 0.0, 0.0), velocity=1e6),
            _state(eccentricity=0.0, semi_major_axis=0.0),
        ]
        for state in states:
            for method in DeflectionMethodId:
                for days in (1e-3, 1.0, 365.0, 5000.0):
                    result = compute_deflection(state, method, days, rng=np.random.default_rng(3))
                    self.assertTrue(_finite_orbit(result.new_orbit), f"{state} {method} {days}")
                    self.assertTrue(all(math.isfinite(x) for x in result.delta_v))
                    self.assertTrue(math.isfinite(result.energy_required))
                    self.assertTrue(0.0 <= result.impact_probability_reduction <= 100.0)

    def test_reduction_inside_target_radius(self):
        state = _state(miss_distance=2e-5)
        result = compute_deflection(state, "kinetic", 10.0, overrides=DebugOverrides(force_success=True))
        self.assertGreater(result.new_orbit.miss_distance, EARTH_RADIUS_AU)
        self.assertEqual(result.impact_probability_reduction, 100.0)

    def test_reduction_zero_when_already_missing(self):
        result = compute_deflection(_state(), "kinetic", 365.0, rng=np.random.default_rng(4))
        self.assertEqual(result.impact_probability_reduction, 0.0)

    def test_seeded_draw_is_reproducible(self):
        a = compute_deflection(_state(), "kinetic", 200.0, rng=np.random.default_rng(42))
        b = compute_deflection(_state(), "kinetic", 200.0, rng=np.random.default_rng(42))
        self.assertEqual(a.success, b.success)
        self.assertEqual(a, b)

    def test_result_is_frozen(self):
        result = compute_deflection(_state(), "kinetic", 200.0, rng=np.random.default_rng(5))
        with self.assertRaises(pydantic.ValidationError):
            result.success = not result.success


class TestDebugOverrides(unittest.TestCase):

    def test_force_success(self):
        for seed in range(5):
            result = compute_deflection(_state(), "gravity", 300.0, rng=np.random.default_rng(seed),
                                        overrides=DebugOverrides(force_success=True))
            self.assertTrue(result.success)
            self.assertEqual(result.success_probability, 1.0)

    def test_force_failure(self):
        result = compute_deflection(_state(), "nuclear", 1.0, overrides=DebugOverrides(force_failure=True))
        self.assertFalse(result.success)
        self.assertEqual(result.success_probability, 0.0)

    def test_success_rate_override(self):
        rng = np.random.default_rng(7)
        always = [compute_deflection(_state(), "kinetic", 100.0, rng=rng,
                                     overrides=DebugOverrides(success_rate=1.0)).success for _ in range(20)]
        never = [compute_deflection(_state(), "kinetic", 100.0, rng=rng,
                                    overrides=DebugOverrides(success_rate=0.0)).success for _ in range(20)]
        self.assertTrue(all(always))
        self.assertFalse(any(never))

    def test_energy_override(self):
        result = compute_deflection(_state(), "kinetic", 100.0, rng=np.random.default_rng(8),
                                    overrides=DebugOverrides(energy_required=123.0))
        self.assertEqual(result.energy_required, 123.0)

    def test_overrides_do_not_leak(self):
        compute_deflection(_state(), "kinetic", 100.0, overrides=DebugOverrides(force_failure=True))
        result = compute_deflection(_state(), "kinetic", 100.0, rng=np.random.default_rng(9))
        self.assertNotEqual(result.success_probability, 0.0)


def test_unknown_method_is_rejected():
    with pytest.raises(ConfigurationError):
        compute_deflection(_state(), "laser", 100.0)
    with pytest.raises(ConfigurationError):
        get_deflection_method("ion-beam")


@pytest.mark.parametrize("days", [0.0, -5.0, float("nan")])
def test_non_positive_time_is_rejected(days):
    with pytest.raises(ConfigurationError):
        compute_deflection(_state(), "kinetic", days)


def test_catalogue():
    assert set(DEFLECTION_METHODS) == set(DeflectionMethodId)
    kinetic = get_deflection_method("kinetic")
    assert kinetic.physics.efficiency == 0.8
    assert get_deflection_method(DeflectionMethodId.GRAVITY).time_required == 168
    assert get_deflection_method(DEFLECTION_METHODS[DeflectionMethodId.NUCLEAR]).cost == 2000


def test_success_probability_formula():
    state = _state(velocity=12.0)
    method = get_deflection_method("kinetic")
    expected = 0.85 * max(0.1, 1.0 - 100.0 / 365.0) * max(0.1, 1.0 / math.log(13.0)) * 0.8
    assert success_probability(state, method, 100.0) == pytest.approx(expected)
    # Past one year the time factor bottoms out
    late = 0.85 * 0.1 * max(0.1, 1.0 / math.log(13.0)) * 0.8
    assert success_probability(state, method, 800.0) == pytest.approx(late)


def test_nominal_velocity_change_does_not_size_the_burn():
    kinetic = get_deflection_method("kinetic")
    assert kinetic.physics.velocity_change == 0.01
    boosted = kinetic.model_copy(
        update={"physics": kinetic.physics.model_copy(update={"velocity_change": 5.0})})
    overrides = DebugOverrides(force_success=True)
    a = compute_deflection(_state(), kinetic, 200.0, overrides=overrides)
    b = compute_deflection(_state(), boosted, 200.0, overrides=overrides)
    np.testing.assert_allclose(a.delta_v, b.delta_v)
    assert a.new_orbit == b.new_orbit


def test_required_change_uses_absolute_gap():
    inside = required_velocity_change(1e-5, 10.0, 1.0)
    gap_km = 10.0 * 6371.0 - 1e-5 * KMPAU
    assert inside == pytest.approx(gap_km / (10.0 * 86400.0))


def test_deflection_stats():
    results = [
        compute_deflection(_state(), "kinetic", 100.0, overrides=DebugOverrides(force_success=True)),
        compute_deflection(_state(), "kinetic", 100.0, overrides=DebugOverrides(force_failure=True)),
        compute_deflection(_state(), "nuclear", 100.0, overrides=DebugOverrides(force_success=True,
                                                                              energy_required=10.0)),
    ]
    stats = deflection_stats(results)
    assert stats.attempts == 3
    assert stats.successes == 2
    assert stats.success_rate == pytest.approx(2.0 / 3.0)
    assert stats.total_cost == 500 + 500 + 2000
    assert stats.by_method == {"kinetic": 2, "nuclear": 1}
    assert deflection_stats([]).success_rate == 0.0


def test_state_from_orbit_is_geocentric():
    asteroid = OrbitalElements(a=1.412, e=0.209, i=9.899, Omega=287.81, omega=248.92, M0=130.90, n=0.5873)
    state = state_from_orbit(asteroid, 10.0, miss_distance=0.2)
    expected = position_at(asteroid, 10.0) - position_at(EARTH_ELEMENTS, 10.0)
    np.testing.assert_allclose(state.position, expected, atol=1e-12)
    assert state.miss_distance == 0.2
    assert state.semi_major_axis == 1.412
    assert 0.0 < state.velocity < 100.0


def test_invalid_state_is_rejected():
    with pytest.raises(pydantic.ValidationError):
        _state(velocity=float("nan"))
    with pytest.raises(pydantic.ValidationError):
        _state(miss_distance=-1.0)


if __name__ == '__main__':
    unittest.main()
