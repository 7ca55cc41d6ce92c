import dataclasses
import unittest

import pytest

from neoaura import ConfigurationError, DebugOverrides, NeoAuraError, make_search_config
from neoaura.config import DEFAULT_SEARCH_CONFIG, MAX_HORIZON_DAYS
from neoaura.constants import EARTH_RADIUS_AU


class TestSearchConfig(unittest.TestCase):

    def test_defaults(self):
        self.assertEqual(DEFAULT_SEARCH_CONFIG.coarse_step, 1.0)
        self.assertEqual(DEFAULT_SEARCH_CONFIG.fine_step, 0.1)
        self.assertEqual(DEFAULT_SEARCH_CONFIG.refine_window, 5.0)
        self.assertEqual(DEFAULT_SEARCH_CONFIG.refine_band, 0.1)
        self.assertEqual(DEFAULT_SEARCH_CONFIG.max_horizon, MAX_HORIZON_DAYS)
        self.assertEqual(DEFAULT_SEARCH_CONFIG.approach_threshold, 0.005)
        self.assertEqual(DEFAULT_SEARCH_CONFIG.collision_distance, EARTH_RADIUS_AU)
        self.assertEqual(DEFAULT_SEARCH_CONFIG.crossing_threshold, 0.01)
        self.assertEqual(DEFAULT_SEARCH_CONFIG.crossing_step, 0.5)

    def test_make_search_config(self):
        config = make_search_config(coarse_step=2, fine_step=0.5, refine_band=-1.0)
        self.assertEqual(config.coarse_step, 2.0)
        self.assertEqual(config.fine_step, 0.5)
        self.assertEqual(config.refine_band, 0.0)

    def test_invalid_values(self):
        with self.assertRaises(ConfigurationError):
            make_search_config(coarse_step=0.0)
        with self.assertRaises(ConfigurationError):
            make_search_config(coarse_step=0.5, fine_step=1.0)
        with self.assertRaises(ConfigurationError):
            make_search_config(max_horizon=-10.0)
        with self.assertRaises(ConfigurationError):
            make_search_config(approach_threshold=0.0)
        with self.assertRaises(ConfigurationError):
            make_search_config(crossing_step=-0.5)

    def test_frozen(self):
        with self.assertRaises(dataclasses.FrozenInstanceError):
            DEFAULT_SEARCH_CONFIG.coarse_step = 2.0


def test_debug_overrides_are_exclusive():
    with pytest.raises(ConfigurationError):
        DebugOverrides(force_success=True, force_failure=True)


def test_debug_overrides_clamp_success_rate():
    assert DebugOverrides(success_rate=1.5).success_rate == 1.0
    assert DebugOverrides(success_rate=-0.2).success_rate == 0.0
    assert DebugOverrides().success_rate is None


def test_configuration_error_hierarchy():
    assert issubclass(ConfigurationError, NeoAuraError)
    assert issubclass(ConfigurationError, ValueError)


if __name__ == '__main__':
    unittest.main()
