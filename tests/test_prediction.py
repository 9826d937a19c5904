"""
Tests for the prediction model: tick counts and per-tick experience.
"""

import pytest

from actions import ActionCatalog, ActionDescriptor
from host import SnapshotHost, level_from_exp
from prediction import PredictionModel, PredictionNotReadyError


def model_for(host, name):
    return ActionCatalog([ActionDescriptor(name=name)], host).get(name)


def zero_stats(host):
    return {name: 0 for name in host.stat_names}


class TestLevelFromExp:
    """Test the stat level curve."""

    def test_level_boundaries(self):
        assert level_from_exp(0) == 0
        assert level_from_exp(99) == 0
        assert level_from_exp(100) == 1
        assert level_from_exp(5499) == 9
        assert level_from_exp(5500) == 10


class TestUpdateTicks:
    """Test tick counts."""

    def test_ticks_at_level_zero(self, host):
        """Weights summing to one need mana cost ticks."""
        model = model_for(host, 'Wander')
        assert model.update_ticks(zero_stats(host), host) == 250

    def test_zero_weights_give_zero_ticks(self, host):
        """ceil(50 * 0 - 1e-6) is zero."""
        model = model_for(host, 'Smash Pots')
        assert model.update_ticks(zero_stats(host), host) == 0

    def test_levels_discount_ticks(self, host):
        """Level 10 Str: 1000 / 1.1 rounds up to 910."""
        model = model_for(host, 'Train Strength')
        stats = zero_stats(host)
        stats['Str'] = 5500
        assert model.update_ticks(stats, host) == 910

    def test_epsilon_absorbs_float_drift(self, snapshot):
        """Weights whose float sum lands a hair above one still give mana cost ticks."""
        snapshot['actions']['Heal'] = {
            'mana_cost': 2500,
            'stats': {'Per': 0.2, 'Cha': 0.2, 'Int': 0.2, 'Soul': 0.4},
        }
        host = SnapshotHost(snapshot)
        model = model_for(host, 'Heal')
        assert model.update_ticks(zero_stats(host), host) == 2500

    def test_missing_stats_contribute_nothing(self, host):
        """A weighted stat absent from the experience table is ignored."""
        model = model_for(host, 'Wander')
        assert model.update_ticks({'Str': 0}, host) == 125

    def test_update_ticks_is_idempotent(self, host):
        model = model_for(host, 'Wander')
        stats = zero_stats(host)
        stats['Spd'] = 1234
        assert model.update_ticks(stats, host) == model.update_ticks(stats, host)
        assert model.ticks() == model.update_ticks(stats, host)

    def test_ticks_before_update_raises_error(self, host):
        model = model_for(host, 'Wander')
        with pytest.raises(PredictionNotReadyError):
            model.ticks()


class TestExperience:
    """Test per-tick stat experience."""

    def test_exp_over_full_run(self, snapshot):
        """Summed over every tick, exp equals weight * mult * cost * bonus."""
        snapshot['actions']['Lessons'] = {
            'mana_cost': 300,
            'stats': {'Str': 0.25, 'Int': 0.75},
            'exp_mult': 2,
        }
        snapshot['bonus_xp'] = {'Str': 1.5, 'Int': 0.5}
        host = SnapshotHost(snapshot)
        model = model_for(host, 'Lessons')
        stats = zero_stats(host)

        ticks = model.update_ticks(stats, host)
        for _ in range(ticks):
            model.exp(stats, host)

        assert stats['Str'] == pytest.approx(0.25 * 2 * 300 * 1.5)
        assert stats['Int'] == pytest.approx(0.75 * 2 * 300 * 0.5)
        assert stats['Dex'] == 0

    def test_exp_skips_untracked_stats(self, host):
        """Stats missing from the experience table are not created."""
        model = model_for(host, 'Wander')
        stats = {'Str': 0}
        model.update_ticks(stats, host)
        model.exp(stats, host)

        assert 'Spd' not in stats
        assert stats['Str'] > 0

    def test_exp_uses_host_passed_in(self, host, snapshot):
        """The bonus multiplier comes from the host of the call, not the catalog's."""
        snapshot['bonus_xp'] = {'Str': 3.0}
        other = SnapshotHost(snapshot)
        model = model_for(host, 'Train Strength')
        stats = {'Str': 0}

        model.update_ticks(stats, other)
        model.exp(stats, other)

        assert stats['Str'] == pytest.approx(3.0)
