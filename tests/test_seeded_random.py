"""Tests for the seeded random generator."""

import math
from datetime import date

import pytest

from networth_tracker.simulation.constants import LCG_MODULUS
from networth_tracker.simulation.seeded_random import SeededRandom, seed_for_date


class TestSeedForDate:
    """Tests for date-derived seeds."""

    def test_seed_layout(self):
        """Test the seed is year*10000 + month*100 + day."""
        assert seed_for_date(date(2024, 3, 15)) == 20240315
        assert seed_for_date(date(2023, 12, 31)) == 20231231
        assert seed_for_date(date(2024, 1, 1)) == 20240101

    def test_for_date_matches_seed(self):
        """Test for_date builds the same generator as the explicit seed."""
        a = SeededRandom.for_date(date(2024, 3, 15))
        b = SeededRandom(20240315)
        assert [a.next() for _ in range(5)] == [b.next() for _ in range(5)]


class TestSeededRandom:
    """Tests for uniform and normal variates."""

    def test_known_sequence(self):
        """Test the generator follows the documented recurrence."""
        rng = SeededRandom(0)
        rng.next()
        assert rng.state == 1013904223
        rng.next()
        assert rng.state == 1196435762
        rng.next()
        assert rng.state == 3519870697

    def test_next_returns_state_fraction(self):
        """Test next() returns the new state divided by the modulus."""
        rng = SeededRandom(20240315)
        value = rng.next()
        assert rng.state == 1800759774
        assert value == 1800759774 / LCG_MODULUS

    def test_next_in_unit_interval(self):
        """Test uniform values fall in [0, 1)."""
        rng = SeededRandom(42)
        values = [rng.next() for _ in range(1000)]
        assert all(0.0 <= v < 1.0 for v in values)

    def test_same_seed_same_sequence(self):
        """Test generators with equal seeds agree."""
        a = SeededRandom(12345)
        b = SeededRandom(12345)
        assert [a.normal() for _ in range(10)] == [b.normal() for _ in range(10)]

    def test_different_seeds_differ(self):
        """Test generators with different seeds diverge."""
        assert SeededRandom(1).next() != SeededRandom(2).next()

    def test_range_bounds(self):
        """Test range() scales into [min, max)."""
        rng = SeededRandom(7)
        values = [rng.range(-5.0, 5.0) for _ in range(500)]
        assert all(-5.0 <= v < 5.0 for v in values)

    def test_large_seed_wraps(self):
        """Test seeds are reduced modulo 2**32."""
        assert SeededRandom(LCG_MODULUS + 3).state == 3

    def test_rejects_non_integer_seed(self):
        """Test seeds must be integers."""
        with pytest.raises(TypeError):
            SeededRandom(1.5)
        with pytest.raises(TypeError):
            SeededRandom(True)


class TestBoxMuller:
    """Tests for the paired normal variates."""

    def test_second_call_uses_cached_spare(self):
        """Test the second normal() call doesn't advance the generator."""
        rng = SeededRandom(0)
        rng.normal()
        state_after_first = rng.state
        rng.normal()
        assert rng.state == state_after_first
        rng.normal()
        assert rng.state != state_after_first

    def test_pair_shares_one_transform(self):
        """Test both halves come from the same (u, v) draw."""
        rng = SeededRandom(0)
        first = rng.normal()
        second = rng.normal()

        u = 1013904223 / LCG_MODULUS
        v = 1196435762 / LCG_MODULUS
        magnitude = math.sqrt(-2.0 * math.log(u))
        assert first == pytest.approx(magnitude * math.cos(2 * math.pi * v))
        assert second == pytest.approx(magnitude * math.sin(2 * math.pi * v))
        assert first ** 2 + second ** 2 == pytest.approx(-2.0 * math.log(u))

    def test_mean_and_std_dev_scale(self):
        """Test mean and standard deviation are applied to both halves."""
        standard = SeededRandom(99)
        scaled = SeededRandom(99)
        for _ in range(4):
            z = standard.normal()
            assert scaled.normal(10.0, 2.0) == pytest.approx(10.0 + 2.0 * z)

    def test_sample_statistics(self):
        """Test a large sample looks standard normal."""
        rng = SeededRandom(2024)
        values = [rng.normal() for _ in range(20000)]
        mean = sum(values) / len(values)
        variance = sum((v - mean) ** 2 for v in values) / len(values)
        assert abs(mean) < 0.05
        assert abs(variance - 1.0) < 0.05
