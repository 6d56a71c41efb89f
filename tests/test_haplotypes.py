"""Tests for founder multiplicities, haplotype map and sample allele view."""

import numpy as np
import pytest

from founderfit.haplotypes import (
    dosage_distribution_from_founders,
    format_genotypes,
    founder_multiplicities,
    founder_slot_counts,
    sample_alleles,
    sample_dosages,
    simulate_founder_multiplicities,
    simulate_haplotype_map,
)
from founderfit.utils.exceptions import ConfigurationError


@pytest.mark.parametrize("seed", [0, 1, 7, 42, 2024])
@pytest.mark.parametrize("n_founders,n_samples,ploidy", [(1, 3, 2), (5, 10, 4), (24, 6, 4), (9, 3, 3)])
def test_multiplicities_cover_all_slots(seed, n_founders, n_samples, ploidy) -> None:
    rng = np.random.default_rng(seed)
    mult = simulate_founder_multiplicities(n_founders, n_samples, ploidy, rng)
    assert mult.shape == (n_founders,)
    assert mult.sum() == n_samples * ploidy
    assert mult.min() >= 1


def test_multiplicities_reject_too_many_founders() -> None:
    rng = np.random.default_rng(0)
    with pytest.raises(ConfigurationError):
        simulate_founder_multiplicities(9, 2, 4, rng)
    with pytest.raises(ConfigurationError):
        simulate_founder_multiplicities(0, 2, 4, rng)


@pytest.mark.parametrize("seed", [0, 3, 11])
def test_haplotype_map_respects_multiplicities(seed) -> None:
    rng = np.random.default_rng(seed)
    mult = simulate_founder_multiplicities(6, 5, 3, rng)
    hmap = simulate_haplotype_map(mult, 5, 3, rng)
    assert hmap.shape == (5, 3)
    assert hmap.min() >= 0 and hmap.max() < 6
    np.testing.assert_array_equal(founder_multiplicities(hmap, 6), mult)
    assert not hmap.flags.writeable


def test_haplotype_map_is_reproducible_for_seed() -> None:
    def draw(seed):
        rng = np.random.default_rng(seed)
        mult = simulate_founder_multiplicities(4, 6, 2, rng)
        return simulate_haplotype_map(mult, 6, 2, rng)

    np.testing.assert_array_equal(draw(5), draw(5))


def test_haplotype_map_rejects_inconsistent_multiplicities() -> None:
    with pytest.raises(ConfigurationError):
        simulate_haplotype_map(np.array([1, 2]), 2, 2, np.random.default_rng(0))


def test_sample_allele_view_reads_through_map() -> None:
    hmap = np.array([[0, 1], [2, 2], [1, 0]])
    founders = np.array([1, 0, 1], dtype=np.int8)
    np.testing.assert_array_equal(sample_alleles(hmap, founders), [[1, 0], [1, 1], [0, 1]])
    np.testing.assert_array_equal(sample_dosages(hmap, founders), [1, 2, 1])
    np.testing.assert_array_equal(dosage_distribution_from_founders(hmap, founders), [0, 2, 1])


def test_sample_allele_view_follows_founder_changes() -> None:
    hmap = np.array([[0, 0], [1, 1]])
    founders = np.zeros(2, dtype=np.int8)
    np.testing.assert_array_equal(dosage_distribution_from_founders(hmap, founders), [2, 0, 0])
    founders[1] = 1
    np.testing.assert_array_equal(dosage_distribution_from_founders(hmap, founders), [1, 0, 1])


def test_founder_slot_counts() -> None:
    hmap = np.array([[0, 0, 1], [2, 1, 1]])
    np.testing.assert_array_equal(founder_slot_counts(hmap, 3), [[2, 1, 0], [0, 2, 1]])


def test_format_genotypes_joins_slots_with_pipe() -> None:
    assert format_genotypes(np.array([[0, 1, 1], [0, 0, 0]])) == ["0|1|1", "0|0|0"]
