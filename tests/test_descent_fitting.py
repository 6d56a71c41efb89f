"""Tests for the greedy descent fitter."""

import numpy as np
import pytest

from founderfit.dosages import l1_distance, normalize_dosage_distribution
from founderfit.fitting.descent import DescentFitter
from founderfit.haplotypes import (
    dosage_distribution_from_founders,
    simulate_founder_multiplicities,
    simulate_haplotype_map,
)


def _random_instance(seed, n_founders, n_samples, ploidy):
    rng = np.random.default_rng(seed)
    mult = simulate_founder_multiplicities(n_founders, n_samples, ploidy, rng)
    hmap = simulate_haplotype_map(mult, n_samples, ploidy, rng)
    raw = rng.integers(0, 10, size=ploidy + 1).astype(float) + rng.random(ploidy + 1)
    target = normalize_dosage_distribution(raw, n_samples)
    return hmap, target


def test_two_founder_scenario_reaches_zero_distance() -> None:
    hmap = np.array([[0, 0], [1, 1]])
    fitter = DescentFitter(hmap, 2)
    alleles = np.zeros(2, dtype=np.int8)

    distance = fitter.fit(alleles, np.array([1.0, 0.0, 1.0]))

    assert distance == pytest.approx(0.0)
    # Ties between probes go to the lowest founder index
    np.testing.assert_array_equal(alleles, [1, 0])


@pytest.mark.parametrize("seed", range(8))
def test_descent_never_worse_than_all_reference(seed) -> None:
    hmap, target = _random_instance(seed, n_founders=6, n_samples=12, ploidy=4)
    fitter = DescentFitter(hmap, 6)
    alleles = np.zeros(6, dtype=np.int8)
    zero_distance = l1_distance(dosage_distribution_from_founders(hmap, alleles), target)

    distance = fitter.fit(alleles, target)

    assert distance <= zero_distance + 1e-9


@pytest.mark.parametrize("seed", range(5))
def test_reported_distance_matches_fitted_alleles(seed) -> None:
    hmap, target = _random_instance(seed, n_founders=8, n_samples=10, ploidy=3)
    fitter = DescentFitter(hmap, 8)
    alleles = np.zeros(8, dtype=np.int8)

    distance = fitter.fit(alleles, target)

    achieved = dosage_distribution_from_founders(hmap, alleles)
    assert distance == pytest.approx(l1_distance(achieved, target))
    assert set(np.unique(alleles)) <= {0, 1}


def test_equal_probe_is_not_an_improvement() -> None:
    # A single heterozygous-capable sample: flipping either founder moves the
    # sample from dosage 0 to 1, which leaves the distance unchanged.
    hmap = np.array([[0, 1]])
    fitter = DescentFitter(hmap, 2)
    alleles = np.zeros(2, dtype=np.int8)

    distance = fitter.fit(alleles, np.array([0.5, 0.5, 0.0]))

    assert distance == pytest.approx(1.0)
    np.testing.assert_array_equal(alleles, [0, 0])


def test_fit_resets_previous_assignment() -> None:
    hmap = np.array([[0, 0], [1, 1]])
    fitter = DescentFitter(hmap, 2)
    alleles = np.ones(2, dtype=np.int8)

    distance = fitter.fit(alleles, np.array([2.0, 0.0, 0.0]))

    assert distance == pytest.approx(0.0)
    np.testing.assert_array_equal(alleles, [0, 0])


def test_all_alternate_target_flips_every_founder() -> None:
    hmap = np.array([[0, 0], [1, 1], [2, 2]])
    fitter = DescentFitter(hmap, 3)
    alleles = np.zeros(3, dtype=np.int8)

    distance = fitter.fit(alleles, np.array([0.0, 0.0, 3.0]))

    assert distance == pytest.approx(0.0)
    np.testing.assert_array_equal(alleles, [1, 1, 1])


def test_fit_validates_shapes() -> None:
    fitter = DescentFitter(np.array([[0, 1]]), 2)
    with pytest.raises(ValueError):
        fitter.fit(np.zeros(3, dtype=np.int8), np.array([1.0, 0.0, 0.0]))
    with pytest.raises(ValueError):
        fitter.fit(np.zeros(2, dtype=np.int8), np.array([1.0, 0.0]))
