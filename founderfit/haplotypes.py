"""
Founder multiplicities, haplotype map and the sample allele view.

The haplotype map assigns every (sample, haplotype slot) pair to a founder.
Sample alleles at a marker are read through the map from the founder allele
vector of that marker; they are recomputed on demand and never stored.
"""

from typing import List

import numpy as np

from .dosages import build_dosage_distribution
from .utils.exceptions import ConfigurationError


def simulate_founder_multiplicities(n_founders: int,
                                    n_samples: int,
                                    ploidy: int,
                                    rng: np.random.Generator) -> np.ndarray:
    """Draw how many haplotype slots each founder fills.

    Every founder receives one slot; the remaining n_samples * ploidy - n_founders
    slots are assigned to founders uniformly at random.

    Args:
        n_founders: Number of founders
        n_samples: Number of simulated samples
        ploidy: Organism ploidy
        rng: Random generator

    Returns:
        int64 array of length n_founders summing to n_samples * ploidy
    """
    if n_samples < 1:
        raise ConfigurationError(f"Number of samples must be positive, got {n_samples}")
    if n_founders < 1:
        raise ConfigurationError(f"Number of founders must be positive, got {n_founders}")
    n_slots = n_samples * ploidy
    if n_founders > n_slots:
        raise ConfigurationError(
            f"{n_founders} founders exceed the {n_slots} haplotype slots "
            f"of {n_samples} samples at ploidy {ploidy}"
        )

    extra = rng.integers(0, n_founders, size=n_slots - n_founders)
    return np.ones(n_founders, dtype=np.int64) + np.bincount(extra, minlength=n_founders)


def simulate_haplotype_map(multiplicities: np.ndarray,
                           n_samples: int,
                           ploidy: int,
                           rng: np.random.Generator) -> np.ndarray:
    """Shuffle founder indices into a read-only [sample, slot] map.

    Founder f appears exactly multiplicities[f] times.
    """
    multiplicities = np.asarray(multiplicities, dtype=np.int64)
    n_slots = n_samples * ploidy
    if int(multiplicities.sum()) != n_slots:
        raise ConfigurationError(
            f"Founder multiplicities sum to {int(multiplicities.sum())}, expected {n_slots}"
        )

    slots = np.repeat(np.arange(len(multiplicities), dtype=np.int64), multiplicities)
    haplotype_map = rng.permutation(slots).reshape(n_samples, ploidy)
    haplotype_map.setflags(write=False)
    return haplotype_map


def founder_multiplicities(haplotype_map: np.ndarray, n_founders: int) -> np.ndarray:
    """Count how many slots of the map each founder fills."""
    return np.bincount(np.asarray(haplotype_map).ravel(), minlength=n_founders)


def sample_alleles(haplotype_map: np.ndarray, founder_alleles: np.ndarray) -> np.ndarray:
    """Project founder alleles through the map: alleles[sample, slot]."""
    return np.asarray(founder_alleles)[haplotype_map]


def sample_dosages(haplotype_map: np.ndarray, founder_alleles: np.ndarray) -> np.ndarray:
    """Alternate-allele count of every sample."""
    return sample_alleles(haplotype_map, founder_alleles).sum(axis=1, dtype=np.int64)


def dosage_distribution_from_founders(haplotype_map: np.ndarray,
                                      founder_alleles: np.ndarray) -> np.ndarray:
    """Dosage distribution induced by a founder allele vector."""
    ploidy = haplotype_map.shape[1]
    return build_dosage_distribution(sample_dosages(haplotype_map, founder_alleles), ploidy)


def founder_slot_counts(haplotype_map: np.ndarray, n_founders: int) -> np.ndarray:
    """Matrix [sample, founder] of how many slots of the sample map to the founder.

    Setting founder f to the alternate allele raises the dosage of sample s by
    counts[s, f].
    """
    n_samples = haplotype_map.shape[0]
    counts = np.zeros((n_samples, n_founders), dtype=np.int64)
    rows = np.repeat(np.arange(n_samples), haplotype_map.shape[1])
    np.add.at(counts, (rows, np.asarray(haplotype_map).ravel()), 1)
    return counts


def format_genotypes(alleles: np.ndarray) -> List[str]:
    """Phased genotype strings, one per sample: slot alleles joined by '|'."""
    return ['|'.join(str(int(a)) for a in row) for row in np.asarray(alleles)]
