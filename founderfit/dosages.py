"""
Dosage distributions: histograms of alternate-allele copy counts per marker.

A dosage distribution for ploidy p is a vector [f(0), f(1), ..., f(p)] where
f(i) is the number of samples carrying exactly i alternate copies.
"""

import numpy as np


def build_dosage_distribution(dosages: np.ndarray, ploidy: int) -> np.ndarray:
    """Count how many samples carry each dosage 0..ploidy

    Args:
        dosages: Per-sample alternate-allele counts
        ploidy: Organism ploidy

    Returns:
        Array of length ploidy + 1 with the dosage counts
    """
    dosages = np.asarray(dosages, dtype=np.int64)
    if dosages.size and (dosages.min() < 0 or dosages.max() > ploidy):
        raise ValueError(f"Dosages must lie in [0, {ploidy}]")
    return np.bincount(dosages, minlength=ploidy + 1).astype(np.float64)


def normalize_dosage_distribution(distribution: np.ndarray, n_samples: int) -> np.ndarray:
    """Rescale a distribution so that its entries sum to n_samples.

    The result is real-valued. A distribution with no observations (every
    genotype unknown) is returned unchanged as zeros.
    """
    distribution = np.asarray(distribution, dtype=np.float64)
    total = distribution.sum()
    if total <= 0:
        return np.zeros_like(distribution)
    return distribution * (n_samples / total)


def normalize_dosage_vector(distributions: np.ndarray, n_samples: int) -> np.ndarray:
    """Normalize every row of a (n_markers, ploidy + 1) matrix to n_samples."""
    distributions = np.asarray(distributions, dtype=np.float64)
    totals = distributions.sum(axis=1, keepdims=True)
    scale = np.divide(float(n_samples), totals, out=np.zeros_like(totals), where=totals > 0)
    return distributions * scale


def l1_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Sum of elementwise absolute differences between two distributions"""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"Distribution shape mismatch: {a.shape} vs {b.shape}")
    return float(np.abs(a - b).sum())


def format_distribution(distribution: np.ndarray, precision: int = 2) -> str:
    """Render a distribution for log lines, e.g. '[ 3 0.5 1 ]'."""
    values = ' '.join(f"{v:.{precision}f}".rstrip('0').rstrip('.') for v in np.asarray(distribution, dtype=float))
    return f"[ {values} ]"
