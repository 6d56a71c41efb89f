"""
Greedy descent fitting of founder alleles.

Starting from the all-reference founder vector, repeatedly probe every founder
still at 0, commit the single flip to 1 that lowers the L1 distance to the
target the most, and stop at the first iteration where no probe is strictly
better than the current distance. A committed founder is never revisited.

Cost per marker is O(n_founders^2 * n_samples) with the per-sample dosage
increments precomputed from the haplotype map.
"""

import numpy as np
import numba

from ..haplotypes import founder_slot_counts


@numba.jit(nopython=True, cache=True)
def _descent_fit_jit(slot_counts, target, founder_alleles):
    """Greedy descent kernel; mutates founder_alleles and returns the distance."""
    n_samples, n_founders = slot_counts.shape
    n_levels = target.shape[0]

    dosages = np.zeros(n_samples, dtype=np.int64)
    histogram = np.zeros(n_levels)
    for j in range(n_founders):
        founder_alleles[j] = 0

    # All samples start at dosage 0
    distance = abs(n_samples - target[0])
    for k in range(1, n_levels):
        distance += abs(target[k])

    for _ in range(n_founders):
        best_founder = -1
        best_distance = np.inf
        for f in range(n_founders):
            if founder_alleles[f] == 1:
                continue
            for k in range(n_levels):
                histogram[k] = 0.0
            for s in range(n_samples):
                histogram[dosages[s] + slot_counts[s, f]] += 1.0
            probe = 0.0
            for k in range(n_levels):
                probe += abs(histogram[k] - target[k])
            # Strict comparison keeps the lowest founder index on ties
            if probe < best_distance:
                best_distance = probe
                best_founder = f

        if best_founder < 0 or not best_distance < distance:
            break

        distance = best_distance
        founder_alleles[best_founder] = 1
        for s in range(n_samples):
            dosages[s] += slot_counts[s, best_founder]

    return distance


class DescentFitter:
    """Greedy local-search fitter.

    Args:
        haplotype_map: Read-only [sample, slot] founder map
        n_founders: Number of founders
    """

    method = 'descent'

    def __init__(self, haplotype_map: np.ndarray, n_founders: int):
        self.haplotype_map = haplotype_map
        self.n_founders = n_founders
        self.n_samples, self.ploidy = haplotype_map.shape
        self._slot_counts = founder_slot_counts(haplotype_map, n_founders)

    def fit(self, founder_alleles: np.ndarray, target: np.ndarray) -> float:
        """Fit founder_alleles in place to target and return the L1 distance.

        Args:
            founder_alleles: int8 vector of length n_founders, overwritten
            target: Dosage distribution of length ploidy + 1

        Returns:
            Distance between the induced distribution and target
        """
        if founder_alleles.shape != (self.n_founders,):
            raise ValueError(
                f"Founder allele vector must have shape ({self.n_founders},), got {founder_alleles.shape}"
            )
        target = np.ascontiguousarray(target, dtype=np.float64)
        if target.shape != (self.ploidy + 1,):
            raise ValueError(
                f"Target distribution must have {self.ploidy + 1} entries, got {target.shape[0]}"
            )
        return float(_descent_fit_jit(self._slot_counts, target, founder_alleles))
