"""
Marker driver: runs a fitting strategy over every marker.

The reference pass is sequential and reuses one fitter for all markers. The
partitioned pass splits markers into contiguous chunks and builds an
independent fitter in each worker process; only the read-only haplotype map is
shared.
"""

import concurrent.futures
import sys
import time
from typing import Tuple

import numpy as np
from tqdm import tqdm

from ..dosages import format_distribution
from ..haplotypes import dosage_distribution_from_founders
from ..utils.data_types import FitSummary


def allocate_founder_alleles(n_markers: int, n_founders: int) -> np.ndarray:
    """All-reference founder allele matrix [marker, founder]."""
    return np.zeros((n_markers, n_founders), dtype=np.int8)


def fit_founder_alleles_vector(fitter,
                               founder_alleles: np.ndarray,
                               targets: np.ndarray,
                               verbose: bool = False,
                               progress: bool = False,
                               first_marker: int = 0) -> FitSummary:
    """Fit every marker in input order with one fitter.

    Args:
        fitter: Object exposing fit(founder_alleles, target) -> distance
        founder_alleles: (n_markers, n_founders) int8 matrix, fitted in place
        targets: (n_markers, ploidy + 1) normalized target distributions
        verbose: Print the distance reached for every marker
        progress: Show a progress bar
        first_marker: Index of the first row in the full marker list, for log lines

    Returns:
        FitSummary with per-marker distances and elapsed seconds
    """
    n_markers = targets.shape[0]
    if founder_alleles.shape[0] != n_markers:
        raise ValueError(
            f"Founder allele matrix has {founder_alleles.shape[0]} rows for {n_markers} markers"
        )

    distances = np.zeros(n_markers)
    start = time.time()
    for marker_id in tqdm(range(n_markers), desc=f"Fitting ({fitter.method})",
                          unit="marker", disable=not progress):
        distances[marker_id] = fitter.fit(founder_alleles[marker_id], targets[marker_id])
        if verbose:
            achieved = dosage_distribution_from_founders(fitter.haplotype_map, founder_alleles[marker_id])
            tqdm.write(
                f"   Marker {first_marker + marker_id}: distance {distances[marker_id]:.4f} = "
                f"{format_distribution(targets[marker_id])} vs {format_distribution(achieved)}",
                file=sys.stderr,
            )
    seconds = time.time() - start

    return FitSummary(distances=distances, seconds=seconds, method=fitter.method)


def _fit_marker_chunk(method: str,
                      haplotype_map: np.ndarray,
                      n_founders: int,
                      targets: np.ndarray,
                      verbose: bool = False,
                      first_marker: int = 0) -> Tuple[np.ndarray, np.ndarray]:
    """Worker: fit one contiguous chunk of markers with a private fitter."""
    from . import build_fitter

    fitter = build_fitter(method, haplotype_map, n_founders)
    founder_alleles = allocate_founder_alleles(targets.shape[0], n_founders)
    summary = fit_founder_alleles_vector(fitter, founder_alleles, targets,
                                         verbose=verbose, first_marker=first_marker)
    return founder_alleles, summary.distances


def fit_founder_alleles_parallel(method: str,
                                 haplotype_map: np.ndarray,
                                 n_founders: int,
                                 targets: np.ndarray,
                                 n_workers: int = 2,
                                 progress: bool = False,
                                 verbose: bool = False) -> Tuple[np.ndarray, FitSummary]:
    """Fit markers across worker processes, one model instance per worker.

    Results are reassembled in input order and match the sequential pass.
    With verbose, workers print their per-marker lines as they go, so lines of
    different chunks may interleave.

    Returns:
        Tuple of (founder allele matrix, FitSummary)
    """
    n_markers = targets.shape[0]
    founder_alleles = allocate_founder_alleles(n_markers, n_founders)
    distances = np.zeros(n_markers)
    bounds = np.linspace(0, n_markers, min(n_workers, max(n_markers, 1)) + 1).astype(int)
    chunks = [(lo, hi) for lo, hi in zip(bounds[:-1], bounds[1:]) if hi > lo]

    start = time.time()
    with concurrent.futures.ProcessPoolExecutor(max_workers=n_workers) as executor:
        futures = {
            executor.submit(_fit_marker_chunk, method, haplotype_map, n_founders, targets[lo:hi],
                            verbose, int(lo)): (lo, hi)
            for lo, hi in chunks
        }
        with tqdm(total=n_markers, desc=f"Fitting ({method})", unit="marker", disable=not progress) as bar:
            for future in concurrent.futures.as_completed(futures):
                lo, hi = futures[future]
                founder_alleles[lo:hi], distances[lo:hi] = future.result()
                bar.update(hi - lo)
    seconds = time.time() - start

    return founder_alleles, FitSummary(distances=distances, seconds=seconds, method=method)
