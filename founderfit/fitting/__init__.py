"""
Founder allele fitting strategies and the marker driver.

Both strategies expose fit(founder_alleles, target) -> distance; the active
one is chosen by name when a run is configured.
"""

import numpy as np

from .descent import DescentFitter
from .mip import MipFitter
from .driver import (
    allocate_founder_alleles,
    fit_founder_alleles_vector,
    fit_founder_alleles_parallel,
)

FITTERS = {
    'descent': DescentFitter,
    'mip': MipFitter,
}


def build_fitter(method: str, haplotype_map: np.ndarray, n_founders: int):
    """Instantiate the fitting strategy named by method ('descent' or 'mip')."""
    try:
        fitter_cls = FITTERS[method]
    except KeyError:
        raise ValueError(f"Unknown fitting method '{method}', expected one of {sorted(FITTERS)}") from None
    return fitter_cls(haplotype_map, n_founders)


__all__ = [
    'DescentFitter',
    'MipFitter',
    'FITTERS',
    'build_fitter',
    'allocate_founder_alleles',
    'fit_founder_alleles_vector',
    'fit_founder_alleles_parallel',
]
