"""
founderfit: founder haplotype population simulator

Simulates a population whose per-marker allele dosage distributions match
those of a real VCF, by fitting founder haplotype alleles through a random
sample-to-founder haplotype map. Fitting is either an exact mixed-integer
program or a fast greedy descent.
"""

__version__ = "0.1.0"
__author__ = "founderfit Development Team"

from .dosages import (
    build_dosage_distribution,
    normalize_dosage_distribution,
    normalize_dosage_vector,
    l1_distance,
)
from .haplotypes import (
    simulate_founder_multiplicities,
    simulate_haplotype_map,
    sample_alleles,
    dosage_distribution_from_founders,
)
from .fitting import DescentFitter, MipFitter, build_fitter, fit_founder_alleles_vector
from .pipelines.simulation import SimulationPipeline
from .utils.config import SimulationConfig

__all__ = [
    'build_dosage_distribution',
    'normalize_dosage_distribution',
    'normalize_dosage_vector',
    'l1_distance',
    'simulate_founder_multiplicities',
    'simulate_haplotype_map',
    'sample_alleles',
    'dosage_distribution_from_founders',
    'DescentFitter',
    'MipFitter',
    'build_fitter',
    'fit_founder_alleles_vector',
    'SimulationPipeline',
    'SimulationConfig',
]
