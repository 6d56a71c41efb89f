"""
Run configuration for the population simulator.
"""

from dataclasses import dataclass
from typing import Optional

from .exceptions import ConfigurationError

MIN_PLOIDY = 2
MAX_PLOIDY = 8

FITTING_METHODS = ('descent', 'mip')


@dataclass
class SimulationConfig:
    """Parameters of one simulation run.

    Attributes:
        input_vcf: VCF file providing the target dosage distributions
        output_vcf: Destination of the simulated population (None for stdout)
        ploidy: Organism ploidy (2-8)
        n_founders: Number of founder haplotypes to simulate
        n_samples: Number of samples to simulate (None: all input samples)
        n_markers: Number of markers to use (None: all input markers)
        seed: Seed for the founder multiplicities and haplotype map
        method: 'descent' (greedy) or 'mip' (exact)
        workers: Number of worker processes for the marker pass
        report: Optional TSV path for the per-marker fit report
        log_markers: Print the distance reached for every marker
        verbose: Print progress
    """

    input_vcf: str
    output_vcf: Optional[str] = None
    ploidy: int = 4
    n_founders: int = 1
    n_samples: Optional[int] = None
    n_markers: Optional[int] = None
    seed: int = 0
    method: str = 'descent'
    workers: int = 1
    report: Optional[str] = None
    log_markers: bool = False
    verbose: bool = True

    def validate(self) -> "SimulationConfig":
        """Check parameters that do not depend on the input data."""
        if not MIN_PLOIDY <= self.ploidy <= MAX_PLOIDY:
            raise ConfigurationError(
                f"Unsupported ploidy {self.ploidy}: must be between {MIN_PLOIDY} and {MAX_PLOIDY}"
            )
        if self.n_founders < 1:
            raise ConfigurationError(f"Number of founders must be positive, got {self.n_founders}")
        if self.n_samples is not None and self.n_samples < 1:
            raise ConfigurationError(f"Number of samples must be positive, got {self.n_samples}")
        if self.n_markers is not None and self.n_markers < 1:
            raise ConfigurationError(f"Number of markers must be positive, got {self.n_markers}")
        if self.seed < 0:
            raise ConfigurationError(f"Seed must be non-negative, got {self.seed}")
        if self.method not in FITTING_METHODS:
            raise ConfigurationError(
                f"Unknown fitting method '{self.method}', expected one of {FITTING_METHODS}"
            )
        if self.workers < 1:
            raise ConfigurationError(f"Number of workers must be positive, got {self.workers}")
        if self.n_samples is not None:
            self.validate_population(self.n_samples)
        return self

    def validate_population(self, n_samples: int) -> None:
        """Check that every founder can own at least one haplotype slot."""
        n_slots = n_samples * self.ploidy
        if self.n_founders > n_slots:
            raise ConfigurationError(
                f"{self.n_founders} founders exceed the {n_slots} haplotype slots "
                f"of {n_samples} samples at ploidy {self.ploidy}"
            )
