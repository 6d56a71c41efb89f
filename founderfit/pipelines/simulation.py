"""
Population Simulation Pipeline Module

This module runs the founder haplotype simulation end to end: it loads target
dosage distributions from a VCF, simulates the founder multiplicities and the
haplotype map, fits the founder alleles of every marker and writes the
simulated population.
"""

import sys
import time
from typing import List, Optional

import numpy as np

from ..data.load_vcf import load_vcf_targets
from ..data.write_vcf import write_fit_report, write_population_vcf
from ..dosages import normalize_dosage_vector
from ..fitting import (
    allocate_founder_alleles,
    build_fitter,
    fit_founder_alleles_parallel,
    fit_founder_alleles_vector,
)
from ..haplotypes import (
    dosage_distribution_from_founders,
    founder_multiplicities,
    simulate_founder_multiplicities,
    simulate_haplotype_map,
)
from ..utils.config import SimulationConfig
from ..utils.data_types import DosageTargets, FitSummary


class SimulationPipeline:
    """
    High-level pipeline for founder haplotype population simulation.

    Typical workflow:
        1. Initialize pipeline with a validated SimulationConfig
        2. Load target dosage distributions from the input VCF
        3. Simulate founder multiplicities and the haplotype map
        4. Fit founder alleles to every marker target
        5. Write the simulated population (and optional fit report)

    Attributes:
        config (SimulationConfig): Run parameters
        data (DosageTargets): Markers and raw dosage counts from the input VCF
        targets (ndarray): Dosage distributions normalized to n_samples
        multiplicities (ndarray): Haplotype slots filled by each founder
        haplotype_map (ndarray): [sample, slot] founder map
        founder_alleles (ndarray): (n_markers, n_founders) fitted alleles
        summary (FitSummary): Distances and timing of the fitting pass

    Example:
        >>> from founderfit.pipelines.simulation import SimulationPipeline
        >>> from founderfit.utils.config import SimulationConfig
        >>>
        >>> config = SimulationConfig(input_vcf='real.vcf', output_vcf='sim.vcf',
        ...                           ploidy=4, n_founders=20, n_samples=100)
        >>> SimulationPipeline(config).run()
    """

    def __init__(self, config: SimulationConfig):
        self.config = config.validate()
        self.rng = np.random.default_rng(config.seed)

        self.data: Optional[DosageTargets] = None
        self.n_samples: Optional[int] = None
        self.targets: Optional[np.ndarray] = None
        self.multiplicities: Optional[np.ndarray] = None
        self.haplotype_map: Optional[np.ndarray] = None
        self.founder_alleles: Optional[np.ndarray] = None
        self.summary: Optional[FitSummary] = None

    def log(self, message: str):
        """Internal logger"""
        if self.config.verbose:
            print(message, file=sys.stderr)

    def log_step(self, step_name: str, start_time: Optional[float] = None):
        """Log a pipeline step with optional timing"""
        if start_time is not None:
            elapsed = time.time() - start_time
            self.log(f"{step_name} completed in {elapsed:.2f} seconds")
        else:
            self.log(f"{step_name}...")

    def load_targets(self) -> DosageTargets:
        """Read the input VCF and normalize its dosage distributions.

        The number of simulated samples defaults to the number of input
        samples. Founder count is checked against it before any fitting.

        Raises:
            GenotypeFormatError: input genotype ploidy differs from config
            ConfigurationError: founders exceed the simulated haplotype slots
        """
        step_start = time.time()
        self.log_step("Step 1: Loading target dosage distributions")

        self.data = load_vcf_targets(
            self.config.input_vcf,
            self.config.ploidy,
            max_markers=self.config.n_markers,
            verbose=self.config.verbose and self.config.log_markers,
        )
        self.n_samples = self.config.n_samples or self.data.n_samples
        self.config.validate_population(self.n_samples)

        self.targets = normalize_dosage_vector(self.data.dosages, self.n_samples)
        self.log(f"   Loaded {self.data.n_markers} markers from {self.data.n_samples} input samples "
                 f"on {len(self.data.contigs)} contigs")
        self.log(f"   Normalized targets to {self.n_samples} samples")
        self.log_step("Loading", step_start)
        return self.data

    def simulate_population(self) -> np.ndarray:
        """Draw founder multiplicities and the haplotype map."""
        if self.n_samples is None:
            raise ValueError("Targets not loaded. Call load_targets() first.")
        self.log_step("Step 2: Simulating founders and haplotype map")

        self.multiplicities = simulate_founder_multiplicities(
            self.config.n_founders, self.n_samples, self.config.ploidy, self.rng
        )
        self.haplotype_map = simulate_haplotype_map(
            self.multiplicities, self.n_samples, self.config.ploidy, self.rng
        )
        # Slots per founder as realized in the map
        self.log(f"   Founder multiplicities: "
                 f"{founder_multiplicities(self.haplotype_map, self.config.n_founders).tolist()}")
        self.log(f"   Haplotype map: {self.haplotype_map.shape[0]} samples x {self.haplotype_map.shape[1]} slots")
        return self.haplotype_map

    def fit(self) -> FitSummary:
        """Fit the founder alleles of every marker with the configured method."""
        if self.haplotype_map is None:
            raise ValueError("Haplotype map not simulated. Call simulate_population() first.")
        method = self.config.method
        n_markers = self.targets.shape[0]
        self.log_step(f"Step 3: Fitting {n_markers} markers ({method})")

        if self.config.workers > 1 and n_markers > 1:
            self.founder_alleles, self.summary = fit_founder_alleles_parallel(
                method,
                self.haplotype_map,
                self.config.n_founders,
                self.targets,
                n_workers=self.config.workers,
                progress=self.config.verbose,
                verbose=self.config.verbose and self.config.log_markers,
            )
        else:
            fitter = build_fitter(method, self.haplotype_map, self.config.n_founders)
            self.founder_alleles = allocate_founder_alleles(n_markers, self.config.n_founders)
            self.summary = fit_founder_alleles_vector(
                fitter,
                self.founder_alleles,
                self.targets,
                verbose=self.config.verbose and self.config.log_markers,
                progress=self.config.verbose,
            )

        self.log(f"   Total distance: {self.summary.total_distance:.4f}")
        self.log(f"   Seconds: {self.summary.seconds:.2f}")
        return self.summary

    def achieved_distributions(self) -> np.ndarray:
        """Dosage distributions induced by the fitted founder alleles."""
        return np.vstack([
            dosage_distribution_from_founders(self.haplotype_map, alleles)
            for alleles in self.founder_alleles
        ]) if len(self.founder_alleles) else np.zeros((0, self.config.ploidy + 1))

    def write(self) -> List[str]:
        """Write the population VCF and, if configured, the fit report."""
        if self.founder_alleles is None:
            raise ValueError("Founder alleles not fitted. Call fit() first.")
        self.log_step("Step 4: Writing simulated population")
        written = []

        write_population_vcf(
            self.config.output_vcf,
            self.data.contigs,
            self.data.marker_map,
            self.haplotype_map,
            self.founder_alleles,
        )
        written.append(self.config.output_vcf or '<stdout>')

        if self.config.report:
            write_fit_report(
                self.config.report,
                self.data.marker_map,
                self.targets,
                self.achieved_distributions(),
                self.summary.distances,
            )
            written.append(self.config.report)

        for path in written:
            self.log(f"   Wrote {path}")
        return written

    def run(self) -> FitSummary:
        """Execute load, simulate, fit and write in order."""
        start = time.time()
        self.load_targets()
        self.simulate_population()
        self.fit()
        self.write()
        self.log_step("Simulation", start)
        return self.summary
