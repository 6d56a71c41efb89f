"""
Error categories raised by founderfit.

Configuration and genotype format problems are input errors and derive from
ValueError. Solver invariant violations indicate corrupted internal state.
"""


class ConfigurationError(ValueError):
    """Invalid run parameters (ploidy range, founder count, sample count)."""


class GenotypeFormatError(ValueError):
    """Input genotypes incompatible with the configured dosage model."""

    def __init__(self, message: str, chrom=None, pos=None, genotype=None):
        if chrom is not None and pos is not None:
            message = f"{message} @ {chrom}:{pos}"
        if genotype is not None:
            message = f"{message} (genotype '{genotype}')"
        super().__init__(message)
        self.chrom = chrom
        self.pos = pos
        self.genotype = genotype


class SolverInvariantError(RuntimeError):
    """The MIP model returned a non-optimal or inconsistent solution."""
