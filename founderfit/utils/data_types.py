"""
Core data structures for founderfit package
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import List, Dict, Any

MARKER_COLUMNS = ['CHROM', 'POS', 'ID', 'REF', 'ALT']


class MarkerMap:
    """Marker table loaded from the input VCF

    Expected columns: [CHROM, POS, ID, REF, ALT]. Rows keep input order and
    are never modified after load.
    """

    def __init__(self, data: pd.DataFrame):
        if not isinstance(data, pd.DataFrame):
            raise ValueError("Data must be a DataFrame")
        self.data = data.copy()

        # Validate required columns
        for col in MARKER_COLUMNS:
            if col not in self.data.columns:
                raise ValueError(f"Missing required column: {col}")
        self.data = self.data[MARKER_COLUMNS].reset_index(drop=True)

    @classmethod
    def from_records(cls, records: List[Dict[str, Any]]) -> "MarkerMap":
        """Build a map from a list of row dicts"""
        return cls(pd.DataFrame(records, columns=MARKER_COLUMNS))

    @property
    def chromosomes(self) -> pd.Series:
        """Contig names"""
        return self.data['CHROM']

    @property
    def positions(self) -> pd.Series:
        """Physical positions (1-based, as in the VCF)"""
        return self.data['POS']

    @property
    def ref_alleles(self) -> pd.Series:
        """Reference allele strings"""
        return self.data['REF']

    @property
    def alt_alleles(self) -> pd.Series:
        """Alternate allele strings"""
        return self.data['ALT']

    @property
    def n_markers(self) -> int:
        """Number of markers"""
        return len(self.data)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to pandas DataFrame"""
        return self.data.copy()


@dataclass
class DosageTargets:
    """Target dosage distributions read from a VCF

    Attributes:
        contigs: Contig names in declaration order
        marker_map: One row per accepted marker
        dosages: (n_markers, ploidy + 1) dosage counts per marker
        sample_ids: Input sample names
        ploidy: Ploidy the genotypes were validated against
    """

    contigs: List[str]
    marker_map: MarkerMap
    dosages: np.ndarray
    sample_ids: List[str]
    ploidy: int

    @property
    def n_markers(self) -> int:
        return self.marker_map.n_markers

    @property
    def n_samples(self) -> int:
        return len(self.sample_ids)


@dataclass
class FitSummary:
    """Outcome of one pass of a fitting strategy over all markers

    Attributes:
        distances: Achieved L1 distance per marker, in input order
        seconds: Wall-clock duration of the pass
    """

    distances: np.ndarray
    seconds: float
    method: str = 'descent'

    @property
    def total_distance(self) -> float:
        return float(np.sum(self.distances))

    @property
    def n_markers(self) -> int:
        return len(self.distances)

    def __repr__(self):
        return (f"FitSummary(method={self.method}, n_markers={self.n_markers}, "
                f"total_distance={self.total_distance:.4f}, seconds={self.seconds:.2f})")
