"""
Writers for the simulated population and the per-marker fit report.
"""

import gzip
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..haplotypes import format_genotypes, sample_alleles
from ..utils.data_types import MarkerMap

VCF_HEADER = [
    '##fileformat=VCFv4.2',
    '##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">',
]
FIXED_COLUMNS = ['#CHROM', 'POS', 'ID', 'REF', 'ALT', 'QUAL', 'FILTER', 'INFO', 'FORMAT']


@contextmanager
def _open_output(path: Optional[Union[str, Path]]):
    """Open a text sink: stdout for None, gzip for .gz/.bgz, plain otherwise."""
    if path is None:
        yield sys.stdout
        return
    p = str(path)
    if p.lower().endswith(('.gz', '.bgz')):
        fh = gzip.open(p, 'wt')
    else:
        fh = open(p, 'w')
    try:
        yield fh
    finally:
        fh.close()


def sample_names(n_samples: int) -> List[str]:
    """Names of the simulated samples: SAMPLE_0, SAMPLE_1, ..."""
    return [f"SAMPLE_{i}" for i in range(n_samples)]


def write_population_vcf(output_path: Optional[Union[str, Path]],
                         contigs: Sequence[str],
                         marker_map: MarkerMap,
                         haplotype_map: np.ndarray,
                         founder_alleles: np.ndarray) -> None:
    """Write the simulated population as a phased VCF.

    Each sample genotype joins the alleles of its haplotype slots with '|' in
    slot order; the alleles are read through the haplotype map from the
    marker's founder allele vector.

    Args:
        output_path: Destination file (None writes to stdout)
        contigs: Contig names declared in the header
        marker_map: Markers in output order
        haplotype_map: [sample, slot] founder map
        founder_alleles: (n_markers, n_founders) fitted alleles
    """
    n_samples = haplotype_map.shape[0]
    if founder_alleles.shape[0] != marker_map.n_markers:
        raise ValueError(
            f"Founder allele matrix has {founder_alleles.shape[0]} rows for {marker_map.n_markers} markers"
        )

    with _open_output(output_path) as out:
        for line in VCF_HEADER:
            out.write(line + '\n')
        for contig in contigs:
            out.write(f"##contig=<ID={contig}>\n")
        out.write('\t'.join(FIXED_COLUMNS + sample_names(n_samples)) + '\n')

        markers = marker_map.data
        for marker_id, (chrom, pos, ref, alt) in enumerate(
                zip(markers['CHROM'], markers['POS'], markers['REF'], markers['ALT'])):
            genotypes = format_genotypes(sample_alleles(haplotype_map, founder_alleles[marker_id]))
            fields = [str(chrom), str(pos), str(marker_id), ref, alt, '.', '.', '.', 'GT']
            out.write('\t'.join(fields + genotypes) + '\n')


def write_fit_report(output_path: Union[str, Path],
                     marker_map: MarkerMap,
                     targets: np.ndarray,
                     achieved: np.ndarray,
                     distances: np.ndarray) -> pd.DataFrame:
    """Save per-marker target and achieved dosage distributions as TSV.

    Returns:
        The report DataFrame
    """
    n_levels = targets.shape[1]
    report = marker_map.to_dataframe()[['CHROM', 'POS', 'REF', 'ALT']].copy()
    for p in range(n_levels):
        report[f'TARGET_{p}'] = targets[:, p]
    for p in range(n_levels):
        report[f'ACHIEVED_{p}'] = achieved[:, p].astype(int)
    report['DISTANCE'] = distances

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    report.to_csv(output_path, sep='\t', index=False, float_format='%.6g')
    return report
