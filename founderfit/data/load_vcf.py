#!/usr/bin/env python
"""
VCF loader for founder fitting: builds per-marker target dosage distributions.

Key features:
- Streaming parsing of VCF text (supports .vcf, .vcf.gz and .vcf.bgz)
- Genotypes of any ploidy read from the GT field, phased or unphased
- Unknown genotypes (any '.' allele) excluded from the dosage counts
- Multi-allelic sites skipped with a warning; monomorphic sites (ALT .) kept
- Genotypes whose ploidy differs from the configured one abort the load

Return value:
    DosageTargets(contigs, marker_map, dosages, sample_ids, ploidy)
"""
import gzip
import io
import re
import sys
import warnings
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple

import numpy as np

from ..utils.data_types import DosageTargets, MarkerMap
from ..utils.exceptions import GenotypeFormatError

_CONTIG_ID = re.compile(r'^##contig=<.*?\bID=([^,>]+)')

_GT_TOKEN_CACHE: Dict[str, Tuple[str, ...]] = {}


class VcfRecord(NamedTuple):
    """One data line of a VCF with its GT calls split into allele tokens."""
    chrom: str
    pos: int
    id: str
    ref: str
    alts: Tuple[str, ...]
    genotypes: List[Tuple[str, ...]]


def _open_text(path):
    """Open VCF text transparently from plain or gzip-compressed files.

    Accepts string or Path-like, and handles .vcf, .vcf.gz, and .vcf.bgz.
    """
    p = str(path)
    pl = p.lower()
    if pl.endswith('.gz') or pl.endswith('.bgz'):
        return io.TextIOWrapper(gzip.open(p, 'rb'))
    return open(p, 'r')


def _parse_samples(header_line):
    # header line starts with #CHROM
    cols = header_line.rstrip('\n').split('\t')
    if len(cols) < 9 or cols[0] != '#CHROM':
        raise ValueError('Malformed VCF header line: missing #CHROM ... FORMAT ...')
    return cols[9:]


def split_gt_tokens(gt: str) -> Tuple[str, ...]:
    """Split a GT string into allele tokens, e.g. '0/1|1' -> ('0', '1', '1')."""
    cached = _GT_TOKEN_CACHE.get(gt)
    if cached is not None:
        return cached
    toks = tuple(gt.replace('|', '/').split('/'))
    _GT_TOKEN_CACHE[gt] = toks
    return toks


def is_unknown(tokens: Tuple[str, ...]) -> bool:
    """A genotype is unknown when any of its alleles is missing."""
    return any(token == '.' or token == '' for token in tokens)


def genotype_dosage(tokens: Tuple[str, ...], alt_token: str = '1') -> int:
    """Number of alternate alleles in a genotype."""
    return sum(1 for token in tokens if token == alt_token)


def iter_vcf_records(vcf_path, contigs: Optional[List[str]] = None,
                     samples: Optional[List[str]] = None) -> Iterator[VcfRecord]:
    """Stream records from a VCF.

    Args:
        vcf_path: Path to .vcf / .vcf.gz
        contigs: If given, receives contig names from ##contig headers and
            data lines, in first-seen order
        samples: If given, receives the sample names of the #CHROM line

    Yields:
        VcfRecord per data line
    """
    seen_contigs = set(contigs) if contigs is not None else None
    header_seen = False
    fh = _open_text(vcf_path)
    try:
        for line in fh:
            if not line.strip():
                continue
            if line.startswith('##'):
                match = _CONTIG_ID.match(line)
                if match and contigs is not None and match.group(1) not in seen_contigs:
                    contigs.append(match.group(1))
                    seen_contigs.add(match.group(1))
                continue
            if line.startswith('#CHROM'):
                names = _parse_samples(line)
                if not names:
                    raise ValueError('VCF contains no sample columns')
                if samples is not None:
                    samples.extend(names)
                header_seen = True
                continue
            if not header_seen:
                raise ValueError('VCF header not found before data lines')

            parts = line.rstrip('\n').split('\t')
            if len(parts) < 10:
                raise ValueError(f'Malformed VCF data line: expected sample columns, got {len(parts)} fields')
            chrom, pos_str, vid, ref, alt_str = parts[0], parts[1], parts[2], parts[3], parts[4]
            if contigs is not None and chrom not in seen_contigs:
                contigs.append(chrom)
                seen_contigs.add(chrom)

            alts = tuple(alt_str.split(',')) if alt_str and alt_str != '.' else tuple()
            # GT must be the first FORMAT key
            fmt_keys = parts[8].split(':')
            if fmt_keys[0] != 'GT':
                raise GenotypeFormatError('FORMAT does not start with GT', chrom, pos_str, parts[8])
            genotypes = [split_gt_tokens(field.partition(':')[0]) for field in parts[9:]]
            yield VcfRecord(chrom, int(pos_str), vid, ref, alts, genotypes)
    finally:
        fh.close()


def _unknown_genotype_message(unknown_sites: List[Tuple[str, int]], max_sites: int = 10) -> str:
    """Summarize excluded unknown genotypes with per-site counts."""
    n_unknown = sum(n for _, n in unknown_sites)
    listed = ', '.join(f"{site} ({n})" for site, n in unknown_sites[:max_sites])
    if len(unknown_sites) > max_sites:
        listed += f", ... {len(unknown_sites) - max_sites} more"
    return (f"Excluded {n_unknown} unknown genotypes at {len(unknown_sites)} sites "
            f"from dosage counts: {listed}")


def load_vcf_targets(vcf_path,
                     ploidy: int,
                     max_markers: Optional[int] = None,
                     verbose: bool = False) -> DosageTargets:
    """Read a VCF and count the dosage distribution of every biallelic or monomorphic marker.

    Args:
        vcf_path: Path to .vcf / .vcf.gz
        ploidy: Expected number of alleles per genotype
        max_markers: Stop after this many accepted markers (None: all)
        verbose: Print the dosage distribution of every marker to stderr

    Returns:
        DosageTargets with raw (unnormalized) dosage counts

    Raises:
        GenotypeFormatError: a known genotype does not have `ploidy` alleles
    """
    contigs: List[str] = []
    sample_ids: List[str] = []
    rows = []
    dosages = []
    n_multiallelic = 0
    unknown_sites: List[Tuple[str, int]] = []

    for record in iter_vcf_records(vcf_path, contigs=contigs, samples=sample_ids):
        if max_markers is not None and len(rows) >= max_markers:
            break
        if len(record.alts) > 1:
            n_multiallelic += 1
            warnings.warn(f"Skipping multi-allelic variant @ {record.chrom}:{record.pos}")
            continue

        counts = np.zeros(ploidy + 1, dtype=np.int64)
        n_unknown = 0
        for tokens in record.genotypes:
            if is_unknown(tokens):
                n_unknown += 1
                continue
            if len(tokens) != ploidy:
                raise GenotypeFormatError(
                    f"Input ploidy {ploidy} does not match VCF genotype ploidy {len(tokens)}",
                    record.chrom, record.pos, '/'.join(tokens),
                )
            counts[genotype_dosage(tokens)] += 1
        if n_unknown:
            unknown_sites.append((f"{record.chrom}:{record.pos}", n_unknown))

        # Monomorphic sites (ALT '.') are kept and written back out
        rows.append({
            'CHROM': record.chrom,
            'POS': record.pos,
            'ID': record.id,
            'REF': record.ref,
            'ALT': record.alts[0] if record.alts else '.',
        })
        dosages.append(counts)
        if verbose:
            print(f"   Input dosages @ {record.chrom}:{record.pos} # {counts.tolist()}", file=sys.stderr)

    if unknown_sites:
        warnings.warn(_unknown_genotype_message(unknown_sites))

    if verbose:
        print(f"   Loaded {len(rows)} markers from {len(sample_ids)} samples "
              f"({n_multiallelic} multi-allelic skipped)", file=sys.stderr)

    dosage_matrix = np.vstack(dosages) if dosages else np.zeros((0, ploidy + 1), dtype=np.int64)
    return DosageTargets(
        contigs=contigs,
        marker_map=MarkerMap.from_records(rows),
        dosages=dosage_matrix,
        sample_ids=sample_ids,
        ploidy=ploidy,
    )


def _main(argv):  # pragma: no cover
    import argparse
    p = argparse.ArgumentParser(description='Print target dosage distributions of a VCF')
    p.add_argument('vcf')
    p.add_argument('--ploidy', type=int, default=2)
    p.add_argument('--markers', type=int, default=None)
    args = p.parse_args(argv)

    targets = load_vcf_targets(args.vcf, args.ploidy, max_markers=args.markers)
    print('Samples:', targets.n_samples)
    print('Markers:', targets.n_markers)
    print('Contigs:', ', '.join(targets.contigs))
    print(targets.marker_map.to_dataframe().head())


if __name__ == '__main__':  # pragma: no cover
    _main(sys.argv[1:])
