import argparse
from typing import List, Optional

from ..utils.config import MAX_PLOIDY, MIN_PLOIDY, SimulationConfig


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments for the population simulator"""
    parser = argparse.ArgumentParser(
        prog="founderfit",
        description="Simulate a founder haplotype population matching the dosage distributions of a VCF",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Required arguments
    parser.add_argument("--input-vcf", "-i", required=True,
                       help="Input VCF file (.vcf or .vcf.gz)")

    # Optional arguments
    parser.add_argument("--output-vcf", "-o", default=None,
                       help="Output VCF file (stdout if omitted; .gz is compressed)")
    parser.add_argument("--ploidy", "-p", type=int, default=4,
                       help=f"Organism ploidy ({MIN_PLOIDY}-{MAX_PLOIDY})")
    parser.add_argument("--founders", "-f", type=int, default=1,
                       help="Number of founders to simulate")
    parser.add_argument("--samples", "-s", type=int, default=None,
                       help="Number of samples to simulate. Default: all samples in the input VCF file")
    parser.add_argument("--markers", "-m", type=int, default=None,
                       help="Number of markers to use. Default: all markers in the input VCF file")
    parser.add_argument("--seed", "-g", type=int, default=0,
                       help="Initial seed for pseudo-random number generation")

    # Fitting
    parser.add_argument("--mip", action='store_true',
                       help="Compute optimal best-fit via Mixed-Integer Programming. "
                            "Default: approximate fit via greedy descent")
    parser.add_argument("--workers", type=int, default=1,
                       help="Worker processes; markers are partitioned across independent fitters")

    # Output
    parser.add_argument("--report", default=None,
                       help="Optional TSV with per-marker target/achieved distributions")
    parser.add_argument("--log-markers", action='store_true',
                       help="Print the distance reached for every marker")
    parser.add_argument("--quiet", "-q", action='store_true',
                       help="Suppress progress messages")

    return parser.parse_args(argv)


def build_config(args) -> SimulationConfig:
    """Translate parsed arguments into a SimulationConfig"""
    return SimulationConfig(
        input_vcf=args.input_vcf,
        output_vcf=args.output_vcf,
        ploidy=args.ploidy,
        n_founders=args.founders,
        n_samples=args.samples,
        n_markers=args.markers,
        seed=args.seed,
        method='mip' if args.mip else 'descent',
        workers=args.workers,
        report=args.report,
        log_markers=args.log_markers,
        verbose=not args.quiet,
    )
