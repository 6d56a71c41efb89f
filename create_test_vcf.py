#!/usr/bin/env python3
"""
Script to create a small polyploid VCF file for trying out founderfit.
Genotypes are unphased, with occasional missing calls and multi-allelic sites.
"""

import argparse
import random


def generate_random_genotype_call(ploidy, alt_frequency, missing_rate=0.05):
    """Generate a random unphased genotype call such as 0/0/1/1, or ./././. for missing."""
    if random.random() < missing_rate:
        return "/".join(["."] * ploidy)
    alleles = sorted("1" if random.random() < alt_frequency else "0" for _ in range(ploidy))
    return "/".join(alleles)


def create_vcf_file(output_file, n_samples=20, num_markers=12, ploidy=4, multiallelic_rate=0.05, seed=42):
    """Create a VCF file with random biallelic markers for n_samples samples."""

    random.seed(seed)  # For reproducible results

    samples = [f"IND_{i + 1}" for i in range(n_samples)]
    chromosomes = ["chr1", "chr2", "chr3"]

    vcf_lines = [
        "##fileformat=VCFv4.2",
        "##source=create_test_vcf.py",
    ]
    vcf_lines.extend(f"##contig=<ID={chrom}>" for chrom in chromosomes)
    vcf_lines.append('##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">')
    vcf_lines.append('##FORMAT=<ID=DP,Number=1,Type=Integer,Description="Read Depth">')

    header_columns = ["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO", "FORMAT"] + samples
    vcf_lines.append("\t".join(header_columns))

    ref_alleles = ["A", "T", "G", "C"]
    alt_alleles = {"A": "T", "T": "A", "G": "C", "C": "G"}

    for i in range(num_markers):
        chrom = chromosomes[i * len(chromosomes) // num_markers]
        pos = (i + 1) * 10000
        ref = random.choice(ref_alleles)
        alt = alt_alleles[ref]
        if random.random() < multiallelic_rate:
            alt = f"{alt},{random.choice([a for a in ref_alleles if a not in (ref, alt)])}"
        alt_frequency = random.uniform(0.05, 0.95)

        genotype_calls = []
        for _ in samples:
            gt_call = generate_random_genotype_call(ploidy, alt_frequency)
            dp = random.randint(8, 25)
            genotype_calls.append(f"{gt_call}:{dp}")

        vcf_line = [chrom, str(pos), f"SNP_{chrom}_{pos}", ref, alt, "60", "PASS", ".", "GT:DP"] + genotype_calls
        vcf_lines.append("\t".join(vcf_line))

    with open(output_file, 'w') as f:
        f.write("\n".join(vcf_lines) + "\n")

    print(f"Created VCF file: {output_file}")
    print(f"Number of samples: {n_samples}")
    print(f"Number of markers: {num_markers}")


def main():
    parser = argparse.ArgumentParser(description="Create a random polyploid VCF")
    parser.add_argument("output", help="Output VCF path")
    parser.add_argument("--samples", type=int, default=20)
    parser.add_argument("--markers", type=int, default=12)
    parser.add_argument("--ploidy", type=int, default=4)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    create_vcf_file(args.output, n_samples=args.samples, num_markers=args.markers,
                    ploidy=args.ploidy, seed=args.seed)


if __name__ == "__main__":
    main()
