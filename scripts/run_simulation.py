#!/usr/bin/env python3
"""
Founder haplotype population simulation from a real VCF
"""
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from founderfit.cli.simulate import main

if __name__ == "__main__":
    sys.exit(main())
