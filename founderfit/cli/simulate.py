"""
Command-line entry point for the population simulator.
"""
import sys
from typing import List, Optional

from .utils import build_config, parse_args
from ..pipelines.simulation import SimulationPipeline
from ..utils.exceptions import SolverInvariantError


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        pipeline = SimulationPipeline(build_config(args))
        pipeline.run()
    except (ValueError, SolverInvariantError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
