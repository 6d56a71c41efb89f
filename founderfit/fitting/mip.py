"""
Exact founder allele fitting as a mixed-integer program.

The model skeleton depends only on the haplotype map and is built once per run:

    f_j      in {0, 1}     founder allele, per founder
    d_p      integer >= 0  number of samples with dosage p
    i_{s,p}  in {0, 1}     sample s has dosage p
    e_{s,p}  >= 0          |p - sum_h f_{map[s,h]}|
    z_p      >= 0          |d_p - t_p|

    d_p = sum_s i_{s,p}
    sum_p i_{s,p} = 1
    e_{s,p} >= p - sum_h f_{map[s,h]}
    e_{s,p} >= sum_h f_{map[s,h]} - p
    e_{s,p} <= ploidy * (1 - i_{s,p})

The rows linking z to the target t of a marker are appended for one solve and
removed afterwards, and the objective minimizes sum_p z_p. Solved with HiGHS
through scipy.optimize.milp.
"""

from contextlib import contextmanager
from typing import Dict, Optional, Tuple

import numpy as np
from scipy import sparse
from scipy.optimize import Bounds, LinearConstraint, milp

from ..utils.exceptions import SolverInvariantError

# Default HiGHS options: no relative gap so the reported optimum is exact
DEFAULT_SOLVER_OPTIONS = {'mip_rel_gap': 0.0, 'disp': False}


class MipFitter:
    """Single-owner handle on the shared MIP model.

    Not safe to share between threads or processes: every solve temporarily
    extends the model with the rows of one marker.

    Args:
        haplotype_map: Read-only [sample, slot] founder map
        n_founders: Number of founders
        solver_options: Extra options passed to scipy.optimize.milp
    """

    method = 'mip'

    def __init__(self, haplotype_map: np.ndarray, n_founders: int,
                 solver_options: Optional[Dict] = None):
        self.haplotype_map = np.asarray(haplotype_map)
        self.n_founders = n_founders
        self.n_samples, self.ploidy = self.haplotype_map.shape
        self.n_levels = self.ploidy + 1
        self.solver_options = dict(DEFAULT_SOLVER_OPTIONS)
        if solver_options:
            self.solver_options.update(solver_options)

        # Column layout
        n_cells = self.n_samples * self.n_levels
        self._f = np.arange(n_founders)
        self._d = n_founders + np.arange(self.n_levels)
        self._z = n_founders + self.n_levels + np.arange(self.n_levels)
        self._i = (n_founders + 2 * self.n_levels + np.arange(n_cells)).reshape(self.n_samples, self.n_levels)
        self._e = self._i + n_cells
        self.n_cols = n_founders + 2 * self.n_levels + 2 * n_cells

        self._build_skeleton()

    def _build_skeleton(self):
        n_cols = self.n_cols
        L = self.n_levels
        P = self.ploidy

        lower = np.zeros(n_cols)
        upper = np.full(n_cols, np.inf)
        upper[self._f] = 1.0
        upper[self._d] = self.n_samples
        upper[self._i.ravel()] = 1.0
        upper[self._e.ravel()] = P

        integrality = np.zeros(n_cols, dtype=np.int8)
        integrality[self._f] = 1
        integrality[self._d] = 1
        integrality[self._i.ravel()] = 1

        objective = np.zeros(n_cols)
        objective[self._z] = 1.0

        rows, cols, vals, row_lb, row_ub = [], [], [], [], []
        r = 0

        # d_p - sum_s i_{s,p} = 0
        for p in range(L):
            rows.append(r)
            cols.append(self._d[p])
            vals.append(1.0)
            rows.extend([r] * self.n_samples)
            cols.extend(self._i[:, p])
            vals.extend([-1.0] * self.n_samples)
            row_lb.append(0.0)
            row_ub.append(0.0)
            r += 1

        # sum_p i_{s,p} = 1
        for s in range(self.n_samples):
            rows.extend([r] * L)
            cols.extend(self._i[s])
            vals.extend([1.0] * L)
            row_lb.append(1.0)
            row_ub.append(1.0)
            r += 1

        # Duplicate (row, col) entries are summed when the matrix is assembled,
        # so a founder filling several slots of a sample gets its multiplicity.
        for s in range(self.n_samples):
            sample_founders = self._f[self.haplotype_map[s]]
            for p in range(L):
                e = self._e[s, p]
                # e + sum f >= p
                rows.extend([r] * (P + 1))
                cols.append(e)
                cols.extend(sample_founders)
                vals.extend([1.0] * (P + 1))
                row_lb.append(float(p))
                row_ub.append(np.inf)
                r += 1
                # e - sum f >= -p
                rows.extend([r] * (P + 1))
                cols.append(e)
                cols.extend(sample_founders)
                vals.append(1.0)
                vals.extend([-1.0] * P)
                row_lb.append(-float(p))
                row_ub.append(np.inf)
                r += 1
                # e + P * i <= P
                rows.extend([r, r])
                cols.extend([e, self._i[s, p]])
                vals.extend([1.0, float(P)])
                row_lb.append(-np.inf)
                row_ub.append(float(P))
                r += 1

        skeleton = sparse.coo_matrix((vals, (rows, cols)), shape=(r, n_cols)).tocsr()
        self._skeleton = LinearConstraint(skeleton, np.array(row_lb), np.array(row_ub))
        self._constraints = [self._skeleton]
        self._bounds = Bounds(lower, upper)
        self._integrality = integrality
        self._objective = objective

        # Per-marker rows: d_p - z_p <= t_p and d_p + z_p >= t_p
        t_rows = np.repeat(np.arange(2 * L), 2)
        t_cols = np.empty(4 * L, dtype=np.int64)
        t_vals = np.empty(4 * L)
        for p in range(L):
            t_cols[4 * p:4 * p + 4] = [self._d[p], self._z[p], self._d[p], self._z[p]]
            t_vals[4 * p:4 * p + 4] = [1.0, -1.0, 1.0, 1.0]
        self._target_matrix = sparse.coo_matrix((t_vals, (t_rows, t_cols)), shape=(2 * L, n_cols)).tocsr()

    @property
    def n_rows(self) -> int:
        """Rows currently in the model"""
        return sum(c.A.shape[0] for c in self._constraints)

    @contextmanager
    def _target_rows(self, target: np.ndarray):
        """Extend the model with the rows of one target for the duration of a solve."""
        lb = np.empty(2 * self.n_levels)
        ub = np.empty(2 * self.n_levels)
        lb[0::2] = -np.inf
        ub[0::2] = target
        lb[1::2] = target
        ub[1::2] = np.inf
        rows = LinearConstraint(self._target_matrix, lb, ub)
        self._constraints.append(rows)
        try:
            yield
        finally:
            self._constraints.remove(rows)

    def solve(self, target: np.ndarray) -> Tuple[float, np.ndarray]:
        """Find the founder alleles minimizing the L1 distance to target.

        Args:
            target: Dosage distribution of length ploidy + 1

        Returns:
            Tuple of (distance, founder alleles as int8 array)

        Raises:
            SolverInvariantError: the solver did not report an optimum, or the
                achieved distribution does not cover every sample
        """
        target = np.asarray(target, dtype=np.float64)
        if target.shape != (self.n_levels,):
            raise ValueError(f"Target distribution must have {self.n_levels} entries, got {target.shape[0]}")

        with self._target_rows(target):
            result = milp(
                c=self._objective,
                constraints=list(self._constraints),
                integrality=self._integrality,
                bounds=self._bounds,
                options=self.solver_options,
            )

        if result.status != 0 or result.x is None:
            raise SolverInvariantError(
                f"MIP solve not optimal for target {target.tolist()}: "
                f"status {result.status} ({result.message})"
            )

        achieved = np.rint(result.x[self._d]).astype(np.int64)
        if int(achieved.sum()) != self.n_samples:
            raise SolverInvariantError(
                f"Achieved dosage distribution {achieved.tolist()} sums to "
                f"{int(achieved.sum())}, expected {self.n_samples}"
            )

        alleles = np.rint(result.x[self._f]).astype(np.int8)
        return float(result.fun), alleles

    def fit(self, founder_alleles: np.ndarray, target: np.ndarray) -> float:
        """Overwrite founder_alleles with the optimal assignment; return the distance."""
        if founder_alleles.shape != (self.n_founders,):
            raise ValueError(
                f"Founder allele vector must have shape ({self.n_founders},), got {founder_alleles.shape}"
            )
        distance, alleles = self.solve(target)
        founder_alleles[:] = alleles
        return distance
