"""
Discrete Velocity Catalog

Immutable, index-addressable set of discrete velocities with quadrature
weights. Stored as Structure-of-Arrays (one (n, 3) velocity array and
one (n,) weight array) so the Numba kernels can consume it directly.
"""

import numpy as np
from scipy.special import roots_hermite

from .constants import thermal_velocity
from .errors import IndexOutOfRange


class VelocitySpace:
    """
    Read-only catalog of discrete velocities.

    Indices are the canonical ordering used by every per-direction field
    and every quadrature sum; they never change after construction.

    Attributes:
        xi: Velocity vectors, shape (n, 3) [m/s] (read-only)
        weights: Quadrature weights, shape (n,) (read-only, > 0)
    """

    def __init__(self, xi, weights):
        """
        Build a catalog from velocities and weights.

        Args:
            xi: Velocities, shape (n, 3), (n, 2) or (n,) [m/s].
                Missing components are zero-filled.
            weights: Positive quadrature weights, shape (n,)

        Raises:
            ValueError: On shape mismatch, empty catalog or non-positive weights
        """
        xi = np.asarray(xi, dtype=np.float64)
        if xi.ndim == 1:
            xi = xi[:, np.newaxis]
        if xi.ndim != 2 or xi.shape[1] > 3:
            raise ValueError(f"Velocities must have shape (n, <=3), got {xi.shape}")

        weights = np.asarray(weights, dtype=np.float64).ravel()
        if len(weights) != xi.shape[0]:
            raise ValueError(
                f"Got {xi.shape[0]} velocities but {len(weights)} weights"
            )
        if len(weights) == 0:
            raise ValueError("Velocity catalog must not be empty")
        if np.any(weights <= 0) or not np.all(np.isfinite(weights)):
            raise ValueError("Quadrature weights must be finite and positive")

        full = np.zeros((xi.shape[0], 3), dtype=np.float64)
        full[:, :xi.shape[1]] = xi

        self._xi = full
        self._weights = weights.copy()
        self._xi.flags.writeable = False
        self._weights.flags.writeable = False

    @property
    def xi(self):
        return self._xi

    @property
    def weights(self):
        return self._weights

    def size(self):
        """Number of discrete velocities."""
        return self._xi.shape[0]

    def velocity(self, i):
        """
        Velocity vector and weight of direction i.

        Args:
            i: Direction index

        Returns:
            (xi_i, w_i): 3-vector [m/s] and quadrature weight

        Raises:
            IndexOutOfRange: If i is outside [0, size())
        """
        if isinstance(i, (bool, np.bool_)) or not isinstance(i, (int, np.integer)):
            raise IndexOutOfRange(f"Velocity index must be an integer, got {i!r}")
        if i < 0 or i >= self.size():
            raise IndexOutOfRange(
                f"Velocity index {i} outside [0, {self.size()})"
            )
        return self._xi[i], float(self._weights[i])

    def __len__(self):
        return self.size()

    def __repr__(self):
        return (f"VelocitySpace(n={self.size()}, "
                f"|xi|max={np.max(np.linalg.norm(self._xi, axis=1)):.3g} m/s)")

    def summary(self):
        """Print summary statistics."""
        speeds = np.linalg.norm(self._xi, axis=1)
        print(f"\nVelocity Space Summary:")
        print(f"  Directions:     {self.size()}")
        print(f"  Max speed:      {np.max(speeds):.3e} m/s")
        print(f"  Weight sum:     {np.sum(self._weights):.6e}")
        for axis, name in enumerate('xyz'):
            lo, hi = self._xi[:, axis].min(), self._xi[:, axis].max()
            if lo != hi:
                print(f"  {name}-range:        [{lo:.3e}, {hi:.3e}] m/s")


# ==================== CATALOG BUILDERS ====================

def _tensor_product(nodes_1d, weights_1d, dim):
    """Tensor-product catalog in C (last axis fastest) order."""
    grids = np.meshgrid(*([nodes_1d] * dim), indexing='ij')
    wgrids = np.meshgrid(*([weights_1d] * dim), indexing='ij')

    xi = np.stack([g.ravel() for g in grids], axis=1)
    weights = np.prod(np.stack([w.ravel() for w in wgrids], axis=1), axis=1)

    return xi, weights


def gauss_hermite(n_points, dim=1, R=1.0, T_ref=1.0):
    """
    Gauss-Hermite velocity catalog scaled to a reference temperature.

    Nodes x_k of the physicists' Hermite rule are mapped to
    xi_k = sqrt(2 R T_ref) x_k and the weights are corrected by exp(x_k^2)
    so that sum(w f(xi)) approximates the plain integral of f.

    Args:
        n_points: Nodes per velocity dimension
        dim: Velocity-space dimension (1, 2 or 3)
        R: Specific gas constant [J/(kg·K)]
        T_ref: Reference temperature [K]

    Returns:
        VelocitySpace with n_points**dim directions
    """
    if dim not in (1, 2, 3):
        raise ValueError(f"Velocity-space dimension must be 1, 2 or 3, got {dim}")
    if n_points < 1:
        raise ValueError(f"n_points must be positive, got {n_points}")

    x, w = roots_hermite(n_points)
    c = thermal_velocity(T_ref, R)

    nodes = c * x
    weights = c * w * np.exp(x * x)

    xi, wt = _tensor_product(nodes, weights, dim)
    return VelocitySpace(xi, wt)


def uniform(n_points, v_max, dim=1):
    """
    Uniform midpoint-rule velocity catalog on [-v_max, v_max]^dim.

    Midpoints never fall on zero, so no direction is tangential to an
    axis-aligned wall.

    Args:
        n_points: Nodes per velocity dimension
        v_max: Velocity cut-off [m/s]
        dim: Velocity-space dimension (1, 2 or 3)

    Returns:
        VelocitySpace with n_points**dim directions
    """
    if dim not in (1, 2, 3):
        raise ValueError(f"Velocity-space dimension must be 1, 2 or 3, got {dim}")
    if n_points < 1 or v_max <= 0:
        raise ValueError("Need n_points >= 1 and v_max > 0")

    dv = 2.0 * v_max / n_points
    nodes = -v_max + (np.arange(n_points) + 0.5) * dv
    weights = np.full(n_points, dv)

    xi, wt = _tensor_product(nodes, weights, dim)
    return VelocitySpace(xi, wt)
