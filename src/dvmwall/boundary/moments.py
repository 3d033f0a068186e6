"""
Flux Moments over Direction Subsets

Quadrature sums of a per-direction field restricted to a direction
subset and weighted by the normal velocity:

    mass:      sum_i w_i (xi_i . n) f_i
    momentum:  sum_i w_i (xi_i . n) xi_i f_i
    energy:    sum_i w_i (xi_i . n) |xi_i|^2 / 2 f_i

Sums always run in ascending direction index, so identical inputs give
bit-identical results.
"""

import numpy as np
from numba import njit, prange

from ..errors import IndexOutOfRange

MOMENTS = ("mass", "momentum", "energy")


@njit
def flux_moment(field, indices, xi_dot_n, weights):
    """
    Mass-flux moment of one face over a direction subset (Numba-compiled).

    Args:
        field: Per-direction values, shape (n_vel,)
        indices: Ascending direction indices to sum over
        xi_dot_n: Normal velocity per direction, shape (n_vel,)
        weights: Quadrature weights, shape (n_vel,)

    Returns:
        Scalar flux
    """
    total = 0.0
    for k in range(len(indices)):
        i = indices[k]
        total += weights[i] * xi_dot_n[i] * field[i]
    return total


@njit
def momentum_flux_moment(field, indices, xi_dot_n, xi, weights):
    """Normal flux of momentum per unit mass, shape (3,)."""
    total = np.zeros(3, dtype=np.float64)
    for k in range(len(indices)):
        i = indices[k]
        a = weights[i] * xi_dot_n[i] * field[i]
        total[0] += a * xi[i, 0]
        total[1] += a * xi[i, 1]
        total[2] += a * xi[i, 2]
    return total


@njit
def energy_flux_moment(field, indices, xi_dot_n, xi, weights):
    """Normal flux of translational kinetic energy per unit mass."""
    total = 0.0
    for k in range(len(indices)):
        i = indices[k]
        e = 0.5 * (xi[i, 0]**2 + xi[i, 1]**2 + xi[i, 2]**2)
        total += weights[i] * xi_dot_n[i] * e * field[i]
    return total


@njit(parallel=True)
def patch_flux_moment(field, mask, xi_dot_n, weights):
    """
    Mass-flux moment of every face of a patch (Numba-compiled).

    Faces run in parallel; within a face the sum is sequential in
    direction order.

    Args:
        field: Per-face, per-direction values, shape (n_faces, n_vel)
        mask: Directions included per face, shape (n_faces, n_vel)
        xi_dot_n: Normal velocity, shape (n_faces, n_vel)
        weights: Quadrature weights, shape (n_vel,)

    Returns:
        flux: shape (n_faces,)
    """
    n_faces, n_vel = field.shape
    flux = np.zeros(n_faces, dtype=np.float64)

    for f in prange(n_faces):
        total = 0.0
        for i in range(n_vel):
            if mask[f, i]:
                total += weights[i] * xi_dot_n[f, i] * field[f, i]
        flux[f] = total

    return flux


def integrate(field, direction_set, velocity_space, normal, moment="mass"):
    """
    Flux-weighted moment of a per-direction field over a direction subset.

    Args:
        field: Per-direction values, shape (n_vel,)
        direction_set: Direction indices (any order; summed ascending)
        velocity_space: VelocitySpace
        normal: Outward unit normal of the face, shape (3,)
        moment: "mass", "momentum" or "energy"

    Returns:
        float for "mass"/"energy", ndarray (3,) for "momentum"

    Raises:
        ValueError: On unknown moment or field size mismatch
        IndexOutOfRange: If direction_set holds an invalid index
    """
    field = np.asarray(field, dtype=np.float64).ravel()
    n_vel = velocity_space.size()
    if len(field) != n_vel:
        raise ValueError(f"Field has {len(field)} values, catalog has {n_vel} directions")
    if moment not in MOMENTS:
        raise ValueError(f"Unknown moment: {moment}. Use: {list(MOMENTS)}")

    indices = np.sort(np.asarray(direction_set, dtype=np.int64).ravel())
    if len(indices) and (indices[0] < 0 or indices[-1] >= n_vel):
        raise IndexOutOfRange(
            f"Direction set references indices outside [0, {n_vel})"
        )

    n = np.zeros(3, dtype=np.float64)
    given = np.asarray(normal, dtype=np.float64).ravel()
    n[:len(given)] = given

    xi = velocity_space.xi
    xi_dot_n = xi @ n
    weights = velocity_space.weights

    if moment == "mass":
        return flux_moment(field, indices, xi_dot_n, weights)
    if moment == "momentum":
        return momentum_flux_moment(field, indices, xi_dot_n, xi, weights)
    return energy_flux_moment(field, indices, xi_dot_n, xi, weights)
