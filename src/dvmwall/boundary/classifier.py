"""
Direction Classification at a Wall Face

Splits the discrete velocities of a catalog, per face, by the sign of
the normal component xi . n (n pointing out of the fluid, into the wall):

- xi . n > 0: travelling into the wall (incoming set)
- xi . n <= 0: emitted by the wall into the fluid (outgoing set).
  Tangential directions (xi . n == 0 exactly) sit in the outgoing set
  but carry zero normal flux.

A degenerate face (zero area or zero normal) yields two empty sets.
"""

import numpy as np
from numba import njit, prange


@njit
def classify_face(normal, area, xi):
    """
    Classify all discrete velocities against one face (Numba-compiled).

    Args:
        normal: Outward unit normal, shape (3,)
        area: Face area [m^2]
        xi: Discrete velocities, shape (n_vel, 3) [m/s]

    Returns:
        xi_dot_n: Signed normal velocity per direction, shape (n_vel,)
        incoming: Mask of directions into the wall, shape (n_vel,)
        outgoing: Mask of directions out of the wall, shape (n_vel,)
        degenerate: True for zero-area / zero-normal faces
    """
    n_vel = xi.shape[0]
    xi_dot_n = np.zeros(n_vel, dtype=np.float64)
    incoming = np.zeros(n_vel, dtype=np.bool_)
    outgoing = np.zeros(n_vel, dtype=np.bool_)

    if area <= 0.0 or (normal[0] == 0.0 and normal[1] == 0.0 and normal[2] == 0.0):
        return xi_dot_n, incoming, outgoing, True

    for i in range(n_vel):
        c = xi[i, 0] * normal[0] + xi[i, 1] * normal[1] + xi[i, 2] * normal[2]
        xi_dot_n[i] = c
        if c > 0.0:
            incoming[i] = True
        else:
            outgoing[i] = True

    return xi_dot_n, incoming, outgoing, False


@njit(parallel=True)
def classify_patch(normals, areas, xi):
    """
    Classify all discrete velocities against every face of a patch.

    Faces are independent and processed in parallel.

    Args:
        normals: Outward unit normals, shape (n_faces, 3)
        areas: Face areas, shape (n_faces,)
        xi: Discrete velocities, shape (n_vel, 3)

    Returns:
        xi_dot_n: shape (n_faces, n_vel)
        incoming: shape (n_faces, n_vel)
        outgoing: shape (n_faces, n_vel)
        degenerate: shape (n_faces,)
    """
    n_faces = normals.shape[0]
    n_vel = xi.shape[0]

    xi_dot_n = np.zeros((n_faces, n_vel), dtype=np.float64)
    incoming = np.zeros((n_faces, n_vel), dtype=np.bool_)
    outgoing = np.zeros((n_faces, n_vel), dtype=np.bool_)
    degenerate = np.zeros(n_faces, dtype=np.bool_)

    for f in prange(n_faces):
        c, inc, out, deg = classify_face(normals[f], areas[f], xi)
        xi_dot_n[f, :] = c
        incoming[f, :] = inc
        outgoing[f, :] = out
        degenerate[f] = deg

    return xi_dot_n, incoming, outgoing, degenerate


def classify(normal, velocity_space, area=1.0):
    """
    Partition a velocity catalog into incoming and outgoing index sets.

    Args:
        normal: Outward unit normal of the face, shape (3,) (or shorter,
                zero-filled)
        velocity_space: VelocitySpace
        area: Face area; a non-positive area marks the face degenerate

    Returns:
        (incoming, outgoing): Ascending int arrays of direction indices.
        Both are empty for a degenerate face.
    """
    n = np.zeros(3, dtype=np.float64)
    given = np.asarray(normal, dtype=np.float64).ravel()
    n[:len(given)] = given

    _, incoming, outgoing, _ = classify_face(n, float(area), velocity_space.xi)

    return np.flatnonzero(incoming), np.flatnonzero(outgoing)
