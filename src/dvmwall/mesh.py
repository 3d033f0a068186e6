"""
Boundary Patch Geometry

Face-local geometry of one boundary patch as handed over by the mesh
framework: outward unit normals, face areas and the inverse distance
from face centre to owner-cell centre.
"""

import numpy as np
from numba import njit


class BoundaryPatch:
    """
    Geometry of a set of boundary faces sharing one boundary condition.

    Normals point out of the fluid domain, into the wall.

    Attributes:
        name: Patch name (used in diagnostics and error messages)
        normals: Unit outward normals, shape (n_faces, 3) (read-only)
        areas: Face areas, shape (n_faces,) [m^2] (read-only)
        delta_coeffs: Inverse face-to-cell-centre distance, shape (n_faces,) [1/m] (read-only)
        revision: Incremented on every geometry change; change geometry
            through update_geometry() only
    """

    def __init__(self, name: str, face_normals, face_areas, delta_coeffs=None):
        """
        Initialize patch geometry.

        Args:
            name: Patch name
            face_normals: Outward normals, shape (n_faces, 3); need not be unit
            face_areas: Face areas, shape (n_faces,) [m^2]
            delta_coeffs: Inverse distances, shape (n_faces,) [1/m].
                          Default 1.0 for every face.
        """
        self.name = name
        self.revision = 0
        self._set(face_normals, face_areas, delta_coeffs)

    def _set(self, face_normals, face_areas, delta_coeffs):
        normals = np.asarray(face_normals, dtype=np.float64)
        normals = np.atleast_2d(normals)
        if normals.ndim != 2 or normals.shape[1] > 3:
            raise ValueError(f"Face normals must have shape (n_faces, <=3), got {normals.shape}")

        full = np.zeros((normals.shape[0], 3), dtype=np.float64)
        full[:, :normals.shape[1]] = normals

        areas = np.asarray(face_areas, dtype=np.float64).ravel()
        if len(areas) != full.shape[0]:
            raise ValueError(
                f"Patch '{self.name}': {full.shape[0]} normals but {len(areas)} areas"
            )

        if delta_coeffs is None:
            deltas = np.ones(len(areas), dtype=np.float64)
        else:
            deltas = np.asarray(delta_coeffs, dtype=np.float64).ravel()
            if len(deltas) != len(areas):
                raise ValueError(
                    f"Patch '{self.name}': {len(areas)} faces but {len(deltas)} delta coefficients"
                )

        self.normals = _normalise_normals(full)
        self.areas = areas.copy()
        self.delta_coeffs = deltas.copy()

        # In-place edits would bypass the revision counter
        self.normals.flags.writeable = False
        self.areas.flags.writeable = False
        self.delta_coeffs.flags.writeable = False

    @property
    def n_faces(self):
        return len(self.areas)

    def update_geometry(self, face_normals, face_areas, delta_coeffs=None):
        """
        Replace the face geometry (mesh motion or remapping).

        Cached direction classifications keyed on the previous revision
        become stale.
        """
        self._set(face_normals, face_areas, delta_coeffs)
        self.revision += 1

    def __len__(self):
        return self.n_faces

    def __repr__(self):
        return (f"BoundaryPatch(name='{self.name}', n_faces={self.n_faces}, "
                f"area={np.sum(self.areas):.3e} m^2)")


# ==================== NUMBA-COMPILED FUNCTIONS ====================

@njit
def _normalise_normals(normals):
    """
    Scale each row to unit length (Numba-compiled).

    Zero rows stay zero; they mark degenerate faces.
    """
    n_faces = normals.shape[0]
    out = np.zeros_like(normals)

    for f in range(n_faces):
        mag = np.sqrt(normals[f, 0]**2 + normals[f, 1]**2 + normals[f, 2]**2)
        if mag > 0.0:
            out[f, 0] = normals[f, 0] / mag
            out[f, 1] = normals[f, 1] / mag
            out[f, 2] = normals[f, 2] / mag

    return out
