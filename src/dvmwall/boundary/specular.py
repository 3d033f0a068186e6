"""
Specular Wall Patch Field

Directions emitted by the wall take the fluid-side value of their mirror
image about the face plane:

    xi' = xi - 2 (xi . n) n

The velocity catalog must contain every mirror image (true for tensor
catalogs and axis-aligned walls).
"""

import numpy as np
from loguru import logger
from numba import njit, prange

from .patch_field import PatchField


@njit(parallel=True)
def mirror_indices(normals, xi, xi_dot_n, tolerance):
    """
    Catalog index of the mirror image of every emitted direction.

    Args:
        normals: Unit outward normals, shape (n_faces, 3)
        xi: Discrete velocities, shape (n_vel, 3)
        xi_dot_n: Normal velocity, shape (n_faces, n_vel)
        tolerance: Absolute match tolerance [m/s]

    Returns:
        mirror: shape (n_faces, n_vel); -1 where xi . n >= 0 or no image exists
    """
    n_faces = normals.shape[0]
    n_vel = xi.shape[0]
    mirror = np.full((n_faces, n_vel), -1, dtype=np.int64)

    for f in prange(n_faces):
        for i in range(n_vel):
            c = xi_dot_n[f, i]
            if c >= 0.0:
                continue
            mx = xi[i, 0] - 2.0 * c * normals[f, 0]
            my = xi[i, 1] - 2.0 * c * normals[f, 1]
            mz = xi[i, 2] - 2.0 * c * normals[f, 2]
            for j in range(n_vel):
                if (abs(xi[j, 0] - mx) <= tolerance and
                        abs(xi[j, 1] - my) <= tolerance and
                        abs(xi[j, 2] - mz) <= tolerance):
                    mirror[f, i] = j
                    break

    return mirror


@njit(parallel=True)
def _reflect(interior, mirror, xi_dot_n):
    n_faces, n_vel, n_comp = interior.shape
    out = np.empty_like(interior)

    for f in prange(n_faces):
        for i in range(n_vel):
            src = i
            if xi_dot_n[f, i] < 0.0:
                src = mirror[f, i]
            for c in range(n_comp):
                out[f, i, c] = interior[f, src, c]

    return out


class SpecularBoundaryField(PatchField):
    """Mirror-reflecting wall."""

    type_name = "specular"

    def __init__(self, patch, velocity_space, n_components=None, tolerance=1e-9,
                 new_face_fill="average"):
        """
        Args:
            tolerance: Relative tolerance for matching mirror velocities
        """
        super().__init__(patch, velocity_space, n_components, new_face_fill)
        self.tolerance = float(tolerance)
        self._mirror = None
        self._mirrored_as = None

    @classmethod
    def from_config(cls, config, patch, velocity_space, equilibrium=None, n_components=None):
        return cls(patch, velocity_space, n_components=n_components,
                   tolerance=config.mirror_tolerance,
                   new_face_fill=config.new_face_fill)

    def mirror_table(self):
        """Mirror index per face and emitted direction, cached with the classification."""
        classification = self.classification()
        if self._mirror is None or self._mirrored_as is not classification:
            xi = self.velocity_space.xi
            scale = max(1.0, float(np.max(np.abs(xi))))
            self._mirror = mirror_indices(
                self.patch.normals, xi, classification[0], self.tolerance * scale
            )
            self._mirrored_as = classification
        return self._mirror

    def evaluate(self, interior):
        """
        Reflect the fluid-side populations into the emitted directions.

        Raises:
            ValueError: If an emitted direction has no mirror image in the catalog
        """
        f_int = self._as_arena(interior)
        xi_dot_n, _, _, degenerate = self.classification()
        active = ~degenerate
        mirror = self.mirror_table()

        missing = active[:, np.newaxis] & (xi_dot_n < 0.0) & (mirror < 0)
        if np.any(missing):
            face, direction = np.argwhere(missing)[0]
            raise ValueError(
                f"Patch '{self.patch.name}': direction {direction} on face {face} "
                f"has no mirror image in the velocity catalog"
            )

        out = _reflect(f_int, mirror, xi_dot_n)
        self._out_going[active] = out[active]

        if np.any(degenerate):
            logger.warning(
                f"Patch '{self.patch.name}': {int(np.sum(degenerate))} degenerate "
                f"faces kept their previous values"
            )
        return self.out_going

    def _write_entries(self):
        return {"mirror_tolerance": self.tolerance}
