"""
Fixed-Gradient Patch Field

x_p = x_c + gradient / delta

with x_c the fluid-side value, delta the inverse distance from face centre
to cell centre and a user-specified gradient (uniform or per face).
"""

import numpy as np

from .patch_field import PatchField


class FixedGradientBoundaryField(PatchField):
    """Boundary value extrapolated from the interior with a fixed gradient."""

    type_name = "fixedGradient"
    _mapped = ("_out_going", "_gradient")

    def __init__(self, patch, velocity_space, gradient=0.0, n_components=None,
                 new_face_fill="average"):
        """
        Args:
            gradient: Scalar, per face (n_faces,), per component
                      (n_components,) or (n_faces, n_components). A 1-D
                      gradient is ambiguous when n_components == n_faces
                      and must then be given as a 2-D array.
        """
        super().__init__(patch, velocity_space, n_components, new_face_fill)
        self.gradient = gradient

    @classmethod
    def from_config(cls, config, patch, velocity_space, equilibrium=None, n_components=None):
        return cls(patch, velocity_space, gradient=config.gradient,
                   n_components=n_components, new_face_fill=config.new_face_fill)

    @property
    def gradient(self):
        return self._gradient[:, 0] if self.n_components is None else self._gradient

    @gradient.setter
    def gradient(self, gradient):
        n_comp = self.n_components or 1
        g = np.asarray(gradient, dtype=np.float64)
        if g.ndim == 1 and self.n_components is not None and n_comp == self.n_faces > 1:
            raise ValueError(
                f"Patch '{self.patch.name}': 1-D gradient is ambiguous with "
                f"{self.n_faces} faces and {n_comp} components; give shape "
                f"(n_faces, n_components)"
            )
        if g.ndim == 1 and self.n_components is not None and g.shape[0] == n_comp:
            g = g[np.newaxis, :]
        elif g.ndim == 1:
            g = g[:, np.newaxis]
        try:
            self._gradient = np.broadcast_to(g, (self.n_faces, n_comp)).copy()
        except ValueError:
            raise ValueError(
                f"Patch '{self.patch.name}': gradient of shape {np.shape(gradient)} "
                f"does not fit {self.n_faces} faces x {n_comp} components"
            ) from None

    def evaluate(self, interior):
        """
        Raises:
            ValueError: If a face has a non-positive delta coefficient
        """
        f_int = self._as_arena(interior)
        delta = self.patch.delta_coeffs
        if self.patch.n_faces != self.n_faces:
            raise ValueError(
                f"Patch '{self.patch.name}' has {self.patch.n_faces} faces "
                f"but the field stores {self.n_faces}"
            )
        if np.any(delta <= 0.0):
            raise ValueError(
                f"Patch '{self.patch.name}': non-positive delta coefficients on faces "
                f"{np.flatnonzero(delta <= 0.0)[:10].tolist()}"
            )

        self._out_going[...] = f_int + (self._gradient / delta[:, np.newaxis])[:, np.newaxis, :]
        return self.out_going

    def _write_entries(self):
        g = self._gradient
        if g.size and np.all(g == g.flat[0]):
            return {"gradient": float(g.flat[0])}
        return {"gradient": self.gradient.tolist()}
