"""
Face Correspondence for Mesh Topology Changes

A PatchMapper describes how the faces of a patch after a topology change
(redistribution, refinement, load balancing) relate to the faces before
it. Two forms are supported:

- direct: direct_addressing[new_face] = old_face, or -1 for a face that
  did not exist before
- interpolative: addressing[new_face, k] = old_face (or -1 for unused
  slots) with weights[new_face, k]; a row without any valid slot is a
  new face
"""

import numpy as np

from ..errors import MappingIndexError


class PatchMapper:
    """
    Old-face to new-face correspondence for one patch.

    Attributes:
        size: Number of faces after the mapping
        direct: True for one-to-one addressing
        direct_addressing: shape (size,) (direct only)
        addressing: shape (size, k) (interpolative only)
        weights: shape (size, k) (interpolative only)
    """

    def __init__(self, direct_addressing=None, addressing=None, weights=None):
        if (direct_addressing is None) == (addressing is None):
            raise ValueError("Give either direct_addressing or addressing + weights")

        if direct_addressing is not None:
            self.direct_addressing = np.asarray(direct_addressing, dtype=np.int64).ravel()
            self.addressing = None
            self.weights = None
            self.size = len(self.direct_addressing)
        else:
            self.direct_addressing = None
            self.addressing = np.atleast_2d(np.asarray(addressing, dtype=np.int64))
            if weights is None:
                raise ValueError("Interpolative mapping needs weights")
            self.weights = np.atleast_2d(np.asarray(weights, dtype=np.float64))
            if self.weights.shape != self.addressing.shape:
                raise ValueError(
                    f"Addressing {self.addressing.shape} and weights "
                    f"{self.weights.shape} differ in shape"
                )
            self.size = self.addressing.shape[0]

    @property
    def direct(self):
        return self.direct_addressing is not None

    @classmethod
    def identity(cls, n_faces):
        """Mapping that leaves every face in place."""
        return cls(direct_addressing=np.arange(n_faces))

    @classmethod
    def removing(cls, n_old, faces):
        """Mapping that drops the given faces and renumbers the rest."""
        keep = np.ones(n_old, dtype=np.bool_)
        faces = np.asarray(faces, dtype=np.int64).ravel()
        if len(faces) and (faces.min() < 0 or faces.max() >= n_old):
            raise MappingIndexError(f"Cannot remove faces outside [0, {n_old})")
        keep[faces] = False
        return cls(direct_addressing=np.flatnonzero(keep))

    @classmethod
    def from_addressing(cls, addressing, weights=None):
        """Direct mapping from a 1-D table, interpolative from a 2-D one."""
        addressing = np.asarray(addressing)
        if addressing.ndim == 1 and weights is None:
            return cls(direct_addressing=addressing)
        return cls(addressing=addressing, weights=weights)

    def new_faces(self):
        """Mask of faces with no predecessor."""
        if self.direct:
            return self.direct_addressing < 0
        return np.all(self.addressing < 0, axis=1)

    def check(self, n_old):
        """
        Validate the addresses against the previous face count.

        Raises:
            MappingIndexError: On an address >= n_old or < -1
        """
        table = self.direct_addressing if self.direct else self.addressing
        bad = (table < -1) | (table >= n_old)
        if bad.ndim == 2:
            bad = np.any(bad, axis=1)
        if np.any(bad):
            bad = np.flatnonzero(bad)
            raise MappingIndexError(
                f"Mapping addresses faces outside [0, {n_old}) "
                f"at new faces {bad[:10].tolist()}"
            )

    def map(self, values, fill):
        """
        Map per-face values onto the new face set.

        Args:
            values: Old per-face values, shape (n_old, ...)
            fill: Value (scalar or shape values.shape[1:]) for new faces

        Returns:
            Newly allocated array of shape (size, ...)
        """
        values = np.asarray(values)
        self.check(values.shape[0])

        dtype = values.dtype if self.direct else np.result_type(values.dtype, np.float64)
        out = np.empty((self.size,) + values.shape[1:], dtype=dtype)
        fresh = self.new_faces()

        if self.direct:
            kept = ~fresh
            out[kept] = values[self.direct_addressing[kept]]
        else:
            out[...] = 0
            for k in range(self.addressing.shape[1]):
                valid = self.addressing[:, k] >= 0
                w = self.weights[valid, k].reshape((-1,) + (1,) * (values.ndim - 1))
                out[valid] += w * values[self.addressing[valid, k]]

        out[fresh] = fill
        return out

    def __repr__(self):
        kind = "direct" if self.direct else "interpolative"
        return f"PatchMapper({kind}, size={self.size}, new={int(np.sum(self.new_faces()))})"
