"""
Patch Field Base

Common storage and mapping protocol for every boundary-condition
variant. Values live in one contiguous arena per patch,
shape (n_faces, n_vel, n_components), indexed by (face, direction).
Scalar fields (n_components=None) are exposed as 2-D views.
"""

import copy
from abc import ABC, abstractmethod

import numpy as np
from loguru import logger

from ..errors import MappingIndexError
from .classifier import classify_patch

NEW_FACE_FILLS = ("average", "zero")


class PatchField(ABC):
    """
    Per-direction boundary values of one patch.

    Subclasses list every per-face array they own in ``_mapped``; those
    arrays follow the patch through auto_map() and rmap().

    Attributes:
        patch: BoundaryPatch (borrowed)
        velocity_space: VelocitySpace (borrowed, shared by all patches)
        n_components: Components per direction, None for scalar fields
        new_face_fill: "average" or "zero" for faces created by a mapping
    """

    type_name = None
    _mapped = ("_out_going",)

    def __init__(self, patch, velocity_space, n_components=None, new_face_fill="average"):
        if n_components is not None and n_components < 1:
            raise ValueError(f"n_components must be positive, got {n_components}")
        if new_face_fill not in NEW_FACE_FILLS:
            raise ValueError(f"Unknown new_face_fill: {new_face_fill}. Use: {list(NEW_FACE_FILLS)}")

        self.patch = patch
        self.velocity_space = velocity_space
        self.n_components = n_components
        self.new_face_fill = new_face_fill

        self._out_going = np.zeros(self._arena_shape(patch.n_faces), dtype=np.float64)
        self._classification = None
        self._classified_as = None

    # ------------------------------------------------------------------ storage

    @property
    def n_faces(self):
        return self._out_going.shape[0]

    @property
    def value_shape(self):
        """Shape of the per-direction arrays seen by callers."""
        shape = (self.n_faces, self.velocity_space.size())
        if self.n_components is None:
            return shape
        return shape + (self.n_components,)

    def _arena_shape(self, n_faces):
        return (n_faces, self.velocity_space.size(), self.n_components or 1)

    def _view(self, arena):
        return arena[..., 0] if self.n_components is None else arena

    @property
    def out_going(self):
        """Evaluated boundary value per face and direction (mutable view)."""
        return self._view(self._out_going)

    @property
    def value(self):
        return self.out_going

    def _as_arena(self, values, name="interior field"):
        """Validate caller values and return them as a 3-D float array."""
        values = np.asarray(values, dtype=np.float64)
        if values.shape != self.value_shape:
            raise ValueError(
                f"Patch '{self.patch.name}': {name} has shape {values.shape}, "
                f"expected {self.value_shape}"
            )
        if self.n_components is None:
            values = values[..., np.newaxis]
        return np.ascontiguousarray(values)

    # ----------------------------------------------------------- classification

    def classification(self):
        """
        Direction classification of every face, cached per geometry revision.

        Returns:
            (xi_dot_n, incoming, outgoing, degenerate), see classify_patch()
        """
        key = (id(self.patch), self.patch.revision, self.n_faces)
        if self._classification is None or self._classified_as != key:
            if self.patch.n_faces != self.n_faces:
                raise ValueError(
                    f"Patch '{self.patch.name}' has {self.patch.n_faces} faces "
                    f"but the field stores {self.n_faces}"
                )
            self._classification = classify_patch(
                self.patch.normals, self.patch.areas, self.velocity_space.xi
            )
            self._classified_as = key
        return self._classification

    # ----------------------------------------------------------------- protocol

    @abstractmethod
    def evaluate(self, interior):
        """Update and return the boundary value from the fluid-side field."""

    def _write_entries(self):
        return {}

    def write(self):
        """Persisted parameters of this patch field as a plain dict."""
        entries = {"type": self.type_name}
        entries.update(self._write_entries())
        if self.new_face_fill != "average":
            entries["new_face_fill"] = self.new_face_fill
        return entries

    def clone(self):
        """Copy with independent storage; patch and catalog stay shared."""
        new = copy.copy(self)
        for name in self._mapped:
            setattr(new, name, getattr(self, name).copy())
        return new

    def _fill_value(self, values):
        if self.new_face_fill == "average" and values.shape[0] > 0:
            return np.mean(values, axis=0)
        return np.zeros(values.shape[1:], dtype=values.dtype)

    def auto_map(self, mapper, patch=None):
        """
        Resize and remap all per-face storage after a topology change.

        Surviving faces keep (or interpolate) their values; new faces get
        the previous patch average or zero.

        Args:
            mapper: PatchMapper from the old to the new face set
            patch: Remapped BoundaryPatch, if the geometry object changed

        Raises:
            MappingIndexError: If the mapper addresses a nonexistent face
            ValueError: If the resulting face count disagrees with the patch
        """
        mapper.check(self.n_faces)

        target = patch if patch is not None else self.patch
        if target.n_faces != mapper.size:
            raise ValueError(
                f"Patch '{target.name}' has {target.n_faces} faces, "
                f"mapping produces {mapper.size}"
            )

        mapped = {}
        for name in self._mapped:
            values = getattr(self, name)
            mapped[name] = mapper.map(values, self._fill_value(values))
        for name, values in mapped.items():
            setattr(self, name, values)

        self.patch = target
        self._classification = None
        self._classified_as = None

        n_new = int(np.sum(mapper.new_faces()))
        if n_new:
            logger.warning(
                f"Patch '{target.name}': {n_new} new faces initialised "
                f"with {self.new_face_fill} values"
            )
        logger.debug(f"Patch '{target.name}': remapped to {mapper.size} faces")

    def rmap(self, source, addressing):
        """
        Reverse-map the values of another field of the same kind.

        Source face i is copied onto face addressing[i] of this field.

        Args:
            source: Patch field of the same type and catalog size
            addressing: Target face per source face, shape (source.n_faces,)

        Raises:
            TypeError: If the source is a different kind of patch field
            ValueError: If the table length or catalog size disagrees
            MappingIndexError: If an address is outside [0, n_faces)
        """
        if type(source) is not type(self):
            raise TypeError(
                f"Cannot rmap {type(source).__name__} onto {type(self).__name__}"
            )
        if source.value_shape[1:] != self.value_shape[1:]:
            raise ValueError(
                f"Per-face shapes differ: {source.value_shape[1:]} vs {self.value_shape[1:]}"
            )

        addressing = np.asarray(addressing, dtype=np.int64).ravel()
        if len(addressing) != source.n_faces:
            raise ValueError(
                f"Addressing has {len(addressing)} entries for {source.n_faces} source faces"
            )

        bad = (addressing < 0) | (addressing >= self.n_faces)
        if np.any(bad):
            raise MappingIndexError(
                f"Patch '{self.patch.name}': rmap addresses "
                f"{addressing[bad][:10].tolist()} outside [0, {self.n_faces})"
            )

        for name in self._mapped:
            getattr(self, name)[addressing] = getattr(source, name)

    def __repr__(self):
        return (f"{type(self).__name__}(patch='{self.patch.name}', "
                f"n_faces={self.n_faces}, n_vel={self.velocity_space.size()})")
