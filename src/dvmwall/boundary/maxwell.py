"""
Diffuse (Maxwell) Wall Patch Field

Every evaluation, for every face of the patch:

1. classify the discrete velocities against the outward normal
2. store the incoming populations divided by the previous wall density
   (in_coming_by_rho); emitted directions hold the unit-density
   equilibrium shape instead
3. integrate the normalised incoming flux and the emitted equilibrium
   flux per unit density
4. close the zero-net-mass-flux equation for the wall density
5. emit rho_wall * equilibrium shape on every direction leaving the wall
6. pass the fluid-side value through on every other direction
7. expose the result as out_going

The previous wall density carried between calls makes this a fixed-point
iteration that is self-consistent once the solver converges.

Reference: Bird (1994), "Molecular Gas Dynamics", Ch. 11 (diffuse
reflection); Mieussens (2000), "Discrete-velocity models and numerical
schemes for the Boltzmann-BGK equation", Sec. 4 (discrete wall closure).
"""

import numpy as np
from loguru import logger
from numba import njit, prange

from ..constants import DEFAULT_FLUX_FLOOR, DEFAULT_RHO_WALL
from .equilibrium import evaluate_shape
from .moments import patch_flux_moment
from .patch_field import PatchField
from .wall_density import check_wall_temperature, solve_patch_wall_density


# ==================== NUMBA-COMPILED KERNELS ====================

@njit(parallel=True)
def _normalise_incoming(interior, shape, xi_dot_n, rho_norm):
    """
    Step 2: incoming values per unit wall density.

    Emitted directions (xi . n < 0) take the equilibrium shape; all others
    take interior / rho_norm.
    """
    n_faces, n_vel, n_comp = interior.shape
    in_by_rho = np.empty_like(interior)

    for f in prange(n_faces):
        inv_rho = 1.0 / rho_norm[f]
        for i in range(n_vel):
            if xi_dot_n[f, i] < 0.0:
                for c in range(n_comp):
                    in_by_rho[f, i, c] = shape[f, i, c]
            else:
                for c in range(n_comp):
                    in_by_rho[f, i, c] = interior[f, i, c] * inv_rho

    return in_by_rho


@njit(parallel=True)
def _reconstruct_outgoing(interior, in_by_rho, xi_dot_n, rho_wall):
    """Steps 5-6: emitted equilibrium on xi . n < 0, pass-through elsewhere."""
    n_faces, n_vel, n_comp = interior.shape
    out = np.empty_like(interior)

    for f in prange(n_faces):
        for i in range(n_vel):
            if xi_dot_n[f, i] < 0.0:
                for c in range(n_comp):
                    out[f, i, c] = rho_wall[f] * in_by_rho[f, i, c]
            else:
                for c in range(n_comp):
                    out[f, i, c] = interior[f, i, c]

    return out


# ==================== PATCH FIELD ====================

class MaxwellBoundaryField(PatchField):
    """
    Fully diffuse wall with zero net mass flux on every face.

    Attributes:
        equilibrium: Injected equilibrium(xi, T) shape function
        flux_floor: DegenerateWallFlux threshold
        mass_component: Component carrying the mass for the closure
        gradient: Persisted patch parameter, round-tripped by write()
    """

    type_name = "maxwell"
    _mapped = ("_in_coming_by_rho", "_out_going", "_rho_wall", "_wall_temperature")

    def __init__(self, patch, velocity_space, T_wall, equilibrium,
                 rho_wall=DEFAULT_RHO_WALL, flux_floor=DEFAULT_FLUX_FLOOR,
                 n_components=None, mass_component=0, gradient=0.0,
                 new_face_fill="average"):
        """
        Args:
            patch: BoundaryPatch
            velocity_space: VelocitySpace
            T_wall: Wall temperature [K], scalar or per face
            equilibrium: Callable (xi, T) -> (n_vel,) or (n_vel, n_components)
            rho_wall: Initial wall density estimate, scalar or per face
            flux_floor: Smallest admissible |equilibrium emitted flux|
            n_components: Components per direction (None = scalar)
            mass_component: Component used for the mass-flux closure
            gradient: Opaque persisted parameter
            new_face_fill: "average" or "zero" for faces created by auto_map
        """
        super().__init__(patch, velocity_space, n_components, new_face_fill)

        if not 0 <= mass_component < (n_components or 1):
            raise ValueError(
                f"mass_component {mass_component} outside [0, {n_components or 1})"
            )

        self.equilibrium = equilibrium
        self.flux_floor = float(flux_floor)
        self.mass_component = mass_component
        self.gradient = gradient

        n_faces = patch.n_faces
        self._in_coming_by_rho = np.zeros(self._arena_shape(n_faces), dtype=np.float64)
        self._wall_temperature = self._per_face(T_wall, "T_wall")
        self._rho_wall = self._per_face(rho_wall, "rho_wall")

    @classmethod
    def from_config(cls, config, patch, velocity_space, equilibrium=None, n_components=None):
        """Build from a PatchConfig (see dvmwall.config)."""
        if config.T_wall is None:
            raise ValueError(f"Patch '{patch.name}': maxwell wall needs T_wall")
        if equilibrium is None:
            equilibrium = config.default_equilibrium()
        if equilibrium is None:
            raise ValueError(
                f"Patch '{patch.name}': maxwell wall needs an equilibrium function "
                f"or a gas / R entry"
            )
        return cls(
            patch, velocity_space,
            T_wall=config.T_wall,
            equilibrium=equilibrium,
            rho_wall=config.rho_wall,
            flux_floor=config.flux_floor,
            n_components=n_components,
            mass_component=config.mass_component,
            gradient=config.gradient,
            new_face_fill=config.new_face_fill,
        )

    def _per_face(self, value, name):
        value = np.asarray(value, dtype=np.float64)
        try:
            return np.broadcast_to(value, (self.n_faces,)).copy()
        except ValueError:
            raise ValueError(
                f"Patch '{self.patch.name}': {name} has shape {value.shape}, "
                f"expected scalar or ({self.n_faces},)"
            ) from None

    # ------------------------------------------------------------- accessors

    @property
    def in_coming_by_rho(self):
        """Incoming values per unit wall density (mutable view)."""
        return self._view(self._in_coming_by_rho)

    @property
    def degenerate_faces(self):
        """Faces (zero area or zero normal) that evaluate() leaves untouched."""
        return self.classification()[3]

    @property
    def equilibrium(self):
        """Injected equilibrium(xi, T) shape function."""
        return self._equilibrium

    @equilibrium.setter
    def equilibrium(self, equilibrium):
        if not callable(equilibrium):
            raise ValueError("equilibrium must be a callable (xi, T) -> shape")
        self._equilibrium = equilibrium
        self._shape_cache = None

    @property
    def wall_temperature(self):
        return self._wall_temperature

    @wall_temperature.setter
    def wall_temperature(self, T_wall):
        self._wall_temperature = self._per_face(T_wall, "T_wall")

    @property
    def rho_wall(self):
        """Wall density from the last evaluation (fixed-point state)."""
        return self._rho_wall

    @rho_wall.setter
    def rho_wall(self, rho_wall):
        self._rho_wall = self._per_face(rho_wall, "rho_wall")

    # ------------------------------------------------------------ evaluation

    def _equilibrium_shapes(self, active):
        """Unit-density shapes per face, reused while T_wall is unchanged."""
        T = self._wall_temperature
        if (self._shape_cache is not None
                and self._shape_cache[0].shape == T.shape
                and np.array_equal(self._shape_cache[0], T)
                and np.array_equal(self._shape_cache[1], active)):
            return self._shape_cache[2]

        n_comp = self.n_components or 1
        xi = self.velocity_space.xi
        shapes = np.zeros(self._arena_shape(self.n_faces), dtype=np.float64)

        temps, inverse = np.unique(T[active], return_inverse=True)
        faces = np.flatnonzero(active)
        for k, t in enumerate(temps):
            shapes[faces[inverse.ravel() == k]] = evaluate_shape(self.equilibrium, xi, t, n_comp)

        self._shape_cache = (T.copy(), active.copy(), shapes)
        return shapes

    def evaluate(self, interior):
        """
        Apply the diffuse-wall closure to every face of the patch.

        Args:
            interior: Fluid-side values next to each face, shape value_shape

        Returns:
            out_going: The evaluated boundary value (view)

        Raises:
            DegenerateWallFlux: Equilibrium flux below the floor or a
                non-positive wall temperature; nothing is committed
            ValueError: If interior has the wrong shape
        """
        f_int = self._as_arena(interior)
        xi_dot_n, incoming, outgoing, degenerate = self.classification()
        active = ~degenerate
        name = self.patch.name
        m = self.mass_component
        weights = self.velocity_space.weights

        check_wall_temperature(self._wall_temperature, active, name)
        shape = self._equilibrium_shapes(active)

        rho_norm = np.where(self._rho_wall > 0.0, self._rho_wall, 1.0)
        in_by_rho = _normalise_incoming(f_int, shape, xi_dot_n, rho_norm)

        in_flux = patch_flux_moment(
            np.ascontiguousarray(in_by_rho[:, :, m]), incoming, xi_dot_n, weights
        )
        eq_flux = patch_flux_moment(
            np.ascontiguousarray(shape[:, :, m]), outgoing, xi_dot_n, weights
        )

        ratio = solve_patch_wall_density(
            in_flux, eq_flux, self._wall_temperature, active, self.flux_floor, name,
            check_temperature=False,
        )
        rho_wall = ratio * rho_norm

        out = _reconstruct_outgoing(f_int, in_by_rho, xi_dot_n, rho_wall)

        # All faces closed: commit
        self._in_coming_by_rho[active] = in_by_rho[active]
        self._out_going[active] = out[active]
        self._rho_wall[active] = rho_wall[active]

        n_bad = int(np.sum(degenerate))
        if n_bad:
            logger.warning(
                f"Patch '{name}': {n_bad} degenerate faces kept their previous values"
            )
        if np.any(active):
            logger.debug(
                f"Patch '{name}': rho_wall in [{rho_wall[active].min():.6e}, "
                f"{rho_wall[active].max():.6e}] over {int(np.sum(active))} faces"
            )

        return self.out_going

    def _write_entries(self):
        def collapse(values):
            if len(values) and np.all(values == values[0]):
                return float(values[0])
            return values.tolist()

        return {
            "T_wall": collapse(self._wall_temperature),
            "rho_wall": collapse(self._rho_wall),
            "flux_floor": self.flux_floor,
            "gradient": self.gradient,
            "mass_component": self.mass_component,
        }
