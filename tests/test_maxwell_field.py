"""
Unit tests for the diffuse (Maxwell) wall

Tests cover:
- The single-face 1-D reference case
- Zero net mass flux on arbitrary faces and temperatures
- Fixed-point properties (idempotence, independence from the initial guess)
- Degenerate faces and atomic failure
- Multi-component fields
"""

import pytest
import numpy as np
from loguru import logger

from dvmwall.velocity import VelocitySpace, gauss_hermite
from dvmwall.mesh import BoundaryPatch
from dvmwall.boundary.maxwell import MaxwellBoundaryField
from dvmwall.boundary.equilibrium import make_maxwellian
from dvmwall.errors import DegenerateWallFlux


def step_shape(xi, T):
    """Test equilibrium: 3 for |xi| = 2, 2 for |xi| = 1."""
    return np.where(np.abs(xi[:, 0]) > 1.5, 3.0, 2.0)


@pytest.fixture
def scenario_space():
    return VelocitySpace([-2.0, -1.0, 1.0, 2.0], [0.25] * 4)


@pytest.fixture
def single_face():
    return BoundaryPatch("wall", [[1.0, 0.0, 0.0]], [1.0])


def random_patch(rng, n_faces, name="wall"):
    """Patch with random (non axis-aligned) unit normals."""
    normals = rng.normal(size=(n_faces, 3))
    normals /= np.linalg.norm(normals, axis=1)[:, np.newaxis]
    areas = rng.uniform(0.5, 2.0, n_faces)
    return BoundaryPatch(name, normals, areas)


def normal_flux(field, values):
    """Sum over all directions of w (xi . n) values, per face."""
    xi_dot_n = field.patch.normals @ field.velocity_space.xi.T
    w = field.velocity_space.weights
    return np.sum(w * xi_dot_n * values, axis=1), np.sum(np.abs(w * xi_dot_n * values), axis=1)


class TestScenario:
    """Test the hand-computed 1-D case."""

    def test_outgoing_values(self, scenario_space, single_face):
        """E = -2.0, F_in = 3.25, rho_wall = 1.625."""
        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                    equilibrium=step_shape)
        interior = np.array([[0.0, 0.0, 3.0, 5.0]])

        out = wall.evaluate(interior)

        np.testing.assert_allclose(out, [[4.875, 3.25, 3.0, 5.0]], rtol=1e-14)
        np.testing.assert_allclose(wall.rho_wall, [1.625], rtol=1e-14)

    def test_in_coming_by_rho(self, scenario_space, single_face):
        """Emitted directions hold the shape, the rest interior / rho_prev."""
        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                    equilibrium=step_shape)

        wall.evaluate(np.array([[0.0, 0.0, 3.0, 5.0]]))

        np.testing.assert_allclose(wall.in_coming_by_rho, [[3.0, 2.0, 3.0, 5.0]])

    def test_value_is_out_going(self, scenario_space, single_face):
        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                    equilibrium=step_shape)

        wall.evaluate(np.array([[0.0, 0.0, 3.0, 5.0]]))

        np.testing.assert_array_equal(wall.value, wall.out_going)

    def test_interior_on_emitted_directions_ignored(self, scenario_space, single_face):
        """Fluid-side values of emitted directions do not enter the closure."""
        a = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                 equilibrium=step_shape)
        b = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                 equilibrium=step_shape)

        out_a = a.evaluate(np.array([[0.0, 0.0, 3.0, 5.0]])).copy()
        out_b = b.evaluate(np.array([[11.0, -4.0, 3.0, 5.0]])).copy()

        np.testing.assert_array_equal(out_a, out_b)


class TestZeroNetFlux:
    """Test mass conservation at the wall."""

    def test_random_faces_and_temperatures(self):
        """Net normal mass flux vanishes on every face."""
        rng = np.random.default_rng(42)
        vs = gauss_hermite(n_points=6, dim=3)
        patch = random_patch(rng, 25)
        T_wall = rng.uniform(0.6, 1.5, patch.n_faces)
        wall = MaxwellBoundaryField(patch, vs, T_wall=T_wall,
                                    equilibrium=make_maxwellian(1.0, dim=3))
        interior = rng.uniform(0.0, 1.0, (patch.n_faces, vs.size()))

        out = wall.evaluate(interior)

        net, scale = normal_flux(wall, out)
        assert np.all(np.abs(net) <= 1e-12 * scale)

    def test_equilibrium_interior_recovers_density(self):
        """A fluid already at wall equilibrium with density rho gives rho_wall = rho."""
        rng = np.random.default_rng(0)
        vs = gauss_hermite(n_points=8, dim=2)
        patch = random_patch(rng, 10)
        T_wall = 1.2
        feq = make_maxwellian(1.0, dim=2)
        wall = MaxwellBoundaryField(patch, vs, T_wall=T_wall, equilibrium=feq)
        rho = 0.37
        interior = np.tile(rho * feq(vs.xi, T_wall), (patch.n_faces, 1))

        wall.evaluate(interior)

        np.testing.assert_allclose(wall.rho_wall, rho, rtol=1e-10)

    def test_no_incoming_mass(self, scenario_space, single_face):
        """Empty incoming populations give a zero wall density."""
        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                    equilibrium=step_shape)

        out = wall.evaluate(np.array([[1.0, 1.0, 0.0, 0.0]]))

        np.testing.assert_array_equal(out, [[0.0, 0.0, 0.0, 0.0]])
        assert wall.rho_wall[0] == 0.0


class TestFixedPoint:
    """Test repeated evaluation."""

    def test_idempotent(self):
        rng = np.random.default_rng(1)
        vs = gauss_hermite(n_points=6, dim=3)
        patch = random_patch(rng, 8)
        wall = MaxwellBoundaryField(patch, vs, T_wall=1.0,
                                    equilibrium=make_maxwellian(1.0, dim=3))
        interior = rng.uniform(0.1, 1.0, (patch.n_faces, vs.size()))

        first = wall.evaluate(interior).copy()
        rho_first = wall.rho_wall.copy()
        second = wall.evaluate(interior).copy()

        np.testing.assert_allclose(second, first, rtol=1e-12)
        np.testing.assert_allclose(wall.rho_wall, rho_first, rtol=1e-12)

    @pytest.mark.parametrize("rho_initial", [1e-6, 0.5, 1.0, 250.0, 0.0, -3.0])
    def test_independent_of_initial_density(self, scenario_space, single_face, rho_initial):
        """Normalisation by the previous density cancels in the closure."""
        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                    equilibrium=step_shape, rho_wall=rho_initial)

        out = wall.evaluate(np.array([[0.0, 0.0, 3.0, 5.0]]))

        np.testing.assert_allclose(out, [[4.875, 3.25, 3.0, 5.0]], rtol=1e-12)
        np.testing.assert_allclose(wall.rho_wall, [1.625], rtol=1e-12)

    def test_deterministic(self):
        """Identical inputs give bit-identical outputs."""
        rng = np.random.default_rng(5)
        vs = gauss_hermite(n_points=5, dim=3)
        patch = random_patch(rng, 40)
        T_wall = rng.uniform(0.8, 1.2, patch.n_faces)
        interior = rng.uniform(0.0, 1.0, (patch.n_faces, vs.size()))

        results = []
        for _ in range(2):
            wall = MaxwellBoundaryField(patch, vs, T_wall=T_wall,
                                        equilibrium=make_maxwellian(1.0, dim=3))
            results.append((wall.evaluate(interior).copy(), wall.rho_wall.copy()))

        np.testing.assert_array_equal(results[0][0], results[1][0])
        np.testing.assert_array_equal(results[0][1], results[1][1])

    def test_temperature_change_updates_shape(self, scenario_space, single_face):
        feq = make_maxwellian(1.0, dim=1)
        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=1.0, equilibrium=feq)
        interior = np.array([[0.0, 0.0, 3.0, 5.0]])

        cold = wall.evaluate(interior).copy()
        wall.wall_temperature = 4.0
        hot = wall.evaluate(interior).copy()

        assert not np.allclose(cold[0, :2], hot[0, :2])
        np.testing.assert_array_equal(cold[0, 2:], hot[0, 2:])

    def test_equilibrium_change_updates_shape(self, scenario_space, single_face):
        """Replacing the equilibrium function drops the cached shapes."""
        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                    equilibrium=lambda xi, T: np.full(len(xi), 2.0))
        interior = np.array([[0.0, 0.0, 3.0, 5.0]])
        wall.evaluate(interior)

        wall.equilibrium = step_shape
        out = wall.evaluate(interior)

        np.testing.assert_allclose(out, [[4.875, 3.25, 3.0, 5.0]], rtol=1e-14)

    def test_equilibrium_setter_rejects_non_callable(self, scenario_space, single_face):
        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                    equilibrium=step_shape)

        with pytest.raises(ValueError, match="callable"):
            wall.equilibrium = 2.0


class TestTangentialDirections:
    """Test directions parallel to the face."""

    def test_pass_through(self):
        """xi . n == 0 carries no flux and keeps the fluid-side value."""
        vs = VelocitySpace([[-1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 0.0, 0.0]], [1.0] * 3)
        patch = BoundaryPatch("wall", [[1.0, 0.0, 0.0]], [1.0])
        wall = MaxwellBoundaryField(patch, vs, T_wall=1.0,
                                    equilibrium=lambda xi, T: np.ones(len(xi)))

        out = wall.evaluate(np.array([[5.0, 9.0, 2.0]]))

        np.testing.assert_allclose(out, [[2.0, 9.0, 2.0]])
        np.testing.assert_allclose(wall.rho_wall, [2.0])
        np.testing.assert_allclose(wall.in_coming_by_rho, [[1.0, 9.0, 2.0]])


class TestDegenerateFaces:
    """Test zero-area and zero-normal faces."""

    def test_keep_previous_values(self, scenario_space):
        patch = BoundaryPatch(
            "wall",
            [[1.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 0.0]],
            [1.0, 0.0, 1.0],
        )
        wall = MaxwellBoundaryField(patch, scenario_space, T_wall=300.0,
                                    equilibrium=step_shape, rho_wall=[1.0, 2.0, 3.0])
        wall.out_going[1:] = 7.0

        out = wall.evaluate(np.tile([0.0, 0.0, 3.0, 5.0], (3, 1)))

        np.testing.assert_allclose(out[0], [4.875, 3.25, 3.0, 5.0])
        np.testing.assert_array_equal(out[1:], 7.0)
        np.testing.assert_array_equal(wall.rho_wall[1:], [2.0, 3.0])
        np.testing.assert_array_equal(wall.degenerate_faces, [False, True, True])

    def test_warning_logged(self, scenario_space):
        patch = BoundaryPatch("sliver", [[1.0, 0.0, 0.0], [1.0, 0.0, 0.0]], [1.0, 0.0])
        wall = MaxwellBoundaryField(patch, scenario_space, T_wall=300.0,
                                    equilibrium=step_shape)
        messages = []
        handler_id = logger.add(messages.append, level="WARNING")
        try:
            wall.evaluate(np.ones((2, 4)))
        finally:
            logger.remove(handler_id)

        assert any("sliver" in str(m) and "degenerate" in str(m) for m in messages)

    def test_non_positive_temperature_on_degenerate_face_ignored(self, scenario_space):
        patch = BoundaryPatch("wall", [[1.0, 0.0, 0.0], [0.0, 0.0, 0.0]], [1.0, 1.0])
        wall = MaxwellBoundaryField(patch, scenario_space, T_wall=[300.0, 0.0],
                                    equilibrium=step_shape)

        wall.evaluate(np.ones((2, 4)))

        assert wall.rho_wall[0] > 0.0


class TestAtomicFailure:
    """Test that a failing face leaves the whole patch untouched."""

    def make_wall(self, scenario_space, **kwargs):
        patch = BoundaryPatch("hotWall", [[1.0, 0.0, 0.0]] * 3, [1.0] * 3)
        wall = MaxwellBoundaryField(patch, scenario_space, equilibrium=step_shape,
                                    rho_wall=[0.5, 0.6, 0.7], **kwargs)
        wall.out_going[...] = -1.0
        wall.in_coming_by_rho[...] = -2.0
        return wall

    def assert_untouched(self, wall):
        np.testing.assert_array_equal(wall.out_going, -1.0)
        np.testing.assert_array_equal(wall.in_coming_by_rho, -2.0)
        np.testing.assert_array_equal(wall.rho_wall, [0.5, 0.6, 0.7])

    def test_zero_temperature(self, scenario_space):
        wall = self.make_wall(scenario_space, T_wall=[300.0, 0.0, 300.0])

        with pytest.raises(DegenerateWallFlux) as excinfo:
            wall.evaluate(np.ones((3, 4)))

        assert excinfo.value.step == "equilibrium shape"
        assert excinfo.value.patch == "hotWall"
        assert excinfo.value.faces == (1,)
        self.assert_untouched(wall)

    def test_flux_below_floor(self, scenario_space):
        wall = self.make_wall(scenario_space, T_wall=300.0, flux_floor=1e10)

        with pytest.raises(DegenerateWallFlux) as excinfo:
            wall.evaluate(np.ones((3, 4)))

        assert excinfo.value.step == "wall density closure"
        assert excinfo.value.faces == (0, 1, 2)
        self.assert_untouched(wall)

    def test_vanishing_equilibrium(self, scenario_space, single_face):
        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                    equilibrium=lambda xi, T: np.zeros(len(xi)))

        with pytest.raises(DegenerateWallFlux):
            wall.evaluate(np.ones((1, 4)))

    def test_no_emitted_direction(self, single_face):
        """A catalog with nothing leaving the wall cannot close the balance."""
        vs = VelocitySpace([1.0, 2.0], [0.5, 0.5])
        wall = MaxwellBoundaryField(single_face, vs, T_wall=300.0,
                                    equilibrium=lambda xi, T: np.ones(len(xi)))

        with pytest.raises(DegenerateWallFlux):
            wall.evaluate(np.ones((1, 2)))


class TestComponents:
    """Test multi-component (e.g. mass + energy) populations."""

    def test_emitted_components_share_wall_density(self, scenario_space, single_face):
        def two_populations(xi, T):
            g = step_shape(xi, T)
            return np.stack([g, 10.0 * g], axis=1)

        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                    equilibrium=two_populations, n_components=2)
        interior = np.zeros((1, 4, 2))
        interior[0, 2:, 0] = [3.0, 5.0]
        interior[0, 2:, 1] = [30.0, 70.0]

        out = wall.evaluate(interior)

        assert out.shape == (1, 4, 2)
        np.testing.assert_allclose(wall.rho_wall, [1.625])
        np.testing.assert_allclose(out[0, :2, 0], [4.875, 3.25])
        np.testing.assert_allclose(out[0, :2, 1], [48.75, 32.5])
        np.testing.assert_array_equal(out[0, 2:, 1], [30.0, 70.0])

    def test_mass_component_selects_closure(self, scenario_space, single_face):
        def two_populations(xi, T):
            g = step_shape(xi, T)
            return np.stack([g, g], axis=1)

        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                    equilibrium=two_populations, n_components=2,
                                    mass_component=1)
        interior = np.zeros((1, 4, 2))
        interior[0, 2:, 1] = [3.0, 5.0]

        wall.evaluate(interior)

        np.testing.assert_allclose(wall.rho_wall, [1.625])

    def test_equilibrium_shape_mismatch(self, scenario_space, single_face):
        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                    equilibrium=step_shape, n_components=2)

        with pytest.raises(ValueError, match="Equilibrium function returned shape"):
            wall.evaluate(np.ones((1, 4, 2)))


class TestConstruction:
    """Test argument validation and persistence."""

    def test_wrong_interior_shape(self, scenario_space, single_face):
        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                    equilibrium=step_shape)

        with pytest.raises(ValueError, match="interior field has shape"):
            wall.evaluate(np.ones((2, 4)))

    def test_per_face_temperature_shape(self, scenario_space, single_face):
        with pytest.raises(ValueError, match="T_wall"):
            MaxwellBoundaryField(single_face, scenario_space, T_wall=[300.0, 310.0],
                                 equilibrium=step_shape)

    def test_mass_component_range(self, scenario_space, single_face):
        with pytest.raises(ValueError, match="mass_component"):
            MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                 equilibrium=step_shape, mass_component=1)

    def test_equilibrium_must_be_callable(self, scenario_space, single_face):
        with pytest.raises(ValueError, match="callable"):
            MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                 equilibrium=None)

    def test_write(self, scenario_space, single_face):
        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                    equilibrium=step_shape, gradient=0.5)
        wall.evaluate(np.array([[0.0, 0.0, 3.0, 5.0]]))

        entries = wall.write()

        assert entries["type"] == "maxwell"
        assert entries["T_wall"] == 300.0
        assert entries["rho_wall"] == pytest.approx(1.625)
        assert entries["gradient"] == 0.5
        assert "new_face_fill" not in entries

    def test_write_per_face_temperature(self, scenario_space):
        patch = BoundaryPatch("wall", [[1.0, 0.0, 0.0]] * 2, [1.0, 1.0])
        wall = MaxwellBoundaryField(patch, scenario_space, T_wall=[300.0, 350.0],
                                    equilibrium=step_shape, new_face_fill="zero")

        entries = wall.write()

        assert entries["T_wall"] == [300.0, 350.0]
        assert entries["new_face_fill"] == "zero"

    def test_clone_is_independent(self, scenario_space, single_face):
        wall = MaxwellBoundaryField(single_face, scenario_space, T_wall=300.0,
                                    equilibrium=step_shape)
        wall.evaluate(np.array([[0.0, 0.0, 3.0, 5.0]]))

        copy = wall.clone()
        copy.evaluate(np.array([[0.0, 0.0, 6.0, 10.0]]))

        np.testing.assert_allclose(wall.rho_wall, [1.625])
        np.testing.assert_allclose(copy.rho_wall, [3.25])
        assert copy.patch is wall.patch

    def test_geometry_update_reclassifies(self, scenario_space):
        patch = BoundaryPatch("wall", [[1.0, 0.0, 0.0]], [1.0])
        wall = MaxwellBoundaryField(patch, scenario_space, T_wall=300.0,
                                    equilibrium=step_shape)
        interior = np.array([[5.0, 3.0, 0.0, 0.0]])

        patch.update_geometry([[-1.0, 0.0, 0.0]], [1.0])
        out = wall.evaluate(interior)

        np.testing.assert_allclose(out, [[5.0, 3.0, 3.25, 4.875]])

    def test_geometry_is_read_only(self, scenario_space):
        """In-place edits cannot bypass the revision counter."""
        patch = BoundaryPatch("wall", [[1.0, 0.0, 0.0]], [1.0])
        wall = MaxwellBoundaryField(patch, scenario_space, T_wall=300.0,
                                    equilibrium=step_shape)
        wall.evaluate(np.array([[0.0, 0.0, 3.0, 5.0]]))

        with pytest.raises(ValueError):
            patch.normals[0] = [-1.0, 0.0, 0.0]
        with pytest.raises(ValueError):
            patch.areas[0] = 0.0
        with pytest.raises(ValueError):
            patch.delta_coeffs[0] = 2.0

        patch.update_geometry([[-1.0, 0.0, 0.0]], [1.0])
        out = wall.evaluate(np.array([[5.0, 3.0, 0.0, 0.0]]))

        np.testing.assert_allclose(out, [[5.0, 3.0, 3.25, 4.875]])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
