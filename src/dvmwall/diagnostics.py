"""
Diagnostic utilities for wall boundary conditions.

- Per-face and patch-total mass flux of the evaluated boundary value
  (zero for a converged diffuse wall)
- Fixed-point convergence tracking of the wall density
- Data export (CSV) and visualization
"""

import csv
from typing import Optional

import numpy as np

from .boundary.moments import patch_flux_moment


def face_mass_flux(field, mass_component=None):
    """
    Net normal mass flux of the evaluated boundary value, per face.

    Args:
        field: Evaluated patch field
        mass_component: Component carrying the mass (default: the
            field's mass_component, or 0)

    Returns:
        flux: shape (n_faces,); zero for degenerate faces
    """
    if mass_component is None:
        mass_component = getattr(field, "mass_component", 0)

    xi_dot_n, _, _, degenerate = field.classification()
    values = field._out_going[:, :, mass_component]
    everything = np.ones(xi_dot_n.shape, dtype=np.bool_)

    flux = patch_flux_moment(
        np.ascontiguousarray(values), everything, xi_dot_n, field.velocity_space.weights
    )
    flux[degenerate] = 0.0
    return flux


def net_mass_flux(field, mass_component=None):
    """Area-weighted total mass flux through the patch [per unit time]."""
    return float(np.sum(field.patch.areas * face_mass_flux(field, mass_component)))


class WallDiagnostics:
    """
    Tracks wall boundary diagnostics over solver iterations.

    Usage:
        tracker = WallDiagnostics(n_iterations=1000, output_interval=10)
        for it in range(n_iterations):
            rho_old = wall.rho_wall.copy()
            wall.evaluate(interior)
            if it % output_interval == 0:
                tracker.record(it, wall, rho_old)
        tracker.save_csv('wall.csv')
        tracker.plot()
    """

    def __init__(self, n_iterations: int, output_interval: int = 1):
        """
        Args:
            n_iterations: Total number of solver iterations
            output_interval: Record diagnostics every N iterations
        """
        self.n_outputs = n_iterations // output_interval + 1
        self.output_idx = 0

        self.iteration = np.zeros(self.n_outputs, dtype=np.int64)
        self.net_flux = np.zeros(self.n_outputs)
        self.mean_rho_wall = np.zeros(self.n_outputs)
        self.residual = np.zeros(self.n_outputs)
        self.n_degenerate = np.zeros(self.n_outputs, dtype=np.int64)

    def record(self, iteration: int, field, rho_old: Optional[np.ndarray] = None):
        """
        Record diagnostics after an evaluation.

        Args:
            iteration: Solver iteration
            field: MaxwellBoundaryField after evaluate()
            rho_old: Wall density before evaluate(), for the residual
        """
        if self.output_idx >= self.n_outputs:
            return

        idx = self.output_idx
        active = ~field.degenerate_faces
        rho = field.rho_wall

        self.iteration[idx] = iteration
        self.net_flux[idx] = net_mass_flux(field)
        self.n_degenerate[idx] = int(np.sum(~active))

        if np.any(active):
            self.mean_rho_wall[idx] = np.mean(rho[active])

            if rho_old is not None:
                ref = np.where(np.abs(rho_old[active]) > 0.0, np.abs(rho_old[active]), 1.0)
                self.residual[idx] = np.max(np.abs(rho[active] - rho_old[active]) / ref)

        self.output_idx += 1

    def save_csv(self, filename: str):
        """
        Save diagnostic data to CSV file.

        Args:
            filename: Output CSV filename
        """
        with open(filename, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow([
                'iteration', 'net_mass_flux', 'mean_rho_wall', 'residual', 'n_degenerate'
            ])
            for i in range(self.output_idx):
                writer.writerow([
                    self.iteration[i],
                    self.net_flux[i],
                    self.mean_rho_wall[i],
                    self.residual[i],
                    self.n_degenerate[i],
                ])

        print(f"Diagnostics saved to {filename}")

    def plot(self, show=True, save_filename=None):
        """
        Create diagnostic plots.

        Args:
            show: Display plots interactively
            save_filename: Save figure to file (optional)

        Returns:
            fig: matplotlib Figure
        """
        import matplotlib.pyplot as plt

        n = self.output_idx
        it = self.iteration[:n]

        fig, axes = plt.subplots(1, 3, figsize=(16, 5))

        ax = axes[0]
        ax.plot(it, self.mean_rho_wall[:n], 'b-', linewidth=2)
        ax.set_xlabel('Iteration', fontsize=12)
        ax.set_ylabel('Mean wall density', fontsize=12)
        ax.set_title('Wall Density', fontsize=14, fontweight='bold')
        ax.grid(True, alpha=0.3)

        ax = axes[1]
        if np.any(self.residual[:n] > 0):
            ax.semilogy(it, np.maximum(self.residual[:n], 1e-300), 'r-', linewidth=2)
        ax.set_xlabel('Iteration', fontsize=12)
        ax.set_ylabel('max |Δρ| / ρ', fontsize=12)
        ax.set_title('Fixed-Point Residual', fontsize=14, fontweight='bold')
        ax.grid(True, alpha=0.3, which='both')

        ax = axes[2]
        ax.plot(it, self.net_flux[:n], 'g-', linewidth=2)
        ax.axhline(y=0.0, color='k', linestyle='--', linewidth=1)
        ax.set_xlabel('Iteration', fontsize=12)
        ax.set_ylabel('Net mass flux', fontsize=12)
        ax.set_title('Wall Mass Balance', fontsize=14, fontweight='bold')
        ax.grid(True, alpha=0.3)

        plt.tight_layout()

        if save_filename:
            plt.savefig(save_filename, dpi=300, bbox_inches='tight')
            print(f"Plot saved to {save_filename}")

        if show:
            plt.show()

        return fig

    def summary(self):
        """
        Print summary statistics.
        """
        print("\n" + "="*70)
        print("WALL DIAGNOSTIC SUMMARY")
        print("="*70)

        idx = self.output_idx - 1 if self.output_idx > 0 else 0

        print(f"\nFinal State (iteration {self.iteration[idx]}):")
        print(f"  Mean wall density:  {self.mean_rho_wall[idx]:.6e}")
        print(f"  Fixed-point residual: {self.residual[idx]:.3e}")
        print(f"  Net mass flux:      {self.net_flux[idx]:.3e}")
        print(f"  Degenerate faces:   {self.n_degenerate[idx]}")
        print(f"\n  Max |net flux| over run: {np.max(np.abs(self.net_flux[:idx + 1])):.3e}")

        print("="*70 + "\n")
