# texture_generator/voronoi.py

"""
================================================================================
CELLULAR (VORONOI) NOISE
================================================================================
This module provides the JIT-compiled kernel behind the Voronoi generator.
Space is divided into unit lattice cells; every cell owns one seed point,
jittered inside the cell by a hash of the cell coordinates. A sample point
belongs to the cell whose seed point is nearest.

Data Contract:
---------------
- Inputs:
    - p: The permutation table of a NoiseSource.
    - x, y, z: Flat NumPy arrays of coordinates, pre-scaled by frequency.
    - offset: Selects an independent cell layout from the same table.
    - displacement: Scale of the per-cell random value.
    - distance_applied: Whether the distance to the nearest seed point is
      added to the output.
- Outputs:
    - A NumPy array of values. The per-cell value lies in
      [-displacement, displacement]; the distance term lies roughly in
      [-1, 1].
- Side Effects: None.
================================================================================
"""
import numpy as np
from numba import njit

from .noise import lattice_hash

SQRT_3 = np.sqrt(3.0)

@njit
def _unit_hash(p, offset, xi, yi, zi):
    """A hash of a lattice cell mapped into [0, 1) with 16 bits of resolution."""
    high = lattice_hash(p, offset, xi, yi, zi)
    low = lattice_hash(p, offset + 128, xi, yi, zi)
    return (high * 256 + low) / 65536.0

@njit
def cell_value(p, offset, xi, yi, zi):
    """The per-cell random value in [-1, 1]."""
    return _unit_hash(p, offset + 3, xi, yi, zi) * 2.0 - 1.0

@njit
def voronoi_3d(p, x, y, z, offset, displacement, distance_applied):
    """
    Finds the nearest seed point among the 27 cells around each sample and
    returns the cell value, optionally combined with the distance to it.
    """
    n = x.shape[0]
    out = np.empty(n)
    for k in range(n):
        xi = int(np.floor(x[k]))
        yi = int(np.floor(y[k]))
        zi = int(np.floor(z[k]))

        min_dist = 1.0e30
        cand_x = xi
        cand_y = yi
        cand_z = zi
        for dz in range(-1, 2):
            for dy in range(-1, 2):
                for dx in range(-1, 2):
                    cx = xi + dx
                    cy = yi + dy
                    cz = zi + dz
                    px = cx + _unit_hash(p, offset, cx, cy, cz)
                    py = cy + _unit_hash(p, offset + 1, cx, cy, cz)
                    pz = cz + _unit_hash(p, offset + 2, cx, cy, cz)
                    ddx = px - x[k]
                    ddy = py - y[k]
                    ddz = pz - z[k]
                    dist = ddx * ddx + ddy * ddy + ddz * ddz
                    if dist < min_dist:
                        min_dist = dist
                        cand_x = cx
                        cand_y = cy
                        cand_z = cz

        value = 0.0
        if distance_applied:
            value = np.sqrt(min_dist) * SQRT_3 - 1.0
        out[k] = value + displacement * cell_value(p, offset, cand_x, cand_y, cand_z)
    return out
