"""
surfaces.py - Receiver plane and display-domain mapping

The receiver ("wall") is a plane parallel to the x-y plane at z = depth.
Each refracted ray leaves its lens vertex V along direction D and hits
the plane at

    t = (depth - V.z) / D.z
    P = (V.x + D.x * t, V.y + D.y * t)

The world coordinates, nominally in [-1, 1], are then mapped into the
normalized display domain [0, 256) x [0, 256). Rays (nearly) parallel
to the plane never reach it and are given the sentinel MISS_POINT.

Project: Caustics Visualizer
"""

import logging

import numpy as np
from typing import List, Sequence

logger = logging.getLogger(__name__)


# Width of the normalized display domain
DISPLAY_DOMAIN = 256.0

# |D.z| below this is treated as parallel to the receiver plane
PARALLEL_EPSILON = 1e-9

# Position given to rays that never reach the receiver plane
MISS_POINT = np.array([-9999.0, -9999.0])


def _as_vectors(values: List[Sequence[float]] | np.ndarray) -> np.ndarray:
    array = np.asarray(values, dtype=np.float64)
    if array.size == 0:
        return np.zeros((0, 3), dtype=np.float64)
    return array.reshape(-1, 3)


class ReceiverPlane:
    """
    Flat receiver plane z = depth, parallel to the x-y plane.

    Attributes
    ----------
    depth : float
        z-coordinate of the plane
    epsilon : float
        Threshold on |D.z| below which a ray counts as parallel

    Examples
    --------
    >>> plane = ReceiverPlane(depth=5.0)
    >>> plane.intersect([[0, 0, 0]], [[0, 0, 1]])
    array([[0., 0.]])
    """

    def __init__(self, depth: float, epsilon: float = PARALLEL_EPSILON):
        self.depth = float(depth)
        self.epsilon = epsilon

    def moved(self, step: float) -> 'ReceiverPlane':
        """Return a new plane shifted by ``step`` along z."""
        return ReceiverPlane(self.depth + step, self.epsilon)

    def intersect(
        self,
        vertices: List[Sequence[float]] | np.ndarray,
        directions: List[Sequence[float]] | np.ndarray
    ) -> np.ndarray:
        """
        Intersect rays with the plane.

        If the two inputs differ in length only the overlapping prefix
        is used and a warning is logged.

        Parameters
        ----------
        vertices : array-like
            Ray origins of shape (N, 3)
        directions : array-like
            Ray directions of shape (M, 3), index-aligned with vertices

        Returns
        -------
        np.ndarray
            World (x, y) hit points of shape (min(N, M), 2). Rays parallel
            to the plane hold MISS_POINT.
        """
        vertices = _as_vectors(vertices)
        directions = _as_vectors(directions)

        if len(vertices) != len(directions):
            logger.warning(
                f"Mismatch in size of vertices ({len(vertices)}) "
                f"and refracted rays ({len(directions)})"
            )
        count = min(len(vertices), len(directions))
        vertices = vertices[:count]
        directions = directions[:count]

        dz = directions[:, 2]
        parallel = np.abs(dz) < self.epsilon

        t = np.zeros(count)
        np.divide(self.depth - vertices[:, 2], dz, out=t, where=~parallel)

        hits = vertices[:, :2] + directions[:, :2] * t[:, np.newaxis]
        hits[parallel] = MISS_POINT
        return hits

    def __repr__(self) -> str:
        """String representation."""
        return f"{self.__class__.__name__}(z={self.depth:.4f})"


def to_display(
    world_xy: np.ndarray,
    domain: float = DISPLAY_DOMAIN
) -> np.ndarray:
    """
    Map world (x, y) from [-1, 1] into the display domain [0, domain).

        scaled = x * (domain / 2) + domain / 2

    Values outside [-1, 1] map outside the domain and are kept as is.
    MISS_POINT rows pass through unchanged.

    Parameters
    ----------
    world_xy : np.ndarray
        Points of shape (N, 2)
    domain : float, optional
        Width of the display domain (default: 256)

    Returns
    -------
    np.ndarray
        New array of shape (N, 2)
    """
    world_xy = np.asarray(world_xy, dtype=np.float64).reshape(-1, 2)
    half = domain / 2.0
    missed = np.all(world_xy == MISS_POINT, axis=1)

    scaled = world_xy * half + half
    scaled[missed] = MISS_POINT
    return scaled


def project(
    vertices: List[Sequence[float]] | np.ndarray,
    directions: List[Sequence[float]] | np.ndarray,
    depth: float,
    domain: float = DISPLAY_DOMAIN
) -> np.ndarray:
    """
    Project refracted rays onto the receiver plane z = depth.

    Parameters
    ----------
    vertices : array-like
        Lens vertices of shape (N, 3)
    directions : array-like
        Refracted directions of shape (M, 3)
    depth : float
        z-coordinate of the receiver plane
    domain : float, optional
        Width of the display domain (default: 256)

    Returns
    -------
    np.ndarray
        Display-domain points of shape (min(N, M), 2)
    """
    return to_display(ReceiverPlane(depth).intersect(vertices, directions), domain)


# =============================================================================
# Testing
# =============================================================================

if __name__ == "__main__":
    print("=" * 60)
    print("Receiver Plane Tests")
    print("=" * 60)

    print("\n--- On-axis ray, plane at z=5 ---")
    print(project([[0, 0, 0]], [[0, 0, 1]], depth=5.0))

    print("\n--- Ray parallel to the plane ---")
    print(project([[0, 0, 0]], [[1, 0, 0]], depth=5.0))

    print("\n--- Converging fan ---")
    xs = np.linspace(-1, 1, 5)
    vertices = np.column_stack([xs, np.zeros_like(xs), np.zeros_like(xs)])
    directions = np.column_stack([-0.1 * xs, np.zeros_like(xs), np.ones_like(xs)])
    for depth in [0.0, 5.0, 10.0]:
        points = project(vertices, directions, depth)
        print(f"z={depth:4.1f}: x = {np.round(points[:, 0], 2)}")
