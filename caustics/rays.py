"""
rays.py - Refraction of a collimated beam through a lens surface

A collimated beam travels along the incident direction I (the +z axis
by default) through the lens material and exits into air. At every
sampled point of the lens surface the exit direction is given by the
vector form of Snell's law:

    cos(θi) = I · N
    sin²(θt) = η² (1 - cos²(θi))
    T = η I - (η cos(θi) - sqrt(1 - sin²(θt))) N

where η is the refractive-index ratio (leaving / entering medium).

When sin²(θt) > 1 the ray is totally internally reflected. Instead of
computing the reflected ray, a fixed near-horizontal sentinel direction
is substituted so that the ray lands far outside the display domain.

Project: Caustics Visualizer
"""

import logging

import numpy as np
from typing import List, Sequence

logger = logging.getLogger(__name__)


# Refractive index of the material the lens geometry was generated for
LENS_ETA = 1.457

# Collimated beam travelling toward +z through the lens
INCIDENT_DIRECTION = np.array([0.0, 0.0, 1.0])

# Off-axis direction substituted for totally internally reflected rays.
# Its small z-component sends the ray far outside the 256 x 256 domain.
TIR_DIRECTION = np.array([0.9999, 0.0, 0.0141418])


def normalize(vector: np.ndarray) -> np.ndarray:
    """
    Normalize a vector to unit length.

    Parameters
    ----------
    vector : np.ndarray
        Input vector of any dimension

    Returns
    -------
    np.ndarray
        Unit vector in same direction

    Raises
    ------
    ValueError
        If vector has zero magnitude
    """
    magnitude = np.linalg.norm(vector)
    if magnitude < 1e-15:
        raise ValueError("Cannot normalize zero vector")
    return vector / magnitude


def normalize_rows(vectors: np.ndarray) -> np.ndarray:
    """
    Normalize every row of an (N, 3) array to unit length.

    Rows with zero magnitude are returned unchanged rather than
    raising, so a single degenerate normal does not spoil a mesh.

    Parameters
    ----------
    vectors : np.ndarray
        Array of shape (N, 3)

    Returns
    -------
    np.ndarray
        New array of shape (N, 3)
    """
    vectors = np.asarray(vectors, dtype=np.float64)
    magnitudes = np.linalg.norm(vectors, axis=1, keepdims=True)
    safe = np.where(magnitudes < 1e-15, 1.0, magnitudes)
    return vectors / safe


def _as_normals(normals: List[Sequence[float]] | np.ndarray) -> np.ndarray:
    array = np.asarray(normals, dtype=np.float64)
    if array.size == 0:
        return np.zeros((0, 3), dtype=np.float64)
    if array.ndim != 2 or array.shape[1] != 3:
        raise ValueError(f"Normals must have shape (N, 3), got {array.shape}")
    return array


def _sin2_transmitted(
    normals: np.ndarray,
    eta: float,
    incident: np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    """Return (cos θi, sin² θt) per normal."""
    cos_incidence = normals @ incident
    sin2_refracted = eta * eta * (1.0 - cos_incidence * cos_incidence)
    return cos_incidence, sin2_refracted


def refract_direction(
    normal: List[float] | np.ndarray,
    eta: float,
    incident: List[float] | np.ndarray = INCIDENT_DIRECTION
) -> np.ndarray:
    """
    Refract the incident beam at a single surface normal.

    Parameters
    ----------
    normal : array-like
        Surface normal [nx, ny, nz], assumed to be unit length
    eta : float
        Refractive-index ratio (leaving / entering medium)
    incident : array-like, optional
        Direction of the incident beam (default: +z)

    Returns
    -------
    np.ndarray
        Refracted direction [dx, dy, dz] (not renormalized), or
        TIR_DIRECTION on total internal reflection
    """
    return refract([normal], eta, incident)[0]


def refract(
    normals: List[Sequence[float]] | np.ndarray,
    eta: float,
    incident: List[float] | np.ndarray = INCIDENT_DIRECTION,
    renormalize: bool = False
) -> np.ndarray:
    """
    Compute the refracted direction for every surface normal.

    The refracted vectors are not renormalized: for unit normals and a
    unit incident vector their magnitude is η-dependent, and downstream
    plane intersection does not rely on unit length.

    Parameters
    ----------
    normals : array-like
        Surface normals of shape (N, 3), one per lens vertex
    eta : float
        Refractive-index ratio (leaving / entering medium)
    incident : array-like, optional
        Direction of the incident beam (default: +z). Normalized before use.
    renormalize : bool, optional
        If True, normalize the normals before refracting (default: False,
        the normals are trusted as read from the mesh)

    Returns
    -------
    np.ndarray
        New array of shape (N, 3); rows that undergo total internal
        reflection hold TIR_DIRECTION

    Raises
    ------
    ValueError
        If the incident direction has zero magnitude or normals are not (N, 3)
    """
    incident = normalize(np.asarray(incident, dtype=np.float64))
    normals = _as_normals(normals)
    if renormalize:
        normals = normalize_rows(normals)

    cos_i, sin2_t = _sin2_transmitted(normals, eta, incident)
    transmitted = sin2_t <= 1.0

    refracted = np.empty_like(normals)
    refracted[~transmitted] = TIR_DIRECTION

    # T = η I - (η cos θi - sqrt(1 - sin² θt)) N
    sqrt_term = np.sqrt(1.0 - sin2_t[transmitted])
    coefficient = eta * cos_i[transmitted] - sqrt_term
    refracted[transmitted] = (
        eta * incident - coefficient[:, np.newaxis] * normals[transmitted]
    )

    return refracted


def tir_mask(
    normals: List[Sequence[float]] | np.ndarray,
    eta: float,
    incident: List[float] | np.ndarray = INCIDENT_DIRECTION
) -> np.ndarray:
    """
    Flag the normals at which the beam is totally internally reflected.

    Returns
    -------
    np.ndarray
        Boolean array of shape (N,)
    """
    incident = normalize(np.asarray(incident, dtype=np.float64))
    _, sin2_t = _sin2_transmitted(_as_normals(normals), eta, incident)
    return sin2_t > 1.0


def critical_angle(eta: float) -> float:
    """
    Angle of incidence (radians) beyond which total internal reflection occurs.

    Returns pi/2 when η <= 1, since TIR is then impossible.
    """
    if eta <= 1.0:
        return np.pi / 2
    return float(np.arcsin(1.0 / eta))


# =============================================================================
# Testing
# =============================================================================

if __name__ == "__main__":
    print("=" * 60)
    print("Refraction Tests")
    print("=" * 60)

    print("\n--- Normal incidence, matched indices ---")
    print(refract_direction([0, 0, 1], eta=1.0))

    print(f"\n--- Tilted normals, η = {LENS_ETA} ---")
    print(f"Critical angle: {np.degrees(critical_angle(LENS_ETA)):.2f}°")
    for degrees in [0, 10, 20, 30, 40, 50]:
        theta = np.radians(degrees)
        n = [np.sin(theta), 0.0, np.cos(theta)]
        d = refract_direction(n, LENS_ETA)
        print(f"tilt={degrees:2d}°: T = [{d[0]:+.4f}, {d[1]:+.4f}, {d[2]:+.4f}]")
