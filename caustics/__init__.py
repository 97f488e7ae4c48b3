"""
caustics - Caustic patterns cast by a refracting lens surface

Reads a lens surface (vertices and normals) from an OBJ file, refracts a
collimated beam through it with Snell's law, and projects the exit rays
onto a movable receiver plane to show the resulting caustic.
"""

from .mesh import LensGeometry, parse_obj, load_lens
from .mesh import GeometryFileError, GeometryParseError, InvalidGeometryError

from .rays import normalize, normalize_rows, refract, refract_direction, tir_mask
from .rays import critical_angle, INCIDENT_DIRECTION, TIR_DIRECTION, LENS_ETA

from .surfaces import ReceiverPlane, project, to_display
from .surfaces import DISPLAY_DOMAIN, MISS_POINT, PARALLEL_EPSILON

__version__ = "0.1.0"

__all__ = [
    # Geometry
    "LensGeometry",
    "parse_obj",
    "load_lens",
    "GeometryFileError",
    "GeometryParseError",
    "InvalidGeometryError",
    # Refraction
    "normalize",
    "normalize_rows",
    "refract",
    "refract_direction",
    "tir_mask",
    "critical_angle",
    "INCIDENT_DIRECTION",
    "TIR_DIRECTION",
    "LENS_ETA",
    # Projection
    "ReceiverPlane",
    "project",
    "to_display",
    "DISPLAY_DOMAIN",
    "MISS_POINT",
    "PARALLEL_EPSILON",
]
