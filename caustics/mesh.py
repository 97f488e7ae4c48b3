"""
mesh.py - Lens geometry from Wavefront OBJ files

Only the records needed to refract light through a lens surface are read:

    v  x y z        vertex position
    vn nx ny nz     vertex normal (paired with vertices by index)
    vt u v          texture coordinate (ignored)

Every other record (faces, groups, materials, comments) is ignored.

Project: Caustics Visualizer
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Tuple

import numpy as np

logger = logging.getLogger(__name__)


VERTEX_TAG = "v"
NORMAL_TAG = "vn"
TEXTURE_TAG = "vt"


class GeometryFileError(OSError):
    """The OBJ file does not exist or cannot be read."""


class GeometryParseError(ValueError):
    """A vertex or normal record holds a value that is not a number."""


class InvalidGeometryError(ValueError):
    """The file was read but holds no usable lens geometry."""


def _frozen(rows: List[Tuple[float, float, float]]) -> np.ndarray:
    array = np.array(rows, dtype=np.float64).reshape(-1, 3)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class LensGeometry:
    """
    Vertex positions and normals of a lens surface.

    Both arrays have shape (N, 3), are index-aligned and read-only.
    """
    vertices: np.ndarray
    normals: np.ndarray
    source: Path | None = None

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    @property
    def num_normals(self) -> int:
        return len(self.normals)

    @property
    def is_valid(self) -> bool:
        """True if there is at least one vertex and one normal per vertex."""
        return self.num_vertices > 0 and self.num_vertices == self.num_normals

    def validate(self) -> 'LensGeometry':
        """
        Check that the geometry can be refracted.

        Returns
        -------
        LensGeometry
            self, for chaining

        Raises
        ------
        InvalidGeometryError
            If there are no vertices or normals, or their counts differ
        """
        name = self.source if self.source is not None else "<geometry>"
        if self.num_vertices == 0 or self.num_normals == 0:
            raise InvalidGeometryError(f"No geometry or normals found in {name}")
        if self.num_vertices != self.num_normals:
            raise InvalidGeometryError(
                f"{name} has {self.num_vertices} vertices but "
                f"{self.num_normals} normals"
            )
        return self

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"vertices={self.num_vertices}, "
            f"normals={self.num_normals}, "
            f"source={self.source})"
        )


def _stream_records(file_path: Path) -> Iterator[Tuple[int, str, List[str]]]:
    """
    Yield (line_number, tag, fields) for every vertex and normal record.

    Raises
    ------
    GeometryFileError
        If the file cannot be opened or read
    """
    try:
        with open(file_path, "r", encoding="utf-8", errors="replace") as f:
            for line_number, line in enumerate(f, start=1):
                values = line.split()
                if not values or values[0] not in (VERTEX_TAG, NORMAL_TAG):
                    continue
                yield line_number, values[0], values[1:]
    except OSError as exc:
        raise GeometryFileError(f"Could not open OBJ file: {file_path}") from exc


def parse_obj(file_path: Path | str, strict: bool = False) -> LensGeometry:
    """
    Read vertex positions and normals from an OBJ file.

    Records with fewer than three coordinates are skipped. Records whose
    coordinates are not numbers are skipped with a warning, or raise if
    ``strict`` is set. Empty or mismatched results are returned as is;
    call ``LensGeometry.validate`` (or use ``load_lens``) to reject them.

    Parameters
    ----------
    file_path : Path or str
        Path to the OBJ file
    strict : bool, optional
        Raise on non-numeric coordinates instead of skipping (default: False)

    Returns
    -------
    LensGeometry
        Vertices and normals in file order

    Raises
    ------
    GeometryFileError
        If the file cannot be opened
    GeometryParseError
        If ``strict`` and a coordinate is not a number
    """
    file_path = Path(file_path)
    vertices: List[Tuple[float, float, float]] = []
    normals: List[Tuple[float, float, float]] = []

    for line_number, tag, values in _stream_records(file_path):
        if len(values) < 3:
            logger.debug(f"{file_path}:{line_number}: skipping short '{tag}' record")
            continue
        try:
            coords = (float(values[0]), float(values[1]), float(values[2]))
        except ValueError as exc:
            if strict:
                raise GeometryParseError(
                    f"{file_path}:{line_number}: invalid '{tag}' record: {exc}"
                ) from exc
            logger.warning(f"{file_path}:{line_number}: skipping '{tag}' record: {exc}")
            continue

        if tag == VERTEX_TAG:
            vertices.append(coords)
        else:
            normals.append(coords)

    geometry = LensGeometry(_frozen(vertices), _frozen(normals), source=file_path)
    if not geometry.is_valid:
        logger.warning(
            f"OBJ parsing found {geometry.num_vertices} vertices and "
            f"{geometry.num_normals} normals in {file_path}"
        )
    else:
        logger.debug(f"Loaded {geometry.num_vertices} vertices from {file_path}")
    return geometry


def load_lens(file_path: Path | str, strict: bool = False) -> LensGeometry:
    """Read an OBJ file and reject it unless it holds usable lens geometry."""
    return parse_obj(file_path, strict=strict).validate()
