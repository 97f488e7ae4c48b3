import unittest
import tempfile
from pathlib import Path

import numpy as np
from numpy.testing import assert_array_equal

from caustics.mesh import (
    GeometryFileError,
    GeometryParseError,
    InvalidGeometryError,
    LensGeometry,
    load_lens,
    parse_obj,
)


class TestParseObj(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)

    def tearDown(self):
        self.tmpdir.cleanup()

    def write_obj(self, text, name="lens.obj"):
        path = self.root / name
        path.write_text(text)
        return path

    def test_single_vertex_and_normal(self):
        path = self.write_obj("v 1.0 2.0 3.0\nvn 0.0 0.0 1.0\n")
        lens = parse_obj(path)
        assert_array_equal(lens.vertices, [[1.0, 2.0, 3.0]])
        assert_array_equal(lens.normals, [[0.0, 0.0, 1.0]])
        self.assertTrue(lens.is_valid)

    def test_texture_only_file_is_empty(self):
        path = self.write_obj("vt 0.0 0.0\nvt 1.0 0.5\n")
        lens = parse_obj(path)
        self.assertEqual(lens.vertices.shape, (0, 3))
        self.assertEqual(lens.normals.shape, (0, 3))
        self.assertFalse(lens.is_valid)

    def test_short_record_is_skipped(self):
        path = self.write_obj(
            "v 1.0 2.0\n"
            "v 4.0 5.0 6.0\n"
            "vn 0.0 1.0\n"
            "vn 0.0 0.0 1.0\n"
        )
        lens = parse_obj(path)
        assert_array_equal(lens.vertices, [[4.0, 5.0, 6.0]])
        assert_array_equal(lens.normals, [[0.0, 0.0, 1.0]])

    def test_other_records_are_ignored(self):
        path = self.write_obj(
            "# exported lens\n"
            "o lens\n"
            "\n"
            "v 0.1 0.2 0.3 1.0\n"
            "vt 0.5 0.5\n"
            "vn 0.0 0.6 0.8\n"
            "usemtl glass\n"
            "f 1/1/1 1/1/1 1/1/1\n"
        )
        lens = parse_obj(path)
        assert_array_equal(lens.vertices, [[0.1, 0.2, 0.3]])
        assert_array_equal(lens.normals, [[0.0, 0.6, 0.8]])

    def test_extra_whitespace(self):
        path = self.write_obj("v   1.0\t2.0  3.0\nvn 0 0 1\n")
        lens = parse_obj(path)
        assert_array_equal(lens.vertices, [[1.0, 2.0, 3.0]])

    def test_order_is_preserved(self):
        path = self.write_obj(
            "v 0 0 0\nv 1 0 0\nv 2 0 0\n"
            "vn 0 0 1\nvn 0 1 0\nvn 1 0 0\n"
        )
        lens = parse_obj(path)
        assert_array_equal(lens.vertices[:, 0], [0.0, 1.0, 2.0])
        assert_array_equal(lens.normals, np.eye(3)[::-1])

    def test_non_numeric_record_skipped_by_default(self):
        path = self.write_obj("v 1.0 abc 3.0\nv 1 2 3\nvn 0 0 1\n")
        with self.assertLogs("caustics.mesh", level="WARNING") as logs:
            lens = parse_obj(path)
        assert_array_equal(lens.vertices, [[1.0, 2.0, 3.0]])
        self.assertTrue(any(":1:" in message for message in logs.output))

    def test_non_numeric_record_raises_when_strict(self):
        path = self.write_obj("v 1 2 3\nvn 0.0 zero 1.0\n")
        with self.assertRaises(GeometryParseError):
            parse_obj(path, strict=True)

    def test_missing_file(self):
        with self.assertRaises(GeometryFileError):
            parse_obj(self.root / "missing.obj")

    def test_missing_file_is_not_invalid_geometry(self):
        with self.assertRaises(OSError):
            load_lens(self.root / "missing.obj")

    def test_arrays_are_read_only(self):
        path = self.write_obj("v 1 2 3\nvn 0 0 1\n")
        lens = parse_obj(path)
        with self.assertRaises(ValueError):
            lens.vertices[0, 0] = 5.0


class TestLoadLens(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_valid_lens(self):
        path = self.root / "lens.obj"
        path.write_text("v 0 0 0\nvn 0 0 1\nv 1 0 0\nvn 0 0 1\n")
        lens = load_lens(path)
        self.assertEqual(lens.num_vertices, 2)
        self.assertEqual(lens.source, path)

    def test_empty_geometry_rejected(self):
        path = self.root / "texture.obj"
        path.write_text("vt 0 0\n")
        with self.assertRaises(InvalidGeometryError):
            load_lens(path)

    def test_mismatched_counts_rejected(self):
        path = self.root / "mismatch.obj"
        path.write_text("v 0 0 0\nv 1 0 0\nvn 0 0 1\n")
        with self.assertRaises(InvalidGeometryError):
            load_lens(path)

    def test_validate_in_memory_geometry(self):
        lens = LensGeometry(np.zeros((2, 3)), np.zeros((1, 3)))
        self.assertFalse(lens.is_valid)
        with self.assertRaises(InvalidGeometryError):
            lens.validate()


if __name__ == "__main__":
    unittest.main()
