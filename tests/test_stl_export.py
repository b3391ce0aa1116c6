"""
Tests for the binary and ASCII STL sinks.
"""

import os
import sys
import numpy as np
import pytest
import trimesh

# Add the parent directory to the Python path so we can import the project packages
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from data_types import Point3, StlWriteError, Triangle
from export import STL_RECORD_DTYPE, BinaryStlSink, TextStlSink, open_stl_sink
from heightfield import HeightField
from meshing import BorderDimensions, MeshBuilder


def sample_triangles(n=5):
    rng = np.random.default_rng(n)
    coords = rng.uniform(-50, 50, size=(n, 3, 3))
    return [Triangle(*(Point3(*map(float, v)) for v in tri)) for tri in coords]


def read_binary(path):
    data = path.read_bytes()
    header = data[:80]
    count = int(np.frombuffer(data[80:84], dtype="<u4")[0])
    records = np.frombuffer(data[84:], dtype=STL_RECORD_DTYPE)
    return header, count, records


def read_ascii_vertices(path):
    vertices = []
    for line in path.read_text().splitlines():
        parts = line.split()
        if parts and parts[0] == "vertex":
            vertices.append([float(p) for p in parts[1:]])
    return np.array(vertices).reshape(-1, 3, 3)


def small_builder():
    rng = np.random.default_rng(1)
    field = HeightField(heights=rng.uniform(0.5, 3.5, size=(6, 5)), min_thickness=0.5, max_thickness=3.5)
    return MeshBuilder(field, 0.2, border=BorderDimensions(thickness=5.0, width=4.0))


class TestBinaryStl:
    def test_layout_and_count(self, tmp_path):
        path = tmp_path / "out.stl"
        triangles = sample_triangles(7)
        sink = BinaryStlSink(path)
        for triangle in triangles:
            sink.emit_triangle(triangle)
        sink.finalize()

        assert sink.triangle_count == 7
        assert path.stat().st_size == 80 + 4 + 50 * 7
        header, count, records = read_binary(path)
        assert header == b" " * 80
        assert count == 7
        assert STL_RECORD_DTYPE.itemsize == 50

        expected = np.array([[v.as_tuple() for v in t.vertices] for t in triangles], dtype=np.float32)
        np.testing.assert_array_equal(records["vectors"], expected)
        assert np.all(records["normal"] == 0)
        assert np.all(records["attribute"] == 0)

    def test_record_field_offsets(self):
        offsets = {name: STL_RECORD_DTYPE.fields[name][1] for name in STL_RECORD_DTYPE.names}
        assert offsets == {"normal": 0, "vectors": 12, "attribute": 48}
        assert not STL_RECORD_DTYPE.isalignedstruct

    def test_count_patched_across_chunks(self, tmp_path):
        path = tmp_path / "chunks.stl"
        triangles = sample_triangles(25)
        sink = BinaryStlSink(path, chunk_size=4)
        sink.emit_triangles(triangles)
        sink.finalize()

        _, count, records = read_binary(path)
        assert count == 25
        assert len(records) == 25
        np.testing.assert_array_equal(
            records["vectors"][-1],
            np.array([v.as_tuple() for v in triangles[-1].vertices], dtype=np.float32),
        )

    def test_empty_session(self, tmp_path):
        path = tmp_path / "empty.stl"
        with BinaryStlSink(path):
            pass
        assert path.stat().st_size == 84
        assert read_binary(path)[1] == 0

    def test_full_mesh_reads_back_watertight(self, tmp_path):
        path = tmp_path / "mesh.stl"
        builder = small_builder()
        with open_stl_sink(path, binary=True) as sink:
            sink.emit_triangles(builder.triangles())

        assert read_binary(path)[1] == builder.expected_triangle_count()
        loaded = trimesh.load(str(path), force="mesh")
        assert len(loaded.faces) == builder.expected_triangle_count()
        assert loaded.is_watertight


class TestTextStl:
    def test_layout(self, tmp_path):
        path = tmp_path / "out.stl"
        triangles = sample_triangles(3)
        with TextStlSink(path, name="portrait") as sink:
            sink.emit_triangles(triangles)

        lines = path.read_text().splitlines()
        assert lines[0] == "solid portrait"
        assert lines[-1] == "endsolid portrait"
        assert lines.count("facet normal 0 0 0") == 3
        assert lines.count("  outer loop") == 3
        assert lines.count("  endloop") == 3
        assert lines.count("endfacet") == 3

    def test_coordinates_round_trip_exactly(self, tmp_path):
        path = tmp_path / "exact.stl"
        triangles = sample_triangles(4)
        with TextStlSink(path) as sink:
            sink.emit_triangles(triangles)

        expected = np.array([[v.as_tuple() for v in t.vertices] for t in triangles])
        np.testing.assert_array_equal(read_ascii_vertices(path), expected)

    def test_no_exponent_locale_independent_decimal_point(self, tmp_path):
        path = tmp_path / "decimal.stl"
        with TextStlSink(path) as sink:
            sink.emit_triangle(Triangle(Point3(0.2, 1.5, 3.0), Point3(100.0, 0.0, 0.5), Point3(0.4, 0.6, 0.8)))
        text = path.read_text()
        assert "vertex 0.2 1.5 3.0" in text
        assert "," not in text

    def test_solid_name_is_one_ascii_token(self, tmp_path):
        sink = TextStlSink(tmp_path / "named.stl", name="my photo é")
        sink.finalize()
        assert sink.name == "my_photo_?"
        assert (tmp_path / "named.stl").read_text().splitlines()[0] == "solid my_photo_?"


def test_ascii_and_binary_describe_same_geometry(tmp_path):
    builder = small_builder()
    binary_path = tmp_path / "mesh_binary.stl"
    ascii_path = tmp_path / "mesh_ascii.stl"

    with open_stl_sink(binary_path, binary=True) as sink:
        sink.emit_triangles(builder.triangles())
    with open_stl_sink(ascii_path, binary=False, name="mesh") as sink:
        sink.emit_triangles(builder.triangles())

    _, count, records = read_binary(binary_path)
    ascii_vertices = read_ascii_vertices(ascii_path)
    assert count == len(ascii_vertices)
    np.testing.assert_allclose(records["vectors"], ascii_vertices, rtol=1e-6, atol=1e-6)


def test_open_stl_sink_selects_format(tmp_path):
    binary = open_stl_sink(tmp_path / "a.stl", binary=True)
    text = open_stl_sink(tmp_path / "b.stl", binary=False)
    assert isinstance(binary, BinaryStlSink)
    assert isinstance(text, TextStlSink)
    binary.finalize()
    text.finalize()


@pytest.mark.parametrize("binary", [True, False])
def test_emit_after_finalize_fails(tmp_path, binary):
    sink = open_stl_sink(tmp_path / "closed.stl", binary=binary)
    sink.finalize()
    assert sink.finished
    with pytest.raises(StlWriteError):
        sink.emit_triangle(sample_triangles(1)[0])
    with pytest.raises(StlWriteError):
        sink.finalize()


@pytest.mark.parametrize("binary", [True, False])
def test_error_inside_session_removes_partial_file(tmp_path, binary):
    path = tmp_path / "partial.stl"
    with pytest.raises(RuntimeError):
        with open_stl_sink(path, binary=binary) as sink:
            sink.emit_triangles(sample_triangles(3))
            raise RuntimeError("mesh generation failed")
    assert sink.finished
    assert not path.exists()


def test_unwritable_destination(tmp_path):
    with pytest.raises(StlWriteError):
        open_stl_sink(tmp_path / "missing_dir" / "out.stl")


class _UnseekableFile:
    def __init__(self, wrapped):
        self.wrapped = wrapped

    def write(self, data):
        return self.wrapped.write(data)

    def seek(self, offset):
        raise OSError("stream is not seekable")

    def close(self):
        self.wrapped.close()


def test_failed_count_patch_removes_output(tmp_path):
    sink = BinaryStlSink(tmp_path / "pipe.stl")
    sink._file = _UnseekableFile(sink._file)
    sink.emit_triangles(sample_triangles(2))
    with pytest.raises(StlWriteError, match="not seekable"):
        sink.finalize()
    assert not (tmp_path / "pipe.stl").exists()
