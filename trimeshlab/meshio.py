"""Reading and writing triangle meshes in OFF and OBJ formats."""

from __future__ import annotations

import os
from collections.abc import Iterator

import numpy as np


def _content_lines(path) -> Iterator[str]:
    with open(path, encoding="utf-8") as handle:
        for raw in handle:
            line = raw.split("#", 1)[0].strip()
            if line:
                yield line


def _as_arrays(vertices, faces) -> tuple[np.ndarray, np.ndarray]:
    v = np.asarray(vertices, dtype=float).reshape(-1, 3)
    f = np.asarray(faces, dtype=int).reshape(-1, 3)
    return v, f


def read_off(path) -> tuple[np.ndarray, np.ndarray]:
    """Read an OFF file and return ``(vertices, faces)`` as arrays."""
    lines = _content_lines(path)
    try:
        header = next(lines).split()
    except StopIteration:
        raise ValueError(f"{path}: empty OFF file") from None
    if not header[0].endswith("OFF"):
        raise ValueError(f"{path}: missing OFF header")
    counts = header[1:]
    if not counts:
        try:
            counts = next(lines).split()
        except StopIteration:
            raise ValueError(f"{path}: missing element counts") from None
    if len(counts) < 2:
        raise ValueError(f"{path}: malformed element counts")
    n_vertices, n_faces = int(counts[0]), int(counts[1])

    vertices = []
    faces = []
    try:
        for _ in range(n_vertices):
            parts = next(lines).split()
            if len(parts) < 3:
                raise ValueError(f"{path}: vertex with fewer than 3 coordinates")
            vertices.append([float(x) for x in parts[:3]])
        for _ in range(n_faces):
            parts = next(lines).split()
            degree = int(parts[0])
            if degree != 3 or len(parts) < 4:
                raise ValueError(f"{path}: only triangle faces are supported")
            faces.append([int(x) for x in parts[1:4]])
    except StopIteration:
        raise ValueError(f"{path}: unexpected end of file") from None
    return _as_arrays(vertices, faces)


def _obj_index(token: str, n_vertices: int) -> int:
    index = int(token.split("/", 1)[0])
    if index < 0:
        return n_vertices + index
    if index == 0:
        raise ValueError("OBJ vertex indices start at 1")
    return index - 1


def read_obj(path) -> tuple[np.ndarray, np.ndarray]:
    """Read the vertices and triangle faces of an OBJ file."""
    vertices = []
    faces = []
    for line in _content_lines(path):
        parts = line.split()
        kind, values = parts[0], parts[1:]
        if kind == "v":
            if len(values) < 3:
                raise ValueError(f"{path}: vertex with fewer than 3 coordinates")
            vertices.append([float(x) for x in values[:3]])
        elif kind == "f":
            if len(values) != 3:
                raise ValueError(f"{path}: only triangle faces are supported")
            faces.append([_obj_index(tok, len(vertices)) for tok in values])
    return _as_arrays(vertices, faces)


def read_mesh(path) -> tuple[np.ndarray, np.ndarray]:
    """Read a mesh, choosing the format from the file name ending."""
    name = os.fspath(path)
    if name.endswith("off"):
        return read_off(path)
    if name.endswith("obj"):
        return read_obj(path)
    raise ValueError(
        "Unsupported file format. Only .off and .obj formats are supported."
    )


def write_off(path, vertices, faces) -> None:
    """Write a triangle mesh to an OFF file."""
    v, f = _as_arrays(vertices, faces)
    with open(path, "w", encoding="utf-8") as handle:
        handle.write("OFF\n")
        handle.write(f"{len(v)} {len(f)} 0\n")
        for row in v:
            handle.write(" ".join(repr(float(x)) for x in row) + "\n")
        for row in f:
            handle.write("3 " + " ".join(str(int(x)) for x in row) + "\n")