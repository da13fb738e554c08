"""
B-Rep solid data model: vertices, edges and faces.

A Solid is only ever created through Solid.create() (or the loaders built on
it), which validates the whole structure eagerly. Once created it is
read-only.
"""

import json
import logging
from operator import attrgetter
from typing import Any, Iterable

import numpy as np
from datatrees import datatree

from brepview.errors import ModelLoadError, StructuralValidationError

log = logging.getLogger(__name__)


@datatree(frozen=True)
class Vertex:
    """A solid vertex."""
    id: int
    x: float
    y: float
    z: float

    @property
    def point(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)


@datatree(frozen=True)
class Edge:
    """An edge between two vertices. The stored order gives its direction
    when used in a ring."""
    id: int
    vertices: tuple

    @property
    def start(self) -> int:
        return self.vertices[0]

    @property
    def end(self) -> int:
        return self.vertices[1]

    def reversed(self) -> 'Edge':
        """The same edge (same id) running the other way."""
        return Edge(self.id, (self.vertices[1], self.vertices[0]))

    def contains(self, vertex_id: int) -> bool:
        return vertex_id in self.vertices


@datatree(frozen=True)
class Face:
    """A face bounded by a set of edges, in no particular order."""
    id: int
    edges: tuple


def _dense_id_problems(kind: str, ids: list[int]) -> list[str]:
    count = len(ids)
    if sorted(ids) == list(range(count)):
        return []
    missing = sorted(set(range(count)) - set(ids))
    duplicated = sorted({i for i in ids if ids.count(i) > 1})
    problems = []
    if missing:
        problems.append(f'{kind} ids missing from 0..{count - 1}: {missing}')
    if duplicated:
        problems.append(f'{kind} ids duplicated: {duplicated}')
    if not problems:
        problems.append(f'{kind} ids are not a contiguous range starting at 0')
    return problems


def validate(vertices: Iterable[Vertex], edges: Iterable[Edge], faces: Iterable[Face]) -> None:
    """Checks the structural rules of a solid, raising StructuralValidationError
    listing every problem found."""
    vertices = list(vertices)
    edges = list(edges)
    faces = list(faces)
    problems = []

    problems.extend(_dense_id_problems('vertex', [v.id for v in vertices]))

    for edge in edges:
        if len(edge.vertices) != 2:
            problems.append(f'edge {edge.id} has {len(edge.vertices)} vertices, expected 2')
            continue
        if edge.vertices[0] == edge.vertices[1]:
            problems.append(f'edge {edge.id} uses vertex {edge.vertices[0]} twice')
        for vertex_id in edge.vertices:
            if not 0 <= vertex_id < len(vertices):
                problems.append(f'edge {edge.id} references unknown vertex {vertex_id}')
    problems.extend(_dense_id_problems('edge', [e.id for e in edges]))

    for face in faces:
        if len(face.edges) < 3:
            problems.append(f'face {face.id} has {len(face.edges)} edges, at least 3 required')
        for edge_id in face.edges:
            if not 0 <= edge_id < len(edges):
                problems.append(f'face {face.id} references unknown edge {edge_id}')
    problems.extend(_dense_id_problems('face', [f.id for f in faces]))

    if problems:
        raise StructuralValidationError(problems)


@datatree(frozen=True)
class Solid:
    """A validated B-Rep solid. Element ids equal their storage index."""
    vertices: tuple
    edges: tuple
    faces: tuple

    @classmethod
    def create(
        cls, vertices: Iterable[Vertex], edges: Iterable[Edge], faces: Iterable[Face]
    ) -> 'Solid':
        vertices = list(vertices)
        edges = list(edges)
        faces = list(faces)
        validate(vertices, edges, faces)
        return cls(
            tuple(sorted(vertices, key=attrgetter('id'))),
            tuple(sorted(edges, key=attrgetter('id'))),
            tuple(sorted(faces, key=attrgetter('id'))),
        )

    @classmethod
    def from_dict(cls, document: Any) -> 'Solid':
        """Builds a Solid from a decoded JSON document. Keys are matched
        case insensitively ("Vertices", "vertices", ...)."""
        try:
            doc = _lower_keys(document)
            vertices = [
                Vertex(int(v['id']), float(v['x']), float(v['y']), float(v['z']))
                for v in map(_lower_keys, doc['vertices'])
            ]
            edges = [
                Edge(int(e['id']), tuple(int(i) for i in e['vertices']))
                for e in map(_lower_keys, doc['edges'])
            ]
            faces = [
                Face(int(f['id']), tuple(int(i) for i in f['edges']))
                for f in map(_lower_keys, doc['faces'])
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ModelLoadError(f'Unrecognized data: {e}') from e
        return cls.create(vertices, edges, faces)

    @classmethod
    def from_json(cls, filename: str) -> 'Solid':
        try:
            with open(filename, 'r', encoding='utf-8') as f:
                text = f.read()
        except OSError as e:
            raise ModelLoadError(f'Failed to load model from file: {filename}') from e
        except UnicodeDecodeError as e:
            raise ModelLoadError(f'Model file is not UTF-8 text: {filename}') from e
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise ModelLoadError(f'Unrecognized data in {filename}: {e}') from e
        solid = cls.from_dict(document)
        log.info(
            'loaded %s: %d vertices, %d edges, %d faces',
            filename, len(solid.vertices), len(solid.edges), len(solid.faces))
        return solid

    def to_dict(self) -> dict:
        return {
            'Vertices': [{'Id': v.id, 'X': v.x, 'Y': v.y, 'Z': v.z} for v in self.vertices],
            'Edges': [{'Id': e.id, 'Vertices': list(e.vertices)} for e in self.edges],
            'Faces': [{'Id': f.id, 'Edges': list(f.edges)} for f in self.faces],
        }

    def points(self) -> np.ndarray:
        """Vertex coordinates as an (n, 3) array indexed by vertex id."""
        return np.array([[v.x, v.y, v.z] for v in self.vertices], dtype=np.float64).reshape(-1, 3)

    def geometric_center(self) -> np.ndarray:
        """Mean of all vertex coordinates."""
        return self.points().mean(axis=0)

    def face_edges(self, face: Face) -> list[Edge]:
        return [self.edges[edge_id] for edge_id in face.edges]


def _lower_keys(d: Any) -> dict:
    if not isinstance(d, dict):
        raise TypeError(f'expected an object, got {type(d).__name__}')
    return {str(k).lower(): v for k, v in d.items()}
