from brepview.errors import (
    ModelException,
    ModelLoadError,
    StructuralValidationError,
    TopologyError,
    EmptyModelError,
)
from brepview.solid import Vertex, Edge, Face, Solid
from brepview.colors import ColorSource, Material, PALETTE, front_material, back_material
from brepview.viewer.transform import Transform
from brepview.viewer.bbox import BoundingBox
from brepview.sorting import alpha_sort
from brepview.viewer.mesh import RenderableMesh, MeshGroup
from brepview.triangulate import resolve_edge_ring, triangulate_face
from brepview.builders import (
    MeshBuilder,
    ColorfulMeshBuilder,
    SimpleMeshBuilder,
    default_model_group,
)
from brepview.viewer.scene import Scene, Camera, AmbientLight, DirectionalLight
from brepview.config import ViewerConfig
from brepview.session import DisplaySession
