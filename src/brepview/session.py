"""
Display session state: the loaded solid, its meshes in a scene, the camera
and the rotation accumulated since the last transparency sort.

Input handling lives with the display collaborator. It calls rotate(),
translate(), reset_view() and the load methods; the session decides when the
meshes need re-sorting.
"""

import logging

import numpy as np
from datatrees import datatree, dtfield

from brepview.builders import MeshBuilder, default_model_group, make_builder
from brepview.colors import ColorSource
from brepview.config import ViewerConfig
from brepview.solid import Solid
from brepview.viewer.mesh import MeshGroup
from brepview.viewer.scene import AmbientLight, Camera, DirectionalLight, Scene

log = logging.getLogger(__name__)


@datatree
class DisplaySession:
    """Non-UI state of a model viewer."""

    config: ViewerConfig = dtfield(default_factory=ViewerConfig)
    color_source: ColorSource = dtfield(
        self_default=lambda s: ColorSource(seed=s.config.seed), init=False)
    scene: Scene = dtfield(
        self_default=lambda s: Scene(
            ambient_light=AmbientLight(s.config.ambient_color),
            directional_light=DirectionalLight(
                s.config.directional_color, s.config.light_direction),
        ),
        init=False,
    )
    camera: Camera = dtfield(
        self_default=lambda s: Camera(default_position=s.config.camera_position), init=False)
    group: MeshGroup = dtfield(default_factory=MeshGroup, init=False)
    solid: Solid | None = dtfield(default=None, init=False)
    is_default: bool = dtfield(default=False, init=False)
    total_rotation: float = dtfield(default=0.0, init=False)

    def __post_init__(self):
        self.load_default()

    def builder(self) -> MeshBuilder:
        return make_builder(self.config.colorful, color_source=self.color_source)

    def _show(self, group: MeshGroup):
        self.group = group
        self.scene.show(group)
        self.total_rotation = 0.0

    def load_default(self):
        """Shows the built-in model unless it is already shown."""
        if self.is_default:
            return
        self._show(default_model_group())
        self.is_default = True
        self.solid = None
        log.info('showing default model')

    def load_file(self, filename: str):
        """Loads a JSON B-Rep model. On failure the exception propagates and
        the current model stays on display."""
        self.load_solid(Solid.from_json(filename))

    def load_solid(self, solid: Solid):
        group = self.builder().build(solid)
        self._show(group)
        self.solid = solid
        self.is_default = False
        self.reorder()

    def reload(self):
        """Rebuilds the meshes of the current solid, e.g. for new colours or
        after a mode change. Does nothing for the default model."""
        if self.is_default or self.solid is None:
            return
        self._show(self.builder().build(self.solid))
        self.reorder()

    def set_colorful(self, colorful: bool):
        self.config.colorful = colorful
        self.reload()

    def rotate(self, axis, angle: float) -> bool:
        """Rotates every mesh by angle (radians) about axis. Returns True when
        the accumulated rotation triggered a re-sort."""
        self.group.rotate(axis, angle)
        self.total_rotation += angle
        if abs(self.total_rotation) > self.config.rotation_threshold:
            self.total_rotation = 0.0
            return self.reorder()
        return False

    def translate(self, offset):
        self.group.translate(offset)

    def reset_view(self):
        self.camera.reset()
        self.group.reset_transforms()

    def reorder(self) -> bool:
        """Sorts translucent face meshes back to front. Only per-face models
        are sorted, the default and merged models keep their order."""
        if self.is_default or not self.config.colorful:
            return False
        self.scene.alpha_sort(self.camera.position)
        self.group.meshes[:] = self.scene.meshes()
        log.debug('reordered from camera at %s', np.round(self.camera.position, 3))
        return True
