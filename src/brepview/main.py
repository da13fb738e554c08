import argparse
import logging
import sys
from typing import List, Optional, Tuple

import numpy as np
from datatrees import datatree, dtfield

from brepview.config import ViewerConfig
from brepview.errors import ModelException
from brepview.session import DisplaySession
from brepview.sorting import representative_position
from brepview.viewer.transform import Transform

log = logging.getLogger(__name__)


def parse_vector(text: str, size: int) -> Optional[Tuple[float, ...]]:
    """Parses a comma separated vector (e.g. "0,0,5") of exactly size floats."""
    try:
        parts = tuple(float(p.strip()) for p in text.split(','))
        if len(parts) != size:
            raise ValueError(f"Expected {size} components, got {len(parts)}.")
        return parts
    except ValueError as e:
        print(f"Error parsing vector '{text}': {e}", file=sys.stderr)
        return None


def add_bool_arg(parser, name, help_text, default=False):
    parser.add_argument(
        f"--{name}",
        action="store_true",
        help=help_text
    )

    parser.add_argument(
        f"--no-{name}",
        action="store_false",
        dest=name.replace('-', '_'),
        help=f"Disable: {help_text}"
    )
    parser.set_defaults(**{name.replace('-', '_'): default})


@datatree
class BrepMainRunner:
    """Parses arguments, loads a model and reports its draw order."""
    argv: List[str] | None = None
    _args: argparse.Namespace | None = dtfield(default=None, init=False)
    parser: argparse.ArgumentParser | None = dtfield(
        self_default=lambda s: s._make_parser(), init=False)
    session: DisplaySession | None = dtfield(default=None, init=False)
    default_colorful: bool = True
    default_camera: str = "0,0,5"
    default_rotation_threshold: float = 0.1

    @property
    def args(self) -> argparse.Namespace:
        if self._args is None:
            self.parse_args()
        return self._args

    def _make_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="Triangulate a B-Rep JSON model and sort its faces for transparent display.")

        parser.add_argument(
            "model",
            nargs="?",
            default=None,
            help="B-Rep model JSON file. The built-in model is used when omitted."
        )
        add_bool_arg(parser, "colorful", "One translucent mesh per face (otherwise a single merged mesh).",
                     default=self.default_colorful)
        parser.add_argument("--seed", type=int, default=None, help="Colour palette shuffle seed.")
        parser.add_argument(
            "--camera",
            type=str,
            default=self.default_camera,
            help="Camera position as comma-separated floats (e.g., '0,0,5')."
        )
        parser.add_argument(
            "--rotate",
            type=str,
            action="append",
            default=[],
            help="Rotation 'ax,ay,az,degrees' applied to the model, may be repeated."
        )
        parser.add_argument(
            "--rotation-threshold",
            type=float,
            default=self.default_rotation_threshold,
            help="Accumulated rotation in radians that triggers re-sorting."
        )
        parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging.")
        return parser

    def parse_args(self):
        self._args = self.parser.parse_args(self.argv)

    def check_args(self) -> bool:
        self.args.parsed_camera = parse_vector(self.args.camera, 3)
        if self.args.parsed_camera is None:
            return False
        self.args.parsed_rotations = []
        for text in self.args.rotate:
            rotation = parse_vector(text, 4)
            if rotation is None:
                return False
            self.args.parsed_rotations.append(rotation)
        return True

    def make_config(self) -> ViewerConfig:
        return ViewerConfig(
            colorful=self.args.colorful,
            rotation_threshold=self.args.rotation_threshold,
            camera_position=self.args.parsed_camera,
            seed=self.args.seed,
        )

    def describe(self) -> List[str]:
        """One line per mesh in draw order."""
        lines = []
        camera = self.session.camera.position
        for i, mesh in enumerate(self.session.group):
            location = representative_position(mesh, Transform())
            distance = float(np.linalg.norm(camera - location))
            alpha = mesh.material.diffuse[3]
            lines.append(
                f"{i:4d} {mesh.name:>10} triangles={mesh.num_triangles():<4d} "
                f"alpha={alpha:<3d} distance={distance:.4f}")
        return lines

    def run(self) -> int:
        logging.basicConfig(level=logging.DEBUG if self.args.verbose else logging.WARNING)
        if not self.check_args():
            return 2

        self.session = DisplaySession(self.make_config())
        if self.args.model:
            try:
                self.session.load_file(self.args.model)
            except ModelException as e:
                print(f"Failed to load model from file: {self.args.model}\n{e.message}",
                      file=sys.stderr)
                return 1
            title = self.args.model
        else:
            title = "Default Model"

        for ax, ay, az, degrees in self.args.parsed_rotations:
            self.session.rotate((ax, ay, az), np.radians(degrees))
        self.session.reorder()

        print(f"{title}: {len(self.session.group)} meshes, "
              f"{self.session.group.num_triangles()} triangles")
        for line in self.describe():
            print(line)
        return 0


def main(argv: List[str] | None = None) -> int:
    return BrepMainRunner(argv).run()


if __name__ == "__main__":
    sys.exit(main())
