"""Load a YAML world description into display markers for a visualizer."""

from __future__ import annotations

import enum
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence, Union

import numpy as np
import yaml

from .quaternion import Quaternion

_log = logging.getLogger(__name__)

MODEL_SCHEME = "model://"
DRONE_MESH = "model://matrice_100/meshes/Matrice_100.dae"
DRONE_FRAME = "local_origin"
DRONE_SCALE = 1.5
_PRIMITIVE_COLOR = (0.5, 0.5, 0.5, 0.9)


class WorldLoadError(Exception):
    """Raised when a world description cannot be turned into markers."""


class MarkerType(enum.IntEnum):
    """Marker shapes, numbered as in the visualization message format."""

    CUBE = 1
    SPHERE = 2
    CYLINDER = 3
    MESH_RESOURCE = 10


_PRIMITIVES = {
    "cube": MarkerType.CUBE,
    "sphere": MarkerType.SPHERE,
    "cylinder": MarkerType.CYLINDER,
}


@dataclass
class WorldObject:
    """One object of the world file; ``orientation`` is ``(x, y, z, w)``."""

    type: str
    name: str
    frame_id: str
    mesh_resource: str
    position: np.ndarray
    orientation: np.ndarray
    scale: np.ndarray


@dataclass
class Marker:
    """A displayable object."""

    id: int
    type: MarkerType
    frame_id: str
    position: np.ndarray
    orientation: Quaternion
    scale: np.ndarray
    color: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    mesh_resource: str = ""
    mesh_use_embedded_materials: bool = False
    stamp: float = field(default_factory=time.time)


def _floats(node: Mapping[str, Any], key: str, count: int) -> np.ndarray:
    try:
        values = node[key]
        return np.array([float(values[i]) for i in range(count)], dtype=float)
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise WorldLoadError(f"world object field {key!r} needs {count} numbers") from exc


def _string(node: Mapping[str, Any], key: str) -> str:
    try:
        value = node[key]
    except (KeyError, TypeError) as exc:
        raise WorldLoadError(f"world object is missing field {key!r}") from exc
    if value is None or isinstance(value, (dict, list)):
        raise WorldLoadError(f"world object field {key!r} must be a scalar")
    return str(value)


def parse_world_object(node: Mapping[str, Any]) -> WorldObject:
    """Build a :class:`WorldObject` from one mapping of the world file."""
    return WorldObject(
        type=_string(node, "type"),
        name=_string(node, "name"),
        frame_id=_string(node, "frame_id"),
        mesh_resource=_string(node, "mesh_resource"),
        position=_floats(node, "position", 3),
        orientation=_floats(node, "orientation", 4),
        scale=_floats(node, "scale", 3),
    )


def resolve_uri(uri: str, model_path: Optional[str] = None, home: Optional[str] = None) -> str:
    """Turn a ``model://`` URI into a ``file://`` URI of an existing file.

    The model path (default: ``GAZEBO_MODEL_PATH``) is searched entry by
    entry, followed by ``<home>/.gazebo/models`` (default home: ``HOME``).
    """
    if model_path is None:
        model_path = os.environ.get("GAZEBO_MODEL_PATH", "")
    if home is None:
        home = os.environ.get("HOME", "")
    relative = uri[len(MODEL_SCHEME) - 1:]
    locations = f"{model_path}:{home}/.gazebo/models".split(":")
    for location in locations:
        if os.path.isfile(location + relative):
            return "file://" + location + relative
    raise WorldLoadError(f"could not find model {uri!r}")


def _object_marker(item: WorldObject, marker_id: int, model_path: Optional[str], home: Optional[str]) -> Marker:
    x, y, z, w = item.orientation
    marker = Marker(
        id=marker_id,
        type=MarkerType.MESH_RESOURCE,
        frame_id=item.frame_id,
        position=item.position.copy(),
        orientation=Quaternion(w=w, x=x, y=y, z=z),
        scale=item.scale.copy(),
    )
    if item.type == "mesh":
        mesh = item.mesh_resource
        if MODEL_SCHEME in mesh:
            mesh = resolve_uri(mesh, model_path, home)
        marker.mesh_resource = mesh
        marker.mesh_use_embedded_materials = True
    elif item.type in _PRIMITIVES:
        marker.type = _PRIMITIVES[item.type]
        marker.color = _PRIMITIVE_COLOR
    else:
        raise WorldLoadError(f"invalid object type {item.type!r} in world file")
    return marker


def load_world(
    world_path: Union[str, Path], model_path: Optional[str] = None, home: Optional[str] = None
) -> list[Marker]:
    """Read a world YAML file (a list of objects) and return one marker per object.

    Marker ids count the objects from 1.
    """
    try:
        with open(world_path, encoding="utf-8") as fin:
            doc = yaml.safe_load(fin)
    except OSError as exc:
        raise WorldLoadError(f"cannot read world file {world_path}") from exc
    except yaml.YAMLError as exc:
        raise WorldLoadError(f"world file {world_path} is not valid YAML") from exc
    if doc is None:
        return []
    if not isinstance(doc, list):
        raise WorldLoadError("world file must hold a list of objects")
    return [
        _object_marker(parse_world_object(node), counter, model_path, home)
        for counter, node in enumerate(doc, start=1)
    ]


def drone_marker(
    position: Sequence[float],
    orientation: Quaternion,
    model_path: Optional[str] = None,
    home: Optional[str] = None,
) -> Marker:
    """Mesh marker of the vehicle at the given pose."""
    return Marker(
        id=0,
        type=MarkerType.MESH_RESOURCE,
        frame_id=DRONE_FRAME,
        position=np.asarray(position, dtype=float).reshape(3).copy(),
        orientation=orientation,
        scale=np.full(3, DRONE_SCALE),
        mesh_resource=resolve_uri(DRONE_MESH, model_path, home),
        mesh_use_embedded_materials=True,
    )


class WorldVisualizer:
    """Publishes the world markers periodically and the vehicle on each pose."""

    def __init__(
        self,
        world_path: str,
        publish_world: Callable[[list[Marker]], None],
        publish_drone: Callable[[Marker], None],
    ) -> None:
        self.world_path = world_path
        self._publish_world = publish_world
        self._publish_drone = publish_drone
        self._loaded_once = False

    def loop(self) -> bool:
        """Publish the world markers; True if they were published."""
        if not self.world_path:
            return False
        try:
            markers = load_world(self.world_path)
        except WorldLoadError as exc:
            _log.warning("Failed to visualize world: %s", exc)
            return False
        self._publish_world(markers)
        if not self._loaded_once:
            _log.info("Successfully loaded world")
            self._loaded_once = True
        return True

    def position_callback(self, position: Sequence[float], orientation: Quaternion) -> bool:
        """Publish the vehicle marker at a new pose; True if it was published."""
        if not self.world_path:
            return False
        try:
            marker = drone_marker(position, orientation)
        except WorldLoadError as exc:
            _log.warning("Failed to visualize drone: %s", exc)
            return False
        self._publish_drone(marker)
        return True