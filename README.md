# obstacle_avoidance

Building blocks for a drone obstacle-avoidance planner. The package is a library: it has no command and starts no process of its own.

## Modules

- **`obstacle_avoidance.geometry`** handles angles and polar coordinates.
  - Angle wrapping: `wrap_angle_to_plus_minus_180`, `wrap_angle_to_plus_minus_pi`, `angle_difference` and `index_angle_difference`.
  - `get_angular_velocity` gives a yaw rate along the shorter direction.
  - Polar/cartesian conversion in the histogram convention: `polar_histogram_to_cartesian` and `cartesian_to_polar_histogram`.
  - Polar/cartesian conversion in the FCU convention: `polar_fcu_to_cartesian` and `cartesian_to_polar_fcu`.
  - Histogram indexing: `histogram_index_to_polar` and `polar_to_histogram_index`.
  - `wrap_polar` and `next_yaw`.
  - ENU/NED helpers: `to_ned`, `to_enu`, `yaw_to_ned_deg`, `yaw_to_enu_rad` and the rest.
  - The types `PolarPoint`, `MavState`, `NavigationState`, `MavCommand` and `ModelParameters`.
- **`obstacle_avoidance.quaternion`** provides `Quaternion`.
  - It supports the Hamilton product, `norm`, `normalized`, shortest-path `slerp`, `yaw`, `from_axis_angle` and `from_rpy`.
  - Frame helpers: `quaternion_from_rpy`, `orientation_to_ned`, `orientation_to_enu`, `get_yaw_from_quaternion` (degrees), `get_pitch_from_quaternion` (degrees) and `create_pose`.
- **`obstacle_avoidance.histogram`** provides `Histogram`, an obstacle-distance grid over elevation × azimuth.
  - `get_dist` wraps indices around.
  - `set_dist` raises `IndexError` when the index is out of range.
  - `upsample` and `downsample` switch between `ALPHA_RES` and `2 * ALPHA_RES`. Each raises `ValueError` when it is called on the wrong resolution.
  - `set_zero` and `is_empty`.
- **`obstacle_avoidance.fov`** provides `FOV`, with `contains` and `contains_yaw`.
  - `point_inside_fov`, `point_inside_yaw_fov` and `histogram_index_yaw_inside_fov`.
  - `which_fov` and `edge_of_fov` return a camera index or `None`.
  - `scale_to_fov` gives a visibility weight in [0, 1].
  - `remove_nan_and_get_maxima` and `update_fov_from_maxima` estimate a field of view from a point cloud.
- **`obstacle_avoidance.trajectory`** builds flight-controller setpoints.
  - `trajectory_from_setpoint` builds a single waypoint.
  - `trajectory_from_bezier` builds five control points plus a duration. It raises `ValueError` for any other number of control points.
  - The results are `Trajectory` values made of `PositionTarget` points. NaN marks an unused value.
- **`obstacle_avoidance.transform_buffer`** provides `TransformBuffer`, which keeps a time window of `StampedTransform` values for each frame pair.
  - `insert_transform` returns `False` for a transform that is not newer than the last one.
  - `get_transform` interpolates position linearly and rotation by slerp.
  - A lookup that cannot be answered raises `TransformLookupError`.
- **`obstacle_avoidance.usm`** provides a small state-machine base class, `StateMachine`, together with `Transition`.
  - Subclasses implement `run_current_state` and `choose_next_state`.
  - `iterate_once` moves to the next state unless the transition is `REPEAT`.
- **`obstacle_avoidance.avoidance_node`** provides `AvoidanceNode`.
  - Failsafe status logic: `check_failsafe`.
  - Flight-controller parameters: `px4_params_callback`, `poll_px4_parameters`, `run_parameter_poller` and `get_px4_parameters`.
  - Mission speed from change-speed items: `mission_callback` and `mission_item_speed`.
  - Heartbeats: `publish_system_status`, which returns a `CompanionStatus`.
- **`obstacle_avoidance.world_loader`** turns a YAML world file (a list of objects) into `Marker` values.
  - Loading: `load_world` and `parse_world_object`.
  - `resolve_uri` resolves `model://` meshes against `GAZEBO_MODEL_PATH` and `~/.gazebo/models`.
  - `drone_marker` builds the vehicle marker.
  - `WorldVisualizer` hands markers to the publish callbacks you give it.
  - Errors raise `WorldLoadError`.
- **`obstacle_avoidance.planner_types`** holds the planner data types: `CandidateDirection` (ordered by cost), `CostParameters`, `WaypointChoice`, `AvoidanceOutput`, `SimulationState`, `SimulationLimits`, `PlannerState` and `WaypointResult`. It also has `norm_clamp`.

## Installation

```
pip install .
```

## Examples

Angles and histogram indices:

```python
import numpy as np
from obstacle_avoidance.geometry import (
    wrap_angle_to_plus_minus_180,
    cartesian_to_polar_histogram,
    polar_to_histogram_index,
)

wrap_angle_to_plus_minus_180(270.0)          # -90.0
p = cartesian_to_polar_histogram(np.array([1.0, 1.0, 0.0]), np.zeros(3))
polar_to_histogram_index(p, 6)               # (azimuth index, elevation index)
```

Field of view:

```python
from obstacle_avoidance.fov import FOV, point_inside_fov
from obstacle_avoidance.geometry import PolarPoint

cameras = [FOV(0.0, 0.0, 90.0, 60.0)]
point_inside_fov(cameras, PolarPoint(0.0, 10.0, 1.0))   # True
```

Transform buffer:

```python
from obstacle_avoidance.transform_buffer import StampedTransform, TransformBuffer

buffer = TransformBuffer(10.0, clock=lambda: 0.0)
buffer.insert_transform("camera", "local_origin", StampedTransform(1.0, [0.0, 0.0, 0.0]))
buffer.insert_transform("camera", "local_origin", StampedTransform(2.0, [2.0, 0.0, 0.0]))
buffer.get_transform("camera", "local_origin", 1.5).origin   # array([1., 0., 0.])
```

Failsafe and parameters:

```python
from obstacle_avoidance.avoidance_node import AvoidanceNode
from obstacle_avoidance.geometry import MavState

node = AvoidanceNode(param_getter=lambda name: 1.0)
node.poll_px4_parameters()                   # True: every polled parameter is known
hover = node.check_failsafe(since_last_cloud=5.0, since_start=10.0, hover=False)
hover, node.status is MavState.CRITICAL      # (True, True)
```

## What the package does not do

The package holds no middleware integration. It neither subscribes to sensor topics nor publishes messages itself: status heartbeats, world markers and parameter requests go through callables you pass in.

It also contains no planning algorithm. There is no point-cloud processing, no cost matrix, no look-ahead tree search and no waypoint-generator state machine. `planner_types` only defines the data those parts exchange.

## Running the tests

```
pip install .[test]
pytest
```