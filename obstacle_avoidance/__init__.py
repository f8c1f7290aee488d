"""Geometry, quaternions, polar histogram, field of view, trajectory, transform buffer, state machine, status and world loading helpers for drone obstacle avoidance."""

__version__ = "0.1.0"