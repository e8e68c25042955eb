"""Position-based dynamics simulation of tearable cloth and soft bodies."""

__version__ = "0.1.0"