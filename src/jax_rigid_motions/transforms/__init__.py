"""
JAX-based Lie group kernels for rigid motions.

This module provides mathematically rigorous, JIT-compilable implementations of:
- SO(2) and SO(3) rotations (so2, so3 modules)
- dimension dispatch between them (rotation module)
- SE(3) Jacobians, Q correction and adjoint (se3 module)

All functions are pure, stateless, and designed for high-performance computation.
"""

# Core Lie group modules
from . import so2
from . import so3
from . import rotation
from . import se3

__all__ = [
    "so2",
    "so3",
    "rotation",
    "se3",
]
