"""
JAX Rigid Motions: the special Euclidean group SE(N) and its algebra se(N).

This library provides mathematically rigorous, JIT-compilable implementations
of rigid-body transforms, the exponential and logarithm maps between se(N)
and SE(N), and the analytic Jacobians used for optimization on the manifold.
"""

import jax
jax.config.update("jax_enable_x64", True)

# Import core modules
from . import transforms
from . import core
from .core import RigidTransform, Twist, TwistForm
from .maps import exp, log, retract
from .jacobians import jacobian

__version__ = "0.1.0"
__all__ = [
    "transforms",
    "core",
    "RigidTransform",
    "Twist",
    "TwistForm",
    "exp",
    "log",
    "retract",
    "jacobian",
]
