"""Exponential and logarithm maps between se(N) and SE(N).

exp(rho, theta) = (exp_SO(theta), V(theta) rho) where V is the left Jacobian
of SO(N); log inverts both pieces. The SO(N) pieces come from the rotation
kernels, so the same code serves SE(2) and SE(3).
"""

import logging

import jax
import jax.numpy as jnp
import numpy as np

from .core import RigidTransform, Twist
from .transforms import rotation

logger = logging.getLogger(__name__)

# log() warns when the rotation angle is this close to pi.
NEAR_PI_WARNING = 1e-6


def _warn_near_pi(angle) -> None:
    angle = np.abs(np.asarray(angle))
    if np.any(np.pi - angle < NEAR_PI_WARNING):
        logger.warning(
            "log of a rotation by %.12g rad: the axis sign is ambiguous this close to pi, "
            "the returned twist is one of two valid logarithms",
            float(np.max(angle)),
        )


def exp(twist: Twist) -> RigidTransform:
    """
    SE(N) exponential map.

    Args:
        twist: se(N) element in either form

    Returns:
        The rigid transform (exp_SO(theta), V(theta) rho)
    """
    n = twist.dim
    xi = twist.as_vector_form().data
    if not jnp.issubdtype(xi.dtype, jnp.inexact):
        xi = xi.astype(jnp.result_type(float))
    rho, theta = xi[:n], xi[n:]

    so = rotation.get_module(n)
    R = so.exp(theta)
    t = so.left_jacobian(theta) @ rho

    return RigidTransform.from_rotation_translation(R, t, n)


def log(g: RigidTransform) -> Twist:
    """
    SE(N) logarithm map, the inverse of exp() for rotation angles below pi.

    At an angle of exactly pi the rotation logarithm has two solutions; one
    of them is returned and a warning is logged.

    Args:
        g: rigid transform

    Returns:
        se(N) element [V(theta)^-1 t, theta] in vector form
    """
    n = g.dim
    so = rotation.get_module(n)

    theta = so.log(g.rotation)
    jax.debug.callback(_warn_near_pi, jnp.linalg.norm(jax.lax.stop_gradient(theta)))

    p = so.left_jacobian_inverse(theta) @ g.translation
    return Twist.from_vector(n, jnp.concatenate([p, theta]))


def retract(g: RigidTransform, twist: Twist) -> RigidTransform:
    """Retraction g ⊕ twist = g * exp(twist)."""
    if g.dim != twist.dim:
        raise ValueError(f"retract is not defined between SE({g.dim}) and se({twist.dim})")
    return g.compose(exp(twist))
