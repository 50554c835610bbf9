"""SO(2) and so(2) Lie group operations in JAX.

Planar rotations are parameterized by a single angle stored as a (..., 1)
array, so that the coordinate layout matches the other rotation modules.
"""

import jax
import jax.numpy as jnp

Array = jax.Array

SMALL_ANGLE = 1e-8


def hat(theta: Array) -> Array:
    """so(2) hat operator: (..., 1) angle to (..., 2, 2) skew-symmetric matrix."""
    a = theta[..., 0]
    zeros = jnp.zeros_like(a)
    return jnp.stack([
        jnp.stack([zeros, -a], axis=-1),
        jnp.stack([a, zeros], axis=-1)
    ], axis=-2)


def vee(Omega: Array) -> Array:
    """so(2) vee operator: (..., 2, 2) skew-symmetric matrix to (..., 1) angle."""
    return Omega[..., 1, 0][..., None]


def exp(theta: Array) -> Array:
    """
    SO(2) exponential map.

    Args:
        theta: (..., 1) rotation angles

    Returns:
        (..., 2, 2) rotation matrices
    """
    c, s = jnp.cos(theta[..., 0]), jnp.sin(theta[..., 0])
    return jnp.stack([
        jnp.stack([c, -s], axis=-1),
        jnp.stack([s, c], axis=-1)
    ], axis=-2)


def log(R: Array) -> Array:
    """SO(2) logarithm map, returning angles in (-pi, pi] as (..., 1) arrays."""
    return jnp.arctan2(R[..., 1, 0], R[..., 0, 0])[..., None]


def _jacobian_coefficients(theta: Array):
    # V = a I + b K with a = sin(theta) / theta and b = (1 - cos(theta)) / theta
    angle = theta[..., 0]
    small_angle = jnp.abs(angle) < SMALL_ANGLE
    safe_angle = jnp.where(small_angle, 1.0, angle)

    a = jnp.where(small_angle, 1.0 - angle ** 2 / 6.0, jnp.sin(safe_angle) / safe_angle)
    b = jnp.where(
        small_angle,
        angle / 2.0 - angle ** 3 / 24.0,
        2.0 * jnp.sin(0.5 * safe_angle) ** 2 / safe_angle,
    )
    return a[..., None, None], b[..., None, None]


def left_jacobian(theta: Array) -> Array:
    """
    Left Jacobian of SO(2), the V matrix of SE(2).

    Args:
        theta: (..., 1) rotation angles

    Returns:
        (..., 2, 2) left Jacobians
    """
    a, b = _jacobian_coefficients(theta)
    I = jnp.eye(2, dtype=a.dtype)
    K = jnp.array([[0.0, -1.0], [1.0, 0.0]], dtype=a.dtype)
    return a * I + b * K


def left_jacobian_inverse(theta: Array) -> Array:
    """Closed-form inverse of left_jacobian(); K^2 = -I gives (a I - b K) / (a^2 + b^2)."""
    a, b = _jacobian_coefficients(theta)
    I = jnp.eye(2, dtype=a.dtype)
    K = jnp.array([[0.0, -1.0], [1.0, 0.0]], dtype=a.dtype)
    return (a * I - b * K) / (a * a + b * b)
