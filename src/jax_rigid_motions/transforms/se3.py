"""SE(3) and se(3) closed forms in JAX.

This module implements the SE(3)-specific pieces that have no generic SE(N)
counterpart: the left/right Jacobians of the exponential map (including the
Q correction block), the adjoint and the analytic Jacobians of composition
and point action. Twists are ordered [rho, theta], translation first.
All functions are pure, JIT-able, and operate on JAX arrays.
"""

import math

import jax
import jax.numpy as jnp

from . import so3

Array = jax.Array

# Below this angle the Q coefficients are summed from their Taylor series.
# The direct form of c3 divides by theta^5 and loses about 60 eps / theta^4
# to cancellation, so the series covers every angle where that matters.
Q_SMALL_ANGLE = 1.0
Q_SERIES_TERMS = 10

# Series coefficients in powers of theta^2:
#   c1 = (theta - sin) / theta^3                 = sum (-1)^k           / (2k + 3)!
#   c2 = (theta^2 / 2 + cos - 1) / theta^4       = sum (-1)^k           / (2k + 4)!
#   c3 = (2 theta - 3 sin + theta cos) / 2theta^5 = sum (-1)^k (k + 1)  / (2k + 5)!
_C1_SERIES = tuple((-1) ** k / math.factorial(2 * k + 3) for k in range(Q_SERIES_TERMS))
_C2_SERIES = tuple((-1) ** k / math.factorial(2 * k + 4) for k in range(Q_SERIES_TERMS))
_C3_SERIES = tuple((-1) ** k * (k + 1) / math.factorial(2 * k + 5) for k in range(Q_SERIES_TERMS))


def _horner(coefficients, x: Array) -> Array:
    result = jnp.full_like(x, coefficients[-1])
    for c in reversed(coefficients[:-1]):
        result = result * x + c
    return result


def _q_coefficients(angle_sq: Array):
    is_small_angle = angle_sq < Q_SMALL_ANGLE * Q_SMALL_ANGLE
    safe_angle = jnp.sqrt(jnp.where(is_small_angle, 1.0, angle_sq))
    sin_angle, cos_angle = jnp.sin(safe_angle), jnp.cos(safe_angle)

    c1 = jnp.where(
        is_small_angle,
        _horner(_C1_SERIES, angle_sq),
        (safe_angle - sin_angle) / safe_angle**3,
    )
    c2 = jnp.where(
        is_small_angle,
        _horner(_C2_SERIES, angle_sq),
        (0.5 * safe_angle**2 - 2.0 * jnp.sin(0.5 * safe_angle) ** 2) / safe_angle**4,
    )
    c3 = jnp.where(
        is_small_angle,
        _horner(_C3_SERIES, angle_sq),
        (2.0 * safe_angle - 3.0 * sin_angle + safe_angle * cos_angle) / (2.0 * safe_angle**5),
    )

    return c1, c2, c3


def _block_upper(diagonal: Array, corner: Array) -> Array:
    """Assemble [[diagonal, corner], [0, diagonal]] from 3x3 blocks."""
    top = jnp.concatenate([diagonal, corner], axis=-1)
    bottom = jnp.concatenate([jnp.zeros_like(diagonal), diagonal], axis=-1)
    return jnp.concatenate([top, bottom], axis=-2)


def q_matrix(rho: Array, theta: Array) -> Array:
    """
    Q block coupling translation and rotation in the SE(3) left Jacobian.

    Q = 1/2 [rho] + c1 ([th][rho] + [rho][th] + [th][rho][th])
        + c2 ([th]^2 [rho] + [rho][th]^2 - 3 [th][rho][th])
        + c3 ([th][rho][th]^2 + [th]^2 [rho][th])

    Every coefficient is 0/0 at theta = 0; their series limits are
    1/6, 1/24 and 1/120.

    Args:
        rho: (..., 3) translational part of the twist
        theta: (..., 3) rotational part of the twist

    Returns:
        (..., 3, 3) Q matrix
    """
    angle_sq = jnp.sum(theta * theta, axis=-1)[..., None, None]
    c1, c2, c3 = _q_coefficients(angle_sq)

    P = so3.skew_symmetric(rho)
    W = so3.skew_symmetric(theta)
    WP = jnp.matmul(W, P)
    PW = jnp.matmul(P, W)
    WPW = jnp.matmul(WP, W)
    WW = jnp.matmul(W, W)

    return (0.5 * P
            + c1 * (WP + PW + WPW)
            + c2 * (jnp.matmul(WW, P) + jnp.matmul(P, WW) - 3.0 * WPW)
            + c3 * (jnp.matmul(WPW, W) + jnp.matmul(W, WPW)))


def left_jacobian(xi: Array) -> Array:
    """
    Left Jacobian of the SE(3) exponential map.

    [[J_l(theta), Q(rho, theta)],
     [0,          J_l(theta)   ]]

    Args:
        xi: (..., 6) twists [rho, theta]

    Returns:
        (..., 6, 6) left Jacobians
    """
    rho, theta = xi[..., :3], xi[..., 3:]
    return _block_upper(so3.left_jacobian(theta), q_matrix(rho, theta))


def right_jacobian(xi: Array) -> Array:
    """Right Jacobian of the SE(3) exponential map: J_r(xi) = J_l(-xi)."""
    return left_jacobian(-xi)


def adjoint(T: Array) -> Array:
    """
    Adjoint of T on [rho, theta] twists: Ad(T) xi = vee(T hat(xi) T^-1).

    Args:
        T: (..., 4, 4) homogeneous transforms

    Returns:
        (..., 6, 6) matrices [[R, [t]x R], [0, R]]
    """
    R = T[..., :3, :3]
    return _block_upper(R, jnp.matmul(so3.skew_symmetric(T[..., :3, 3]), R))


def compose_jacobian(T2: Array) -> Array:
    """
    Jacobian of T1 @ T2 with respect to T1 under right perturbations.

    Equal to the adjoint of T2^-1: [[R2^T, -R2^T [t2]_x], [0, R2^T]].

    Args:
        T2: (..., 4, 4) right-hand transformation matrix

    Returns:
        (..., 6, 6) Jacobian
    """
    R2_inv = so3.inverse(T2[..., :3, :3])
    t2_skew = so3.skew_symmetric(T2[..., :3, 3])
    return _block_upper(R2_inv, -jnp.matmul(R2_inv, t2_skew))


def act_jacobian(T: Array, x: Array) -> Array:
    """
    Jacobian of the point action T * x with respect to T.

    Args:
        T: (..., 4, 4) transformation matrix
        x: (..., 3) point the action is evaluated at

    Returns:
        (..., 3, 6) Jacobian [R, -R [x]_x]
    """
    R = T[..., :3, :3]
    x_skew = so3.skew_symmetric(x)
    return jnp.concatenate([R, -jnp.matmul(R, x_skew)], axis=-1)
