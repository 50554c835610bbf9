"""SO(3) and so(3) Lie group operations in JAX.

This module implements the mathematical foundation for 3D rotations using
rotation matrices and axis-angle representations. All functions are pure,
JIT-able, and operate on JAX arrays.
"""

import jax
import jax.numpy as jnp

Array = jax.Array

# Below this angle the closed forms are replaced by their Taylor series.
SMALL_ANGLE = 1e-8
JACOBIAN_SMALL_ANGLE = 1e-6

# Above pi - NEAR_PI the axis is recovered from the symmetric part of R.
NEAR_PI = 1e-3



def skew_symmetric(v: Array) -> Array:
    """(..., 3) vectors to the (..., 3, 3) matrices [v]x with [v]x u = v x u."""
    x, y, z = v[..., 0], v[..., 1], v[..., 2]
    zero = jnp.zeros_like(x)
    entries = jnp.stack([zero, -z, y, z, zero, -x, -y, x, zero], axis=-1)
    return entries.reshape(v.shape[:-1] + (3, 3))


def hat(omega: Array) -> Array:
    """so(3) hat operator: (..., 3) coordinates to (..., 3, 3) matrices."""
    return skew_symmetric(omega)


def vee(Omega: Array) -> Array:
    """so(3) vee operator: (..., 3, 3) skew-symmetric matrices to (..., 3) coordinates."""
    return jnp.stack([
        Omega[..., 2, 1],
        Omega[..., 0, 2],
        Omega[..., 1, 0]
    ], axis=-1)


def angle_terms(omega: Array, cutoff: float):
    """
    Squared angle, small-angle mask and a safe angle, all shaped (..., 1, 1).

    The square root only ever sees the placeholder 1.0 inside the small-angle
    region, so gradients stay finite at omega = 0.
    """
    angle_sq = jnp.sum(omega * omega, axis=-1)[..., None, None]
    small = angle_sq < cutoff * cutoff
    safe_angle = jnp.sqrt(jnp.where(small, 1.0, angle_sq))
    return angle_sq, small, safe_angle


def exp(log_r: Array) -> Array:
    """
    SO(3) exponential map: convert axis-angle vector to rotation matrix.

    Implements Rodrigues' formula on the unnormalized cross-product matrix,
    R = I + A * K + B * K^2 with A = sin(theta) / theta and
    B = (1 - cos(theta)) / theta^2.

    Args:
        log_r: (..., 3) array of axis-angle vectors

    Returns:
        (..., 3, 3) array of rotation matrices
    """
    angle_sq, small_angle, safe_angle = angle_terms(log_r, SMALL_ANGLE)

    A = jnp.where(small_angle, 1.0 - angle_sq / 6.0, jnp.sin(safe_angle) / safe_angle)
    # 1 - cos(x) = 2 sin^2(x / 2) avoids cancellation for small x
    B = jnp.where(
        small_angle,
        0.5 - angle_sq / 24.0,
        2.0 * jnp.sin(0.5 * safe_angle) ** 2 / (safe_angle * safe_angle),
    )

    K = skew_symmetric(log_r)
    I = jnp.broadcast_to(jnp.eye(3, dtype=K.dtype), K.shape)

    return I + A * K + B * jnp.matmul(K, K)


def log(R: Array) -> Array:
    """
    SO(3) logarithm map: convert rotation matrix to axis-angle vector.

    This is the inverse of exp() for angles in [0, pi]. At exactly pi the
    axis sign is not unique; the sign agreeing with the skew-symmetric part
    of R is returned (positive largest component when that part vanishes).

    Args:
        R: (..., 3, 3) array of rotation matrices

    Returns:
        (..., 3) array of axis-angle vectors
    """
    skew_part = jnp.stack([
        R[..., 2, 1] - R[..., 1, 2],
        R[..., 0, 2] - R[..., 2, 0],
        R[..., 1, 0] - R[..., 0, 1]
    ], axis=-1)

    trace = jnp.trace(R, axis1=-2, axis2=-1)
    cos_angle = (trace - 1.0) / 2.0
    sin_sq = 0.25 * jnp.sum(skew_part * skew_part, axis=-1)

    small_angle = (sin_sq < SMALL_ANGLE * SMALL_ANGLE) & (cos_angle > 0.0)
    # angle > pi - NEAR_PI, decided on cos so no angle is needed yet
    near_pi = cos_angle < -jnp.cos(NEAR_PI)

    # theta / (2 sin(theta)) -> 1/2 + theta^2 / 12 as theta -> 0, and
    # theta^2 = sin^2(theta) up to fourth order
    safe_sin = jnp.sqrt(jnp.where(small_angle | near_pi, 1.0, sin_sq))
    # atan2 stays well conditioned at both ends of [0, pi], unlike arccos
    scale = jnp.where(
        small_angle,
        0.5 + sin_sq / 12.0,
        jnp.arctan2(safe_sin, cos_angle) / (2.0 * safe_sin),
    )
    log_general = scale[..., None] * skew_part

    # Near pi: (R + R^T) / 2 - cos(theta) I = (1 - cos(theta)) n n^T
    eye = jnp.eye(3, dtype=R.dtype)
    S = 0.5 * (R + jnp.swapaxes(R, -1, -2)) - cos_angle[..., None, None] * eye
    diag_vals = jnp.diagonal(S, axis1=-2, axis2=-1)
    max_idx = jnp.argmax(diag_vals, axis=-1)
    column = jnp.take_along_axis(S, max_idx[..., None, None], axis=-1)[..., 0]
    column_sq = jnp.sum(column * column, axis=-1, keepdims=True)
    axis_pi = column / jnp.sqrt(jnp.where(near_pi[..., None], column_sq, 1.0))
    sign = jnp.where(jnp.sum(axis_pi * skew_part, axis=-1, keepdims=True) < 0, -1.0, 1.0)
    sin_pi = jnp.sqrt(jnp.where(near_pi, sin_sq, 1.0))
    angle_pi = jnp.arctan2(sin_pi, cos_angle)
    log_pi = sign * angle_pi[..., None] * axis_pi

    return jnp.where(near_pi[..., None], log_pi, log_general)


def left_jacobian(omega: Array) -> Array:
    """
    Left Jacobian of SO(3), also known as the V matrix of SE(3).

    J_l = I + (1 - cos(theta)) / theta^2 * K + (theta - sin(theta)) / theta^3 * K^2

    Args:
        omega: (..., 3) axis-angle vectors

    Returns:
        (..., 3, 3) left Jacobians
    """
    angle_sq, is_small_angle, safe_angle = angle_terms(omega, JACOBIAN_SMALL_ANGLE)

    # Coefficient A = (1 - cos(theta)) / theta^2
    # Taylor expansion for small theta: A ≈ 1/2 - theta^2/24
    A = jnp.where(
        is_small_angle,
        0.5 - angle_sq / 24.0,
        2.0 * jnp.sin(0.5 * safe_angle) ** 2 / (safe_angle * safe_angle),
    )

    # Coefficient B = (theta - sin(theta)) / theta^3
    # Taylor expansion for small theta: B ≈ 1/6 - theta^2/120
    B = jnp.where(
        is_small_angle,
        1.0 / 6.0 - angle_sq / 120.0,
        (safe_angle - jnp.sin(safe_angle)) / (safe_angle ** 3),
    )

    K = skew_symmetric(omega)
    I = jnp.broadcast_to(jnp.eye(3, dtype=K.dtype), K.shape)

    return I + A * K + B * jnp.matmul(K, K)


def left_jacobian_inverse(omega: Array) -> Array:
    """
    Closed-form inverse of the SO(3) left Jacobian.

    J_l^-1 = I - K / 2 + C * K^2 with C = (1 - (theta / 2) cot(theta / 2)) / theta^2.
    Finite for theta < 2 pi, so it stays well defined at theta = pi.

    Args:
        omega: (..., 3) axis-angle vectors

    Returns:
        (..., 3, 3) inverse left Jacobians
    """
    angle_sq, is_small_angle, safe_angle = angle_terms(omega, JACOBIAN_SMALL_ANGLE)
    half_angle = safe_angle / 2.0

    cot_half_angle = jnp.cos(half_angle) / jnp.sin(half_angle)

    # For small angles, this coefficient C -> 1/12
    C = jnp.where(
        is_small_angle,
        1.0 / 12.0 + angle_sq / 720.0,
        (1.0 - half_angle * cot_half_angle) / (safe_angle * safe_angle),
    )

    K = skew_symmetric(omega)
    I = jnp.broadcast_to(jnp.eye(3, dtype=K.dtype), K.shape)

    return I - 0.5 * K + C * jnp.matmul(K, K)


def right_jacobian(omega: Array) -> Array:
    """Right Jacobian of SO(3): J_r(omega) = J_l(-omega)."""
    return left_jacobian(-omega)


def inverse(R: Array) -> Array:
    """R^-1 = R^T, batched over leading axes."""
    return jnp.swapaxes(R, -1, -2)
