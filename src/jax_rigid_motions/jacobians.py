"""Analytic Jacobians of the SE(3) group operations.

All Jacobians use right perturbations, g -> g * exp(delta), with tangent
coordinates ordered [rho, theta]. ``jacobian(op, *args)`` dispatches on the
operation itself, e.g. ``jacobian(RigidTransform.compose, g1, g2)``.
"""

from typing import Callable, Dict, Tuple

import jax
import jax.numpy as jnp

from .core import RigidTransform, Twist
from .maps import exp, retract
from .transforms import se3

Array = jax.Array


def _require_se3(g: RigidTransform) -> None:
    if g.dim != 3:
        raise NotImplementedError(f"analytic Jacobians are only implemented for SE(3), got SE({g.dim})")


def compose_jacobians(g1: RigidTransform, g2: RigidTransform) -> Tuple[Array, Array]:
    """
    Jacobians of g1 * g2 with respect to g1 and g2.

    Returns:
        ([[R2^T, -R2^T [t2]_x], [0, R2^T]], I_6)
    """
    if g1.dim != g2.dim:
        raise ValueError(f"compose is not defined between SE({g1.dim}) and SE({g2.dim})")
    _require_se3(g1)
    J1 = se3.compose_jacobian(g2.as_matrix())
    J2 = jnp.eye(2 * g1.dim, dtype=J1.dtype)
    return J1, J2


def inverse_jacobian(g: RigidTransform) -> Array:
    """Jacobian of g^-1 with respect to g: -Ad(g)."""
    _require_se3(g)
    return -g.adjoint()


def act_jacobian(g: RigidTransform, x: Array) -> Array:
    """Jacobian of the action g * x with respect to g: [R, -R [x]_x]."""
    _require_se3(g)
    x = jnp.asarray(x)
    if x.shape != (g.dim,):
        raise ValueError(f"point must have shape ({g.dim},), got {x.shape}")
    return se3.act_jacobian(g.as_matrix(), x)


def retract_jacobians(g: RigidTransform, twist: Twist) -> Tuple[Array, Array]:
    """Jacobians of g ⊕ twist with respect to g and twist."""
    if g.dim != twist.dim:
        raise ValueError(f"retract is not defined between SE({g.dim}) and se({twist.dim})")
    _require_se3(g)
    J_g, _ = compose_jacobians(g, exp(twist))
    return J_g, twist.right_jacobian()


_JACOBIANS: Dict[Callable, Callable] = {
    RigidTransform.compose: compose_jacobians,
    RigidTransform.inverse: inverse_jacobian,
    RigidTransform.act: act_jacobian,
    retract: retract_jacobians,
}


def jacobian(op: Callable, *args):
    """Analytic Jacobian(s) of ``op`` evaluated at ``args``.

    Args:
        op: One of RigidTransform.compose, RigidTransform.inverse,
            RigidTransform.act or maps.retract.
        *args: The arguments ``op`` would be called with.

    Returns:
        A single Jacobian for inverse and act, a pair for compose and retract.
    """
    try:
        fn = _JACOBIANS[op]
    except KeyError:
        raise ValueError(f"no analytic Jacobian is registered for {op!r}") from None
    return fn(*args)
