"""Dimension dispatch for the SO(N) kernels.

The SE(N) code is written once against the interface shared by the ``so2``
and ``so3`` modules (``hat``, ``vee``, ``exp``, ``log``, ``left_jacobian``,
``left_jacobian_inverse``); this module picks the right one for a given N.
"""

from types import ModuleType

import jax
import jax.numpy as jnp
import numpy as np

from . import so2, so3

Array = jax.Array

SKEW_TOLERANCE = 1e-9

_MODULES = {2: so2, 3: so3}


def get_module(n: int) -> ModuleType:
    """Return the SO(n) kernel module."""
    try:
        return _MODULES[n]
    except KeyError:
        raise NotImplementedError(
            f"SO({n}) is not supported, available dimensions are {sorted(_MODULES)}"
        ) from None


def dof(n: int) -> int:
    """Degrees of freedom of SO(n): n(n-1)/2."""
    return n * (n - 1) // 2


def is_skew_symmetric(M: Array, atol: float = SKEW_TOLERANCE) -> bool:
    """Check that a concrete square matrix satisfies M = -M^T within ``atol``."""
    M = np.asarray(M)
    if M.ndim != 2 or M.shape[0] != M.shape[1]:
        return False
    return bool(np.allclose(M, -M.T, rtol=0.0, atol=atol))


def identity(n: int, dtype=None) -> Array:
    """Identity rotation of dimension n."""
    return jnp.eye(n, dtype=dtype)
