"""se(N) algebra elements.

A ``Twist`` holds either the dof(N) coordinate vector [rho, theta] or the
(N+1)x(N+1) matrix form; ``form`` records which. ``hat`` and ``vee`` convert
between the two, and every algebra operation works on the coordinates.
"""

import enum

import jax
import jax.numpy as jnp
import numpy as np
from flax import struct

from ..transforms import rotation, se3

Array = jax.Array


class TwistForm(enum.Enum):
    VECTOR = "vector"
    MATRIX = "matrix"


def dof(n: int) -> int:
    """Degrees of freedom of SE(n): n(n+1)/2."""
    return n * (n + 1) // 2


def hat(n: int, xi: Array) -> Array:
    """Map dof(n) coordinates [rho, theta] to the (n+1)x(n+1) matrix form."""
    xi = jnp.asarray(xi)
    if xi.shape != (dof(n),):
        raise ValueError(f"se({n}) coordinates must have shape ({dof(n)},), got {xi.shape}")

    Omega = rotation.get_module(n).hat(xi[n:])
    upper = jnp.concatenate([Omega, xi[:n, None]], axis=-1)
    bottom = jnp.zeros((1, n + 1), dtype=upper.dtype)
    return jnp.concatenate([upper, bottom], axis=-2)


def vee(n: int, X: Array) -> Array:
    """Inverse of hat(): read the translation column and the rotation block."""
    X = jnp.asarray(X)
    if X.shape != (n + 1, n + 1):
        raise ValueError(f"se({n}) matrices must have shape ({n + 1}, {n + 1}), got {X.shape}")

    omega = rotation.get_module(n).vee(X[:n, :n])
    return jnp.concatenate([X[:n, n], omega], axis=-1)


def _is_traced(x) -> bool:
    return isinstance(x, jax.core.Tracer)


@struct.dataclass
class Twist:
    """Immutable se(N) element in vector or matrix form.

    Attributes:
        data: (dof(N),) coordinates or (N+1, N+1) matrix, depending on ``form``.
        dim: N, the dimension of the space the motion acts on.
        form: Which representation ``data`` holds.
    """
    data: Array
    dim: int = struct.field(pytree_node=False)
    form: TwistForm = struct.field(pytree_node=False, default=TwistForm.VECTOR)

    # Constructors
    @classmethod
    def from_vector(cls, dim: int, xi: Array) -> "Twist":
        xi = jnp.asarray(xi)
        if xi.shape != (dof(dim),):
            raise ValueError(
                f"se({dim}) coordinates must have shape ({dof(dim)},), got {xi.shape}"
            )
        return cls(data=xi, dim=dim, form=TwistForm.VECTOR)

    @classmethod
    def from_matrix(cls, dim: int, X: Array) -> "Twist":
        X = jnp.asarray(X)
        if X.shape != (dim + 1, dim + 1):
            raise ValueError(
                f"se({dim}) matrices must have shape ({dim + 1}, {dim + 1}), got {X.shape}"
            )
        # Needs concrete values, so it cannot run on traced inputs.
        if not _is_traced(X) and not rotation.is_skew_symmetric(X[:dim, :dim]):
            raise ValueError(f"upper-left {dim}x{dim} block of an se({dim}) matrix must be skew-symmetric")
        return cls(data=X, dim=dim, form=TwistForm.MATRIX)

    @classmethod
    def zero(cls, dim: int, dtype=None) -> "Twist":
        return cls.from_vector(dim, jnp.zeros(dof(dim), dtype=dtype))

    @staticmethod
    def dof_for(n: int) -> int:
        return dof(n)

    @property
    def dof(self) -> int:
        return dof(self.dim)

    # Representations
    def vector(self) -> Array:
        if self.form is TwistForm.VECTOR:
            return self.data
        return vee(self.dim, self.data)

    def matrix(self) -> Array:
        if self.form is TwistForm.MATRIX:
            return self.data
        return hat(self.dim, self.data)

    def as_vector_form(self) -> "Twist":
        return Twist.from_vector(self.dim, self.vector())

    @property
    def rho(self) -> Array:
        return self.vector()[: self.dim]

    @property
    def theta(self) -> Array:
        return self.vector()[self.dim:]

    # Vector space operations
    def _check_same_dim(self, other: "Twist") -> None:
        if self.dim != other.dim:
            raise ValueError(f"operation between se({self.dim}) and se({other.dim}) is not defined")

    def identity(self) -> "Twist":
        """Zero element with the dtype of this twist."""
        return Twist.from_vector(self.dim, jnp.zeros_like(self.vector()))

    def inverse(self) -> "Twist":
        """Additive inverse."""
        return Twist.from_vector(self.dim, -self.vector())

    def __neg__(self) -> "Twist":
        return self.inverse()

    def __add__(self, other: "Twist") -> "Twist":
        if not isinstance(other, Twist):
            return NotImplemented
        self._check_same_dim(other)
        return Twist.from_vector(self.dim, self.vector() + other.vector())

    def __eq__(self, other) -> bool:
        if not isinstance(other, Twist) or self.dim != other.dim:
            return False
        return bool(jnp.array_equal(self.vector(), other.vector()))

    def allclose(self, other: "Twist", rtol: float = 1e-5, atol: float = 1e-8) -> bool:
        self._check_same_dim(other)
        return bool(jnp.allclose(self.vector(), other.vector(), rtol=rtol, atol=atol))

    # Jacobians of the exponential map
    def _require_se3(self, name: str) -> None:
        if self.dim != 3:
            raise NotImplementedError(f"{name} is only implemented for se(3), got se({self.dim})")

    def left_jacobian(self) -> Array:
        """(6, 6) left Jacobian [[J_l, Q], [0, J_l]] of exp at this twist."""
        self._require_se3("left_jacobian")
        return se3.left_jacobian(self.vector())

    def right_jacobian(self) -> Array:
        """(6, 6) right Jacobian, the left Jacobian at the negated twist."""
        self._require_se3("right_jacobian")
        return se3.right_jacobian(self.vector())

    def __repr__(self) -> str:
        xi = np.asarray(self.vector()) if not _is_traced(self.data) else None
        if xi is None:
            return f"Twist(dim={self.dim}, form={self.form.value}, data={self.data})"
        if self.dim == 3:
            names = ("x", "y", "z", "theta_x", "theta_y", "theta_z")
            fields = ", ".join(f"{name}={value}" for name, value in zip(names, xi))
            return f"Twist(dim=3, {fields})"
        return f"Twist(dim={self.dim}, xi={xi.tolist()})"
