"""SE(N) group elements.

``RigidTransform`` stores the rotation block R and translation t of the
homogeneous matrix [[R, t], [0, 1]]. The dimension N is a static pytree
field, so transforms can be passed through jit / vmap / grad, while every
operation between two transforms checks that their dimensions agree.
"""

from typing import Optional

import jax
import jax.numpy as jnp
import numpy as np
from flax import struct

from ..transforms import rotation, se3

Array = jax.Array


def _float_dtype(*arrays):
    dtype = jnp.result_type(*arrays)
    if not jnp.issubdtype(dtype, jnp.inexact):
        dtype = jnp.result_type(float)
    return dtype


@struct.dataclass
class RigidTransform:
    """Immutable SE(N) element.

    Attributes:
        rotation: (N, N) rotation matrix. Orthogonality is not checked.
        translation: (N,) translation vector.
        dim: N.
    """
    rotation: Array
    translation: Array
    dim: int = struct.field(pytree_node=False)

    # Constructors
    @classmethod
    def from_rotation_translation(
        cls, rotation: Array, translation: Array, dim: Optional[int] = None
    ) -> "RigidTransform":
        rotation = jnp.asarray(rotation)
        translation = jnp.asarray(translation)
        if dim is None:
            dim = translation.shape[0] if translation.ndim == 1 else -1
        if rotation.shape != (dim, dim):
            raise ValueError(f"rotation must have shape ({dim}, {dim}), got {rotation.shape}")
        if translation.shape != (dim,):
            raise ValueError(f"translation must have shape ({dim},), got {translation.shape}")

        dtype = _float_dtype(rotation, translation)
        return cls(rotation=rotation.astype(dtype), translation=translation.astype(dtype), dim=dim)

    @classmethod
    def from_matrix(cls, matrix: Array, dim: Optional[int] = None) -> "RigidTransform":
        matrix = jnp.asarray(matrix)
        if dim is None:
            dim = matrix.shape[0] - 1 if matrix.ndim == 2 else -1
        if matrix.shape != (dim + 1, dim + 1):
            raise ValueError(
                f"SE({dim}) matrix must have shape ({dim + 1}, {dim + 1}), got {matrix.shape}"
            )
        return cls.from_rotation_translation(matrix[:dim, :dim], matrix[:dim, dim], dim)

    @classmethod
    def identity(cls, dim: int, *, dtype=None) -> "RigidTransform":
        if dtype is None:
            dtype = jnp.result_type(float)
        return cls(
            rotation=rotation.identity(dim, dtype=dtype),
            translation=jnp.zeros(dim, dtype=dtype),
            dim=dim,
        )

    @property
    def dof(self) -> int:
        return self.dim * (self.dim + 1) // 2

    def identity_like(self) -> "RigidTransform":
        return RigidTransform.identity(self.dim, dtype=self.rotation.dtype)

    # Basic operations
    def _check_same_dim(self, other: "RigidTransform", op: str) -> None:
        if self.dim != other.dim:
            raise ValueError(f"{op} is not defined between SE({self.dim}) and SE({other.dim})")

    def _require_se3(self, name: str) -> None:
        if self.dim != 3:
            raise NotImplementedError(f"{name} is only implemented for SE(3), got SE({self.dim})")

    def inverse(self) -> "RigidTransform":
        """SE(N) inverse using the block structure: (R^T, -R^T t)."""
        R_inv = jnp.swapaxes(self.rotation, -1, -2)
        return RigidTransform(rotation=R_inv, translation=-(R_inv @ self.translation), dim=self.dim)

    def compose(self, other: "RigidTransform") -> "RigidTransform":
        """Self ∘ other (apply *other* first, then self)."""
        if not isinstance(other, RigidTransform):
            raise TypeError(f"cannot compose RigidTransform with {type(other).__name__}")
        self._check_same_dim(other, "compose")
        return RigidTransform.from_matrix(self.as_matrix() @ other.as_matrix(), self.dim)

    def __matmul__(self, other):
        if not isinstance(other, RigidTransform):
            return NotImplemented
        return self.compose(other)

    def act(self, points: Array) -> Array:
        """
        Apply the transform to a point or a stack of points.

        Args:
            points: (N,) or (..., N) points

        Returns:
            Transformed points with the input shape
        """
        points = jnp.asarray(points)
        if points.ndim == 0 or points.shape[-1] != self.dim:
            raise ValueError(f"points must have shape (..., {self.dim}), got {points.shape}")

        ones = jnp.ones_like(points[..., 0:1])
        points_h = jnp.concatenate([points, ones], axis=-1)
        transformed_h = jnp.einsum("ij,...j->...i", self.as_matrix(), points_h)
        return transformed_h[..., : self.dim]

    def as_matrix(self) -> Array:
        """(N+1, N+1) homogeneous matrix [[R, t], [0, 1]]."""
        upper = jnp.concatenate([self.rotation, self.translation[:, None]], axis=-1)
        bottom = jnp.zeros((1, self.dim + 1), dtype=upper.dtype).at[0, -1].set(1.0)
        return jnp.concatenate([upper, bottom], axis=-2)

    def adjoint(self) -> Array:
        """(6, 6) adjoint [[R, [t]_x R], [0, R]]."""
        self._require_se3("adjoint")
        return se3.adjoint(self.as_matrix())

    def __eq__(self, other) -> bool:
        if not isinstance(other, RigidTransform) or self.dim != other.dim:
            return False
        return bool(jnp.array_equal(self.as_matrix(), other.as_matrix()))

    def allclose(self, other: "RigidTransform", rtol: float = 1e-5, atol: float = 1e-8) -> bool:
        self._check_same_dim(other, "allclose")
        return bool(jnp.allclose(self.as_matrix(), other.as_matrix(), rtol=rtol, atol=atol))

    def __repr__(self) -> str:
        if isinstance(self.rotation, jax.core.Tracer):
            return f"RigidTransform(dim={self.dim}, R={self.rotation}, t={self.translation})"
        R = np.asarray(self.rotation).tolist()
        t = np.asarray(self.translation).tolist()
        return f"RigidTransform(dim={self.dim}, R={R}, t={t})"
