"""Tests for SE(N) group elements."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from jax_rigid_motions.core import RigidTransform
from jax_rigid_motions.transforms import so2, so3


def random_transform(key, dim=3):
    key_rot, key_trans = jax.random.split(key)
    if dim == 3:
        R = so3.exp(jax.random.uniform(key_rot, (3,), minval=-1.5, maxval=1.5))
    else:
        R = so2.exp(jax.random.uniform(key_rot, (1,), minval=-3.0, maxval=3.0))
    t = jax.random.uniform(key_trans, (dim,), minval=-5.0, maxval=5.0)
    return RigidTransform.from_rotation_translation(R, t, dim)


def test_construction_checks_shapes():
    with pytest.raises(ValueError):
        RigidTransform.from_rotation_translation(jnp.eye(3), jnp.zeros(2), 3)
    with pytest.raises(ValueError):
        RigidTransform.from_rotation_translation(jnp.eye(2), jnp.zeros(3), 3)
    with pytest.raises(ValueError):
        RigidTransform.from_rotation_translation(jnp.eye(3), jnp.zeros(3), 2)
    with pytest.raises(ValueError):
        RigidTransform.from_matrix(jnp.eye(4), 2)
    with pytest.raises(ValueError):
        RigidTransform.from_matrix(jnp.zeros((4, 3)))


def test_construction_promotes_to_float():
    g = RigidTransform.from_rotation_translation(jnp.eye(3, dtype=jnp.int32), jnp.array([1, 2, 3]))
    assert jnp.issubdtype(g.rotation.dtype, jnp.floating)
    assert jnp.issubdtype(g.translation.dtype, jnp.floating)
    assert g.dim == 3

    g32 = RigidTransform.from_rotation_translation(jnp.eye(2, dtype=jnp.float32), jnp.zeros(2, dtype=jnp.float32))
    assert g32.rotation.dtype == jnp.float32


def test_from_matrix_blocks():
    R = so3.exp(jnp.array([0.1, 0.2, 0.3]))
    p = jnp.array([1.0, 2.0, 3.0])
    T = jnp.eye(4).at[:3, :3].set(R).at[:3, 3].set(p)

    g = RigidTransform.from_matrix(T)

    assert g.dim == 3
    np.testing.assert_allclose(g.rotation, R)
    np.testing.assert_allclose(g.translation, p)
    np.testing.assert_allclose(g.as_matrix(), T)


def test_identity():
    g = RigidTransform.identity(3)
    np.testing.assert_allclose(g.as_matrix(), jnp.eye(4))
    assert g == random_transform(jax.random.PRNGKey(0)).identity_like()
    assert g.dof == 6
    assert RigidTransform.identity(2).dof == 3


@pytest.mark.parametrize("dim", [2, 3])
@given(st.integers(min_value=0, max_value=1000))
@settings(deadline=None, max_examples=25)
def test_group_axioms(dim, seed):
    k1, k2, k3 = jax.random.split(jax.random.PRNGKey(seed), 3)
    g1, g2, g3 = (random_transform(k, dim) for k in (k1, k2, k3))
    e = RigidTransform.identity(dim)

    assert ((g1 @ g2) @ g3).allclose(g1 @ (g2 @ g3), rtol=1e-12, atol=1e-12)
    assert (g1 @ e).allclose(g1, rtol=0, atol=0)
    assert (e @ g1).allclose(g1, rtol=0, atol=0)
    assert (g1 @ g1.inverse()).allclose(e, atol=1e-12)
    assert (g1.inverse() @ g1).allclose(e, atol=1e-12)


def test_inverse_block_structure():
    g = random_transform(jax.random.PRNGKey(7))
    g_inv = g.inverse()
    np.testing.assert_allclose(g_inv.rotation, g.rotation.T)
    np.testing.assert_allclose(g_inv.translation, -g.rotation.T @ g.translation)
    np.testing.assert_allclose(g_inv.as_matrix(), jnp.linalg.inv(g.as_matrix()), atol=1e-12)


def test_compose_dimension_mismatch():
    g2 = RigidTransform.identity(2)
    g3 = RigidTransform.identity(3)
    with pytest.raises(ValueError, match="SE\\(2\\) and SE\\(3\\)"):
        g2 @ g3
    with pytest.raises(ValueError):
        g3.compose(g2)
    with pytest.raises(ValueError):
        g2.allclose(g3)
    assert g2 != g3


def test_matmul_defers_to_other_operand():
    g = RigidTransform.identity(3)

    class Frame:
        def __rmatmul__(self, other):
            return ("rmatmul", other)

    assert (g @ Frame()) == ("rmatmul", g)
    with pytest.raises(TypeError):
        g @ object()
    with pytest.raises(TypeError, match="cannot compose"):
        g.compose(object())


def test_compose_matches_matrix_product():
    """Test composition of transforms."""
    # Translation by [1, 0, 0]
    t1 = RigidTransform.from_rotation_translation(jnp.eye(3), jnp.array([1.0, 0.0, 0.0]))

    # Translation by [0, 1, 0] + 90° rotation around Z
    R_z90 = so3.exp(jnp.array([0.0, 0.0, jnp.pi / 2]))
    t2 = RigidTransform.from_rotation_translation(R_z90, jnp.array([0.0, 1.0, 0.0]))

    result = t1 @ t2
    np.testing.assert_allclose(result.as_matrix(), t1.as_matrix() @ t2.as_matrix())

    transformed = result.act(jnp.array([1.0, 0.0, 0.0]))
    np.testing.assert_allclose(transformed, jnp.array([1.0, 2.0, 0.0]), rtol=1e-12, atol=1e-12)


def test_act():
    g = random_transform(jax.random.PRNGKey(3))
    x = jnp.array([0.5, -1.0, 2.0])
    np.testing.assert_allclose(g.act(x), g.rotation @ x + g.translation, rtol=1e-12)

    points = jax.random.normal(jax.random.PRNGKey(4), (10, 3))
    expected = points @ g.rotation.T + g.translation
    np.testing.assert_allclose(g.act(points), expected, rtol=1e-12, atol=1e-12)

    with pytest.raises(ValueError):
        g.act(jnp.zeros(2))


def test_act_inverse_roundtrip():
    g = random_transform(jax.random.PRNGKey(5), dim=2)
    points = jax.random.normal(jax.random.PRNGKey(6), (7, 2))
    np.testing.assert_allclose(g.inverse().act(g.act(points)), points, atol=1e-12)


def test_adjoint():
    g = random_transform(jax.random.PRNGKey(11))
    Ad = g.adjoint()
    R, t = g.rotation, g.translation

    assert Ad.shape == (6, 6)
    np.testing.assert_allclose(Ad[:3, :3], R)
    np.testing.assert_allclose(Ad[3:, 3:], R)
    np.testing.assert_allclose(Ad[3:, :3], jnp.zeros((3, 3)))
    np.testing.assert_allclose(Ad[:3, 3:], so3.skew_symmetric(t) @ R, rtol=1e-12)

    with pytest.raises(NotImplementedError):
        RigidTransform.identity(2).adjoint()


def test_adjoint_is_a_homomorphism():
    k1, k2 = jax.random.split(jax.random.PRNGKey(12))
    g1, g2 = random_transform(k1), random_transform(k2)
    np.testing.assert_allclose((g1 @ g2).adjoint(), g1.adjoint() @ g2.adjoint(), atol=1e-12)


def test_equality():
    g = random_transform(jax.random.PRNGKey(13))
    assert g == RigidTransform.from_matrix(g.as_matrix())
    assert g != g @ RigidTransform.from_rotation_translation(jnp.eye(3), jnp.array([1e-9, 0.0, 0.0]))


def test_repr():
    g = RigidTransform.from_rotation_translation(jnp.eye(2), jnp.array([1.0, 2.0]))
    assert repr(g) == "RigidTransform(dim=2, R=[[1.0, 0.0], [0.0, 1.0]], t=[1.0, 2.0])"


def test_vmap_compose():
    keys = jax.random.split(jax.random.PRNGKey(21), 8)
    gs = jax.vmap(random_transform)(keys)
    hs = jax.vmap(random_transform)(keys[::-1])

    out = jax.vmap(lambda g, h: g @ h)(gs, hs)

    assert isinstance(out, RigidTransform)
    assert out.rotation.shape == (8, 3, 3)
    for i in range(8):
        g_i = RigidTransform.from_rotation_translation(gs.rotation[i], gs.translation[i])
        h_i = RigidTransform.from_rotation_translation(hs.rotation[i], hs.translation[i])
        np.testing.assert_allclose(out.rotation[i], (g_i @ h_i).rotation, atol=1e-12)
        np.testing.assert_allclose(out.translation[i], (g_i @ h_i).translation, atol=1e-12)
