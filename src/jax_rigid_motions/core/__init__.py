"""Value types for SE(N) and se(N) elements.

Both are immutable PyTrees with the dimension N stored as a static field,
so they can be jitted, vmapped and differentiated like plain arrays.
"""

from .rigid_transform import RigidTransform
from .twist import Twist, TwistForm, dof, hat, vee

__all__ = ["RigidTransform", "Twist", "TwistForm", "dof", "hat", "vee"]
