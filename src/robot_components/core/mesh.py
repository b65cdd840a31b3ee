"""Minimal triangle mesh container."""

from typing import Sequence

import jax
import jax.numpy as jnp
from flax import struct

from ..transforms import se3

Array = jax.Array


@struct.dataclass
class Mesh:
    """Triangle mesh as a vertex array (N, 3) and a face index array (M, 3)."""
    vertices: Array
    faces: Array

    @classmethod
    def empty(cls) -> "Mesh":
        return cls(vertices=jnp.zeros((0, 3)), faces=jnp.zeros((0, 3), dtype=jnp.int32))

    @classmethod
    def create(cls, vertices, faces=None) -> "Mesh":
        vertices = jnp.asarray(vertices, dtype=jnp.float64).reshape(-1, 3)
        if faces is None:
            faces = jnp.zeros((0, 3), dtype=jnp.int32)
        faces = jnp.asarray(faces, dtype=jnp.int32).reshape(-1, 3)
        return cls(vertices=vertices, faces=faces)

    @property
    def is_empty(self) -> bool:
        return self.vertices.shape[0] == 0

    def transform(self, T: Array) -> "Mesh":
        """A copy of this mesh with its vertices moved by `T`."""
        if self.is_empty:
            return self
        return self.replace(vertices=se3.apply(T, self.vertices))


def join_meshes(meshes: Sequence[Mesh]) -> Mesh:
    """Append `meshes` into one, offsetting face indices."""
    meshes = [m for m in meshes if not m.is_empty]
    if not meshes:
        return Mesh.empty()
    offsets = [0]
    for m in meshes[:-1]:
        offsets.append(offsets[-1] + m.vertices.shape[0])
    return Mesh(
        vertices=jnp.concatenate([m.vertices for m in meshes]),
        faces=jnp.concatenate([m.faces + o for m, o in zip(meshes, offsets)]),
    )
