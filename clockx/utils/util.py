from typing import Type, TypeVar

import chex
import jax
import jax.numpy as jnp
import numpy as np
from tqdm import trange
from xtructure import StructuredType

T = TypeVar("T")


def to_uint8(input: chex.Array, active_bits: int = 1) -> chex.Array:
    """
    Pack an array into uint8 bytes, `active_bits` bits per value.
    Supports 1, 2, 4 and 8 bits; a dial value (1..12) needs 4.
    """
    assert active_bits in (1, 2, 4, 8), f"active_bits must be 1, 2, 4 or 8, got {active_bits}"

    if active_bits == 1:
        flatten_input = (input != 0).reshape((-1,))
        return jnp.packbits(flatten_input, axis=-1, bitorder="little")

    assert jnp.issubdtype(input.dtype, jnp.integer), (
        f"Input must be integer array for active_bits={active_bits} > 1, got dtype={input.dtype}"
    )
    values_flat = input.flatten()
    if active_bits == 8:
        return values_flat.astype(jnp.uint8)
    values_per_byte = 8 // active_bits
    padding_needed = (values_per_byte - (len(values_flat) % values_per_byte)) % values_per_byte
    if padding_needed > 0:
        values_flat = jnp.concatenate([values_flat, jnp.zeros(padding_needed, dtype=values_flat.dtype)])
    grouped_values = values_flat.reshape(-1, values_per_byte)

    def pack_group(group):
        result = jnp.uint8(0)
        for i in range(values_per_byte):
            result = result | (group[i].astype(jnp.uint8) << (i * active_bits))
        return result

    return jax.vmap(pack_group)(grouped_values)


def from_uint8(
    packed_bytes: chex.Array, target_shape: tuple[int, ...], active_bits: int = 1
) -> chex.Array:
    """
    Inverse of `to_uint8`: unpack uint8 bytes back into `target_shape`.
    """
    assert packed_bytes.dtype == jnp.uint8, f"Input must be uint8, got {packed_bytes.dtype}"
    assert active_bits in (1, 2, 4, 8), f"active_bits must be 1, 2, 4 or 8, got {active_bits}"

    num_target_elements = int(np.prod(target_shape))
    assert num_target_elements > 0, f"num_target_elements={num_target_elements} must be positive"

    if active_bits == 1:
        all_unpacked_bits = jnp.unpackbits(
            packed_bytes, count=num_target_elements, bitorder="little"
        )
        return all_unpacked_bits.reshape(target_shape).astype(jnp.bool_)
    if active_bits == 8:
        assert len(packed_bytes) >= num_target_elements, "Not enough packed data"
        return packed_bytes[:num_target_elements].reshape(target_shape)

    values_per_byte = 8 // active_bits
    mask = (1 << active_bits) - 1

    def unpack_byte(byte_val):
        return jnp.array(
            [(byte_val >> (i * active_bits)) & mask for i in range(values_per_byte)]
        )

    all_values = jax.vmap(unpack_byte)(packed_bytes).flatten()
    assert len(all_values) >= num_target_elements, "Not enough unpacked values"
    return all_values[:num_target_elements].reshape(target_shape).astype(jnp.uint8)


def add_img_parser(cls: Type[T], imgfunc: callable) -> Type[T]:
    """
    Attach an `img` method to a state class. Batched states are rendered one
    by one and stacked on a leading axis.
    """

    def get_img(self, **kwargs) -> np.ndarray:
        structured_type = self.structured_type

        if structured_type == StructuredType.SINGLE:
            return imgfunc(self, **kwargs)
        elif structured_type == StructuredType.BATCHED:
            batch_shape = self.batch_shape
            batch_len = int(np.prod(batch_shape))
            results = []
            for i in trange(batch_len):
                index = np.unravel_index(i, batch_shape)
                current_state = jax.tree_util.tree_map(lambda x: x[index], self)
                results.append(imgfunc(current_state, **kwargs))
            return np.stack(results, axis=0)
        else:
            raise ValueError(f"State is not structured: {self.shape} != {self.default_shape}")

    setattr(cls, "img", get_img)
    return cls


def coloring_str(string: str, color: tuple[int, int, int]) -> str:
    r, g, b = color
    return f"\x1b[38;2;{r};{g};{b}m{string}\x1b[0m"
