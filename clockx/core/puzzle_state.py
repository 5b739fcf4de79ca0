from __future__ import annotations

from typing import Any, Type, TypeVar

from xtructure import FieldDescriptor, Xtructurable, xtructure_dataclass

T = TypeVar("T")

FieldDescriptor = FieldDescriptor


class PuzzleState(Xtructurable):
    """
    Marker base-class for ClockX states.

    Dial grids are stored packed (4 bits per dial) and expose `.packed` /
    `.unpacked` views; classes are created with `@state_dataclass`.
    """
    pass


def state_dataclass(cls: Type[T] | None = None, **kwargs: Any):
    """
    Decorator turning a class into a JAX-compatible xtructure dataclass.

    - Asks xtructure for its bitpacking helpers with `bitpack="auto"` unless the
      caller overrides it.
    - Classes that neither define nor receive `.packed` / `.unpacked` get identity
      properties, so callers can always write `state.unpacked.dials`.
    """

    def wrap(target_cls: Type[T]) -> Type[T]:
        call_kwargs = dict(kwargs)
        call_kwargs.setdefault("bitpack", "auto")

        try:
            dc_cls = xtructure_dataclass(target_cls, **call_kwargs)
        except TypeError:
            # older xtructure releases do not know `bitpack=`
            call_kwargs.pop("bitpack", None)
            dc_cls = xtructure_dataclass(target_cls, **call_kwargs)

        has_packed = hasattr(dc_cls, "packed")
        has_unpacked = hasattr(dc_cls, "unpacked")

        if not has_packed and not has_unpacked:

            def identity(self) -> Any:
                return self

            setattr(dc_cls, "packed", property(identity))
            setattr(dc_cls, "unpacked", property(identity))

        elif has_packed != has_unpacked:
            raise ValueError(
                "State class must implement both packing and unpacking (or neither)."
            )

        return dc_cls

    if cls is None:
        return wrap
    return wrap(cls)
