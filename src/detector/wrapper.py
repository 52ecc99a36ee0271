"""Transparent forwarding wrapper.

Python has no native proxy object, so `Wrapper` forwards operator syntax to the
original itself. Attribute and item reads/writes/deletes plus calls are routed
through the bound trap set and reported. Iterating a sequence reads each
element through the item trap, so elements come back wrapped and reported.
Other protocol operations (arithmetic, membership, conversion, comparison,
hashing, context management) are forwarded silently. `isinstance()` sees the
original's class through `__class__`.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterator, Sequence
from typing import Any


def _forward(op: Callable[[Any, Any], Any]) -> Callable[[Any, Any], Any]:
    def method(self: Any, other: Any) -> Any:
        return op(unwrap(self), unwrap(other))

    method.__name__ = f"__{op.__name__.strip('_')}__"
    return method


def _reflect(op: Callable[[Any, Any], Any]) -> Callable[[Any, Any], Any]:
    def method(self: Any, other: Any) -> Any:
        return op(unwrap(other), unwrap(self))

    method.__name__ = f"__r{op.__name__.strip('_')}__"
    return method


def _unary(op: Callable[[Any], Any]) -> Callable[[Any], Any]:
    def method(self: Any) -> Any:
        return op(unwrap(self))

    method.__name__ = f"__{op.__name__.strip('_')}__"
    return method


class Wrapper:
    """Stand-in for an original value; every interaction goes through its traps.

    Methods read through a wrapper are bound to the original, not to the
    wrapper. Calling `w.method()` is reported as an `apply`, but attribute
    access made by the method body on `self` is not.
    """

    __slots__ = ("__target", "__traps", "__weakref__")

    def __init__(self, target: Any, traps: Any) -> None:
        object.__setattr__(self, "_Wrapper__target", target)
        object.__setattr__(self, "_Wrapper__traps", traps)

    @property  # type: ignore[misc]
    def __class__(self) -> type:
        return type(self.__target)

    # Reported operations.

    def __getattr__(self, name: str) -> Any:
        # Slots not populated yet (e.g. mid-copy); avoid recursing into ourselves.
        if name.startswith("_Wrapper__"):
            raise AttributeError(name)
        return self.__traps.get_attr(self.__target, name)

    def __setattr__(self, name: str, value: Any) -> None:
        self.__traps.set_attr(self.__target, name, value)

    def __delattr__(self, name: str) -> None:
        self.__traps.delete_attr(self.__target, name)

    def __getitem__(self, key: Any) -> Any:
        return self.__traps.get_item(self.__target, key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self.__traps.set_item(self.__target, key, value)

    def __delitem__(self, key: Any) -> None:
        self.__traps.delete_item(self.__target, key)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.__traps.call(self.__target, args, kwargs)

    def __iter__(self) -> Iterator[Any]:
        target = self.__target
        if isinstance(target, Sequence):
            return self.__read_indices(target, reverse=False)
        # Mappings and sets yield keys, which are never wrapped.
        return iter(target)

    def __reversed__(self) -> Iterator[Any]:
        target = self.__target
        if isinstance(target, Sequence):
            return self.__read_indices(target, reverse=True)
        return reversed(target)

    def __read_indices(self, target: Sequence[Any], *, reverse: bool) -> Iterator[Any]:
        # Length is re-checked on every step so mutation during iteration behaves like the original.
        traps = self.__traps
        if reverse:
            index = len(target) - 1
            while 0 <= index < len(target):
                yield traps.get_item(target, index)
                index -= 1
        else:
            index = 0
            while index < len(target):
                yield traps.get_item(target, index)
                index += 1

    # Forwarded silently.

    def __repr__(self) -> str:
        return repr(self.__target)

    def __str__(self) -> str:
        return str(self.__target)

    def __format__(self, format_spec: str) -> str:
        return format(self.__target, format_spec)

    def __bool__(self) -> bool:
        return bool(self.__target)

    def __len__(self) -> int:
        return len(self.__target)

    def __contains__(self, item: Any) -> bool:
        return unwrap(item) in self.__target

    def __dir__(self) -> list[str]:
        return dir(self.__target)

    def __eq__(self, other: Any) -> bool:
        return self.__target == unwrap(other)

    def __ne__(self, other: Any) -> bool:
        return self.__target != unwrap(other)

    def __lt__(self, other: Any) -> bool:
        return self.__target < unwrap(other)

    def __le__(self, other: Any) -> bool:
        return self.__target <= unwrap(other)

    def __gt__(self, other: Any) -> bool:
        return self.__target > unwrap(other)

    def __ge__(self, other: Any) -> bool:
        return self.__target >= unwrap(other)

    def __hash__(self) -> int:
        return hash(self.__target)

    def __int__(self) -> int:
        return int(self.__target)

    def __float__(self) -> float:
        return float(self.__target)

    def __complex__(self) -> complex:
        return complex(self.__target)

    def __index__(self) -> int:
        return operator.index(self.__target)

    def __round__(self, *ndigits: Any) -> Any:
        return round(self.__target, *ndigits)

    # Arithmetic and bitwise operators. In-place forms return the target's own
    # result, so `w.attr += x` is written back through the parent's set trap.

    __add__ = _forward(operator.add)
    __sub__ = _forward(operator.sub)
    __mul__ = _forward(operator.mul)
    __matmul__ = _forward(operator.matmul)
    __truediv__ = _forward(operator.truediv)
    __floordiv__ = _forward(operator.floordiv)
    __mod__ = _forward(operator.mod)
    __divmod__ = _forward(divmod)
    __pow__ = _forward(operator.pow)
    __lshift__ = _forward(operator.lshift)
    __rshift__ = _forward(operator.rshift)
    __and__ = _forward(operator.and_)
    __xor__ = _forward(operator.xor)
    __or__ = _forward(operator.or_)

    __radd__ = _reflect(operator.add)
    __rsub__ = _reflect(operator.sub)
    __rmul__ = _reflect(operator.mul)
    __rmatmul__ = _reflect(operator.matmul)
    __rtruediv__ = _reflect(operator.truediv)
    __rfloordiv__ = _reflect(operator.floordiv)
    __rmod__ = _reflect(operator.mod)
    __rdivmod__ = _reflect(divmod)
    __rpow__ = _reflect(operator.pow)
    __rlshift__ = _reflect(operator.lshift)
    __rrshift__ = _reflect(operator.rshift)
    __rand__ = _reflect(operator.and_)
    __rxor__ = _reflect(operator.xor)
    __ror__ = _reflect(operator.or_)

    __iadd__ = _forward(operator.iadd)
    __isub__ = _forward(operator.isub)
    __imul__ = _forward(operator.imul)
    __imatmul__ = _forward(operator.imatmul)
    __itruediv__ = _forward(operator.itruediv)
    __ifloordiv__ = _forward(operator.ifloordiv)
    __imod__ = _forward(operator.imod)
    __ipow__ = _forward(operator.ipow)
    __ilshift__ = _forward(operator.ilshift)
    __irshift__ = _forward(operator.irshift)
    __iand__ = _forward(operator.iand)
    __ixor__ = _forward(operator.ixor)
    __ior__ = _forward(operator.ior)

    __neg__ = _unary(operator.neg)
    __pos__ = _unary(operator.pos)
    __abs__ = _unary(operator.abs)
    __invert__ = _unary(operator.invert)

    # Context managers.

    def __enter__(self) -> Any:
        return self.__target.__enter__()

    def __exit__(self, *exc_info: Any) -> Any:
        return self.__target.__exit__(*exc_info)

    def __aenter__(self) -> Any:
        return self.__target.__aenter__()

    def __aexit__(self, *exc_info: Any) -> Any:
        return self.__target.__aexit__(*exc_info)

    def __aiter__(self) -> Any:
        return self.__target.__aiter__()


def is_wrapper(value: Any) -> bool:
    # type() bypasses the __class__ property.
    return type(value) is Wrapper


def unwrap(value: Any) -> Any:
    """Return the original behind a wrapper, or `value` unchanged."""
    if type(value) is Wrapper:
        return object.__getattribute__(value, "_Wrapper__target")
    return value


def traps_of(wrapper: Wrapper) -> Any:
    """Return the trap set bound to a wrapper."""
    return object.__getattribute__(wrapper, "_Wrapper__traps")
