"""
Typed view classes, generated once per schema contract.

**Conceptual**: A typed view is the object a caller reads configuration
from: `server.port`, `server.hosts`. Each contract gets one concrete view
class with a read-only property per accessor; every property forwards to the
binder's shared resolution algorithm with the accessor's index. There is no
per-call proxying or `__getattr__` magic, so `dir(view)`, IDE completion and
`AttributeError` on typos all behave like a normal class.

View instances are cheap: they only reference the contract and the binder
(which in turn borrows the Configuration's entry store and cache).
"""

import weakref
from typing import Any

from cfgbind.schema.contracts import SchemaContract


class TypedView:
    """Base class of all generated views."""

    __slots__ = ("_contract", "_binder")

    def __init__(self, contract: SchemaContract, binder: Any):
        self._contract = contract
        self._binder = binder

    def __setattr__(self, name: str, value: Any) -> None:
        if name in TypedView.__slots__ and not hasattr(self, name):
            object.__setattr__(self, name, value)
            return
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} of {self._contract.name}>"


def view_contract(view: TypedView) -> SchemaContract:
    """Return the contract a view was bound for."""
    return view._contract


def _make_property(index: int, doc: str) -> property:
    def resolve(self):
        return self._binder.resolve(self._contract, index)

    return property(resolve, doc=doc)


# Weak keys: contracts built at runtime are released with their view class.
_view_classes: "weakref.WeakKeyDictionary[SchemaContract, type]" = weakref.WeakKeyDictionary()


def view_class_for(contract: SchemaContract) -> type:
    """
    Return the generated view class for `contract` (created on first use).

    Contracts hash by identity, so each contract object maps to exactly one
    class for as long as the contract is alive.
    """
    view_class = _view_classes.get(contract)
    if view_class is not None:
        return view_class

    namespace: dict[str, Any] = {"__slots__": ()}
    for index, accessor in enumerate(contract.accessors):
        doc = f"{accessor.name}: {accessor.type}"
        if accessor.key is not None:
            doc += f" (key {accessor.key!r})"
        namespace[accessor.name] = _make_property(index, doc)

    class_name = contract.name if contract.name.isidentifier() else "Contract"
    view_class = type(f"{class_name}View", (TypedView,), namespace)
    _view_classes[contract] = view_class
    return view_class
