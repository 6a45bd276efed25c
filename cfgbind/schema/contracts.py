"""
Schema contracts: named, typed descriptions of a configuration shape.

**Conceptual**: A SchemaContract is the single place where a caller declares
what a configuration looks like: which accessors exist, which type each one
returns, which default applies when no raw entry is present, and which raw
key to read when the accessor name differs from the external key (for
example `user.home`, which is not a valid Python identifier).

Contracts are plain data. They hold no state and never touch raw entries;
the binder in `cfgbind.binding` reads them to build typed views.

**Type descriptors** are explicit metadata, captured once when the contract
is defined:
  - Numeric kinds carry the numpy dtype that fixes their width
    (BYTE=int8, SHORT=int16, INT=int32, LONG=int64, FLOAT=float32,
    DOUBLE=float64), so out-of-range literals are rejected.
  - Enum descriptors carry their variant names and values.
  - Array descriptors carry their element descriptor.
  - Contract descriptors carry the nested contract.

Usage example:
    >>> server = SchemaContract("Server", [
    ...     Accessor("port", INT, default=8080),
    ...     Accessor("hosts", array_of(STRING), default=()),
    ...     Accessor("home", STRING, key="user.home"),
    ... ])
"""

import keyword
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterator, Mapping, Optional, Sequence, Union

import numpy as np


class TypeKind(Enum):
    """Structural kind of a declared accessor type."""
    STRING = "string"
    BYTE = "byte"
    SHORT = "short"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    CHAR = "char"
    ENUM = "enum"
    ARRAY = "array"
    CONTRACT = "contract"
    OPAQUE = "opaque"


INTEGER_KINDS = frozenset({TypeKind.BYTE, TypeKind.SHORT, TypeKind.INT, TypeKind.LONG})
FLOATING_KINDS = frozenset({TypeKind.FLOAT, TypeKind.DOUBLE})


def _is_bool(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


@dataclass(frozen=True)
class TypeDescriptor:
    """
    Declared return type of an accessor.

    Prefer the module-level constants (INT, STRING, ...) and factories
    (enum_of, array_of, contract_of, opaque) over constructing this directly.

    Attributes:
        kind: Structural kind used by the converter for dispatch.
        dtype: numpy dtype for numeric and boolean kinds, else None.
        element: Element descriptor for ARRAY, else None.
        variants: (name, value) pairs for ENUM, in declaration order.
        contract: Nested SchemaContract for CONTRACT.
        py_type: Python type for OPAQUE (and the enum class for ENUM, when
                 the variants came from one).
        label: Human-readable name used in error messages.
    """
    kind: TypeKind
    dtype: Optional[np.dtype] = None
    element: Optional["TypeDescriptor"] = None
    variants: tuple = ()
    contract: Optional["SchemaContract"] = None
    py_type: Optional[type] = None
    label: str = ""

    @property
    def is_numeric(self) -> bool:
        return self.kind in INTEGER_KINDS or self.kind in FLOATING_KINDS

    def variant(self, name: str) -> Any:
        """Return the enum value named `name`, or raise KeyError."""
        for variant_name, value in self.variants:
            if variant_name == name:
                return value
        raise KeyError(name)

    def accepts(self, value: Any) -> bool:
        """
        Return True if `value` already satisfies this type without parsing.

        This is a structural check: an int within range for INT, a bool for
        BOOLEAN, an enum member for ENUM, a numpy array of the element dtype
        for numeric ARRAY, an instance of the type for OPAQUE. Bools never
        count as numbers. CONTRACT is never accepted here; views are checked
        by the converter.
        """
        kind = self.kind
        if kind is TypeKind.STRING:
            return isinstance(value, str)
        if kind in INTEGER_KINDS:
            if not isinstance(value, (int, np.integer)) or _is_bool(value):
                return False
            limits = np.iinfo(self.dtype)
            return limits.min <= value <= limits.max
        if kind in FLOATING_KINDS:
            return isinstance(value, (int, float, np.integer, np.floating)) and not _is_bool(value)
        if kind is TypeKind.BOOLEAN:
            return _is_bool(value)
        if kind is TypeKind.CHAR:
            return isinstance(value, str) and len(value) == 1
        if kind is TypeKind.ENUM:
            if self.py_type is not None:
                return isinstance(value, self.py_type)
            # strings always go through the literal-name lookup; True must not match 1
            return not isinstance(value, str) and any(
                value is variant or (type(value) is type(variant) and value == variant)
                for _, variant in self.variants
            )
        if kind is TypeKind.ARRAY:
            return (
                isinstance(value, np.ndarray)
                and self.element.dtype is not None
                and value.dtype == self.element.dtype
            )
        if kind is TypeKind.OPAQUE:
            return isinstance(value, self.py_type)
        return False

    def normalize_default(self, value: Any) -> Any:
        """
        Check a declared default against this type and give it the shape a
        converted value would have.

        Numeric defaults become numpy scalars of the declared width. Array
        defaults given as lists or tuples become read-only numpy arrays for
        numeric and boolean elements, tuples otherwise.

        Raises:
            ValueError: If the default does not satisfy this type.
        """
        if self.kind is TypeKind.ARRAY:
            element = self.element
            if self.accepts(value):
                items = value
            elif isinstance(value, (list, tuple)):
                items = [element.normalize_default(item) for item in value]
            else:
                raise ValueError(f"default {value!r} is not a valid {self}")
            if element.dtype is not None:
                array = np.array(items, dtype=element.dtype)
                array.flags.writeable = False
                return array
            return tuple(items)

        if not self.accepts(value):
            raise ValueError(f"default {value!r} is not a valid {self}")
        if self.is_numeric:
            return self.dtype.type(value)
        if self.kind is TypeKind.BOOLEAN:
            return bool(value)
        return value

    def __str__(self) -> str:
        return self.label or self.kind.value


STRING = TypeDescriptor(TypeKind.STRING, label="string")
BYTE = TypeDescriptor(TypeKind.BYTE, dtype=np.dtype(np.int8), label="byte")
SHORT = TypeDescriptor(TypeKind.SHORT, dtype=np.dtype(np.int16), label="short")
INT = TypeDescriptor(TypeKind.INT, dtype=np.dtype(np.int32), label="int")
LONG = TypeDescriptor(TypeKind.LONG, dtype=np.dtype(np.int64), label="long")
FLOAT = TypeDescriptor(TypeKind.FLOAT, dtype=np.dtype(np.float32), label="float")
DOUBLE = TypeDescriptor(TypeKind.DOUBLE, dtype=np.dtype(np.float64), label="double")
BOOLEAN = TypeDescriptor(TypeKind.BOOLEAN, dtype=np.dtype(np.bool_), label="boolean")
CHAR = TypeDescriptor(TypeKind.CHAR, label="char")


def enum_of(
    enum_type: Union[type, Mapping[str, Any]],
    name: Optional[str] = None,
) -> TypeDescriptor:
    """
    Describe an enum-typed accessor.

    Args:
        enum_type: Either an Enum subclass (its member names, aliases
                   included, become the accepted literals) or an explicit
                   mapping of literal name -> value.
        name: Label for error messages. Defaults to the Enum class name.

    Returns:
        ENUM TypeDescriptor with the variants captured at call time.

    Raises:
        TypeError: If enum_type is neither an Enum subclass nor a mapping.
        ValueError: If no variants are given.
    """
    if isinstance(enum_type, type) and issubclass(enum_type, Enum):
        variants = tuple(enum_type.__members__.items())
        py_type = enum_type
        label = name or enum_type.__name__
    elif isinstance(enum_type, Mapping):
        variants = tuple(enum_type.items())
        py_type = None
        label = name or "enum"
    else:
        raise TypeError(
            f"enum_of expects an Enum subclass or a mapping of literals, got: {enum_type!r}"
        )

    if not variants:
        raise ValueError(f"Enum {label} declares no variants")

    return TypeDescriptor(TypeKind.ENUM, variants=variants, py_type=py_type, label=f"enum {label}")


def array_of(element: TypeDescriptor) -> TypeDescriptor:
    """Describe an array accessor whose elements are converted as `element`."""
    _require_descriptor(element, "array element")
    return TypeDescriptor(TypeKind.ARRAY, element=element, label=f"array<{element}>")


def contract_of(contract: "SchemaContract") -> TypeDescriptor:
    """Describe an accessor that returns a nested typed view of `contract`."""
    if not isinstance(contract, SchemaContract):
        raise TypeError(f"contract_of expects a SchemaContract, got: {contract!r}")
    return TypeDescriptor(TypeKind.CONTRACT, contract=contract, label=f"contract {contract.name}")


def opaque(py_type: type) -> TypeDescriptor:
    """
    Describe an accessor of an arbitrary Python type.

    Opaque accessors have no string conversion rule: they are satisfied only
    by objects of `py_type` merged through add_mapping. A raw string yields
    UnsupportedConversionError on access.
    """
    if not isinstance(py_type, type):
        raise TypeError(f"opaque expects a type, got: {py_type!r}")
    return TypeDescriptor(TypeKind.OPAQUE, py_type=py_type, label=py_type.__name__)


def _require_descriptor(value: Any, what: str) -> None:
    if not isinstance(value, TypeDescriptor):
        raise TypeError(f"{what} must be a TypeDescriptor, got: {value!r}")


@dataclass(frozen=True)
class Accessor:
    """
    One named, typed field of a schema contract.

    Attributes:
        name: Attribute name on the typed view; also the lookup key unless
              `key` is given.
        type: Declared return type.
        default: Value returned when no raw entry exists. Not allowed for
                 contract-typed accessors (nested contracts are always bound).
        key: Name-mapping override: raw key to read instead of `name`.
    """
    name: str
    type: TypeDescriptor
    default: Any = None
    key: Optional[str] = None

    @property
    def lookup_key(self) -> str:
        return self.key if self.key is not None else self.name


@dataclass(frozen=True, eq=False)
class SchemaContract:
    """
    Named, immutable description of a configuration shape.

    Contracts compare and hash by identity: two contracts with the same name
    and accessors are still different contracts, and each one gets its own
    cache slots and view class.

    Raises (on construction):
        TypeError: If an accessor is not an Accessor or its type is not a
                   TypeDescriptor.
        ValueError: On duplicate names, names that are not public Python
                    identifiers, a default on a contract-typed accessor, or
                    a default that does not satisfy the declared type.

    Defaults are stored normalized (see TypeDescriptor.normalize_default),
    so a default reads back with the same type as a converted value.
    """
    name: str
    accessors: Sequence[Accessor] = ()

    def __post_init__(self):
        accessors = tuple(self.accessors)

        seen = set()
        normalized = []
        for accessor in accessors:
            if not isinstance(accessor, Accessor):
                raise TypeError(f"{self.name}: expected Accessor, got: {accessor!r}")
            _require_descriptor(accessor.type, f"{self.name}.{accessor.name} type")

            if not accessor.name.isidentifier() or keyword.iskeyword(accessor.name):
                raise ValueError(
                    f"{self.name}: accessor name {accessor.name!r} is not a valid identifier. "
                    f"Use key=... to read keys that are not identifiers."
                )
            if accessor.name.startswith("_"):
                raise ValueError(
                    f"{self.name}: accessor name {accessor.name!r} must not start with an underscore"
                )
            if accessor.name in seen:
                raise ValueError(f"{self.name}: duplicate accessor name {accessor.name!r}")
            seen.add(accessor.name)

            if accessor.type.kind is TypeKind.CONTRACT and accessor.default is not None:
                raise ValueError(
                    f"{self.name}.{accessor.name}: contract-typed accessors cannot declare a default"
                )

            if accessor.default is not None:
                try:
                    default = accessor.type.normalize_default(accessor.default)
                except ValueError as exc:
                    raise ValueError(f"{self.name}.{accessor.name}: {exc}") from None
                accessor = replace(accessor, default=default)
            normalized.append(accessor)

        # frozen dataclass: store the checked accessors as an immutable tuple
        object.__setattr__(self, "accessors", tuple(normalized))

    def index_of(self, name: str) -> int:
        """Return the position of accessor `name`, or raise KeyError."""
        for index, accessor in enumerate(self.accessors):
            if accessor.name == name:
                return index
        raise KeyError(f"{self.name} has no accessor {name!r}")

    def __iter__(self) -> Iterator[Accessor]:
        return iter(self.accessors)

    def __len__(self) -> int:
        return len(self.accessors)

    def __repr__(self) -> str:
        names = ", ".join(accessor.name for accessor in self.accessors)
        return f"SchemaContract({self.name!r}, [{names}])"
