"""
Type converter: raw entry values -> typed accessor values.

**Conceptual**: Raw entries are mostly strings (`"3"`, `"0.9"`, `"a,b,c"`),
sometimes a bare-flag True, an accumulated list of strings, or an object
merged through a mapping. The converter turns one raw value into the type an
accessor declares, dispatching purely on the descriptor's kind.

**Order of rules**:
  1. Already typed: a value that structurally satisfies the target (an int
     within range for INT, a bool for BOOLEAN, an enum member, ...) is
     returned unchanged.
  2. Nested contract: bound over the same entry store.
  3. Array: a list/tuple converts element by element (the multi-token
     path); a string is split on the list separator, pieces are trimmed and
     empty pieces dropped (the comma path).
  4. Any other non-string value: TypeMismatchError.
  5. String parsing by kind (table below).

| kind                    | string rule                                         |
|-------------------------|-----------------------------------------------------|
| STRING                  | unchanged                                           |
| BYTE/SHORT/INT/LONG     | `[+-]digits` within the dtype range, numpy scalar   |
| FLOAT/DOUBLE            | decimal literal, NaN or Infinity, numpy scalar      |
| BOOLEAN                 | `true` (any case) is True, everything else False    |
| CHAR                    | exactly one character                               |
| ENUM                    | exact variant name                                  |
| OPAQUE                  | no rule: UnsupportedConversionError                 |

Numeric results are numpy scalars of the declared width (np.int8 for a
byte, np.float32 for a float, ...). Arrays of numeric or boolean elements
become read-only numpy arrays of that dtype; other arrays become tuples.
Arrays merged through add_mapping pass through as given (the caller owns
them).
"""

import logging
import re
from typing import Any, Callable, Optional

import numpy as np

from cfgbind.binding.views import TypedView, view_contract
from cfgbind.config.settings import BindingSettings, get_settings
from cfgbind.schema.contracts import (
    FLOATING_KINDS,
    INTEGER_KINDS,
    SchemaContract,
    TypeDescriptor,
    TypeKind,
)
from cfgbind.utils.errors import (
    AmbiguousCharacterError,
    InvalidLiteralError,
    TypeMismatchError,
    UnsupportedConversionError,
)

logger = logging.getLogger(__name__)

_INTEGER_LITERAL = re.compile(r"[+-]?[0-9]+")
_FLOAT_LITERAL = re.compile(
    r"[+-]?(NaN|Infinity|([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?)"
)


class TypeConverter:
    """
    Converts raw entry values to the types declared by accessors.

    The converter itself is stateless; memoization lives in ConversionCache.

    Args:
        bind: Callback that binds a nested contract over the same entry store.
              Without it, nested contracts cannot be converted.
        settings: Provides the list separator. Defaults to global settings.
    """

    def __init__(
        self,
        bind: Optional[Callable[[SchemaContract], TypedView]] = None,
        settings: Optional[BindingSettings] = None,
    ):
        self.bind = bind
        self.settings = settings or get_settings()

    def convert(self, target: TypeDescriptor, raw: Any, key: Optional[str] = None) -> Any:
        """
        Convert `raw` to the type described by `target`.

        Args:
            target: Declared accessor type.
            raw: Raw entry value (string, flag, list of strings or object).
            key: Lookup key, only used to make error messages actionable.

        Returns:
            The typed value.

        Raises:
            UnsupportedConversionError: No rule converts a string to target.
            InvalidLiteralError: Unparsable or out-of-range number, unknown
                                 enum literal.
            AmbiguousCharacterError: CHAR target with a string of length != 1.
            TypeMismatchError: Non-string raw value that cannot satisfy target.
        """
        if self._is_already_typed(target, raw):
            return raw

        kind = target.kind
        if kind is TypeKind.CONTRACT:
            if self.bind is None:
                raise UnsupportedConversionError(
                    f"no binder available for nested {target}", key, target, raw
                )
            return self.bind(target.contract)

        if kind is TypeKind.ARRAY:
            return self._convert_array(target, raw, key)

        if not isinstance(raw, str):
            raise TypeMismatchError(
                f"Illegal conversion from non-string object to different type: "
                f"{type(raw).__name__} to {target}",
                key, target, raw,
            )

        value = self._convert_string(target, raw, key)
        logger.debug(f"converted {key!r}: {raw!r} -> {target}")
        return value

    def _is_already_typed(self, target: TypeDescriptor, value: Any) -> bool:
        if target.kind is TypeKind.CONTRACT:
            return isinstance(value, TypedView) and view_contract(value) is target.contract
        return target.accepts(value)

    def _convert_array(self, target: TypeDescriptor, raw: Any, key: Optional[str]) -> Any:
        if isinstance(raw, (list, tuple)):
            pieces = list(raw)
        elif isinstance(raw, str):
            pieces = [piece.strip() for piece in raw.split(self.settings.list_separator)]
            pieces = [piece for piece in pieces if piece]
        else:
            raise TypeMismatchError(
                f"Illegal conversion from {type(raw).__name__} to {target}",
                key, target, raw,
            )

        element = target.element
        values = [self.convert(element, piece, key) for piece in pieces]
        logger.debug(f"converted {key!r}: {len(values)} elements -> {target}")

        if element.dtype is not None:
            # cached and shared by every view of this accessor
            result = np.array(values, dtype=element.dtype)
            result.flags.writeable = False
            return result
        return tuple(values)

    def _convert_string(self, target: TypeDescriptor, raw: str, key: Optional[str]) -> Any:
        kind = target.kind

        if kind is TypeKind.STRING:
            return raw

        if kind in INTEGER_KINDS:
            if not _INTEGER_LITERAL.fullmatch(raw):
                raise InvalidLiteralError(f"For input string: {raw!r} ({target})", key, target, raw)
            value = int(raw)
            limits = np.iinfo(target.dtype)
            if not limits.min <= value <= limits.max:
                raise InvalidLiteralError(
                    f"Value out of range for {target}: {raw!r} "
                    f"(allowed {limits.min}..{limits.max})",
                    key, target, raw,
                )
            return target.dtype.type(value)

        if kind in FLOATING_KINDS:
            if not _FLOAT_LITERAL.fullmatch(raw):
                raise InvalidLiteralError(f"For input string: {raw!r} ({target})", key, target, raw)
            # narrowing to float32 saturates to +/-inf, like a float parse would
            with np.errstate(over="ignore"):
                return target.dtype.type(float(raw))

        if kind is TypeKind.BOOLEAN:
            return raw.lower() == "true"

        if kind is TypeKind.CHAR:
            if len(raw) != 1:
                raise AmbiguousCharacterError(
                    f"Character conversion needs exactly one character, got: {raw!r}",
                    key, target, raw,
                )
            return raw

        if kind is TypeKind.ENUM:
            try:
                return target.variant(raw)
            except KeyError:
                names = [name for name, _ in target.variants]
                raise InvalidLiteralError(
                    f"No {target} constant {raw!r} (expected one of {names})",
                    key, target, raw,
                ) from None

        raise UnsupportedConversionError(f"Unsupported conversion to {target}", key, target, raw)
