"""
Error classes for configuration binding.

**Conceptual**: Binding fails in two very different places:
  - Eagerly, while raw entries are added (a token without the `--` prefix).
  - Lazily, when an accessor on a typed view is read and its raw value
    cannot be converted to the declared type.

Every error derives from ConfigurationError, so callers can catch all
binding failures at once, or catch a specific subclass for fine-grained
handling. Conversion errors additionally derive from the closest built-in
exception (ValueError for bad literals, TypeError for mismatched objects),
so generic handlers keep working.
"""

from typing import Any, Optional


class ConfigurationError(Exception):
    """
    Base exception for all configuration binding errors.
    """
    pass


class MalformedArgumentError(ConfigurationError, ValueError):
    """
    Raised when a token passed to add_tokens lacks the argument prefix.

    **Recovery**: Only `--key` and `--key=value` tokens are supported;
    positional arguments must be filtered out before adding tokens.

    Attributes:
        token: The offending token.
    """

    def __init__(self, token: str, prefix: str = "--"):
        self.token = token
        super().__init__(
            f"Unsupported argument format: {token!r} (expected {prefix}key or {prefix}key=value)"
        )


class ConversionError(ConfigurationError):
    """
    Base exception for failures while converting a raw entry on access.

    Attributes:
        key: Lookup key of the entry being converted (None when converting
             outside of an accessor, e.g. directly through TypeConverter).
        target: TypeDescriptor the value was being converted to.
        value: The raw value (or array element) that failed.
    """

    def __init__(self, message: str, key: Optional[str] = None, target: Any = None, value: Any = None):
        self.key = key
        self.target = target
        self.value = value
        if key is not None:
            message = f"{key}: {message}"
        super().__init__(message)


class UnsupportedConversionError(ConversionError):
    """
    Raised when the target type has no conversion rule for a string value.
    """
    pass


class InvalidLiteralError(ConversionError, ValueError):
    """
    Raised when a raw string cannot be parsed as the numeric or enum target.

    Out-of-range integers (e.g. 200 for a byte) are invalid literals too.
    """
    pass


class AmbiguousCharacterError(ConversionError, ValueError):
    """
    Raised when a character target receives a string whose length is not 1.
    """
    pass


class TypeMismatchError(ConversionError, TypeError):
    """
    Raised when a non-string raw value cannot satisfy the target type.

    Typical causes: a bare flag (`--name`) read through a string accessor,
    an accumulated list read through a scalar accessor, or an object merged
    via add_mapping whose type does not match the accessor.
    """
    pass
