"""
Settings for the binding engine.

**Conceptual**: The binding engine reads raw tokens like `--key=value` and
splits scalar strings like `a,b,c` into arrays. The characters involved
(prefix, key/value separator, list separator) are settings, not constants,
so that a host application can adapt the grammar to its own conventions
(for example `-D` style prefixes) without touching the engine.

**Why a frozen dataclass?**
  - Settings cannot change after a Configuration has started using them.
  - Validation runs once in `__post_init__`, so every consumer can assume
    well-formed values.
  - Easy to test (create a BindingSettings directly instead of reading the
    environment).

All defaults match the standard `--key=value` and `a,b,c` grammar. Values
can come from the process environment or a project `.env` file
(python-dotenv), the same sources the rest of an application reads.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import dotenv_values, find_dotenv


@dataclass(frozen=True)
class BindingSettings:
    """
    Token grammar and list-splitting settings.

    Attributes:
        argument_prefix: Prefix every token must start with (default "--").
                         Tokens without it raise MalformedArgumentError.
        key_value_separator: Separator between key and value inside a token
                             (default "="). Only the first occurrence splits.
        list_separator: Separator used to split a scalar string into array
                        elements (default ",").
    """
    argument_prefix: str = "--"
    key_value_separator: str = "="
    list_separator: str = ","

    def __post_init__(self):
        """Validate settings after initialization."""
        for field_name in ("argument_prefix", "key_value_separator", "list_separator"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value:
                raise ValueError(
                    f"{field_name} must be a non-empty string, got: {value!r}"
                )

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "BindingSettings":
        """
        Load binding settings from environment variables and a `.env` file.

        **Lookup order**: the process environment wins; a `.env` file fills
        in variables the environment does not set (the same precedence as
        `load_dotenv` without override). The file is read with
        `dotenv_values`, so os.environ is never modified.

        **Environment variables** (all optional):
          - CFGBIND_ARGUMENT_PREFIX: token prefix (default "--").
          - CFGBIND_KEY_VALUE_SEPARATOR: key/value separator (default "=").
          - CFGBIND_LIST_SEPARATOR: array element separator (default ",").

        Args:
            dotenv_path: `.env` file to read. Defaults to the nearest `.env`
                         found from the current working directory upwards.

        Returns:
            BindingSettings object with values loaded from environment.

        Raises:
            ValueError: If any variable is set to an empty string.

        Usage example:
            >>> # In .env file:
            >>> # CFGBIND_LIST_SEPARATOR=;
            >>> settings = BindingSettings.from_env()
            >>> print(settings.list_separator)  # ";"
        """
        path = dotenv_path or find_dotenv(usecwd=True)
        file_values = dotenv_values(path) if path else {}

        def lookup(name: str, default: str) -> str:
            if name in os.environ:
                return os.environ[name]
            value = file_values.get(name)
            # a bare `NAME` line in .env has no value
            return default if value is None else value

        return cls(
            argument_prefix=lookup("CFGBIND_ARGUMENT_PREFIX", "--"),
            key_value_separator=lookup("CFGBIND_KEY_VALUE_SEPARATOR", "="),
            list_separator=lookup("CFGBIND_LIST_SEPARATOR", ","),
        )


_default_settings: Optional[BindingSettings] = None


def get_settings() -> BindingSettings:
    """
    Get the global settings singleton.

    Settings are loaded from the environment on first call, then cached for
    reuse. Tests can bypass this by passing their own BindingSettings to
    Configuration, or call reset_settings() after changing the environment.

    Returns:
        Global BindingSettings singleton.
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = BindingSettings.from_env()

    return _default_settings


def reset_settings():
    """
    Reset the global settings singleton (for testing).

    Returns:
        None (side effect: clears global settings cache).
    """
    global _default_settings
    _default_settings = None
