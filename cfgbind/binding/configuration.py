"""
Configuration: the entry point that owns raw entries and binds contracts.

**Usage pattern**:
  ```python
  import sys

  from cfgbind.binding.configuration import Configuration
  from cfgbind.schema.contracts import Accessor, SchemaContract, INT, BOOLEAN

  Server = SchemaContract("Server", [
      Accessor("port", INT, default=8080),
      Accessor("verbose", BOOLEAN, default=False),
  ])

  configuration = Configuration()
  configuration.add_tokens(sys.argv[1:])     # --port=9090 --verbose
  server = configuration.bind(Server)
  server.port                                # np.int32(9090)
  ```

**Lifecycle**: add everything first, then read. Converted values are cached
per accessor and never invalidated (see cfgbind.conversion.cache), so an
entry added after its accessor was read is not observed by that accessor.

A Configuration is not thread-safe; serialize adds and reads externally if
it is shared between threads.
"""

from collections.abc import Mapping
from typing import Any, Iterable, Optional

from cfgbind.binding.binder import DescriptorBinder
from cfgbind.binding.views import TypedView
from cfgbind.config.settings import BindingSettings, get_settings
from cfgbind.conversion.cache import ConversionCache
from cfgbind.schema.contracts import SchemaContract
from cfgbind.store.entries import EntryStore


class Configuration:
    """
    Owns one entry store and one conversion cache; binds contracts over them.

    Args:
        settings: Token grammar settings. Defaults to get_settings().
    """

    def __init__(self, settings: Optional[BindingSettings] = None):
        self.settings = settings or get_settings()
        self._entries = EntryStore(self.settings)
        self._cache = ConversionCache()
        self._binder = DescriptorBinder(self._entries, self._cache, self.settings)

    @property
    def entries(self) -> EntryStore:
        """The raw entry store (read it, add through the Configuration)."""
        return self._entries

    def add_tokens(self, tokens: Iterable[str]) -> None:
        """Add `--key=value` / `--key` tokens. See EntryStore.add_tokens."""
        self._entries.add_tokens(tokens)

    def add_mapping(self, entries: Mapping[str, Any]) -> None:
        """Merge a mapping, last write wins. See EntryStore.add_mapping."""
        self._entries.add_mapping(entries)

    def add_properties(self, entries: Mapping[str, str]) -> None:
        """Merge a string-valued property set. See EntryStore.add_properties."""
        self._entries.add_properties(entries)

    def add_environment(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Merge os.environ (or `environ`) as a property set."""
        self._entries.add_environment(environ)

    def add(self, *sources: Any) -> None:
        """
        Add heterogeneous sources in order.

        Each string is a token (`--key=value` or `--key`); each mapping is
        merged with add_mapping semantics.

        Usage example:
            >>> configuration.add("--verbose", "--port=9090", {"name": "api"})

        Raises:
            MalformedArgumentError: If a string lacks the argument prefix.
            TypeError: If a source is neither a string nor a mapping.
        """
        for source in sources:
            if isinstance(source, str):
                self._entries.add_tokens([source])
            elif isinstance(source, Mapping):
                self._entries.add_mapping(source)
            else:
                raise TypeError(
                    f"add expects token strings or mappings, got: {type(source).__name__}"
                )

    def bind(self, contract: SchemaContract) -> TypedView:
        """
        Return a typed view of `contract` over this configuration.

        Binding never fails; conversion errors surface when an accessor is
        read. Binding the same contract twice shares cached conversions.
        """
        return self._binder.bind(contract)
