"""
Typed configuration binding.

Binds flat raw key/value entries (command-line tokens, mappings, property
sets, the process environment) to typed views declared as schema contracts.
"""
