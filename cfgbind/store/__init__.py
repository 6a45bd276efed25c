"""
Raw entry storage.

Accumulates raw values from tokens, mappings, property sets and the
environment, with multi-value promotion for repeated tokens.
"""
