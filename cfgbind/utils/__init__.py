"""
Generic utilities shared across modules.

Includes the error classes raised by the store, converter and binder.
"""
