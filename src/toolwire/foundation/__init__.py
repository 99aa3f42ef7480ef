"""Foundation layer: configuration, errors, tool definitions and the tool registry.

Submodules are imported directly (`toolwire.foundation.core`, ...) so
that the lower layers stay importable from messages and runnables.
"""
