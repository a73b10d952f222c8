"""Key handlers for every view and input-capture mode.

Each handler takes ``(state, key)`` and returns the next snapshot plus the
commands to issue; ``runtime.update`` routes keys to them.
"""
