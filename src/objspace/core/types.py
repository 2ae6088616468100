"""Core type definitions for objspace."""

type Copy[T] = T
"""Type alias indicating a value is a copy that won't auto-persist.

When you see `Copy[T]` in a return type, the returned value is a copy.
Mutations to this copy do NOT affect entity state. To persist changes,
write back via `space.set_state(entity, field, value)` or `handle[field] = value`.
"""
