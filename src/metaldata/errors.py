# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/errors.py
class DataError(RuntimeError):
    """Base class for metaldata failures."""


# ---------------------------------------------------------------------
# Terminal errors: the template or the pool definition must change
# ---------------------------------------------------------------------
class TerminalError(DataError):
    """Configuration error recorded on the Metal3Data status, never retried."""


class InvalidPoolSpec(TerminalError):
    """Raised when a pool range has neither start nor subnet, or cannot be parsed."""


class OutOfRange(TerminalError):
    """Raised when a computed address falls past the range end or outside the subnet."""


class AddressOverflow(TerminalError):
    """Raised when address arithmetic leaves the family's byte width."""


class InvalidPrefixLength(TerminalError):
    """Raised when a prefix length is outside [0, 32] or [0, 128]."""


class UnknownObjectKind(TerminalError):
    """Raised when a metadata rule selects an object kind we cannot read."""


class InterfaceNotFound(TerminalError):
    """Raised when no host NIC matches the requested interface name."""


class PoolExhausted(TerminalError):
    """Raised when the allocator recorded an empty allocation for our claim."""


class PoolNotResolved(TerminalError):
    """Raised when rendering reaches a pool that was never resolved."""


class TemplateClusterMismatch(TerminalError):
    """Raised when the data template belongs to another cluster."""


# ---------------------------------------------------------------------
# Store errors
# ---------------------------------------------------------------------
class StoreError(DataError):
    """Infrastructure failure talking to the object store."""


class NotFoundError(StoreError):
    """The requested object does not exist."""


class AlreadyExistsError(StoreError):
    """An object with the same name already exists."""


class ConflictError(StoreError):
    """The object changed since it was read (stale resourceVersion)."""
