"""
Structured log entries emitted by the prober.

Each family carries the fields needed to correlate a log line with the
component state it describes (node address, region cutoff, listening port).
"""

from .models import Entry, LogLevel


# =============================================================================
# Node Registry
# =============================================================================

class RegistryInfo(Entry, kw_only=True):
    address: str
    level: LogLevel = LogLevel.INFO


class RegistryWarning(Entry, kw_only=True):
    address: str
    level: LogLevel = LogLevel.WARN


# =============================================================================
# Poll Loop
# =============================================================================

class PollDebug(Entry, kw_only=True):
    known_nodes: int
    level: LogLevel = LogLevel.DEBUG


class PollWarning(Entry, kw_only=True):
    known_nodes: int
    level: LogLevel = LogLevel.WARN


class PollError(Entry, kw_only=True):
    known_nodes: int
    using_fallback: bool
    level: LogLevel = LogLevel.ERROR


class StatusModified(Entry, kw_only=True):
    status_counts: dict[str, dict[str, int]]
    table: str
    level: LogLevel = LogLevel.INFO


# =============================================================================
# Credentials
# =============================================================================

class CredentialsInfo(Entry, kw_only=True):
    path: str
    level: LogLevel = LogLevel.INFO


class CredentialsError(Entry, kw_only=True):
    path: str
    level: LogLevel = LogLevel.ERROR


# =============================================================================
# Cross-Region Cascade
# =============================================================================

class CascadeDebug(Entry, kw_only=True):
    cutoff: str | None
    regions: list[str]
    level: LogLevel = LogLevel.DEBUG


class CascadeInfo(Entry, kw_only=True):
    cutoff: str | None
    regions: list[str]
    level: LogLevel = LogLevel.INFO


class CascadeWarning(Entry, kw_only=True):
    cutoff: str | None
    regions: list[str]
    level: LogLevel = LogLevel.WARN


# =============================================================================
# Orchestrator / Maintenance / Server
# =============================================================================

class OrchestratorError(Entry, kw_only=True):
    operation: str
    level: LogLevel = LogLevel.ERROR


class MaintenanceDebug(Entry, kw_only=True):
    target: str
    level: LogLevel = LogLevel.DEBUG


class MaintenanceInfo(Entry, kw_only=True):
    target: str
    level: LogLevel = LogLevel.INFO


class MaintenanceError(Entry, kw_only=True):
    target: str
    level: LogLevel = LogLevel.ERROR


class ServerInfo(Entry, kw_only=True):
    host: str
    port: int
    level: LogLevel = LogLevel.INFO


class ServerDebug(Entry, kw_only=True):
    host: str
    port: int
    level: LogLevel = LogLevel.DEBUG
