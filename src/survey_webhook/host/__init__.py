"""Survey host interfaces and implementations."""

from .interface import (
    ExportRenderer,
    HostError,
    Participant,
    ParticipantDirectory,
    ResponseStore,
    SettingsProvider,
    SettingsStore,
)
from .memory import InMemoryHost, InMemorySettingsStore
from .remote import RemoteControlHost

__all__ = [
    "ExportRenderer",
    "HostError",
    "Participant",
    "ParticipantDirectory",
    "ResponseStore",
    "SettingsProvider",
    "SettingsStore",
    "InMemoryHost",
    "InMemorySettingsStore",
    "RemoteControlHost",
]
