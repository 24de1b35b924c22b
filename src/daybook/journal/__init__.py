"""Session-gated journal core.

Provides the entry models, the ports a backend implements, the in-memory
mirror (:class:`EntryStore`), the :class:`SessionGate` and the
:class:`Dashboard` command handlers that tie them together.
"""

from .commands import Command, CommandResult, CommandState, Dashboard, Outcome, View, local_today
from .gate import SessionGate
from .models import EntryForm, Identity, JournalEntry, NewEntry
from .ports import AlwaysConfirm, CallbackConfirmer, Confirmer, NeverConfirm, RemoteEntryService, SessionProvider
from .store import EntryStore, InsertPolicy

__all__ = [
    "AlwaysConfirm",
    "CallbackConfirmer",
    "Command",
    "CommandResult",
    "CommandState",
    "Confirmer",
    "Dashboard",
    "EntryForm",
    "EntryStore",
    "Identity",
    "InsertPolicy",
    "JournalEntry",
    "NeverConfirm",
    "NewEntry",
    "Outcome",
    "RemoteEntryService",
    "SessionGate",
    "SessionProvider",
    "View",
    "local_today",
]
