"""Command handlers — load, create, delete and end-session over one owned state container.

A :class:`Dashboard` holds everything a journal front end needs for one
active session: the mirror, the new-entry form, the current view, the last
error and the state of each command.  Commands compose the session gate,
the mirror and the backend into one action and never raise across this
boundary; each returns a :class:`CommandResult` instead.

Ordering rules:

- Within one command the backend call settles before the mirror is touched,
  so the mirror is never ahead of the backend.
- The same trigger cannot run twice at once (a second attempt returns
  ``Outcome.BUSY``).  Different commands are not serialized against each
  other.
- A create or delete whose identity is no longer the mirror's owner when the
  backend answers leaves the mirror alone.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from zoneinfo import ZoneInfo

from loguru import logger

from daybook.core.exceptions import DaybookError, RemoteError, Unauthenticated, ValidationError

from .gate import SessionGate
from .models import EntryForm, Identity, JournalEntry
from .ports import Confirmer, RemoteEntryService, SessionProvider
from .store import EntryStore, InsertPolicy

DELETE_CONFIRMATION = "Are you sure you want to delete this entry?"


class Command(StrEnum):
    LOAD = "load"
    CREATE = "create"
    DELETE = "delete"
    END_SESSION = "end_session"


class CommandState(StrEnum):
    """Lifecycle of a single trigger: Idle -> InFlight -> Committed | Failed."""

    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    COMMITTED = "committed"
    FAILED = "failed"


class Outcome(StrEnum):
    COMMITTED = "committed"
    FAILED = "failed"  # Backend or session provider error
    INVALID = "invalid"  # Rejected locally, backend never called
    UNAUTHENTICATED = "unauthenticated"
    DECLINED = "declined"  # Confirmation refused
    BUSY = "busy"  # Same trigger already in flight


class View(StrEnum):
    LOADING = "loading"
    DASHBOARD = "dashboard"
    LOGIN = "login"


@dataclass(frozen=True)
class CommandResult:
    """What a command did, for the presentation layer to act on."""

    command: Command
    status: Outcome
    error: DaybookError | None = None
    entry: JournalEntry | None = None

    @property
    def ok(self) -> bool:
        return self.status is Outcome.COMMITTED


def local_today(timezone: str | None = None) -> date:
    """Today's calendar date in ``timezone`` (IANA name) or the machine's local zone."""
    if timezone:
        return datetime.now(ZoneInfo(timezone)).date()
    return date.today()


class Dashboard:
    """State container and command handlers for one journal session.

    Args:
        service: Backend holding the entries.
        sessions: Provider of the current identity.
        confirmer: Yes/no gate consulted before every delete.
        policy: Where new entries land in the mirror (see :class:`InsertPolicy`).
        today: Clock returning the authoring date for new entries.

    Example::

        dash = Dashboard(service, sessions, confirmer)
        await dash.activate()
        dash.form.content = "Walked to the lake."
        await dash.create()
        for entry in dash.entries:
            ...
    """

    def __init__(
        self,
        service: RemoteEntryService,
        sessions: SessionProvider,
        confirmer: Confirmer,
        *,
        policy: InsertPolicy | str = InsertPolicy.PREPEND,
        today: Callable[[], date] = local_today,
    ):
        self._service = service
        self._sessions = sessions
        self._confirmer = confirmer
        self._today = today
        self.gate = SessionGate(sessions)
        self.store = EntryStore(policy=policy)
        self.form = EntryForm()
        self.view = View.LOADING
        self.identity: Identity | None = None
        self.last_error: DaybookError | None = None
        self._states: dict[tuple[Command, str | None], CommandState] = {}

    # ── Read side ──────────────────────────────────────────────────

    @property
    def entries(self) -> list[JournalEntry]:
        """Entries in display order. A copy; mutating it does nothing."""
        return self.store.list()

    @property
    def loading(self) -> bool:
        return self.view is View.LOADING

    @property
    def can_submit(self) -> bool:
        """Whether the create affordance should be enabled."""
        return self.form.can_submit and not self.in_flight(Command.CREATE)

    def state(self, command: Command, key: str | None = None) -> CommandState:
        return self._states.get((command, key), CommandState.IDLE)

    def in_flight(self, command: Command, key: str | None = None) -> bool:
        """Whether a trigger is outstanding.

        Deletes are keyed by entry id; without a key this answers whether any
        trigger of ``command`` is outstanding.
        """
        if key is None:
            return any(c is command and s is CommandState.IN_FLIGHT for (c, _), s in self._states.items())
        return self.state(command, key) is CommandState.IN_FLIGHT

    # ── Bookkeeping ────────────────────────────────────────────────

    def _begin(self, command: Command, key: str | None = None) -> bool:
        if self.state(command, key) is CommandState.IN_FLIGHT:
            logger.debug(f"{command.value} already in flight ({key or '-'}); ignoring trigger")
            return False
        self._states[(command, key)] = CommandState.IN_FLIGHT
        return True

    def _finish(self, command: Command, key: str | None, result: CommandResult) -> CommandResult:
        if key is not None:
            # Per-entry triggers only matter while outstanding
            self._states.pop((command, key), None)
        else:
            committed = result.status in (Outcome.COMMITTED, Outcome.DECLINED)
            self._states[(command, key)] = CommandState.COMMITTED if committed else CommandState.FAILED
        if result.error is not None:
            self.last_error = result.error
        return result

    def _unauthenticated(self, command: Command, error: Unauthenticated) -> CommandResult:
        self._discard_session()
        return CommandResult(command, Outcome.UNAUTHENTICATED, error)

    def _discard_session(self) -> None:
        self.store.clear()
        self.form.clear()
        self.identity = None
        self.view = View.LOGIN

    def _still_owner(self, identity: Identity) -> bool:
        return self.identity is not None and self.identity.id == identity.id

    def clear_error(self) -> None:
        self.last_error = None

    # ── Commands ───────────────────────────────────────────────────

    async def activate(self) -> CommandResult:
        """Resolve the session; load entries if there is one, else go to the login view."""
        self.view = View.LOADING
        try:
            identity = await self.gate.require()
        except Unauthenticated as e:
            logger.info("No session on activation; redirecting to login")
            return self._unauthenticated(Command.LOAD, e)
        except RemoteError as e:
            logger.error(f"Error resolving session: {e}")
            self.last_error = e
            self._discard_session()
            return CommandResult(Command.LOAD, Outcome.FAILED, e)
        return await self.load(identity)

    async def load(self, identity: Identity | None = None) -> CommandResult:
        """Fetch the owner's entries and replace the mirror with them."""
        if not self._begin(Command.LOAD):
            return CommandResult(Command.LOAD, Outcome.BUSY)

        if identity is None:
            try:
                identity = await self.gate.require()
            except Unauthenticated as e:
                return self._finish(Command.LOAD, None, self._unauthenticated(Command.LOAD, e))
            except RemoteError as e:
                logger.error(f"Error resolving session: {e}")
                return self._finish(Command.LOAD, None, CommandResult(Command.LOAD, Outcome.FAILED, e))

        if self.store.owner_id is not None and self.store.owner_id != identity.id:
            logger.info(f"Identity switched from {self.store.owner_id} to {identity.id}; discarding mirror")
        self.store.bind(identity.id)
        self.identity = identity
        self.view = View.LOADING

        try:
            entries = await self._service.list_by_owner(identity.id)
        except Exception as e:
            error = e if isinstance(e, RemoteError) else RemoteError(f"Fetching entries failed: {e}")
            logger.error(f"Error fetching entries: {error}")
            self.view = View.DASHBOARD
            return self._finish(Command.LOAD, None, CommandResult(Command.LOAD, Outcome.FAILED, error))

        if not self._still_owner(identity):
            logger.warning(f"Session changed while loading entries for {identity.id}; dropping result")
            return self._finish(Command.LOAD, None, CommandResult(Command.LOAD, Outcome.UNAUTHENTICATED))

        try:
            self.store.replace_all(entries, owner_id=identity.id)
        except ValueError as e:
            error = RemoteError(f"Backend returned entries for another owner: {e}")
            logger.error(f"Error fetching entries: {error}")
            self.view = View.DASHBOARD
            return self._finish(Command.LOAD, None, CommandResult(Command.LOAD, Outcome.FAILED, error))

        self.view = View.DASHBOARD
        logger.info(f"Loaded {len(entries)} entries for {identity.id}")
        return self._finish(Command.LOAD, None, CommandResult(Command.LOAD, Outcome.COMMITTED))

    async def create(self, form: EntryForm | None = None) -> CommandResult:
        """Store a new entry from ``form`` (default: :attr:`form`) and clear the form.

        On any failure the mirror and the form are left exactly as they were.
        """
        form = form if form is not None else self.form
        if not self._begin(Command.CREATE):
            return CommandResult(Command.CREATE, Outcome.BUSY)

        try:
            identity = await self.gate.require()
        except Unauthenticated as e:
            return self._finish(Command.CREATE, None, self._unauthenticated(Command.CREATE, e))
        except RemoteError as e:
            logger.error(f"Error resolving session: {e}")
            return self._finish(Command.CREATE, None, CommandResult(Command.CREATE, Outcome.FAILED, e))

        if not form.can_submit:
            error = ValidationError("Entry content cannot be empty")
            logger.debug("Refusing to create an entry with blank content")
            return self._finish(Command.CREATE, None, CommandResult(Command.CREATE, Outcome.INVALID, error))

        candidate = form.to_candidate(identity.id, self._today())
        try:
            created = await self._service.insert(candidate)
        except Exception as e:
            error = e if isinstance(e, RemoteError) else RemoteError(f"Creating entry failed: {e}")
            logger.error(f"Error creating entry: {error}")
            return self._finish(Command.CREATE, None, CommandResult(Command.CREATE, Outcome.FAILED, error))

        if self._still_owner(identity) and self.store.owner_id == identity.id:
            self.store.insert_new(created)
        else:
            logger.warning(f"Entry {created.id} created for {identity.id} after the session changed; mirror untouched")
        form.clear()
        logger.info(f"Created entry {created.id} dated {created.date.isoformat()}")
        return self._finish(Command.CREATE, None, CommandResult(Command.CREATE, Outcome.COMMITTED, entry=created))

    async def delete(self, entry_id: str) -> CommandResult:
        """Delete one entry after the confirmer agrees. Declining has no side effects."""
        if not self._begin(Command.DELETE, entry_id):
            return CommandResult(Command.DELETE, Outcome.BUSY)

        try:
            identity = await self.gate.require()
        except Unauthenticated as e:
            return self._finish(Command.DELETE, entry_id, self._unauthenticated(Command.DELETE, e))
        except RemoteError as e:
            logger.error(f"Error resolving session: {e}")
            return self._finish(Command.DELETE, entry_id, CommandResult(Command.DELETE, Outcome.FAILED, e))

        if not self._confirmer.confirm(DELETE_CONFIRMATION):
            logger.debug(f"Delete of {entry_id} declined")
            return self._finish(Command.DELETE, entry_id, CommandResult(Command.DELETE, Outcome.DECLINED))

        try:
            await self._service.delete_by_id(entry_id)
        except Exception as e:
            error = e if isinstance(e, RemoteError) else RemoteError(f"Deleting entry failed: {e}")
            logger.error(f"Error deleting entry: {error}")
            return self._finish(Command.DELETE, entry_id, CommandResult(Command.DELETE, Outcome.FAILED, error))

        if self._still_owner(identity) and self.store.owner_id == identity.id:
            self.store.remove(entry_id)
        logger.info(f"Deleted entry {entry_id}")
        return self._finish(Command.DELETE, entry_id, CommandResult(Command.DELETE, Outcome.COMMITTED))

    async def end_session(self) -> CommandResult:
        """Sign out. Whatever the provider says, the session is over locally."""
        if not self._begin(Command.END_SESSION):
            return CommandResult(Command.END_SESSION, Outcome.BUSY)

        error: RemoteError | None = None
        try:
            await self._sessions.sign_out()
        except Exception as e:
            error = e if isinstance(e, RemoteError) else RemoteError(f"Sign-out failed: {e}")
            logger.error(f"Error signing out: {error}")
        finally:
            self._discard_session()

        status = Outcome.COMMITTED if error is None else Outcome.FAILED
        return self._finish(Command.END_SESSION, None, CommandResult(Command.END_SESSION, status, error))
