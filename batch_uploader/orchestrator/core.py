"""Core orchestrator - validates, batches and uploads user-selected files."""
import inspect
import logging
from dataclasses import replace
from typing import Callable, List, Optional, Sequence, Tuple

from ..errors import TransportError
from ..models import (
    ErrorKind,
    UploadCandidate,
    UploadConfig,
    UploadedFile,
    UploadIssue,
    UploadMetadata,
    UploadOptions,
    ValidationOutcome,
)
from ..protocols import IFileValidator, IUploadTransport
from ..services.api_client import HTTPUploadTransport
from ..services.validator import FileValidator
from ..utils.events import EventEmitter
from .batching import batch_progress, make_batches
from .models import RunOutcome, RunResult
from .state import UploadState

logger = logging.getLogger(__name__)

STATE_EVENT = "state"


class _Run:
    """Bookkeeping for one invocation, from validation to terminal state."""

    def __init__(self, token: int):
        self.token = token
        self.cancel_requested = False
        self.issues: List[UploadIssue] = []


class BatchUploadOrchestrator:
    """
    Orchestrates batch uploads using injected services.

    Owns a single UploadState value. Every change replaces the value and
    notifies subscribers; only the run that currently holds the run token
    may write it.

    Usage:
        options = UploadOptions(category=FileCategory.PHOTO, project_id="p1")

        # With the default HTTP transport
        async with BatchUploadOrchestrator(options, token=access_token) as uploader:
            result = await uploader.upload_files(candidates)

        # With an injected transport
        uploader = BatchUploadOrchestrator(options, transport=my_transport)
        uploader.subscribe(lambda state: render(state))
        result = await uploader.upload_files(candidates)
    """

    def __init__(
        self,
        options: UploadOptions,
        transport: Optional[IUploadTransport] = None,
        validator: Optional[IFileValidator] = None,
        config: Optional[UploadConfig] = None,
        token: Optional[str] = None,
    ):
        """
        Initialize orchestrator with dependencies.

        Args:
            options: Per-run metadata, ceiling and hooks
            transport: Upload transport (built in __aenter__ when omitted)
            validator: Per-file validator (default: FileValidator from config)
            config: Batch size, endpoint and validation limits
            token: Bearer token for the default HTTP transport
        """
        self._options = options
        self._config = config or UploadConfig()
        self._transport = transport
        self._validator = validator or FileValidator.from_config(self._config)
        self._token = token
        self._owned_transport: Optional[HTTPUploadTransport] = None

        self._state = UploadState.idle()
        self._events = EventEmitter()
        self._run_counter = 0
        self._current: Optional[_Run] = None

    async def __aenter__(self):
        """Build the default HTTP transport when none was injected."""
        if self._transport is None:
            self._owned_transport = HTTPUploadTransport(
                self._config.api_url,
                token=self._token,
                timeout=self._config.timeout,
            )
            await self._owned_transport.__aenter__()
            self._transport = self._owned_transport
        return self

    async def __aexit__(self, *args):
        """Cleanup resources."""
        await self.drain()
        if self._owned_transport:
            await self._owned_transport.__aexit__(*args)
            self._owned_transport = None
            self._transport = None

    # State access

    @property
    def state(self) -> UploadState:
        """Current state snapshot (read-only)."""
        return self._state

    @property
    def options(self) -> UploadOptions:
        return self._options

    @property
    def is_running(self) -> bool:
        return self._current is not None

    def subscribe(self, callback: Callable[[UploadState], None]) -> Callable[[], None]:
        """
        Receive every new state snapshot.

        Returns a function that removes the subscription.
        """
        self._events.on(STATE_EVENT, callback)
        return lambda: self._events.off(STATE_EVENT, callback)

    async def drain(self) -> None:
        """Wait until coroutine subscribers have seen every snapshot so far."""
        await self._events.drain()

    def clear_errors(self) -> None:
        self._set_state(errors=())

    def reset(self) -> None:
        """Return to idle. An in-flight run is superseded and writes nothing more."""
        if self._current is not None:
            logger.info("Reset abandons in-flight upload run #%d", self._current.token)
        self._current = None
        self._state = UploadState.idle()
        self._events.emit(STATE_EVENT, self._state)

    def set_drag_over(self, is_drag_over: bool) -> None:
        self._set_state(is_drag_over=bool(is_drag_over))

    def cancel(self) -> bool:
        """
        Ask the current run to stop at its next batch boundary.

        The transport call in flight is allowed to finish; its files are
        discarded with the rest of the run. Returns False when idle.
        """
        if self._current is None:
            return False
        self._current.cancel_requested = True
        logger.info("Cancellation requested for upload run #%d", self._current.token)
        return True

    # Operations

    def validate(self, candidates: Sequence[UploadCandidate]) -> List[ValidationOutcome]:
        """One outcome per candidate; rejections never stop the others."""
        return [self._validator.validate(candidate) for candidate in candidates]

    async def upload_files(self, candidates: Sequence[UploadCandidate]) -> RunResult:
        """
        Validate, batch and upload files.

        Never raises for rejected files or transport failures; those end up
        in state.errors, the on_error hook and the returned RunResult.
        """
        self._require_transport()
        candidates = list(candidates)
        if not candidates:
            return RunResult(outcome=RunOutcome.EMPTY)

        run = self._begin_run()
        try:
            return await self._upload_files(run, candidates)
        finally:
            self._end_run(run)

    async def upload_single_file(self, candidate: UploadCandidate) -> RunResult:
        """Upload one file through the single-file endpoint."""
        self._require_transport()
        run = self._begin_run()
        try:
            outcome = self._validator.validate(candidate)
            if outcome.rejected:
                logger.warning("Rejected %s: %s", candidate.filename, outcome.reason)
                run.issues.append(UploadIssue(ErrorKind.VALIDATION, outcome.reason, candidate.filename))
                self._append_errors([outcome.reason])
                return await self._settle(run, RunOutcome.FAILED)

            return await self._dispatch(run, [candidate])
        finally:
            self._end_run(run)

    # Internal

    async def _upload_files(self, run: _Run, candidates: List[UploadCandidate]) -> RunResult:
        accepted: List[UploadCandidate] = []
        for outcome in self.validate(candidates):
            if outcome.accepted:
                accepted.append(outcome.candidate)
                continue
            filename = outcome.candidate.filename
            run.issues.append(
                UploadIssue(ErrorKind.VALIDATION, f"{filename}: {outcome.reason}", filename)
            )

        if run.issues:
            logger.warning("Rejected %d of %d file(s)", len(run.issues), len(candidates))
            self._append_errors([issue.message for issue in run.issues])

        if not accepted:
            return await self._settle(run, RunOutcome.FAILED)

        max_files = self._options.max_files
        if max_files and len(accepted) > max_files:
            message = f"Maximum {max_files} files allowed"
            logger.warning("%s, got %d accepted file(s)", message, len(accepted))
            run.issues.append(UploadIssue(ErrorKind.CEILING, message))
            self._append_errors([message])
            return await self._settle(run, RunOutcome.FAILED)

        return await self._dispatch(run, accepted)

    def _require_transport(self) -> None:
        if self._transport is None:
            raise RuntimeError(
                "No upload transport configured. Pass transport= or use 'async with'."
            )

    def _begin_run(self) -> _Run:
        self._run_counter += 1
        previous = self._current
        self._current = _Run(self._run_counter)
        if previous is not None:
            logger.warning(
                "Upload run #%d supersedes run #%d still in flight",
                self._current.token,
                previous.token,
            )
            if self._state.is_uploading:
                # The old run will not clean up after itself
                self._set_state(is_uploading=False, progress=0)
        return self._current

    def _end_run(self, run: _Run) -> None:
        if self._current is run:
            self._current = None

    def _is_current(self, run: _Run) -> bool:
        return self._current is run

    def _set_state(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        self._events.emit(STATE_EVENT, self._state)

    def _append_errors(self, messages: Sequence[str]) -> None:
        self._set_state(errors=self._state.errors + tuple(messages))

    async def _send(self, batch: Tuple[UploadCandidate, ...], metadata: UploadMetadata) -> List[UploadedFile]:
        """One transport call; the only suspension point of a batch."""
        if len(batch) == 1:
            return [await self._transport.upload_file(batch[0], metadata)]

        files = list(await self._transport.upload_files(list(batch), metadata))
        if len(files) != len(batch):
            raise TransportError(f"Server returned {len(files)} file(s) for {len(batch)} uploaded")
        return files

    async def _dispatch(self, run: _Run, accepted: List[UploadCandidate]) -> RunResult:
        batches = make_batches(accepted, self._config.batch_size)
        total = len(batches)
        metadata = self._options.metadata()
        run_files: List[UploadedFile] = []
        completed = 0

        self._set_state(is_uploading=True, progress=0)
        logger.debug("Upload run #%d: %d file(s) in %d batch(es)", run.token, len(accepted), total)

        try:
            for batch in batches:
                if not self._is_current(run):
                    return self._superseded(run, total, completed)
                if run.cancel_requested:
                    break

                files = await self._send(batch, metadata)

                if not self._is_current(run):
                    return self._superseded(run, total, completed)
                if run.cancel_requested:
                    break

                run_files.extend(files)
                completed += 1
                progress = batch_progress(completed, total)
                self._set_state(progress=progress)
                await self._call_hook(self._options.on_progress, progress)

            if not self._is_current(run):
                return self._superseded(run, total, completed)

            if run.cancel_requested:
                logger.info("Upload run #%d cancelled after %d/%d batch(es)", run.token, completed, total)
                self._reconcile(run_files, complete=False)
                return await self._settle(run, RunOutcome.CANCELLED, total=total, completed=completed)

            merged = self._reconcile(run_files, complete=True)
            logger.info("Files uploaded successfully: %d file(s) in %d batch(es)", len(merged), total)
            outcome = RunOutcome.PARTIAL if run.issues else RunOutcome.SUCCESS
            return await self._settle(run, outcome, files=merged, total=total, completed=completed)

        except Exception as e:
            if not self._is_current(run):
                return self._superseded(run, total, completed)
            message = str(e) or "Upload failed"
            logger.error(
                "File upload failed: %s (%d file(s), batch %d/%d)",
                message, len(accepted), completed + 1, total,
            )
            self._reconcile(run_files, complete=False)
            run.issues.append(UploadIssue(ErrorKind.TRANSPORT, message))
            self._append_errors([message])
            return await self._settle(run, RunOutcome.FAILED, total=total, completed=completed)

        finally:
            if self._is_current(run):
                self._set_state(is_uploading=False, progress=0)

    def _reconcile(self, run_files: List[UploadedFile], complete: bool) -> Tuple[UploadedFile, ...]:
        """
        Decide what a finished run exposes in state.uploaded_files.

        Only a run whose every batch succeeded is merged; files from earlier
        batches of a failed or cancelled run are dropped.
        """
        if not complete:
            return ()
        merged = tuple(run_files)
        self._set_state(uploaded_files=self._state.uploaded_files + merged, progress=100)
        return merged

    async def _settle(
        self,
        run: _Run,
        outcome: RunOutcome,
        files: Tuple[UploadedFile, ...] = (),
        total: int = 0,
        completed: int = 0,
    ) -> RunResult:
        """Fire the run's hooks once and build its result."""
        if run.issues and self._is_current(run):
            await self._call_hook(self._options.on_error, ", ".join(i.message for i in run.issues))
        if files and self._is_current(run):
            await self._call_hook(self._options.on_success, list(files))

        return RunResult(
            outcome=outcome,
            files=files,
            issues=tuple(run.issues),
            batches_total=total,
            batches_completed=completed,
        )

    def _superseded(self, run: _Run, total: int, completed: int) -> RunResult:
        logger.info("Upload run #%d superseded, results discarded", run.token)
        return RunResult(
            outcome=RunOutcome.SUPERSEDED,
            issues=tuple(run.issues),
            batches_total=total,
            batches_completed=completed,
        )

    async def _call_hook(self, hook, *args) -> None:
        """Invoke a caller hook; sync or async. Hook errors are logged, not raised."""
        if hook is None:
            return
        try:
            result = hook(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Upload hook {getattr(hook, '__name__', hook)!r} failed: {e}", exc_info=True)
