"""Asynchronous command runtime serializing submitted lines onto a single game."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol
from uuid import uuid4

from mc_interpreter.datapack import Datapack
from mc_interpreter.errors import ParseError, UnsupportedTargetError
from mc_interpreter.game import Game
from mc_interpreter.parser import parse_line
from mc_interpreter.sinks import BufferedLog, Chat, Log, LogEntry, LoggingLog


class CommandJobStatus(str, Enum):
    """Lifecycle states for submitted command jobs."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(slots=True)
class CommandJob:
    """Represents one submitted line and what executing it produced."""

    id: str
    line: str
    submitted_at: datetime
    status: CommandJobStatus
    output: list[LogEntry] = field(default_factory=list)
    error: str | None = None
    finished_at: datetime | None = None


class CommandHistoryStore(Protocol):
    """Storage contract for finished jobs."""

    def append(self, job: CommandJob) -> None:
        """Record a finished job."""

    def list_recent(self, limit: int) -> list[CommandJob]:
        """Return up to ``limit`` newest jobs."""


class InMemoryHistoryStore:
    """Bounded in-memory history store."""

    def __init__(self, max_jobs: int = 1_000) -> None:
        self._jobs: deque[CommandJob] = deque(maxlen=max_jobs)

    def append(self, job: CommandJob) -> None:
        self._jobs.appendleft(job)

    def list_recent(self, limit: int) -> list[CommandJob]:
        return list(self._jobs)[:limit]


class CommandRuntime:
    """Queue-backed runtime whose single worker owns the game.

    Lines may be submitted from any number of coroutines; they are parsed and
    executed strictly one after another, so no two commands ever interleave
    their reads and writes of the scoreboard.
    """

    def __init__(
        self,
        *,
        log: Log | None = None,
        chat: Chat | None = None,
        datapack: Datapack | None = None,
        max_function_depth: int = 64,
        history_store: CommandHistoryStore | None = None,
        max_queue_size: int = 1_000,
        logger: logging.Logger | None = None,
    ) -> None:
        self._output = BufferedLog(forward_to=log or LoggingLog())
        self._game = Game(self._output, chat, datapack=datapack, max_function_depth=max_function_depth)
        self._history_store = history_store or InMemoryHistoryStore(max_jobs=max_queue_size)
        self._logger = logger or logging.getLogger("mc_interpreter.command_runtime")

        self._jobs: dict[str, CommandJob] = {}
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=max_queue_size)
        self._worker_task: asyncio.Task[None] | None = None

    @property
    def game(self) -> Game:
        return self._game

    async def start(self) -> None:
        """Start the worker loop once for this runtime."""
        if self._worker_task and not self._worker_task.done():
            return

        self._worker_task = asyncio.create_task(self._worker_loop(), name="command-runtime-worker")
        self._logger.info("command_runtime_started", extra={"queue_maxsize": self._queue.maxsize})

    async def stop(self) -> None:
        """Stop worker loop and wait for graceful cancellation."""
        if not self._worker_task:
            return

        self._worker_task.cancel()
        try:
            await self._worker_task
        except asyncio.CancelledError:
            pass
        finally:
            self._worker_task = None

        self._logger.info("command_runtime_stopped")

    async def join(self) -> None:
        """Wait until every submitted line has been processed."""
        await self._queue.join()

    def submit_line(self, line: str) -> str:
        """Submit a command line and return the associated job id."""
        job_id = uuid4().hex
        job = CommandJob(
            id=job_id,
            line=line,
            submitted_at=datetime.now(timezone.utc),
            status=CommandJobStatus.QUEUED,
        )
        self._jobs[job_id] = job
        self._queue.put_nowait(job_id)
        self._logger.info(
            "command_submitted",
            extra={"job_id": job_id, "line": line, "queue_size": self._queue.qsize()},
        )
        return job_id

    def get_job(self, job_id: str) -> CommandJob:
        """Return job state for the given id."""
        if job_id not in self._jobs:
            raise KeyError(f"Unknown command job id: {job_id}")
        return self._jobs[job_id]

    def list_recent_jobs(self, limit: int = 20) -> list[CommandJob]:
        """Return the most recently finished jobs, newest first."""
        return self._history_store.list_recent(limit)

    async def _worker_loop(self) -> None:
        while True:
            job_id = await self._queue.get()
            try:
                self._execute_job(job_id)
            finally:
                self._queue.task_done()

    def _execute_job(self, job_id: str) -> None:
        job = self._jobs[job_id]
        job.status = CommandJobStatus.RUNNING
        self._output.drain()

        try:
            command = parse_line(job.line)
        except ParseError as exc:
            job.status = CommandJobStatus.REJECTED
            job.error = str(exc)
            self._logger.info("command_rejected", extra={"job_id": job.id, "error": job.error})
        else:
            try:
                self._game.execute(command)
            except UnsupportedTargetError as exc:
                job.status = CommandJobStatus.FAILED
                job.error = str(exc)
                self._logger.warning("command_failed", extra={"job_id": job.id, "error": job.error})
            else:
                job.status = CommandJobStatus.SUCCEEDED
                self._logger.info("command_succeeded", extra={"job_id": job.id})

        job.output = self._output.drain()
        job.finished_at = datetime.now(timezone.utc)
        self._history_store.append(job)
