"""Command session: feeds parsed protocol commands to one allocation engine."""

from __future__ import annotations

from typing import Iterable, Optional

from seat_allocation.controllers.command_parser import (
    AddSeatsCommand,
    AvailableCommand,
    CancelCommand,
    Command,
    CommandParseError,
    ExitWaitlistCommand,
    InitializeCommand,
    PrintReservationsCommand,
    QuitCommand,
    ReleaseSeatsCommand,
    ReserveCommand,
    UpdatePriorityCommand,
    UnknownCommandError,
    parse_command,
)
from seat_allocation.domain.models import OperationResult
from seat_allocation.services.allocation_service import AllocationEngine
from seat_allocation.utils.config import Settings, get_settings
from seat_allocation.utils.logger import get_logger


logger = get_logger(__name__)


class CommandSession:
    """Runs commands in order until ``Quit`` or the input is exhausted."""

    def __init__(
        self,
        engine: AllocationEngine,
        settings: Optional[Settings] = None,
    ) -> None:
        self._engine = engine
        self._settings = settings or get_settings()
        self._processed = 0
        self._skipped = 0

    @property
    def finished(self) -> bool:
        return self._engine.closed

    @property
    def processed(self) -> int:
        return self._processed

    @property
    def skipped(self) -> int:
        return self._skipped

    def execute(self, command: Command) -> OperationResult:
        engine = self._engine
        self._processed += 1
        if isinstance(command, InitializeCommand):
            return engine.initialize(command.seat_count)
        if isinstance(command, AvailableCommand):
            return engine.available()
        if isinstance(command, ReserveCommand):
            return engine.reserve(command.user_id, command.priority)
        if isinstance(command, CancelCommand):
            return engine.cancel(command.seat_id, command.user_id)
        if isinstance(command, ExitWaitlistCommand):
            return engine.exit_waitlist(command.user_id)
        if isinstance(command, UpdatePriorityCommand):
            return engine.update_priority(command.user_id, command.priority)
        if isinstance(command, AddSeatsCommand):
            return engine.add_seats(command.seat_count)
        if isinstance(command, PrintReservationsCommand):
            return engine.print_reservations()
        if isinstance(command, ReleaseSeatsCommand):
            return engine.release_seats(command.range_start, command.range_end)
        if isinstance(command, QuitCommand):
            return engine.quit()
        raise TypeError(f"unsupported command {type(command).__name__}")

    def run(self, lines: Iterable[str]) -> int:
        """Process protocol lines; returns the number of commands executed."""
        for line_number, line in enumerate(lines, start=1):
            if self.finished:
                break
            try:
                command = parse_command(line)
            except UnknownCommandError as exc:
                self._skipped += 1
                logger.warning("Unknown command ignored | line=%s | detail=%s", line_number, exc)
                continue
            except CommandParseError as exc:
                if not self._settings.skip_malformed_commands:
                    raise
                self._skipped += 1
                logger.warning("Malformed command skipped | line=%s | detail=%s", line_number, exc)
                continue
            if command is None:
                continue
            self.execute(command)

        logger.info(
            "Session completed | processed=%s | skipped=%s | quit=%s",
            self._processed,
            self._skipped,
            self.finished,
        )
        return self._processed
