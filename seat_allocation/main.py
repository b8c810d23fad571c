"""Session bootstrap and file-to-file run wiring."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, TextIO

from seat_allocation.controllers.output_formatter import TextOutcomeSink
from seat_allocation.domain.constraints import validate_settings
from seat_allocation.services.allocation_service import AllocationEngine
from seat_allocation.services.session_service import CommandSession
from seat_allocation.utils.config import Settings, get_settings
from seat_allocation.utils.logger import get_logger


logger = get_logger(__name__)


def create_session(output: TextIO, settings: Optional[Settings] = None) -> CommandSession:
    """Build an engine writing to ``output`` and a session driving it."""
    settings = settings or get_settings()
    validate_settings(settings)
    engine = AllocationEngine(sink=TextOutcomeSink(output))
    return CommandSession(engine, settings=settings)


def output_path_for(input_path: Path, settings: Optional[Settings] = None) -> Path:
    settings = settings or get_settings()
    return input_path.with_name(input_path.stem + settings.output_suffix)


def run_file(input_path: Path, settings: Optional[Settings] = None) -> Path:
    """Run every command in ``input_path`` and return the output file path."""
    settings = settings or get_settings()
    output_path = output_path_for(input_path, settings)
    with input_path.open("r", encoding=settings.input_encoding) as source, output_path.open(
        "w", encoding=settings.input_encoding
    ) as sink:
        session = create_session(sink, settings)
        session.run(source)
    logger.info("Output written | input=%s | output=%s", input_path, output_path)
    return output_path
