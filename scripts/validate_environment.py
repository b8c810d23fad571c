#!/usr/bin/env python3
"""Validate local seat allocation environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from seat_allocation.domain.constraints import validate_settings
from seat_allocation.main import run_file
from seat_allocation.utils.config import get_settings

SEPARATOR_LINE = "=" * 44

SMOKE_COMMANDS = """Initialize(2)
Reserve(1, 1)
Reserve(2, 1)
Reserve(3, 5)
Reserve(4, 1)
ReleaseSeats(1, 2)
PrintReservations()
Quit()
"""

SMOKE_EXPECTED = [
    "2 Seats are made available for reservation",
    "User 1 reserved seat 1",
    "User 2 reserved seat 2",
    "User 3 is added to the waiting list",
    "User 4 is added to the waiting list",
    "Reservations of the Users in the range [1, 2] are released",
    "User 3 reserved seat 1",
    "User 4 reserved seat 2",
    "Seat 1, User 3",
    "Seat 2, User 4",
    "Program Terminated!!",
]


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="seat-allocation-env-")

    # CHECK 1 — Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2 — Required packages importable with versions
    package_specs = [
        ("pydantic", "pydantic"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    from importlib.metadata import version

    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            _ = version(dist_name)
        except Exception as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        settings = get_settings()

        # CHECK 3 — Settings validation
        try:
            validate_settings(settings)
            ok, line = _print_result("Settings", True, f": log_level={settings.log_level}")
        except ValueError as exc:
            ok, line = _print_result("Settings", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4 — End-to-end command file run
        try:
            input_path = Path(temp_dir) / "smoke.txt"
            input_path.write_text(SMOKE_COMMANDS, encoding="utf-8")
            output_path = run_file(input_path, settings)
            produced = output_path.read_text(encoding="utf-8").splitlines()
            if produced != SMOKE_EXPECTED:
                raise RuntimeError(f"unexpected output: {produced}")
            ok, line = _print_result("Command file run", True, f": {len(produced)} lines")
        except Exception as exc:
            ok, line = _print_result("Command file run", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Seat Allocation Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
