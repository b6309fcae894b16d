"""Autosend: spread a numbered run of local files over a range of workers.

The pieces are used in this order::

    workers = resolve_workers("21-27", "22,25")      # [21, 23, 24, 26, 27]
    files = locate_file_sequence("out/worker162.txt", len(workers))
    plan = plan_distribution(workers, files, "*:/root/app", Path("out"))
    report = execute_plan(plan, sender.upload, logger)

Everything up to ``plan_distribution`` is validation and raises before any
network call is made. ``execute_plan`` never raises for a single item; it
records the failure and moves on to the next worker.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

from .errors import (
    BaseFileNotFound,
    CardinalityMismatch,
    EmptyResultAfterIgnore,
    EmptySpec,
    InvalidCount,
    InvalidIgnoreToken,
    InvalidNumber,
    InvalidRange,
    NoNumericToken,
    PathResolutionError,
    RangeOrderViolation,
    SequenceMemberMissing,
)

WILDCARD = "*"
DIGITS = "0123456789"

TransferFn = Callable[[Path, str, Optional[str], Path], Any]


# ====================== worker numbers ======================
def _parse_int(text: str) -> Optional[int]:
    text = text.strip()
    if not text:
        return None
    sign = text[0] if text[0] in "+-" else ""
    body = text[len(sign):]
    if not body or any(c not in DIGITS for c in body):
        return None
    return int(text)


def _parse_ignore(ignore: str) -> Set[int]:
    ignored: Set[int] = set()
    for part in (ignore or "").split(","):
        part = part.strip()
        if not part:
            continue
        num = _parse_int(part)
        if num is None:
            raise InvalidIgnoreToken(part)
        ignored.add(num)
    return ignored


def resolve_workers(autosend: str, ignore: str = "") -> List[int]:
    """Parse ``--autosend``/``--ignore`` into a sorted list of worker numbers.

    ``autosend`` is a comma separated list of numbers and ``start-end``
    ranges (inclusive); ``ignore`` is a comma separated list of numbers to
    leave out. Duplicates collapse to one entry.
    """
    if not autosend:
        raise EmptySpec()

    ignored = _parse_ignore(ignore)
    selected: Set[int] = set()
    for part in autosend.split(","):
        part = part.strip()
        if not part:
            continue

        if "-" in part:
            bounds = part.split("-")
            if len(bounds) != 2:
                raise InvalidRange(part)
            start = _parse_int(bounds[0])
            end = _parse_int(bounds[1])
            if start is None:
                raise InvalidRange(part, f"invalid range start: {bounds[0].strip()!r}")
            if end is None:
                raise InvalidRange(part, f"invalid range end: {bounds[1].strip()!r}")
            if start > end:
                raise RangeOrderViolation(start, end)
            selected.update(n for n in range(start, end + 1) if n not in ignored)
        else:
            num = _parse_int(part)
            if num is None:
                raise InvalidNumber(part)
            if num not in ignored:
                selected.add(num)

    workers = sorted(selected)
    if not workers:
        raise EmptyResultAfterIgnore()
    return workers


# ====================== file sequence ======================
@dataclass(frozen=True)
class NumericToken:
    """First run of digits inside a file name."""

    prefix: str
    value: int
    suffix: str
    start: int
    end: int

    def render(self, value: int) -> str:
        return f"{self.prefix}{value}{self.suffix}"


def find_numeric_token(filename: str) -> NumericToken:
    start = next((i for i, c in enumerate(filename) if c in DIGITS), None)
    if start is None:
        raise NoNumericToken(filename)
    end = start
    while end < len(filename) and filename[end] in DIGITS:
        end += 1
    # leading zeros are dropped: worker007.txt -> 7 -> worker8.txt
    return NumericToken(
        prefix=filename[:start],
        value=int(filename[start:end]),
        suffix=filename[end:],
        start=start,
        end=end,
    )


def _exists(path: Path) -> bool:
    # any stat failure (ENAMETOOLONG, EACCES, ...) counts as missing
    try:
        return path.exists()
    except OSError:
        return False


def locate_file_sequence(base_path: str, count: int) -> List[Path]:
    """Return ``count`` sibling files numbered consecutively from ``base_path``.

    ``worker162.txt`` with ``count=3`` yields ``worker162.txt``,
    ``worker163.txt`` and ``worker164.txt`` (absolute paths). Every member
    must exist; the first missing one aborts the whole lookup.
    """
    if count < 1:
        raise InvalidCount(count)

    try:
        abs_path = Path(os.path.abspath(os.path.expanduser(str(base_path))))
    except (OSError, ValueError) as exc:
        raise PathResolutionError(str(base_path), exc) from exc
    if "\x00" in str(abs_path):
        raise PathResolutionError(str(base_path), "embedded null byte")

    if not _exists(abs_path):
        raise BaseFileNotFound(abs_path)

    token = find_numeric_token(abs_path.name)
    files: List[Path] = []
    for i in range(count):
        candidate = abs_path if i == 0 else abs_path.parent / token.render(token.value + i)
        if not _exists(candidate):
            raise SequenceMemberMissing(i, candidate)
        files.append(candidate)
    return files


# ====================== host templates ======================
def worker_name(worker: int) -> str:
    return f"worker{worker}"


def expand_host(worker: int, template: str) -> str:
    """Replace every ``*`` in ``template`` with ``worker{N}``.

    Templates without a wildcard come back unchanged.
    """
    return template.replace(WILDCARD, worker_name(worker))


def split_host_location(value: str) -> Tuple[str, Optional[str]]:
    """Split ``host:/remote/dir`` on the first colon."""
    host, sep, location = value.partition(":")
    if not sep or not location:
        return host, None
    return host, location


# ====================== planning ======================
@dataclass(frozen=True)
class PlanItem:
    index: int
    worker: int
    file: Path
    host: str
    remote_location: Optional[str]
    display_path: Path

    @property
    def worker_label(self) -> str:
        return worker_name(self.worker)


def plan_distribution(
    workers: Sequence[int],
    files: Sequence[Path],
    host_template: str,
    original_upload_dir: Path,
) -> List[PlanItem]:
    """Pair the i-th lowest worker with the i-th file of the sequence.

    Both inputs must have the same length; otherwise nothing is planned.
    """
    if len(workers) != len(files):
        raise CardinalityMismatch(len(workers), len(files))

    plan: List[PlanItem] = []
    for i, (worker, path) in enumerate(zip(workers, files)):
        host, location = split_host_location(expand_host(worker, host_template))
        plan.append(
            PlanItem(
                index=i,
                worker=worker,
                file=Path(path),
                host=host,
                remote_location=location,
                display_path=Path(original_upload_dir) / Path(path).name,
            )
        )
    return plan


# ====================== execution ======================
@dataclass(frozen=True)
class TransferOutcome:
    item: PlanItem
    ok: bool
    error: Optional[str] = None

    @property
    def message(self) -> Optional[str]:
        if self.ok:
            return None
        return f"Failed to upload to {self.item.worker_label} ({self.item.host}): {self.error}"


@dataclass(frozen=True)
class DistributionReport:
    outcomes: Tuple[TransferOutcome, ...] = ()

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def failures(self) -> List[str]:
        return [o.message for o in self.outcomes if not o.ok]

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def with_outcome(self, outcome: TransferOutcome) -> "DistributionReport":
        return DistributionReport(self.outcomes + (outcome,))


def _run_item(item: PlanItem, total: int, transfer: TransferFn, logger: logging.Logger) -> TransferOutcome:
    logger.info(f"[{item.index + 1}/{total}] Uploading to {item.worker_label} ({item.host})...")
    try:
        transfer(item.file, item.host, item.remote_location, item.display_path)
    except Exception as exc:
        outcome = TransferOutcome(item=item, ok=False, error=str(exc) or exc.__class__.__name__)
        logger.error(f"ERROR: {outcome.message}")
        return outcome
    logger.info(f"Successfully uploaded {item.file.name} to {item.worker_label}")
    return TransferOutcome(item=item, ok=True)


def execute_plan(
    plan: Sequence[PlanItem],
    transfer: TransferFn,
    logger: logging.Logger,
    max_workers: int = 1,
) -> DistributionReport:
    """Run every plan item and collect the outcomes in plan order.

    A failing item never stops the others. With ``max_workers > 1`` items
    run on a thread pool, each on its own connection.
    """
    total = len(plan)
    report = DistributionReport()
    if max_workers <= 1 or total <= 1:
        for item in plan:
            report = report.with_outcome(_run_item(item, total, transfer, logger))
        return report

    with ThreadPoolExecutor(max_workers=min(max_workers, total)) as executor:
        futures = [executor.submit(_run_item, item, total, transfer, logger) for item in plan]
        for fut in futures:
            report = report.with_outcome(fut.result())
    return report


def log_summary(report: DistributionReport, logger: logging.Logger) -> None:
    logger.info("=== Upload Summary ===")
    logger.info(f"Successful: {report.succeeded}/{report.total}")
    if report.ok:
        logger.info("All uploads completed successfully!")
        return
    logger.error(f"Failed: {report.failed}/{report.total}")
    logger.error("Errors:")
    for msg in report.failures:
        logger.error(f"  - {msg}")


def log_plan(plan: Sequence[PlanItem], default_location: str, logger: logging.Logger) -> None:
    for item in plan:
        logger.info(
            f"[PLAN] {item.worker_label} ({item.host}) <- {item.display_path} "
            f"-> {item.remote_location or default_location}"
        )


def report_to_dict(report: DistributionReport) -> Dict[str, Any]:
    return {
        "total": report.total,
        "succeeded": report.succeeded,
        "failed": report.failed,
        "failures": report.failures,
        "items": [
            {
                "worker": o.item.worker,
                "host": o.item.host,
                "file": str(o.item.file),
                "remote_location": o.item.remote_location,
                "ok": o.ok,
                "error": o.error,
            }
            for o in report.outcomes
        ],
    }


__all__ = [
    "NumericToken",
    "PlanItem",
    "TransferOutcome",
    "DistributionReport",
    "resolve_workers",
    "find_numeric_token",
    "locate_file_sequence",
    "worker_name",
    "expand_host",
    "split_host_location",
    "plan_distribution",
    "execute_plan",
    "log_summary",
    "log_plan",
    "report_to_dict",
]
