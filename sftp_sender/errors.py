"""Exception hierarchy for the SFTP sender."""

from __future__ import annotations

from pathlib import Path


class SenderError(Exception):
    """Base class for every error raised by the sender."""


class ConfigError(SenderError):
    """Configuration file is missing, unreadable or malformed."""


class CredentialNotFound(SenderError, LookupError):
    def __init__(self, host: str):
        super().__init__(f"no credentials found for IP or VPS name: {host}")
        self.host = host


class TransferError(SenderError):
    """A single upload/download failed."""


# ------------------------------------------------------------- worker numbers

class WorkerSelectionError(SenderError, ValueError):
    """The --autosend/--ignore worker numbers could not be parsed."""


class EmptySpec(WorkerSelectionError):
    def __init__(self) -> None:
        super().__init__("autosend cannot be empty")


class InvalidIgnoreToken(WorkerSelectionError):
    def __init__(self, token: str):
        super().__init__(f"invalid ignore number: {token}")
        self.token = token


class InvalidRange(WorkerSelectionError):
    def __init__(self, token: str, reason: str = "expected format: start-end"):
        super().__init__(f"invalid range format: {token} ({reason})")
        self.token = token


class RangeOrderViolation(WorkerSelectionError):
    def __init__(self, start: int, end: int):
        super().__init__(f"range start ({start}) must be <= end ({end})")
        self.start = start
        self.end = end


class InvalidNumber(WorkerSelectionError):
    def __init__(self, token: str):
        super().__init__(f"invalid worker number: {token}")
        self.token = token


class EmptyResultAfterIgnore(WorkerSelectionError):
    def __init__(self) -> None:
        super().__init__("no workers to send to after applying ignore list")


# -------------------------------------------------------------- file sequence

class SequenceError(SenderError):
    """The numbered file sequence could not be located."""


class InvalidCount(SequenceError, ValueError):
    def __init__(self, count: int):
        super().__init__(f"count must be positive (got {count})")
        self.count = count


class PathResolutionError(SequenceError):
    def __init__(self, path: str, reason: object):
        super().__init__(f"failed to get absolute path for {path}: {reason}")
        self.path = path


class BaseFileNotFound(SequenceError):
    def __init__(self, path: Path):
        super().__init__(f"base file does not exist: {path}")
        self.path = path


class NoNumericToken(SequenceError, ValueError):
    def __init__(self, filename: str):
        super().__init__(f"could not extract number from filename: {filename}")
        self.filename = filename


class SequenceMemberMissing(SequenceError):
    def __init__(self, index: int, path: Path):
        super().__init__(f"file does not exist in sequence (index {index}): {path}")
        self.index = index
        self.path = path


# ----------------------------------------------------------------------- plan

class PlanError(SenderError):
    """The distribution plan failed validation; nothing was transferred."""


class CardinalityMismatch(PlanError):
    def __init__(self, workers: int, files: int):
        super().__init__(f"file count ({files}) does not match worker count ({workers})")
        self.workers = workers
        self.files = files


__all__ = [
    "SenderError",
    "ConfigError",
    "CredentialNotFound",
    "TransferError",
    "WorkerSelectionError",
    "EmptySpec",
    "InvalidIgnoreToken",
    "InvalidRange",
    "RangeOrderViolation",
    "InvalidNumber",
    "EmptyResultAfterIgnore",
    "SequenceError",
    "InvalidCount",
    "PathResolutionError",
    "BaseFileNotFound",
    "NoNumericToken",
    "SequenceMemberMissing",
    "PlanError",
    "CardinalityMismatch",
]
