"""High-level entrypoint for the SFTP sender."""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path
from typing import Any, List, Optional

from .autosend import (
    execute_plan,
    locate_file_sequence,
    log_plan,
    log_summary,
    plan_distribution,
    report_to_dict,
    resolve_workers,
    split_host_location,
)
from .banner import print_banner, print_version
from .cli import parse_args
from .config import Config, ensure_config_exists, load_config
from .errors import SenderError
from .transfer import SftpSender


def setup_logger(log_file: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger("sftp_sender")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")

    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)
    logger.addHandler(sh)

    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(fmt)
        logger.addHandler(fh)
    return logger


def write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def run_autosend(sender: SftpSender, cfg: Config, args: Namespace, logger: logging.Logger) -> int:
    workers = resolve_workers(args.autosend, args.ignore or "")
    files = locate_file_sequence(args.upload, len(workers))
    plan = plan_distribution(workers, files, args.ip, Path(args.upload).parent)
    logger.info(f"[AUTOSEND] {len(plan)} file(s) -> workers {', '.join(str(w) for w in workers)}")

    if args.dry_run:
        log_plan(plan, cfg.default_remote_location, logger)
        logger.info("[DRY-RUN] nothing uploaded")
        return 0

    max_workers = args.max_workers or cfg.max_workers
    report = execute_plan(plan, sender.upload, logger, max_workers=max_workers)
    log_summary(report, logger)
    if args.report:
        write_json(Path(args.report).expanduser(), report_to_dict(report))
        logger.info(f"[REPORT] written: {args.report}")
    if not report.ok:
        logger.error("Some uploads failed")
        return 1
    return 0


def run_single(sender: SftpSender, args: Namespace, logger: logging.Logger) -> int:
    host, location = split_host_location(args.ip)
    if args.upload:
        sender.upload(args.upload, host, location)
        logger.info("Upload completed successfully!")
    else:
        sender.download(args.download, host, location)
        logger.info("Download completed successfully!")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    if args.version:
        print_banner()
        print_version()
        return 0
    if not args.silent:
        print_banner()

    logger = setup_logger()
    try:
        if args.log_file:
            logger = setup_logger(args.log_file)
        ensure_config_exists(args.config)
        cfg = load_config(args.config, log_file=args.log_file)
        if cfg.log_file and not args.log_file:
            logger = setup_logger(cfg.log_file)
        logger.info(f"[CONFIG] {cfg.config_path}: {len(cfg.credentials)} credential(s)")

        sender = SftpSender(cfg, logger)
        if args.autosend:
            return run_autosend(sender, cfg, args, logger)
        return run_single(sender, args, logger)
    except (SenderError, OSError) as exc:
        mode = "Upload" if args.upload else "Download"
        if args.autosend:
            mode = "Autosend"
        logger.error(f"{mode} failed: {exc}")
        return 1


__all__ = ["setup_logger", "write_json", "run_autosend", "run_single", "main"]
