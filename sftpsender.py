#!/usr/bin/env python3
"""Script wrapper for running the sender without installing it."""

from __future__ import annotations

import sys

from sftp_sender.main import main


if __name__ == "__main__":
    sys.exit(main())
