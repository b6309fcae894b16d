"""ASCII banner and version output."""

from __future__ import annotations

from . import __version__

BANNER = r"""
         ______ __                              __
   _____/ __/ /_____  ________  ____  ____/ /__  _____
  / ___/ /_/ __/ __ \/ ___/ _ \/ __ \/ __  / _ \/ ___/
 (__  ) __/ /_/ /_/ (__  )  __/ / / / /_/ /  __/ /
/____/_/  \__/ .___/____/\___/_/ /_/\__,_/\___/_/
            /_/
"""


def version_line() -> str:
    return f"Current sftpsender version {__version__}"


def print_version() -> None:
    print(version_line())


def print_banner() -> None:
    print(f"{BANNER}\n{version_line():>40}\n")


__all__ = ["BANNER", "version_line", "print_version", "print_banner"]
