"""SFTP upload/download built on paramiko."""

from __future__ import annotations

import logging
import os
import posixpath
import stat
from pathlib import Path
from typing import Optional, Tuple

import paramiko

from .config import Config, Credential
from .errors import TransferError


# ====================== connection ======================
def connect_sftp(
    cred: Credential, cfg: Config, logger: Optional[logging.Logger] = None
) -> Tuple[paramiko.SSHClient, paramiko.SFTPClient]:
    client = paramiko.SSHClient()
    if cfg.strict_host_key_checking:
        client.load_system_host_keys()
        client.set_missing_host_key_policy(paramiko.RejectPolicy())
    else:
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    key_filename = None
    if cred.key_path:
        key = Path(cred.key_path).expanduser()
        if key.exists():
            key_filename = str(key)
        elif logger is not None:
            logger.warning(f"[SSH] key_path for {cred.label} not found, ignoring: {key}")

    try:
        client.connect(
            hostname=cred.ip,
            port=cred.port,
            username=cred.username,
            password=cred.password,
            key_filename=key_filename,
            timeout=cfg.timeout,
            banner_timeout=cfg.timeout,
            allow_agent=key_filename is None and not cred.password,
            look_for_keys=key_filename is None and not cred.password,
        )
        transport = client.get_transport()
        if transport is not None:
            transport.set_keepalive(30)
        sftp = client.open_sftp()
    except BaseException:
        client.close()
        raise
    return client, sftp


# ====================== SFTP helpers ======================
def sftp_is_dir(sftp: paramiko.SFTPClient, path: str) -> bool:
    return stat.S_ISDIR(sftp.stat(path).st_mode or 0)


def sftp_mkdirs(sftp: paramiko.SFTPClient, remote_dir: str) -> None:
    remote_dir = posixpath.normpath(remote_dir)
    if remote_dir in ("", ".", "/"):
        return
    absolute = remote_dir.startswith("/")
    path = "/" if absolute else ""
    for part in remote_dir.strip("/").split("/"):
        path = posixpath.join(path, part) if path else part
        try:
            sftp.stat(path)
        except IOError:
            sftp.mkdir(path)


def remote_target(location: str, local_path: Path) -> str:
    return f"{location.rstrip('/')}/{local_path.name}"


# ====================== streaming copy ======================
def put_file(sftp: paramiko.SFTPClient, local: Path, remote: str, chunk_size: int) -> int:
    parent = posixpath.dirname(remote)
    if parent not in ("", ".", "/"):
        sftp_mkdirs(sftp, parent)
    sent = 0
    with local.open("rb") as lfd, sftp.open(remote, "wb") as rfd:
        rfd.set_pipelined(True)
        while True:
            buf = lfd.read(chunk_size)
            if not buf:
                break
            rfd.write(buf)
            sent += len(buf)
    return sent


def put_directory(sftp: paramiko.SFTPClient, local: Path, remote: str, chunk_size: int) -> int:
    sftp_mkdirs(sftp, remote)
    sent = 0
    for root, dirs, files in os.walk(local):
        dirs.sort()
        rel = Path(root).relative_to(local).as_posix()
        remote_root = remote if rel == "." else posixpath.join(remote, rel)
        for d in dirs:
            sftp_mkdirs(sftp, posixpath.join(remote_root, d))
        for fname in sorted(files):
            sent += put_file(sftp, Path(root) / fname, posixpath.join(remote_root, fname), chunk_size)
    return sent


def get_file(sftp: paramiko.SFTPClient, remote: str, local: Path, chunk_size: int) -> int:
    local.parent.mkdir(parents=True, exist_ok=True)
    received = 0
    with sftp.open(remote, "rb") as rfd, local.open("wb") as lfd:
        rfd.prefetch()
        while True:
            buf = rfd.read(chunk_size)
            if not buf:
                break
            lfd.write(buf)
            received += len(buf)
    return received


def get_directory(sftp: paramiko.SFTPClient, remote: str, local: Path, chunk_size: int) -> int:
    local.mkdir(parents=True, exist_ok=True)
    received = 0
    for entry in sorted(sftp.listdir_attr(remote), key=lambda e: e.filename):
        remote_child = posixpath.join(remote, entry.filename)
        local_child = local / entry.filename
        if stat.S_ISDIR(entry.st_mode or 0):
            received += get_directory(sftp, remote_child, local_child, chunk_size)
        else:
            received += get_file(sftp, remote_child, local_child, chunk_size)
    return received


# ====================== sender ======================
class SftpSender:
    """Uploads and downloads files/directories to hosts from the credential store."""

    def __init__(self, cfg: Config, logger: logging.Logger):
        self.cfg = cfg
        self.logger = logger

    def _open(self, cred: Credential) -> Tuple[paramiko.SSHClient, paramiko.SFTPClient]:
        try:
            return connect_sftp(cred, self.cfg, self.logger)
        except (paramiko.SSHException, OSError) as exc:
            raise TransferError(f"failed to connect to {cred.label}: {exc}") from exc

    @staticmethod
    def _close(client: paramiko.SSHClient, sftp: paramiko.SFTPClient) -> None:
        try:
            sftp.close()
        finally:
            client.close()

    def upload(
        self,
        local_path: os.PathLike,
        host: str,
        remote_location: Optional[str] = None,
        display_path: Optional[os.PathLike] = None,
    ) -> int:
        cred = self.cfg.find_credential(host)
        local = Path(local_path)
        location = remote_location or self.cfg.default_remote_location
        remote = remote_target(location, local)
        self.logger.info(f"[UPLOAD] Uploading {display_path or local} to {host}:{remote}")

        if not local.exists():
            raise TransferError(f"failed to stat local path: {local}")

        client, sftp = self._open(cred)
        try:
            if local.is_dir():
                return put_directory(sftp, local, remote, self.cfg.chunk_size)
            return put_file(sftp, local, remote, self.cfg.chunk_size)
        except (paramiko.SSHException, OSError) as exc:
            raise TransferError(f"failed to upload {local} to {host}:{remote}: {exc}") from exc
        finally:
            self._close(client, sftp)

    def download(self, remote_path: str, host: str, local_location: Optional[str] = None) -> int:
        cred = self.cfg.find_credential(host)
        remote_path = remote_path.rstrip("/") or "/"
        local = Path(local_location or ".") / posixpath.basename(remote_path)
        self.logger.info(f"[DOWNLOAD] Downloading {host}:{remote_path} to {local}")

        client, sftp = self._open(cred)
        try:
            try:
                is_dir = sftp_is_dir(sftp, remote_path)
            except IOError as exc:
                raise TransferError(f"failed to stat remote path {remote_path}: {exc}") from exc
            if is_dir:
                return get_directory(sftp, remote_path, local, self.cfg.chunk_size)
            return get_file(sftp, remote_path, local, self.cfg.chunk_size)
        except (paramiko.SSHException, OSError) as exc:
            raise TransferError(f"failed to download {host}:{remote_path}: {exc}") from exc
        finally:
            self._close(client, sftp)


__all__ = [
    "connect_sftp",
    "sftp_is_dir",
    "sftp_mkdirs",
    "remote_target",
    "put_file",
    "put_directory",
    "get_file",
    "get_directory",
    "SftpSender",
]
