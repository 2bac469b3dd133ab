"""Single-file SCP upload over an SSH exec channel.

Only the sink side of the protocol is driven: the remote runs ``scp -t`` and
answers every step with one acknowledgement byte, 0 for success, 1 for an
error and 2 for a fatal error; the last two are followed by a message line.
"""

from __future__ import annotations

import posixpath
import shlex
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, Tuple

import paramiko

from ..config.settings import ScpSettings
from ..utils.logger import get_logger
from .transport import TransferError, Transport

ACK_OK = 0
ACK_ERROR = 1
ACK_FATAL = 2


class ScpProtocolError(TransferError):
    """The remote side refused a step of the copy exchange."""


def read_ack(stream) -> Tuple[int, str]:
    """Read one acknowledgement and, for 1 or 2, the diagnostic line after it."""
    head = stream.read(1)
    if not head:
        raise ScpProtocolError("connection closed while waiting for acknowledgement")
    code = head[0]
    if code not in (ACK_ERROR, ACK_FATAL):
        return code, ""

    message = bytearray()
    while True:
        char = stream.read(1)
        if not char or char == b"\n":
            break
        message += char
    return code, message.decode("utf-8", errors="replace")


def _log_ack(code: int, message: str, logger) -> None:
    if code == ACK_ERROR:
        logger.error(f"Error happened trying to export file using scp: {message}")
    elif code == ACK_FATAL:
        logger.error(f"Fatal error happened trying to export file using scp: {message}")


def check_ack(stream, logger=None) -> int:
    code, message = read_ack(stream)
    _log_ack(code, message, logger or get_logger("ScpTransport"))
    return code


class ScpSession:
    """One authenticated SSH connection; each remote command gets its own channel."""

    def __init__(
        self,
        settings: ScpSettings,
        client_factory: Optional[Callable[[], paramiko.SSHClient]] = None,
        logger=None,
    ) -> None:
        self.settings = settings
        self._client_factory = client_factory or paramiko.SSHClient
        self._client: Optional[paramiko.SSHClient] = None
        self.logger = logger or get_logger(self.__class__.__name__)

    def __enter__(self) -> "ScpSession":
        self.open()
        return self

    def __exit__(self, exc_type, exc, traceback) -> None:
        self.close()

    def open(self) -> None:
        client = self._client_factory()
        known_hosts = Path(self.settings.known_hosts).expanduser()
        try:
            if known_hosts.exists():
                client.load_host_keys(str(known_hosts))
            else:
                self.logger.warning(f"known_hosts 檔案不存在: {known_hosts}")
            client.set_missing_host_key_policy(paramiko.RejectPolicy())
            client.connect(
                self.settings.hostname,
                port=self.settings.port,
                username=self.settings.login,
                password=self.settings.password,
                timeout=self.settings.timeout_sec,
                allow_agent=False,
                look_for_keys=False,
            )
        except (paramiko.SSHException, OSError) as exc:
            client.close()
            raise TransferError(f"Failed to set up the SSH session to {self.settings.hostname}: {exc}") from exc
        self._client = client
        self.logger.info(f"SSH 連線已建立: {self.settings.login}@{self.settings.hostname}")

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    @contextmanager
    def channel(self, command: str) -> Iterator[paramiko.Channel]:
        if self._client is None:
            raise TransferError("SSH session is not open")
        transport = self._client.get_transport()
        if transport is None or not transport.is_active():
            raise TransferError("SSH session is no longer active")
        channel = transport.open_session(timeout=self.settings.timeout_sec)
        try:
            channel.settimeout(self.settings.timeout_sec)
            self.logger.debug(f"command = {command}")
            channel.exec_command(command)
            yield channel
        finally:
            channel.close()


class ScpTransport(Transport):
    name = "scp"

    def __init__(
        self,
        settings: ScpSettings,
        client_factory: Optional[Callable[[], paramiko.SSHClient]] = None,
        logger=None,
    ) -> None:
        super().__init__(logger)
        self.settings = settings
        self.chunk_size = settings.chunk_size_kb * 1024
        self._client_factory = client_factory
        self._session: Optional[ScpSession] = None

    def open(self) -> None:
        session = ScpSession(self.settings, client_factory=self._client_factory, logger=self.logger)
        session.open()
        self._session = session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    @property
    def session(self) -> ScpSession:
        if self._session is None:
            raise TransferError("scp transport used outside of its session")
        return self._session

    def target_path(self, folder: str, name: str) -> str:
        return posixpath.join(folder, name)

    def make_dirs(self, folder: str) -> None:
        command = f"mkdir -p {shlex.quote(folder)}"
        try:
            with self.session.channel(command) as channel:
                status = channel.recv_exit_status()
        except (paramiko.SSHException, OSError) as exc:
            raise TransferError(f"Failed to create subfolders remotely: {exc}") from exc
        if status != 0:
            raise TransferError(f"Failed to create subfolders remotely: mkdir exited with status {status}")

    def send_file(self, source: Path, target: str) -> None:
        source = Path(source)
        name = posixpath.basename(target)
        if not name or "\n" in name:
            raise TransferError(f"invalid remote file name: {target!r}")

        try:
            file_size = source.stat().st_size
            with self.session.channel(f"scp -t {shlex.quote(target)}") as channel:
                writer = channel.makefile("wb")
                reader = channel.makefile("rb")
                self._expect_ack(reader)

                writer.write(f"C0644 {file_size} {name}\n".encode("utf-8"))
                writer.flush()
                self._expect_ack(reader)

                with source.open("rb") as handle:
                    while True:
                        chunk = handle.read(self.chunk_size)
                        if not chunk:
                            break
                        writer.write(chunk)

                writer.write(b"\0")
                writer.flush()
                self._expect_ack(reader)
        except (paramiko.SSHException, OSError) as exc:
            raise TransferError(str(exc) or exc.__class__.__name__) from exc

        self.logger.info(f"SCP: {source} -> {self.settings.hostname}:{target}")

    def _expect_ack(self, reader) -> None:
        code, message = read_ack(reader)
        _log_ack(code, message, self.logger)
        if code in (ACK_ERROR, ACK_FATAL):
            raise ScpProtocolError(f"Ack check failed while trying to export file using scp: {message}")
