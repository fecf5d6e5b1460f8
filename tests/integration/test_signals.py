"""
Shutdown by signal, against a real server process.

    SIGTERM while idle in accept()   ──► exits 0 straight away
    SIGINT in the middle of a request ──► reply completes, then exits 0
"""

import os
import queue
import signal
import socket
import subprocess
import sys
import threading
import time
from pathlib import Path

import pytest


SRC_DIR = Path(__file__).resolve().parents[2] / "src"

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")


class ServerProcess:
    """`python -m minihttp server` in a child process, stderr collected."""

    def __init__(self, doc_root: Path, port: int):
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(
            p for p in (str(SRC_DIR), env.get("PYTHONPATH")) if p
        )
        self.port = port
        self.proc = subprocess.Popen(
            [sys.executable, "-m", "minihttp", "server",
             "-p", str(port), "-l", "DEBUG", str(doc_root)],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            env=env,
        )
        self._lines = queue.Queue()
        threading.Thread(target=self._pump, daemon=True).start()

    def _pump(self) -> None:
        for line in self.proc.stderr:
            self._lines.put(line.decode("utf-8", errors="replace"))

    def wait_for_log(self, text: str, timeout: float = 10.0) -> str:
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise AssertionError(f"server never logged {text!r}")
            try:
                line = self._lines.get(timeout=remaining)
            except queue.Empty:
                continue
            if text in line:
                return line

    def stop(self) -> None:
        if self.proc.poll() is None:
            self.proc.kill()
        self.proc.wait(timeout=10.0)
        self.proc.stderr.close()


@pytest.fixture
def server_process(doc_root: Path, free_port: int):
    server = ServerProcess(doc_root, free_port)
    server.wait_for_log("Waiting for a connection")
    yield server
    server.stop()


def test_sigterm_while_idle_exits_zero(server_process: ServerProcess):
    started = time.monotonic()

    server_process.proc.send_signal(signal.SIGTERM)

    assert server_process.proc.wait(timeout=5.0) == 0
    assert time.monotonic() - started < 5.0


def test_sigint_mid_exchange_finishes_reply(server_process: ServerProcess):
    with socket.create_connection(("127.0.0.1", server_process.port), timeout=10.0) as sock:
        sock.sendall(b"GET / HTTP/1.1\r\n")
        server_process.wait_for_log("Accepted connection from")

        server_process.proc.send_signal(signal.SIGINT)
        server_process.wait_for_log("Received SIGINT")

        sock.sendall(b"\r\n")
        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)

    response = b"".join(chunks)
    assert response.startswith(b"HTTP/1.1 200 OK\r\n")
    assert response.endswith(b"\r\n\r\nhello\n")
    assert server_process.proc.wait(timeout=10.0) == 0
