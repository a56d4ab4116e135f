from __future__ import annotations

import io
import socket
import threading

import pytest

from aftp.net import ControlChannel
from aftp.server import ControlLoop, FTPServer, LoopState, ServerConfig


def fake_listing(path):
    yield f"listing of {path}"
    yield "-rw-r--r-- 1 u g 4 Jan 1 00:00 test.bin"


@pytest.fixture
def server(tmp_path):
    srv = FTPServer(ServerConfig(host="127.0.0.1", port=0, root=str(tmp_path), listing=fake_listing))
    srv.bind()
    t = threading.Thread(target=srv.serve_forever, daemon=True)
    t.start()
    yield srv
    srv.close()


class Client:
    def __init__(self, server: FTPServer):
        assert server.sock is not None
        self.sock = socket.create_connection(server.sock.getsockname()[:2], timeout=5)
        self.f = self.sock.makefile("rwb")

    def send(self, line: str) -> None:
        self.f.write(line.encode() + b"\r\n")
        self.f.flush()

    def reply(self) -> str:
        line = self.f.readline()
        assert line.endswith(b"\r\n")
        return line.decode().rstrip("\r\n")

    def cmd(self, line: str) -> str:
        self.send(line)
        return self.reply()

    def data_listener(self) -> socket.socket:
        lst = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        lst.bind(("127.0.0.1", 0))
        lst.listen(1)
        lst.settimeout(5)
        port = lst.getsockname()[1]
        assert self.cmd(f"PORT 127,0,0,1,{port // 256},{port % 256}").startswith("200")
        return lst

    def close(self) -> None:
        self.f.close()
        self.sock.close()


@pytest.fixture
def client(server):
    c = Client(server)
    assert c.reply() == "200 Ready."
    yield c
    c.close()


def read_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


def test_stor_binary_end_to_end(client, tmp_path):
    lst = client.data_listener()
    assert client.cmd("TYPE I") == "200 TYPE set."

    client.send("STOR test.bin")
    data, _ = lst.accept()
    assert client.reply().startswith("150")
    data.sendall(bytes.fromhex("DEADBEEF"))
    data.close()
    lst.close()
    assert client.reply().startswith("226")
    assert (tmp_path / "test.bin").read_bytes() == b"\xde\xad\xbe\xef"


def test_noop_between_port_and_stor_rejects(client, tmp_path):
    client.data_listener()
    assert client.cmd("NOOP").startswith("200")
    assert client.cmd("STOR test.bin").startswith("425")
    assert not (tmp_path / "test.bin").exists()


def test_retr_text_end_to_end(client, tmp_path):
    (tmp_path / "readme.txt").write_bytes(b"first\nsecond")
    lst = client.data_listener()

    client.send("RETR readme.txt")
    data, _ = lst.accept()
    data.settimeout(5)
    assert client.reply().startswith("150")
    assert read_all(data) == b"first\r\nsecond\r\n"
    data.close()
    lst.close()
    assert client.reply().startswith("226")


def test_list_end_to_end(client, tmp_path):
    lst = client.data_listener()
    client.send("LIST")
    data, _ = lst.accept()
    data.settimeout(5)
    assert client.reply().startswith("150")
    body = read_all(data)
    data.close()
    lst.close()
    assert client.reply().startswith("226")
    assert body == f"listing of {tmp_path}\r\n-rw-r--r-- 1 u g 4 Jan 1 00:00 test.bin\r\n".encode()


def test_dial_failure_replies_425(client, tmp_path):
    lst = client.data_listener()
    lst.close()
    assert client.cmd("RETR anything").startswith("425")


def test_unknown_then_quit(client):
    reply = client.cmd("FOO")
    assert reply.startswith("502") and "FOO" in reply
    assert client.cmd("NOOP") == "200 Ready."
    assert client.cmd("QUIT") == "221 Goodbye."
    assert client.f.readline() == b""


def test_control_loop_ends_at_eof(tmp_path):
    channel = ControlChannel(io.BytesIO(b"USER bob\n\nSYST\r\n"), io.BytesIO())
    loop = ControlLoop(channel, str(tmp_path))
    loop.run()
    assert loop.state is LoopState.TERMINATED
    assert channel.wfile.getvalue() == b"200 Ready.\r\n230 Login successful.\r\n215 UNIX Type: L8\r\n"


def test_control_loop_stops_after_quit(tmp_path):
    channel = ControlChannel(io.BytesIO(b"QUIT\nNOOP\n"), io.BytesIO())
    ControlLoop(channel, str(tmp_path)).run()
    assert channel.wfile.getvalue() == b"200 Ready.\r\n221 Goodbye.\r\n"


def test_control_loop_write_failure(tmp_path):
    class Broken(io.BytesIO):
        def write(self, b):
            raise BrokenPipeError("gone")

    loop = ControlLoop(ControlChannel(io.BytesIO(b"NOOP\n"), Broken()), str(tmp_path))
    loop.run()
    assert loop.state is LoopState.TERMINATED
