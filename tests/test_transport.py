import socket

import pytest

from udpping.core import ResolutionError, SocketClosedError, UdpSession, \
    format_address, resolve_address


def test_resolve_address():
    family, sockaddr = resolve_address('127.0.0.1', 5555)
    assert socket.AF_INET == family
    assert ('127.0.0.1', 5555) == sockaddr


def test_resolve_bad_host():
    with pytest.raises(ResolutionError):
        resolve_address('a' * 64 + '.com', 5555)


def test_format_address():
    assert '127.0.0.1:5555' == format_address(('127.0.0.1', 5555))
    assert '[::1]:5555' == format_address(('::1', 5555, 0, 0))


def test_write_read_echo(echo_server):
    port = echo_server.address[1]
    with UdpSession('127.0.0.1', port, read_timeout=1.0) as session:
        assert f'127.0.0.1:{port}' == session.remote_address
        assert 5 == session.write(b'hello')
        assert b'hello' == session.read()


def test_read_returns_none_on_timeout():
    # Сокет-приемник, который ничего не отвечает
    silent = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    silent.bind(('127.0.0.1', 0))
    try:
        with UdpSession('127.0.0.1', silent.getsockname()[1],
                        read_timeout=0.05) as session:
            session.write(b'ping')
            assert session.read() is None
    finally:
        silent.close()


def test_closed_session():
    session = UdpSession('127.0.0.1', 5555)
    session.close()
    session.close()

    assert session.closed
    with pytest.raises(SocketClosedError):
        session.write(b'ping')
    with pytest.raises(SocketClosedError):
        session.read()
