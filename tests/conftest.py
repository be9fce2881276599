import socket
import threading

import pytest

from udpping.core import CancelToken, LoggerConfig, ProbeLogger, TRACE
from udpping.probe import EchoServer


@pytest.fixture
def logger():
    logger = ProbeLogger('udpping-test')
    logger.setup(
        LoggerConfig(level=TRACE, colored_console=False),
        force_run=True
    )
    return logger


@pytest.fixture
def echo_server(logger):
    """Эхо-сервер на 127.0.0.1, на случайном порту, в отдельном потоке."""
    token = CancelToken()
    server = EchoServer('127.0.0.1', 0, logger, poll_interval=0.05)
    thread = threading.Thread(target=server.serve, args=(token,), daemon=True)
    thread.start()
    yield server
    token.cancel()
    thread.join(2.0)
    server.close()


@pytest.fixture
def free_port():
    """Порт, на котором никто не слушает."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(('127.0.0.1', 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
