import signal

import click

from udpping.core import CancelToken, ProbeLogger, UdpSession
from .model import Pinger
from .objects import Config, Result
from .server import EchoServer


TERMINATION_SIGNALS = tuple(
    getattr(signal, name)
    for name in ('SIGINT', 'SIGTERM', 'SIGHUP', 'SIGQUIT')
    if hasattr(signal, name)
)

# Сколько ждать завершения задач после отмены (сек)
JOIN_TIMEOUT = 2.0


class Lifecycle:
    """
    Управление жизненным циклом: перехватывает сигналы завершения и
    превращает первый из них в срабатывание токена отмены. Повторные
    сигналы игнорируются.

    Используется как контекстный менеджер: на выходе восстанавливаются
    прежние обработчики сигналов.
    """
    def __init__(
        self,
        token: CancelToken,
        signals: tuple[int, ...] = TERMINATION_SIGNALS
    ):
        self.token = token
        self.signals = signals
        self.received_signal: signal.Signals | None = None
        self._previous: dict[int, object] = {}

    def install(self) -> None:
        for signum in self.signals:
            self._previous[signum] = signal.signal(signum, self.handle_signal)

    def restore(self) -> None:
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()

    def handle_signal(self, signum, frame=None) -> None:
        if self.received_signal is None:
            self.received_signal = signal.Signals(signum)
        self.token.cancel()

    def wait(self, poll_interval: float = 0.2) -> None:
        """Ждать срабатывания токена (сигнал или остановка клиентом)."""
        while not self.token.wait(poll_interval):
            pass

    def __enter__(self):
        self.install()
        return self

    def __exit__(self, *exc):
        self.restore()


def run_client(
    config: Config,
    logger: ProbeLogger,
    token: CancelToken | None = None,
    install_signals: bool = True,
) -> Result:
    """
    Запустить клиент и работать до сигнала завершения (или до `count`
    отправленных Ping). После остановки печатает итоговый отчет.

    Raises:
        ResolutionError, DialError: если не удалось создать сокет
    """
    token = token or CancelToken()
    session = UdpSession(config.host, config.port)
    logger.info(
        "Pinging %s with %d bytes data",
        session.remote_address, config.packet_size
    )
    pinger = Pinger(session, config, logger, token)
    lifecycle = Lifecycle(token, TERMINATION_SIGNALS if install_signals else ())
    with session, lifecycle:
        pinger.start()
        lifecycle.wait()
        if not pinger.join(JOIN_TIMEOUT):
            logger.warning("Tasks did not stop in %.1f seconds", JOIN_TIMEOUT)

    click.echo("")
    if lifecycle.received_signal is not None:
        logger.trace("Catch signal[%s]", lifecycle.received_signal.name)

    result = pinger.stats.snapshot()
    for line in result.summary():
        click.echo(line)
    return result


def run_server(
    config: Config,
    logger: ProbeLogger,
    token: CancelToken | None = None,
    install_signals: bool = True,
) -> EchoServer:
    """
    Запустить эхо-сервер в текущем потоке до сигнала завершения.

    Raises:
        ResolutionError, BindError: если не удалось начать слушать
    """
    token = token or CancelToken()
    server = EchoServer(config.host, config.port, logger)
    lifecycle = Lifecycle(token, TERMINATION_SIGNALS if install_signals else ())
    with server, lifecycle:
        server.serve(token)
    if lifecycle.received_signal is not None:
        logger.trace("Catch signal[%s]", lifecycle.received_signal.name)
    return server
