import socket

from udpping.core import BindError, CancelToken, MAX_DATAGRAM_SIZE, \
    ProbeLogger, TRACE, format_address, resolve_address


class EchoServer:
    """
    Эхо-сервер: каждую принятую датаграмму отправляет обратно отправителю
    без изменений.

    Однопоточный, состояния между запросами не хранит. Ошибки записи
    только логгируются, ошибки чтения (кроме закрытого сокета)
    пропускаются.
    """
    def __init__(
        self,
        host: str,
        port: int,
        logger: ProbeLogger,
        poll_interval: float = 0.2
    ):
        self.logger = logger
        family, sockaddr = resolve_address(host, port)
        try:
            self._sock = socket.socket(family, socket.SOCK_DGRAM)
        except OSError as e:
            raise BindError(f"Fail to create socket: {e}") from e
        try:
            self._sock.bind(sockaddr)
        except OSError as e:
            self._sock.close()
            raise BindError(
                f"Fail to listen at udp://{format_address(sockaddr)}: {e}"
            ) from e
        # Таймаут нужен только для того, чтобы замечать отмену
        self._sock.settimeout(poll_interval)
        self._address = self._sock.getsockname()
        self._closed = False
        self.num_echoed = 0

    @property
    def address(self) -> tuple:
        return self._address

    @property
    def closed(self) -> bool:
        return self._closed

    def serve(self, token: CancelToken | None = None) -> None:
        """
        Основной цикл. Завершается при закрытии сокета или срабатывании
        токена отмены.
        """
        self.logger.info("Listening at udp://%s", format_address(self.address))
        while token is None or not token.cancelled:
            try:
                data, src = self._sock.recvfrom(MAX_DATAGRAM_SIZE)
            except TimeoutError:
                continue
            except OSError as e:
                if self._closed:
                    return
                self.logger.debug("Fail to read: %s", e)
                continue
            self.handle(data, src)

    def handle(self, data: bytes, src: tuple) -> None:
        if self.logger.is_enabled_for(TRACE):
            self.logger.trace(data.decode('ascii', errors='replace'))
        self.logger.info(
            "Request from %s: Size=%d", format_address(src), len(data)
        )
        try:
            n = self._sock.sendto(data, src)
        except OSError as e:
            self.logger.error(
                "Fail to reply to %s: %s", format_address(src), e
            )
            return
        if n != len(data):
            self.logger.warning(
                "Partial reply to %s: %d of %d bytes",
                format_address(src), n, len(data)
            )
            return
        self.num_echoed += 1

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
