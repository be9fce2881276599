import socket


# Максимальный размер датаграммы, которую читаем за раз
MAX_DATAGRAM_SIZE = 1500

# Как часто блокирующее чтение просыпается, чтобы проверить отмену (сек)
READ_POLL_INTERVAL = 0.2


class ProbeError(Exception):
    """Базовое исключение для ошибок клиента и сервера."""
    ...


class ResolutionError(ProbeError):
    """Не удалось разрешить адрес (неверный хост или порт)."""
    ...


class BindError(ProbeError):
    """Сервер не может начать слушать на указанном адресе."""
    ...


class DialError(ProbeError):
    """Клиент не может создать сокет к указанному адресу."""
    ...


class SendError(ProbeError):
    """Не удалось отправить датаграмму, или она отправлена не полностью."""
    ...


class SocketClosedError(ProbeError):
    """Сокет закрыт, цикл чтения должен завершиться."""
    ...


def format_address(address: tuple) -> str:
    host, port = address[0], address[1]
    if ':' in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def resolve_address(host: str, port: int) -> tuple[int, tuple]:
    """
    Разрешить адрес для UDP.

    Returns:
        (family, sockaddr): семейство адресов и адрес для connect()/bind()

    Raises:
        ResolutionError: если адрес разрешить не удалось
    """
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError, OverflowError) as e:
        raise ResolutionError(
            f"Fail to resolve address {host}:{port}: {e}"
        ) from e
    if not infos:
        raise ResolutionError(f"Fail to resolve address {host}:{port}")
    family, _, _, _, sockaddr = infos[0]
    return family, sockaddr


class UdpSession:
    """
    Соединенный UDP-сокет к одному адресу.

    Предоставляет два примитива: записать одну датаграмму (`write()`) и
    прочитать одну датаграмму (`read()`). Чтение ограничено таймаутом
    `read_timeout`, чтобы читающая задача могла периодически проверять
    токен отмены.
    """
    def __init__(
        self,
        host: str,
        port: int,
        read_timeout: float | None = READ_POLL_INTERVAL
    ):
        family, self._remote = resolve_address(host, port)
        try:
            self._sock = socket.socket(family, socket.SOCK_DGRAM)
        except OSError as e:
            raise DialError(f"Fail to dial to {host}:{port}: {e}") from e
        try:
            self._sock.connect(self._remote)
            self._sock.settimeout(read_timeout)
        except OSError as e:
            self._sock.close()
            raise DialError(
                f"Fail to dial to {format_address(self._remote)}: {e}"
            ) from e
        self._closed = False

    @property
    def remote_address(self) -> str:
        return format_address(self._remote)

    @property
    def local_address(self) -> str:
        return format_address(self._sock.getsockname())

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> int:
        """
        Отправить датаграмму.

        Raises:
            SocketClosedError: если сокет закрыт
            SendError: если отправка не удалась или прошла не полностью
        """
        if self._closed:
            raise SocketClosedError("write on closed socket")
        try:
            n = self._sock.send(data)
        except OSError as e:
            raise SendError(
                f"UDP send failed to {self.remote_address}: {e}"
            ) from e
        if n != len(data):
            raise SendError(f"Partial write: {n} of {len(data)} bytes")
        return n

    def read(self) -> bytes | None:
        """
        Прочитать одну датаграмму.

        Returns:
            bytes | None: данные, или None, если за время таймаута ничего
                не пришло

        Raises:
            SocketClosedError: если сокет закрыт
            OSError: прочие ошибки чтения (например, ICMP port unreachable)
        """
        if self._closed:
            raise SocketClosedError("read on closed socket")
        try:
            return self._sock.recv(MAX_DATAGRAM_SIZE)
        except TimeoutError:
            return None
        except OSError as e:
            if self._closed:
                raise SocketClosedError("socket was closed") from e
            raise

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
