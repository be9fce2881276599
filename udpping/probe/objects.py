from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field, conint


DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5555
DEFAULT_INTERVAL = 1000     # мс
DEFAULT_PACKET_SIZE = 64    # байт
MIN_INTERVAL = 10
MIN_PACKET_SIZE = 64
MAX_PACKET_SIZE = 1500


class Config(BaseModel):
    """
    Входные параметры клиента и сервера
    """
    host: str = Field(
        DEFAULT_HOST, description="Адрес сервера (или адрес для прослушивания)"
    )
    port: conint(ge=1, le=65535) = Field(
        DEFAULT_PORT, description="UDP-порт"
    )
    interval: conint(ge=MIN_INTERVAL) = Field(
        DEFAULT_INTERVAL, description="Интервал отправки Ping (мс)"
    )
    packet_size: conint(ge=MIN_PACKET_SIZE, le=MAX_PACKET_SIZE) = Field(
        DEFAULT_PACKET_SIZE, description="Размер полезной нагрузки (байт)"
    )
    server_mode: bool = Field(False, description="Запуск в режиме сервера")
    trace: bool = Field(False, description="Логгирование на уровне TRACE")
    count: int | None = Field(
        None, ge=1,
        description="Сколько Ping отправить до остановки (None - бесконечно)"
    )

    @property
    def interval_seconds(self) -> float:
        return self.interval / 1000


class Outcome(Enum):
    MATCHED = 0
    TIMEOUT = 1
    MISMATCH = 2
    SEND_ERROR = 3


@dataclass
class Cycle:
    '''
    Один цикл отправки Ping
    Some args:
        sequence - порядковый номер цикла, начиная с 1
        sent_at - момент отправки (по time.monotonic())
        deadline - момент окончания цикла, sent_at + интервал
        outcome - результат цикла
        rtt - время приема-передачи в секундах, если ответ совпал
    '''
    sequence: int
    sent_at: float
    deadline: float
    outcome: Outcome | None = None
    rtt: float | None = None


class Result(BaseModel):
    sent: int = Field(..., description="Сколько Ping отправлено")
    received: int = Field(..., description="Сколько корректных Pong принято")
    rtt_min: float | None = Field(None, description="Минимальный RTT, мс")
    rtt_avg: float | None = Field(None, description="Средний RTT, мс")
    rtt_max: float | None = Field(None, description="Максимальный RTT, мс")

    @property
    def loss_percent(self) -> float:
        # Если ничего не отправлено, то и терять нечего
        if self.sent == 0:
            return 0.0
        return (self.sent - self.received) / self.sent * 100.0

    def summary(self) -> list[str]:
        """Строки итогового отчета, в том виде, как их печатает ping."""
        lines = [
            f"{self.sent} packets transmitted, {self.received} received, "
            f"{self.loss_percent:.2f}% packet loss"
        ]
        if self.received > 0:
            lines.append(
                f"rtt min/avg/max = {self.rtt_min:.2f}/{self.rtt_avg:.2f}/"
                f"{self.rtt_max:.2f}"
            )
        return lines
