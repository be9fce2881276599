from dataclasses import dataclass
import math
import threading
import time

from udpping.core import CancelToken, Handoff, ProbeLogger, SendError, \
    SocketClosedError, UdpSession, Wake
from .objects import Config, Cycle, Outcome, Result
from .payload import PayloadGenerator


@dataclass
class Statistics:
    """
    Накопленная статистика клиента. Изменяется только задачей-отправителем,
    поэтому блокировки не нужны. Читается один раз, после остановки задач.

    Времена хранятся в секундах.
    """
    sent: int = 0
    received: int = 0
    rtt_sum: float = 0.0
    rtt_min: float = math.inf
    rtt_max: float = 0.0

    def record_sent(self) -> None:
        self.sent += 1

    def record_reply(self, rtt: float) -> None:
        self.received += 1
        self.rtt_sum += rtt
        if rtt > self.rtt_max:
            self.rtt_max = rtt
        if rtt < self.rtt_min:
            self.rtt_min = rtt

    def snapshot(self) -> Result:
        if self.received == 0:
            return Result(sent=self.sent, received=0)
        return Result(
            sent=self.sent,
            received=self.received,
            rtt_min=self.rtt_min * 1000,
            rtt_avg=self.rtt_sum / self.received * 1000,
            rtt_max=self.rtt_max * 1000,
        )


class Pinger:
    """
    Клиент: две задачи поверх одного UDP-сокета.

    - приемник (`receive_loop()`) читает сокет и передает каждую
      датаграмму через одноместный `Handoff`;
    - отправитель (`send_loop()`) раз в интервал отправляет новую нагрузку
      и ждет совпадающий ответ, таймаут или отмену.

    Ответы никак не помечены, поэтому опоздавший ответ из цикла N будет
    прочитан в цикле N+1 и засчитан как несовпадение.
    """
    def __init__(
        self,
        session: UdpSession,
        config: Config,
        logger: ProbeLogger,
        token: CancelToken,
        payloads: PayloadGenerator | None = None
    ):
        self.config = config
        self.logger = logger
        self.token = token
        self.stats = Statistics()
        self.handoff = Handoff(token)

        # Connections:
        self._session = session
        self._payloads = payloads or PayloadGenerator(config.packet_size)

        # Threads:
        self._sender: threading.Thread | None = None
        self._receiver: threading.Thread | None = None

    @property
    def interval(self) -> float:
        return self.config.interval_seconds

    def start(self) -> None:
        self._receiver = threading.Thread(
            target=self.receive_loop, name="udpping-receiver", daemon=True
        )
        self._sender = threading.Thread(
            target=self.send_loop, name="udpping-sender", daemon=True
        )
        self._receiver.start()
        self._sender.start()

    def join(self, timeout: float | None = None) -> bool:
        """
        Дождаться завершения обеих задач.

        Returns:
            bool: True, если обе задачи завершились
        """
        alive = False
        for thread in (self._sender, self._receiver):
            if thread is not None:
                thread.join(timeout)
                alive = alive or thread.is_alive()
        return not alive

    def receive_loop(self) -> None:
        while not self.token.cancelled:
            try:
                data = self._session.read()
            except SocketClosedError:
                self.logger.trace("Socket closed, receiver exits")
                return
            except OSError as e:
                if self.token.cancelled:
                    return
                self.logger.debug("Fail to read: %s", e)
                continue
            if data is None:
                continue
            # Если отправитель еще не забрал прошлый ответ, ждем здесь
            if not self.handoff.put(data):
                return

    def send_loop(self) -> None:
        sequence = 0
        while not self.token.cancelled:
            sequence += 1
            cycle = self.run_cycle(sequence)
            if cycle is None:
                return
            if self.config.count is not None and sequence >= self.config.count:
                self.logger.trace("Reached max pings (%d), stopping", sequence)
                self.token.cancel()
                return

    def run_cycle(self, sequence: int) -> Cycle | None:
        """
        Один цикл: отправить Ping, дождаться ответа или дедлайна, обновить
        статистику и досидеть до дедлайна, чтобы темп отправки не зависел
        от задержки в сети.

        Returns:
            Cycle | None: завершенный цикл, или None, если пришла отмена
        """
        payload = self._payloads.generate()
        self.stats.record_sent()
        try:
            self._session.write(payload)
        except (SendError, SocketClosedError) as e:
            sent_at = time.monotonic()
            cycle = Cycle(sequence, sent_at, sent_at + self.interval,
                          Outcome.SEND_ERROR)
            self.logger.error("Fail to send ping: %s", e)
            return self._finish(cycle)

        sent_at = time.monotonic()
        cycle = Cycle(sequence, sent_at, sent_at + self.interval)
        self.logger.trace("Ping #%d sent", sequence)

        wake, data = self.handoff.take(cycle.deadline)
        if wake is Wake.CANCELLED:
            return None
        if wake is Wake.DEADLINE:
            self.logger.warning("Request timeout")
            cycle.outcome = Outcome.TIMEOUT
            return cycle

        if data != payload:
            # Чужой или опоздавший ответ. Цикл не закрываем, просто
            # досиживаем до исходного дедлайна.
            self.logger.error("Unexpected payload")
            cycle.outcome = Outcome.MISMATCH
            return self._finish(cycle)

        cycle.rtt = time.monotonic() - sent_at
        cycle.outcome = Outcome.MATCHED
        self.stats.record_reply(cycle.rtt)
        self.logger.trace("Recv ping response")
        self.logger.info(
            "Reply from %s: Size=%d, Elapsed=%.2fms",
            self._session.remote_address, len(data), cycle.rtt * 1000
        )
        return self._finish(cycle)

    def _finish(self, cycle: Cycle) -> Cycle | None:
        if self.token.wait(cycle.deadline - time.monotonic()):
            return None
        return cycle
