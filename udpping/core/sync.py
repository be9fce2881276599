from enum import Enum
import threading
import time
from typing import Callable


class Wake(Enum):
    """Что разбудило ожидающую задачу в `Handoff.take()`."""
    CANCELLED = 0
    DEADLINE = 1
    REPLY = 2


class CancelToken:
    """
    Одноразовый сигнал отмены, общий для всех задач процесса.

    Срабатывает ровно один раз: повторные вызовы `cancel()` ничего не
    делают и возвращают False. При срабатывании вызываются все
    зарегистрированные обработчики (например, закрытие `Handoff`), чтобы
    разбудить задачи, которые ждут не на самом токене.
    """
    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """Зарегистрировать обработчик. Если токен уже сработал -
        обработчик вызывается сразу."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def cancel(self) -> bool:
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """
        Прерываемый сон: ждать не дольше `timeout` секунд.

        Returns:
            bool: True, если токен сработал
        """
        if timeout is not None and timeout <= 0:
            return self._event.is_set()
        return self._event.wait(timeout)


class Handoff:
    """
    Одноместный канал передачи принятых датаграмм от приемника к
    отправителю.

    - `put()` блокирует, пока слот занят (точка обратного давления);
    - `take()` - гонка трех источников: отмена, дедлайн, данные в слоте.
      При одновременной готовности отмена имеет приоритет.

    После `close()` все ожидающие просыпаются, `put()` возвращает False,
    а `take()` - Wake.CANCELLED.
    """
    def __init__(self, token: CancelToken | None = None):
        self._cond = threading.Condition()
        self._slot: bytes | None = None
        self._closed = False
        if token is not None:
            token.on_cancel(self.close)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def empty(self) -> bool:
        with self._cond:
            return self._slot is None

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def put(self, data: bytes) -> bool:
        with self._cond:
            self._cond.wait_for(lambda: self._slot is None or self._closed)
            if self._closed:
                return False
            self._slot = data
            self._cond.notify_all()
            return True

    def take(self, deadline: float) -> tuple[Wake, bytes | None]:
        """
        Ждать данные до момента `deadline` (по часам `time.monotonic()`).

        Returns:
            (Wake, bytes | None): причина пробуждения и данные, если пришли
        """
        with self._cond:
            while True:
                if self._closed:
                    return Wake.CANCELLED, None
                if self._slot is not None:
                    data, self._slot = self._slot, None
                    self._cond.notify_all()
                    return Wake.REPLY, data
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return Wake.DEADLINE, None
                self._cond.wait(remaining)
