import random
import string


LETTERS = string.ascii_letters.encode('ascii')


class PayloadGenerator:
    """
    Генератор случайной полезной нагрузки Ping фиксированной длины.

    Нагрузка состоит из латинских букв: ее удобно читать в трассировке
    сервера, а совпадение двух нагрузок подряд практически невозможно.
    """
    def __init__(self, size: int, rng: random.Random | None = None):
        if size <= 0:
            raise ValueError(f"payload size must be positive, got {size}")
        self.size = size
        self._rng = rng or random.Random()

    def generate(self) -> bytes:
        return bytes(self._rng.choices(LETTERS, k=self.size))
