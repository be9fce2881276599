from dataclasses import dataclass
import logging
import time
from typing import Callable, Literal
import uuid

import colorama


# Уровень трассировки, ниже DEBUG. Включается флагом `-v`.
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


class ColoredFormatter(logging.Formatter):
    """
    Форматтер, выводит записи лога в консоль цветом, зависящим от уровня.

    Основа кода взята отсюда:
    https://alexandra-zaharia.github.io/posts/make-your-own-custom-color-formatter-with-python-logging
    """

    # Цвета по-умолчанию
    DEFAULT_COLORS = {
        TRACE: colorama.Fore.LIGHTBLACK_EX,
        logging.DEBUG: colorama.Fore.CYAN,
        logging.INFO: colorama.Fore.GREEN,
        logging.WARN: colorama.Fore.YELLOW,
        logging.ERROR: colorama.Fore.RED + colorama.Style.BRIGHT,
        logging.CRITICAL:
            colorama.Back.RED + colorama.Fore.WHITE + colorama.Style.BRIGHT,
    }

    def __init__(
        self,
        fmt: str,
        style: Literal['{', '%', '$'] = '%',
        colors: dict[int, str] | None = None,
        **kwargs
    ):
        super().__init__(fmt=fmt, style=style, **kwargs)  # type: ignore
        colors = colors or {}
        self.FORMATS = {
            level: logging.Formatter(
                colors.get(level, ColoredFormatter.DEFAULT_COLORS[level]) +
                fmt + colorama.Style.RESET_ALL,
                style=style  # type: ignore
            )
            for level in ColoredFormatter.DEFAULT_COLORS.keys()
        }

    def format(self, record):
        log_fmt: logging.Formatter | None = self.FORMATS.get(record.levelno)
        if log_fmt is None:
            # Для нестандартных уровней цвет не задан, пишем как есть
            return super().format(record)
        return log_fmt.format(record)


# Формат вывода в консоль. Коротко, как у обычного ping:
# [INFO ] Reply from 127.0.0.1:5555: Size=64, Elapsed=0.12ms
CONSOLE_FORMAT = "[{levelname:5s}] {message}"

# Формат вывода в файл. Кроме стандартных полей используются два
# дополнительных, которые добавляет ProbeLogger:
#
# - uptime: сколько секунд прошло с момента создания логгера
# - runId: идентификатор запуска
#
# Пример строки в журнале:
# 0012.034 [WARNING ] udpping (R:972274) (model.py:run_cycle) - Request timeout
FILE_FORMAT = (
    "{uptime:08.03f} [{levelname:8s}] {name} (R:{runId}) "
    "({filename}:{funcName}) - {message}"
)


@dataclass
class LoggerConfig:
    """Настройки логгера."""
    fmt: str = CONSOLE_FORMAT            # формат-строка для консоли
    file_fmt: str = FILE_FORMAT          # формат-строка для файла
    style: Literal['%', '{', '$'] = '{'  # стиль формат-строк

    level: int = logging.INFO      # уровень логгирования по-умолчанию

    use_console: bool = True       # логгировать ли в консоль (stderr)
    colored_console: bool = True   # использовать ли цветной вывод в консоль

    # Кастомные цвета (ключ - уровень логгирования, значение - цвет).
    # Если не заданы, используются значения по-умолчанию из ColoredFormatter.
    console_colors: dict[int, str] | None = None

    # Уровень логгирования в консоль, если не задан - использовать level
    console_level: int = 0

    # Имя лог-файла (без runId). Если не задан, логгирования в файл не будет.
    file_name: str | None = None

    # Уровень логгирования в файл, если не задан - использовать level
    file_level: int = 0

    # Разделитель между именем файла и runId (file_name<SEP>runId.log)
    file_name_sep: str = "_"

    # Формировать имя файла без run_id.
    file_name_no_run_id: bool = False


class ProbeLogger:
    """
    Логгер для клиента и сервера.

    В дополнение к стандартному логгеру, предоставляет дополнительные поля
    к строке формата:

    - uptime: время работы в секундах
    - runId: идентификатор запуска (уникальный номер)

    Проксирует вызовы записи в лог (trace, debug, info, warning, error,
    critical, log, exception), добавляет новые поля.

    Сообщения лучше передавать через формат-строку, то есть вместо
    `debug(f"size = {size}")` писать `debug("size = %d", size)`: строка
    будет сформирована только при реальной записи в журнал. Это важно
    для трассировки каждого пакета.

    Если включена запись в файл с именем "logname.log", реально будет
    записывать в файл с именем "logname_<runId>.log".
    """
    def __init__(
        self,
        name: str = 'udpping',
        time_getter: Callable[[], float] | None = None,
        run_id: int | None = None
    ):
        """Конструктор.

        Args:
            name: имя логгера
            time_getter: функция получения времени работы (uptime)
            run_id: идентификатор запуска
        """
        self._logger = logging.getLogger(name)
        t_start = time.monotonic()
        self.time_getter = time_getter or (lambda: time.monotonic() - t_start)
        self._run_id: int = run_id or uuid.uuid4().int % 1_000_000
        self._setup_was_called: bool = False

    @property
    def run_id(self) -> int:
        return self._run_id

    @property
    def level(self) -> int:
        return self._logger.level

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def setup(
        self,
        config: LoggerConfig | None = None,
        force_run: bool = False
    ) -> None:
        """
        Настроить логгер.

        Повторные вызовы метода setup() игнорируются, если не передать
        force_run = True.

        Args:
            config (LoggerConfig): конфигурация логгера
            force_run (bool): выполнить, даже если ранее логгер был настроен
        """
        if self._setup_was_called and not force_run:
            return

        config = config or LoggerConfig()
        for handler in self._logger.handlers:
            handler.close()
        self._logger.handlers = []
        if config.use_console:
            if config.colored_console:
                colorama.just_fix_windows_console()
                c_formatter = ColoredFormatter(
                    config.fmt,
                    style=config.style,
                    colors=config.console_colors
                )
            else:
                c_formatter = logging.Formatter(config.fmt, style=config.style)
            s_handler = logging.StreamHandler()
            s_handler.setLevel(config.console_level or config.level)
            s_handler.setFormatter(c_formatter)
            self._logger.addHandler(s_handler)

        if config.file_name is not None:
            f_formatter = logging.Formatter(
                config.file_fmt,
                style=config.style
            )

            if config.file_name_no_run_id:
                file_name = config.file_name
            else:
                file_name = ProbeLogger.build_file_name(
                    config.file_name,
                    self._run_id,
                    config.file_name_sep
                )

            # Каждый запуск создает отдельный файл, поэтому режим = 'w'
            f_handler = logging.FileHandler(file_name, mode='w')
            f_handler.setLevel(config.file_level or config.level)
            f_handler.setFormatter(f_formatter)
            self._logger.addHandler(f_handler)

        self._logger.propagate = False
        self._logger.setLevel(config.level)

        self._setup_was_called = True

    def _get_extra(self):
        return {
            "uptime": self.time_getter(),
            "runId": self._run_id,
        }

    def trace(self, msg, *args, **kwargs):
        self._logger.log(
            TRACE, msg, *args, **kwargs,
            extra=self._get_extra(),
            stacklevel=2,  # skip this (ProbeLogger.xxx()) function
        )

    def debug(self, msg, *args, **kwargs):
        self._logger.debug(
            msg, *args, **kwargs,
            extra=self._get_extra(),
            stacklevel=2,  # skip this (ProbeLogger.xxx()) function
        )

    def info(self, msg, *args, **kwargs):
        self._logger.info(
            msg, *args, **kwargs,
            extra=self._get_extra(),
            stacklevel=2,  # skip this (ProbeLogger.xxx()) function
        )

    def warning(self, msg, *args, **kwargs):
        self._logger.warning(
            msg, *args, **kwargs,
            extra=self._get_extra(),
            stacklevel=2,  # skip this (ProbeLogger.xxx()) function
        )

    def error(self, msg, *args, **kwargs):
        self._logger.error(
            msg, *args, **kwargs,
            extra=self._get_extra(),
            stacklevel=2,  # skip this (ProbeLogger.xxx()) function
        )

    def critical(self, msg, *args, **kwargs):
        self._logger.critical(
            msg, *args, **kwargs,
            extra=self._get_extra(),
            stacklevel=2,  # skip this (ProbeLogger.xxx()) function
        )

    def log(self, level: int, msg, *args, **kwargs):
        self._logger.log(
            level, msg, *args, **kwargs,
            extra=self._get_extra(),
            stacklevel=2,  # skip this (ProbeLogger.xxx()) function
        )

    def exception(self, msg, *args, **kwargs):
        self._logger.exception(
            msg, *args, **kwargs,
            extra=self._get_extra(),
            stacklevel=2,  # skip this (ProbeLogger.xxx()) function
        )

    @staticmethod
    def build_file_name(file_name: str, run_id: int, sep: str = "_"):
        """Построить имя файла.

        Если file_name имеет вид "something.log", а run_id равен 123,
        то результат будет "something_123.log".

        Если file_name имеет вид "something" (без расширения), то результат
        будет "something_123". Если расширение есть, но не равно "log",
        то оно не считается (то есть будет "something.ext_123").
        """
        file_name = file_name.strip()
        ext_pos = file_name.rfind('.')
        if ext_pos >= 0 and file_name[ext_pos+1:].lower() == "log":
            return file_name[:ext_pos] + sep + str(run_id) + file_name[ext_pos:]
        return file_name + sep + str(run_id)
