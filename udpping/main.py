import logging

import click

from udpping.core import LoggerConfig, ProbeError, ProbeLogger, TRACE
from udpping.probe.lifecycle import run_client, run_server
from udpping.probe.objects import Config, DEFAULT_HOST, DEFAULT_INTERVAL, \
    DEFAULT_PACKET_SIZE, DEFAULT_PORT, MAX_PACKET_SIZE, MIN_INTERVAL, \
    MIN_PACKET_SIZE


LOGGER_NAME = 'udpping'


def parse_port(arg: str) -> int:
    try:
        port = int(arg)
    except ValueError:
        raise click.ClickException(f"Invalid port value:{arg}")
    if port < 1 or port > 65535:
        raise click.ClickException(
            f"Invalid port value:{port}, expected integer between 1 and 65535"
        )
    return port


def check_client_vars(interval: int, packet_size: int) -> None:
    '''
    Проверка параметров клиента. Сервер их не использует, поэтому
    для него проверка не выполняется.
    '''
    if interval < MIN_INTERVAL:
        raise click.ClickException(
            f"Invalid ping interval:{interval}, "
            f"expected integer larger than {MIN_INTERVAL}"
        )
    if packet_size < MIN_PACKET_SIZE or packet_size > MAX_PACKET_SIZE:
        raise click.ClickException(
            f"Invalid packet size value:{packet_size}, expected integer "
            f"between {MIN_PACKET_SIZE} and {MAX_PACKET_SIZE}"
        )


@click.command()
@click.argument('host', required=False)
@click.argument('port', required=False)
@click.option(
    '-i', '--interval', type=int, default=DEFAULT_INTERVAL,
    help='Интервал отправки Ping (мс)',
    show_default=True
)
@click.option(
    '-l', '--size', 'packet_size', type=int, default=DEFAULT_PACKET_SIZE,
    help='Размер полезной нагрузки Ping (байт)',
    show_default=True
)
@click.option(
    '-s', '--server', 'server_mode', is_flag=True,
    help='Запуститься в режиме эхо-сервера'
)
@click.option(
    '-v', '--verbose', 'trace', is_flag=True,
    help='Логгирование на уровне TRACE'
)
@click.option(
    '-c', '--count', type=click.IntRange(min=1), default=None,
    help='Остановиться после отправки COUNT Ping'
)
@click.option(
    '--log-file', type=click.Path(dir_okay=False), default=None,
    help='Дополнительно писать журнал в файл (к имени добавляется runId)'
)
@click.pass_context
def cli(ctx, host, port, interval, packet_size, server_mode, trace, count,
        log_file):
    '''
    Измерение задержки (RTT) и потерь по UDP.

    Клиент раз в интервал отправляет на HOST:PORT случайную нагрузку и
    ждет ее эхо. С флагом -s запускается эхо-сервер на HOST:PORT.
    '''
    logger = ProbeLogger(LOGGER_NAME)
    logger.setup(LoggerConfig(
        level=TRACE if trace else logging.INFO,
        file_name=log_file,
    ), force_run=True)
    if trace:
        logger.trace("Logging with trace level")

    if host is not None:
        logger.trace("Using host:%s", host)
    if port is not None:
        port = parse_port(port)
        logger.trace("Using port:%d", port)

    try:
        if server_mode:
            logger.info("Running as server")
            run_server(Config(
                host=host or DEFAULT_HOST,
                port=port or DEFAULT_PORT,
                server_mode=True,
                trace=trace,
            ), logger)
            return

        if host is None:
            logger.error("Unexpected args size:0")
            click.echo(ctx.get_help())
            ctx.exit(2)

        check_client_vars(interval, packet_size)
        run_client(Config(
            host=host,
            port=port or DEFAULT_PORT,
            interval=interval,
            packet_size=packet_size,
            trace=trace,
            count=count,
        ), logger)
    except ProbeError as e:
        # Фатальные ошибки: трафика еще не было, просто выходим
        raise click.ClickException(str(e))


if __name__ == '__main__':
    cli()
