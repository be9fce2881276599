import socket

from click.testing import CliRunner

from udpping.main import cli


def test_invalid_port_range():
    runner = CliRunner()
    result = runner.invoke(cli, ['127.0.0.1', '70000'])

    assert 0 != result.exit_code
    assert "Invalid port value:70000" in result.output
    assert "packets transmitted" not in result.output


def test_invalid_port_not_a_number():
    runner = CliRunner()
    result = runner.invoke(cli, ['127.0.0.1', 'abc'])

    assert 0 != result.exit_code
    assert "Invalid port value:abc" in result.output


def test_invalid_interval():
    runner = CliRunner()
    result = runner.invoke(cli, ['127.0.0.1', '5555', '-i', '5'])

    assert 0 != result.exit_code
    assert "Invalid ping interval:5" in result.output


def test_invalid_packet_size():
    runner = CliRunner()
    for size in ('63', '1501'):
        result = runner.invoke(cli, ['127.0.0.1', '5555', '-l', size])
        assert 0 != result.exit_code
        assert f"Invalid packet size value:{size}" in result.output


def test_missing_host_prints_usage():
    runner = CliRunner()
    result = runner.invoke(cli, [])

    assert 2 == result.exit_code
    assert "Usage:" in result.output


def test_unresolvable_host():
    runner = CliRunner()
    result = runner.invoke(cli, ['a' * 64 + '.com', '5555'])

    assert 1 == result.exit_code
    assert "Fail to resolve address" in result.output


def test_server_bind_error():
    busy = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    busy.bind(('127.0.0.1', 0))
    try:
        runner = CliRunner()
        result = runner.invoke(
            cli, ['-s', '127.0.0.1', str(busy.getsockname()[1])]
        )
    finally:
        busy.close()

    assert 1 == result.exit_code
    assert "Fail to listen" in result.output


def test_ping_with_count(echo_server):
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ['127.0.0.1', str(echo_server.address[1]), '-i', '20', '-c', '3']
    )

    assert 0 == result.exit_code
    assert "3 packets transmitted, 3 received, 0.00% packet loss" in \
        result.output
    assert "rtt min/avg/max = " in result.output
