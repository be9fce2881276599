import threading
import time

from udpping.core import CancelToken, SendError, UdpSession
from udpping.probe import Config, Outcome, Pinger


# ============================================================================
# Поддельный сокет
# ----------------
#
# Вместо сети отвечает через handoff клиента: после записи вызывает
# `reply(data)`, который решает, что и когда положить в канал. Так можно
# проверить цикл отправителя без задачи-приемника.
# ============================================================================
class FakeSession:
    remote_address = '127.0.0.1:5555'

    def __init__(self, reply=None, fail=False):
        self.reply = reply
        self.fail = fail
        self.written = []

    def write(self, data: bytes) -> int:
        if self.fail:
            raise SendError("network is unreachable")
        self.written.append(data)
        if self.reply is not None:
            self.reply(data)
        return len(data)

    def read(self):
        return None


INTERVAL = 100  # мс


def build_pinger(logger, session, interval=INTERVAL, count=None):
    config = Config(
        host='127.0.0.1', interval=interval, packet_size=64, count=count
    )
    return Pinger(session, config, logger, CancelToken())


def delayed_put(pinger, delay, data):
    timer = threading.Timer(delay, pinger.handoff.put, (data,))
    timer.daemon = True
    timer.start()


def test_matched_reply(logger):
    """
    Ответ пришел до дедлайна: цикл закрыт как MATCHED, RTT не меньше
    задержки ответа, но отправитель все равно ждет до конца интервала.
    """
    session = FakeSession()
    pinger = build_pinger(logger, session)
    session.reply = lambda data: delayed_put(pinger, 0.02, data)

    t_start = time.monotonic()
    cycle = pinger.run_cycle(1)
    elapsed = time.monotonic() - t_start

    assert Outcome.MATCHED == cycle.outcome
    assert 0.01 <= cycle.rtt < INTERVAL / 1000
    assert elapsed >= INTERVAL / 1000
    assert 1 == pinger.stats.sent
    assert 1 == pinger.stats.received
    assert cycle.rtt == pinger.stats.rtt_min == pinger.stats.rtt_max


def test_timeout(logger):
    pinger = build_pinger(logger, FakeSession())

    t_start = time.monotonic()
    cycle = pinger.run_cycle(1)

    assert Outcome.TIMEOUT == cycle.outcome
    assert cycle.rtt is None
    assert time.monotonic() - t_start >= INTERVAL / 1000
    assert 1 == pinger.stats.sent
    assert 0 == pinger.stats.received


def test_mismatch_waits_until_deadline(logger):
    """
    Пришел ответ с другими байтами: received не растет, а цикл длится
    до исходного дедлайна.
    """
    session = FakeSession()
    pinger = build_pinger(logger, session)
    session.reply = lambda data: delayed_put(pinger, 0.01, b'x' * 64)

    t_start = time.monotonic()
    cycle = pinger.run_cycle(1)

    assert Outcome.MISMATCH == cycle.outcome
    assert time.monotonic() - t_start >= INTERVAL / 1000
    assert time.monotonic() >= cycle.deadline
    assert 1 == pinger.stats.sent
    assert 0 == pinger.stats.received


def test_stale_reply_is_consumed_by_next_cycle(logger):
    """
    Ответ на цикл 1 опоздал и попал в канал уже после его дедлайна.
    Цикл 2 забирает его и считает несовпадением.
    """
    session = FakeSession()
    pinger = build_pinger(logger, session, interval=20)

    assert Outcome.TIMEOUT == pinger.run_cycle(1).outcome
    pinger.handoff.put(session.written[0])

    assert Outcome.MISMATCH == pinger.run_cycle(2).outcome
    assert 2 == pinger.stats.sent
    assert 0 == pinger.stats.received


def test_send_error_counts_as_sent(logger):
    pinger = build_pinger(logger, FakeSession(fail=True))

    t_start = time.monotonic()
    cycle = pinger.run_cycle(1)

    assert Outcome.SEND_ERROR == cycle.outcome
    assert time.monotonic() - t_start >= INTERVAL / 1000
    assert 1 == pinger.stats.sent
    assert 0 == pinger.stats.received


def test_cancel_during_wait(logger):
    """
    Отмена посреди ожидания: цикл прерывается сразу, статистика
    больше не меняется.
    """
    pinger = build_pinger(logger, FakeSession(), interval=5000)
    threading.Timer(0.05, pinger.token.cancel).start()

    t_start = time.monotonic()
    assert pinger.run_cycle(1) is None
    assert time.monotonic() - t_start < 1.0
    assert 1 == pinger.stats.sent
    assert 0 == pinger.stats.received


def test_send_loop_stops_after_count(logger):
    pinger = build_pinger(logger, FakeSession(), interval=10, count=3)
    pinger.send_loop()

    assert 3 == pinger.stats.sent
    assert pinger.token.cancelled


def test_receive_loop_exits_on_cancel(logger):
    pinger = build_pinger(logger, FakeSession())
    thread = threading.Thread(target=pinger.receive_loop, daemon=True)
    thread.start()

    pinger.token.cancel()
    thread.join(1.0)
    assert not thread.is_alive()


def test_loopback_round_trip(logger, echo_server):
    """
    Клиент против настоящего эхо-сервера на loopback: все ответы
    получены, темп не быстрее интервала, RTT меньше интервала.
    """
    count = 5
    interval = 50
    config = Config(
        host='127.0.0.1',
        port=echo_server.address[1],
        interval=interval,
        count=count,
    )
    token = CancelToken()
    with UdpSession(config.host, config.port) as session:
        pinger = Pinger(session, config, logger, token)
        t_start = time.monotonic()
        pinger.start()
        assert token.wait(5.0)
        assert pinger.join(2.0)
        elapsed = time.monotonic() - t_start

    result = pinger.stats.snapshot()
    assert count == result.sent
    assert count == result.received
    assert elapsed >= count * interval / 1000
    assert 0 <= result.rtt_min <= result.rtt_avg <= result.rtt_max < interval


def test_no_listener_every_cycle_times_out(logger, free_port):
    count = 5
    config = Config(host='127.0.0.1', port=free_port, interval=20, count=count)
    token = CancelToken()
    with UdpSession(config.host, config.port) as session:
        pinger = Pinger(session, config, logger, token)
        pinger.start()
        assert token.wait(5.0)
        assert pinger.join(2.0)

    assert count == pinger.stats.sent
    assert 0 == pinger.stats.received
    assert ["5 packets transmitted, 0 received, 100.00% packet loss"] == \
        pinger.stats.snapshot().summary()
