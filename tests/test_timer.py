from minkernel.message import MessageType, TimerArg
from minkernel.timer import (
    TASK_TIMER_PERIOD,
    TASK_TIMER_VALUE,
    Timer,
    TimerManager,
)


def make_manager():
    sent = []
    return TimerManager(sent.append), sent


def test_tick_counts():
    manager, _ = make_manager()
    assert manager.current_tick() == 0
    for _ in range(5):
        manager.tick()
    assert manager.current_tick() == 5


def test_timer_fires_at_timeout():
    manager, sent = make_manager()
    manager.add_timer(Timer(3, 17))
    manager.tick()
    manager.tick()
    assert sent == []
    assert manager.tick() is False
    assert len(sent) == 1
    assert sent[0].type is MessageType.TIMER_TIMEOUT
    assert sent[0].arg == TimerArg(3, 17)
    manager.tick()
    assert len(sent) == 1


def test_timers_fire_in_timeout_order():
    manager, sent = make_manager()
    manager.add_timer(Timer(2, 20))
    manager.add_timer(Timer(1, 10))
    manager.add_timer(Timer(2, 21))
    manager.tick()
    manager.tick()
    assert [m.arg.value for m in sent] == [10, 20, 21]


def test_overdue_timer_fires_on_next_tick():
    manager, sent = make_manager()
    manager.tick()
    manager.tick()
    manager.add_timer(Timer(1, 9))
    manager.tick()
    assert [m.arg for m in sent] == [TimerArg(1, 9)]


def test_task_timer_rearms_and_sends_nothing():
    manager, sent = make_manager()
    manager.add_timer(Timer(1, TASK_TIMER_VALUE))
    assert manager.tick() is True
    assert sent == []
    results = [manager.tick() for _ in range(TASK_TIMER_PERIOD)]
    assert results[-1] is True
    assert not any(results[:-1])
    assert sent == []


def test_task_timer_rearms_every_twenty_ticks():
    manager, _ = make_manager()
    manager.add_timer(Timer(1, TASK_TIMER_VALUE))
    assert manager.tick() is True
    results = [manager.tick() for _ in range(40)]
    fired = [i + 2 for i, hit in enumerate(results) if hit]
    assert fired == [21, 41]