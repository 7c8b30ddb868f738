from tomato.countdown import CountdownEngine, has_completed, remaining


def test_remaining_matches_floor_formula():
    t = 1_700_000_000_000
    for duration in (1, 60, 1500):
        for elapsed_ms in (0, 1, 999, 1000, 1001, 59_999, 1_499_999, 1_500_000, 9_000_000):
            expected = max(0, duration - elapsed_ms // 1000)
            assert remaining(duration, t, t + elapsed_ms) == expected


def test_has_completed_only_at_zero():
    assert has_completed(0)
    assert not has_completed(1)


def test_engine_catches_up_in_one_evaluation():
    engine = CountdownEngine(1500)
    engine.arm(0)
    assert engine.remaining(1_500_500) == 0
    assert engine.elapsed_seconds(1_500_500) == 1500


def test_engine_clamps_when_clock_goes_backwards():
    engine = CountdownEngine(60)
    engine.arm(10_000)
    assert engine.remaining(20_000) == 50
    # clock set back before the anchor
    assert engine.remaining(5_000) == 50
    # clock set back, but still after the anchor
    assert engine.remaining(12_000) == 50
    assert engine.remaining(31_000) == 39


def test_engine_disarmed_reports_frozen_value():
    engine = CountdownEngine(300)
    engine.arm(0)
    engine.disarm(engine.remaining(42_000))
    assert not engine.armed
    assert engine.remaining(10_000_000) == 258
    assert engine.deadline_ms() is None


def test_reload_restores_full_duration():
    engine = CountdownEngine(300)
    engine.arm(0)
    engine.remaining(100_000)
    engine.reload(600)
    assert engine.remaining(999_999) == 600
    assert engine.duration_s == 600
