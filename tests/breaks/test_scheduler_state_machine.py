import unittest

from breaks.service import BreakScheduler


class _FakeClock:
    def __init__(self, now: float = 1_700_000_000.5):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class _FakeTimer:
    def __init__(self, delay_seconds: float, callback):
        self.delay_seconds = delay_seconds
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.fired = True
        self.callback()


class _FakeTimerBackend:
    def __init__(self):
        self.timers: list[_FakeTimer] = []

    def arm(self, delay_seconds: float, callback) -> _FakeTimer:
        timer = _FakeTimer(delay_seconds, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[_FakeTimer]:
        return [timer for timer in self.timers if not timer.cancelled and not timer.fired]


class _ClampingTimerBackend(_FakeTimerBackend):
    def __init__(self, max_delay_seconds: float):
        super().__init__()
        self.max_delay_seconds = max_delay_seconds

    def arm(self, delay_seconds: float, callback) -> _FakeTimer:
        return super().arm(min(delay_seconds, self.max_delay_seconds), callback)


class _RecordingListener:
    def __init__(self):
        self.events: list[tuple[str, object]] = []

    def break_started(self, duration_seconds: int) -> None:
        self.events.append(("started", duration_seconds))

    def break_ended(self) -> None:
        self.events.append(("ended", None))


class BreakSchedulerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _FakeClock()
        self.timers = _FakeTimerBackend()
        self.listener = _RecordingListener()
        self.scheduler = BreakScheduler(
            interval_seconds=1200,
            break_duration_seconds=30,
            timer_backend=self.timers,
            listener=self.listener,
            clock=self.clock,
        )

    def _only_active_timer(self) -> _FakeTimer:
        active = self.timers.active
        self.assertEqual(1, len(active))
        return active[0]

    def test_starts_idle_without_timer(self) -> None:
        self.assertEqual("idle", self.scheduler.phase)
        self.assertEqual([], self.timers.timers)
        self.assertEqual(1200, self.scheduler.time_remaining())

    def test_start_counts_down_default_interval(self) -> None:
        result = self.scheduler.start()

        self.assertTrue(result.accepted)
        self.assertEqual("counting_down", result.snapshot.phase)
        self.assertEqual(1200, self.scheduler.time_remaining())
        self.assertEqual(1200, self._only_active_timer().delay_seconds)
        self.assertAlmostEqual(self.clock.now + 1200, self.scheduler.next_break_deadline)

    def test_start_does_not_reset_running_countdown(self) -> None:
        self.scheduler.start()
        self.clock.advance(100)

        result = self.scheduler.start()

        self.assertFalse(result.accepted)
        self.assertEqual("already_running", result.reason)
        self.assertEqual(1100, self.scheduler.time_remaining())

    def test_reschedule_then_time_remaining_matches_requested_seconds(self) -> None:
        self.scheduler.start()
        for seconds in (0, 1, 59, 65, 1200, 3661, 86400):
            with self.subTest(seconds=seconds):
                self.scheduler.reschedule(seconds)
                self.assertEqual(seconds, self.scheduler.time_remaining())
                self.assertEqual(seconds, self._only_active_timer().delay_seconds)

    def test_negative_reschedule_clamps_to_now(self) -> None:
        self.scheduler.start()
        result = self.scheduler.reschedule(-45)

        self.assertTrue(result.accepted)
        self.assertEqual(0, self.scheduler.time_remaining())
        self.assertEqual(self.clock.now, self.scheduler.next_break_deadline)
        self.assertEqual(0.0, self._only_active_timer().delay_seconds)

    def test_extend_adds_to_current_remaining(self) -> None:
        self.scheduler.start()
        self.clock.advance(200)

        self.scheduler.extend(60)
        self.assertEqual(1060, self.scheduler.time_remaining())

        self.clock.advance(10)
        self.scheduler.extend(300)
        self.assertEqual(1350, self.scheduler.time_remaining())
        self.assertAlmostEqual(1350, self._only_active_timer().delay_seconds)

    def test_extend_after_deadline_passed_counts_from_now(self) -> None:
        self.scheduler.reschedule(5)
        self.clock.advance(20)

        self.scheduler.extend(60)

        self.assertEqual(60, self.scheduler.time_remaining())

    def test_pause_for_reschedules(self) -> None:
        self.scheduler.start()
        result = self.scheduler.pause_for(45 * 60)

        self.assertTrue(result.accepted)
        self.assertEqual("paused", result.reason)
        self.assertEqual(2700, self.scheduler.time_remaining())

    def test_skip_next_break_resets_to_default_interval(self) -> None:
        self.scheduler.start()
        self.scheduler.reschedule(37)

        result = self.scheduler.skip_next_break()

        self.assertTrue(result.accepted)
        self.assertEqual(1200, self.scheduler.time_remaining())
        self.assertEqual([], self.listener.events)

    def test_timer_fire_starts_break_then_end_timer_restarts_cycle(self) -> None:
        self.scheduler.start()
        self.clock.advance(1200)
        self._only_active_timer().fire()

        self.assertEqual("on_break", self.scheduler.phase)
        self.assertEqual([("started", 30)], self.listener.events)
        self.assertEqual(30, self.scheduler.time_remaining())
        end_timer = self._only_active_timer()
        self.assertEqual(30, end_timer.delay_seconds)

        self.clock.advance(30)
        end_timer.fire()

        self.assertEqual("counting_down", self.scheduler.phase)
        self.assertEqual([("started", 30), ("ended", None)], self.listener.events)
        self.assertEqual(1200, self.scheduler.time_remaining())
        self.assertIsNone(self.scheduler.break_end_deadline)

    def test_take_break_now_discards_countdown_and_arms_one_end_timer(self) -> None:
        self.scheduler.start()
        self.clock.advance(500)

        result = self.scheduler.take_break_now()

        self.assertTrue(result.accepted)
        self.assertEqual("on_break", result.snapshot.phase)
        self.assertEqual(30, result.snapshot.remaining_seconds)
        self.assertIsNone(self.scheduler.next_break_deadline)
        self.assertEqual(30, self._only_active_timer().delay_seconds)
        self.assertEqual([("started", 30)], self.listener.events)

    def test_take_break_now_rejected_while_on_break(self) -> None:
        self.scheduler.take_break_now()
        result = self.scheduler.take_break_now()

        self.assertFalse(result.accepted)
        self.assertEqual("on_break", result.reason)
        self.assertEqual([("started", 30)], self.listener.events)

    def test_end_break_now_ends_and_reschedules(self) -> None:
        self.scheduler.start()
        self.scheduler.take_break_now()
        self.clock.advance(5)

        result = self.scheduler.end_break_now()

        self.assertTrue(result.accepted)
        self.assertEqual("counting_down", self.scheduler.phase)
        self.assertEqual(1200, self.scheduler.time_remaining())
        self.assertEqual([("started", 30), ("ended", None)], self.listener.events)
        self.assertEqual(1200, self._only_active_timer().delay_seconds)

    def test_end_break_now_is_noop_when_not_on_break(self) -> None:
        self.scheduler.start()
        deadline = self.scheduler.next_break_deadline

        result = self.scheduler.end_break_now()

        self.assertFalse(result.accepted)
        self.assertEqual("not_on_break", result.reason)
        self.assertEqual(deadline, self.scheduler.next_break_deadline)
        self.assertEqual([], self.listener.events)

    def test_countdown_commands_are_ignored_during_break(self) -> None:
        self.scheduler.take_break_now()
        deadline = self.scheduler.break_end_deadline
        end_timer = self._only_active_timer()

        results = [
            self.scheduler.reschedule(10),
            self.scheduler.extend(60),
            self.scheduler.pause_for(600),
            self.scheduler.skip_next_break(),
            self.scheduler.pause_until_resume(),
        ]

        for result in results:
            with self.subTest(action=result.action):
                self.assertFalse(result.accepted)
                self.assertEqual("on_break", result.reason)
        self.assertEqual("on_break", self.scheduler.phase)
        self.assertEqual(deadline, self.scheduler.break_end_deadline)
        self.assertIs(end_timer, self._only_active_timer())

    def test_stale_timer_fire_after_reschedule_is_ignored(self) -> None:
        self.scheduler.start()
        original = self._only_active_timer()

        self.scheduler.reschedule(500)
        self.assertTrue(original.cancelled)
        self.clock.advance(1200)
        original.callback()

        self.assertEqual([], self.listener.events)
        self.assertEqual("counting_down", self.scheduler.phase)
        current = self._only_active_timer()
        self.assertEqual(500, current.delay_seconds)

        current.fire()
        self.assertEqual([("started", 30)], self.listener.events)

    def test_stale_end_timer_after_manual_end_is_ignored(self) -> None:
        self.scheduler.take_break_now()
        end_timer = self._only_active_timer()
        self.scheduler.end_break_now()

        self.clock.advance(30)
        end_timer.callback()

        self.assertEqual([("started", 30), ("ended", None)], self.listener.events)
        self.assertEqual("counting_down", self.scheduler.phase)
        self.assertEqual(1170, self.scheduler.time_remaining())

    def test_early_fire_after_clock_step_rearms_for_remaining(self) -> None:
        self.scheduler.start()
        self.clock.advance(1000)
        self._only_active_timer().fire()

        self.assertEqual("counting_down", self.scheduler.phase)
        self.assertEqual([], self.listener.events)
        self.assertAlmostEqual(200, self._only_active_timer().delay_seconds)

    def test_long_pause_survives_clamped_timer_delays(self) -> None:
        timers = _ClampingTimerBackend(max_delay_seconds=86400)
        scheduler = BreakScheduler(
            interval_seconds=1200,
            break_duration_seconds=30,
            timer_backend=timers,
            listener=self.listener,
            clock=self.clock,
        )

        scheduler.pause_for(3 * 86400)
        for _ in range(2):
            self.assertEqual(86400, timers.active[0].delay_seconds)
            self.clock.advance(86400)
            timers.active[0].fire()
            self.assertEqual("counting_down", scheduler.phase)

        self.assertEqual(86400, scheduler.time_remaining())
        self.clock.advance(86400)
        timers.active[0].fire()

        self.assertEqual("on_break", scheduler.phase)
        self.assertEqual([("started", 30)], self.listener.events)

    def test_pause_until_resume_disarms_until_start(self) -> None:
        self.scheduler.start()
        result = self.scheduler.pause_until_resume()

        self.assertTrue(result.accepted)
        self.assertTrue(result.snapshot.paused_indefinitely)
        self.assertIsNone(self.scheduler.time_remaining())
        self.assertIsNone(self.scheduler.next_break_deadline)
        self.assertEqual([], self.timers.active)

        self.clock.advance(10 * 24 * 3600)
        self.assertFalse(self.scheduler.extend(60).accepted)
        self.assertEqual("unchanged", self.scheduler.wake_signal().reason)
        self.assertEqual([], self.timers.active)

        resumed = self.scheduler.start()
        self.assertTrue(resumed.accepted)
        self.assertEqual("resumed", resumed.reason)
        self.assertFalse(self.scheduler.is_paused_indefinitely)
        self.assertEqual(1200, self.scheduler.time_remaining())

    def test_pause_for_leaves_indefinite_pause(self) -> None:
        self.scheduler.pause_until_resume()
        self.scheduler.pause_for(600)

        self.assertFalse(self.scheduler.is_paused_indefinitely)
        self.assertEqual(600, self.scheduler.time_remaining())

    def test_wake_signal_is_idempotent(self) -> None:
        self.scheduler.start()
        self.clock.advance(300)

        self.scheduler.wake_signal()
        first = (
            self.scheduler.phase,
            self.scheduler.next_break_deadline,
            [timer.delay_seconds for timer in self.timers.active],
        )
        self.scheduler.wake_signal()
        second = (
            self.scheduler.phase,
            self.scheduler.next_break_deadline,
            [timer.delay_seconds for timer in self.timers.active],
        )

        self.assertEqual(first, second)
        self.assertEqual(1, len(self.timers.active))
        self.assertEqual([], self.listener.events)

    def test_wake_signal_rearms_for_exact_remaining(self) -> None:
        self.scheduler.start()
        deadline = self.scheduler.next_break_deadline
        self.clock.advance(300)

        result = self.scheduler.wake_signal()

        self.assertEqual("rearmed", result.reason)
        self.assertEqual(deadline, self.scheduler.next_break_deadline)
        self.assertAlmostEqual(900, self._only_active_timer().delay_seconds)

    def test_wake_signal_catches_up_missed_break(self) -> None:
        self.scheduler.start()
        self.clock.advance(1210)

        result = self.scheduler.wake_signal()

        self.assertEqual("caught_up", result.reason)
        self.assertEqual("on_break", self.scheduler.phase)
        self.assertEqual([("started", 30)], self.listener.events)
        self.assertEqual(30, self._only_active_timer().delay_seconds)

        self.scheduler.wake_signal()
        self.assertEqual([("started", 30)], self.listener.events)

    def test_wake_signal_ends_break_that_elapsed_during_sleep(self) -> None:
        self.scheduler.take_break_now()
        self.clock.advance(3600)

        result = self.scheduler.wake_signal()

        self.assertEqual("caught_up", result.reason)
        self.assertEqual("counting_down", self.scheduler.phase)
        self.assertEqual([("started", 30), ("ended", None)], self.listener.events)
        self.assertEqual(1200, self.scheduler.time_remaining())

    def test_wake_signal_during_break_rearms_end_timer(self) -> None:
        self.scheduler.take_break_now()
        self.clock.advance(10)

        result = self.scheduler.wake_signal()

        self.assertEqual("rearmed", result.reason)
        self.assertEqual(20, self.scheduler.time_remaining())
        self.assertAlmostEqual(20, self._only_active_timer().delay_seconds)

    def test_wake_signal_before_start_behaves_as_start(self) -> None:
        result = self.scheduler.wake_signal()

        self.assertTrue(result.accepted)
        self.assertEqual("counting_down", self.scheduler.phase)
        self.assertEqual(1200, self.scheduler.time_remaining())
        self.assertEqual(1, len(self.timers.active))

    def test_listener_failure_does_not_corrupt_state(self) -> None:
        class _BrokenListener:
            def break_started(self, duration_seconds: int) -> None:
                raise RuntimeError("overlay crashed")

            def break_ended(self) -> None:
                raise RuntimeError("overlay crashed")

        self.scheduler.set_listener(_BrokenListener())
        with self.assertLogs("breaks", level="ERROR"):
            self.scheduler.take_break_now()

        self.assertEqual("on_break", self.scheduler.phase)
        self.assertEqual(1, len(self.timers.active))

    def test_shutdown_cancels_timer_and_returns_to_idle(self) -> None:
        self.scheduler.start()
        timer = self._only_active_timer()

        self.scheduler.shutdown()

        self.assertTrue(timer.cancelled)
        self.assertEqual("idle", self.scheduler.phase)
        self.assertIsNone(self.scheduler.next_break_deadline)
        timer.callback()
        self.assertEqual([], self.listener.events)

    def test_rejects_non_positive_durations(self) -> None:
        with self.assertRaises(ValueError):
            BreakScheduler(interval_seconds=0)
        with self.assertRaises(ValueError):
            BreakScheduler(break_duration_seconds=-1)


if __name__ == "__main__":
    unittest.main()
