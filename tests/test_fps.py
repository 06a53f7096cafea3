"""
Tests for the windowed FPS counter.
"""

from pipeline.fps import FpsCounter


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class TestFpsCounter:
    def test_zero_before_first_window_closes(self):
        clock = FakeClock()
        counter = FpsCounter(clock=clock)
        for i in range(1, 10):
            clock.now = i * 0.1
            assert counter.tick() == 0

    def test_publishes_count_at_window_end(self):
        clock = FakeClock()
        counter = FpsCounter(clock=clock)
        for i in range(1, 11):
            clock.now = i * 0.1
            fps = counter.tick()
        # Ten cycles, the last one at t=1.0 closes the window.
        assert fps == 10
        assert counter.fps == 10

    def test_value_holds_until_next_window(self):
        clock = FakeClock()
        counter = FpsCounter(clock=clock)
        clock.now = 1.0
        assert counter.tick() == 1

        clock.now = 1.5
        assert counter.tick() == 1
        clock.now = 1.99
        assert counter.tick() == 1

        clock.now = 2.0
        assert counter.tick() == 3

    def test_slow_cycles(self):
        # A cycle slower than the window still publishes a whole count.
        clock = FakeClock()
        counter = FpsCounter(clock=clock)
        clock.now = 2.5
        assert counter.tick() == 1
        clock.now = 5.0
        assert counter.tick() == 1

    def test_reset(self):
        clock = FakeClock()
        counter = FpsCounter(clock=clock)
        clock.now = 1.0
        counter.tick()
        assert counter.fps == 1

        clock.now = 1.2
        counter.reset()
        assert counter.fps == 0
        clock.now = 2.1
        assert counter.tick() == 0
        clock.now = 2.2
        assert counter.tick() == 2
