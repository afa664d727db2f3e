import pytest

from pixel_placer.core.cells import PixelCell
from pixel_placer.core.palette import PaletteEntry, PaletteMatcher
from pixel_placer.core.scheduler import PlacementScheduler, SchedulerState
from pixel_placer.infrastructure.desktop import DesktopSurface


class RecordingSurface:
    def __init__(self, handle="canvas"):
        self.handle = handle
        self.events = []

    def locate(self):
        return self.handle

    def select(self, entry):
        self.events.append(("select", entry.color))

    def emit_pointer_sequence(self, handle, x, y):
        self.events.append(("click", x, y))

    @property
    def clicks(self):
        return [event[1:] for event in self.events if event[0] == "click"]


class ScriptedSleep:
    """Records requested pauses and runs a hook at a given pause number."""

    def __init__(self):
        self.calls = []
        self.hooks = {}

    def at(self, call_number, hook):
        self.hooks[call_number] = hook

    def __call__(self, seconds):
        self.calls.append(seconds)
        hook = self.hooks.get(len(self.calls))
        if hook is not None:
            hook()


def _cells(count):
    return [PixelCell(i, 0, "#000000") for i in range(count)]


def _scheduler(surface=None, palette=("#000000", "#ffffff"), **kwargs):
    matcher = PaletteMatcher(PaletteEntry.from_color(c) for c in palette)
    sleep = ScriptedSleep()
    scheduler = PlacementScheduler(matcher, surface or RecordingSurface(), sleep=sleep, **kwargs)
    return scheduler, sleep


def test_run_places_every_cell_in_order_with_origin_offset() -> None:
    surface = RecordingSurface()
    scheduler, sleep = _scheduler(surface)
    scheduler.set_origin(100, 50)
    scheduler.load([PixelCell(0, 0, "#010101"), PixelCell(1, 0, "#fefefe"), PixelCell(0, 1, "#000000")])

    report = scheduler.start()

    assert surface.events == [
        ("select", "#000000"),
        ("click", 100, 50),
        ("select", "#ffffff"),
        ("click", 101, 50),
        ("select", "#000000"),
        ("click", 100, 51),
    ]
    assert report.placed == 3
    assert not report.stopped
    assert scheduler.state.cursor == 3
    assert not scheduler.running


def test_each_cell_waits_settle_then_inter_pixel_delay() -> None:
    scheduler, sleep = _scheduler(settle_delay_ms=200)
    scheduler.set_inter_pixel_delay(750)
    scheduler.load(_cells(2))

    scheduler.start()

    assert sleep.calls == [0.2, 0.75, 0.2, 0.75]


def test_stop_after_kth_iteration_halts_emissions() -> None:
    surface = RecordingSurface()
    scheduler, sleep = _scheduler(surface)
    scheduler.load(_cells(10))
    # Pause 2 * k is the inter-pixel delay that ends iteration k.
    k = 3
    sleep.at(2 * k, scheduler.stop)

    report = scheduler.start()

    assert scheduler.state.cursor == k
    assert len(surface.clicks) == k
    assert report.stopped
    assert not scheduler.running


def test_stop_during_settle_skips_pending_click() -> None:
    surface = RecordingSurface()
    scheduler, sleep = _scheduler(surface)
    scheduler.load(_cells(5))
    # Pause 3 is the settle delay of the second cell.
    sleep.at(3, scheduler.stop)

    scheduler.start()

    assert surface.clicks == [(0, 0)]
    assert scheduler.state.cursor == 1
    assert sleep.calls == [0.2, 1.0, 0.2]


def test_second_start_while_running_is_ignored() -> None:
    scheduler, sleep = _scheduler()
    scheduler.load(_cells(4))
    observed = []

    def restart():
        observed.append(scheduler.state.cursor)
        observed.append(scheduler.start())
        observed.append(scheduler.state.cursor)

    sleep.at(4, restart)

    report = scheduler.start()

    assert observed == [2, None, 2]
    assert report.placed == 4


def test_start_resets_cursor_for_a_new_run() -> None:
    surface = RecordingSurface()
    scheduler, sleep = _scheduler(surface)
    scheduler.load(_cells(3))
    sleep.at(2, scheduler.stop)
    scheduler.start()
    assert scheduler.state.cursor == 1

    report = scheduler.start()

    assert report.placed == 3
    assert len(surface.clicks) == 4


def test_empty_palette_skips_cells_without_error() -> None:
    surface = RecordingSurface()
    scheduler, sleep = _scheduler(surface, palette=())
    scheduler.load(_cells(3))

    report = scheduler.start()

    assert surface.events == []
    assert report.missed == 3
    assert scheduler.state.cursor == 3
    assert sleep.calls == [1.0, 1.0, 1.0]


def test_palette_replaced_mid_run_is_picked_up() -> None:
    surface = RecordingSurface()
    scheduler, sleep = _scheduler(surface, palette=("#000000",))
    scheduler.load(_cells(2))
    sleep.at(2, lambda: scheduler.matcher.register_discovered([PaletteEntry.from_color("#222222")]))

    scheduler.start()

    assert [e[1] for e in surface.events if e[0] == "select"] == ["#000000", "#222222"]


def test_missing_surface_is_reported_once_and_nothing_clicked(caplog) -> None:
    surface = RecordingSurface(handle=None)
    scheduler, _ = _scheduler(surface)
    scheduler.load(_cells(3))

    with caplog.at_level("WARNING"):
        report = scheduler.start()

    assert surface.clicks == []
    assert report.unavailable == 3
    assert sum("surface not found" in r.getMessage() for r in caplog.records) == 1


def test_collaborator_errors_do_not_escape_the_loop() -> None:
    class FlakySurface(RecordingSurface):
        def emit_pointer_sequence(self, handle, x, y):
            if x == 1:
                raise RuntimeError("element detached")
            super().emit_pointer_sequence(handle, x, y)

    surface = FlakySurface()
    scheduler, _ = _scheduler(surface)
    scheduler.load(_cells(3))

    report = scheduler.start()

    assert surface.clicks == [(0, 0), (2, 0)]
    assert (report.placed, report.failed, report.cursor) == (2, 1, 3)


def test_start_with_empty_queue_does_nothing() -> None:
    scheduler, sleep = _scheduler()

    assert scheduler.start() is None
    assert not scheduler.running
    assert sleep.calls == []


def test_load_is_refused_while_running() -> None:
    scheduler, sleep = _scheduler()
    scheduler.load(_cells(2))
    results = []
    sleep.at(1, lambda: results.append(scheduler.load(_cells(9))))

    scheduler.start()

    assert results == [False]
    assert len(scheduler.queue) == 2


def test_origin_change_applies_to_later_cells() -> None:
    surface = RecordingSurface()
    scheduler, sleep = _scheduler(surface)
    scheduler.load(_cells(2))
    sleep.at(2, lambda: scheduler.set_origin(10, 10))

    scheduler.start()

    assert surface.clicks == [(0, 0), (11, 10)]


def test_negative_delay_is_rejected() -> None:
    scheduler, _ = _scheduler()

    with pytest.raises(ValueError):
        scheduler.set_inter_pixel_delay(-1)


def test_schedulers_keep_independent_state() -> None:
    first, _ = _scheduler()
    second, _ = _scheduler(state=SchedulerState(origin_x=5))

    first.set_origin(1, 2)

    assert (second.state.origin_x, second.state.origin_y) == (5, 0)


class NoDisplayDriver:
    def size(self):
        raise OSError("no display")

    def moveTo(self, x, y, duration=0.0):
        raise OSError("no display")


def test_unavailable_desktop_skips_selection_and_logs_once(caplog) -> None:
    scheduler, sleep = _scheduler(DesktopSurface(driver=NoDisplayDriver()), palette=("#000000",))
    scheduler.load(_cells(5))

    with caplog.at_level("WARNING"):
        report = scheduler.start()

    assert (report.unavailable, report.failed, report.placed) == (5, 0, 0)
    assert sum(r.levelname == "ERROR" for r in caplog.records) <= 1
    # Only inter-pixel pauses; no settle delay without a surface.
    assert sleep.calls == [1.0] * 5


def test_stop_between_arm_and_run_cancels_the_run() -> None:
    surface = RecordingSurface()
    scheduler, _ = _scheduler(surface)
    scheduler.load(_cells(5))

    report = scheduler.arm()
    scheduler.stop()
    scheduler.run(report)

    assert surface.events == []
    assert report.stopped
    assert scheduler.state.cursor == 0
