"""
Tests for the camera scanner session and its controller wiring.
"""
import asyncio
import functools
import time

from barcard.orchestrator.controller import GenerationController
from barcard.scanner.session import ScannerSession

from conftest import FakeCapture, FakeImageClient, FakeInfoClient, text_decoder


def make_session(capture, scans, statuses, closed, decoder=text_decoder, on_scan=None):
    return ScannerSession(
        on_scan=on_scan or scans.append,
        on_status=statuses.append,
        on_close=lambda: closed.append(True),
        capture_factory=lambda index: capture,
        decoder=decoder,
        interval=0.001,
    )


async def test_scan_reports_each_symbol_once_and_releases_camera():
    capture = FakeCapture(["", "4006381333931", "4006381333931", ""])
    scans, statuses, closed = [], [], []
    session = make_session(capture, scans, statuses, closed)

    session.start()
    await asyncio.sleep(0.1)
    await session.stop()

    assert scans == ["4006381333931"]
    assert statuses[:2] == ["Initializing camera...", "Starting scanner..."]
    assert capture.released is True
    assert closed == [True]
    assert session.running is False


async def test_request_stop_from_callback_ends_loop():
    capture = FakeCapture(["123", "456"])
    scans, statuses, closed = [], [], []
    session = None

    def on_scan(text):
        scans.append(text)
        session.request_stop()

    session = make_session(capture, scans, statuses, closed, on_scan=on_scan)
    task = session.start()
    await asyncio.wait_for(task, 1.0)

    assert scans == ["123"]
    assert capture.released is True


async def test_no_camera_keeps_status_until_stopped():
    capture = FakeCapture(opened=False)
    scans, statuses, closed = [], [], []
    session = make_session(capture, scans, statuses, closed)

    session.start()
    await asyncio.sleep(0.05)

    assert statuses[-1] == "No camera found."
    assert session.running is True
    assert closed == []

    await session.stop()

    assert capture.released is True
    assert closed == [True]


async def test_slow_camera_does_not_block_event_loop():
    class SlowCapture(FakeCapture):
        def read(self):
            time.sleep(0.2)
            return True, ""

    capture = SlowCapture()
    scans, statuses, closed = [], [], []
    session = ScannerSession(
        on_scan=scans.append,
        on_status=statuses.append,
        on_close=lambda: closed.append(True),
        capture_factory=lambda index: capture,
        decoder=text_decoder,
        interval=0.0,
    )

    session.start()
    await asyncio.sleep(0.05)

    started = time.monotonic()
    await asyncio.sleep(0.01)
    elapsed = time.monotonic() - started

    await session.stop()

    assert elapsed < 0.1
    assert capture.released is True


async def test_decode_errors_are_reported_and_scanning_continues():
    capture = FakeCapture(["bad", "777"])
    scans, statuses, closed = [], [], []

    def decoder(frame):
        if frame == "bad":
            raise RuntimeError("checksum mismatch")
        return [frame]

    session = make_session(capture, scans, statuses, closed, decoder=decoder)
    session.start()
    await asyncio.sleep(0.1)
    await session.stop()

    assert "Scan Error: checksum mismatch" in statuses
    assert scans == ["777"]
    assert capture.released is True


async def test_camera_failure_still_runs_cleanup():
    scans, statuses, closed = [], [], []

    def broken_factory(index):
        raise RuntimeError("device busy")

    session = ScannerSession(
        on_scan=scans.append,
        on_status=statuses.append,
        on_close=lambda: closed.append(True),
        capture_factory=broken_factory,
        decoder=text_decoder,
    )
    session.start()
    await asyncio.sleep(0.05)

    assert statuses[-1] == "Error: RuntimeError - device busy"
    assert closed == []

    await session.stop()
    assert closed == [True]
    assert session.running is False


async def test_controller_scan_sets_seed_and_closes_scanner():
    capture = FakeCapture(["", "8005123456789"])
    info = FakeInfoClient()
    controller = GenerationController(
        info_client=info,
        image_client=FakeImageClient(),
        debounce_ms=5,
        scanner_factory=functools.partial(
            ScannerSession,
            capture_factory=lambda index: capture,
            decoder=text_decoder,
            interval=0.001,
        ),
    )

    state = controller.open_scanner()
    assert state.scanner_open is True

    for _ in range(100):
        if capture.released:
            break
        await asyncio.sleep(0.01)
    await controller.debouncer.wait()

    state = controller.snapshot()
    assert capture.released is True
    assert state.scanner_open is False
    assert state.seed == "8005123456789"
    assert info.calls == ["8005123456789"]
    assert state.creature is not None


async def test_controller_close_scanner_releases_camera():
    capture = FakeCapture()
    controller = GenerationController(
        info_client=FakeInfoClient(),
        image_client=FakeImageClient(),
        scanner_factory=functools.partial(
            ScannerSession,
            capture_factory=lambda index: capture,
            decoder=text_decoder,
            interval=0.001,
        ),
    )

    controller.open_scanner()
    await asyncio.sleep(0.01)
    state = await controller.close_scanner()

    assert state.scanner_open is False
    assert capture.released is True


async def test_controller_overlay_stays_open_without_camera():
    capture = FakeCapture(opened=False)
    controller = GenerationController(
        info_client=FakeInfoClient(),
        image_client=FakeImageClient(),
        scanner_factory=functools.partial(
            ScannerSession,
            capture_factory=lambda index: capture,
            decoder=text_decoder,
            interval=0.001,
        ),
    )

    controller.open_scanner()
    await asyncio.sleep(0.05)

    state = controller.snapshot()
    assert state.scanner_open is True
    assert state.scanner_status == "No camera found."

    state = await controller.close_scanner()
    assert state.scanner_open is False
    assert capture.released is True
