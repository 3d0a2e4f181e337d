"""
Camera scanner session.
Owns the camera for as long as the scanner overlay is open and feeds decoded codes back to the caller.
"""
import asyncio
import logging
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

CaptureFactory = Callable[[int], Any]
Decoder = Callable[[Any], List[str]]


def _default_capture_factory(index: int):
    from barcard.scanner.camera import open_camera
    return open_camera(index)


def _default_decoder() -> Decoder:
    from barcard.scanner.camera import OpenCVBarcodeDecoder
    return OpenCVBarcodeDecoder()


class ScannerSession:
    """
    One scanning session: acquire camera, decode frames, release camera.

    Opening the device, grabbing frames and decoding are blocking OpenCV calls
    and run in worker threads. The camera is released in a single finally
    block, whether the session is stopped, cancelled, or fails. When the camera
    is missing or fails to start, the status stays visible until stop().
    """

    def __init__(
        self,
        on_scan: Callable[[str], None],
        on_status: Optional[Callable[[str], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
        capture_factory: Optional[CaptureFactory] = None,
        decoder: Optional[Decoder] = None,
        camera_index: int = 0,
        interval: float = 0.1,
    ):
        """
        Args:
            on_scan: Called once per newly decoded symbol
            on_status: Receives human-readable status / error strings
            on_close: Called after the camera has been released
            capture_factory: Opens a capture device (cv2.VideoCapture compatible)
            decoder: Returns decoded texts for a frame
            camera_index: Device passed to the capture factory
            interval: Seconds between frames
        """
        self._on_scan = on_scan
        self._on_status = on_status
        self._on_close = on_close
        self._capture_factory = capture_factory or _default_capture_factory
        self._decoder = decoder
        self.camera_index = camera_index
        self.interval = interval

        self.status: Optional[str] = None
        self._task: Optional[asyncio.Task] = None
        self._stop_requested = False
        self._stop_event: Optional[asyncio.Event] = None
        self._last_text: Optional[str] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Start the decode loop on the running event loop."""
        if self.running:
            return self._task
        self._stop_requested = False
        self._stop_event = asyncio.Event()
        self._last_text = None
        self._task = asyncio.create_task(self._run(), name="scanner")
        return self._task

    def request_stop(self):
        """Ask the loop to exit after the current frame. Safe to call from on_scan."""
        self._stop_requested = True
        if self._stop_event is not None:
            self._stop_event.set()

    async def stop(self):
        """Stop scanning and wait until the camera is released."""
        self.request_stop()
        task = self._task
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def _status(self, message: str):
        self.status = message
        if self._on_status:
            self._on_status(message)

    def _grab(self, capture) -> List[str]:
        """Read one frame and decode it. Runs in a worker thread."""
        ok, frame = capture.read()
        # Frames without a decodable symbol are skipped silently
        if not ok or frame is None:
            return []
        return self._decoder(frame)

    async def _run(self):
        capture = None
        try:
            self._status("Initializing camera...")
            if self._decoder is None:
                self._decoder = _default_decoder()

            capture = await asyncio.to_thread(self._capture_factory, self.camera_index)
            if capture is None or not capture.isOpened():
                logger.warning(f"[SCANNER] No camera at index {self.camera_index}")
                self._status("No camera found.")
                await self._stop_event.wait()
                return

            self._status("Starting scanner...")

            while not self._stop_requested:
                try:
                    texts = await asyncio.to_thread(self._grab, capture)
                    for text in texts:
                        if self._stop_requested:
                            break
                        if text == self._last_text:
                            continue
                        self._last_text = text
                        logger.info(f"[SCANNER] Decoded: {text}")
                        self._on_scan(text)
                except Exception as e:
                    logger.error(f"[SCANNER] Scan error: {e}")
                    self._status(f"Scan Error: {e}")

                if not self._stop_requested:
                    await asyncio.sleep(self.interval)

        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"[SCANNER] Failed to start scanner: {e}", exc_info=True)
            self._status(f"Error: {type(e).__name__} - {e}")
            await self._stop_event.wait()
        finally:
            if capture is not None:
                capture.release()
                logger.info("[SCANNER] Camera released")
            if self._on_close:
                self._on_close()
