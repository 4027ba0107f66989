"""
Presentation Controller

Drives upload -> remove background -> display -> download -> full-screen
preview against the ``/api/remove-background`` route. UI layers bind their
buttons to the ``can_*`` properties and call the actions; a disabled action
is a no-op and issues no request.

Only one network operation (remove or download) runs at a time per
controller instance.
"""

import os
import shutil
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Callable, Optional, Union

import httpx

from photogenius.core.exceptions import ImageDecodeError
from photogenius.core.logging import get_logger
from photogenius.engines.capture.services import DEFAULT_JPEG_QUALITY, ImageSource, capture_image
from photogenius.modules.editor.models import BUSY_STATES, EditorState

logger = get_logger(__name__)

REMOVE_BACKGROUND_ENDPOINT = "/api/remove-background"
DEFAULT_DOWNLOAD_FILENAME = "processed_image.png"

DECODE_FAILED_ALERT = "Could not read the selected file as an image."
REMOVE_FAILED_ALERT = "Failed to remove background. Error: {message}"
DOWNLOAD_FAILED_ALERT = "Failed to download the image. Please try again."
UNKNOWN_ERROR = "Unknown error"

Notifier = Callable[[str], None]


class RemovalRequestError(Exception):
    """Remove-background call did not produce a usable result."""


def _log_alert(message: str) -> None:
    logger.warning("editor_alert", message=message)


def _error_body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class EditorController:
    """
    Headless controller for the photo editor workflow.

    Args:
        client: HTTP client pointed at the application (``base_url`` set)
        notifier: Blocking alert callback; receives a user facing message
        download_dir: Where downloaded results are saved
        scratch_dir: Where temporary download files are created
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        notifier: Optional[Notifier] = None,
        download_dir: Union[str, Path] = ".",
        scratch_dir: Optional[Union[str, Path]] = None,
        download_filename: str = DEFAULT_DOWNLOAD_FILENAME,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
        endpoint: str = REMOVE_BACKGROUND_ENDPOINT,
    ):
        self.client = client
        self.notifier = notifier or _log_alert
        self.download_dir = Path(download_dir)
        self.scratch_dir = str(scratch_dir) if scratch_dir is not None else None
        self.download_filename = download_filename
        self.jpeg_quality = jpeg_quality
        self.endpoint = endpoint

        self.state = EditorState.IDLE
        self.original_image: Optional[str] = None
        self.processed_image: Optional[str] = None
        self._full_screen = False

    # =========================================================================
    # Control enablement
    # =========================================================================

    @property
    def is_busy(self) -> bool:
        return self.state in BUSY_STATES

    @property
    def can_upload(self) -> bool:
        return not self.is_busy

    @property
    def can_remove(self) -> bool:
        return self.state in (EditorState.IMAGE_LOADED, EditorState.RESULT_READY)

    @property
    def can_download(self) -> bool:
        return self.state == EditorState.RESULT_READY

    @property
    def can_view_full_screen(self) -> bool:
        return self.processed_image is not None

    @property
    def is_full_screen(self) -> bool:
        return self._full_screen and self.processed_image is not None

    def _set_state(self, state: EditorState):
        logger.debug("editor_state_changed", previous=self.state.value, current=state.value)
        self.state = state

    # =========================================================================
    # Actions
    # =========================================================================

    def load_image(self, source: ImageSource) -> bool:
        """
        Capture a user selected file as a JPEG data URL.

        An unreadable file leaves the current image, result and state
        untouched and raises an alert.
        """
        if not self.can_upload:
            return False

        try:
            data_url = capture_image(source, quality=self.jpeg_quality)
        except ImageDecodeError as e:
            logger.warning("image_decode_failed", reason=e.details.get("reason"))
            self.notifier(DECODE_FAILED_ALERT)
            return False

        self.original_image = data_url
        self.processed_image = None
        self._full_screen = False
        self._set_state(EditorState.IMAGE_LOADED)
        return True

    async def remove_background(self) -> Optional[str]:
        """
        Send the loaded image to the remove-background route.

        Any exit from ``processing`` that is not a success (including
        cancellation) returns the editor to ``image_loaded``.

        Returns:
            The processed image URL, or None when disabled or failed
        """
        if not self.can_remove:
            return None

        self._set_state(EditorState.PROCESSING)
        url: Optional[str] = None
        try:
            response = await self.client.post(self.endpoint, json={"image": self.original_image})

            if not response.is_success:
                error_data = _error_body(response)
                message = f"Failed to remove background: {error_data.get('error', response.reason_phrase)}"
                if error_data.get("details"):
                    message += f". Details: {error_data['details']}"
                raise RemovalRequestError(message)

            result = response.json()
            try:
                url = result["image"]["url"]
            except (KeyError, TypeError):
                raise RemovalRequestError("Response did not include a processed image URL")
            if not isinstance(url, str) or not url:
                url = None
                raise RemovalRequestError("Response did not include a processed image URL")

        except (httpx.HTTPError, ValueError, RemovalRequestError) as e:
            logger.error("remove_background_request_failed", error=str(e), error_type=type(e).__name__)
            self._set_state(EditorState.ERROR)
            self.notifier(REMOVE_FAILED_ALERT.format(message=str(e) or UNKNOWN_ERROR))
            return None

        finally:
            if url is None:
                self.processed_image = None
                self._full_screen = False
                self._set_state(EditorState.IMAGE_LOADED)

        logger.info("remove_background_request_succeeded", url=url)
        self.processed_image = url
        self._set_state(EditorState.RESULT_READY)
        return url

    async def download_image(self) -> Optional[Path]:
        """
        Fetch the processed image and save it to ``download_dir``.

        The bytes go through a temporary file which is removed whether the
        save succeeds or not.

        Returns:
            Path of the saved file, or None when disabled or failed
        """
        if not self.can_download:
            return None

        self._set_state(EditorState.DOWNLOADING)
        temp_path: Optional[str] = None
        try:
            response = await self.client.get(self.processed_image, follow_redirects=True)
            response.raise_for_status()

            fd, temp_path = tempfile.mkstemp(suffix=Path(self.download_filename).suffix, dir=self.scratch_dir)
            with os.fdopen(fd, "wb") as temp_file:
                temp_file.write(response.content)

            self.download_dir.mkdir(parents=True, exist_ok=True)
            destination = self.download_dir / self.download_filename
            shutil.copyfile(temp_path, destination)

        except (httpx.HTTPError, OSError) as e:
            logger.error("download_failed", error=str(e), error_type=type(e).__name__)
            self.notifier(DOWNLOAD_FAILED_ALERT)
            return None

        finally:
            if temp_path is not None:
                with suppress(FileNotFoundError):
                    os.unlink(temp_path)
            self._set_state(EditorState.RESULT_READY)

        logger.info("download_completed", path=str(destination), size=len(response.content))
        return destination

    def view_full_screen(self) -> bool:
        if not self.can_view_full_screen:
            return False
        self._full_screen = True
        return True

    def close_full_screen(self):
        self._full_screen = False
