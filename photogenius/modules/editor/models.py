"""
Editor State

A single explicit state value replaces the loading / image / result flags a
UI would otherwise juggle. Full-screen preview is tracked separately because
it layers on top of ``RESULT_READY``.
"""

from enum import Enum


class EditorState(str, Enum):
    """Presentation workflow states."""
    IDLE = "idle"                    # Nothing uploaded yet
    IMAGE_LOADED = "image_loaded"    # Captured image held in memory
    PROCESSING = "processing"        # Remove-background request in flight
    RESULT_READY = "result_ready"    # Processed image URL available
    DOWNLOADING = "downloading"      # Fetching processed image bytes
    ERROR = "error"                  # Removal failed; alert pending


# States in which a network operation is in flight
BUSY_STATES = frozenset({EditorState.PROCESSING, EditorState.DOWNLOADING})
