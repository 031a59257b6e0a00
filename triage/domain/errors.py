from __future__ import annotations


class AudioPlaybackError(RuntimeError):
    """Raised by an audio sink when the runtime refuses to start playback."""
