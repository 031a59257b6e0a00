from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from PySide6.QtCore import QObject, QUrl
from PySide6.QtMultimedia import QSoundEffect

from triage.domain.errors import AudioPlaybackError

logger = logging.getLogger(__name__)


class QtAudioSink(QObject):
    """Loops an alert sound through ``QSoundEffect``.

    Missing files are refused up front. Failures the backend only reports
    later, such as a blocked output device, are passed to ``on_error``.
    """

    def __init__(self, on_error: Callable[[str], None] | None = None, parent: QObject | None = None):
        super().__init__(parent)
        self._on_error = on_error
        self.effect = QSoundEffect(self)
        self.effect.setLoopCount(QSoundEffect.Loop.Infinite.value)
        self.effect.statusChanged.connect(self._status_changed)

    def play(self, source: str | None) -> None:
        if not source:
            raise AudioPlaybackError("no alert sound configured")
        path = Path(source)
        if not path.exists():
            raise AudioPlaybackError(f"alert sound not found: {path}")
        url = QUrl.fromLocalFile(str(path.resolve()))
        if self.effect.source() != url:
            self.effect.setSource(url)
        self.effect.play()

    def stop(self) -> None:
        # QSoundEffect restarts from the beginning on the next play()
        self.effect.stop()

    def _status_changed(self) -> None:
        if self.effect.status() == QSoundEffect.Status.Error:
            reason = f"could not play {self.effect.source().toString()}"
            logger.debug(reason)
            if self._on_error:
                self._on_error(reason)
