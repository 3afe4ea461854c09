"""Sounddevice-backed playback of a WAV cue on phase transitions."""

from __future__ import annotations

import logging
import threading
import wave
from pathlib import Path
from typing import Optional

import numpy as np
import sounddevice as sd

from .desktop import NotificationError


def load_wav(path: str | Path) -> tuple[np.ndarray, int]:
    """Load a 16-bit PCM WAV file as a mono float32 array in [-1, 1]."""
    try:
        with wave.open(str(path), "rb") as wav_file:
            channels = wav_file.getnchannels()
            sample_width = wav_file.getsampwidth()
            sample_rate_hz = wav_file.getframerate()
            frames = wav_file.readframes(wav_file.getnframes())
    except (OSError, EOFError, wave.Error) as error:
        raise NotificationError(f"Cannot read sound file {path}: {error}") from error

    if sample_width != 2:
        raise NotificationError(
            f"Sound file {path} must be 16-bit PCM, got {sample_width * 8}-bit"
        )

    samples = np.frombuffer(frames, dtype="<i2").astype(np.float32) / 32768.0
    if channels > 1:
        samples = samples.reshape(-1, channels).mean(axis=1)
    if len(samples) == 0:
        raise NotificationError(f"Sound file {path} contains no audio")
    return samples, sample_rate_hz


class SoundPlayer:
    """Plays a preloaded mono cue through a selected sounddevice output."""
    def __init__(
        self,
        wav: np.ndarray,
        sample_rate_hz: int,
        output_device_index: Optional[int] = None,
        blocksize: int = 2048,
        logger: Optional[logging.Logger] = None,
    ):
        if wav.ndim != 1:
            raise NotificationError("Expected mono PCM array for playback")
        self._wav = wav
        self._sample_rate_hz = sample_rate_hz
        self._output_device_index = output_device_index
        self._blocksize = blocksize
        self._logger = logger or logging.getLogger("notify.sound")

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        output_device_index: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "SoundPlayer":
        wav, sample_rate_hz = load_wav(path)
        return cls(
            wav,
            sample_rate_hz,
            output_device_index=output_device_index,
            logger=logger,
        )

    def play_async(self) -> threading.Thread:
        thread = threading.Thread(target=self._play_logged, daemon=True, name="sound-cue")
        thread.start()
        return thread

    def play(self) -> None:
        wav = self._wav
        pos = 0

        def callback(outdata, frames, time_info, status):
            nonlocal pos
            if status:
                self._logger.warning("Sounddevice status: %s", status)

            end = pos + frames
            chunk = wav[pos:end]

            if len(chunk) < frames:
                outdata[: len(chunk), 0] = chunk
                outdata[len(chunk) :, 0] = 0
                raise sd.CallbackStop()

            outdata[:, 0] = chunk
            pos = end

        try:
            with sd.OutputStream(
                channels=1,
                samplerate=self._sample_rate_hz,
                blocksize=self._blocksize,
                callback=callback,
                device=self._output_device_index,
            ):
                sd.sleep(int(len(wav) / self._sample_rate_hz * 1000) + 200)
        except Exception as error:
            raise NotificationError(f"Audio playback failed: {error}") from error

    def _play_logged(self) -> None:
        try:
            self.play()
        except NotificationError as error:
            self._logger.error("%s", error)
