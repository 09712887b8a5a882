"""
Speech-to-text and text-to-speech bridge for the guardian companion.

Both directions are optional. Support is probed once when the bridge is
built and recorded as a Capability; callers check `bridge.tts` /
`bridge.stt` to enable or disable their controls. Calling a direction that
was probed as unsupported raises CapabilityUnavailable instead of failing
quietly.

Flow (speech-to-text):
    1. start_recognition() returns a generator
    2. Each iteration records `chunk_seconds` of mic audio (sounddevice)
    3. The chunk is transcribed in-process by pywhispercpp
    4. Non-empty transcript fragments are yielded to the caller
    5. stop() ends the generator after the chunk in progress

Dependencies (the "speech" extra):
    pip install pyttsx3 sounddevice soundfile pywhispercpp
"""

from __future__ import annotations

import logging
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from capabilities.descriptor import Capability

logger = logging.getLogger(__name__)

# Whisper emits this token for silent chunks.
_BLANK_TRANSCRIPTS = {"", "[blank_audio]"}


@dataclass
class SpeechResult:
    success: bool # True when the text was spoken to completion.
    error: str | None = None # error message if success is False, otherwise None.


# ---------------------------------------------------------------------------
# Capability probes
# ---------------------------------------------------------------------------

def probe_text_to_speech() -> Capability:
    """Check once whether pyttsx3 can start a speech engine here."""
    try:
        import pyttsx3

        engine = pyttsx3.init()
        engine.stop()
    except Exception as exc:
        logger.info("Text-to-speech unavailable: %s", exc)
        return Capability.unavailable("text_to_speech", str(exc) or type(exc).__name__)
    return Capability.available("text_to_speech")


def probe_speech_to_text() -> Capability:
    """Check once whether an input device and the whisper bindings are present."""
    try:
        import sounddevice as sd
        import soundfile  # noqa: F401
        from pywhispercpp.model import Model  # noqa: F401

        sd.query_devices(kind="input")
    except Exception as exc:
        logger.info("Speech-to-text unavailable: %s", exc)
        return Capability.unavailable("speech_to_text", str(exc) or type(exc).__name__)
    return Capability.available("speech_to_text")


# ---------------------------------------------------------------------------
# Main class
# ---------------------------------------------------------------------------

class SpeechBridge:
    """
    Optional speech input/output for the companion.

    Parameters
    ----------
    whisper_model : str
        Model name (e.g. "base.en", "tiny.en") or a path to a local ggml
        model file. Loaded on the first start_recognition() call.

    whisper_models_dir : str | None
        Where pywhispercpp stores/looks for model files.

    n_threads : int
        CPU threads for whisper inference.

    chunk_seconds : int
        Length of each recorded chunk. Each chunk yields at most one
        transcript fragment.

    sample_rate : int
        Recording sample rate. Whisper requires 16000 Hz.

    tts_rate : int
        Speech rate for pyttsx3 in words-per-minute.

    tts_volume : float
        TTS volume from 0.0 to 1.0.

    tts, stt : Capability | None
        Pre-computed capability descriptors. When None the platform is
        probed. Pass descriptors explicitly to skip probing in tests.
    """

    def __init__(
        self,
        whisper_model: str = "base.en",
        whisper_models_dir: str | None = None,
        n_threads: int = 4,
        chunk_seconds: int = 4,
        sample_rate: int = 16000,
        tts_rate: int = 145,
        tts_volume: float = 1.0,
        tts: Capability | None = None,
        stt: Capability | None = None,
    ):
        self._whisper_model_name = whisper_model
        self._whisper_models_dir = whisper_models_dir
        self._n_threads = n_threads
        self.chunk_seconds = chunk_seconds
        self.sample_rate = sample_rate
        self._tts_rate = tts_rate
        self._tts_volume = tts_volume

        self.tts = tts if tts is not None else probe_text_to_speech()
        self.stt = stt if stt is not None else probe_speech_to_text()

        self._whisper = None
        self._stop_event = threading.Event()
        self._speak_lock = threading.Lock()

        logger.info(
            "SpeechBridge initialized | tts=%s | stt=%s",
            self.tts.supported,
            self.stt.supported,
        )

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def speak(self, text: str) -> SpeechResult:
        """
        Speak `text` aloud and wait for it to finish.

        A fresh engine is created per call; reusing one pyttsx3 engine
        across runAndWait() calls silently drops output on macOS.

        Raises
        ------
        CapabilityUnavailable
            If text-to-speech was probed as unsupported.
        """
        self.tts.require()
        logger.info("Speaking: %s", text)

        import pyttsx3

        try:
            # One utterance at a time; alerts may be spoken from several threads.
            with self._speak_lock:
                engine = pyttsx3.init()
                engine.setProperty("rate", self._tts_rate)
                engine.setProperty("volume", self._tts_volume)
                engine.say(text)
                engine.runAndWait()
                engine.stop()
        except Exception as exc:
            logger.error("TTS failed: %s", exc, exc_info=True)
            return SpeechResult(success=False, error=str(exc))
        return SpeechResult(success=True)

    def start_recognition(self) -> Iterator[str]:
        """
        Start listening and return a generator of transcript fragments.

        The generator runs until stop() is called or the caller stops
        iterating. Audio errors end the stream; they are logged, not raised.

        Raises
        ------
        CapabilityUnavailable
            If speech-to-text was probed as unsupported.
        """
        self.stt.require()
        self._stop_event.clear()
        return self._transcripts()

    def stop(self) -> None:
        """Ask the running recognition stream to end after its current chunk."""
        self._stop_event.set()

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _transcripts(self) -> Iterator[str]:
        while not self._stop_event.is_set():
            try:
                fragment = self._listen_once(self.chunk_seconds)
            except Exception as exc:
                logger.error("Recognition stream stopped: %s", exc, exc_info=True)
                return
            if self._stop_event.is_set():
                return
            if fragment not in _BLANK_TRANSCRIPTS:
                yield fragment

    def _listen_once(self, duration: int) -> str:
        """Record one chunk to a temp .wav, transcribe it, clean up."""
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(suffix=".wav", delete=False) as f:
                tmp_path = f.name
            self._record_audio(duration=duration, filepath=tmp_path)
            return self._transcribe(tmp_path)
        finally:
            if tmp_path:
                Path(tmp_path).unlink(missing_ok=True)

    def _record_audio(self, duration: int, filepath: str) -> None:
        import sounddevice as sd
        import soundfile as sf

        audio = sd.rec(
            frames=int(duration * self.sample_rate),
            samplerate=self.sample_rate,
            channels=1,
            dtype="int16",
        )
        sd.wait()
        sf.write(filepath, audio, self.sample_rate)

    def _transcribe(self, audio_path: str) -> str:
        if self._whisper is None:
            from pywhispercpp.model import Model

            logger.info("Loading whisper model '%s'...", self._whisper_model_name)
            self._whisper = Model(
                model=self._whisper_model_name,
                models_dir=self._whisper_models_dir,
                print_realtime=False,
                print_progress=False,
                n_threads=self._n_threads,
            )
        segments = self._whisper.transcribe(audio_path)
        return " ".join(seg.text for seg in segments).strip().lower()
