"""Tests for SpeechBridge with the audio stack mocked out."""

import sys
from unittest.mock import MagicMock, patch

import pytest

from capabilities import Capability, CapabilityUnavailable, SpeechBridge

SUPPORTED_TTS = Capability.available("text_to_speech")
SUPPORTED_STT = Capability.available("speech_to_text")
NO_TTS = Capability.unavailable("text_to_speech", "no engine")
NO_STT = Capability.unavailable("speech_to_text", "no microphone")


class TestSpeechBridge:
    """Test cases for SpeechBridge."""

    def test_speak_unavailable_raises(self):
        bridge = SpeechBridge(tts=NO_TTS, stt=NO_STT)

        with pytest.raises(CapabilityUnavailable) as excinfo:
            bridge.speak("hello")
        assert excinfo.value.capability is NO_TTS

    def test_recognition_unavailable_raises(self):
        bridge = SpeechBridge(tts=NO_TTS, stt=NO_STT)
        with pytest.raises(CapabilityUnavailable):
            bridge.start_recognition()

    def test_speak_uses_fresh_engine(self):
        fake_pyttsx3 = MagicMock()
        with patch.dict(sys.modules, {"pyttsx3": fake_pyttsx3}):
            bridge = SpeechBridge(tts=SUPPORTED_TTS, stt=NO_STT)
            result = bridge.speak("Vehicle approaching")

        assert result.success is True
        engine = fake_pyttsx3.init.return_value
        engine.say.assert_called_once_with("Vehicle approaching")
        engine.runAndWait.assert_called_once()

    def test_speak_engine_error_is_a_result(self):
        fake_pyttsx3 = MagicMock()
        fake_pyttsx3.init.side_effect = RuntimeError("driver missing")
        with patch.dict(sys.modules, {"pyttsx3": fake_pyttsx3}):
            result = SpeechBridge(tts=SUPPORTED_TTS, stt=NO_STT).speak("hi")

        assert result.success is False
        assert "driver missing" in result.error

    def test_probe_reports_unsupported_when_engine_fails(self):
        fake_pyttsx3 = MagicMock()
        fake_pyttsx3.init.side_effect = OSError("no audio")
        with patch.dict(sys.modules, {"pyttsx3": fake_pyttsx3}):
            bridge = SpeechBridge(stt=NO_STT)

        assert bridge.tts.supported is False
        assert "no audio" in bridge.tts.reason

    def test_transcript_stream_skips_blank_and_stops(self):
        bridge = SpeechBridge(tts=NO_TTS, stt=SUPPORTED_STT)
        chunks = iter(["", "[blank_audio]", "help me", "i fell"])

        def listen(duration):
            text = next(chunks)
            if text == "i fell":
                bridge.stop()
            return text

        bridge._listen_once = listen
        fragments = list(bridge.start_recognition())

        assert fragments == ["help me"]

    def test_audio_error_ends_stream(self):
        bridge = SpeechBridge(tts=NO_TTS, stt=SUPPORTED_STT)
        bridge._listen_once = MagicMock(side_effect=OSError("device lost"))

        assert list(bridge.start_recognition()) == []
