"""
Speech Service - fire-and-forget pronunciation playback.

Text is synthesized with Edge TTS into a cache directory and played with
whatever command-line audio player the platform offers. Callers never wait
for playback, and no failure here reaches the store or a quiz.
"""

import asyncio
import logging
import os
import platform
import shutil
import subprocess
import threading
import uuid
from pathlib import Path
from typing import Optional

import edge_tts

from ..config import Config
from ..utils import TextParser, ensure_dir

logger = logging.getLogger(__name__)

# Checked in order on macOS/Linux
PLAYER_CANDIDATES = ("afplay", "mpg123", "mpg321", "play", "mpv", "ffplay")


class SpeechService:
    """
    Speak words and example sentences.

    Usage:
        speech = SpeechService(enabled=store.user.settings.sound_enabled)
        speech.speak(word.word)       # returns immediately
    """

    AUDIO_EXT = ".mp3"

    def __init__(
        self,
        cache_dir: Optional[str] = None,
        voice: Optional[str] = None,
        enabled: bool = True,
    ):
        """
        Initialize speech service.

        Args:
            cache_dir: Directory for synthesized audio (defaults to Config.AUDIO_CACHE_DIR)
            voice: Edge TTS voice name (defaults to Config.VOICE)
            enabled: When False, speak() does nothing
        """
        self.cache_dir = Path(cache_dir or Config.AUDIO_CACHE_DIR)
        self.voice = voice or Config.VOICE
        self.enabled = enabled
        self._mutex = threading.Lock()

    def speak(self, text: str) -> Optional[threading.Thread]:
        """
        Start background synthesis and playback.

        Returns:
            The worker thread, or None when there is nothing to do
        """
        if not self.enabled:
            return None
        clean = TextParser.clean_for_tts(text)
        if not clean:
            return None

        worker = threading.Thread(target=self._speak_safely, args=(clean,), daemon=True)
        worker.start()
        return worker

    def _speak_safely(self, text: str) -> None:
        try:
            path = self.ensure_audio(text)
            player = self._play_file(path)
            if player is not None:
                # reap the player so it does not linger as a zombie
                player.wait()
        except Exception as e:
            # playback problems never propagate into quiz or store
            logger.warning("Could not speak '%s': %s", text[:40], e)

    def cache_path(self, text: str) -> Path:
        return self.cache_dir / f"{TextParser.slugify(text)}_{self.voice}{self.AUDIO_EXT}"

    def ensure_audio(self, text: str) -> Path:
        """
        Return the cached audio file for text, synthesizing it if missing.

        Uses atomic write pattern: write to temp file, then rename.
        """
        path = self.cache_path(text)
        with self._mutex:
            if path.exists() and path.stat().st_size > 0:
                return path

            ensure_dir(str(path.parent))
            temp_path = path.with_name(f"{path.name}.{uuid.uuid4().hex[:8]}.tmp")
            try:
                asyncio.run(self._synthesize(text, temp_path))
                if not temp_path.exists() or temp_path.stat().st_size == 0:
                    raise RuntimeError("speech synthesis produced no audio")
                os.replace(temp_path, path)
            finally:
                if temp_path.exists():
                    temp_path.unlink()
        return path

    async def _synthesize(self, text: str, target: Path) -> None:
        communicate = edge_tts.Communicate(text, self.voice)
        await communicate.save(str(target))

    def _play_file(self, path: Path) -> Optional[subprocess.Popen]:
        """Start playback; returns the player process (None on Windows)."""
        if platform.system() == "Windows":
            os.startfile(str(path))  # type: ignore[attr-defined]
            return None

        for candidate in PLAYER_CANDIDATES:
            player = shutil.which(candidate)
            if player:
                args = [player, str(path)]
                if candidate == "ffplay":
                    args = [player, "-nodisp", "-autoexit", "-loglevel", "quiet", str(path)]
                return subprocess.Popen(args, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        raise RuntimeError("no supported audio player found")
