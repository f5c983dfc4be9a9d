"""Sound playback on a fixed set of mixer channels."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional, Protocol

MAX_VOLUME = 128
CHANNEL_COUNT = 8
ALL_CHANNELS = -1


class SoundError(RuntimeError):
    """Raised when a sound cannot be loaded or played."""


def percent_to_volume(percent: int) -> int:
    """Convert a percentage to a mixer volume, truncating toward zero."""
    magnitude = abs(int(percent)) * MAX_VOLUME // 100
    return magnitude if percent >= 0 else -magnitude


class MixerBackend(Protocol):
    def load(self, path: str) -> Any: ...

    def play(self, sound: Any, loops: int) -> Optional[int]: ...

    def set_volume(self, channel: int, volume: int) -> None: ...

    def get_volume(self, channel: int) -> int: ...

    def pause(self, channel: int) -> None: ...

    def resume(self, channel: int) -> None: ...

    def halt(self, channel: int) -> None: ...

    def close(self) -> None: ...


class _PygameBackend:
    """Mixer backend on top of pygame.mixer."""

    def __init__(self, channels: int = CHANNEL_COUNT) -> None:
        os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
        import pygame

        self._pygame = pygame
        try:
            pygame.mixer.init(44100, -16, 2, 2048)
        except pygame.error as exc:
            raise SoundError(f"mixer could not initialize: {exc}") from exc
        pygame.mixer.set_num_channels(channels)
        self._channels = channels

    def load(self, path: str) -> Any:
        try:
            return self._pygame.mixer.Sound(path)
        except (self._pygame.error, OSError) as exc:
            raise SoundError(f"failed to load sound {path}: {exc}") from exc

    def play(self, sound: Any, loops: int) -> Optional[int]:
        for index in range(self._channels):
            channel = self._pygame.mixer.Channel(index)
            if not channel.get_busy():
                channel.play(sound, loops=loops)
                return index
        return None

    def set_volume(self, channel: int, volume: int) -> None:
        self._pygame.mixer.Channel(channel).set_volume(volume / MAX_VOLUME)

    def get_volume(self, channel: int) -> int:
        return round(self._pygame.mixer.Channel(channel).get_volume() * MAX_VOLUME)

    def pause(self, channel: int) -> None:
        if channel == ALL_CHANNELS:
            self._pygame.mixer.pause()
        else:
            self._pygame.mixer.Channel(channel).pause()

    def resume(self, channel: int) -> None:
        if channel == ALL_CHANNELS:
            self._pygame.mixer.unpause()
        else:
            self._pygame.mixer.Channel(channel).unpause()

    def halt(self, channel: int) -> None:
        if channel == ALL_CHANNELS:
            self._pygame.mixer.stop()
        else:
            self._pygame.mixer.Channel(channel).stop()

    def close(self) -> None:
        self._pygame.mixer.quit()


class SoundMixer:
    """Plays sounds on free channels and tracks the sound held by each."""

    def __init__(self, backend: Optional[MixerBackend] = None) -> None:
        self._backend: MixerBackend = backend if backend is not None else _PygameBackend()
        self._sounds: Dict[int, Any] = {}

    def __enter__(self) -> "SoundMixer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def active_channels(self) -> List[int]:
        return sorted(self._sounds)

    def play(self, path: str, loop: bool = False, volume: int = 100) -> int:
        """Play the file at ``path`` and return the channel it plays on."""
        sound = self._backend.load(os.fspath(path))
        channel = self._backend.play(sound, -1 if loop else 0)
        if channel is None:
            raise SoundError(f"no free channel to play {path}")
        self.set_volume(channel, volume)
        self._sounds[channel] = sound
        return channel

    def _apply_volume(self, channel: int, volume: int) -> None:
        if volume < 0:
            return
        self._backend.set_volume(channel, min(volume, MAX_VOLUME))

    def set_volume(self, channel: int, percent: int) -> None:
        if channel >= 0:
            self._apply_volume(channel, percent_to_volume(percent))

    def increase_volume(self, channel: int, percent: int) -> None:
        if channel >= 0:
            current = self._backend.get_volume(channel)
            self._apply_volume(
                channel, min(current + percent_to_volume(percent), MAX_VOLUME)
            )

    def decrease_volume(self, channel: int, percent: int) -> None:
        if channel >= 0:
            current = self._backend.get_volume(channel)
            self._apply_volume(channel, max(current - percent_to_volume(percent), 0))

    def volume(self, channel: int) -> int:
        return self._backend.get_volume(channel)

    def pause(self, channel: int) -> None:
        self._backend.pause(channel)

    def resume(self, channel: int) -> None:
        self._backend.resume(channel)

    def stop(self, channel: int) -> None:
        """Halt ``channel`` and release the sound it held."""
        self._backend.halt(channel)
        self._sounds.pop(channel, None)

    def stop_all(self) -> None:
        self._backend.halt(ALL_CHANNELS)
        self._sounds.clear()

    def close(self) -> None:
        self._sounds.clear()
        self._backend.close()