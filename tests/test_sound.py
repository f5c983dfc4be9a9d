import pytest

from bounceclassic.sound import (
    ALL_CHANNELS,
    MAX_VOLUME,
    SoundError,
    SoundMixer,
    percent_to_volume,
)


class FakeBackend:
    def __init__(self, channels=8):
        self.channels = channels
        self.playing = {}
        self.loops = {}
        self.volumes = {}
        self.paused = set()
        self.halted = []
        self.closed = False

    def load(self, path):
        if path.endswith("missing.wav"):
            raise SoundError(f"failed to load sound {path}")
        return ("sound", path)

    def play(self, sound, loops):
        for channel in range(self.channels):
            if channel not in self.playing:
                self.playing[channel] = sound
                self.loops[channel] = loops
                self.volumes[channel] = MAX_VOLUME
                return channel
        return None

    def set_volume(self, channel, volume):
        self.volumes[channel] = volume

    def get_volume(self, channel):
        return self.volumes.get(channel, MAX_VOLUME)

    def pause(self, channel):
        self.paused.add(channel)

    def resume(self, channel):
        self.paused.discard(channel)

    def halt(self, channel):
        self.halted.append(channel)
        if channel == ALL_CHANNELS:
            self.playing.clear()
        else:
            self.playing.pop(channel, None)

    def close(self):
        self.closed = True


def test_percent_to_volume():
    assert percent_to_volume(100) == MAX_VOLUME
    assert percent_to_volume(0) == 0
    assert percent_to_volume(50) == 64


def test_play_sets_volume_and_loop():
    backend = FakeBackend()
    mixer = SoundMixer(backend)
    first = mixer.play("chime.wav", loop=False, volume=50)
    second = mixer.play("game_audio.wav", loop=True)
    assert (first, second) == (0, 1)
    assert backend.loops == {0: 0, 1: -1}
    assert backend.volumes[0] == percent_to_volume(50)
    assert backend.volumes[1] == MAX_VOLUME
    assert mixer.active_channels == [0, 1]


def test_play_missing_file_raises():
    mixer = SoundMixer(FakeBackend())
    with pytest.raises(SoundError):
        mixer.play("missing.wav")
    assert mixer.active_channels == []


def test_play_without_free_channel_raises():
    mixer = SoundMixer(FakeBackend(channels=1))
    mixer.play("a.wav")
    with pytest.raises(SoundError):
        mixer.play("b.wav")


def test_increase_volume_caps_at_max():
    backend = FakeBackend()
    mixer = SoundMixer(backend)
    channel = mixer.play("a.wav", volume=50)
    mixer.increase_volume(channel, 25)
    assert mixer.volume(channel) == percent_to_volume(50) + percent_to_volume(25)
    mixer.increase_volume(channel, 90)
    assert mixer.volume(channel) == MAX_VOLUME


def test_decrease_volume_floors_at_zero():
    mixer = SoundMixer(FakeBackend())
    channel = mixer.play("a.wav")
    mixer.decrease_volume(channel, 30)
    assert mixer.volume(channel) == MAX_VOLUME - percent_to_volume(30)
    mixer.decrease_volume(channel, 200)
    assert mixer.volume(channel) == 0


def test_negative_channel_is_ignored():
    backend = FakeBackend()
    mixer = SoundMixer(backend)
    mixer.set_volume(-1, 10)
    mixer.increase_volume(-1, 10)
    assert backend.volumes == {}


def test_pause_resume_and_stop():
    backend = FakeBackend()
    mixer = SoundMixer(backend)
    channel = mixer.play("a.wav")
    mixer.pause(channel)
    assert channel in backend.paused
    mixer.resume(channel)
    assert channel not in backend.paused
    mixer.stop(channel)
    assert backend.halted == [channel]
    assert mixer.active_channels == []


def test_stop_all_and_close():
    backend = FakeBackend()
    with SoundMixer(backend) as mixer:
        mixer.play("a.wav")
        mixer.play("b.wav")
        mixer.stop_all()
        assert backend.halted == [ALL_CHANNELS]
        assert mixer.active_channels == []
    assert backend.closed is True