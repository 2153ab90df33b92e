import sys
import time


def format_elapsed(seconds):
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m{secs:02d}s" if minutes else f"{secs}s"


def render_bar(fraction, width):
    fraction = min(max(fraction, 0.0), 1.0)
    filled = int(round(fraction * width))
    return "|" + "#" * filled + "-" * (width - filled) + "|"


class FrameProgress:
    """Single-line frame counter redrawn in place with a carriage return."""

    def __init__(self, total_frames, bar_length=30, stream=None):
        self.total_frames = max(int(total_frames or 0), 0)
        self.bar_length = bar_length
        self.stream = stream if stream is not None else sys.stdout
        self.start_time = None
        self._width = 0

    def start(self):
        if self.start_time is None:
            self.start_time = time.perf_counter()

    def describe(self, frames_done, trial_time, frame_duration):
        fraction = frames_done / self.total_frames if self.total_frames else 0.0
        fields = [
            render_bar(fraction, self.bar_length),
            f"{min(fraction, 1.0) * 100.0:6.2f}%",
            f"[{frames_done}/{self.total_frames}]",
            f"t={format_elapsed(time.perf_counter() - self.start_time)}",
            "trial=--.---s" if trial_time is None else f"trial={trial_time:.3f}s",
            "frame=--.--ms" if frame_duration is None else f"frame={frame_duration * 1000:.2f}ms",
        ]
        return " ".join(fields)

    def update(self, frames_done, trial_time, frame_duration):
        self.start()
        line = self.describe(frames_done, trial_time, frame_duration)
        # ljust blanks whatever a longer previous line left behind
        self.stream.write("\r" + line.ljust(self._width))
        self.stream.flush()
        self._width = len(line)

    def finish(self, frames_done, trial_time, frame_duration):
        self.update(frames_done, trial_time, frame_duration)
        self.stream.write("\n")
        self.stream.flush()
