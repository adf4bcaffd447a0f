"""Focus session arithmetic - no I/O dependencies.

The ticking clock lives in the caller; this module only turns elapsed
seconds into what a focus view shows.
"""

from dataclasses import dataclass

from .tasks import Task, TimeEstimate

BREAK_AFTER_MINUTES = 25  # Pomodoro


def estimated_minutes(time_estimate: TimeEstimate) -> int:
    return {TimeEstimate.QUICK: 15, TimeEstimate.MEDIUM: 30, TimeEstimate.LONG: 60}[time_estimate]


@dataclass(frozen=True)
class FocusSession:
    """A task being worked on, and how long it has been worked on."""

    task: Task
    elapsed_seconds: int = 0

    @property
    def estimated_seconds(self) -> int:
        return estimated_minutes(self.task.time_estimate) * 60

    @property
    def progress_percent(self) -> float:
        """Elapsed share of the estimate, capped at 100."""
        return min(self.elapsed_seconds / self.estimated_seconds * 100, 100.0)

    @property
    def remaining_minutes(self) -> int:
        return max(0, estimated_minutes(self.task.time_estimate) - self.elapsed_seconds // 60)

    @property
    def overtime(self) -> bool:
        return self.elapsed_seconds >= self.estimated_seconds

    @property
    def break_due(self) -> bool:
        return self.elapsed_seconds >= BREAK_AFTER_MINUTES * 60

    def tick(self, seconds: int = 1) -> "FocusSession":
        return FocusSession(self.task, self.elapsed_seconds + seconds)

    def format_elapsed(self) -> str:
        """Elapsed time as m:ss."""
        mins, secs = divmod(self.elapsed_seconds, 60)
        return f"{mins}:{secs:02d}"

    def status_line(self) -> str:
        if self.overtime:
            return "You're doing great! Take your time to finish."
        return f"{self.remaining_minutes} minutes remaining (estimated)"
