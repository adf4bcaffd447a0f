"""The user's current situation, as declared right now."""

from dataclasses import dataclass

from .tasks import Location, MentalLoad, Task, TimeEstimate


@dataclass(frozen=True)
class UserContext:
    """Available time, energy and location for the current moment."""

    available_time: TimeEstimate = TimeEstimate.MEDIUM
    energy_level: MentalLoad = MentalLoad.MEDIUM
    current_location: Location = Location.HOME

    def __post_init__(self):
        # A context names an actual place; only tasks may say "anywhere".
        if self.current_location == Location.ANYWHERE:
            raise ValueError("Current location must be an actual place, not 'anywhere'")

    @classmethod
    def parse(cls, available_time: str, energy_level: str, current_location: str) -> "UserContext":
        """Build a context from text labels."""
        return cls(
            available_time=TimeEstimate.parse(available_time),
            energy_level=MentalLoad.parse(energy_level),
            current_location=Location.parse(current_location),
        )

    def describe(self) -> str:
        return (
            f"{self.available_time.short_label} available, "
            f"{self.energy_level.label} energy, at {self.current_location.label}"
        )


def location_matches(task: Task, context: UserContext) -> bool:
    return task.location == Location.ANYWHERE or task.location == context.current_location


def time_fits(task: Task, context: UserContext) -> bool:
    """Task needs no more time than is available."""
    return task.time_estimate <= context.available_time


def energy_fits(task: Task, context: UserContext) -> bool:
    """Task needs no more focus than the current energy level."""
    return task.mental_load <= context.energy_level
