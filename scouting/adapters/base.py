"""Abstract base adapter for importing scouting data files."""

from abc import ABC, abstractmethod


class BaseAdapter(ABC):
    @abstractmethod
    def parse(self, data_path: str) -> list:
        """Parse an import file and return the records it describes.

        TeamsAdapter returns Team objects; ScheduleAdapter returns Match
        objects with three red then three blue team records each.
        """
        pass
