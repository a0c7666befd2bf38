"""Result sink interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping

from lp_probe.models.run import RunResult


class ResultSink(ABC):
    """A persistence target for run results.

    The persister drives ``initialize -> save -> close`` once per run.
    """

    name: str = "sink"

    @abstractmethod
    def initialize(self, params: Mapping[str, str]) -> None:
        """Prepare the sink using the run's dynamic parameters."""

    @abstractmethod
    def save(self, result: RunResult) -> None:
        """Persist a single result."""

    def close(self) -> None:
        """Release resources acquired in ``initialize``."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
