"""Base class for writers that export generated test suites."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from recon_synth.domain.core import GeneratedTestSuite, TestCase

# A whole suite, the cases of one, or text already rendered from them
SuiteData = GeneratedTestSuite | Sequence[TestCase] | str


class BaseWriter(ABC):
    """
    Exports suite data to the filesystem.

    Subclasses decide which forms of SuiteData they accept and raise TypeError
    for the rest.
    """

    @abstractmethod
    def write(self, data: SuiteData, destination: str) -> None:
        """Write data to the specified destination."""

    @staticmethod
    def prepare_file(destination: str | Path) -> Path:
        """Return the destination as a Path, creating its parent directory."""
        filepath = Path(destination)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        return filepath
