"""Configuration management for the Recipedia core.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


class Config:
    """Core configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Persons count assumed when a recipe form has none yet. Default: 4
        self.DEFAULT_PERSONS: int = int(os.getenv("DEFAULT_PERSONS", "4"))
        # Minimum difflib ratio (0.0 - 1.0) for a catalog entry to count as similar. Default: 0.6
        self.SIMILARITY_THRESHOLD: float = float(os.getenv("SIMILARITY_THRESHOLD", "0.6"))
        # Maximum number of similar catalog entries returned by a lookup. Default: 5
        self.MAX_SIMILAR_RESULTS: int = int(os.getenv("MAX_SIMILAR_RESULTS", "5"))
        # OCR unit suffixes: "4p" reads as 4 persons, "25m" as 25 minutes
        self.OCR_PERSONS_MARKER: str = os.getenv("OCR_PERSONS_MARKER", "p")
        self.OCR_TIME_MARKER: str = os.getenv("OCR_TIME_MARKER", "m")

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If a value is out of its allowed range.
        """
        if self.DEFAULT_PERSONS < 1:
            raise ValueError(f"DEFAULT_PERSONS must be at least 1, got: {self.DEFAULT_PERSONS}")
        if not (0.0 <= self.SIMILARITY_THRESHOLD <= 1.0):
            raise ValueError(
                f"SIMILARITY_THRESHOLD must be between 0.0 and 1.0, got: {self.SIMILARITY_THRESHOLD}"
            )
        if self.MAX_SIMILAR_RESULTS < 1:
            raise ValueError(f"MAX_SIMILAR_RESULTS must be at least 1, got: {self.MAX_SIMILAR_RESULTS}")
        if len(self.OCR_PERSONS_MARKER) != 1 or len(self.OCR_TIME_MARKER) != 1:
            raise ValueError(
                f"OCR markers must be single characters, got: "
                f"'{self.OCR_PERSONS_MARKER}' and '{self.OCR_TIME_MARKER}'"
            )
        if self.OCR_PERSONS_MARKER == self.OCR_TIME_MARKER:
            raise ValueError(f"OCR_PERSONS_MARKER and OCR_TIME_MARKER must differ, got: '{self.OCR_TIME_MARKER}'")


# Create module-level config instance and validate immediately
config = Config()
config.validate()
