"""
Reachmap Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

from .errors import InvalidInputError

# Load .env file if it exists
load_dotenv()


ROUNDING_CHOICES = ("any", "half", "full")


class Config:
    """Application configuration loaded from environment variables."""

    # Search Configuration
    # Rounding rule used when a cell costs slightly more than a tier's budget
    ROUNDING_MODE: str = os.getenv("REACHMAP_ROUNDING_MODE", "full")
    # Cell size (world units) of the synthetic micro-grid used on gridless scenes.
    # Lower values give smoother shapes but cost much more search time.
    GRIDLESS_RESOLUTION: float = float(os.getenv("REACHMAP_GRIDLESS_RESOLUTION", "20"))
    ITERATION_CEILING: int = int(os.getenv("REACHMAP_ITERATION_CEILING", "200000"))

    # Visibility Configuration
    UNSAFE_TOLERANCE: float = float(os.getenv("REACHMAP_UNSAFE_TOLERANCE", "2.0"))
    WALL_BUCKET_SIZE: float = float(os.getenv("REACHMAP_WALL_BUCKET_SIZE", "200"))

    # Classification
    # Pace treated as the single-action limit when no tier is flagged explicitly
    LIMIT_TIER_NAME: str = os.getenv("REACHMAP_LIMIT_TIER_NAME", "Sprint")

    # Logging
    DEBUG_SEARCH: bool = os.getenv("DEBUG_SEARCH", "").lower() in ("1", "true", "yes")

    # Project Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    SCENARIOS_DIR: Path = PROJECT_ROOT / "examples" / "scenarios"

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if values are out of range."""
        if cls.ROUNDING_MODE not in ROUNDING_CHOICES:
            raise InvalidInputError(
                f"REACHMAP_ROUNDING_MODE must be one of {', '.join(ROUNDING_CHOICES)}, "
                f"got '{cls.ROUNDING_MODE}'"
            )

        if not 5 <= cls.GRIDLESS_RESOLUTION <= 50:
            raise InvalidInputError(
                "REACHMAP_GRIDLESS_RESOLUTION must be between 5 and 50 world units "
                f"(got {cls.GRIDLESS_RESOLUTION})"
            )

        if cls.ITERATION_CEILING <= 0:
            raise InvalidInputError("REACHMAP_ITERATION_CEILING must be a positive integer")

        if cls.UNSAFE_TOLERANCE < 0:
            raise InvalidInputError("REACHMAP_UNSAFE_TOLERANCE cannot be negative")

        if cls.WALL_BUCKET_SIZE <= 0:
            raise InvalidInputError("REACHMAP_WALL_BUCKET_SIZE must be positive")

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Reachmap Configuration:",
            f"  Rounding Mode: {cls.ROUNDING_MODE}",
            f"  Gridless Resolution: {cls.GRIDLESS_RESOLUTION:g}",
            f"  Iteration Ceiling: {cls.ITERATION_CEILING}",
            f"  Unsafe Tolerance: {cls.UNSAFE_TOLERANCE:g}",
            f"  Wall Bucket Size: {cls.WALL_BUCKET_SIZE:g}",
            f"  Limit Tier: {cls.LIMIT_TIER_NAME}",
        ]
        return "\n".join(lines)
