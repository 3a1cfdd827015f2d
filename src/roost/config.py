"""Orchestrator configuration.

RoostConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RoostConfig:
    """Orchestrator configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RoostConfig(preload_strategy="all", follow_redirects=True)
    """

    # Preloading
    preload: bool = True
    preload_strategy: str = "flagged"  # "all", "flagged" or "none"
    preload_flag: str = "preload"  # Metadata key read by the "flagged" strategy

    # Navigation
    follow_redirects: bool = False
    max_redirects: int = 5
    navigation_timeout: float | None = None  # Seconds; None waits for the load

    # Logging (applied by the CLI; the library never configures handlers)
    log_level: str = "info"
