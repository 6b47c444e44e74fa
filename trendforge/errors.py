"""Error kinds raised by the decision core.

- ``InsufficientHistory``: a lookback reaches past the available bars.
  Detectors treat it as "signal absent".
- ``InvalidSizing``: a trade cannot be sized (non-positive stop distance or
  volume).  Aborts the current cycle only.
- ``ConfigurationError``: invalid settings.  Fatal at construction time.
"""


class InsufficientHistory(IndexError):
    """Requested offset exceeds the available history."""


class InvalidSizing(ValueError):
    """Position size or stop distance is not tradeable."""


class ConfigurationError(ValueError):
    """Engine settings are invalid and the engine must not start."""
