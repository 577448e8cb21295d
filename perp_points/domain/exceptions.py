from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class PointsWindowInputError(DomainError):
    """Invalid evaluation window."""


class PointsConfigInputError(DomainError):
    """Invalid rate or limit in the calculation config."""


class LeaderboardDataInvalidError(DomainError):
    """Source records failed validation and strict mode was requested."""


class LeaderboardQueryInputError(DomainError):
    """Invalid leaderboard fetch parameters."""
