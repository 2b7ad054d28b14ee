"""
Exceptions raised by fixture generation and tie-breaker scoring.
"""


class MatchdayError(Exception):
    """Base class for all errors raised by the matchday package."""


class InvalidTeamCountError(MatchdayError, ValueError):
    def __init__(self, count, minimum=2):
        self.count = count
        self.minimum = minimum
        super().__init__(f"At least {minimum} teams are required, got {count}")


class InvalidTeamError(MatchdayError, ValueError):
    pass


class DuplicateTeamError(MatchdayError, ValueError):
    def __init__(self, team_id):
        self.team_id = team_id
        super().__init__(f"Team id '{team_id}' appears more than once")


class UnknownFormatError(MatchdayError, ValueError):
    def __init__(self, format_name, known=()):
        self.format_name = format_name
        message = f"Unknown tournament format '{format_name}'"
        if known:
            message += f" (expected one of: {', '.join(known)})"
        super().__init__(message)


class FixtureNotFoundError(MatchdayError, KeyError):
    def __init__(self, fixture_id):
        self.fixture_id = fixture_id
        super().__init__(fixture_id)

    def __str__(self):
        return f"Fixture '{self.fixture_id}' not found"


class InvalidTransitionError(MatchdayError):
    """Raised when a tie-breaker event does not fit the current phase."""


class InvalidPointsError(MatchdayError, ValueError):
    pass


class TieBreakerSetupError(MatchdayError, ValueError):
    pass
