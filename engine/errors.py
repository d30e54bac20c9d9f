"""
Tournament engine errors.

Every failure raised by ``create`` or ``record_result`` is a local validation
failure: it is raised before the tournament is touched, so a failed call
leaves the aggregate exactly as it was.
"""


class TournamentError(Exception):
    """Base class for all tournament engine failures."""


class InvalidRoster(TournamentError):
    """The roster cannot be used: malformed entries or duplicate ids."""


class InvalidRosterSize(InvalidRoster):
    """The roster is too small for the chosen format."""


class InvalidSettings(TournamentError):
    """The tournament settings are inconsistent with each other or the roster."""


class MatchNotFound(TournamentError):
    """No match with the given id exists in the tournament."""


class MatchAlreadyCompleted(TournamentError):
    """The match is already in a terminal state (completed or bye)."""


class IncompletePairing(TournamentError):
    """At least one player slot of the match is still to be determined."""


class InvalidResult(TournamentError):
    """The submitted score line is not acceptable for this match."""


class NotApplicable(TournamentError):
    """The operation has no meaning for this tournament format."""


class GroupNotFound(TournamentError):
    """No group with the given id exists in the tournament."""


class TournamentNotFound(TournamentError):
    """No tournament with the given id is known to the registry or database."""
