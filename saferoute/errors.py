class RoutingEngineError(Exception):
    """The routing engine could not produce a route (network error, bad status, no route)."""


class RoutingEngineUnavailable(RoutingEngineError):
    """The initial direct route failed, so no variants can be built."""


class EmptyPathError(ValueError):
    """Safety analysis was asked to score a path with no points."""
