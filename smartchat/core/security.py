"""
Security utilities: the dashboard password gate.
"""
from smartchat.core.errors import ServerMisconfiguredError, UnauthorizedError


def check_dashboard_password(submitted: str | None, expected: str | None) -> None:
    """
    Raise unless `submitted` exactly equals the configured dashboard password.

    No trimming, no case folding, no hashing. The comparison is plain `==`
    and therefore not constant time.
    """
    if not expected:
        raise ServerMisconfiguredError()
    # TODO: use hmac.compare_digest to close the timing side channel.
    if submitted is None or submitted != expected:
        raise UnauthorizedError("Invalid password")
