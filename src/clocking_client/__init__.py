"""
Clocking client.

PURPOSE: Track named activity sessions against a remote clocking service.
AI CONTEXT: Client-side state model only - storage and report aggregation
live on the server and are reached through ApiGateway.

PACKAGE STRUCTURE:
- clock.py: Timestamp parsing and display formatting
- models.py: Session and SessionDetail
- errors.py: Tagged ClientError and gateway exceptions
- registry.py: Ordered registry of open sessions with scratch notes
- query.py: Report query normalization
- gateway.py: Async HTTP adapter (the only network I/O)
- controller.py: View state and user actions
- presenters.py: Display view models
- web/: FastAPI dashboard
- cli.py: Command-line interface

QUICK START:
    clocking-client --server http://127.0.0.1:8000 status
    clocking-client start "Write report"
    clocking-client finish "Write report" -n "Drafted intro"
    clocking-client report --pick last_7_days --view daily
"""

from clocking_client.__version__ import (
    __author__,
    __copyright__,
    __description__,
    __license__,
    __title__,
    __url__,
    __version__,
    __version_date__,
)

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__url__",
    "__author__",
    "__license__",
    "__copyright__",
]
