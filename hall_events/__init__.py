"""Top-level package for the hall-events project.

Exposes the data gateway and the stateful workflows so callers can do
`from hall_events import Gateway, BrowserSession`. Run `python -m hall_events`
for the command line interface.
"""

from importlib import metadata as _metadata

try:
    __version__: str = _metadata.version("hall-events")
except _metadata.PackageNotFoundError:  # pragma: no cover – running from source
    __version__ = "0.0.0"

from .clients.gateway import Gateway  # noqa: F401
from .workflows import BrowserSession, CardBrowser, RegistrationController  # noqa: F401

__all__ = ["Gateway", "BrowserSession", "CardBrowser", "RegistrationController", "__version__"]
