"""
Outcomes of one verification flow invocation.

Exactly one is produced per call:

* ``Redirect``: send the user agent to the provider; the attempt stays open.
* ``Decision``: accept or deny; the attempt concludes.
* ``FatalError``: the attempt aborts and no decision edge is taken.
"""

from dataclasses import dataclass
from typing import Union

from ..exceptions import FlowError


@dataclass(frozen=True)
class Redirect:
    url: str
    method: str = "GET"
    tracking_cookie: bool = True


@dataclass(frozen=True)
class Decision:
    accepted: bool
    # True when Duo was skipped under fail-open
    bypassed: bool = False


@dataclass(frozen=True)
class FatalError:
    error: FlowError


Outcome = Union[Redirect, Decision, FatalError]
