"""State layer.

:class:`RoutingStateCache` is the single in-process copy of the router's
state. Only the update dispatcher writes to it.
"""

from pymagnum.state.cache import RoutingStateCache

__all__ = ["RoutingStateCache"]
