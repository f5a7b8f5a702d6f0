"""Chain directory: connected networks and supported tokens."""

from crossbridge.networks.models import ChainFamily, Network, NetworkName, NetworkType, Token, WrappedIn

__all__ = ["ChainFamily", "Network", "NetworkName", "NetworkType", "Token", "WrappedIn"]
