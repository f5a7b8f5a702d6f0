"""crossbridge - client side of a token bridge between EVM chains and Casper."""

__version__ = "0.1.0"
