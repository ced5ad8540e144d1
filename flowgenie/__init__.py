"""FlowGenie: AI trading agents for the Flow NFT marketplace."""

__version__ = "1.0.0"
