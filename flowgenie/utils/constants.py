"""Shared constants: Flow contract addresses and demo values."""

# Flow mainnet contract addresses
NON_FUNGIBLE_TOKEN_ADDRESS = "0x1d7e57aa55817448"
FUNGIBLE_TOKEN_ADDRESS = "0x7e60df042a9c0868"
FLOW_TOKEN_ADDRESS = "0x7e60df042a9c0868"
TOPSHOT_ADDRESS = "0x0ea2b1c0df6d07531"
TOPSHOT_MARKET_ADDRESS = "0x4bcadc785a64c7c8"

# Contract imports for the Cadence templates, per Flow network
CONTRACT_ADDRESSES = {
    "mainnet": {
        "NonFungibleToken": NON_FUNGIBLE_TOKEN_ADDRESS,
        "FungibleToken": FUNGIBLE_TOKEN_ADDRESS,
        "FlowToken": FLOW_TOKEN_ADDRESS,
        "TopShot": TOPSHOT_ADDRESS,
        "TopShotMarket": TOPSHOT_MARKET_ADDRESS,
    },
    "testnet": {
        "NonFungibleToken": "0x631e88ae7f1d7c20",
        "FungibleToken": "0x9a0766d93b6608b7",
        "FlowToken": "0x7e60df042a9c0868",
        "TopShot": "0x877931736ee77cff",
        "TopShotMarket": "0x547f177b243b4d80",
    },
}

# Collection used when an analyze command does not name one
DEFAULT_COLLECTION_ADDRESS = TOPSHOT_ADDRESS

SUPPORTED_CONTRACTS = [
    "NonFungibleToken",
    "TopShot",
    "TopShotMarket",
    "FungibleToken",
    "FlowToken",
]

# Fixed values returned by the keyword interpreter
DEMO_BUY_NFT_ID = "12345"
DEMO_BUY_PRICE = 45.50
DEMO_SELL_NFT_ID = "67890"
DEMO_SELL_PRICE = 125.00
DEMO_USER_ADDRESS = "0x1234567890abcdef"
DEMO_SCHEDULE_INTERVAL = "0 9 * * *"  # daily at 09:00
DEMO_SCHEDULE_AMOUNT = 50

DEFAULT_REASONING = "No reasoning provided"
DEFAULT_CONFIDENCE = 0.5
