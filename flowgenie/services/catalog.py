"""Static NFT listings for NBA Top Shot and NFL All Day.

Stands in for the marketplace APIs until a real indexer is wired up.
"""

from typing import Any

NBA_TOPSHOT_MOMENTS: list[dict[str, Any]] = [
    {
        "id": "1",
        "name": "LeBron James - The King Dunk",
        "price": 45.50,
        "rarity": "Common",
        "series": "Series 3",
        "set": "Base Set",
        "marketplace": "NBA Top Shot",
        "imageUrl": "https://images.nbatopshot.com/moments/1.jpg",
        "lastSale": {"price": 42.00, "date": "2024-01-15T10:30:00Z"},
    },
    {
        "id": "2",
        "name": "Stephen Curry - Deep Three",
        "price": 78.25,
        "rarity": "Rare",
        "series": "Series 3",
        "set": "Rising Stars",
        "marketplace": "NBA Top Shot",
        "imageUrl": "https://images.nbatopshot.com/moments/2.jpg",
        "lastSale": {"price": 75.00, "date": "2024-01-14T15:45:00Z"},
    },
    {
        "id": "3",
        "name": "Giannis Antetokounmpo - Block",
        "price": 125.00,
        "rarity": "Legendary",
        "series": "Series 3",
        "set": "Championship",
        "marketplace": "NBA Top Shot",
        "imageUrl": "https://images.nbatopshot.com/moments/3.jpg",
    },
    {
        "id": "4",
        "name": "Luka Dončić - Game Winner",
        "price": 35.75,
        "rarity": "Common",
        "series": "Series 3",
        "set": "Base Set",
        "marketplace": "NBA Top Shot",
        "imageUrl": "https://images.nbatopshot.com/moments/4.jpg",
        "lastSale": {"price": 38.00, "date": "2024-01-13T09:20:00Z"},
    },
    {
        "id": "5",
        "name": "Kevin Durant - Fadeaway",
        "price": 95.50,
        "rarity": "Rare",
        "series": "Series 3",
        "set": "All-Star",
        "marketplace": "NBA Top Shot",
        "imageUrl": "https://images.nbatopshot.com/moments/5.jpg",
    },
]

NFL_ALLDAY_MOMENTS: list[dict[str, Any]] = [
    {
        "id": "nfl-1",
        "name": "Tom Brady - Touchdown Pass",
        "price": 125.00,
        "rarity": "Rare",
        "series": "Series 2",
        "set": "Playoffs",
        "marketplace": "NFL All Day",
        "imageUrl": "https://images.nflallday.com/moments/1.jpg",
        "lastSale": {"price": 130.00, "date": "2024-01-15T14:20:00Z"},
    },
    {
        "id": "nfl-2",
        "name": "Aaron Donald - Sack",
        "price": 85.50,
        "rarity": "Common",
        "series": "Series 2",
        "set": "Base Set",
        "marketplace": "NFL All Day",
        "imageUrl": "https://images.nflallday.com/moments/2.jpg",
    },
    {
        "id": "nfl-3",
        "name": "Cooper Kupp - Catch",
        "price": 65.25,
        "rarity": "Rare",
        "series": "Series 2",
        "set": "Rising Stars",
        "marketplace": "NFL All Day",
        "imageUrl": "https://images.nflallday.com/moments/3.jpg",
    },
]

MARKET_ANALYTICS: dict[str, Any] = {
    "totalVolume": 1250000,
    "totalSales": 15420,
    "averagePrice": 81.05,
    "priceChange": {"24h": 2.5, "7d": -5.2, "30d": 15.8},
    "topPerformers": [
        {"name": "LeBron James - The King Dunk", "priceChange": 25.5, "volume": 12500},
        {"name": "Stephen Curry - Deep Three", "priceChange": 18.2, "volume": 8900},
    ],
    "marketCap": {"nbaTopShot": 850000, "nflAllDay": 400000},
}


def filter_moments(
    moments: list[dict[str, Any]],
    min_price: float | None = None,
    max_price: float | None = None,
    rarity: str | None = None,
    series: str | None = None,
) -> list[dict[str, Any]]:
    result = moments
    if min_price is not None:
        result = [m for m in result if m["price"] >= min_price]
    if max_price is not None:
        result = [m for m in result if m["price"] <= max_price]
    if rarity:
        result = [m for m in result if m["rarity"] == rarity]
    if series:
        result = [m for m in result if m["series"] == series]
    return result


def paginate(items: list, limit: int, offset: int) -> tuple[list, dict]:
    page = items[offset:offset + limit]
    return page, {"limit": limit, "offset": offset, "hasMore": offset + limit < len(items)}


def search(query: str) -> list[dict[str, Any]]:
    """Case-insensitive match on name, set and series across both collections."""
    q = query.lower()
    return [
        m for m in NBA_TOPSHOT_MOMENTS + NFL_ALLDAY_MOMENTS
        if q in m["name"].lower() or q in m["set"].lower() or q in m["series"].lower()
    ]


def nft_detail(nft_id: str) -> dict[str, Any] | None:
    for m in NBA_TOPSHOT_MOMENTS + NFL_ALLDAY_MOMENTS:
        if m["id"] != nft_id:
            continue
        history = []
        if "lastSale" in m:
            history.append({"price": m["lastSale"]["price"], "date": m["lastSale"]["date"], "type": "sale"})
        return {
            **m,
            "description": f"{m['name']} from the {m['set']} set ({m['series']})",
            "attributes": [
                {"trait_type": "Rarity", "value": m["rarity"]},
                {"trait_type": "Set", "value": m["set"]},
                {"trait_type": "Series", "value": m["series"]},
            ],
            "history": history,
        }
    return None
