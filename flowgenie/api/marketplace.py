"""NFT marketplace API: listings, search and analytics from the demo catalog."""

from fastapi import APIRouter, HTTPException, Query

from flowgenie.services import catalog

router = APIRouter(prefix="/api/marketplace", tags=["marketplace"])


def _listing(moments: list[dict], limit: int, offset: int) -> dict:
    page, pagination = catalog.paginate(moments, limit, offset)
    return {"success": True, "moments": page, "total": len(moments), "pagination": pagination}


@router.get("/nba-topshot")
def nba_topshot(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    min_price: float | None = Query(default=None, alias="minPrice"),
    max_price: float | None = Query(default=None, alias="maxPrice"),
    rarity: str | None = None,
    series: str | None = None,
):
    moments = catalog.filter_moments(catalog.NBA_TOPSHOT_MOMENTS, min_price, max_price, rarity, series)
    return _listing(moments, limit, offset)


@router.get("/nfl-allday")
def nfl_allday(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    min_price: float | None = Query(default=None, alias="minPrice"),
    max_price: float | None = Query(default=None, alias="maxPrice"),
    rarity: str | None = None,
):
    moments = catalog.filter_moments(catalog.NFL_ALLDAY_MOMENTS, min_price, max_price, rarity)
    return _listing(moments, limit, offset)


@router.get("/analytics")
def analytics(timeframe: str = "7d", collection: str = "all"):
    return {"success": True, "analytics": {"timeframe": timeframe, "collection": collection, **catalog.MARKET_ANALYTICS}}


@router.get("/search")
def search(
    q: str | None = None,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
):
    if not q:
        raise HTTPException(status_code=400, detail="Search query is required")
    results = catalog.search(q)
    page, pagination = catalog.paginate(results, limit, offset)
    return {"success": True, "results": page, "total": len(results), "query": q, "pagination": pagination}


@router.get("/nft/{nft_id}")
def nft_detail(nft_id: str):
    nft = catalog.nft_detail(nft_id)
    if nft is None:
        raise HTTPException(status_code=404, detail="NFT not found")
    return {"success": True, "nft": nft}
