import wallhack

from .storefront import Product


async def delete_product(
    response: wallhack.ResponseSink, request: wallhack.Request
) -> tuple[Product | None, Exception | None]:
    """Remove a product from the catalogue."""
    return None, None


ADMIN: wallhack.RouteTable = wallhack.RouteTable(
    wallhack.Route("DELETE", "/products/{id:int}", delete_product),
)
"""Administrative routes."""
