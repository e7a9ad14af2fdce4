import logging

from flask import Blueprint, request

from shopbridge.routes.utils import get_service, success_response
from shopbridge.services.product_service import ProductService

logger = logging.getLogger(__name__)

products_bp = Blueprint("products", __name__)


@products_bp.route("", methods=["GET"])
def list_products():
    """
    List available products with their variants.

    Query params:
      name        – partial, case-insensitive match on the product name
      description – partial, case-insensitive match on the description
    """
    service = get_service(ProductService)
    products = service.list_products(
        name=request.args.get("name"),
        description=request.args.get("description"),
    )
    return success_response(
        [p.to_dict() for p in products],
        service.listing_message(products),
        count=len(products),
    )


@products_bp.route("/<product_id>", methods=["GET"])
def get_product(product_id: str):
    """Single product with category, garment type and variants."""
    product = get_service(ProductService).get_product(product_id)
    return success_response(product.to_dict(detailed=True))
