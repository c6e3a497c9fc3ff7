"""FastAPI routes for the Storefront: cart, orders, administration and catalogue."""

from fastapi import APIRouter, Depends, Query

from storefront.access import Capability, Requester, require
from storefront.api.dependencies import current_requester
from storefront.api.schemas import (
    AddToCartRequest,
    AdvanceOrderStatusRequest,
    CartResponse,
    ChangePriceRequest,
    ClearCartResponse,
    IdResponse,
    MergeGuestCartRequest,
    MergeReportResponse,
    OrderPageResponse,
    OrderResponse,
    PlaceOrderRequest,
    ProductResponse,
    RegisterProductRequest,
    RestockRequest,
    StatusResponse,
    UpdateCartItemRequest,
)
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartItem
from storefront.cart.management import ClearCart, OpenCart
from storefront.cart.reconciliation import merge_guest_cart
from storefront.cart.summary import cart_summary_for
from storefront.catalogue.management import ChangeProductPrice, RegisterProduct, RestockProduct
from storefront.catalogue.product import fetch_product
from storefront.order.cancellation import CancelOrder
from storefront.order.fulfillment import AdvanceOrderStatus
from storefront.order.placement import PlaceOrder
from storefront.order.queries import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, get_order, list_orders
from storefront.transaction import run_atomically

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(requester: Requester = Depends(current_requester)) -> CartResponse:
    run_atomically(OpenCart(owner_id=requester.user_id))
    return CartResponse.from_summary(cart_summary_for(requester.user_id))


@cart_router.post("/items", status_code=201, response_model=IdResponse)
async def add_cart_item(body: AddToCartRequest, requester: Requester = Depends(current_requester)) -> IdResponse:
    command = AddToCart(
        owner_id=requester.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    item_id = run_atomically(command)
    return IdResponse(id=item_id)


@cart_router.put("/items/{item_id}", response_model=StatusResponse)
async def update_cart_item(
    item_id: str,
    body: UpdateCartItemRequest,
    requester: Requester = Depends(current_requester),
) -> StatusResponse:
    command = UpdateCartItem(
        owner_id=requester.user_id,
        item_id=item_id,
        quantity=body.quantity,
    )
    run_atomically(command)
    return StatusResponse()


@cart_router.delete("/items/{item_id}", response_model=StatusResponse)
async def remove_cart_item(item_id: str, requester: Requester = Depends(current_requester)) -> StatusResponse:
    run_atomically(RemoveFromCart(owner_id=requester.user_id, item_id=item_id))
    return StatusResponse()


@cart_router.delete("", response_model=ClearCartResponse)
async def clear_cart(requester: Requester = Depends(current_requester)) -> ClearCartResponse:
    removed = run_atomically(ClearCart(owner_id=requester.user_id))
    return ClearCartResponse(items_removed=removed)


@cart_router.post("/merge", response_model=MergeReportResponse)
async def merge_cart(
    body: MergeGuestCartRequest,
    requester: Requester = Depends(current_requester),
) -> MergeReportResponse:
    """Merge a guest cart into the caller's cart right after login.

    Lines that could not be merged are listed with a reason; the request
    itself always succeeds.
    """
    report = merge_guest_cart(
        requester.user_id,
        guest_items=[line.model_dump() for line in body.items],
    )
    return MergeReportResponse.from_report(report)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest, requester: Requester = Depends(current_requester)) -> OrderResponse:
    command = PlaceOrder(
        owner_id=requester.user_id,
        shipping_address=body.shipping_address.model_dump_json(),
        payment_method=body.payment_method.value,
    )
    order_id = run_atomically(command)
    return OrderResponse.from_order(get_order(order_id, requester))


@order_router.get("", response_model=OrderPageResponse)
async def list_my_orders(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    status: str | None = None,
    requester: Requester = Depends(current_requester),
) -> OrderPageResponse:
    # Even administrators only see their own orders here; see /admin/orders
    owner = Requester(user_id=requester.user_id)
    return OrderPageResponse.from_page(list_orders(owner, page=page, limit=limit, status=status and status.upper()))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order_detail(order_id: str, requester: Requester = Depends(current_requester)) -> OrderResponse:
    return OrderResponse.from_order(get_order(order_id, requester))


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: str, requester: Requester = Depends(current_requester)) -> OrderResponse:
    run_atomically(CancelOrder(order_id=order_id, requester_id=requester.user_id))
    return OrderResponse.from_order(get_order(order_id, requester))


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def advance_order_status(
    order_id: str,
    body: AdvanceOrderStatusRequest,
    requester: Requester = Depends(current_requester),
) -> OrderResponse:
    command = AdvanceOrderStatus(
        order_id=order_id,
        new_status=body.status.upper(),
        requester_role=requester.role.value,
    )
    run_atomically(command)
    return OrderResponse.from_order(get_order(order_id, requester))


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.get("/orders", response_model=OrderPageResponse)
async def list_all_orders(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    status: str | None = None,
    user_id: str | None = None,
    requester: Requester = Depends(current_requester),
) -> OrderPageResponse:
    require(requester.role, Capability.VIEW_ALL_ORDERS)
    return OrderPageResponse.from_page(
        list_orders(
            requester,
            page=page,
            limit=limit,
            status=status and status.upper(),
            user_id=user_id,
        ),
    )


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


def _product_response(product_id) -> ProductResponse:
    product = fetch_product(product_id)
    return ProductResponse(id=str(product.id), name=product.name, price=product.price, stock=product.stock)


@product_router.post("", status_code=201, response_model=ProductResponse)
async def register_product(
    body: RegisterProductRequest,
    requester: Requester = Depends(current_requester),
) -> ProductResponse:
    require(requester.role, Capability.MANAGE_CATALOGUE)
    product_id = run_atomically(RegisterProduct(name=body.name, price=body.price, stock=body.stock))
    return _product_response(product_id)


@product_router.put("/{product_id}/price", response_model=ProductResponse)
async def change_product_price(
    product_id: str,
    body: ChangePriceRequest,
    requester: Requester = Depends(current_requester),
) -> ProductResponse:
    require(requester.role, Capability.MANAGE_CATALOGUE)
    run_atomically(ChangeProductPrice(product_id=product_id, price=body.price))
    return _product_response(product_id)


@product_router.put("/{product_id}/restock", response_model=ProductResponse)
async def restock_product(
    product_id: str,
    body: RestockRequest,
    requester: Requester = Depends(current_requester),
) -> ProductResponse:
    require(requester.role, Capability.MANAGE_CATALOGUE)
    run_atomically(RestockProduct(product_id=product_id, quantity=body.quantity))
    return _product_response(product_id)


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    return _product_response(product_id)
