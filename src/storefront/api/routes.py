"""FastAPI routes for the storefront — cart, payments, checkout, orders and catalogue."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.dependencies import current_user, require_admin
from storefront.api.schemas import (
    CartCountResponse,
    CartItemRequest,
    CartResponse,
    CheckoutPayloadSchema,
    InitiatePaymentRequest,
    OrderListResponse,
    OrderResponse,
    OrderSummaryResponse,
    PaymentDescriptorResponse,
    PaymentResponse,
    ProductResponse,
    PublishProductRequest,
    RefundPaymentRequest,
    RemoveCartItemRequest,
    StartCheckoutRequest,
    StartCheckoutResponse,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
    UpdateOrderTrackingRequest,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from storefront.cart.store import CartStore
from storefront.catalogue.product import CatalogueProduct, PublishCatalogueProduct
from storefront.checkout.orchestrator import CheckoutOrchestrator
from storefront.identity.credentials import Principal
from storefront.order.management import UpdateOrderStatus, UpdateOrderTracking
from storefront.order.order import Order
from storefront.order.queries import get_order, list_orders, orders_for_customer
from storefront.payment.ledger import PaymentLedger

carts = CartStore()
ledger = PaymentLedger()
checkout = CheckoutOrchestrator(carts=carts, ledger=ledger)

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(user: Principal = Depends(current_user)) -> CartResponse:
    return CartResponse.from_cart(carts.get_cart(user.user_id))


@cart_router.get("/count", response_model=CartCountResponse)
async def get_cart_count(user: Principal = Depends(current_user)) -> CartCountResponse:
    return CartCountResponse(item_count=carts.item_count(user.user_id))


@cart_router.post("/add", response_model=CartResponse)
async def add_to_cart(body: CartItemRequest, user: Principal = Depends(current_user)) -> CartResponse:
    cart = carts.add_item(user.user_id, body.product_id, body.quantity)
    return CartResponse.from_cart(cart)


@cart_router.put("/update", response_model=CartResponse)
async def update_cart_item(body: UpdateCartItemRequest, user: Principal = Depends(current_user)) -> CartResponse:
    cart = carts.update_item(user.user_id, body.product_id, body.quantity)
    return CartResponse.from_cart(cart)


@cart_router.delete("/remove", response_model=CartResponse)
async def remove_cart_item(body: RemoveCartItemRequest, user: Principal = Depends(current_user)) -> CartResponse:
    cart = carts.remove_item(user.user_id, body.product_id)
    return CartResponse.from_cart(cart)


@cart_router.delete("/remove/{product_id}", response_model=CartResponse)
async def remove_cart_item_by_path(product_id: str, user: Principal = Depends(current_user)) -> CartResponse:
    cart = carts.remove_item(user.user_id, product_id)
    return CartResponse.from_cart(cart)


@cart_router.delete("/clear", response_model=CartResponse)
async def clear_cart(user: Principal = Depends(current_user)) -> CartResponse:
    return CartResponse.from_cart(carts.clear(user.user_id))


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/initiate", status_code=201, response_model=PaymentDescriptorResponse)
async def initiate_payment(
    body: InitiatePaymentRequest, user: Principal = Depends(current_user)
) -> PaymentDescriptorResponse:
    payment = ledger.initiate(
        user.user_id,
        amount=body.amount,
        currency=body.currency,
        provider=body.provider,
        order_id=body.order_id,
    )
    return PaymentDescriptorResponse.from_payment(payment)


@payment_router.post("/create-order", status_code=201, response_model=PaymentDescriptorResponse)
async def create_payment_order(
    body: InitiatePaymentRequest, user: Principal = Depends(current_user)
) -> PaymentDescriptorResponse:
    """Alias of /payments/initiate kept for older clients."""
    return await initiate_payment(body, user)


@payment_router.post("/verify", response_model=VerifyPaymentResponse)
async def verify_payment(body: VerifyPaymentRequest, user: Principal = Depends(current_user)) -> VerifyPaymentResponse:
    payment = checkout.complete(
        user.user_id,
        body.payment_id,
        body.status,
        provider_payment_id=body.provider_payment_id,
        provider_signature=body.provider_signature,
        order_data=body.order_data.to_payload() if body.order_data else None,
    )
    return VerifyPaymentResponse.from_payment(payment)


@payment_router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(payment_id: str, user: Principal = Depends(current_user)) -> PaymentResponse:
    return PaymentResponse.from_payment(ledger.get(user.user_id, payment_id))


@payment_router.post("/{payment_id}/refund", response_model=PaymentResponse)
async def refund_payment(
    payment_id: str,
    body: RefundPaymentRequest | None = None,
    admin: Principal = Depends(require_admin),
) -> PaymentResponse:
    payment = ledger.refund(payment_id, reason=body.reason if body else None)
    return PaymentResponse.from_payment(payment)


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("/start", status_code=201, response_model=StartCheckoutResponse)
async def start_checkout(body: StartCheckoutRequest, user: Principal = Depends(current_user)) -> StartCheckoutResponse:
    started = checkout.start(
        user.user_id,
        customer=body.customer.model_dump(exclude_none=True),
        address=body.address.model_dump(exclude_none=True),
        provider=body.provider,
        currency=body.currency,
        shipping=body.shipping,
        tax=body.tax,
    )
    descriptor = PaymentDescriptorResponse.from_payment(started.payment)
    return StartCheckoutResponse(
        **descriptor.model_dump(),
        order_data=CheckoutPayloadSchema(**started.order_data),
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("/my", response_model=list[OrderSummaryResponse])
async def my_orders(user: Principal = Depends(current_user)) -> list[OrderSummaryResponse]:
    return [OrderSummaryResponse.from_order(order) for order in orders_for_customer(user.user_id)]


@order_router.get("", response_model=OrderListResponse)
async def all_orders(
    status: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
    admin: Principal = Depends(require_admin),
) -> OrderListResponse:
    result = list_orders(status=status, search=search, page=page, limit=limit)
    return OrderListResponse(
        data=[OrderResponse.from_order(order) for order in result["data"]],
        pagination=result["pagination"],
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def order_detail(order_id: str, user: Principal = Depends(current_user)) -> OrderResponse:
    order = get_order(order_id, customer_id=user.user_id, is_admin=user.is_admin)
    return OrderResponse.from_order(order)


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, admin: Principal = Depends(require_admin)
) -> OrderResponse:
    current_domain.process(UpdateOrderStatus(order_id=order_id, status=body.status), asynchronous=False)
    return OrderResponse.from_order(current_domain.repository_for(Order).get(order_id))


@order_router.put("/{order_id}/tracking", response_model=OrderResponse)
async def update_order_tracking(
    order_id: str, body: UpdateOrderTrackingRequest, admin: Principal = Depends(require_admin)
) -> OrderResponse:
    command = UpdateOrderTracking(
        order_id=order_id,
        tracking_number=body.tracking_number,
        courier_name=body.courier_name,
    )
    current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(current_domain.repository_for(Order).get(order_id))


# ---------------------------------------------------------------------------
# Catalogue Router
# ---------------------------------------------------------------------------
catalogue_router = APIRouter(prefix="/catalogue", tags=["catalogue"])


@catalogue_router.put("/products/{product_id}", response_model=ProductResponse)
async def publish_product(
    product_id: str, body: PublishProductRequest, admin: Principal = Depends(require_admin)
) -> ProductResponse:
    command = PublishCatalogueProduct(
        product_id=product_id,
        name=body.name,
        price=body.price,
        status=body.status,
        image=body.image,
    )
    current_domain.process(command, asynchronous=False)
    product = current_domain.repository_for(CatalogueProduct).get(product_id)
    return ProductResponse(
        product_id=str(product.product_id),
        name=product.name,
        price=product.price,
        status=product.status,
        image=product.image,
    )
