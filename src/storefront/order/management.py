"""Admin order management — status and tracking commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)


@storefront.command(part_of="Order")
class UpdateOrderTracking:
    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=255)
    courier_name = String(max_length=100)


@storefront.command_handler(part_of=Order)
class ManageOrderHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status

        if order.update_status(command.status):
            repo.add(order)
            logger.info(
                "Order status updated",
                order_id=str(order.id),
                order_number=order.order_number,
                previous_status=previous,
                new_status=order.status,
            )
        return str(order.id)

    @handle(UpdateOrderTracking)
    def update_tracking(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_tracking(command.tracking_number, command.courier_name)
        repo.add(order)

        logger.info(
            "Order tracking updated",
            order_id=str(order.id),
            tracking_number=order.tracking_number,
            courier_name=order.courier_name,
        )
        return str(order.id)
