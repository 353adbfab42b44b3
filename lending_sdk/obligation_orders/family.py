"""Generic create/read flow shared by every trigger-based order family."""

from abc import ABC, abstractmethod
import logging
from typing import Generic, Optional, Type, TypeVar

from lending_sdk.models.enums import OrderType
from lending_sdk.models.obligation_order import ObligationOrderAtIndex, OrderCondition

from .common import OrderContext, OrderSpecification
from .internal import create_condition_based_order, read_trigger_based_order, to_order_index


logger = logging.getLogger(__name__)

ContextT = TypeVar("ContextT", bound=OrderContext)
TriggerT = TypeVar("TriggerT")
ProfileT = TypeVar("ProfileT")


class OrderFamily(ABC, Generic[ContextT, TriggerT, ProfileT]):
    """A family of orders whose triggers map one-to-one onto on-chain conditions.

    A family supplies its compatibility precondition (which may also classify
    the obligation into a "profile", e.g. long vs short) and the two mappings
    between its triggers and the on-chain conditions. The validation order of
    :meth:`create_order` and :meth:`read_order` is fixed here so that the first
    failing check is the same for every family.
    """

    name: str = "trigger-based"
    specification_type: Type[OrderSpecification] = OrderSpecification

    @abstractmethod
    def resolve_profile(self, context: ContextT) -> ProfileT:
        """Check that the obligation fits this family and classify it for the mappings."""

    @abstractmethod
    def to_condition(self, profile: ProfileT, order_type: OrderType, trigger: TriggerT) -> OrderCondition:
        """Map a trigger onto the on-chain condition stored in the ``order_type`` slot."""

    @abstractmethod
    def to_trigger(self, profile: ProfileT, order_type: OrderType, condition: OrderCondition) -> TriggerT:
        """Map a stored on-chain condition of the ``order_type`` slot back onto a trigger."""

    def validate_condition(self, condition: OrderCondition) -> None:
        """Family-specific checks of a freshly mapped condition (no-op by default)."""

    def create_order(
        self,
        context: ContextT,
        order_type: OrderType,
        specification: Optional[OrderSpecification],
    ) -> ObligationOrderAtIndex:
        """Build the slot update setting (or, for a ``None`` specification, cancelling) an order."""
        profile = self.resolve_profile(context)
        index = to_order_index(order_type)
        if specification is None:
            logger.debug("Cancelling %s order slot=%d obligation=%s", self.name, index, context.obligation.address)
            return ObligationOrderAtIndex.empty(index)
        condition = self.to_condition(profile, order_type, specification.trigger)
        self.validate_condition(condition)
        order = create_condition_based_order(context, condition, specification)
        logger.debug(
            "Created %s order slot=%d obligation=%s condition=%s",
            self.name,
            index,
            context.obligation.address,
            condition,
        )
        return order.at_index(index)

    def read_order(self, context: ContextT, order_type: OrderType) -> Optional[OrderSpecification]:
        """Parse the specification of the order stored in the ``order_type`` slot, if any."""
        profile = self.resolve_profile(context)
        order = context.obligation.get_orders()[to_order_index(order_type)]
        if order is None:
            return None
        trigger = self.to_trigger(profile, order_type, order.condition)
        return read_trigger_based_order(order, trigger, self.specification_type)
