"""Domain exceptions raised by the rating and billing services.

The hierarchy mirrors how callers are expected to react:

- ``ConfigurationError``: the rate catalog has a gap or conflict. An operator
  has to fix the tier data; the request must not be priced with a guessed tier.
- ``InputError``: the caller sent something invalid. Nothing was written.
- ``StateError``: the request conflicts with the current ledger state.
- ``NotFoundError``: a referenced record does not exist.

Messages are meant to be shown to the user verbatim.
"""


class BillingError(Exception):
    """Base class for all rating and billing errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(BillingError):
    pass


class InputError(BillingError):
    pass


class StateError(BillingError):
    pass


class NotFoundError(StateError):
    pass


# Configuration errors


class NoMatchingTierError(ConfigurationError):
    def __init__(self, service_type: str, shipment_count: int):
        super().__init__(
            f"No active {service_type} rate tier covers a monthly volume of {shipment_count} shipments"
        )
        self.service_type = service_type
        self.shipment_count = shipment_count


class WeightExceedsMaxTierError(ConfigurationError):
    def __init__(self, weight: object):
        super().__init__(f"Weight {weight} kg exceeds the ceiling of every active SDD rate tier")
        self.weight = weight


class TierNotFoundError(ConfigurationError):
    def __init__(self, tier_id: object):
        super().__init__(f"Rate tier {tier_id} not found or inactive")
        self.tier_id = tier_id


class OverlappingTierError(ConfigurationError):
    pass


# Input errors


class InvalidWeightError(InputError):
    pass


class InvalidAmountError(InputError):
    pass


class InvalidQuantityError(InputError):
    pass


class CodNotAllowedError(InputError):
    pass


class FodNotAllowedError(InputError):
    pass


# State errors


class DuplicateShipmentItemError(StateError):
    def __init__(self, invoice_id: object, shipment_id: str):
        super().__init__(f"Shipment {shipment_id} is already billed on invoice {invoice_id}")
        self.invoice_id = invoice_id
        self.shipment_id = shipment_id


class DuplicateShipmentChargeError(StateError):
    def __init__(self, shipment_id: str):
        super().__init__(f"Shipment {shipment_id} has already been rated")
        self.shipment_id = shipment_id


class CannotDeleteAutoItemError(StateError):
    def __init__(self, item_id: object):
        super().__init__(
            f"Invoice item {item_id} was generated from a shipment and cannot be deleted; "
            "add a correcting manual item instead"
        )
        self.item_id = item_id


class OverlappingInvoicePeriodError(StateError):
    pass


class NoBillableShipmentsError(StateError):
    pass


# Not found


class InvoiceNotFoundError(NotFoundError):
    def __init__(self, invoice_id: object):
        super().__init__(f"Invoice {invoice_id} not found")
        self.invoice_id = invoice_id


class InvoiceItemNotFoundError(NotFoundError):
    def __init__(self, item_id: object):
        super().__init__(f"Invoice item {item_id} not found")
        self.item_id = item_id


class ClientNotFoundError(NotFoundError):
    def __init__(self, client_id: object):
        super().__init__(f"Client {client_id} not found")
        self.client_id = client_id


def status_code_for(exc: BillingError) -> int:
    """HTTP status used by the API for a billing error."""
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, StateError):
        return 409
    if isinstance(exc, ConfigurationError):
        return 422
    return 400
