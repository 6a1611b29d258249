"""Service-layer exceptions translated to HTTP errors by the routes."""


class NoSupplierAvailable(Exception):
    """No eligible supplier could be selected for the zone at this time."""


class SupplierBusy(Exception):
    """Every eligible supplier was leased by concurrent checkouts."""


class UnknownProduct(Exception):
    """A checkout line references a missing or inactive product."""


class OrderNotFound(Exception):
    pass


class SupplierNotFound(Exception):
    pass


class MembershipNotFound(Exception):
    pass


class InvalidNightGuardSchedule(Exception):
    """A night-guard roster must cover at least one approved zone."""
