"""Ticket fare calculation from a flight's economy base fare."""

from __future__ import annotations

from airport.contracts.enums import TicketClass
from airport.contracts.ticket import PriceBreakdown, PriceQuote

CLASS_MULTIPLIERS: dict[str, float] = {
    TicketClass.ECONOMY.value: 1.0,
    TicketClass.BUSINESS.value: 2.5,
    TicketClass.FIRST.value: 5.0,
}

TAX_RATE = 0.10
FEE_RATE = 0.05
FUEL_SURCHARGE_RATE = 0.02  # of base fare
AIRPORT_TAX_SHARE = 0.5  # of taxes
FREQUENT_FLYER_DISCOUNT = 0.10  # of total
CURRENCY = "USD"


def class_fare(base_price: float, ticket_class: TicketClass | str) -> float:
    """Single-seat fare for *ticket_class*, rounded to cents."""
    return round(base_price * CLASS_MULTIPLIERS[TicketClass(ticket_class).value], 2)


def quote_price(
    base_price: float,
    ticket_class: TicketClass | str = TicketClass.ECONOMY,
    passenger_count: int = 1,
    frequent_flyer: bool = False,
) -> PriceQuote:
    """Price a booking.

    base  = fare × class multiplier × passengers
    total = base + 10 % taxes + 5 % fees, minus 10 % for frequent flyers
    """
    multiplier = CLASS_MULTIPLIERS[TicketClass(ticket_class).value]
    base = base_price * multiplier * passenger_count
    taxes = base * TAX_RATE
    fees = base * FEE_RATE
    total = base + taxes + fees
    discount = total * FREQUENT_FLYER_DISCOUNT if frequent_flyer else 0.0

    return PriceQuote(
        base_price=round(base, 2),
        class_multiplier=multiplier,
        passenger_count=passenger_count,
        taxes=round(taxes, 2),
        fees=round(fees, 2),
        discount=round(discount, 2),
        total_price=round(total - discount, 2),
        currency=CURRENCY,
        breakdown=PriceBreakdown(
            base_fare=round(base, 2),
            fuel_surcharge=round(base * FUEL_SURCHARGE_RATE, 2),
            airport_tax=round(taxes * AIRPORT_TAX_SHARE, 2),
            taxes=round(taxes, 2),
            fees=round(fees, 2),
        ),
    )
