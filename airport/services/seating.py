"""Seat-class split, seat maps and ticket/boarding-pass identifiers."""

from __future__ import annotations

import math
import secrets
import string
import time

from airport.contracts.enums import TicketClass

# Share of an aircraft's seats per cabin; first class takes the remainder.
CLASS_SHARES: dict[str, float] = {
    TicketClass.ECONOMY.value: 0.80,
    TicketClass.BUSINESS.value: 0.15,
    TicketClass.FIRST.value: 0.05,
}

CHECK_IN_OPENS_HOURS = 24

_BASE36 = string.digits + string.ascii_uppercase


def class_capacity(capacity: int) -> dict[str, int]:
    """Seats per class; the three values always sum to *capacity*."""
    economy = math.floor(capacity * CLASS_SHARES[TicketClass.ECONOMY.value])
    business = math.floor(capacity * CLASS_SHARES[TicketClass.BUSINESS.value])
    return {
        TicketClass.ECONOMY.value: economy,
        TicketClass.BUSINESS.value: business,
        TicketClass.FIRST.value: capacity - economy - business,
    }


def seat_availability(
    capacity: int,
    occupied_by_class: dict[str, int],
    ticket_class: TicketClass | str | None = None,
) -> dict[str, dict[str, int]]:
    """Total / occupied / available per class, optionally for one class only."""
    totals = class_capacity(capacity)
    result = {}
    for cls, total in totals.items():
        if ticket_class is not None and cls != TicketClass(ticket_class).value:
            continue
        occupied = occupied_by_class.get(cls, 0)
        result[cls] = {
            "total": total,
            "occupied": occupied,
            "available": max(total - occupied, 0),
        }
    return result


def seat_map(capacity: int, occupied: set[str]) -> list[dict[str, object]]:
    """Flat seat map ``A1..A{capacity}`` flagged with availability."""
    return [
        {"seat_number": f"A{n}", "available": f"A{n}" not in occupied}
        for n in range(1, capacity + 1)
    ]


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def _random_suffix(length: int) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_ticket_number(now_ms: int | None = None) -> str:
    """``TK`` + base36 millisecond timestamp + 4 random characters."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"TK{to_base36(stamp)}{_random_suffix(4)}"


def generate_boarding_pass(now_ms: int | None = None) -> str:
    """``BP`` + base36 millisecond timestamp + 2 random characters."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"BP{to_base36(stamp)}{_random_suffix(2)}"
