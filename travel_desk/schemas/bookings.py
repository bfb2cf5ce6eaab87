from __future__ import annotations

from typing import List, Optional

from pydantic import ConfigDict, Field

from travel_desk.shared.base import BaseSchema

BOOKING_STATUSES = ("pending", "confirmed", "cancelled")
APPROVAL_STATUSES = ("pending", "approved", "rejected")


class CustomerInfo(BaseSchema):
    name: str = ""
    email: str = ""
    phone: str = ""


class AgentRef(BaseSchema):
    id: Optional[str] = None
    name: str = "Unassigned"


class BookingDates(BaseSchema):
    booking: str = ""
    departure: str = ""
    return_date: str = Field(default="", alias="return")
    created: str = ""


class FlightInfo(BaseSchema):
    route: str = ""
    flight_class: str = Field(default="", alias="class")
    pnr: str = ""
    itinerary: str = ""


class HotelStay(BaseSchema):
    name: str = ""
    room_type: str = ""
    check_in: str = ""
    check_out: str = ""


class VisaPassenger(BaseSchema):
    name: str = ""
    nationality: str = ""
    visa_type: str = ""


class TransportLegInfo(BaseSchema):
    from_location: str = Field(default="", alias="from")
    to: str = ""
    vehicle_type: str = ""
    date: str = ""
    time: str = ""


class CostingLine(BaseSchema):
    label: str = ""
    quantity: float = 0.0
    cost_per_qty: float = 0.0
    sale_per_qty: float = 0.0
    total_cost: float = 0.0
    total_sale: float = 0.0
    profit: float = 0.0


class CostingTotals(BaseSchema):
    total_cost: float = 0.0
    total_sale: float = 0.0
    profit: float = 0.0


class NormalizedBooking(BaseSchema):
    id: str = ""
    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    agent: AgentRef = Field(default_factory=AgentRef)
    package: str = ""
    status: str = "pending"
    approval_status: str = "pending"
    dates: BookingDates = Field(default_factory=BookingDates)
    flight: FlightInfo = Field(default_factory=FlightInfo)
    hotels: List[HotelStay] = Field(default_factory=list)
    visas: List[VisaPassenger] = Field(default_factory=list)
    transport_legs: List[TransportLegInfo] = Field(default_factory=list)
    costing_rows: List[CostingLine] = Field(default_factory=list)
    totals: CostingTotals = Field(default_factory=CostingTotals)


class PaymentRecord(BaseSchema):
    amount: float = 0.0
    method: str = ""
    date: str = ""
    reference: str = ""
    notes: str = ""


class DocumentExtras(BaseSchema):
    """Raw-record details the documents print but the canonical booking does not keep."""

    payment_method: str = ""
    card_number: str = ""
    card_last4: str = ""
    cardholder_name: str = ""
    expiry_date: str = ""
    payment_received: Optional[PaymentRecord] = None
    payment_due: Optional[PaymentRecord] = None
    passengers: str = ""
    adults: str = ""
    children: str = ""
    pickup_location: str = ""
    transport_type: str = ""


class BookingListFilters(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    search: Optional[str] = None
    status: str = Field(default="all", pattern="^(all|pending|confirmed|cancelled)$")
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=50, ge=1, le=500)


class BookingSummary(BaseSchema):
    total_bookings: int
    total_revenue: float
    confirmed_count: int
    pending_count: int
    cancelled_count: int


class BookingGroup(BaseSchema):
    key: str
    customer_name: str
    customer_email: str
    booking_count: int
    total_sale: float
    bookings: List[NormalizedBooking]


class BookingStatusUpdate(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    status: str = Field(pattern="^(pending|confirmed|cancelled)$")
