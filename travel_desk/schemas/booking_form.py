from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from travel_desk.shared.base import BaseSchema

StepId = Literal["contact", "credit", "flights", "hotels", "visa", "transport", "costing"]


class HotelEntry(BaseSchema):
    hotel_name: str = ""
    name: str = ""
    room_type: str = ""
    check_in: str = ""
    check_out: str = ""


class VisaEntry(BaseSchema):
    name: str = ""
    nationality: str = ""
    visa_type: str = "tourist"


class TransportLeg(BaseSchema):
    from_location: str = Field(default="", alias="from")
    to: str = ""
    vehicle_type: str = "Sedan"
    date: str = ""
    time: str = ""


class CostingRow(BaseSchema):
    label: str = ""
    quantity: float = 0.0
    cost_per_qty: float = 0.0
    sale_per_qty: float = 0.0


STARTER_COSTING_LABELS = ["Flights", "Makkah Hotel", "Madinah Hotel", "Visa(s)", "Transportation"]


def starter_costing_rows() -> List[CostingRow]:
    return [CostingRow(label=label) for label in STARTER_COSTING_LABELS]


def empty_hotels() -> List[HotelEntry]:
    return [HotelEntry()]


class BookingFormData(BaseSchema):
    # contact
    name: str = ""
    passengers: str = ""
    adults: str = ""
    children: str = ""
    email: str = ""
    contact_number: str = ""
    agent: str = ""

    # credit
    card_number: str = ""
    expiry_date: str = ""
    cvv: str = ""
    cardholder_name: str = ""

    # flights
    departure_city: str = ""
    arrival_city: str = ""
    departure_date: str = ""
    return_date: str = ""
    flight_class: str = "economy"
    pnr: str = ""
    pnrs: List[str] = Field(default_factory=list)
    flights_itinerary: str = ""

    # hotels, legacy single entry plus list
    hotel_name: str = ""
    room_type: str = ""
    check_in: str = ""
    check_out: str = ""
    hotels: List[HotelEntry] = Field(default_factory=empty_hotels)

    # visa
    visa_type: str = "umrah"
    passport_number: str = ""
    nationality: str = ""
    visas_count: int = 0
    visas: List[VisaEntry] = Field(default_factory=list)

    # transport
    transport_type: str = "bus"
    pickup_location: str = ""
    legs_count: int = 0
    legs: List[TransportLeg] = Field(default_factory=list)

    # costing
    package_price: str = ""
    additional_services: str = ""
    total_amount: str = ""
    payment_method: str = "credit_card"
    costing_rows: List[CostingRow] = Field(default_factory=starter_costing_rows)

    # payment tracking
    payment_received_amount: str = ""
    payment_received_method: str = "credit_card"
    payment_received_date: str = ""
    payment_received_reference: str = ""
    payment_due_amount: str = ""
    payment_due_method: str = "credit_card"
    payment_due_date: str = ""
    payment_due_notes: str = ""

    package: str = ""
    date: str = ""


class StepInfo(BaseSchema):
    id: StepId
    title: str


class FormValidationRequest(BaseSchema):
    form: BookingFormData
    step: Optional[StepId] = None


class FormValidationResult(BaseSchema):
    step: Optional[StepId] = None
    valid: bool
    errors: Dict[str, str]


class BookingDraftsRequest(BaseSchema):
    drafts: List[BookingFormData] = Field(min_length=1)


class BookingPayloadResponse(BaseSchema):
    payload: Dict[str, Any]


class CostingTotalsView(BaseSchema):
    sum_cost: float
    sum_sale: float
    profit: float
