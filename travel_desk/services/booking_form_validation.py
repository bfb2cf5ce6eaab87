from __future__ import annotations

import re
from typing import Dict, Iterable, List

from travel_desk.schemas.booking_form import BookingFormData, StepId, StepInfo
from travel_desk.shared.time import parse_datetime

STEPS: List[StepInfo] = [
    StepInfo(id="contact", title="Contact Info"),
    StepInfo(id="credit", title="Credit Card"),
    StepInfo(id="flights", title="Flights"),
    StepInfo(id="hotels", title="Hotels"),
    StepInfo(id="visa", title="Visa(s)"),
    StepInfo(id="transport", title="Transportation"),
    StepInfo(id="costing", title="Costing"),
]
STEP_IDS: List[StepId] = [step.id for step in STEPS]
SUBMIT_STEPS: List[StepId] = ["flights", "costing", "hotels", "visa", "transport"]

PNR_PATTERN = re.compile(r"^[A-Z0-9]{6}$")


def _blank(value: str) -> bool:
    return not (value or "").strip()


def _contact(form: BookingFormData, errors: Dict[str, str]) -> None:
    if _blank(form.name):
        errors["name"] = "Name is required"
    if _blank(form.email):
        errors["email"] = "Email is required"
    if _blank(form.contact_number):
        errors["contactNumber"] = "Contact number is required"
    if _blank(form.passengers):
        errors["passengers"] = "Number of passengers is required"


def _credit(form: BookingFormData, errors: Dict[str, str]) -> None:
    if _blank(form.cardholder_name):
        errors["cardholderName"] = "Cardholder name is required"


def _flights(form: BookingFormData, errors: Dict[str, str]) -> None:
    has_itinerary = not _blank(form.flights_itinerary)
    has_route = not (
        _blank(form.departure_city)
        or _blank(form.arrival_city)
        or _blank(form.departure_date)
        or _blank(form.return_date)
    )
    if not has_itinerary and not has_route:
        errors["flightsItinerary"] = "Provide an itinerary OR fill departure/arrival + dates"
    if not _blank(form.date) and parse_datetime(form.date) is None:
        errors["date"] = "Invalid booking date"
    pnr = (form.pnr or "").strip()
    if pnr and not PNR_PATTERN.match(pnr):
        errors["pnr"] = "PNR must be exactly 6 letters/numbers (e.g. ABC12D)"


def _hotels(form: BookingFormData, errors: Dict[str, str]) -> None:
    for index, hotel in enumerate(form.hotels):
        if _blank(hotel.hotel_name) and _blank(hotel.name):
            errors[f"hotels_{index}_hotelName"] = "Hotel name is required"
        if _blank(hotel.check_in):
            errors[f"hotels_{index}_checkIn"] = "Check-in is required"
        if _blank(hotel.check_out):
            errors[f"hotels_{index}_checkOut"] = "Check-out is required"


def _visa(form: BookingFormData, errors: Dict[str, str]) -> None:
    if form.visas_count <= 0:
        return
    for index, visa in enumerate(form.visas[: form.visas_count]):
        if _blank(visa.name):
            errors[f"visa_{index}_name"] = "Name is required"
        if _blank(visa.nationality):
            errors[f"visa_{index}_nationality"] = "Nationality is required"
        if _blank(visa.visa_type):
            errors[f"visa_{index}_type"] = "Visa type is required"


def _transport(form: BookingFormData, errors: Dict[str, str]) -> None:
    if form.legs_count <= 0:
        return
    for index, leg in enumerate(form.legs[: form.legs_count]):
        if _blank(leg.from_location):
            errors[f"leg_{index}_from"] = "From is required"
        if _blank(leg.to):
            errors[f"leg_{index}_to"] = "To is required"
        if _blank(leg.vehicle_type):
            errors[f"leg_{index}_vehicleType"] = "Vehicle type is required"
        if _blank(leg.date):
            errors[f"leg_{index}_date"] = "Date is required"
        if _blank(leg.time):
            errors[f"leg_{index}_time"] = "Time is required"


def _costing(form: BookingFormData, errors: Dict[str, str]) -> None:
    if _blank(form.package):
        errors["package"] = "Package is required"
    for index, row in enumerate(form.costing_rows):
        if _blank(row.label):
            errors[f"cost_{index}_label"] = "Label is required"
        if row.quantity < 0:
            errors[f"cost_{index}_qty"] = "Quantity must be >= 0"
        if row.cost_per_qty < 0:
            errors[f"cost_{index}_cpq"] = "Cost per qty must be >= 0"
        if row.sale_per_qty < 0:
            errors[f"cost_{index}_spq"] = "Sale per qty must be >= 0"


VALIDATORS = {
    "contact": _contact,
    "credit": _credit,
    "flights": _flights,
    "hotels": _hotels,
    "visa": _visa,
    "transport": _transport,
    "costing": _costing,
}


def validate_step_data(form: BookingFormData, step: StepId) -> Dict[str, str]:
    """Field errors for one wizard step, keyed by form field (list fields are index-addressed)."""
    errors: Dict[str, str] = {}
    VALIDATORS[step](form, errors)
    return errors


def validate_steps(form: BookingFormData, steps: Iterable[StepId]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for step in steps:
        errors.update(validate_step_data(form, step))
    return errors
