from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from travel_desk.core.errors import BadRequestError, FormValidationError
from travel_desk.models.bookings import CurrentUser
from travel_desk.schemas.booking_form import (
    BookingFormData,
    CostingRow,
    CostingTotalsView,
    HotelEntry,
    StepId,
    TransportLeg,
    VisaEntry,
)
from travel_desk.services.booking_form_validation import STEP_IDS, SUBMIT_STEPS, validate_step_data, validate_steps
from travel_desk.services.booking_payload import build_booking_payload, sanitize_pnr
from travel_desk.shared.base import to_camel
from travel_desk.shared.coerce import to_number

# Contact and card details carried over when another booking is added for the same customer.
SHARED_DRAFT_FIELDS = (
    "name",
    "passengers",
    "adults",
    "children",
    "email",
    "contact_number",
    "agent",
    "card_number",
    "expiry_date",
    "cvv",
    "cardholder_name",
)


def _patched(model_instance: Any, changes: Dict[str, Any]) -> Any:
    try:
        return model_instance.with_changes(changes)
    except KeyError as exc:
        raise BadRequestError(f"Unknown form field: {exc.args[0]}") from exc


class BookingWizard:
    """In-memory multi-step booking form holding one or more drafts for the same customer."""

    def __init__(self, drafts: Optional[List[BookingFormData]] = None, booking_id: Optional[str] = None) -> None:
        self.booking_id = booking_id
        self.drafts: List[BookingFormData] = list(drafts) if drafts else [BookingFormData()]
        self.current_index = 0
        self.step_index = 0
        self.errors: Dict[str, str] = {}
        self.server_error = ""

    @property
    def is_edit(self) -> bool:
        return self.booking_id is not None

    @property
    def draft(self) -> BookingFormData:
        return self.drafts[self.current_index]

    @property
    def step(self) -> StepId:
        return STEP_IDS[self.step_index]

    def _store(self, draft: BookingFormData) -> None:
        self.drafts[self.current_index] = draft
        self.server_error = ""

    def update(self, **changes: Any) -> BookingFormData:
        if "pnr" in changes:
            changes["pnr"] = sanitize_pnr(changes["pnr"])
        self._store(_patched(self.draft, changes))
        for key in changes:
            self.errors.pop(key, None)
            self.errors.pop(to_camel(key), None)
        return self.draft

    # navigation

    def validate_current_step(self) -> bool:
        self.errors = validate_step_data(self.draft, self.step)
        return not self.errors

    def next(self) -> bool:
        if not self.validate_current_step():
            return False
        if self.step_index >= len(STEP_IDS) - 1:
            return False
        self.step_index += 1
        return True

    def previous(self) -> None:
        self.step_index = max(0, self.step_index - 1)

    def go_to(self, step: Union[StepId, int]) -> None:
        index = STEP_IDS.index(step) if isinstance(step, str) else step
        if not 0 <= index < len(STEP_IDS):
            raise BadRequestError("Unknown step")
        self.step_index = index

    # hotels

    def add_hotel(self) -> None:
        self._store(_patched(self.draft, {"hotels": self.draft.hotels + [HotelEntry()]}))

    def update_hotel(self, index: int, **changes: Any) -> None:
        hotels = list(self.draft.hotels)
        hotels[index] = _patched(hotels[index], changes)
        self._store(_patched(self.draft, {"hotels": hotels}))

    def remove_hotel(self, index: int) -> None:
        hotels = [hotel for position, hotel in enumerate(self.draft.hotels) if position != index]
        self._store(_patched(self.draft, {"hotels": hotels}))

    # visas

    def set_visas_count(self, count: int) -> None:
        count = max(0, int(count))
        visas = list(self.draft.visas[:count])
        visas.extend(VisaEntry() for _ in range(count - len(visas)))
        self._store(_patched(self.draft, {"visas_count": count, "visas": visas}))

    def update_visa(self, index: int, **changes: Any) -> None:
        visas = list(self.draft.visas)
        visas[index] = _patched(visas[index], changes)
        self._store(_patched(self.draft, {"visas": visas}))

    # transport

    def set_legs_count(self, count: int) -> None:
        count = max(0, int(count))
        legs = list(self.draft.legs[:count])
        legs.extend(TransportLeg() for _ in range(count - len(legs)))
        self._store(_patched(self.draft, {"legs_count": count, "legs": legs}))

    def update_leg(self, index: int, **changes: Any) -> None:
        legs = list(self.draft.legs)
        legs[index] = _patched(legs[index], changes)
        self._store(_patched(self.draft, {"legs": legs}))

    # costing

    def add_costing_row(self, label: str = "") -> None:
        rows = self.draft.costing_rows + [CostingRow(label=label)]
        self._store(_patched(self.draft, {"costing_rows": rows}))

    def update_costing_row(self, index: int, **changes: Any) -> None:
        rows = list(self.draft.costing_rows)
        rows[index] = _patched(rows[index], changes)
        self._store(_patched(self.draft, {"costing_rows": rows}))

    def remove_costing_row(self, index: int) -> None:
        rows = [row for position, row in enumerate(self.draft.costing_rows) if position != index]
        self._store(_patched(self.draft, {"costing_rows": rows}))

    def costing_totals(self) -> CostingTotalsView:
        sum_cost = 0.0
        sum_sale = 0.0
        for row in self.draft.costing_rows:
            quantity = to_number(row.quantity)
            sum_cost += quantity * to_number(row.cost_per_qty)
            sum_sale += quantity * to_number(row.sale_per_qty)
        return CostingTotalsView(sum_cost=sum_cost, sum_sale=sum_sale, profit=sum_sale - sum_cost)

    # pnrs; the first entry is mirrored into the legacy single pnr field

    def _pnr_list(self) -> List[str]:
        return list(self.draft.pnrs or ([self.draft.pnr] if self.draft.pnr else []))

    def _store_pnrs(self, pnrs: List[str]) -> None:
        self._store(_patched(self.draft, {"pnrs": pnrs, "pnr": pnrs[0] if pnrs else ""}))

    def add_pnr(self, value: str = "") -> None:
        self._store_pnrs(self._pnr_list() + [sanitize_pnr(value)])

    def update_pnr(self, index: int, value: str) -> None:
        pnrs = self._pnr_list()
        pnrs[index] = sanitize_pnr(value)
        self._store_pnrs(pnrs)

    def remove_pnr(self, index: int) -> None:
        pnrs = self._pnr_list()
        if len(pnrs) <= 1:
            return
        self._store_pnrs([pnr for position, pnr in enumerate(pnrs) if position != index])

    # drafts

    def add_booking(self) -> int:
        if self.is_edit:
            raise BadRequestError("Only one booking can be edited at a time")
        shared = {field: getattr(self.draft, field) for field in SHARED_DRAFT_FIELDS}
        self.drafts.append(BookingFormData(**shared))
        self.current_index = len(self.drafts) - 1
        self.step_index = 0
        self.errors = {}
        self.server_error = ""
        return self.current_index

    def switch_to(self, index: int) -> None:
        if 0 <= index < len(self.drafts):
            self.current_index = index

    def reset(self) -> None:
        self.drafts = [BookingFormData()]
        self.current_index = 0
        self.step_index = 0
        self.errors = {}
        self.server_error = ""

    # submit

    def validate_all(self) -> bool:
        """Check every draft before submit; the first failing draft becomes current."""
        for index, draft in enumerate(self.drafts):
            errors = validate_steps(draft, SUBMIT_STEPS)
            if errors:
                self.current_index = index
                self.errors = errors
                self.server_error = f"Please complete all required fields for Booking {index + 1}"
                return False
        self.errors = {}
        self.server_error = ""
        return True

    def build_payloads(self, user: Optional[CurrentUser], now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        if not self.validate_all():
            raise FormValidationError(self.current_index, self.errors)
        return [build_booking_payload(draft, user, now=now) for draft in self.drafts]
