# prediction_form.py
# Client-side validation and submit flow of the prediction form

import math
import sys
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError

from coastal_models import PredictionRequest

# (field, label, min, max)
NUMERIC_FIELDS = [
    ("sea_level", "Sea Level", 0, 100),
    ("erosion_rate", "Erosion Rate", -10, 10),
    ("precipitation", "Precipitation", 0, 500),
]
FORM_FIELDS = ["region", "date"] + [f for f, *_ in NUMERIC_FIELDS]
TEXT_FIELDS = {"region", "date"}
INPUT_IDS = {f: f"pred_{f}" for f in FORM_FIELDS}


def empty_form() -> Dict[str, Any]:
    return {f: None for f in FORM_FIELDS}


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _as_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def _as_number(value) -> Optional[float]:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def validate_prediction_form(values: Dict[str, Any],
                             today: Optional[date] = None) -> Tuple[Optional[PredictionRequest], Dict[str, str]]:
    """
    Check raw form values.

    Returns the typed request and an empty error dict, or None and one message
    per offending field.
    """
    today = today or date.today()
    errors: Dict[str, str] = {}

    region = values.get("region")
    if _blank(region):
        errors["region"] = "Region is required"

    when = values.get("date")
    if _blank(when):
        errors["date"] = "Date is required"
    else:
        when = _as_date(when)
        if when is None:
            errors["date"] = "Date must be a valid date"
        elif when > today:
            errors["date"] = "Date cannot be in the future"

    numbers = {}
    for field, label, lo, hi in NUMERIC_FIELDS:
        raw = values.get(field)
        if _blank(raw):
            errors[field] = f"{label} is required"
            continue
        num = _as_number(raw)
        if num is None:
            errors[field] = f"{label} must be a number"
        elif not lo <= num <= hi:
            errors[field] = f"{label} must be between {lo} and {hi}"
        else:
            numbers[field] = num

    if errors:
        return None, errors

    try:
        request = PredictionRequest(region=region.strip(), date=when, **numbers)
    except ValidationError as e:
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "form"
            errors[field] = err["msg"]
        return None, errors
    return request, {}


class PredictionFormState:
    """
    Values, errors and busy flag of one prediction form.

    busy is set from begin() until finish(), i.e. while the request is in
    flight. The fields clear as soon as the request is dispatched, whatever
    its outcome.
    """

    def __init__(self):
        self.values = empty_form()
        self.errors: Dict[str, str] = {}
        self.busy = False

    def begin(self, values: Dict[str, Any], today: Optional[date] = None) -> Optional[PredictionRequest]:
        """Validate and mark the form busy; None when blocked."""
        if self.busy:
            return None
        self.values = dict(values)
        request, self.errors = validate_prediction_form(values, today)
        if request is None:
            return None
        self.busy = True
        return request

    def dispatched(self):
        self.reset()

    def finish(self):
        """Request settled (success or failure): allow the next submit."""
        self.busy = False

    def reset(self):
        self.values = empty_form()
        self.errors = {}


# ---------------------------------------------------------------------
# Session wiring
# ---------------------------------------------------------------------
def clear_form_inputs(session):
    """
    Blank every prediction input in the browser.

    ui.update_numeric drops value=None from its message, so the inputs are
    cleared with raw input messages that keep the value key.
    """
    for field in FORM_FIELDS:
        value = "" if field in TEXT_FIELDS else None
        session.send_input_message(INPUT_IDS[field], {"value": value})


def submit_form(form: PredictionFormState, values: Dict[str, Any], predict_task, session,
                today: Optional[date] = None) -> Optional[PredictionRequest]:
    """Validate, start one prediction on predict_task and clear the inputs."""
    if form.busy or predict_task.status() == "running":
        print("Prediction already in flight; submit ignored", file=sys.stderr)
        return None
    request = form.begin(values, today)
    if request is None:
        print(f"Prediction form rejected: {form.errors}", file=sys.stderr)
        return None
    predict_task(request)
    form.dispatched()
    clear_form_inputs(session)
    return request


def reset_form(form: PredictionFormState, session):
    form.reset()
    clear_form_inputs(session)
