"""
Tests for prediction form validation and the submit flow.
"""

from datetime import date
from unittest.mock import Mock, call

import pytest

from coastal_models import PredictionRequest
from prediction_form import (
    FORM_FIELDS, PredictionFormState, clear_form_inputs, empty_form, reset_form, submit_form,
    validate_prediction_form,
)

TODAY = date(2024, 6, 1)


@pytest.fixture
def valid_values():
    return {
        "region": "Cape Cod",
        "date": "2024-05-20",
        "sea_level": 12.5,
        "erosion_rate": -1.5,
        "precipitation": 80,
    }


class TestValidation:

    def test_valid_values(self, valid_values):
        request, errors = validate_prediction_form(valid_values, today=TODAY)
        assert errors == {}
        assert request == PredictionRequest(region="Cape Cod", date=date(2024, 5, 20),
                                            sea_level=12.5, erosion_rate=-1.5, precipitation=80)

    def test_all_fields_required(self):
        request, errors = validate_prediction_form(empty_form(), today=TODAY)
        assert request is None
        assert errors == {
            "region": "Region is required",
            "date": "Date is required",
            "sea_level": "Sea Level is required",
            "erosion_rate": "Erosion Rate is required",
            "precipitation": "Precipitation is required",
        }

    def test_sea_level_out_of_range(self, valid_values):
        valid_values["sea_level"] = 150
        request, errors = validate_prediction_form(valid_values, today=TODAY)
        assert request is None
        assert errors == {"sea_level": "Sea Level must be between 0 and 100"}

    @pytest.mark.parametrize("field,value,message", [
        ("erosion_rate", -10.5, "Erosion Rate must be between -10 and 10"),
        ("erosion_rate", 11, "Erosion Rate must be between -10 and 10"),
        ("precipitation", -1, "Precipitation must be between 0 and 500"),
        ("precipitation", 500.1, "Precipitation must be between 0 and 500"),
        ("sea_level", "abc", "Sea Level must be a number"),
        ("sea_level", float("nan"), "Sea Level must be a number"),
        ("region", "   ", "Region is required"),
    ])
    def test_field_specific_messages(self, valid_values, field, value, message):
        valid_values[field] = value
        request, errors = validate_prediction_form(valid_values, today=TODAY)
        assert request is None
        assert errors == {field: message}

    @pytest.mark.parametrize("field,value", [
        ("sea_level", 0), ("sea_level", 100), ("erosion_rate", -10),
        ("erosion_rate", 10), ("precipitation", 0), ("precipitation", 500),
    ])
    def test_range_bounds_are_inclusive(self, valid_values, field, value):
        valid_values[field] = value
        request, errors = validate_prediction_form(valid_values, today=TODAY)
        assert errors == {}
        assert getattr(request, field) == value

    def test_future_date_rejected(self, valid_values):
        valid_values["date"] = "2024-06-02"
        _, errors = validate_prediction_form(valid_values, today=TODAY)
        assert errors == {"date": "Date cannot be in the future"}

    def test_today_is_allowed(self, valid_values):
        valid_values["date"] = date(2024, 6, 1)
        request, errors = validate_prediction_form(valid_values, today=TODAY)
        assert errors == {}
        assert request.date == TODAY

    def test_invalid_date(self, valid_values):
        valid_values["date"] = "06/01/2024"
        _, errors = validate_prediction_form(valid_values, today=TODAY)
        assert errors == {"date": "Date must be a valid date"}

    def test_numeric_strings_accepted(self, valid_values):
        valid_values["precipitation"] = "42.5"
        request, _ = validate_prediction_form(valid_values, today=TODAY)
        assert request.precipitation == 42.5


class TestFormState:

    def test_out_of_range_is_rejected_and_kept(self, valid_values):
        form = PredictionFormState()
        valid_values["sea_level"] = 150
        assert form.begin(valid_values, today=TODAY) is None
        assert form.errors == {"sea_level": "Sea Level must be between 0 and 100"}
        assert form.values["sea_level"] == 150
        assert form.busy is False

    def test_busy_until_finished(self, valid_values):
        form = PredictionFormState()
        assert form.begin(valid_values, today=TODAY) is not None
        assert form.busy is True
        assert form.begin(valid_values, today=TODAY) is None
        form.finish()
        assert form.begin(valid_values, today=TODAY) is not None

    def test_dispatched_clears_values_but_stays_busy(self, valid_values):
        form = PredictionFormState()
        form.begin(valid_values, today=TODAY)
        form.dispatched()
        assert form.values == empty_form()
        assert form.errors == {}
        assert form.busy is True

    def test_reset_clears_unconditionally(self, valid_values):
        form = PredictionFormState()
        valid_values["sea_level"] = 150
        form.begin(valid_values, today=TODAY)
        form.reset()
        assert form.values == empty_form()
        assert form.errors == {}


CLEARED = [
    call("pred_region", {"value": ""}),
    call("pred_date", {"value": ""}),
    call("pred_sea_level", {"value": None}),
    call("pred_erosion_rate", {"value": None}),
    call("pred_precipitation", {"value": None}),
]


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def predict_task():
    task = Mock()
    task.status.return_value = "initial"
    return task


class TestSessionWiring:

    def test_clear_sends_a_value_for_every_input(self, session):
        clear_form_inputs(session)
        assert session.send_input_message.call_args_list == CLEARED
        assert [c.args[0] for c in CLEARED] == [f"pred_{f}" for f in FORM_FIELDS]

    def test_valid_submit_starts_one_prediction_and_clears_inputs(self, valid_values, session, predict_task):
        form = PredictionFormState()
        request = submit_form(form, valid_values, predict_task, session, today=TODAY)

        predict_task.assert_called_once_with(request)
        sent = predict_task.call_args[0][0]
        assert sent.region == "Cape Cod"
        assert sent.date == date(2024, 5, 20)
        assert sent.sea_level == 12.5
        assert sent.erosion_rate == -1.5
        assert sent.precipitation == 80
        assert session.send_input_message.call_args_list == CLEARED
        assert form.values == empty_form()
        assert form.busy is True

    def test_invalid_submit_keeps_inputs(self, valid_values, session, predict_task):
        form = PredictionFormState()
        valid_values["sea_level"] = 150
        assert submit_form(form, valid_values, predict_task, session, today=TODAY) is None
        predict_task.assert_not_called()
        session.send_input_message.assert_not_called()
        assert form.errors == {"sea_level": "Sea Level must be between 0 and 100"}

    def test_second_submit_ignored_while_in_flight(self, valid_values, session, predict_task):
        form = PredictionFormState()
        submit_form(form, valid_values, predict_task, session, today=TODAY)
        predict_task.status.return_value = "running"

        assert submit_form(form, valid_values, predict_task, session, today=TODAY) is None
        predict_task.assert_called_once()

        form.finish()
        assert submit_form(form, valid_values, predict_task, session, today=TODAY) is None
        predict_task.status.return_value = "success"
        assert submit_form(form, valid_values, predict_task, session, today=TODAY) is not None
        assert predict_task.call_count == 2

    def test_failed_prediction_still_leaves_form_cleared(self, valid_values, session, predict_task):
        form = PredictionFormState()
        submit_form(form, valid_values, predict_task, session, today=TODAY)
        predict_task.status.return_value = "error"
        form.finish()
        assert form.values == empty_form()
        assert form.busy is False

    def test_reset_clears_inputs_unconditionally(self, session):
        form = PredictionFormState()
        form.values["sea_level"] = 150
        form.errors = {"sea_level": "Sea Level must be between 0 and 100"}
        reset_form(form, session)
        assert session.send_input_message.call_args_list == CLEARED
        assert form.values == empty_form()
        assert form.errors == {}
