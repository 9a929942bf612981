"""
Tests for refit/utils/validation.py

Covers ValidationResult, the field-level form validators and the
warn-only payment term checks.
"""

import pytest

from refit.models import PaymentTerm
from refit.utils.validation import (
    ValidationResult,
    validate_appointment_data,
    validate_contractor_data,
    validate_email,
    validate_location_data,
    validate_payment_terms,
    validate_priority,
    validate_project_data,
    validate_quote_data,
    validate_task_data,
    validate_team_member_data,
    validate_time,
)


class TestValidationResult:
    """Tests for ValidationResult dataclass."""

    def test_success_creates_valid_result(self):
        result = ValidationResult.success()
        assert result.is_valid is True
        assert result.errors == []
        assert result.field_errors == {}

    def test_failure_keeps_field_errors(self):
        result = ValidationResult.failure(["Name is required"], field_errors={"name": "Name is required"})
        assert result.is_valid is False
        assert result.field_errors["name"] == "Name is required"


class TestSimpleValidators:
    """Tests for email, time and priority checks."""

    @pytest.mark.parametrize("email,valid", [
        ("user@example.com", True),
        ("first.last+tag@sub.example.it", True),
        ("missing-at.example.com", False),
        ("user@nodot", False),
        ("", False),
    ])
    def test_validate_email(self, email, valid):
        assert validate_email(email) is valid

    @pytest.mark.parametrize("value,valid", [
        ("00:00", True), ("09:30", True), ("23:59", True),
        ("24:00", False), ("9:30", False), ("12:60", False), ("", False),
    ])
    def test_validate_time(self, value, valid):
        assert validate_time(value) is valid

    def test_validate_priority_case_insensitive(self):
        assert validate_priority("URGENT")
        assert not validate_priority("critical")
        assert not validate_priority("")


class TestEntityForms:
    """Tests for the per-entity form validators."""

    def test_location_requires_name_code_city(self):
        result = validate_location_data({"name": "", "address": {}})

        assert not result.is_valid
        assert set(result.field_errors) == {"name", "code", "address.city"}

    def test_location_negative_surface(self):
        result = validate_location_data({"name": "A", "code": "A1", "address": {"city": "Roma"}, "surface": -5})
        assert result.field_errors == {"surface": "Surface must be a non-negative number"}

    def test_location_bad_email_only_warns(self):
        result = validate_location_data({
            "name": "A", "code": "A1", "address": {"city": "Roma"}, "contacts": {"email": "nope"},
        })
        assert result.is_valid
        assert result.warnings

    def test_project_end_before_start(self):
        result = validate_project_data({
            "name": "Refit",
            "location_id": "loc-1",
            "dates": {"start_planned": "2024-06-10", "end_planned": "2024-06-01"},
        })
        assert "end_planned" in result.field_errors

    def test_project_overspend_warns(self):
        result = validate_project_data({
            "name": "Refit", "location_id": "loc-1", "budget": {"approved": 100, "spent": 150},
        })
        assert result.is_valid
        assert result.warnings == ["Spent amount exceeds the approved budget"]

    def test_contractor_email_required_and_checked(self):
        assert "contacts.email" in validate_contractor_data({"company_name": "Edil"}).field_errors
        bad = validate_contractor_data({"company_name": "Edil", "contacts": {"email": "x"}})
        assert bad.field_errors["contacts.email"] == "Contact email is not valid"

    def test_contractor_missing_vat_warns(self):
        result = validate_contractor_data({"company_name": "Edil", "contacts": {"email": "info@edil.it"}})
        assert result.is_valid
        assert result.warnings == ["No VAT number provided"]

    def test_quote_items_mismatch_warns(self):
        result = validate_quote_data({
            "project_id": "p1",
            "contractor_id": "c1",
            "quote_number": "Q-1",
            "total_amount": 1000,
            "items": [{"total_price": 400}, {"total_price": 500}],
        })
        assert result.is_valid
        assert "differs from the sum of its items" in result.warnings[0]

    def test_task_title_required_and_bounded(self):
        assert "title" in validate_task_data({"title": "  "}).field_errors
        assert "title" in validate_task_data({"title": "x" * 501}).field_errors

    def test_task_bad_priority(self):
        assert "priority" in validate_task_data({"title": "T", "priority": "critical"}).field_errors

    def test_appointment_times(self):
        result = validate_appointment_data({
            "title": "Visit", "scheduled_date": "2024-06-20", "start_time": "10:00", "end_time": "09:00",
        })
        assert result.field_errors == {"end_time": "End time must be after start time"}

    def test_team_member_email(self):
        assert validate_team_member_data({"name": "Ada", "email": "ada@example.com"}).is_valid
        assert "email" in validate_team_member_data({"name": "Ada", "email": "ada"}).field_errors


class TestPaymentTerms:
    """Tests for validate_payment_terms."""

    def test_percentages_adding_to_100(self):
        terms = [{"percentage": 30}, {"percentage": 70}]
        result = validate_payment_terms(terms, 10000)
        assert result.is_valid
        assert result.warnings == []

    def test_fixed_amounts_matching_total(self):
        assert validate_payment_terms([{"fixed_amount": 4000}, {"fixed_amount": 6000}], 10000).warnings == []

    def test_mismatch_only_warns(self):
        result = validate_payment_terms([{"percentage": 30}, {"percentage": 40}], 10000)
        assert result.is_valid
        assert len(result.warnings) == 1

    def test_percentage_and_fixed_amount_are_exclusive(self):
        result = validate_payment_terms([{"percentage": 100, "fixed_amount": 10000}], 10000)
        assert "payment_terms.0" in result.field_errors

    def test_neither_set(self):
        assert "payment_terms.0" in validate_payment_terms([{}], 100).field_errors

    def test_inactive_terms_skipped(self):
        terms = [{"percentage": 100}, {"percentage": 50, "is_active": False}]
        assert validate_payment_terms(terms, 100).warnings == []

    def test_accepts_models(self):
        terms = [
            PaymentTerm(id="t1", description="Deposit", percentage=50, trigger_event="custom_date"),
            PaymentTerm(id="t2", description="Balance", percentage=50),
        ]
        result = validate_payment_terms(terms, 1000)
        assert result.is_valid
        assert result.warnings == ["Term 1 uses a custom date but no date is set"]
