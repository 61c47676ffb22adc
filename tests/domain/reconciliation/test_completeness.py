from __future__ import annotations

from factfind.domain.model.record import new_client_record, new_pension
from factfind.domain.reconciliation.completeness import score_completeness, validate_record
from tests.helpers.clients import make_record


def test_empty_record_scores_zero() -> None:
    assert score_completeness(new_client_record()) == 0


def test_fully_populated_record_scores_hundred() -> None:
    record = make_record(
        "Maria",
        "Lopez",
        personal={
            "dateOfBirth": "1980-01-01",
            "email": "maria@example.com",
            "phoneMobile": "+44 7700 900000",
            "countryOfResidence": "UK",
            "nationality": "Spanish",
            "relationshipStatus": "Married",
        },
        employment={
            "status": "Employed",
            "jobTitle": "Engineer",
            "employer": "Acme",
            "monthlyGrossIncome": 5000,
            "retirementAge": 65,
        },
        goals={"shortTerm": "Holiday", "longTerm": "Retire early", "retirementAge": 60},
        riskAttitude={
            "riskTolerance": 5,
            "investmentTimeHorizon": "10 years",
            "capacityForLoss": "Medium",
        },
        expenditure={"mortgage": 1200, "food": 400, "utilities": 150, "transport": 0},
        pensions=[new_pension()],
        properties=[{"propertyType": "House"}],
        investments=[{"type": "ISA"}],
        bankAccounts=[{"bank": "HSBC"}],
    )

    assert score_completeness(record) == 100


def test_partial_categories_score_proportionally() -> None:
    # personal 2/8 of 25 = 6.25, employment 1/5 of 15 = 3
    record = make_record("Maria", "Lopez", employment={"monthlyGrossIncome": 5000})

    assert score_completeness(record) == 9


def test_expenditure_counts_only_above_three_fields() -> None:
    three = make_record("", "", expenditure={"mortgage": 1, "food": 2, "notes": "n", "rent": 3})
    four = make_record("", "", expenditure={"mortgage": 1, "food": 2, "rent": 3, "other": 4})

    assert score_completeness(three) == 0
    assert score_completeness(four) == 5


def test_zero_and_false_leave_category_fields_unfilled() -> None:
    base = make_record("Amy", "Brown")
    zeroed = make_record(
        "Amy",
        "Brown",
        employment={"monthlyGrossIncome": 0},
        riskAttitude={"riskTolerance": 0, "capacityForLoss": False},
    )

    assert score_completeness(base) == 6
    assert score_completeness(zeroed) == 6


def test_zero_expenditure_values_still_count() -> None:
    record = make_record("", "", expenditure={"mortgage": 0, "food": 0, "rent": 0, "other": 0})

    assert score_completeness(record) == 5


def test_score_is_idempotent_and_ignores_stored_score() -> None:
    record = make_record("Maria", "Lopez")
    record["dataCompleteness"] = 77

    first = score_completeness(record)

    assert score_completeness(record) == first
    assert first != 77


def test_validate_record_requires_names() -> None:
    assert validate_record(make_record("Maria", "Lopez")).is_valid
    result = validate_record(make_record(" ", ""))

    assert not result.is_valid
    assert result.errors == ("First name is required", "Last name is required")
