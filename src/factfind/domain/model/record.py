"""Client record shape and the default factories for its sub-entities.

A client record is a JSON-compatible nested mapping. Every field is present
from creation (empty string, ``None`` or ``[]`` when unknown) so that
completeness scoring and exports never have to guess whether a key exists.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from .enums import SubEntityKind

if TYPE_CHECKING:
    from collections.abc import Callable

type ClientRecord = dict[str, Any]
type SubEntity = dict[str, Any]


def new_id() -> str:
    return str(uuid4())


def timestamp(now: datetime | None = None) -> str:
    moment = now or datetime.now(tz=UTC)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat()


def _address() -> dict[str, str]:
    return {"line1": "", "line2": "", "city": "", "state": "", "postcode": "", "country": ""}


def _person() -> dict[str, Any]:
    return {
        "title": "",
        "firstName": "",
        "middleName": "",
        "lastName": "",
        "preferredName": "",
        "dateOfBirth": "",
        "age": None,
        "gender": "",
        "countryOfResidence": "",
        "nationality": "",
        "dualNationality": "",
        "nationalInsuranceNumber": "",
        "taxResidency": "",
        "taxIdentificationNumber": "",
        "email": "",
        "phoneHome": "",
        "phoneMobile": "",
        "phoneWork": "",
        "address": _address(),
        "isPoliticallyExposedPerson": None,
        "pepDetails": "",
        "healthStatus": "",
        "smoker": None,
        "willInPlace": None,
        "willDate": "",
        "powerOfAttorneyInPlace": None,
        "notes": "",
    }


def _employment() -> dict[str, Any]:
    return {
        "status": "",
        "jobTitle": "",
        "employer": "",
        "employerAddress": "",
        "industry": "",
        "yearsInRole": None,
        "contractType": "",
        "contractEndDate": "",
        "monthlyGrossIncome": None,
        "monthlyNetIncome": None,
        "incomeCurrency": "",
        "annualBonus": None,
        "bonusGuaranteed": None,
        "otherBenefits": "",
        "monthlySurplus": None,
        "anticipatedChanges": "",
        "retirementAge": None,
        "notes": "",
    }


def new_client_record(
    *,
    record_id: str | None = None,
    first_name: str = "",
    last_name: str = "",
    now: datetime | None = None,
) -> ClientRecord:
    """Return an empty client record with every field initialised."""

    created = timestamp(now)
    personal = _person()
    personal["relationshipStatus"] = ""
    personal["dateOfMarriage"] = ""
    personal["firstName"] = first_name
    personal["lastName"] = last_name

    return {
        "id": record_id or new_id(),
        "createdAt": created,
        "updatedAt": created,
        "dataCompleteness": 0,
        "version": 1,
        "dataSources": [],
        "personal": personal,
        "spouse": _person(),
        "employment": _employment(),
        "spouseEmployment": _employment(),
        "children": [],
        "pensions": [],
        "properties": [],
        "investments": [],
        "bankAccounts": [],
        "debts": [],
        "protection": [],
        "goals": {
            "shortTerm": "",
            "mediumTerm": "",
            "longTerm": "",
            "retirementAge": None,
            "retirementIncomeRequired": None,
            "retirementIncomeCurrency": "",
            "retirementLocation": "",
            "financialGoals": [],
            "concerns": "",
            "priorities": "",
            "notes": "",
        },
        "riskAttitude": {
            "investmentExperience": "",
            "riskTolerance": None,
            "capacityForLoss": "",
            "investmentTimeHorizon": "",
            "attitudeToEthicalInvesting": "",
            "previousInvestmentExperience": "",
            "reactionToMarketFall": "",
            "notes": "",
        },
        "expenditure": {
            "mortgage": None,
            "rent": None,
            "councilTax": None,
            "utilities": None,
            "insurance": None,
            "food": None,
            "transport": None,
            "childcare": None,
            "schoolFees": None,
            "entertainment": None,
            "holidays": None,
            "clothing": None,
            "loans": None,
            "creditCards": None,
            "savings": None,
            "other": None,
            "otherDetails": "",
            "totalMonthly": None,
            "currency": "",
            "notes": "",
        },
        "estatePlanning": {
            "willInPlace": None,
            "willDate": "",
            "willLocation": "",
            "executors": "",
            "powerOfAttorney": None,
            "poaType": "",
            "poaAttorneys": "",
            "trustsInPlace": None,
            "trustDetails": "",
            "inheritanceTaxPlanning": "",
            "giftsMade": "",
            "notes": "",
        },
        "history": [],
    }


def new_child() -> SubEntity:
    return {
        "id": new_id(),
        "firstName": "",
        "lastName": "",
        "dateOfBirth": "",
        "age": None,
        "gender": "",
        "relationship": "",
        "isDependent": None,
        "inEducation": None,
        "school": "",
        "annualSchoolFees": None,
        "schoolFeesCurrency": "",
        "healthIssues": "",
        "notes": "",
    }


def new_pension() -> SubEntity:
    return {
        "id": new_id(),
        "owner": "",
        "provider": "",
        "policyNumber": "",
        "type": "",
        "currentValue": None,
        "currency": "",
        "employerContribution": None,
        "employeeContribution": None,
        "contributionFrequency": "",
        "projectedValueAtRetirement": None,
        "retirementAge": None,
        "deathBenefits": "",
        "transferValue": None,
        "annualGrowthRate": None,
        "charges": "",
        "notes": "",
    }


def new_property() -> SubEntity:
    return {
        "id": new_id(),
        "owner": "",
        "address": _address(),
        "propertyType": "",
        "usage": "",
        "purchaseDate": "",
        "purchasePrice": None,
        "currentValue": None,
        "currency": "",
        "valuationDate": "",
        "mortgageProvider": "",
        "mortgageBalance": None,
        "mortgageType": "",
        "mortgageRate": None,
        "mortgageRateType": "",
        "mortgageEndDate": "",
        "monthlyPayment": None,
        "rentalIncome": None,
        "rentalIncomeFrequency": "",
        "equity": None,
        "notes": "",
    }


def new_investment() -> SubEntity:
    return {
        "id": new_id(),
        "owner": "",
        "provider": "",
        "accountNumber": "",
        "type": "",
        "platform": "",
        "currentValue": None,
        "currency": "",
        "originalInvestment": None,
        "investmentDate": "",
        "annualReturn": None,
        "regularContribution": None,
        "contributionFrequency": "",
        "taxWrapper": "",
        "riskLevel": "",
        "maturityDate": "",
        "charges": "",
        "notes": "",
    }


def new_bank_account() -> SubEntity:
    return {
        "id": new_id(),
        "owner": "",
        "bank": "",
        "accountType": "",
        "accountNumber": "",
        "sortCode": "",
        "balance": None,
        "currency": "",
        "interestRate": None,
        "monthlyIncome": None,
        "purpose": "",
        "notes": "",
    }


def new_debt() -> SubEntity:
    return {
        "id": new_id(),
        "owner": "",
        "type": "",
        "provider": "",
        "originalAmount": None,
        "outstandingBalance": None,
        "currency": "",
        "interestRate": None,
        "monthlyPayment": None,
        "startDate": "",
        "endDate": "",
        "secured": None,
        "notes": "",
    }


def new_protection() -> SubEntity:
    return {
        "id": new_id(),
        "owner": "",
        "type": "",
        "provider": "",
        "policyNumber": "",
        "sumAssured": None,
        "currency": "",
        "premium": None,
        "premiumFrequency": "",
        "startDate": "",
        "endDate": "",
        "inTrust": None,
        "beneficiaries": "",
        "notes": "",
    }


SUB_ENTITY_FACTORIES: dict[SubEntityKind, Callable[[], SubEntity]] = {
    SubEntityKind.CHILDREN: new_child,
    SubEntityKind.PENSIONS: new_pension,
    SubEntityKind.PROPERTIES: new_property,
    SubEntityKind.INVESTMENTS: new_investment,
    SubEntityKind.BANK_ACCOUNTS: new_bank_account,
    SubEntityKind.DEBTS: new_debt,
    SubEntityKind.PROTECTION: new_protection,
}


def sub_entity_factory(field_name: str) -> Callable[[], SubEntity] | None:
    """Return the default-shape factory for an array field, if it has one."""

    try:
        kind = SubEntityKind(field_name)
    except ValueError:
        return None
    return SUB_ENTITY_FACTORIES[kind]


def client_display_name(record: ClientRecord) -> str:
    personal = record.get("personal") or {}
    first = str(personal.get("firstName") or "").strip()
    last = str(personal.get("lastName") or "").strip()
    return f"{first} {last}".strip()
