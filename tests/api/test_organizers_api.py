# tests/api/test_organizers_api.py

from unittest.mock import MagicMock

import pytest

from payout_service.main import app
from payout_service.schemas.organizer import BankAccountVerification
from payout_service.services.bank.bank_verification import BankVerificationError
from payout_service.services.payout.bank_details_service import (
    BankDetailsService,
    get_bank_details_service,
)
from tests.utils.auth import get_user_authentication_headers
from tests.utils.factories import make_organizer

URL = "/api/v1/organizers/me/bank-details"


@pytest.fixture
def verifier(test_client):
    verifier = MagicMock()
    verifier.verify.return_value = BankAccountVerification(
        account_number="0987654321", bank_code="044", account_name="ADA OBI"
    )
    app.dependency_overrides[get_bank_details_service] = lambda: BankDetailsService(
        verifier=verifier
    )
    yield verifier
    app.dependency_overrides.pop(get_bank_details_service, None)


def test_update_bank_details(test_client, db, verifier):
    organizer = make_organizer(db, with_bank=False)
    headers = get_user_authentication_headers(organizer.id, sub_role="ORGANIZER")

    response = test_client.put(
        URL, json={"account_number": "0987654321", "bank_code": "044"}, headers=headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == organizer.id
    assert data["bank_account"] == "0987654321"
    assert data["account_name"] == "ADA OBI"
    assert data["bank_verified_at"] is not None


def test_update_bank_details_rejects_malformed_account(test_client, db, verifier):
    organizer = make_organizer(db)
    headers = get_user_authentication_headers(organizer.id, sub_role="ORGANIZER")

    response = test_client.put(
        URL, json={"account_number": "12345", "bank_code": "044"}, headers=headers
    )

    assert response.status_code == 422
    verifier.verify.assert_not_called()


def test_update_bank_details_verification_failure(test_client, db, verifier):
    verifier.verify.side_effect = BankVerificationError("Could not resolve account name")
    organizer = make_organizer(db)
    headers = get_user_authentication_headers(organizer.id, sub_role="ORGANIZER")

    response = test_client.put(
        URL, json={"account_number": "0987654321", "bank_code": "044"}, headers=headers
    )

    assert response.status_code == 502
    assert response.json()["detail"] == "Could not resolve account name"


def test_update_bank_details_forbidden_for_attendee(test_client, db, verifier):
    organizer = make_organizer(db)
    headers = get_user_authentication_headers(organizer.id, sub_role="ATTENDEE")

    response = test_client.put(
        URL, json={"account_number": "0987654321", "bank_code": "044"}, headers=headers
    )

    assert response.status_code == 403
