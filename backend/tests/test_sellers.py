# Overview: Pytest coverage for buying desk sellers (service and routes).

import pytest

from slabdesk.models import Contact, Seller
from slabdesk.services import seller_service
from slabdesk.services.seller_service import SellerError

from conftest import USER_A, USER_B


class TestSellerService:

    def test_create_new_contact(self, db_session):
        seller = seller_service.create_seller(USER_A, {
            "name": "Pat Collector",
            "email": "pat@example.com",
            "phone_number": "555-0199",
            "company_name": "Pat's Cards",
        })

        contact = db_session.get(Contact, seller["contactId"])
        assert contact.source == "buying_desk"
        assert contact.phone == "555-0199"
        assert seller["contact"]["companyName"] == "Pat's Cards"

    def test_reuses_contact_by_email(self, db_session, contact_a):
        seller = seller_service.create_seller(USER_A, {"name": "Different Name", "email": "sam@example.com"})

        assert seller["contactId"] == contact_a.id
        assert db_session.query(Contact).count() == 1

    def test_email_match_is_per_user(self, db_session, contact_a):
        seller = seller_service.create_seller(USER_B, {"name": "Sam", "email": "sam@example.com"})

        assert seller["contactId"] != contact_a.id

    def test_reuses_existing_seller(self, db_session, seller_a):
        seller = seller_service.create_seller(USER_A, {"name": "Sam", "email": "sam@example.com"})

        assert seller["id"] == seller_a.id
        assert db_session.query(Seller).count() == 1

    def test_phone_alias(self, db_session):
        seller = seller_service.create_seller(USER_A, {"name": "Lee", "phone": "555-0123"})

        assert seller["contact"]["phoneNumber"] == "555-0123"

    def test_blank_name(self, db_session):
        with pytest.raises(SellerError):
            seller_service.create_seller(USER_A, {"name": "   "})

    def test_list_scoped_to_owner(self, db_session, seller_a):
        seller_service.create_seller(USER_B, {"name": "Other"})

        sellers = seller_service.list_sellers(USER_A)

        assert sellers == [{
            "seller": {"id": seller_a.id},
            "contact": {
                "id": seller_a.contact_id,
                "name": "Sam Seller",
                "email": "sam@example.com",
                "phoneNumber": "555-0100",
                "companyName": None,
                "notes": None,
            },
        }]


class TestSellerRoutes:

    def test_create(self, client, db_session, headers_a):
        resp = client.post(
            "/api/buying-desk/sellers",
            json={"name": "Pat", "email": "pat@example.com", "phoneNumber": "555-0199"},
            headers=headers_a,
        )

        assert resp.status_code == 201
        assert resp.get_json()["contact"]["email"] == "pat@example.com"

    def test_create_rejects_bad_email(self, client, db_session, headers_a):
        resp = client.post("/api/buying-desk/sellers", json={"name": "Pat", "email": "nope"}, headers=headers_a)

        assert resp.status_code == 400
        assert resp.get_json()["details"]["fieldErrors"]["email"] == ["Invalid email"]

    def test_create_requires_name(self, client, db_session, headers_a):
        resp = client.post("/api/buying-desk/sellers", json={}, headers=headers_a)

        assert resp.status_code == 400

    def test_list(self, client, seller_a, headers_a, headers_b):
        assert len(client.get("/api/buying-desk/sellers", headers=headers_a).get_json()) == 1
        assert client.get("/api/buying-desk/sellers", headers=headers_b).get_json() == []
