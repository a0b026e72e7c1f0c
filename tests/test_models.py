"""Tests de los modelos y su construcción desde filas de Supabase."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from acematch.models import (
    BudgetType,
    InvestorPreferenceProfile,
    ListingStatus,
    NotificationRecord,
    PropertyListing,
)


class TestInvestorFromDbRow:
    """Tests de InvestorPreferenceProfile.from_db_row."""

    @pytest.fixture
    def row(self) -> dict:
        return {
            "investor_id": "inv-1",
            "is_active": True,
            "operator_type": "sa_operator",
            "updated_at": "2024-05-30T10:00:00+00:00",
            "preference_data": {
                "budget": {"min": 1000, "max": 1500, "type": "monthly"},
                "bedrooms": {"min": 2, "max": 3},
                "property_types": ["Apartment", " House ", ""],
                "property_licences": ["hmo"],
                "locations": [
                    {"region": "London", "city": "East London", "localAuthorities": ["Hackney", "Tower Hamlets"]},
                    {"region": "North West"},
                    {"region": "London", "city": "east london"},
                ],
            },
            "user_profiles": {
                "id": "inv-1",
                "full_name": "Jane Investor",
                "email": "jane@example.com",
                "notification_enabled": True,
            },
        }

    def test_parses_preferences(self, row) -> None:
        profile = InvestorPreferenceProfile.from_db_row(row)

        assert profile.investor_id == "inv-1"
        assert profile.budget.min == 1000
        assert profile.budget.max == 1500
        assert profile.budget.type == BudgetType.MONTHLY
        assert profile.bedrooms.min == 2
        assert profile.property_types == ["Apartment", "House"]
        assert profile.property_licences == ["hmo"]
        assert profile.full_name == "Jane Investor"
        assert profile.email == "jane@example.com"
        assert profile.updated_at == datetime(2024, 5, 30, 10, 0, tzinfo=timezone.utc)

    def test_flattens_locations(self, row) -> None:
        profile = InvestorPreferenceProfile.from_db_row(row)

        assert profile.locations == ["East London", "Hackney", "Tower Hamlets", "North West"]

    def test_notifications_flag_from_profile(self, row) -> None:
        row["user_profiles"]["notification_enabled"] = False

        assert not InvestorPreferenceProfile.from_db_row(row).notifications_enabled

    def test_missing_preferences_mean_no_preference(self) -> None:
        profile = InvestorPreferenceProfile.from_db_row(
            {"investor_id": "inv-2", "preference_data": {"budget": {}, "bedrooms": None}}
        )

        assert profile.budget is None
        assert profile.bedrooms is None
        assert profile.property_types == []
        assert profile.locations == []
        assert profile.notifications_enabled

    def test_open_ended_budget(self) -> None:
        profile = InvestorPreferenceProfile.from_db_row(
            {"investor_id": "inv-3", "preference_data": {"budget": {"min": 500}}}
        )

        assert profile.budget.min == 500
        assert profile.budget.max is None

    def test_missing_id_is_invalid(self) -> None:
        with pytest.raises(ValidationError):
            InvestorPreferenceProfile.from_db_row({"preference_data": {}})


class TestMaterialChange:
    """Tests de is_material_change."""

    def test_budget_change_is_material(self, make_investor) -> None:
        assert make_investor(budget={"min": 900, "max": 1500}).is_material_change(make_investor())

    def test_location_change_is_material(self, make_investor) -> None:
        assert make_investor(locations=["Leeds"]).is_material_change(make_investor())

    def test_licence_change_is_material(self, make_investor) -> None:
        assert make_investor(property_licences=["hmo"]).is_material_change(make_investor())

    def test_case_and_order_are_not_material(self, make_investor) -> None:
        current = make_investor(property_types=["house", "Apartment"])
        previous = make_investor(property_types=["Apartment", "House"])
        assert not current.is_material_change(previous)

    def test_contact_and_flags_are_not_material(self, make_investor) -> None:
        current = make_investor(email="new@example.com", notifications_enabled=False, operator_type="x")
        assert not current.is_material_change(make_investor())


class TestPropertyFromDbRow:
    """Tests de PropertyListing.from_db_row."""

    @pytest.fixture
    def row(self) -> dict:
        return {
            "id": "prop-1",
            "monthly_rent": 125000,
            "bedrooms": "3",
            "bathrooms": 2,
            "property_type": "House",
            "local_authority": "Hackney",
            "city": "London",
            "address": "221 baker street, Marylebone",
            "postcode": "nw1 6xe",
            "property_licence": "hmo",
            "status": "available",
            "photos": ["a.jpg", "b.jpg"],
            "availability": "immediate",
            "property_condition": "excellent",
        }

    def test_parses_row(self, row) -> None:
        listing = PropertyListing.from_db_row(row)

        assert listing.price == 1250
        assert listing.bedrooms == 3
        assert listing.location == "Hackney"
        assert listing.licence == "hmo"
        assert listing.status == ListingStatus.AVAILABLE
        assert listing.condition == "excellent"
        assert listing.is_available

    def test_explicit_price_wins(self, row) -> None:
        row["price"] = 999

        assert PropertyListing.from_db_row(row).price == 999

    def test_legacy_active_status(self, row) -> None:
        row["status"] = "active"

        assert PropertyListing.from_db_row(row).status == ListingStatus.AVAILABLE

    def test_licence_none_string(self, row) -> None:
        row["property_licence"] = "none"

        assert PropertyListing.from_db_row(row).licence is None

    def test_location_falls_back_to_city(self, row) -> None:
        del row["local_authority"]

        assert PropertyListing.from_db_row(row).location == "London"

    def test_unknown_status_is_invalid(self, row) -> None:
        row["status"] = "sold"

        with pytest.raises(ValidationError):
            PropertyListing.from_db_row(row)

    def test_missing_id(self, row) -> None:
        del row["id"]

        with pytest.raises(KeyError):
            PropertyListing.from_db_row(row)

    def test_display_title(self, row) -> None:
        listing = PropertyListing.from_db_row(row)

        assert listing.display_title() == "Baker Street, London, NW1"

    @pytest.mark.parametrize("status", ["draft", "pending", "rented", "archived"])
    def test_not_available(self, row, status) -> None:
        row["status"] = status

        assert not PropertyListing.from_db_row(row).is_available


class TestNotificationRecord:
    """Tests de NotificationRecord."""

    def test_to_db_dict(self) -> None:
        record = NotificationRecord(
            investor_id="inv-1",
            property_id="prop-1",
            sent_at=datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
            score_at_send=88,
        )

        assert record.to_db_dict() == {
            "investor_id": "inv-1",
            "property_id": "prop-1",
            "sent_at": "2024-06-01T12:00:00+00:00",
            "score_at_send": 88,
        }

    def test_score_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            NotificationRecord(
                investor_id="inv-1",
                property_id="prop-1",
                sent_at=datetime(2024, 6, 1, tzinfo=timezone.utc),
                score_at_send=101,
            )
