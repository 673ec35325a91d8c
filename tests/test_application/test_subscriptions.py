"""Tests for Subscriptions use cases — create, list, update, delete."""
import pytest
from datetime import date
from decimal import Decimal

from app.infrastructure.db.models import SubscriptionModel
from app.application.subscriptions import (
    CreateSubscriptionUseCase, GetSubscriptionUseCase, ListSubscriptions,
    UpdateSubscriptionUseCase, DeleteSubscriptionUseCase,
    SubscriptionValidationError, SubscriptionNotFoundError,
)


@pytest.fixture
def netflix(db_session):
    sub_id = CreateSubscriptionUseCase(db_session).execute(
        name="Netflix",
        cost="649",
        first_payment_date="2024-07-12",
        category="entertainment",
        is_shared=True,
        shared_with=4,
    )
    return db_session.get(SubscriptionModel, sub_id)


# ======================================================================
# 1. Create
# ======================================================================

class TestCreateSubscription:
    def test_create_with_defaults(self, db_session):
        sub_id = CreateSubscriptionUseCase(db_session).execute(name="Gym", cost=1500)
        sub = db_session.get(SubscriptionModel, sub_id)
        assert sub.name == "Gym"
        assert sub.cost == Decimal("1500")
        assert sub.billing_cycle == "monthly"
        assert sub.category == "other"
        assert sub.status == "active"
        assert sub.is_shared is False
        assert sub.shared_with == 1
        assert sub.first_payment_date is None

    def test_create_full(self, netflix):
        assert netflix.category == "entertainment"
        assert netflix.first_payment_date == date(2024, 7, 12)
        assert netflix.shared_with == 4

    def test_cost_with_decimal_comma(self, db_session):
        sub_id = CreateSubscriptionUseCase(db_session).execute(name="iCloud", cost="75,50")
        assert db_session.get(SubscriptionModel, sub_id).cost == Decimal("75.50")

    def test_empty_name_fails(self, db_session):
        with pytest.raises(SubscriptionValidationError, match="Name"):
            CreateSubscriptionUseCase(db_session).execute(name="  ", cost="10")

    def test_missing_cost_fails(self, db_session):
        with pytest.raises(SubscriptionValidationError, match="Cost"):
            CreateSubscriptionUseCase(db_session).execute(name="X", cost=None)

    def test_negative_cost_fails(self, db_session):
        with pytest.raises(SubscriptionValidationError, match="negative"):
            CreateSubscriptionUseCase(db_session).execute(name="X", cost="-1")

    def test_non_numeric_cost_fails(self, db_session):
        with pytest.raises(SubscriptionValidationError, match="numeric"):
            CreateSubscriptionUseCase(db_session).execute(name="X", cost="ten")

    def test_unknown_cycle_fails(self, db_session):
        with pytest.raises(SubscriptionValidationError, match="billing_cycle"):
            CreateSubscriptionUseCase(db_session).execute(name="X", cost="1", billing_cycle="weekly")

    def test_unknown_category_fails(self, db_session):
        with pytest.raises(SubscriptionValidationError, match="category"):
            CreateSubscriptionUseCase(db_session).execute(name="X", cost="1", category="gaming")

    def test_shared_with_out_of_range_fails(self, db_session):
        with pytest.raises(SubscriptionValidationError, match="shared_with"):
            CreateSubscriptionUseCase(db_session).execute(name="X", cost="1", shared_with=11)

    def test_bad_date_fails(self, db_session):
        with pytest.raises(SubscriptionValidationError, match="first_payment_date"):
            CreateSubscriptionUseCase(db_session).execute(name="X", cost="1", first_payment_date="31/01/2025")


# ======================================================================
# 2. Read
# ======================================================================

class TestReadSubscriptions:
    def test_list_newest_first(self, db_session):
        uc = CreateSubscriptionUseCase(db_session)
        first = uc.execute(name="First", cost="1")
        second = uc.execute(name="Second", cost="2")
        ids = [s.id for s in ListSubscriptions(db_session).execute()]
        assert ids == [second, first]

    def test_as_values(self, db_session, netflix):
        values = ListSubscriptions(db_session).as_values()
        assert len(values) == 1
        assert values[0].id == netflix.id
        assert values[0].cost == Decimal("649")
        assert values[0].first_payment_date == date(2024, 7, 12)

    def test_list_empty(self, db_session):
        assert ListSubscriptions(db_session).execute() == []

    def test_get_missing(self, db_session):
        with pytest.raises(SubscriptionNotFoundError):
            GetSubscriptionUseCase(db_session).execute(999)


# ======================================================================
# 3. Update
# ======================================================================

class TestUpdateSubscription:
    def test_partial_update(self, db_session, netflix):
        UpdateSubscriptionUseCase(db_session).execute(netflix.id, cost="799", status="canceled")
        sub = db_session.get(SubscriptionModel, netflix.id)
        assert sub.cost == Decimal("799")
        assert sub.status == "canceled"
        assert sub.name == "Netflix"
        assert sub.shared_with == 4
        assert sub.updated_at is not None

    def test_clear_first_payment_date(self, db_session, netflix):
        UpdateSubscriptionUseCase(db_session).execute(netflix.id, first_payment_date=None)
        assert db_session.get(SubscriptionModel, netflix.id).first_payment_date is None

    def test_none_leaves_other_fields(self, db_session, netflix):
        UpdateSubscriptionUseCase(db_session).execute(netflix.id, name=None, cost=None)
        sub = db_session.get(SubscriptionModel, netflix.id)
        assert sub.name == "Netflix"
        assert sub.cost == Decimal("649")

    def test_update_validates(self, db_session, netflix):
        with pytest.raises(SubscriptionValidationError):
            UpdateSubscriptionUseCase(db_session).execute(netflix.id, shared_with=0)

    def test_unknown_field(self, db_session, netflix):
        with pytest.raises(SubscriptionValidationError, match="Unknown fields"):
            UpdateSubscriptionUseCase(db_session).execute(netflix.id, color="red")

    def test_update_missing(self, db_session):
        with pytest.raises(SubscriptionNotFoundError):
            UpdateSubscriptionUseCase(db_session).execute(42, name="X")


# ======================================================================
# 4. Delete
# ======================================================================

class TestDeleteSubscription:
    def test_delete(self, db_session, netflix):
        sub_id = netflix.id
        DeleteSubscriptionUseCase(db_session).execute(sub_id)
        assert db_session.get(SubscriptionModel, sub_id) is None

    def test_delete_missing(self, db_session):
        with pytest.raises(SubscriptionNotFoundError):
            DeleteSubscriptionUseCase(db_session).execute(7)
