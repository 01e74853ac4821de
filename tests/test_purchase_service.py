from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from uuid import uuid4

from sqlalchemy.exc import OperationalError

from parcelas.exceptions import (
    InstallmentNotFoundError,
    PurchaseNotFoundError,
    StoreError,
    ValidationError,
)
from parcelas.schemas.purchase import PurchaseCreate, PurchaseStatus, PurchaseUpdate
from parcelas.services import purchases
from parcelas.stores import InstallmentStore

from tests.helpers import DatabaseTestCase, tv_purchase


class PurchaseServiceTests(DatabaseTestCase):
    async def _installments(self, purchase_id):
        return await purchases.list_installments(self.session, purchase_id)

    async def assertPaidCountConsistent(self, purchase) -> None:
        installments = await self._installments(purchase.id)
        self.assertEqual(purchase.paid_installments, sum(1 for i in installments if i.paid))

    async def test_create_generates_monthly_schedule(self) -> None:
        purchase = await purchases.create_purchase(self.session, tv_purchase())

        self.assertEqual(purchase.installment_value, Decimal("100.00"))
        self.assertEqual(purchase.paid_installments, 0)
        installments = await self._installments(purchase.id)
        self.assertEqual([i.number for i in installments], list(range(1, 13)))
        self.assertEqual(installments[0].due_date, date(2024, 3, 15))
        self.assertEqual(installments[9].due_date, date(2024, 12, 15))
        self.assertEqual(installments[-1].due_date, date(2025, 2, 15))
        self.assertTrue(all(not i.paid for i in installments))
        self.assertTrue(all(i.value == Decimal("100.00") for i in installments))

    async def test_mark_next_three_times_pays_first_three(self) -> None:
        purchase = await purchases.create_purchase(self.session, tv_purchase())

        for _ in range(3):
            purchase = await purchases.mark_next_installment_paid(self.session, purchase.id)

        self.assertEqual(purchase.paid_installments, 3)
        installments = await self._installments(purchase.id)
        self.assertEqual([i.number for i in installments if i.paid], [1, 2, 3])

    async def test_create_uses_supplied_installment_value_and_seed(self) -> None:
        payload = tv_purchase(installment_value=Decimal("105.50"), paid_installments=4)

        purchase = await purchases.create_purchase(self.session, payload)

        self.assertEqual(purchase.installment_value, Decimal("105.50"))
        self.assertEqual(purchase.paid_installments, 4)
        await self.assertPaidCountConsistent(purchase)

    async def test_create_rejects_non_positive_value(self) -> None:
        payload = PurchaseCreate.model_construct(
            name="Broken",
            total_value=Decimal("0"),
            total_installments=3,
            purchase_date=date(2024, 1, 1),
            installment_value=None,
            paid_installments=0,
        )

        with self.assertRaisesRegex(ValidationError, "greater than zero"):
            await purchases.create_purchase(self.session, payload)

        self.assertEqual(await purchases.list_purchases(self.session), [])

    async def test_create_rejects_zero_installments(self) -> None:
        payload = PurchaseCreate.model_construct(
            name="Broken",
            total_value=Decimal("10"),
            total_installments=0,
            purchase_date=date(2024, 1, 1),
            installment_value=None,
            paid_installments=0,
        )

        with self.assertRaises(ValidationError):
            await purchases.create_purchase(self.session, payload)

    async def test_failed_installment_batch_leaves_no_orphan_purchase(self) -> None:
        failure = OperationalError("INSERT INTO installments", {}, Exception("connection lost"))
        with patch.object(InstallmentStore, "insert_batch", new=AsyncMock(side_effect=failure)):
            with self.assertRaises(StoreError):
                await purchases.create_purchase(self.session, tv_purchase())

        self.assertEqual(await purchases.list_purchases(self.session), [])

    async def test_mark_next_is_noop_when_fully_paid(self) -> None:
        purchase = await purchases.create_purchase(
            self.session, tv_purchase(total_installments=2, paid_installments=2)
        )
        before = await self._installments(purchase.id)
        flags_before = [i.paid for i in before]

        result = await purchases.mark_next_installment_paid(self.session, purchase.id)

        self.assertEqual(result.paid_installments, 2)
        self.assertEqual(result.total_installments, 2)
        after = await self._installments(purchase.id)
        self.assertEqual([i.paid for i in after], flags_before)

    async def test_unmarking_installment_recounts(self) -> None:
        purchase = await purchases.create_purchase(self.session, tv_purchase(paid_installments=3))

        purchase = await purchases.mark_installment_paid(self.session, purchase.id, 2, paid=False)

        self.assertEqual(purchase.paid_installments, 2)
        installments = await self._installments(purchase.id)
        self.assertEqual([i.number for i in installments if i.paid], [1, 3])

    async def test_recount_heals_drifted_counter(self) -> None:
        purchase = await purchases.create_purchase(self.session, tv_purchase(paid_installments=2))
        purchase.paid_installments = 0
        await self.session.commit()

        purchase = await purchases.mark_next_installment_paid(self.session, purchase.id)

        self.assertEqual(purchase.paid_installments, 2)
        await self.assertPaidCountConsistent(purchase)

    async def test_mark_unknown_installment_raises(self) -> None:
        purchase = await purchases.create_purchase(self.session, tv_purchase(total_installments=3))
        purchase_id = purchase.id

        with self.assertRaises(InstallmentNotFoundError):
            await purchases.mark_installment_paid(self.session, purchase_id, 4)

        purchase = await purchases.get_purchase(self.session, purchase_id)
        self.assertEqual(purchase.paid_installments, 0)
        await self.assertPaidCountConsistent(purchase)

    async def test_mark_on_unknown_purchase_raises(self) -> None:
        with self.assertRaises(PurchaseNotFoundError):
            await purchases.mark_next_installment_paid(self.session, uuid4())

    async def test_edit_shrinking_schedule_keeps_paid_seed(self) -> None:
        purchase = await purchases.create_purchase(self.session, tv_purchase(paid_installments=5))

        purchase = await purchases.update_purchase(
            self.session, purchase.id, PurchaseUpdate(total_installments=6)
        )

        self.assertEqual(purchase.total_installments, 6)
        self.assertEqual(purchase.installment_value, Decimal("200.00"))
        self.assertEqual(purchase.paid_installments, 5)
        installments = await self._installments(purchase.id)
        self.assertEqual([i.number for i in installments], [1, 2, 3, 4, 5, 6])
        self.assertEqual([i.paid for i in installments], [True] * 5 + [False])
        self.assertTrue(all(i.value == Decimal("200.00") for i in installments))

    async def test_edit_clamps_seed_to_new_total(self) -> None:
        purchase = await purchases.create_purchase(self.session, tv_purchase(paid_installments=5))

        purchase = await purchases.update_purchase(
            self.session, purchase.id, PurchaseUpdate(total_installments=3)
        )

        self.assertEqual(purchase.paid_installments, 3)
        await self.assertPaidCountConsistent(purchase)

    async def test_edit_date_regenerates_with_leading_paid_installments(self) -> None:
        purchase = await purchases.create_purchase(self.session, tv_purchase(paid_installments=3))
        await purchases.mark_installment_paid(self.session, purchase.id, 2, paid=False)

        purchase = await purchases.update_purchase(
            self.session, purchase.id, PurchaseUpdate(purchase_date=date(2024, 1, 31))
        )

        installments = await self._installments(purchase.id)
        self.assertEqual([i.number for i in installments if i.paid], [1, 2])
        self.assertEqual(installments[1].due_date, date(2024, 2, 29))
        self.assertEqual(purchase.paid_installments, 2)

    async def test_edit_name_keeps_existing_installments(self) -> None:
        purchase = await purchases.create_purchase(self.session, tv_purchase())
        ids_before = [i.id for i in await self._installments(purchase.id)]

        purchase = await purchases.update_purchase(
            self.session, purchase.id, PurchaseUpdate(name="Smart TV 55")
        )

        self.assertEqual(purchase.name, "Smart TV 55")
        self.assertEqual([i.id for i in await self._installments(purchase.id)], ids_before)

    async def test_edit_unknown_purchase_raises(self) -> None:
        with self.assertRaises(PurchaseNotFoundError):
            await purchases.update_purchase(self.session, uuid4(), PurchaseUpdate(name="Ghost"))

    async def test_delete_removes_purchase_and_installments(self) -> None:
        purchase = await purchases.create_purchase(self.session, tv_purchase())
        purchase_id = purchase.id

        await purchases.delete_purchase(self.session, purchase_id)

        self.assertIsNone(await purchases.get_purchase(self.session, purchase_id))
        self.assertEqual(await InstallmentStore(self.session).list_for_purchase(purchase_id), [])

    async def test_deleting_missing_purchase_is_a_noop(self) -> None:
        purchase = await purchases.create_purchase(self.session, tv_purchase())
        purchase_id = purchase.id
        await purchases.delete_purchase(self.session, purchase_id)

        await purchases.delete_purchase(self.session, purchase_id)
        await purchases.delete_purchase(self.session, uuid4())

        self.assertEqual(await purchases.list_purchases(self.session), [])

    async def test_list_orders_by_purchase_date_and_filters_status(self) -> None:
        older = await purchases.create_purchase(
            self.session, tv_purchase(name="Geladeira", purchase_date=date(2023, 8, 20))
        )
        newer = await purchases.create_purchase(
            self.session,
            tv_purchase(
                name="iPhone", purchase_date=date(2023, 11, 5), total_installments=1, paid_installments=1
            ),
        )

        everything = await purchases.list_purchases(self.session)
        pending = await purchases.list_purchases(self.session, status=PurchaseStatus.PENDING)
        completed = await purchases.list_purchases(self.session, status=PurchaseStatus.COMPLETED)

        self.assertEqual([p.id for p in everything], [newer.id, older.id])
        self.assertEqual([p.id for p in pending], [older.id])
        self.assertEqual([p.id for p in completed], [newer.id])

    async def test_monthly_total_sums_unpaid_installments_due_in_month(self) -> None:
        tv = await purchases.create_purchase(self.session, tv_purchase())
        await purchases.create_purchase(
            self.session,
            tv_purchase(name="Sofa", total_value=Decimal("900"), total_installments=3,
                        purchase_date=date(2024, 4, 30)),
        )
        await purchases.mark_next_installment_paid(self.session, tv.id)

        march = await purchases.monthly_total(self.session, 2024, 3)
        april = await purchases.monthly_total(self.session, 2024, 4)

        self.assertEqual(march.total, Decimal("0.00"))
        self.assertEqual(march.installment_count, 0)
        self.assertEqual(april.total, Decimal("400.00"))
        self.assertEqual(april.installment_count, 2)
        self.assertEqual(april.formatted_total, "R$ 400,00")
        self.assertEqual(april.label, "abril de 2024")

    async def test_monthly_total_rejects_invalid_month(self) -> None:
        with self.assertRaises(ValidationError):
            await purchases.monthly_total(self.session, 2024, 13)

    async def test_monthly_total_rejects_years_outside_calendar_range(self) -> None:
        for year, month in ((0, 1), (9999, 12), (10000, 1)):
            with self.assertRaises(ValidationError):
                await purchases.monthly_total(self.session, year, month)

    async def test_monthly_total_accepts_first_supported_year(self) -> None:
        summary = await purchases.monthly_total(self.session, 1, 1)

        self.assertEqual(summary.total, Decimal("0.00"))

    async def test_edit_with_invalid_count_is_rejected_before_reading(self) -> None:
        payload = PurchaseUpdate.model_construct(total_installments=0)
        with patch.object(purchases.PurchaseStore, "get", new=AsyncMock()) as get_mock:
            with self.assertRaises(ValidationError):
                await purchases.update_purchase(self.session, uuid4(), payload)

        get_mock.assert_not_awaited()
