from datetime import date, datetime

from stallpos.services.reporting_service import (
    dashboard_summary,
    filter_sales_by_date,
    profit_loss_report,
    sales_summary,
)
from stallpos.snapshots import CostEntrySnapshot, ItemSnapshot, OrderItemSnapshot, SaleSnapshot


X = ItemSnapshot(id=1, name="Orange Juice", price_cents=1000)
Y = ItemSnapshot(id=2, name="Lime Juice", price_cents=800)
Z = ItemSnapshot(id=3, name="Samosa", price_cents=1500, stock_type="fixed", stock_qty=4)


def _sale(sale_id, when, lines, payment_method="cash", customer=None):
    items = tuple(
        OrderItemSnapshot(item_id=item.id, item_name=item.name, qty=qty, price_cents=item.price_cents,
                          status=status)
        for item, qty, status in lines
    )
    return SaleSnapshot(
        id=sale_id,
        occurred_at=when,
        token_number=sale_id,
        items=items,
        total_amount_cents=sum(line.line_total_cents for line in items),
        payment_method=payment_method,
        credit_customer_name=customer,
    )


def test_combined_entry_becomes_one_group_row():
    sales = [_sale(1, datetime(2024, 5, 1, 12), [(X, 5, "done"), (Y, 3, "done")])]
    entries = [CostEntrySnapshot(id=7, cost_type="combined", total_cost_cents=10000, item_ids=(1, 2),
                                 common_name="Juice")]

    report = profit_loss_report([X, Y], sales, entries)

    assert len(report.rows) == 1
    row = report.rows[0]
    assert row.id == "group-7"
    assert row.name == "Juice"
    assert row.qty_sold == 8
    assert row.revenue_cents == 7400
    assert row.assigned_cost_cents == 10000
    assert row.profit_cents == -2600
    assert row.is_grouped
    assert row.item_names == ("Orange Juice", "Lime Juice")


def test_combined_entries_with_same_name_are_merged():
    entries = [
        CostEntrySnapshot(id=1, cost_type="combined", total_cost_cents=300, item_ids=(1, 2), common_name="Juice"),
        CostEntrySnapshot(id=2, cost_type="combined", total_cost_cents=200, item_ids=(2, 3), common_name="Juice"),
    ]
    report = profit_loss_report([X, Y, Z], [], entries)

    assert len(report.rows) == 1
    assert report.rows[0].assigned_cost_cents == 500
    assert report.rows[0].id == "group-1"
    assert report.rows[0].item_names == ("Orange Juice", "Lime Juice", "Samosa")


def test_individual_costs_add_up_and_rows_sort_by_profit():
    sales = [_sale(1, datetime(2024, 5, 1, 12), [(X, 2, "done"), (Z, 4, "done")])]
    entries = [
        CostEntrySnapshot(id=1, cost_type="individual", total_cost_cents=500, item_ids=(1,)),
        CostEntrySnapshot(id=2, cost_type="individual", total_cost_cents=700, item_ids=(1,)),
        CostEntrySnapshot(id=3, cost_type="individual", total_cost_cents=1000, item_ids=(3,)),
    ]

    report = profit_loss_report([X, Y, Z], sales, entries)

    assert [row.id for row in report.rows] == ["3", "1"]
    by_id = {row.id: row for row in report.rows}
    assert by_id["1"].assigned_cost_cents == 1200
    assert by_id["1"].profit_cents == 800
    assert by_id["3"].profit_cents == 5000


def test_item_without_sales_or_cost_is_omitted():
    report = profit_loss_report([X, Y], [_sale(1, datetime(2024, 5, 1), [(X, 1, "done")])], [])
    assert [row.id for row in report.rows] == ["1"]


def test_general_cost_row_has_no_margin():
    entries = [CostEntrySnapshot(id=4, cost_type="general", total_cost_cents=3000, common_name="Rent")]

    report = profit_loss_report([X], [], entries)

    row = report.rows[0]
    assert row.id == "general-4"
    assert row.is_general
    assert row.margin_pct is None
    assert row.profit_cents == -3000
    assert row.to_dict()["margin_pct"] is None


def test_margin_when_cost_but_no_revenue():
    entries = [CostEntrySnapshot(id=1, cost_type="individual", total_cost_cents=100, item_ids=(2,))]
    report = profit_loss_report([X, Y], [], entries)
    assert report.rows[0].margin_pct == -100.0


def test_totals_match_rows():
    sales = [
        _sale(1, datetime(2024, 5, 1, 9), [(X, 5, "done"), (Y, 3, "pending")]),
        _sale(2, datetime(2024, 5, 1, 10), [(Z, 2, "done")]),
    ]
    entries = [
        CostEntrySnapshot(id=1, cost_type="combined", total_cost_cents=10000, item_ids=(1, 2), common_name="Juice"),
        CostEntrySnapshot(id=2, cost_type="individual", total_cost_cents=900, item_ids=(3,)),
        CostEntrySnapshot(id=3, cost_type="general", total_cost_cents=5000, common_name="Gas"),
    ]

    report = profit_loss_report([X, Y, Z], sales, entries)

    assert report.total_revenue_cents == sum(row.revenue_cents for row in report.rows) == 10400
    assert report.total_cost_assigned_cents == sum(row.assigned_cost_cents for row in report.rows) == 15900
    assert report.total_profit_cents == -5500


def test_date_range_filters_sales():
    sales = [
        _sale(1, datetime(2024, 4, 30, 23, 0), [(X, 1, "done")]),
        _sale(2, datetime(2024, 5, 1, 8, 0), [(X, 2, "done")]),
    ]

    report = profit_loss_report([X], sales, [], date_from=date(2024, 5, 1), date_to=date(2024, 5, 1))

    assert report.rows[0].qty_sold == 2
    assert report.total_revenue_cents == 2000


def test_filter_uses_stall_timezone():
    # 20:00 UTC on Apr 30 is already May 1 in Kolkata
    sales = [_sale(1, datetime(2024, 4, 30, 20, 0), [(X, 1, "done")])]
    assert filter_sales_by_date(sales, date(2024, 5, 1), None, "Asia/Kolkata") == sales
    assert filter_sales_by_date(sales, date(2024, 5, 1), None, "UTC") == []


def test_sales_summary_breakdown_and_credit():
    sales = [
        _sale(1, datetime(2024, 5, 1, 9), [(X, 1, "done")], "cash"),
        _sale(2, datetime(2024, 5, 1, 9), [(Y, 2, "done")], "credit", "Ravi"),
        _sale(3, datetime(2024, 5, 1, 9), [(X, 1, "done")], "credit", "Ravi"),
    ]

    summary = sales_summary(sales)

    assert summary["order_count"] == 3
    assert summary["revenue_cents"] == 3600
    assert summary["payment_breakdown_cents"] == {"cash": 1000, "upi": 0, "credit": 2600}
    assert summary["credit_by_customer"] == [
        {"customer_name": "Ravi", "amount_cents": 2600, "sale_ids": [2, 3]},
    ]
    assert summary["items_sold"][0]["item_id"] == X.id
    assert summary["items_sold"][0]["qty"] == 2


def test_dashboard_summary():
    today = date(2024, 5, 2)
    sales = [
        _sale(1, datetime(2024, 5, 1, 9), [(X, 1, "pending")]),
        _sale(2, datetime(2024, 5, 2, 9), [(Y, 1, "done")]),
    ]

    board = dashboard_summary([X, Y, Z], sales, today, "UTC", low_stock_threshold=5)

    assert board["today_order_count"] == 1
    assert board["today_revenue_cents"] == 800
    assert board["pending_orders"] == 1
    assert board["completed_today"] == 1
    assert board["low_stock_items"] == [{"id": 3, "name": "Samosa", "stock_qty": 4}]


def test_individual_cost_of_combined_member_lands_in_group_row():
    entries = [
        CostEntrySnapshot(id=1, cost_type="individual", total_cost_cents=300, item_ids=(1,)),
        CostEntrySnapshot(id=2, cost_type="combined", total_cost_cents=100, item_ids=(1, 2), common_name="Juice"),
    ]
    sales = [_sale(1, datetime(2024, 5, 1, 12), [(X, 1, "done")])]

    report = profit_loss_report([X, Y], sales, entries)

    assert [(row.name, row.assigned_cost_cents) for row in report.rows] == [("Juice", 400)]
    assert report.total_cost_assigned_cents == 400


def test_member_of_two_groups_counts_its_individual_cost_once():
    entries = [
        CostEntrySnapshot(id=1, cost_type="individual", total_cost_cents=300, item_ids=(2,)),
        CostEntrySnapshot(id=2, cost_type="combined", total_cost_cents=100, item_ids=(1, 2), common_name="Juice"),
        CostEntrySnapshot(id=3, cost_type="combined", total_cost_cents=50, item_ids=(2, 3), common_name="Snacks"),
    ]

    report = profit_loss_report([X, Y, Z], [], entries)

    assert report.total_cost_assigned_cents == 450
