"""
Test live payment status, borrower status and defaulter detection
"""
from datetime import date, timedelta
from decimal import Decimal
from lendledger.models import Borrower, PaymentStatus
from lendledger.utils.status import (
    live_status, latest_loan, borrower_status, next_payment_for_loan, walk_missed_payments,
    classify, find_defaulters, loan_health, summarize_portfolio, upcoming_payments,
    sort_payments, payment_summary, BorrowerStatus, LoanHealth
)
from conftest import TODAY, unsaved_loan, unsaved_payment, at


def days(n):
    return TODAY + timedelta(days=n)


# Live payment status

def test_payment_due_today_is_due_soon_not_overdue():
    payment = unsaved_payment(1, 1, TODAY)
    assert live_status(payment, TODAY) == PaymentStatus.DUE_SOON


def test_payment_due_yesterday_is_overdue():
    payment = unsaved_payment(1, 1, days(-1), status=PaymentStatus.UPCOMING)
    assert live_status(payment, TODAY) == PaymentStatus.OVERDUE


def test_stale_stored_status_is_ignored():
    payment = unsaved_payment(1, 1, days(-30), status=PaymentStatus.DUE_SOON)
    assert live_status(payment, TODAY) == PaymentStatus.OVERDUE


def test_collected_payment_stays_collected():
    payment = unsaved_payment(1, 1, days(-30), status=PaymentStatus.COLLECTED)
    assert live_status(payment, TODAY) == PaymentStatus.COLLECTED


def test_due_soon_window_boundary():
    assert live_status(unsaved_payment(1, 1, days(4)), TODAY) == PaymentStatus.DUE_SOON
    assert live_status(unsaved_payment(1, 1, days(5)), TODAY) == PaymentStatus.UPCOMING
    assert live_status(unsaved_payment(1, 1, days(5)), TODAY, window_days=10) == PaymentStatus.DUE_SOON


def test_sort_puts_overdue_first():
    payments = [
        unsaved_payment(1, 1, days(20)),
        unsaved_payment(2, 1, days(-3), status=PaymentStatus.COLLECTED),
        unsaved_payment(3, 1, days(2)),
        unsaved_payment(4, 1, days(-8)),
        unsaved_payment(5, 1, days(-2)),
    ]

    assert [p.id for p in sort_payments(payments, TODAY)] == [4, 5, 3, 1, 2]


# Latest loan and borrower status

def test_latest_loan_prefers_newest_created_at():
    older = unsaved_loan(1, 1, created_at=at(2024, 1, 1))
    newer = unsaved_loan(2, 1, created_at=at(2024, 3, 1))

    assert latest_loan([older, newer], at(2024, 6, 15)).id == 2


def test_loan_without_created_at_wins_tie_break():
    dated = unsaved_loan(1, 1, created_at=at(2024, 6, 1))
    undated = unsaved_loan(2, 1, created_at=None)

    assert latest_loan([dated, undated], at(2024, 6, 15)).id == 2


def test_borrower_without_loans():
    assert borrower_status([], [], TODAY) == BorrowerStatus.NO_LOAN


def test_borrower_with_everything_collected_is_completed():
    loan = unsaved_loan(1, 1, created_at=at(2024, 1, 1))
    payments = [unsaved_payment(1, 1, days(-40), status=PaymentStatus.COLLECTED),
                unsaved_payment(2, 1, days(-10), status=PaymentStatus.COLLECTED)]

    assert borrower_status([loan], payments, TODAY) == BorrowerStatus.COMPLETED


def test_borrower_with_past_due_payment_has_missed():
    loan = unsaved_loan(1, 1, created_at=at(2024, 1, 1))
    payments = [unsaved_payment(1, 1, days(-1)), unsaved_payment(2, 1, days(29))]

    assert borrower_status([loan], payments, TODAY) == BorrowerStatus.MISSED


def test_borrower_with_payment_due_today_is_due_soon():
    loan = unsaved_loan(1, 1, created_at=at(2024, 1, 1))

    assert borrower_status([loan], [unsaved_payment(1, 1, TODAY)], TODAY) == BorrowerStatus.DUE_SOON


def test_borrower_with_distant_payment_is_current():
    loan = unsaved_loan(1, 1, created_at=at(2024, 1, 1))

    assert borrower_status([loan], [unsaved_payment(1, 1, days(20))], TODAY) == BorrowerStatus.CURRENT


def test_borrower_status_only_looks_at_latest_loan():
    old_loan = unsaved_loan(1, 1, created_at=at(2023, 1, 1))
    new_loan = unsaved_loan(2, 1, created_at=at(2024, 5, 1))
    payments = [unsaved_payment(1, 1, days(-60)), unsaved_payment(2, 2, days(20))]

    assert borrower_status([old_loan, new_loan], payments, TODAY) == BorrowerStatus.CURRENT


def test_next_payment_skips_collected_and_past_due():
    payments = [
        unsaved_payment(1, 1, days(-5)),
        unsaved_payment(2, 1, days(3), status=PaymentStatus.COLLECTED),
        unsaved_payment(3, 1, days(30)),
        unsaved_payment(4, 1, days(10)),
    ]

    assert next_payment_for_loan(payments, TODAY).id == 4
    assert next_payment_for_loan([], TODAY) is None


# Defaulter walk

def test_two_consecutive_missed_payments_make_a_defaulter():
    payments = [unsaved_payment(1, 1, days(-10), amount='1000'),
                unsaved_payment(2, 1, days(-5), amount='1500')]

    walk = walk_missed_payments(payments, TODAY)

    assert walk['consecutive_missed'] == 2
    assert walk['is_defaulter'] is True
    assert walk['total_outstanding'] == Decimal('2500')
    assert [m['days_overdue'] for m in walk['missed_payments']] == [10, 5]


def test_collected_payment_resets_the_counter():
    payments = [unsaved_payment(1, 1, days(-10)),
                unsaved_payment(2, 1, days(-5), status=PaymentStatus.COLLECTED, paid_date=days(-4))]

    walk = walk_missed_payments(payments, TODAY)

    assert walk['consecutive_missed'] == 0
    assert walk['is_defaulter'] is False
    assert walk['last_payment_date'] == days(-4)


def test_walk_orders_by_due_date_regardless_of_input_order():
    payments = [unsaved_payment(1, 1, days(-5)),
                unsaved_payment(2, 1, days(-20), status=PaymentStatus.COLLECTED),
                unsaved_payment(3, 1, days(-10))]

    assert walk_missed_payments(payments, TODAY)['consecutive_missed'] == 2


def test_payment_due_today_does_not_count_as_missed():
    payments = [unsaved_payment(1, 1, days(-3)), unsaved_payment(2, 1, TODAY)]

    walk = walk_missed_payments(payments, TODAY)

    assert walk['consecutive_missed'] == 1
    assert walk['is_defaulter'] is False


def test_walk_merges_payments_of_all_loans():
    # One miss on each of two loans still counts as two in a row
    payments = [unsaved_payment(1, 1, days(-10)), unsaved_payment(2, 2, days(-5))]

    assert walk_missed_payments(payments, TODAY)['is_defaulter'] is True


def test_classify_reports_every_piece():
    borrower = Borrower(id=7, name='Ravi', phone='1', address='x')
    loans = [unsaved_loan(1, 7, created_at=at(2024, 1, 1)),
             unsaved_loan(2, 7, created_at=at(2024, 4, 1)),
             unsaved_loan(3, 8, created_at=at(2024, 5, 1))]
    payments = [unsaved_payment(1, 1, days(-10)),
                unsaved_payment(2, 1, days(20)),
                unsaved_payment(3, 2, days(-2)),
                unsaved_payment(4, 3, days(3))]

    result = classify(borrower, loans, payments, TODAY)

    assert result['borrower_status'] == BorrowerStatus.MISSED
    assert result['latest_loan'].id == 2
    assert result['next_payment'].id == 3
    assert result['next_payment_by_loan'][1].id == 2
    assert result['next_payment_by_loan'][2] is None
    assert 3 not in result['next_payment_by_loan']
    assert result['defaulter']['consecutive_missed'] == 2


def test_find_defaulters_separates_defaulters_from_missed_payments():
    good = Borrower(id=1, name='Meena', phone='1', address='a')
    bad = Borrower(id=2, name='Kiran', phone='2', address='b')
    loans = [unsaved_loan(10, 1), unsaved_loan(20, 2)]
    payments = [
        unsaved_payment(1, 10, days(-3), amount='500'),
        unsaved_payment(2, 10, days(27), amount='500'),
        unsaved_payment(3, 20, days(-40), amount='800'),
        unsaved_payment(4, 20, days(-10), amount='800'),
    ]

    report = find_defaulters([good, bad], loans, payments, TODAY)

    assert [d['borrower_id'] for d in report['defaulters']] == [2]
    assert report['defaulters'][0]['total_outstanding'] == 1600.0
    assert len(report['defaulters'][0]['missed_payments']) == 2
    assert [m['payment_id'] for m in report['missed_payments']] == [1]
    assert report['missed_payments'][0]['days_overdue'] == 3


def test_find_defaulters_skips_orphaned_payments():
    borrower = Borrower(id=1, name='Meena', phone='1', address='a')
    loans = [unsaved_loan(10, 1), unsaved_loan(30, 99)]
    payments = [unsaved_payment(1, 10, days(-3)),
                unsaved_payment(2, 404, days(-3)),
                unsaved_payment(3, 30, days(-3))]

    report = find_defaulters([borrower], loans, payments, TODAY)

    assert [m['payment_id'] for m in report['missed_payments']] == [1]
    assert report['defaulters'] == []


# Dashboard aggregates

def test_loan_health_levels():
    assert loan_health([unsaved_payment(1, 1, days(5))], TODAY) == LoanHealth.ACTIVE
    assert loan_health([unsaved_payment(1, 1, days(-5))], TODAY) == LoanHealth.OVERDUE
    assert loan_health([unsaved_payment(1, 1, days(-5)),
                        unsaved_payment(2, 1, days(-35))], TODAY) == LoanHealth.DEFAULTER


def test_summarize_portfolio():
    loans = [unsaved_loan(1, 1, amount=Decimal('12000')), unsaved_loan(2, 1, amount=Decimal('3000.50'))]
    payments = [unsaved_payment(1, 1, days(-5)),
                unsaved_payment(2, 1, days(25)),
                unsaved_payment(3, 2, days(-5), status=PaymentStatus.COLLECTED)]

    stats = summarize_portfolio(loans, payments, TODAY)

    assert stats == {'total_loans': 2, 'active_loans': 1, 'overdue_payments': 1, 'total_amount': 15000.5}


def test_upcoming_payments_window_and_limit():
    payments = [
        unsaved_payment(1, 1, days(-1)),
        unsaved_payment(2, 1, days(10)),
        unsaved_payment(3, 1, TODAY),
        unsaved_payment(4, 1, date(2024, 7, 15)),
        unsaved_payment(5, 1, days(3), status=PaymentStatus.COLLECTED),
        unsaved_payment(6, 1, days(20)),
    ]

    assert [p.id for p in upcoming_payments(payments, TODAY)] == [3, 2, 6]
    assert [p.id for p in upcoming_payments(payments, TODAY, limit=2)] == [3, 2]


def test_payment_summary_counts_partial_balance():
    payments = [
        unsaved_payment(1, 1, days(-30), amount='1000', status=PaymentStatus.COLLECTED,
                        paid_amount=Decimal('1000'), due_amount=Decimal('0')),
        unsaved_payment(2, 1, days(-2), amount='1000'),
        unsaved_payment(3, 1, days(28), amount='1000'),
    ]

    summary = payment_summary(payments, TODAY)

    assert summary['collected_payments'] == 1
    assert summary['overdue_payments'] == 1
    assert summary['total_paid'] == Decimal('1000')
    assert summary['outstanding'] == Decimal('2000')
