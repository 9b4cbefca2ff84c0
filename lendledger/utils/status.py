"""Payment and borrower status classification

Every function here works on objects already loaded from the database
and takes ``today`` explicitly; nothing reads the clock.
"""
import logging
from datetime import datetime, time, timedelta
from decimal import Decimal
from dateutil.relativedelta import relativedelta
from lendledger.models import PaymentStatus, money_float, iso

logger = logging.getLogger(__name__)

DUE_SOON_WINDOW_DAYS = 5
DEFAULTER_THRESHOLD = 2


class BorrowerStatus:
    NO_LOAN = 'No Loan'
    COMPLETED = 'Completed'
    MISSED = 'Missed'
    DUE_SOON = 'Due Soon'
    CURRENT = 'Current'


class LoanHealth:
    ACTIVE = 'Active'
    OVERDUE = 'Overdue'
    DEFAULTER = 'Defaulter'


def as_date(value):
    """Drop the time part of datetimes"""
    if isinstance(value, datetime):
        return value.date()
    return value

def live_status(payment, today, window_days=DUE_SOON_WINDOW_DAYS):
    """Status of a payment as of ``today``, ignoring stale stored values"""
    if payment.is_collected:
        return PaymentStatus.COLLECTED

    due = as_date(payment.due_date)
    today = as_date(today)
    if due < today:
        return PaymentStatus.OVERDUE
    if due == today or due < today + timedelta(days=window_days):
        return PaymentStatus.DUE_SOON
    return PaymentStatus.UPCOMING

def is_overdue(payment, today):
    return not payment.is_collected and as_date(payment.due_date) < as_date(today)

def by_due_date(payments):
    return sorted(payments, key=lambda p: as_date(p.due_date))

def uncollected(payments):
    return [p for p in payments if not p.is_collected]

def sort_payments(payments, today, window_days=DUE_SOON_WINDOW_DAYS):
    """Most urgent first, then by due date"""
    return sorted(
        payments,
        key=lambda p: (PaymentStatus.SORT_ORDER[live_status(p, today, window_days)],
                       as_date(p.due_date))
    )

def latest_loan(loans, now):
    """Most recently created loan; loans without created_at count as created ``now``"""
    if not loans:
        return None
    return max(loans, key=lambda loan: loan.created_at or now)

def next_payment_for_loan(payments, today):
    """Earliest uncollected payment due on or after today"""
    today = as_date(today)
    pending = [p for p in uncollected(payments) if as_date(p.due_date) >= today]
    pending = by_due_date(pending)
    return pending[0] if pending else None

def group_by_loan(payments):
    grouped = {}
    for payment in payments:
        grouped.setdefault(payment.loan_id, []).append(payment)
    return grouped

def _latest_loan_outlook(loans, payments, today, now, window_days):
    """(status label, latest loan, earliest uncollected payment of that loan)"""
    if not loans:
        return BorrowerStatus.NO_LOAN, None, None

    loan = latest_loan(loans, now)
    pending = by_due_date(uncollected(p for p in payments if p.loan_id == loan.id))
    if not pending:
        return BorrowerStatus.COMPLETED, loan, None

    earliest = pending[0]
    if as_date(earliest.due_date) < as_date(today):
        return BorrowerStatus.MISSED, loan, earliest

    if live_status(earliest, today, window_days) == PaymentStatus.DUE_SOON:
        return BorrowerStatus.DUE_SOON, loan, earliest
    return BorrowerStatus.CURRENT, loan, earliest

def default_now(today):
    """End of ``today``, so loans missing created_at sort after every real one"""
    return datetime.combine(as_date(today), time.max)

def borrower_status(loans, payments, today, now=None, window_days=DUE_SOON_WINDOW_DAYS):
    """Status label for a borrower, judged on their latest loan only"""
    if now is None:
        now = default_now(today)
    return _latest_loan_outlook(loans, payments, today, now, window_days)[0]

def walk_missed_payments(payments, today, threshold=DEFAULTER_THRESHOLD):
    """Walk a borrower's payments by due date counting consecutive misses

    All loans are merged into one stream. A collected payment resets the
    counter; an overdue one increments it and adds to the outstanding total.
    """
    today = as_date(today)
    consecutive_missed = 0
    total_outstanding = Decimal('0')
    last_payment_date = None
    missed = []

    for payment in by_due_date(payments):
        if payment.is_collected:
            consecutive_missed = 0
            last_payment_date = payment.paid_date or as_date(payment.due_date)
        elif as_date(payment.due_date) < today:
            consecutive_missed += 1
            total_outstanding += Decimal(str(payment.amount or 0))
            missed.append({
                'payment': payment,
                'days_overdue': (today - as_date(payment.due_date)).days,
                'consecutive_missed': consecutive_missed,
            })

    return {
        'consecutive_missed': consecutive_missed,
        'total_outstanding': total_outstanding,
        'last_payment_date': last_payment_date,
        'missed_payments': missed,
        'is_defaulter': consecutive_missed >= threshold,
    }

def classify(borrower, loans, payments, today, now=None,
             window_days=DUE_SOON_WINDOW_DAYS, threshold=DEFAULTER_THRESHOLD):
    """Everything the API reports about one borrower's standing

    ``loans`` and ``payments`` may cover other borrowers too; only the
    ones belonging to ``borrower`` are considered.
    """
    if now is None:
        now = default_now(today)

    own_loans = [loan for loan in loans if loan.borrower_id == borrower.id]
    loan_ids = {loan.id for loan in own_loans}
    own_payments = [p for p in payments if p.loan_id in loan_ids]

    label, loan, next_payment = _latest_loan_outlook(own_loans, own_payments, today, now, window_days)
    grouped = group_by_loan(own_payments)

    return {
        'borrower_status': label,
        'latest_loan': loan,
        'next_payment': next_payment,
        'next_payment_by_loan': {
            item.id: next_payment_for_loan(grouped.get(item.id, []), today)
            for item in own_loans
        },
        'defaulter': walk_missed_payments(own_payments, today, threshold),
    }

def loan_health(payments, today, threshold=DEFAULTER_THRESHOLD):
    """Active, Overdue or Defaulter by the number of overdue payments"""
    overdue = sum(1 for p in payments if is_overdue(p, today))
    if overdue >= threshold:
        return LoanHealth.DEFAULTER
    if overdue >= 1:
        return LoanHealth.OVERDUE
    return LoanHealth.ACTIVE

def _borrower_fields(borrower):
    return {
        'borrower_id': borrower.id,
        'borrower_name': borrower.name,
        'borrower_phone': borrower.phone,
        'borrower_address': borrower.address,
        'guarantor_name': borrower.guarantor_name,
        'guarantor_phone': borrower.guarantor_phone,
        'guarantor_address': borrower.guarantor_address,
    }

def _missed_entry(borrower, missed):
    payment = missed['payment']
    entry = _borrower_fields(borrower)
    entry.update({
        'payment_id': payment.id,
        'loan_id': payment.loan_id,
        'amount': money_float(payment.amount),
        'due_date': iso(as_date(payment.due_date)),
        'days_overdue': missed['days_overdue'],
        'consecutive_missed': missed['consecutive_missed'],
    })
    return entry

def find_defaulters(borrowers, loans, payments, today, threshold=DEFAULTER_THRESHOLD):
    """Split overdue payments into defaulters and plain missed payments"""
    borrower_map = {b.id: b for b in borrowers}
    loan_map = {loan.id: loan for loan in loans}

    by_borrower = {}
    for payment in payments:
        loan = loan_map.get(payment.loan_id)
        if loan is None:
            logger.debug('Payment %s references missing loan %s, skipped', payment.id, payment.loan_id)
            continue
        by_borrower.setdefault(loan.borrower_id, []).append(payment)

    missed_payments = []
    defaulters = []
    for borrower_id, borrower_payments in by_borrower.items():
        borrower = borrower_map.get(borrower_id)
        if borrower is None:
            logger.debug('Loan payments reference missing borrower %s, skipped', borrower_id)
            continue

        walk = walk_missed_payments(borrower_payments, today, threshold)
        entries = [_missed_entry(borrower, m) for m in walk['missed_payments']]
        if walk['is_defaulter']:
            defaulter = _borrower_fields(borrower)
            defaulter.update({
                'total_outstanding': money_float(walk['total_outstanding']),
                'consecutive_missed': walk['consecutive_missed'],
                'last_payment_date': iso(walk['last_payment_date']),
                'missed_payments': entries,
            })
            defaulters.append(defaulter)
        else:
            missed_payments.extend(entries)

    return {'missed_payments': missed_payments, 'defaulters': defaulters}

def summarize_portfolio(loans, payments, today):
    """Dashboard totals"""
    open_loans = {p.loan_id for p in uncollected(payments)}
    return {
        'total_loans': len(loans),
        'active_loans': sum(1 for loan in loans if loan.id in open_loans),
        'overdue_payments': sum(1 for p in payments if is_overdue(p, today)),
        'total_amount': money_float(sum((Decimal(str(loan.amount or 0)) for loan in loans), Decimal('0'))),
    }

def upcoming_payments(payments, today, limit=None):
    """Uncollected payments due from today up to one month ahead, soonest first"""
    today = as_date(today)
    horizon = today + relativedelta(months=1)
    window = [p for p in uncollected(payments) if today <= as_date(p.due_date) < horizon]
    window = by_due_date(window)
    return window[:limit] if limit else window

def payment_summary(payments, today):
    """Counts and totals used by the borrower export"""
    total_paid = Decimal('0')
    outstanding = Decimal('0')
    collected = overdue = 0
    for payment in payments:
        if payment.is_collected:
            collected += 1
            total_paid += Decimal(str(payment.paid_amount or payment.amount or 0))
            outstanding += Decimal(str(payment.due_amount or 0))
        else:
            outstanding += Decimal(str(payment.amount or 0))
            if is_overdue(payment, today):
                overdue += 1
    return {
        'total_payments': len(payments),
        'collected_payments': collected,
        'overdue_payments': overdue,
        'total_paid': total_paid,
        'outstanding': outstanding,
    }
