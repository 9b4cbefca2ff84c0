"""Payment schedule generation

``plan_schedule`` works on an unsaved loan and returns plain dicts;
the other functions persist Payment rows.
"""
import logging
from datetime import timedelta
from decimal import Decimal
from dateutil.relativedelta import relativedelta
from flask import current_app
from lendledger import db
from lendledger.models import Payment, PaymentStatus, LoanStrategy, to_money

logger = logging.getLogger(__name__)

DEFAULT_TENURE_MONTHS = 12
FLAT_PAYMENT_COUNT = 6
DUE_SOON_LEAD_DAYS = 5

def schedule_terms(loan, default_tenure=DEFAULT_TENURE_MONTHS, flat_count=FLAT_PAYMENT_COUNT):
    """Return (number of payments, amount per payment) for the loan's strategy"""
    strategy = loan.loan_strategy or LoanStrategy.EMI
    amount = Decimal(str(loan.amount or 0))

    if strategy == LoanStrategy.EMI:
        count = loan.tenure if loan.tenure and loan.tenure > 0 else default_tenure
        if loan.custom_emi_amount:
            return count, to_money(loan.custom_emi_amount)
        return count, to_money(amount / Decimal(count))

    if strategy == LoanStrategy.FLAT:
        if loan.flat_monthly_amount:
            return flat_count, to_money(loan.flat_monthly_amount)
        return flat_count, to_money(amount / Decimal('12'))

    # CUSTOM and GOLD_SILVER payments are entered by hand
    return 0, Decimal('0.00')

def initial_status(due_date, today, index=0, lead_days=DUE_SOON_LEAD_DAYS):
    """Stored status a freshly generated payment starts with"""
    if due_date < today:
        status = PaymentStatus.OVERDUE
    elif (due_date < today + relativedelta(months=1)
          and due_date - timedelta(days=lead_days) < today):
        status = PaymentStatus.DUE_SOON
    else:
        status = PaymentStatus.UPCOMING

    if index == 0 and status == PaymentStatus.UPCOMING:
        status = PaymentStatus.DUE_SOON
    return status

def plan_schedule(loan, today, default_tenure=DEFAULT_TENURE_MONTHS, flat_count=FLAT_PAYMENT_COUNT,
                  lead_days=DUE_SOON_LEAD_DAYS):
    """Payments the loan's strategy calls for, in due date order"""
    count, installment = schedule_terms(loan, default_tenure, flat_count)
    plan = []
    for i in range(count):
        due_date = loan.start_date + relativedelta(months=i + 1)
        plan.append({
            'installment_number': i + 1,
            'due_date': due_date,
            'amount': installment,
            'status': initial_status(due_date, today, i, lead_days),
        })
    return plan

def generate_schedule(loan, today, default_tenure=None, flat_count=None, lead_days=None):
    """Persist the loan's schedule unless it already has payments

    Each payment is committed on its own, so a failure part way through
    leaves the payments already written.
    """
    existing = loan.payments.order_by(Payment.due_date).all()
    if existing:
        logger.info('Loan %s already has %d payments, skipping schedule generation',
                    loan.id, len(existing))
        return existing

    if default_tenure is None:
        default_tenure = current_app.config.get('DEFAULT_TENURE_MONTHS', DEFAULT_TENURE_MONTHS)
    if flat_count is None:
        flat_count = current_app.config.get('FLAT_PAYMENT_COUNT', FLAT_PAYMENT_COUNT)
    if lead_days is None:
        lead_days = current_app.config.get('DUE_SOON_WINDOW_DAYS', DUE_SOON_LEAD_DAYS)

    plan = plan_schedule(loan, today, default_tenure, flat_count, lead_days)
    if not plan:
        logger.info('Loan %s uses the %s strategy, no payments generated',
                    loan.id, loan.strategy_label)
        return []

    logger.info('Generating %d payments of %s for loan %s',
                len(plan), plan[0]['amount'], loan.id)

    created = []
    for item in plan:
        payment = Payment(
            loan_id=loan.id,
            due_date=item['due_date'],
            amount=item['amount'],
            status=item['status'],
            due_amount=Decimal('0')
        )
        db.session.add(payment)
        db.session.commit()
        created.append(payment)

    return created

def create_custom_payment(loan, amount, due_date, today, notes=None):
    """Add one hand-entered payment; past or same-day dates count as collected"""
    amount = to_money(amount)
    payment = Payment(loan_id=loan.id, due_date=due_date, amount=amount, notes=notes,
                      due_amount=Decimal('0'))

    if due_date <= today:
        payment.status = PaymentStatus.COLLECTED
        payment.paid_date = due_date
        payment.paid_amount = amount
    else:
        payment.status = PaymentStatus.UPCOMING

    db.session.add(payment)
    return payment

def next_bulk_due_date(loan, custom_due_date=None):
    """Where a run of monthly payments should start"""
    if custom_due_date:
        return custom_due_date

    latest = loan.payments.order_by(Payment.due_date.desc()).first()
    if latest is not None:
        return latest.due_date + relativedelta(months=1)
    return loan.start_date + relativedelta(months=1)

def create_monthly_payments(loan, months, custom_amount=None, custom_due_date=None,
                            default_tenure=DEFAULT_TENURE_MONTHS):
    """Add ``months`` payments one month apart"""
    if months is None or months <= 0:
        raise ValueError('months must be a positive number')

    if custom_amount:
        amount = to_money(custom_amount)
    else:
        amount = loan.default_installment_amount(default_tenure)

    # A reduced amount continues a partially paid loan
    flat_amount = Decimal(str(loan.flat_monthly_amount or 0))
    if custom_amount and to_money(custom_amount) < flat_amount:
        status = PaymentStatus.DUE_SOON
    else:
        status = PaymentStatus.UPCOMING

    first_due = next_bulk_due_date(loan, custom_due_date)
    payments = []
    for i in range(months):
        payment = Payment(
            loan_id=loan.id,
            due_date=first_due + relativedelta(months=i),
            amount=amount,
            status=status,
            due_amount=Decimal('0')
        )
        db.session.add(payment)
        payments.append(payment)

    logger.info('Queued %d monthly payments of %s for loan %s starting %s',
                months, amount, loan.id, first_due)
    return payments
