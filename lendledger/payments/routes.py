"""Payment routes"""
import logging
from datetime import date
from dateutil.relativedelta import relativedelta
from flask import request, jsonify, abort, current_app
from sqlalchemy.exc import SQLAlchemyError
from lendledger import db
from lendledger.payments import payments_bp
from lendledger.models import Loan, Payment
from lendledger.payments.forms import CollectPaymentForm, PaymentUpdateForm, BulkPaymentForm
from lendledger.utils.helpers import (
    get_today, get_due_soon_window, get_request_json, json_formdata,
    changed_fields, form_error_response, log_activity
)
from lendledger.utils.schedule import generate_schedule, create_monthly_payments
from lendledger.utils.status import sort_payments

logger = logging.getLogger(__name__)

def get_payment_or_404(payment_id):
    payment = db.session.get(Payment, payment_id)
    if payment is None:
        abort(404, description='Payment not found')
    return payment

def parse_month(value):
    """First and last+1 day of a YYYY-MM month"""
    try:
        year, month = (int(part) for part in value.split('-'))
        start = date(year, month, 1)
    except ValueError:
        abort(400, description='month must be in YYYY-MM format')
    return start, start + relativedelta(months=1)

@payments_bp.route('', methods=['GET'])
def list_payments():
    """Payments with borrower and loan details, most urgent first"""
    loan_id = request.args.get('loan_id', type=int)
    month = request.args.get('month', '', type=str)

    query = Payment.query
    if loan_id:
        query = query.filter_by(loan_id=loan_id)
    if month:
        start, end = parse_month(month)
        query = query.filter(Payment.due_date >= start, Payment.due_date < end)

    today = get_today()
    window_days = get_due_soon_window()

    results = []
    for payment in sort_payments(query.all(), today, window_days):
        data = payment.to_dict(today, window_days)
        loan = payment.loan
        borrower = loan.borrower if loan else None
        data.update({
            'borrower_id': borrower.id if borrower else None,
            'borrower_name': borrower.name if borrower else 'Unknown',
            'loan_strategy': loan.loan_strategy if loan else None,
        })
        results.append(data)

    return jsonify(results)

@payments_bp.route('/loan/<int:loan_id>', methods=['GET'])
def payments_by_loan(loan_id):
    """Payments of a loan, most urgent first, generating the schedule on first access"""
    loan = db.session.get(Loan, loan_id)
    if loan is None:
        abort(404, description='Loan not found')

    today = get_today()
    try:
        payments = generate_schedule(loan, today)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception('Could not generate payment schedule for loan %s', loan_id)
        return jsonify([])

    window_days = get_due_soon_window()
    payments = sort_payments(payments, today, window_days)
    return jsonify([p.to_dict(today, window_days) for p in payments])

@payments_bp.route('/<int:payment_id>', methods=['GET'])
def get_payment(payment_id):
    payment = get_payment_or_404(payment_id)
    return jsonify(payment.to_dict(get_today(), get_due_soon_window()))

@payments_bp.route('/<int:payment_id>/collect', methods=['POST'])
def collect_payment(payment_id):
    """Record a full or partial collection"""
    payment = get_payment_or_404(payment_id)
    form = CollectPaymentForm(formdata=json_formdata())
    if not form.validate():
        return form_error_response(form)

    today = get_today()
    payment.mark_collected(
        paid_date=form.paid_date.data or today,
        paid_amount=form.paid_amount.data,
        status=form.status.data or None,
        payment_method=form.payment_method.data or None,
        notes=form.notes.data or None
    )

    description = f'Collected {payment.paid_amount} for payment {payment.id} of loan {payment.loan_id}'
    if payment.due_amount and payment.due_amount > 0:
        description += f', {payment.due_amount} still due'
    log_activity('collect_payment', 'payment', payment.id, description)
    db.session.commit()

    return jsonify(payment.to_dict(today, get_due_soon_window()))

@payments_bp.route('/<int:payment_id>', methods=['PUT'])
def update_payment(payment_id):
    """Update the payment fields present in the request body"""
    payment = get_payment_or_404(payment_id)
    payload = get_request_json()

    form = PaymentUpdateForm(formdata=json_formdata(payload))
    if not form.validate():
        return form_error_response(form)

    changes = changed_fields(form, payload, Payment.UPDATABLE_FIELDS)
    for field in ('due_date', 'amount', 'status'):
        if field in changes and changes[field] in (None, ''):
            abort(400, description=f'{field} cannot be empty')

    for field, value in changes.items():
        setattr(payment, field, value if value != '' else None)

    log_activity('update_payment', 'payment', payment.id,
                 f'Updated payment {payment.id}: {", ".join(sorted(changes)) or "no changes"}')
    db.session.commit()

    return jsonify(payment.to_dict(get_today(), get_due_soon_window()))

@payments_bp.route('/<int:payment_id>', methods=['DELETE'])
def delete_payment(payment_id):
    payment = get_payment_or_404(payment_id)
    loan_id = payment.loan_id

    db.session.delete(payment)
    log_activity('delete_payment', 'payment', payment_id, f'Deleted payment {payment_id} of loan {loan_id}')
    db.session.commit()

    return jsonify({'message': 'Payment deleted'})

@payments_bp.route('/bulk/<int:loan_id>', methods=['POST'])
def create_bulk_payments(loan_id):
    """Add a run of monthly payments to a loan"""
    loan = db.session.get(Loan, loan_id)
    if loan is None:
        abort(404, description='Loan not found')

    form = BulkPaymentForm(formdata=json_formdata())
    if not form.validate():
        return form_error_response(form)

    payments = create_monthly_payments(
        loan,
        form.months.data,
        custom_amount=form.custom_amount.data,
        custom_due_date=form.custom_due_date.data,
        default_tenure=current_app.config.get('DEFAULT_TENURE_MONTHS', 12)
    )
    db.session.flush()

    log_activity('create_bulk_payments', 'loan', loan.id,
                 f'Added {len(payments)} monthly payments to loan {loan.id}')
    db.session.commit()

    today = get_today()
    window_days = get_due_soon_window()
    return jsonify([p.to_dict(today, window_days) for p in payments]), 201
