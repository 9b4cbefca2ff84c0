"""Loan management routes"""
import logging
from flask import request, jsonify, abort
from lendledger import db
from lendledger.loans import loans_bp
from lendledger.models import Borrower, Loan, LoanStrategy, LoanStatus
from lendledger.loans.forms import LoanForm, LoanUpdateForm, CustomPaymentForm
from lendledger.utils.decorators import loan_strategy_required
from lendledger.utils.helpers import (
    get_today, get_due_soon_window, get_request_json, json_formdata,
    changed_fields, form_error_response, log_activity
)
from lendledger.utils.schedule import generate_schedule, create_custom_payment

logger = logging.getLogger(__name__)

def get_loan_or_404(loan_id):
    loan = db.session.get(Loan, loan_id)
    if loan is None:
        abort(404, description='Loan not found')
    return loan

def schedule_response(loan, payments, status_code=200):
    today = get_today()
    window_days = get_due_soon_window()
    data = loan.to_dict()
    data['payments'] = [p.to_dict(today, window_days) for p in payments]
    return jsonify(data), status_code

@loans_bp.route('', methods=['GET'])
def list_loans():
    """List loans, newest first, optionally for one borrower"""
    borrower_id = request.args.get('borrower_id', type=int)

    query = Loan.query
    if borrower_id:
        query = query.filter_by(borrower_id=borrower_id)

    loans = query.order_by(Loan.created_at.desc(), Loan.id.desc()).all()
    return jsonify([loan.to_dict() for loan in loans])

@loans_bp.route('/borrower/<int:borrower_id>', methods=['GET'])
def loans_by_borrower(borrower_id):
    loans = Loan.query.filter_by(borrower_id=borrower_id).order_by(Loan.created_at.desc(), Loan.id.desc()).all()
    return jsonify([loan.to_dict() for loan in loans])

@loans_bp.route('/<int:loan_id>', methods=['GET'])
def get_loan(loan_id):
    loan = get_loan_or_404(loan_id)
    return jsonify(loan.to_dict())

@loans_bp.route('', methods=['POST'])
def create_loan():
    """Create a loan and generate its payment schedule"""
    form = LoanForm(formdata=json_formdata())
    if not form.validate():
        return form_error_response(form)

    borrower = db.session.get(Borrower, form.borrower_id.data)
    if borrower is None:
        abort(404, description='Borrower not found')

    loan = Loan(
        borrower_id=borrower.id,
        amount=form.amount.data,
        start_date=form.start_date.data,
        loan_strategy=form.loan_strategy.data or LoanStrategy.EMI,
        tenure=form.tenure.data,
        custom_emi_amount=form.custom_emi_amount.data,
        flat_monthly_amount=form.flat_monthly_amount.data,
        custom_due_date=form.custom_due_date.data,
        custom_payment_amount=form.custom_payment_amount.data,
        pm_type=form.pm_type.data or None,
        metal_weight=form.metal_weight.data,
        purity=form.purity.data,
        net_weight=form.net_weight.data,
        amount_paid=form.amount_paid.data,
        gold_silver_due_date=form.gold_silver_due_date.data,
        gold_silver_payment_amount=form.gold_silver_payment_amount.data,
        gold_silver_notes=form.gold_silver_notes.data or None,
        status=LoanStatus.ACTIVE
    )
    if loan.loan_strategy == LoanStrategy.GOLD_SILVER and loan.net_weight is None:
        loan.net_weight = loan.calculate_net_weight()

    db.session.add(loan)
    db.session.flush()

    log_activity('create_loan', 'loan', loan.id,
                 f'Created {loan.strategy_label} loan of {loan.amount} for {borrower.name}')
    db.session.commit()

    # Store errors here propagate; payments already committed are kept
    payments = generate_schedule(loan, get_today())
    logger.info('Created loan %s for borrower %s with %d payments', loan.id, borrower.id, len(payments))

    return schedule_response(loan, payments, 201)

@loans_bp.route('/<int:loan_id>/schedule', methods=['POST'])
def generate_loan_schedule(loan_id):
    """Generate the schedule if the loan has none yet"""
    loan = get_loan_or_404(loan_id)
    payments = generate_schedule(loan, get_today())
    return schedule_response(loan, payments)

@loans_bp.route('/<int:loan_id>', methods=['PUT'])
def update_loan(loan_id):
    """Update the loan fields present in the request body"""
    loan = get_loan_or_404(loan_id)
    payload = get_request_json()

    form = LoanUpdateForm(formdata=json_formdata(payload))
    if not form.validate():
        return form_error_response(form)

    changes = changed_fields(form, payload, Loan.UPDATABLE_FIELDS)
    for field in ('amount', 'start_date', 'loan_strategy'):
        if field in changes and changes[field] in (None, ''):
            abort(400, description=f'{field} cannot be empty')

    for field, value in changes.items():
        setattr(loan, field, value if value != '' else None)

    if loan.loan_strategy == LoanStrategy.GOLD_SILVER and 'net_weight' not in changes \
            and ('metal_weight' in changes or 'purity' in changes):
        loan.net_weight = loan.calculate_net_weight()

    log_activity('update_loan', 'loan', loan.id,
                 f'Updated loan {loan.id}: {", ".join(sorted(changes)) or "no changes"}')
    db.session.commit()

    return jsonify(loan.to_dict())

@loans_bp.route('/<int:loan_id>', methods=['PATCH'])
def update_loan_status(loan_id):
    """Move a loan to another lifecycle status"""
    loan = get_loan_or_404(loan_id)
    status = get_request_json().get('status')

    if status not in LoanStatus.ALL:
        abort(400, description=f'Invalid status. Must be one of: {", ".join(LoanStatus.ALL)}')

    old_status = loan.status
    loan.status = status
    log_activity('update_loan_status', 'loan', loan.id, f'Loan {loan.id} status {old_status} -> {status}')
    db.session.commit()

    return jsonify(loan.to_dict())

@loans_bp.route('/<int:loan_id>', methods=['DELETE'])
def delete_loan(loan_id):
    """Delete a loan and its payments"""
    loan = get_loan_or_404(loan_id)

    db.session.delete(loan)
    log_activity('delete_loan', 'loan', loan_id, f'Deleted loan {loan_id}')
    db.session.commit()

    logger.info('Deleted loan %s', loan_id)
    return jsonify({'message': 'Loan deleted'})

@loans_bp.route('/<int:loan_id>/payments/custom', methods=['POST'])
@loan_strategy_required(*LoanStrategy.MANUAL)
def add_custom_payment(loan):
    """Add one payment by hand to a custom or gold/silver loan"""
    form = CustomPaymentForm(formdata=json_formdata())
    if not form.validate():
        return form_error_response(form)

    today = get_today()
    payment = create_custom_payment(loan, form.amount.data, form.due_date.data, today,
                                    notes=form.notes.data or None)
    db.session.flush()

    log_activity('create_custom_payment', 'payment', payment.id,
                 f'Added payment of {payment.amount} due {payment.due_date} to loan {loan.id}')
    db.session.commit()

    return jsonify(payment.to_dict(today, get_due_soon_window())), 201
