"""Borrower management routes"""
import logging
from flask import request, jsonify, abort
from lendledger import db
from lendledger.borrowers import borrowers_bp
from lendledger.models import Borrower, Loan, Payment, iso, money_float
from lendledger.borrowers.forms import BorrowerForm, BorrowerUpdateForm, NotesForm
from lendledger.utils.helpers import (
    get_today, get_due_soon_window, get_defaulter_threshold, get_request_json,
    json_formdata, changed_fields, form_error_response, log_activity, next_borrower_id
)
from lendledger.utils.status import classify

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('name', 'phone', 'address')

def get_borrower_or_404(borrower_id):
    borrower = db.session.get(Borrower, borrower_id)
    if borrower is None:
        abort(404, description='Borrower not found')
    return borrower

def payments_for_loans(loans):
    loan_ids = [loan.id for loan in loans]
    if not loan_ids:
        return []
    return Payment.query.filter(Payment.loan_id.in_(loan_ids)).all()

def serialize_classification(result, today, window_days):
    """JSON form of a classify() result"""
    latest = result['latest_loan']
    next_payment = result['next_payment']
    defaulter = result['defaulter']
    return {
        'status': result['borrower_status'],
        'latest_loan': latest.to_dict() if latest else None,
        'next_payment': next_payment.to_dict(today, window_days) if next_payment else None,
        'next_payment_by_loan': {
            str(loan_id): iso(payment.due_date) if payment else None
            for loan_id, payment in result['next_payment_by_loan'].items()
        },
        'defaulter': {
            'is_defaulter': defaulter['is_defaulter'],
            'consecutive_missed': defaulter['consecutive_missed'],
            'total_outstanding': money_float(defaulter['total_outstanding']),
            'last_payment_date': iso(defaulter['last_payment_date']),
            'missed_payments': [
                dict(m['payment'].to_dict(today, window_days), days_overdue=m['days_overdue'])
                for m in defaulter['missed_payments']
            ],
        },
    }

@borrowers_bp.route('', methods=['GET'])
def list_borrowers():
    """List borrowers with their latest loan and current standing"""
    search = request.args.get('search', '', type=str).strip()

    query = Borrower.query
    if search:
        query = query.filter(
            db.or_(
                Borrower.name.ilike(f'%{search}%'),
                Borrower.phone.ilike(f'%{search}%'),
                Borrower.document_number.ilike(f'%{search}%')
            )
        )
    borrowers = query.order_by(Borrower.created_at.desc(), Borrower.id.desc()).all()

    # One snapshot for every borrower instead of a query per row
    borrower_ids = [b.id for b in borrowers]
    loans = Loan.query.filter(Loan.borrower_id.in_(borrower_ids)).all() if borrower_ids else []
    payments = payments_for_loans(loans)

    today = get_today()
    window_days = get_due_soon_window()
    threshold = get_defaulter_threshold()

    results = []
    for borrower in borrowers:
        result = classify(borrower, loans, payments, today,
                          window_days=window_days, threshold=threshold)
        latest = result['latest_loan']
        next_payment = result['next_payment']
        data = borrower.to_dict()
        data.update({
            'status': result['borrower_status'],
            'latest_loan': latest.to_dict() if latest else None,
            'next_payment_date': iso(next_payment.due_date) if next_payment else None,
            'next_payment_amount': money_float(next_payment.amount) if next_payment else None,
            'is_defaulter': result['defaulter']['is_defaulter'],
        })
        results.append(data)

    return jsonify(results)

@borrowers_bp.route('/next-id', methods=['GET'])
def next_id():
    return jsonify({'next_id': next_borrower_id()})

@borrowers_bp.route('/<int:borrower_id>', methods=['GET'])
def get_borrower(borrower_id):
    borrower = get_borrower_or_404(borrower_id)
    return jsonify(borrower.to_dict())

@borrowers_bp.route('/<int:borrower_id>/loans', methods=['GET'])
def borrower_loans(borrower_id):
    """Borrower's loans, newest first, with the next payment date of each"""
    borrower = get_borrower_or_404(borrower_id)
    loans = borrower.loans.order_by(Loan.created_at.desc(), Loan.id.desc()).all()
    payments = payments_for_loans(loans)

    result = classify(borrower, loans, payments, get_today(),
                      window_days=get_due_soon_window(), threshold=get_defaulter_threshold())
    next_by_loan = result['next_payment_by_loan']

    data = []
    for loan in loans:
        item = loan.to_dict()
        next_payment = next_by_loan.get(loan.id)
        item['next_payment_date'] = iso(next_payment.due_date) if next_payment else None
        data.append(item)
    return jsonify(data)

@borrowers_bp.route('/<int:borrower_id>/status', methods=['GET'])
def borrower_status(borrower_id):
    """Full classification of one borrower"""
    borrower = get_borrower_or_404(borrower_id)
    loans = borrower.loans.all()
    payments = payments_for_loans(loans)

    today = get_today()
    window_days = get_due_soon_window()
    result = classify(borrower, loans, payments, today,
                      window_days=window_days, threshold=get_defaulter_threshold())

    data = serialize_classification(result, today, window_days)
    data['borrower_id'] = borrower.id
    return jsonify(data)

@borrowers_bp.route('', methods=['POST'])
def create_borrower():
    """Create a borrower, optionally with an explicit id"""
    form = BorrowerForm(formdata=json_formdata())
    if not form.validate():
        return form_error_response(form)

    if form.id.data is not None and db.session.get(Borrower, form.id.data) is not None:
        abort(409, description=f'Borrower {form.id.data} already exists')

    borrower = Borrower(
        name=form.name.data.strip(),
        phone=form.phone.data.strip(),
        address=form.address.data.strip(),
        document_type=form.document_type.data or None,
        document_number=form.document_number.data or None,
        guarantor_name=form.guarantor_name.data or None,
        guarantor_phone=form.guarantor_phone.data or None,
        guarantor_address=form.guarantor_address.data or None,
        notes=form.notes.data or None,
        photo_url=form.photo_url.data or None
    )
    if form.id.data is not None:
        borrower.id = form.id.data

    db.session.add(borrower)
    db.session.flush()

    log_activity('create_borrower', 'borrower', borrower.id, f'Created borrower: {borrower.name}')
    db.session.commit()

    logger.info('Created borrower %s (%s)', borrower.id, borrower.name)
    return jsonify(borrower.to_dict()), 201

@borrowers_bp.route('/<int:borrower_id>', methods=['PUT'])
def update_borrower(borrower_id):
    """Update only the fields present in the request body"""
    borrower = get_borrower_or_404(borrower_id)
    payload = get_request_json()

    form = BorrowerUpdateForm(formdata=json_formdata(payload))
    if not form.validate():
        return form_error_response(form)

    changes = changed_fields(form, payload, Borrower.UPDATABLE_FIELDS)
    for field in REQUIRED_FIELDS:
        if field in changes and not (changes[field] or '').strip():
            abort(400, description=f'{field} cannot be empty')

    for field, value in changes.items():
        setattr(borrower, field, value if value != '' else None)

    log_activity('update_borrower', 'borrower', borrower.id,
                 f'Updated borrower {borrower.name}: {", ".join(sorted(changes)) or "no changes"}')
    db.session.commit()

    return jsonify(borrower.to_dict())

@borrowers_bp.route('/<int:borrower_id>/notes', methods=['POST'])
def update_notes(borrower_id):
    borrower = get_borrower_or_404(borrower_id)
    form = NotesForm(formdata=json_formdata())
    if not form.validate():
        return form_error_response(form)

    borrower.notes = form.notes.data or None
    log_activity('update_borrower_notes', 'borrower', borrower.id, f'Updated notes for {borrower.name}')
    db.session.commit()

    return jsonify(borrower.to_dict())

@borrowers_bp.route('/<int:borrower_id>', methods=['DELETE'])
def delete_borrower(borrower_id):
    """Delete a borrower together with their loans and payments"""
    borrower = get_borrower_or_404(borrower_id)
    name = borrower.name

    db.session.delete(borrower)
    log_activity('delete_borrower', 'borrower', borrower_id, f'Deleted borrower: {name}')
    db.session.commit()

    logger.info('Deleted borrower %s and their loans', borrower_id)
    return jsonify({'message': 'Borrower deleted'})
