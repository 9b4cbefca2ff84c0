"""Dashboard routes"""
from flask import jsonify, current_app
from lendledger.main import main_bp
from lendledger.models import Loan, Payment, money_float, iso
from lendledger.utils.helpers import get_today, get_due_soon_window, get_defaulter_threshold
from lendledger.utils.status import (
    summarize_portfolio, loan_health, next_payment_for_loan, upcoming_payments, group_by_loan
)

@main_bp.route('/stats', methods=['GET'])
def stats():
    """Portfolio totals"""
    return jsonify(summarize_portfolio(Loan.query.all(), Payment.query.all(), get_today()))

@main_bp.route('/recent-loans', methods=['GET'])
def recent_loans():
    """Newest loans with their next payment and health"""
    limit = current_app.config.get('RECENT_LOANS_LIMIT', 4)
    loans = Loan.query.order_by(Loan.created_at.desc(), Loan.id.desc()).limit(limit).all()

    loan_ids = [loan.id for loan in loans]
    payments = Payment.query.filter(Payment.loan_id.in_(loan_ids)).all() if loan_ids else []
    grouped = group_by_loan(payments)

    today = get_today()
    threshold = get_defaulter_threshold()

    results = []
    for loan in loans:
        loan_payments = grouped.get(loan.id, [])
        next_payment = next_payment_for_loan(loan_payments, today)
        results.append({
            'id': loan.id,
            'borrower_id': loan.borrower_id,
            'borrower_name': loan.borrower.name if loan.borrower else 'Unknown',
            'amount': money_float(loan.amount),
            'loan_strategy': loan.loan_strategy,
            'start_date': iso(loan.start_date),
            'next_payment': iso(next_payment.due_date) if next_payment else 'No payments scheduled',
            'status': loan_health(loan_payments, today, threshold),
        })

    return jsonify(results)

@main_bp.route('/upcoming-payments', methods=['GET'])
def upcoming():
    """Next uncollected payments falling due within a month"""
    limit = current_app.config.get('UPCOMING_PAYMENTS_LIMIT', 3)
    today = get_today()
    window_days = get_due_soon_window()

    results = []
    for payment in upcoming_payments(Payment.query.all(), today, limit):
        borrower = payment.loan.borrower if payment.loan else None
        data = payment.to_dict(today, window_days)
        data.update({
            'borrower_id': borrower.id if borrower else None,
            'borrower_name': borrower.name if borrower else 'Unknown',
            'days_left': (payment.due_date - today).days,
        })
        results.append(data)

    return jsonify(results)
