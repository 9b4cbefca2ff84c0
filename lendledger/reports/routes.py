"""Reports routes"""
import csv
import io
from flask import jsonify, make_response
from lendledger.reports import reports_bp
from lendledger.models import Borrower, Loan, Payment
from lendledger.utils.helpers import get_today, get_due_soon_window, get_defaulter_threshold
from lendledger.utils.status import classify, find_defaulters, payment_summary

@reports_bp.route('/defaulters', methods=['GET'])
def defaulters():
    """Missed payments and borrowers with consecutive misses"""
    report = find_defaulters(
        Borrower.query.all(),
        Loan.query.all(),
        Payment.query.all(),
        get_today(),
        threshold=get_defaulter_threshold()
    )
    report['total_defaulters'] = len(report['defaulters'])
    report['total_missed_payments'] = len(report['missed_payments'])
    return jsonify(report)

@reports_bp.route('/export/borrowers', methods=['GET'])
def export_borrowers():
    """Export borrowers with their payment summary to CSV"""
    borrowers = Borrower.query.order_by(Borrower.id).all()
    loans = Loan.query.all()
    payments = Payment.query.all()

    today = get_today()
    window_days = get_due_soon_window()
    threshold = get_defaulter_threshold()

    output = io.StringIO()
    writer = csv.writer(output)

    # Write header
    writer.writerow(['Borrower ID', 'Name', 'Phone', 'Address', 'Document Type', 'Document Number',
                     'Guarantor Name', 'Guarantor Phone', 'Status', 'Defaulter', 'Loans',
                     'Total Borrowed', 'Payments', 'Collected', 'Overdue', 'Total Paid', 'Outstanding'])

    # Write data
    for borrower in borrowers:
        result = classify(borrower, loans, payments, today,
                          window_days=window_days, threshold=threshold)
        own_loans = [loan for loan in loans if loan.borrower_id == borrower.id]
        loan_ids = {loan.id for loan in own_loans}
        summary = payment_summary([p for p in payments if p.loan_id in loan_ids], today)
        total_borrowed = sum(float(loan.amount or 0) for loan in own_loans)

        writer.writerow([
            borrower.id,
            borrower.name,
            borrower.phone,
            borrower.address,
            borrower.document_type or 'N/A',
            borrower.document_number or 'N/A',
            borrower.guarantor_name or 'N/A',
            borrower.guarantor_phone or 'N/A',
            result['borrower_status'],
            'Yes' if result['defaulter']['is_defaulter'] else 'No',
            len(own_loans),
            f'{total_borrowed:.2f}',
            summary['total_payments'],
            summary['collected_payments'],
            summary['overdue_payments'],
            f'{summary["total_paid"]:.2f}',
            f'{summary["outstanding"]:.2f}'
        ])

    output.seek(0)
    response = make_response(output.getvalue())
    response.headers['Content-Type'] = 'text/csv'
    response.headers['Content-Disposition'] = f'attachment; filename=borrowers_{today.strftime("%Y%m%d")}.csv'

    return response
