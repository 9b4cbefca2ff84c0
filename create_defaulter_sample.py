#!/usr/bin/env python3
"""Create a sample defaulter for exercising the defaulters report"""
import random
from decimal import Decimal
from dateutil.relativedelta import relativedelta
from lendledger import create_app, db
from lendledger.models import Borrower, Loan, LoanStrategy, ActivityLog
from lendledger.utils.helpers import get_today
from lendledger.utils.schedule import generate_schedule
from lendledger.utils.status import walk_missed_payments

app = create_app('development')
with app.app_context():
    db.create_all()
    today = get_today()
    currency = app.config['DEFAULT_CURRENCY']

    borrower = Borrower(
        name=f'Sample Defaulter {random.randint(1000, 9999)}',
        phone='9000000000',
        address='12 Sample Street',
        guarantor_name='Sample Guarantor',
        guarantor_phone='9000000001',
        notes='Sample defaulter for testing the defaulters report'
    )
    db.session.add(borrower)
    db.session.flush()

    # Started four months ago so four installments have fallen due
    loan = Loan(
        borrower_id=borrower.id,
        amount=Decimal('12000.00'),
        start_date=today - relativedelta(months=4, days=3),
        loan_strategy=LoanStrategy.EMI,
        tenure=12
    )
    db.session.add(loan)
    db.session.flush()
    db.session.add(ActivityLog(action='create_sample_defaulter', entity_type='loan', entity_id=loan.id,
                               description=f'Sample defaulter loan for {borrower.name}'))
    db.session.commit()

    payments = generate_schedule(loan, today)

    # Pay the first two installments, leave the next two unpaid
    for payment in payments[:2]:
        payment.mark_collected(paid_date=payment.due_date, payment_method='cash', notes='Sample payment')
    db.session.commit()

    walk = walk_missed_payments(payments, today)

    print(f'\nCreated sample borrower: {borrower.name} (ID {borrower.id})')
    print(f'Loan {loan.id}: {currency} {loan.amount} over {loan.tenure} months from {loan.start_date}')
    print(f'Installments: {len(payments)} monthly payments of {currency} {payments[0].amount}')
    print('Collected: 2 installments')
    print(f'Consecutive missed: {walk["consecutive_missed"]}')
    print(f'Total outstanding: {currency} {walk["total_outstanding"]}')
    print(f'Defaulter: {"Yes" if walk["is_defaulter"] else "No"}')
