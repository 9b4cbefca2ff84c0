"""Shared fixtures: an in-memory app with a pinned ledger date"""
from datetime import date, datetime
from decimal import Decimal
import pytest
from lendledger import create_app, db as _db
from lendledger.models import Borrower, Loan, Payment, LoanStrategy, PaymentStatus

TODAY = date(2024, 6, 15)


@pytest.fixture
def app():
    app = create_app('testing')
    app.config['LEDGER_TODAY'] = TODAY.isoformat()

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def make_borrower(db):
    def _make(name='Asha Rao', phone='9876543210', address='4 Market Road', **kwargs):
        borrower = Borrower(name=name, phone=phone, address=address, **kwargs)
        db.session.add(borrower)
        db.session.commit()
        return borrower
    return _make


@pytest.fixture
def make_loan(db, make_borrower):
    def _make(borrower=None, amount='12000', start_date=date(2024, 1, 15),
              loan_strategy=LoanStrategy.EMI, **kwargs):
        if borrower is None:
            borrower = make_borrower()
        loan = Loan(borrower_id=borrower.id, amount=Decimal(amount), start_date=start_date,
                    loan_strategy=loan_strategy, **kwargs)
        db.session.add(loan)
        db.session.commit()
        return loan
    return _make


@pytest.fixture
def make_payment(db):
    def _make(loan, due_date, amount='1000', status=PaymentStatus.UPCOMING, **kwargs):
        payment = Payment(loan_id=loan.id, due_date=due_date, amount=Decimal(amount),
                          status=status, **kwargs)
        db.session.add(payment)
        db.session.commit()
        return payment
    return _make


def unsaved_payment(payment_id, loan_id, due_date, amount='1000', status=PaymentStatus.UPCOMING, **kwargs):
    """Payment instance for pure classification tests"""
    return Payment(id=payment_id, loan_id=loan_id, due_date=due_date,
                   amount=Decimal(amount), status=status, **kwargs)


def unsaved_loan(loan_id, borrower_id, created_at=None, **kwargs):
    kwargs.setdefault('amount', Decimal('12000'))
    kwargs.setdefault('start_date', date(2024, 1, 15))
    kwargs.setdefault('loan_strategy', LoanStrategy.EMI)
    return Loan(id=loan_id, borrower_id=borrower_id, created_at=created_at, **kwargs)


def at(year, month, day, hour=9):
    return datetime(year, month, day, hour)
