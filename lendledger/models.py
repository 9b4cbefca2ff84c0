"""Database models for LendLedger"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from lendledger import db


class LoanStrategy:
    """Repayment strategies a loan can follow"""
    EMI = 'emi'
    FLAT = 'flat'
    CUSTOM = 'custom'
    GOLD_SILVER = 'gold_silver'

    ALL = (EMI, FLAT, CUSTOM, GOLD_SILVER)
    # Strategies whose payments are entered by hand instead of generated
    MANUAL = (CUSTOM, GOLD_SILVER)


class LoanStatus:
    ACTIVE = 'active'
    COMPLETED = 'completed'
    DEFAULTED = 'defaulted'
    CANCELLED = 'cancelled'

    ALL = (ACTIVE, COMPLETED, DEFAULTED, CANCELLED)


class PaymentStatus:
    UPCOMING = 'upcoming'
    DUE_SOON = 'due_soon'
    OVERDUE = 'overdue'
    COLLECTED = 'collected'

    ALL = (UPCOMING, DUE_SOON, OVERDUE, COLLECTED)
    # Listing order: most urgent first
    SORT_ORDER = {OVERDUE: 0, DUE_SOON: 1, UPCOMING: 2, COLLECTED: 3}


def to_money(value):
    """Quantize a number to cents"""
    if value is None:
        return None
    return Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def money_float(value):
    """Render a stored amount for JSON output"""
    if value is None:
        return None
    return float(value)


def iso(value):
    return value.isoformat() if value else None


# Borrower Models
class Borrower(db.Model):
    """Borrower with contact and guarantor information"""
    __tablename__ = 'borrowers'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    phone = db.Column(db.String(20), nullable=False)
    address = db.Column(db.Text, nullable=False)
    document_type = db.Column(db.String(50))
    document_number = db.Column(db.String(50))

    # Guarantor Information
    guarantor_name = db.Column(db.String(200))
    guarantor_phone = db.Column(db.String(20))
    guarantor_address = db.Column(db.Text)

    notes = db.Column(db.Text)
    photo_url = db.Column(db.String(255))  # Stored by the upload service, not here
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    # Relationships
    loans = db.relationship('Loan', backref='borrower', lazy='dynamic', cascade='all, delete-orphan')

    # Fields a client may change after creation; id and document_number stay fixed
    UPDATABLE_FIELDS = (
        'name', 'phone', 'address', 'document_type',
        'guarantor_name', 'guarantor_phone', 'guarantor_address',
        'notes', 'photo_url'
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'address': self.address,
            'document_type': self.document_type,
            'document_number': self.document_number,
            'guarantor_name': self.guarantor_name,
            'guarantor_phone': self.guarantor_phone,
            'guarantor_address': self.guarantor_address,
            'notes': self.notes,
            'photo_url': self.photo_url,
            'created_at': iso(self.created_at),
        }

    def __repr__(self):
        return f'<Borrower {self.id} - {self.name}>'

# Loan Models
class Loan(db.Model):
    """Loan given to a borrower under one repayment strategy"""
    __tablename__ = 'loans'

    id = db.Column(db.Integer, primary_key=True)
    borrower_id = db.Column(db.Integer, db.ForeignKey('borrowers.id'), nullable=False, index=True)

    # Loan Details
    amount = db.Column(db.Numeric(15, 2), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    loan_strategy = db.Column(db.String(20), nullable=False, default=LoanStrategy.EMI)  # emi, flat, custom, gold_silver

    # EMI strategy
    tenure = db.Column(db.Integer)  # Months
    custom_emi_amount = db.Column(db.Numeric(15, 2))

    # FLAT strategy
    flat_monthly_amount = db.Column(db.Numeric(15, 2))

    # CUSTOM strategy
    custom_due_date = db.Column(db.Date)
    custom_payment_amount = db.Column(db.Numeric(15, 2))

    # GOLD_SILVER strategy (pledged metal)
    pm_type = db.Column(db.String(10))  # gold, silver
    metal_weight = db.Column(db.Numeric(10, 3))  # Grams
    purity = db.Column(db.Numeric(5, 2))  # Percentage, e.g. 75 for 75%
    net_weight = db.Column(db.Numeric(10, 3))
    amount_paid = db.Column(db.Numeric(15, 2))
    gold_silver_due_date = db.Column(db.Date)
    gold_silver_payment_amount = db.Column(db.Numeric(15, 2))
    gold_silver_notes = db.Column(db.Text)

    status = db.Column(db.String(20), nullable=False, default=LoanStatus.ACTIVE)  # active, completed, defaulted, cancelled
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    # Relationships
    payments = db.relationship('Payment', backref='loan', lazy='dynamic', cascade='all, delete-orphan')

    UPDATABLE_FIELDS = (
        'amount', 'start_date', 'loan_strategy', 'tenure', 'custom_emi_amount',
        'flat_monthly_amount', 'custom_due_date', 'custom_payment_amount',
        'pm_type', 'metal_weight', 'purity', 'net_weight', 'amount_paid',
        'gold_silver_due_date', 'gold_silver_payment_amount', 'gold_silver_notes'
    )

    def calculate_net_weight(self):
        """Net metal weight = gross weight * purity%, None when inputs are unusable"""
        if not self.metal_weight or not self.purity:
            return None

        metal_weight = Decimal(str(self.metal_weight))
        purity = Decimal(str(self.purity))
        if metal_weight <= 0 or purity <= 0 or purity > 100:
            return None

        net = metal_weight * purity / Decimal('100')
        return net.quantize(Decimal('0.001'), rounding=ROUND_HALF_UP)

    def default_installment_amount(self, default_tenure=12):
        """Monthly amount implied by the loan's strategy parameters"""
        amount = Decimal(str(self.amount or 0))

        if self.loan_strategy == LoanStrategy.FLAT:
            if self.flat_monthly_amount:
                return to_money(self.flat_monthly_amount)
            return to_money(amount / Decimal('12'))

        if self.custom_emi_amount:
            return to_money(self.custom_emi_amount)

        tenure = self.tenure if self.tenure and self.tenure > 0 else default_tenure
        return to_money(amount / Decimal(str(tenure)))

    @property
    def strategy_label(self):
        return (self.loan_strategy or LoanStrategy.EMI).upper()

    def to_dict(self):
        return {
            'id': self.id,
            'borrower_id': self.borrower_id,
            'amount': money_float(self.amount),
            'start_date': iso(self.start_date),
            'loan_strategy': self.loan_strategy,
            'tenure': self.tenure,
            'custom_emi_amount': money_float(self.custom_emi_amount),
            'flat_monthly_amount': money_float(self.flat_monthly_amount),
            'custom_due_date': iso(self.custom_due_date),
            'custom_payment_amount': money_float(self.custom_payment_amount),
            'pm_type': self.pm_type,
            'metal_weight': money_float(self.metal_weight),
            'purity': money_float(self.purity),
            'net_weight': money_float(self.net_weight),
            'amount_paid': money_float(self.amount_paid),
            'gold_silver_due_date': iso(self.gold_silver_due_date),
            'gold_silver_payment_amount': money_float(self.gold_silver_payment_amount),
            'gold_silver_notes': self.gold_silver_notes,
            'status': self.status,
            'created_at': iso(self.created_at),
        }

    def __repr__(self):
        return f'<Loan {self.id} ({self.loan_strategy})>'

class Payment(db.Model):
    """Scheduled or collected loan payment"""
    __tablename__ = 'payments'

    id = db.Column(db.Integer, primary_key=True)
    loan_id = db.Column(db.Integer, db.ForeignKey('loans.id'), nullable=False, index=True)

    due_date = db.Column(db.Date, nullable=False, index=True)
    amount = db.Column(db.Numeric(15, 2), nullable=False)
    # Cached classification; the live status is recomputed on every read
    status = db.Column(db.String(20), nullable=False, default=PaymentStatus.UPCOMING)

    paid_date = db.Column(db.Date)
    paid_amount = db.Column(db.Numeric(15, 2))
    due_amount = db.Column(db.Numeric(15, 2), default=0)  # Balance left after a partial payment
    payment_method = db.Column(db.String(50))  # cash, bank_transfer, upi, etc.
    notes = db.Column(db.Text)

    UPDATABLE_FIELDS = (
        'due_date', 'amount', 'status', 'paid_date', 'paid_amount',
        'due_amount', 'payment_method', 'notes'
    )

    @property
    def is_collected(self):
        return self.status == PaymentStatus.COLLECTED

    def mark_collected(self, paid_date, paid_amount=None, status=None,
                       payment_method=None, notes=None):
        """Record a collection; a short payment leaves a due_amount behind"""
        self.status = status or PaymentStatus.COLLECTED
        self.paid_date = paid_date

        amount = to_money(self.amount)
        if paid_amount is not None:
            self.paid_amount = to_money(paid_amount)
            self.due_amount = max(Decimal('0.00'), amount - self.paid_amount)
            if self.due_amount > 0:
                self.status = PaymentStatus.DUE_SOON
        else:
            self.paid_amount = amount
            self.due_amount = Decimal('0.00')

        if payment_method is not None:
            self.payment_method = payment_method
        if notes is not None:
            self.notes = notes

    def to_dict(self, today=None, window_days=5):
        """Serialize; with ``today`` the status is the live classification"""
        data = {
            'id': self.id,
            'loan_id': self.loan_id,
            'due_date': iso(self.due_date),
            'amount': money_float(self.amount),
            'status': self.status,
            'stored_status': self.status,
            'paid_date': iso(self.paid_date),
            'paid_amount': money_float(self.paid_amount),
            'due_amount': money_float(self.due_amount),
            'payment_method': self.payment_method,
            'notes': self.notes,
        }
        if today is not None:
            from lendledger.utils.status import live_status
            data['status'] = live_status(self, today, window_days)
        return data

    def __repr__(self):
        return f'<Payment {self.id} loan={self.loan_id} due={self.due_date}>'

# Activity Log Model
class ActivityLog(db.Model):
    """Activity log for audit trail"""
    __tablename__ = 'activity_logs'

    id = db.Column(db.Integer, primary_key=True)
    action = db.Column(db.String(100), nullable=False)
    entity_type = db.Column(db.String(50))  # borrower, loan, payment
    entity_id = db.Column(db.Integer)
    description = db.Column(db.Text)
    ip_address = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f'<ActivityLog {self.action}>'


def truncate_ledger():
    """Delete every payment, loan, borrower and activity row; returns counts"""
    counts = {
        'payments': Payment.query.delete(),
        'loans': Loan.query.delete(),
        'borrowers': Borrower.query.delete(),
        'activity_logs': ActivityLog.query.delete(),
    }
    db.session.commit()
    return counts
