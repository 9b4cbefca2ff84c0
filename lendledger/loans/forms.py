"""Loan forms"""
from wtforms import StringField, SelectField, DecimalField, IntegerField, DateField, TextAreaField
from wtforms.validators import DataRequired, Optional, NumberRange
from lendledger.models import LoanStrategy
from lendledger.utils.forms import ApiForm

STRATEGY_CHOICES = [(strategy, strategy.upper()) for strategy in LoanStrategy.ALL]
METAL_CHOICES = [('gold', 'Gold'), ('silver', 'Silver')]

class LoanTermsForm(ApiForm):
    """Strategy parameters shared by loan creation and update"""
    loan_strategy = SelectField('Loan Strategy', choices=STRATEGY_CHOICES, validators=[Optional()])

    # EMI
    # Zero or negative tenure falls back to the default schedule length
    tenure = IntegerField('Tenure (Months)', validators=[Optional()])
    custom_emi_amount = DecimalField('Custom EMI Amount', validators=[Optional(), NumberRange(min=0)], places=2)

    # FLAT
    flat_monthly_amount = DecimalField('Flat Monthly Amount', validators=[Optional(), NumberRange(min=0)], places=2)

    # CUSTOM
    custom_due_date = DateField('Custom Due Date', validators=[Optional()])
    custom_payment_amount = DecimalField('Custom Payment Amount', validators=[Optional(), NumberRange(min=0)], places=2)

    # GOLD_SILVER
    pm_type = SelectField('Metal', choices=METAL_CHOICES, validators=[Optional()])
    metal_weight = DecimalField('Metal Weight (g)', validators=[Optional(), NumberRange(min=0)], places=3)
    purity = DecimalField('Purity (%)', validators=[Optional(), NumberRange(min=0, max=100)], places=2)
    net_weight = DecimalField('Net Weight (g)', validators=[Optional(), NumberRange(min=0)], places=3)
    amount_paid = DecimalField('Amount Paid', validators=[Optional(), NumberRange(min=0)], places=2)
    gold_silver_due_date = DateField('Due Date', validators=[Optional()])
    gold_silver_payment_amount = DecimalField('Payment Amount', validators=[Optional(), NumberRange(min=0)], places=2)
    gold_silver_notes = TextAreaField('Notes', validators=[Optional()])

class LoanForm(LoanTermsForm):
    """New loan"""
    borrower_id = IntegerField('Borrower ID', validators=[DataRequired()])
    amount = DecimalField('Loan Amount', validators=[DataRequired(), NumberRange(min=0.01)], places=2)
    start_date = DateField('Start Date', validators=[DataRequired()])

class LoanUpdateForm(LoanTermsForm):
    amount = DecimalField('Loan Amount', validators=[Optional(), NumberRange(min=0.01)], places=2)
    start_date = DateField('Start Date', validators=[Optional()])

class CustomPaymentForm(ApiForm):
    """Single hand-entered payment for custom and gold/silver loans"""
    amount = DecimalField('Amount', validators=[DataRequired(), NumberRange(min=0.01)], places=2)
    due_date = DateField('Due Date', validators=[DataRequired()])
    notes = StringField('Notes', validators=[Optional()])
