"""Payment forms"""
from wtforms import StringField, SelectField, DecimalField, IntegerField, DateField, TextAreaField
from wtforms.validators import DataRequired, Optional, NumberRange, Length
from lendledger.models import PaymentStatus
from lendledger.utils.forms import ApiForm

STATUS_CHOICES = [(status, status.replace('_', ' ').title()) for status in PaymentStatus.ALL]

class CollectPaymentForm(ApiForm):
    """Collection of a payment, in full or in part"""
    status = SelectField('Status', choices=STATUS_CHOICES, validators=[Optional()])
    paid_date = DateField('Paid Date', validators=[Optional()])
    paid_amount = DecimalField('Paid Amount', validators=[Optional(), NumberRange(min=0)], places=2)
    payment_method = StringField('Payment Method', validators=[Optional(), Length(max=50)])
    notes = TextAreaField('Notes', validators=[Optional()])

class PaymentUpdateForm(ApiForm):
    due_date = DateField('Due Date', validators=[Optional()])
    amount = DecimalField('Amount', validators=[Optional(), NumberRange(min=0)], places=2)
    status = SelectField('Status', choices=STATUS_CHOICES, validators=[Optional()])
    paid_date = DateField('Paid Date', validators=[Optional()])
    paid_amount = DecimalField('Paid Amount', validators=[Optional(), NumberRange(min=0)], places=2)
    due_amount = DecimalField('Due Amount', validators=[Optional(), NumberRange(min=0)], places=2)
    payment_method = StringField('Payment Method', validators=[Optional(), Length(max=50)])
    notes = TextAreaField('Notes', validators=[Optional()])

class BulkPaymentForm(ApiForm):
    """Run of monthly payments"""
    months = IntegerField('Months', validators=[DataRequired(message='months must be greater than 0'),
                                                NumberRange(min=1, message='months must be greater than 0')])
    custom_amount = DecimalField('Custom Amount', validators=[Optional(), NumberRange(min=0)], places=2)
    custom_due_date = DateField('First Due Date', validators=[Optional()])
