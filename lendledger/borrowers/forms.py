"""Borrower forms"""
from wtforms import StringField, IntegerField, TextAreaField
from wtforms.validators import DataRequired, Optional, Length, NumberRange
from lendledger.utils.forms import ApiForm

class BorrowerForm(ApiForm):
    """New borrower"""
    id = IntegerField('Borrower ID', validators=[Optional(), NumberRange(min=1)])
    name = StringField('Name', validators=[DataRequired(), Length(max=200)])
    phone = StringField('Phone', validators=[DataRequired(), Length(max=20)])
    address = TextAreaField('Address', validators=[DataRequired()])
    document_type = StringField('Document Type', validators=[Optional(), Length(max=50)])
    document_number = StringField('Document Number', validators=[Optional(), Length(max=50)])

    # Guarantor
    guarantor_name = StringField('Guarantor Name', validators=[Optional(), Length(max=200)])
    guarantor_phone = StringField('Guarantor Phone', validators=[Optional(), Length(max=20)])
    guarantor_address = TextAreaField('Guarantor Address', validators=[Optional()])

    notes = TextAreaField('Notes', validators=[Optional()])
    photo_url = StringField('Photo URL', validators=[Optional(), Length(max=255)])

class BorrowerUpdateForm(ApiForm):
    """Partial borrower update; id and document number are not editable"""
    name = StringField('Name', validators=[Optional(), Length(max=200)])
    phone = StringField('Phone', validators=[Optional(), Length(max=20)])
    address = TextAreaField('Address', validators=[Optional()])
    document_type = StringField('Document Type', validators=[Optional(), Length(max=50)])
    guarantor_name = StringField('Guarantor Name', validators=[Optional(), Length(max=200)])
    guarantor_phone = StringField('Guarantor Phone', validators=[Optional(), Length(max=20)])
    guarantor_address = TextAreaField('Guarantor Address', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])
    photo_url = StringField('Photo URL', validators=[Optional(), Length(max=255)])

class NotesForm(ApiForm):
    notes = TextAreaField('Notes', validators=[Optional()])
