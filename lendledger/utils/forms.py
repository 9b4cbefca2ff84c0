"""Base form for JSON request bodies"""
from flask_wtf import FlaskForm

class ApiForm(FlaskForm):
    """FlaskForm fed from a JSON body instead of a browser submission"""

    class Meta:
        csrf = False
