"""Utility decorators"""
from functools import wraps
from flask import abort
from lendledger import db
from lendledger.models import Loan

def loan_strategy_required(*strategies):
    """Load the loan named by ``loan_id`` and require one of ``strategies``

    The view receives the loan instead of its id.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(loan_id, *args, **kwargs):
            loan = db.session.get(Loan, loan_id)
            if loan is None:
                abort(404, description='Loan not found')

            if loan.loan_strategy not in strategies:
                allowed = ', '.join(strategies)
                abort(400, description=f'This operation is only available for {allowed} loans')

            return f(loan, *args, **kwargs)
        return decorated_function
    return decorator
