"""Helper functions"""
from datetime import date, datetime
from flask import current_app, request, jsonify, has_request_context
from werkzeug.datastructures import MultiDict
from lendledger import db
from lendledger.models import ActivityLog, Borrower

def parse_date(value):
    """Parse a YYYY-MM-DD string (or ISO timestamp) into a date"""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # Clients may send full ISO timestamps, only the calendar date matters
    return datetime.strptime(str(value)[:10], '%Y-%m-%d').date()

def get_today():
    """Today's date for status classification, honouring LEDGER_TODAY"""
    pinned = current_app.config.get('LEDGER_TODAY')
    if pinned:
        return parse_date(pinned)
    return date.today()

def get_due_soon_window():
    return current_app.config.get('DUE_SOON_WINDOW_DAYS', 5)

def get_defaulter_threshold():
    return current_app.config.get('DEFAULTER_THRESHOLD', 2)

def get_request_json():
    """Request body as a dict, empty when missing or not an object"""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}

def json_formdata(payload=None):
    """Convert a JSON body into form data WTForms can process

    Nulls are dropped so Optional() validators see missing fields, and
    scalars are stringified the way a browser would submit them.
    """
    if payload is None:
        payload = get_request_json()

    formdata = MultiDict()
    for key, value in payload.items():
        if value is None or isinstance(value, (dict, list)):
            continue
        if isinstance(value, bool):
            value = 'y' if value else ''
        formdata.add(key, str(value))
    return formdata

def changed_fields(form, payload, allowed):
    """Map of allowed field -> validated value for keys present in the body"""
    return {
        name: getattr(form, name).data
        for name in allowed
        if name in payload and hasattr(form, name)
    }

def form_error_response(form):
    """400 response listing WTForms validation errors"""
    return jsonify({'message': 'Validation failed', 'errors': form.errors}), 400

def log_activity(action, entity_type=None, entity_id=None, description=None):
    """Stage an audit trail row; the caller commits it with its change"""
    log = ActivityLog(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        description=description,
        ip_address=request.remote_addr if has_request_context() else None
    )
    db.session.add(log)
    return log

def next_borrower_id():
    """First unused borrower id counting up from 1"""
    existing_ids = {row[0] for row in db.session.query(Borrower.id).all()}
    next_id = 1
    while next_id in existing_ids:
        next_id += 1
    return next_id
