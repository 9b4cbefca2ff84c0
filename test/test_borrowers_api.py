"""
Test the borrower endpoints
"""
from datetime import date
from lendledger.models import Borrower, Loan, Payment, ActivityLog, PaymentStatus


def test_create_borrower(client):
    response = client.post('/api/borrowers', json={
        'name': 'Asha Rao',
        'phone': '9876543210',
        'address': '4 Market Road',
        'guarantor_name': 'Vikram Rao',
        'document_type': 'aadhaar',
        'document_number': 'XXXX-1234',
    })

    assert response.status_code == 201
    data = response.get_json()
    assert data['id'] == 1
    assert data['guarantor_name'] == 'Vikram Rao'
    assert ActivityLog.query.filter_by(action='create_borrower').count() == 1


def test_create_borrower_requires_name_phone_address(client):
    response = client.post('/api/borrowers', json={'name': 'No Phone'})

    assert response.status_code == 400
    errors = response.get_json()['errors']
    assert 'phone' in errors
    assert 'address' in errors
    assert Borrower.query.count() == 0


def test_create_borrower_with_explicit_id(client):
    response = client.post('/api/borrowers', json={
        'id': 42, 'name': 'Asha', 'phone': '1', 'address': 'x'
    })

    assert response.status_code == 201
    assert response.get_json()['id'] == 42


def test_create_borrower_with_taken_id_conflicts(client, make_borrower):
    borrower = make_borrower()

    response = client.post('/api/borrowers', json={
        'id': borrower.id, 'name': 'Asha', 'phone': '1', 'address': 'x'
    })

    assert response.status_code == 409


def test_next_id_fills_first_gap(client, make_borrower):
    for borrower_id in (1, 2, 4):
        make_borrower(id=borrower_id)

    response = client.get('/api/borrowers/next-id')

    assert response.get_json() == {'next_id': 3}


def test_get_missing_borrower_is_404(client):
    response = client.get('/api/borrowers/99')

    assert response.status_code == 404
    assert response.get_json()['message'] == 'Borrower not found'


def test_update_borrower_changes_only_given_fields(client, make_borrower):
    borrower = make_borrower(document_number='DOC-1', notes='old')

    response = client.put(f'/api/borrowers/{borrower.id}', json={
        'phone': '5550001111',
        'document_number': 'HACKED',
        'id': 77,
    })

    assert response.status_code == 200
    data = response.get_json()
    assert data['phone'] == '5550001111'
    assert data['name'] == 'Asha Rao'
    assert data['notes'] == 'old'
    assert data['document_number'] == 'DOC-1'
    assert data['id'] == borrower.id


def test_update_borrower_cannot_blank_required_field(client, make_borrower):
    borrower = make_borrower()

    response = client.put(f'/api/borrowers/{borrower.id}', json={'name': ''})

    assert response.status_code == 400


def test_update_notes(client, make_borrower):
    borrower = make_borrower()

    response = client.post(f'/api/borrowers/{borrower.id}/notes', json={'notes': 'Prefers evening calls'})

    assert response.status_code == 200
    assert response.get_json()['notes'] == 'Prefers evening calls'


def test_delete_borrower_cascades(client, make_loan, make_payment):
    loan = make_loan()
    make_payment(loan, date(2024, 7, 15))
    borrower_id = loan.borrower_id

    response = client.delete(f'/api/borrowers/{borrower_id}')

    assert response.status_code == 200
    assert Borrower.query.count() == 0
    assert Loan.query.count() == 0
    assert Payment.query.count() == 0


def test_list_borrowers_with_status(client, make_borrower, make_loan, make_payment):
    missed = make_borrower(name='Missed Borrower')
    current = make_borrower(name='Current Borrower')
    make_borrower(name='Idle Borrower')

    missed_loan = make_loan(borrower=missed)
    make_payment(missed_loan, date(2024, 6, 1))
    current_loan = make_loan(borrower=current)
    make_payment(current_loan, date(2024, 7, 1), amount='1200')

    response = client.get('/api/borrowers')

    assert response.status_code == 200
    by_name = {item['name']: item for item in response.get_json()}
    assert by_name['Missed Borrower']['status'] == 'Missed'
    assert by_name['Current Borrower']['status'] == 'Current'
    assert by_name['Current Borrower']['next_payment_date'] == '2024-07-01'
    assert by_name['Current Borrower']['next_payment_amount'] == 1200.0
    assert by_name['Idle Borrower']['status'] == 'No Loan'
    assert by_name['Idle Borrower']['latest_loan'] is None


def test_search_borrowers(client, make_borrower):
    make_borrower(name='Asha Rao', phone='111')
    make_borrower(name='Kiran Das', phone='222')

    response = client.get('/api/borrowers?search=kiran')

    assert [item['name'] for item in response.get_json()] == ['Kiran Das']


def test_borrower_loans_include_next_payment(client, make_loan, make_payment):
    loan = make_loan()
    make_payment(loan, date(2024, 6, 1))
    make_payment(loan, date(2024, 7, 1))

    response = client.get(f'/api/borrowers/{loan.borrower_id}/loans')

    data = response.get_json()
    assert len(data) == 1
    assert data[0]['next_payment_date'] == '2024-07-01'


def test_borrower_status_reports_defaulter(client, make_loan, make_payment):
    loan = make_loan()
    make_payment(loan, date(2024, 5, 1), amount='1000')
    make_payment(loan, date(2024, 6, 1), amount='1000')
    make_payment(loan, date(2024, 7, 1), amount='1000')

    response = client.get(f'/api/borrowers/{loan.borrower_id}/status')

    data = response.get_json()
    assert data['status'] == 'Missed'
    assert data['defaulter']['is_defaulter'] is True
    assert data['defaulter']['consecutive_missed'] == 2
    assert data['defaulter']['total_outstanding'] == 2000.0
    assert data['next_payment']['status'] == PaymentStatus.OVERDUE
    assert data['next_payment_by_loan'][str(loan.id)] == '2024-07-01'
