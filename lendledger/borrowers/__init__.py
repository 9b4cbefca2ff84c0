"""Borrowers blueprint"""
from flask import Blueprint

borrowers_bp = Blueprint('borrowers', __name__)

from lendledger.borrowers import routes
