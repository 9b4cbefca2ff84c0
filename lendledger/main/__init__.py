"""Dashboard blueprint"""
from flask import Blueprint

main_bp = Blueprint('main', __name__)

from lendledger.main import routes
