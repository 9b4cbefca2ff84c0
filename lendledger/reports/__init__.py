"""Reports blueprint"""
from flask import Blueprint

reports_bp = Blueprint('reports', __name__)

from lendledger.reports import routes
