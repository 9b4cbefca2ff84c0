"""Script to clear all borrower, loan and payment records"""
import os
from lendledger import create_app
from lendledger.models import Borrower, Loan, Payment, truncate_ledger

def clear_ledger(assume_yes=False):
    """Delete every record in the ledger after confirmation"""
    app = create_app(os.getenv('FLASK_ENV') or 'development')

    with app.app_context():
        print(f"Borrowers: {Borrower.query.count()}")
        print(f"Loans:     {Loan.query.count()}")
        print(f"Payments:  {Payment.query.count()}")

        if not assume_yes:
            confirm = input("\nDelete all of these records? (yes/no): ")
            if confirm.lower() != 'yes':
                print("Operation cancelled.")
                return None

        print("\nClearing database...")
        counts = truncate_ledger()

        print("\n✓ Database cleared successfully!")
        for table, count in counts.items():
            print(f"  - {table}: {count} deleted")
        return counts

if __name__ == '__main__':
    clear_ledger()
