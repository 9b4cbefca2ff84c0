#!/usr/bin/env python3
"""Application entry point"""
import os
import sys

def init_database():
    """Initialize the database"""
    from lendledger import create_app, db
    app = create_app(os.getenv('FLASK_ENV') or 'development')
    with app.app_context():
        db.create_all()
        print("Database initialized!")

def clear_database():
    """Delete every ledger record after confirmation"""
    from clear_db import clear_ledger
    clear_ledger()

if __name__ == '__main__':
    # Handle command-line arguments
    if len(sys.argv) > 1:
        command = sys.argv[1]
        if command == 'init-db':
            init_database()
        elif command == 'clear-db':
            clear_database()
        else:
            print("Unknown command: {}".format(command))
            print("Available commands: init-db, clear-db")
            sys.exit(1)
    else:
        # Run the Flask development server
        from lendledger import create_app
        app = create_app(os.getenv('FLASK_ENV') or 'development')
        app.run(host='0.0.0.0', port=int(os.getenv('PORT', 5000)), debug=app.config.get('DEBUG', False))
