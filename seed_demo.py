# seed_demo.py
# Creates a demo account with the sample documents, shares and contacts.
import os
from app import create_app
from app.utils.seed import seed_demo

app = create_app()

with app.app_context():
    email = os.getenv('DEMO_EMAIL', 'demo@vaultguard.local')
    password = os.getenv('DEMO_PASSWORD', 'Demo-Vault-2025!')
    user = seed_demo(email, password)
    if user is None:
        print(f"Account {email} already exists, nothing to do.")
    else:
        app.logger.info("Demo account created")
        print("Demo account created!")
        print(f"Email    : {email}")
        print(f"Password : {password}")
