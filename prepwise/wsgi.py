# prepwise/wsgi.py
from prepwise.app import create_app

app = create_app()
