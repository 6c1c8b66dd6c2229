# scripts/db/__init__.py
from .seed_db import seed_db, seed_from_csv
from .data_template import *
