"""
Persistence package. `storage` is bound to an app's DATABASE_URL by create_app().
"""
from models.db_storage import DBStorage

storage = DBStorage()
