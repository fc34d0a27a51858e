"""
Models package. Exposes the process-wide DBStorage singleton as `storage`.
"""
from models.db_storage import DBStorage

storage = DBStorage()
storage.reload()
