# Overview: Flask extension instances for the SQL session and the document store.

from flask_sqlalchemy import SQLAlchemy

from .docstore import Documents

db = SQLAlchemy()
documents = Documents()
