"""
Document Model

Rows of the local document store. Each row is one document addressed by
its slash-separated path; ``collection`` is the path of its parent.
"""

from datetime import datetime
from academy.extensions import db


class Document(db.Model):
    """A JSON document stored at a path"""
    __tablename__ = 'documents'

    path = db.Column(db.String(512), primary_key=True)
    collection = db.Column(db.String(512), nullable=False, index=True)
    doc_id = db.Column(db.String(128), nullable=False)
    data = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<Document {self.path}>'
