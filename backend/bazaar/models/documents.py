from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Document(db.Model):
    """
    One document of the hierarchical store, addressed by its full path.

    WHY: Lets the SQL backend mirror Firestore's layout
    (organizations/{orgId}/events/{eventId}/{collection}/{docId}) so the
    same services run against either backend.

    DESIGN:
    - path is the primary key ("organizations/o1/events/e1/users/u1")
    - collection_path indexes children listing ("organizations/o1/events/e1/users")
    - body holds the JSON document data
    - version is SQLAlchemy's version_id_col: every UPDATE is guarded by
      "WHERE version = <version read>", giving optimistic conflict detection
    """
    __tablename__ = "documents"
    __table_args__ = (
        db.Index("ix_documents_collection_doc", "collection_path", "doc_id"),
    )

    path = db.Column(db.String(1024), primary_key=True)
    collection_path = db.Column(db.String(1024), nullable=False, index=True)
    doc_id = db.Column(db.String(255), nullable=False)

    body = db.Column(db.Text, nullable=False, default="{}")

    version = db.Column(db.Integer, nullable=False)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version}

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "collection_path": self.collection_path,
            "doc_id": self.doc_id,
            "version": self.version,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
