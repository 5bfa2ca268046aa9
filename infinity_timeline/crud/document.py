from sqlalchemy.orm import Session
from typing import List, Optional

from infinity_timeline.models.node_resources import NodeDocument


def get_document(db: Session, document_id: int) -> Optional[NodeDocument]:
    return db.query(NodeDocument).filter(NodeDocument.id == document_id).first()


def get_documents(db: Session, node_id: int) -> List[NodeDocument]:
    """Documents are read newest first."""
    return (
        db.query(NodeDocument)
        .filter(NodeDocument.node_id == node_id)
        .order_by(NodeDocument.created_at.desc(), NodeDocument.id.desc())
        .all()
    )


def create_document(
    db: Session,
    *,
    node_id: int,
    title: str,
    file_path: str,
    file_type: Optional[str],
    file_size: Optional[int],
    uploaded_by: Optional[int] = None,
) -> NodeDocument:
    db_document = NodeDocument(
        node_id=node_id,
        title=title,
        file_path=file_path,
        file_type=file_type,
        file_size=file_size,
        uploaded_by=uploaded_by,
    )
    db.add(db_document)
    db.commit()
    db.refresh(db_document)
    return db_document


def delete_document(db: Session, db_document: NodeDocument) -> NodeDocument:
    db.delete(db_document)
    db.commit()
    return db_document
