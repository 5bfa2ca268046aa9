from sqlalchemy.orm import Session
from typing import Dict, List, Optional

from infinity_timeline.models.node_resources import KanbanBoard, KanbanCard
from infinity_timeline.schemas.node_resources import KanbanCardCreate


def get_board(db: Session, board_id: int) -> Optional[KanbanBoard]:
    return db.query(KanbanBoard).filter(KanbanBoard.id == board_id).first()


def get_boards(db: Session, node_id: int) -> List[KanbanBoard]:
    return (
        db.query(KanbanBoard)
        .filter(KanbanBoard.node_id == node_id)
        .order_by(KanbanBoard.position, KanbanBoard.id)
        .all()
    )


def get_cards_by_board(db: Session, board_ids: List[int]) -> Dict[int, List[KanbanCard]]:
    """Group the cards of several boards, each list ordered by position."""
    cards_by_board: Dict[int, List[KanbanCard]] = {board_id: [] for board_id in board_ids}
    if not board_ids:
        return cards_by_board

    cards = (
        db.query(KanbanCard)
        .filter(KanbanCard.board_id.in_(board_ids))
        .order_by(KanbanCard.position, KanbanCard.id)
        .all()
    )
    for card in cards:
        cards_by_board[card.board_id].append(card)
    return cards_by_board


def create_board(db: Session, node_id: int, title: str) -> KanbanBoard:
    # New boards go after the existing ones
    position = db.query(KanbanBoard).filter(KanbanBoard.node_id == node_id).count()
    db_board = KanbanBoard(node_id=node_id, title=title, position=position)
    db.add(db_board)
    db.commit()
    db.refresh(db_board)
    return db_board


def get_card(db: Session, card_id: int) -> Optional[KanbanCard]:
    return db.query(KanbanCard).filter(KanbanCard.id == card_id).first()


def create_card(db: Session, board_id: int, card: KanbanCardCreate) -> KanbanCard:
    position = db.query(KanbanCard).filter(KanbanCard.board_id == board_id).count()
    db_card = KanbanCard(board_id=board_id, position=position, **card.model_dump())
    db.add(db_card)
    db.commit()
    db.refresh(db_card)
    return db_card


def delete_card(db: Session, db_card: KanbanCard) -> KanbanCard:
    db.delete(db_card)
    db.commit()
    return db_card
