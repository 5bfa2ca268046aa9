import enum


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    CLIENTE = "CLIENTE"


class NodeType(str, enum.Enum):
    SERVICE = "service"
    PRODUCT = "product"
    DELIVERABLE = "deliverable"
    LINK = "link"
    DOCUMENT = "document"
    MEDIA = "media"
    YOUTUBE = "youtube"
    KANBAN = "kanban"
    MILESTONE = "milestone"
    CUSTOM = "custom"


class NodeShape(str, enum.Enum):
    ROUNDED = "rounded"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    DIAMOND = "diamond"
    HEXAGON = "hexagon"


class TemplateItemCategory(str, enum.Enum):
    FASE = "FASE"
    MES = "MES"
    FOCO = "FOCO"
    ENTREGAVEL = "ENTREGAVEL"
    SESSAO = "SESSAO"
    CONSULTORIA = "CONSULTORIA"
    TREINAMENTO = "TREINAMENTO"


class TimelineItemStatus(str, enum.Enum):
    PENDENTE = "PENDENTE"
    EM_ANDAMENTO = "EM_ANDAMENTO"
    CONCLUIDO = "CONCLUIDO"


class ProgressStatus(str, enum.Enum):
    NO_PRAZO = "NO_PRAZO"
    ADIANTADO = "ADIANTADO"
    ATRASADO = "ATRASADO"


class IndicationStatus(str, enum.Enum):
    PENDENTE = "PENDENTE"
    CONCLUIDO = "CONCLUIDO"
    REJEITADO = "REJEITADO"
