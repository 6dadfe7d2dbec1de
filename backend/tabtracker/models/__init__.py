from .games import (
    StageGame,
    FinalClosedGame,
    GAME_FIELDS,
    LOCATION_STAGES,
    STAGE_INVENTORY,
    STAGE_OPEN,
    STAGE_CLOSED,
)
from .handling import TransportationEntry, OfficeEntry, DepositEntry
from .issues import GameIssue
from .kv import KvEntry

__all__ = [
    'StageGame', 'FinalClosedGame', 'GAME_FIELDS', 'LOCATION_STAGES',
    'STAGE_INVENTORY', 'STAGE_OPEN', 'STAGE_CLOSED',
    'TransportationEntry', 'OfficeEntry', 'DepositEntry',
    'GameIssue',
    'KvEntry',
]
