"""Static board geometry: the shared ring, home columns, yards and safe cells.

Everything here is immutable and shared by every match without locking.
Cells are (row, col) positions on the 15x15 grid.
"""

from types import MappingProxyType

from app.schemas.game_engine import (
    HOME_FINISH_INDEX,
    NO_POSITION,
    RING_LENGTH,
    Color,
    Token,
    TokenStatus,
)

Cell = tuple[int, int]

RING: tuple[Cell, ...] = (
    # Red start segment, right along row 6
    (6, 1), (6, 2), (6, 3), (6, 4), (6, 5),
    # Up col 6
    (5, 6), (4, 6), (3, 6), (2, 6), (1, 6), (0, 6),
    # Top connector (green home-entry)
    (0, 7),
    # Down col 8 (green start)
    (0, 8), (1, 8), (2, 8), (3, 8), (4, 8), (5, 8),
    # Right along row 6
    (6, 9), (6, 10), (6, 11), (6, 12), (6, 13), (6, 14),
    # Right connector (yellow home-entry)
    (7, 14),
    # Left along row 8 (yellow start)
    (8, 14), (8, 13), (8, 12), (8, 11), (8, 10), (8, 9),
    # Down col 8
    (9, 8), (10, 8), (11, 8), (12, 8), (13, 8), (14, 8),
    # Bottom connector (blue home-entry)
    (14, 7),
    # Up col 6 (blue start)
    (14, 6), (13, 6), (12, 6), (11, 6), (10, 6), (9, 6),
    # Left along row 8
    (8, 5), (8, 4), (8, 3), (8, 2), (8, 1), (8, 0),
    # Left connector (red home-entry)
    (7, 0),
)


# Ring index where a released token first appears
ENTRY_CELL = MappingProxyType(
    {Color.RED: 0, Color.GREEN: 13, Color.YELLOW: 26, Color.BLUE: 39}
)

# Ring index a token passes to peel off into its home column
HOME_ENTRY_CELL = MappingProxyType(
    {Color.RED: 50, Color.GREEN: 11, Color.YELLOW: 24, Color.BLUE: 37}
)

HOME_COLUMN = MappingProxyType(
    {
        Color.RED: ((7, 1), (7, 2), (7, 3), (7, 4), (7, 5)),
        Color.GREEN: ((1, 7), (2, 7), (3, 7), (4, 7), (5, 7)),
        Color.YELLOW: ((7, 13), (7, 12), (7, 11), (7, 10), (7, 9)),
        Color.BLUE: ((13, 7), (12, 7), (11, 7), (10, 7), (9, 7)),
    }
)

CENTER: Cell = (7, 7)

# Entry cells plus the four mid-ring stars
SAFE_CELLS = frozenset({0, 8, 13, 21, 26, 34, 39, 47})

YARD_SLOTS = MappingProxyType(
    {
        Color.RED: ((1, 1), (1, 3), (3, 1), (3, 3)),
        Color.GREEN: ((1, 11), (1, 13), (3, 11), (3, 13)),
        Color.YELLOW: ((11, 11), (11, 13), (13, 11), (13, 13)),
        Color.BLUE: ((11, 1), (11, 3), (13, 1), (13, 3)),
    }
)


def ring_distance(from_index: int, to_index: int) -> int:
    """Forward cyclic distance along the ring (0 when equal)."""
    return (to_index - from_index + RING_LENGTH) % RING_LENGTH


def is_safe_cell(ring_index: int) -> bool:
    return ring_index in SAFE_CELLS


def progress_from_entry(color: Color, ring_index: int) -> int:
    """Steps already travelled along the ring from the color's entry cell."""
    return ring_distance(ENTRY_CELL[color], ring_index)


def home_column_cell(color: Color, home_progress: int) -> Cell:
    if home_progress >= HOME_FINISH_INDEX:
        return CENTER
    return HOME_COLUMN[color][home_progress]


def token_cell(token: Token) -> Cell:
    """Grid cell currently occupied by a token."""
    if token.status == TokenStatus.YARD:
        return YARD_SLOTS[token.color][token.token_id]
    if token.status == TokenStatus.FINISHED:
        return CENTER
    if token.home_progress != NO_POSITION:
        return home_column_cell(token.color, token.home_progress)
    return RING[token.ring_position]


def move_path(token: Token, dice: int) -> list[Cell]:
    """Cells a token passes through for a move, ending on its landing cell.

    Assumes the move is legal for this roll.
    """
    color = token.color

    if token.status == TokenStatus.YARD:
        return [YARD_SLOTS[color][token.token_id], RING[ENTRY_CELL[color]]]

    if token.home_progress != NO_POSITION:
        end = min(token.home_progress + dice, HOME_FINISH_INDEX)
        return [home_column_cell(color, i) for i in range(token.home_progress + 1, end + 1)]

    path: list[Cell] = []
    home_entry = HOME_ENTRY_CELL[color]
    current = token.ring_position
    steps = dice
    while steps > 0:
        if current == home_entry:
            # Remaining steps run up the home column
            path.extend(home_column_cell(color, i) for i in range(steps))
            break
        current = (current + 1) % RING_LENGTH
        path.append(RING[current])
        steps -= 1
    return path
