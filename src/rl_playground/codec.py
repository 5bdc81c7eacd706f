"""Translation between board models and the prediction service wire format."""

from typing import Any, List, Union

from pydantic import ValidationError

from .board import Board, Direction, GameKind, GridPosition, Move
from .exceptions import MalformedResponseError
from .policy_table import PolicyRecord, StateDescriptor

Action = Union[Move, Direction]


def encode(board: Union[Board, GridPosition]) -> str:
    """
    Encode a board as the JSON text carried in a prediction request.

    The output depends only on the board's content: field order is fixed
    and no whitespace is emitted, so equal boards encode identically.

    Args:
        board: Marking-game board or grid position

    Returns:
        Compact JSON string
    """
    return board.model_dump_json()


def decode_action(raw: Any, game: GameKind) -> Action:
    """
    Decode a single-action response.

    Args:
        raw: Parsed JSON response body
        game: Game the action was requested for

    Returns:
        Move for the marking game, Direction for the grid game

    Raises:
        MalformedResponseError: If raw is not a valid action for the game
    """
    if game == GameKind.GRID:
        return _decode_direction(raw)
    return _decode_coordinate(raw)


def decode_policy_records(raw: Any) -> List[PolicyRecord]:
    """
    Decode a full-policy response into policy records.

    Each element must be a two-element array of a state descriptor object
    (with a position) and a direction token.

    Args:
        raw: Parsed JSON response body

    Returns:
        Records in the order the service sent them

    Raises:
        MalformedResponseError: On the first invalid element, with its index
    """
    if not isinstance(raw, list):
        raise MalformedResponseError(
            f"Policy response must be a list, got {type(raw).__name__}"
        )

    records = []
    for index, item in enumerate(raw):
        if not isinstance(item, (list, tuple)) or len(item) != 2:
            raise MalformedResponseError(
                f"Policy record {index} must be a [state, action] pair", index=index
            )
        try:
            state = StateDescriptor.model_validate(item[0])
        except ValidationError as e:
            raise MalformedResponseError(
                f"Policy record {index} has an invalid state: {e.errors()[0]['msg']}",
                index=index,
            ) from e
        try:
            action = _decode_direction(item[1])
        except MalformedResponseError as e:
            raise MalformedResponseError(
                f"Policy record {index} has an invalid action: {e}", index=index
            ) from e
        records.append(PolicyRecord(state=state, action=action))

    return records


def _decode_coordinate(raw: Any) -> Move:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise MalformedResponseError(f"Expected a [row, col] pair, got {raw!r}")
    row, col = raw
    for value in (row, col):
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise MalformedResponseError(f"Invalid coordinate in {raw!r}")
    return Move(row, col)


def _decode_direction(raw: Any) -> Direction:
    if not isinstance(raw, str):
        raise MalformedResponseError(f"Expected a direction token, got {raw!r}")
    try:
        return Direction(raw)
    except ValueError:
        valid = ", ".join(d.value for d in Direction)
        raise MalformedResponseError(
            f"Unknown direction {raw!r}. Valid directions: {valid}"
        ) from None
