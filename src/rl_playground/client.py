"""HTTP client for the external prediction service."""

from typing import Any, Optional, Union

import httpx

from .board import Board, Direction, GameKind, GridPosition, Move
from .codec import Action, decode_action, decode_policy_records, encode
from .config.models import ServiceConfig
from .exceptions import (
    MalformedResponseError,
    ServiceError,
    ServiceUnreachableError,
)
from .policy_table import PolicyTable, build_policy_table


class PredictionClient:
    """
    Sole network boundary to the agent's prediction service.

    The client holds no session state: every call is a self-contained GET
    request, so one instance may be shared by any number of sessions.
    No retries are performed; failures are raised to the caller.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Service configuration (default: ServiceConfig())
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.config = config or ServiceConfig()
        self._http = httpx.Client(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def __enter__(self) -> "PredictionClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._http.close()

    def request_action(
        self, game: GameKind, board: Union[Board, GridPosition]
    ) -> Action:
        """
        Ask the agent for its best action on a board.

        Args:
            game: Game the board belongs to
            board: Current board or grid position

        Returns:
            Move for the marking game, Direction for the grid game

        Raises:
            ServiceUnreachableError: On transport failure or timeout
            ServiceError: On a non-success status
            MalformedResponseError: If the body is not a valid action
        """
        path = self.config.action_path.format(game=game.value)
        body = self._get_json(path, params={"state": encode(board)})
        return decode_action(body, game)

    def request_move(self, board: Board) -> Move:
        """Ask the agent for its next marking-game move."""
        action = self.request_action(GameKind.TIC_TAC_TOE, board)
        if not isinstance(action, Move):
            raise MalformedResponseError(f"Expected a board move, got {action!r}")
        return action

    def request_grid_action(self, position: GridPosition) -> Direction:
        """Ask the agent which way to go from a grid position."""
        action = self.request_action(GameKind.GRID, position)
        if not isinstance(action, Direction):
            raise MalformedResponseError(f"Expected a direction, got {action!r}")
        return action

    def request_full_policy(self, game: GameKind = GameKind.GRID) -> PolicyTable:
        """
        Fetch the agent's complete policy and rebuild it as a table.

        Args:
            game: Game whose policy to fetch

        Returns:
            Dense policy table

        Raises:
            ServiceUnreachableError: On transport failure or timeout
            ServiceError: On a non-success status
            MalformedResponseError: If a policy record is invalid
            MalformedPolicyTableError: If the records do not form a dense table
        """
        path = self.config.policy_path.format(game=game.value)
        body = self._get_json(path)
        return build_policy_table(decode_policy_records(body))

    def _get_json(self, path: str, params: Optional[dict] = None) -> Any:
        """Issue a GET request and return the parsed JSON body."""
        try:
            response = self._http.get(path, params=params)
        except httpx.TransportError as e:
            raise ServiceUnreachableError(
                f"Prediction service at {self.config.base_url} is unreachable: {e}"
            ) from e

        if not response.is_success:
            raise ServiceError(
                f"Prediction service returned {response.status_code} for {path}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response body is not valid JSON: {e}") from e
