# src/autoturn/systems/movement.py
import logging

from autoturn.config import Settings
from autoturn.core.ledger import Pacer
from autoturn.models import ErrorKind, MovementPayload, MovementTarget, Outcome, OutcomeKind, Position, Token
from autoturn.storage.graph.scene_graph import SceneGraph
from autoturn.systems.targeting import nearest

logger = logging.getLogger(__name__)


class MovementSystem:
    """
    Moves a token to a waypoint, the nearest enemy or a named token.

    No pathfinding: the route is either a straight jump to the destination
    or the recorded waypoints, where the first waypoint is the square the
    route was recorded from and is not revisited. Only waypoint moves walk
    the route; moves toward a token jump straight there.
    """

    def __init__(self, scene: SceneGraph, settings: Settings):
        self.scene = scene
        self.settings = settings

    def find_destination(self, subject: Token, payload: MovementPayload) -> Position | None:
        if payload.target_type == MovementTarget.WAYPOINT and payload.waypoints:
            return payload.waypoints[-1]

        if payload.target_type == MovementTarget.NEAREST_ENEMY:
            hostiles = self.scene.hostiles_of(subject, reveal_hidden=self.settings.reveal_hidden_targets)
            enemy = nearest(self.scene, subject, hostiles)
            return enemy.position if enemy else None

        if payload.target_id:
            target = self.scene.get_token(payload.target_id)
            return target.position if target else None

        return None

    async def execute_movement(self, subject: Token, payload: MovementPayload, pacer: Pacer | None = None) -> Outcome:
        destination = self.find_destination(subject, payload)
        if destination is None:
            return Outcome.failure(ErrorKind.NO_VALID_DESTINATION, "No valid destination")

        follow_path = payload.target_type == MovementTarget.WAYPOINT and len(payload.waypoints) > 1
        if follow_path:
            distance = self.scene.path_distance([subject.position, *payload.waypoints[1:]])
        else:
            distance = self.scene.distance(subject.position, destination)

        max_distance = payload.max_distance or subject.speed or self.settings.default_speed
        if distance > max_distance:
            return Outcome.failure(
                ErrorKind.OUT_OF_RANGE,
                f"Destination exceeds movement range ({distance} ft > {max_distance} ft)",
            )

        if follow_path:
            for waypoint in payload.waypoints[1:]:
                self.scene.move_token(subject.id, waypoint)
                if pacer is not None and not await pacer.sleep(self.settings.waypoint_delay_ms / 1000):
                    # Stopped partway along the route
                    return Outcome(
                        success=True,
                        kind=OutcomeKind.MOVEMENT,
                        message=f"Movement interrupted at {waypoint.x}, {waypoint.y}",
                    )
        else:
            self.scene.move_token(subject.id, destination)

        message = f"Moved to {destination.x}, {destination.y}"
        logger.info("%s %s", subject.name, message.lower())
        return Outcome(success=True, kind=OutcomeKind.MOVEMENT, message=message)
