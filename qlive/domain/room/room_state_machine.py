"""Room state machine for managing status transitions."""

from qlive.schemas import RoomStatus


class RoomStateMachine:
    """State machine for managing live room status transitions.

    State flow with triggers:
    - SINGLE (room created) -> PK_CONNECTED (request_pk) | CLOSED (close_room)
    - PK_CONNECTED -> SINGLE (end_pk, or the partner room closed) | CLOSED (close_room)
    - PK_INVITING -> PK_CONNECTED | SINGLE | CLOSED (reserved for a two-phase invite)
    - CLOSED is terminal
    """

    TRANSITIONS: dict[RoomStatus, set[RoomStatus]] = {
        RoomStatus.SINGLE: {
            RoomStatus.PK_INVITING,
            RoomStatus.PK_CONNECTED,
            RoomStatus.CLOSED,
        },
        RoomStatus.PK_INVITING: {
            RoomStatus.PK_CONNECTED,
            RoomStatus.SINGLE,
            RoomStatus.CLOSED,
        },
        RoomStatus.PK_CONNECTED: {
            RoomStatus.SINGLE,
            RoomStatus.CLOSED,
        },
        RoomStatus.CLOSED: set(),
    }

    TERMINAL_STATES: set[RoomStatus] = {RoomStatus.CLOSED}

    @classmethod
    def can_transition(cls, current: RoomStatus, new: RoomStatus) -> bool:
        """Check if status transition is valid."""
        return new in cls.TRANSITIONS.get(current, set())

    @classmethod
    def is_terminal(cls, status: RoomStatus) -> bool:
        return status in cls.TERMINAL_STATES

    @classmethod
    def get_valid_transitions(cls, status: RoomStatus) -> set[RoomStatus]:
        return cls.TRANSITIONS.get(status, set())

    @classmethod
    def get_valid_sources(cls, target: RoomStatus) -> set[RoomStatus]:
        """Get all statuses that can transition to the target status.

        Used to build the `from_states` filter of a conditional update.
        """
        return {status for status, targets in cls.TRANSITIONS.items() if target in targets}
