"""Live room status enum."""

from enum import Enum


class RoomStatus(str, Enum):
    """Live room lifecycle states.

    State Transition Flow:

    SINGLE ⇄ PK_CONNECTED
      ↓    ↘      ↓
    CLOSED  PK_INVITING → CLOSED

    State Descriptions:
    - SINGLE: Room is live on its own and can be paired. Set by create_room() and when a PK ends.
    - PK_INVITING: Reserved for a two-phase invite/accept protocol; no operation enters it yet.
    - PK_CONNECTED: Room is paired with pk_partner. Set by request_pk() on both rooms at once.
    - CLOSED: Room closed by its creator. Releases the room name.

    Terminal states (no further transitions): CLOSED
    """

    SINGLE = "single"
    PK_INVITING = "pk_inviting"
    PK_CONNECTED = "pk_connected"
    CLOSED = "closed"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def open_states(cls) -> list["RoomStatus"]:
        """States of rooms that are still live (hold their name)."""
        return [
            RoomStatus.SINGLE,
            RoomStatus.PK_INVITING,
            RoomStatus.PK_CONNECTED,
        ]


__all__ = ["RoomStatus"]
