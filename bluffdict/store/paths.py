"""Document paths used by the game services."""

ROOMS = "rooms"


def room_path(room_id: str) -> str:
    return f"{ROOMS}/{room_id}"


def players_path(room_id: str) -> str:
    return f"{ROOMS}/{room_id}/players"


def player_path(room_id: str, actor_id: str) -> str:
    return f"{players_path(room_id)}/{actor_id}"


def rounds_path(room_id: str) -> str:
    return f"{ROOMS}/{room_id}/rounds"


def round_path(room_id: str, round_id: str) -> str:
    return f"{rounds_path(room_id)}/{round_id}"


def submissions_path(room_id: str, round_id: str) -> str:
    return f"{round_path(room_id, round_id)}/submissions"


def submission_path(room_id: str, round_id: str, actor_id: str) -> str:
    return f"{submissions_path(room_id, round_id)}/{actor_id}"


def votes_path(room_id: str, round_id: str) -> str:
    return f"{round_path(room_id, round_id)}/votes"


def vote_path(room_id: str, round_id: str, actor_id: str) -> str:
    return f"{votes_path(room_id, round_id)}/{actor_id}"


def round_id_for(round_index: int) -> str:
    """Round documents are named after their 1-based index."""
    return f"r{round_index}"


def parse_path(path: str) -> dict:
    """
    Split a document path into its room, round and collection parts.

    Returns:
        Dict with room_id, round_id (or None) and kind, one of
        "room", "player", "round", "submission", "vote" or "unknown"
    """
    parts = path.split("/")
    info = {"room_id": None, "round_id": None, "kind": "unknown"}
    if len(parts) < 2 or parts[0] != ROOMS:
        return info
    info["room_id"] = parts[1]
    if len(parts) == 2:
        info["kind"] = "room"
    elif len(parts) == 4 and parts[2] == "players":
        info["kind"] = "player"
    elif len(parts) >= 4 and parts[2] == "rounds":
        info["round_id"] = parts[3]
        if len(parts) == 4:
            info["kind"] = "round"
        elif len(parts) == 6 and parts[4] == "submissions":
            info["kind"] = "submission"
        elif len(parts) == 6 and parts[4] == "votes":
            info["kind"] = "vote"
    return info
