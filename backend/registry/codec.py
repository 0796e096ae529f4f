import json
from dataclasses import dataclass

from registry.errors import EncodingError


@dataclass(frozen=True)
class UserRecord:
    username: str
    matches_won: int = 0

    def to_dict(self):
        return {
            'username': self.username,
            'matchesWon': self.matches_won,
        }


def encode_record(record: UserRecord) -> str:
    return json.dumps(record.to_dict())


def decode_record(raw, expected_username=None) -> UserRecord:
    """Decode a stored value into a UserRecord.

    Raises EncodingError when the value is not a JSON object carrying a
    non-empty string ``username`` and an integer ``matchesWon``, or when
    ``expected_username`` is given and does not match.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode('utf-8')
        except UnicodeDecodeError as exc:
            raise EncodingError('stored value is not valid UTF-8') from exc
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise EncodingError(f'stored value is not valid JSON: {exc}') from exc
    if not isinstance(data, dict):
        raise EncodingError('stored value is not a JSON object')

    username = data.get('username')
    if not isinstance(username, str) or not username:
        raise EncodingError('stored record has no username')
    # A missing counter decodes as 0, the creation default
    matches_won = data.get('matchesWon', 0)
    # bool is an int subclass; reject it explicitly
    if isinstance(matches_won, bool) or not isinstance(matches_won, int):
        raise EncodingError(f'stored record for {username!r} has a non-integer matchesWon')
    if expected_username is not None and username != expected_username:
        raise EncodingError(f'stored record username {username!r} does not match key {expected_username!r}')
    return UserRecord(username=username, matches_won=matches_won)
