import logging
from dataclasses import dataclass, field
from typing import List, Optional

from registry.codec import UserRecord, decode_record, encode_record
from registry.errors import EncodingError, NotFoundError, StoreError, ValidationError
from registry.store import KVStore

logger = logging.getLogger(__name__)


@dataclass
class CreateResult:
    record: UserRecord
    created: bool


@dataclass
class ListResult:
    records: List[UserRecord] = field(default_factory=list)
    skipped: int = 0
    next_cursor: Optional[str] = None
    has_more: bool = False


def _require_username(username) -> str:
    if not isinstance(username, str) or not username:
        raise ValidationError('username is required')
    return username


# Counters are bounded to the signed 64-bit range
MATCHES_WON_MIN = -(2 ** 63)
MATCHES_WON_MAX = 2 ** 63 - 1


def _check_range(value: int) -> int:
    if not MATCHES_WON_MIN <= value <= MATCHES_WON_MAX:
        raise ValidationError('invalid matchesWon value')
    return value


def parse_matches_won(text) -> int:
    """Parse a decimal integer counter. Negative values are accepted."""
    if isinstance(text, bool):
        raise ValidationError('invalid matchesWon value')
    if isinstance(text, int):
        return _check_range(text)
    if not isinstance(text, str):
        raise ValidationError('invalid matchesWon value')
    # int() also accepts whitespace, underscores and non-ASCII digits; only plain decimals are valid here
    body = text[1:] if text[:1] in ('+', '-') else text
    if not body or not body.isascii() or not body.isdigit():
        raise ValidationError('invalid matchesWon value')
    digits = body.lstrip('0') or '0'
    # No 64-bit value has more than 19 significant digits
    if len(digits) > 19:
        raise ValidationError('invalid matchesWon value')
    value = int(digits)
    return _check_range(-value if text[:1] == '-' else value)


class RecordService:
    """Record lifecycle on top of a KVStore.

    Keys are ``key_prefix + username``. Every read path decodes and
    validates the stored value before handing it back.
    """

    def __init__(self, store: KVStore, key_prefix: str = ''):
        self.store = store
        self.key_prefix = key_prefix or ''

    def key_for(self, username: str) -> str:
        return f"{self.key_prefix}{username}"

    def username_for(self, key: str) -> Optional[str]:
        if not key.startswith(self.key_prefix):
            return None
        return key[len(self.key_prefix):] or None

    def _load(self, username: str) -> UserRecord:
        raw = self.store.get(self.key_for(username))
        if raw is None:
            raise NotFoundError('User not found')
        return decode_record(raw, expected_username=username)

    def create_if_absent(self, username) -> CreateResult:
        username = _require_username(username)
        record = UserRecord(username=username, matches_won=0)
        if self.store.set_if_absent(self.key_for(username), encode_record(record)):
            logger.info("Created user %r", username)
            return CreateResult(record=record, created=True)
        return CreateResult(record=self._load(username), created=False)

    def fetch(self, username) -> UserRecord:
        return self._load(_require_username(username))

    def update(self, username, matches_won_text) -> UserRecord:
        if not username or matches_won_text is None:
            raise ValidationError('username and matchesWon are required')
        username = _require_username(username)
        matches_won = parse_matches_won(matches_won_text)
        record = UserRecord(username=username, matches_won=matches_won)
        # Existence check and overwrite happen in a single conditional write
        if not self.store.set_if_present(self.key_for(username), encode_record(record)):
            raise NotFoundError('User not found')
        logger.info("Updated user %r matchesWon=%d", username, matches_won)
        return record

    def list_all(self, limit: Optional[int] = None, after: Optional[str] = None) -> ListResult:
        """List every record sorted by username.

        Entries that vanish or fail to load between the key scan and the
        per-key read are dropped and counted in ``skipped``. With ``limit``
        the sorted list is paged; ``after`` is the last username of the
        previous page.
        """
        if limit is not None and limit < 1:
            raise ValidationError('limit must be a positive integer')

        keys = self.store.list_keys(f"{self.key_prefix}*")
        records = []
        skipped = 0
        for key in keys:
            username = self.username_for(key)
            if username is None:
                continue
            try:
                records.append(self._load(username))
            except NotFoundError:
                logger.warning("Skipping %r: key vanished during listing", key)
                skipped += 1
            except EncodingError as exc:
                logger.warning("Skipping %r: %s", key, exc)
                skipped += 1
            except StoreError as exc:
                logger.warning("Skipping %r: store error %s", key, exc)
                skipped += 1

        records.sort(key=lambda r: r.username)
        if after is not None:
            records = [r for r in records if r.username > after]

        result = ListResult(records=records, skipped=skipped)
        if limit is not None and len(records) > limit:
            result.records = records[:limit]
            result.has_more = True
            result.next_cursor = result.records[-1].username
        return result
