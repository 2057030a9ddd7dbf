"""Boss and manager accounts, login and the current session"""

import copy
import hmac
import json
import threading
from typing import Any, Dict, Iterable, List, Optional
from gestornet.domain.clients import new_id
from gestornet.domain.exceptions import (
    AuthorizationError,
    DuplicateManagerError,
    InvalidCredentialsError,
    ValidationError,
)
from gestornet.domain.models import BOSS_CONFIG, BOSS_CONFIG_ID, MANAGERS, BossConfig, Manager
from gestornet.utils.date_utils import now

DEFAULT_BOSS_PASSWORD_MIN_LENGTH = 6
DEFAULT_MANAGER_PASSWORD_MIN_LENGTH = 4


def credentials_match(stored: Optional[str], supplied: Optional[str]) -> bool:
    """
    Single comparison point for every password check.

    Passwords are stored and compared in plaintext. Swapping this for a salted
    hash check only requires changing this function and what gets stored.
    """
    if stored is None or supplied is None:
        return False
    return hmac.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))


def validate_new_password(password: str, confirm: Optional[str], min_length: int) -> None:
    if not password or len(password) < min_length:
        raise ValidationError(f"Password must have at least {min_length} characters")
    if confirm is not None and password != confirm:
        raise ValidationError("Passwords do not match")


class ManagerSession:
    """
    Current logged-in manager plus its persisted session token.

    The token holds the full serialized manager record, password included.
    This mirrors the browser-session behaviour it replaces and is a known
    weakness.
    """

    def __init__(self, storage, key: str = "gestornet_session"):
        self.storage = storage
        self.key = key
        self.manager: Optional[Manager] = None

    @property
    def is_logged_in(self) -> bool:
        return self.manager is not None

    def start(self, manager: Manager) -> None:
        self.manager = copy.deepcopy(manager)
        self.storage.set_item(self.key, json.dumps(manager.to_record()))

    def end(self) -> None:
        self.manager = None
        self.storage.remove_item(self.key)

    def read_token(self) -> Optional[Dict[str, Any]]:
        raw = self.storage.get_item(self.key)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return None
        return data if isinstance(data, dict) else None


class AuthManager:
    """
    Account lifecycle for the boss (owner) and managers (operators).

    States: Uninitialized (no boss config) -> Ready. In Ready the session is
    either logged out or logged in as one manager.
    """

    def __init__(
        self,
        writer,
        session: ManagerSession,
        managers: Optional[Iterable[Manager]] = None,
        boss_config: Optional[BossConfig] = None,
        boss_password_min_length: int = DEFAULT_BOSS_PASSWORD_MIN_LENGTH,
        manager_password_min_length: int = DEFAULT_MANAGER_PASSWORD_MIN_LENGTH,
    ):
        self.writer = writer
        self.session = session
        self.boss_password_min_length = boss_password_min_length
        self.manager_password_min_length = manager_password_min_length
        self._lock = threading.RLock()
        self._managers: Dict[str, Manager] = {m.id: m for m in managers or []}
        self._boss_config = boss_config

    @classmethod
    def load(cls, store, writer, session: ManagerSession, **kwargs) -> "AuthManager":
        managers = [Manager.from_record(r) for r in store.get_all(MANAGERS)]
        boss_records = [r for r in store.get_all(BOSS_CONFIG) if r.get("id") == BOSS_CONFIG_ID]
        boss_config = BossConfig.from_record(boss_records[0]) if boss_records else None
        return cls(writer, session, managers, boss_config, **kwargs)

    def reload(self, manager_records: List[Dict[str, Any]]) -> None:
        """Replace managers after a backup restore and re-validate the session"""
        managers = [Manager.from_record(r) for r in manager_records]
        with self._lock:
            self._managers = {m.id: m for m in managers}
            self.restore_session()

    # --- Queries ---

    @property
    def is_setup_complete(self) -> bool:
        return self._boss_config is not None

    @property
    def boss_config(self) -> Optional[BossConfig]:
        return copy.deepcopy(self._boss_config)

    @property
    def managers(self) -> List[Manager]:
        with self._lock:
            return copy.deepcopy(list(self._managers.values()))

    @property
    def current_manager(self) -> Optional[Manager]:
        return copy.deepcopy(self.session.manager)

    def verify_boss_password(self, password: str) -> bool:
        boss = self._boss_config
        return boss is not None and credentials_match(boss.password, password)

    # --- Boss ---

    def setup_boss(self, name: str, email: str, password: str, confirm: Optional[str] = None) -> BossConfig:
        """
        Create (or overwrite) the boss configuration. Calling it again replaces
        the singleton rather than adding a second one.
        """
        if not (name or "").strip() or not (email or "").strip() or not (password or "").strip():
            raise ValidationError("Boss name, email and password are required")
        validate_new_password(password, confirm, self.boss_password_min_length)

        boss = BossConfig(name=name.strip(), email=email.strip(), password=password, created_at=now())
        with self._lock:
            self._boss_config = boss
            self.writer.put(BOSS_CONFIG, boss.to_record())
        return copy.deepcopy(boss)

    def change_boss_password(self, current: str, new: str, confirm: Optional[str] = None) -> None:
        with self._lock:
            if not self.verify_boss_password(current):
                raise AuthorizationError("Current boss password is incorrect")
            validate_new_password(new, confirm, self.boss_password_min_length)

            self._boss_config.password = new
            self.writer.put(BOSS_CONFIG, self._boss_config.to_record())

    # --- Managers ---

    def register_manager(self, name: str, password: str) -> Manager:
        """
        Create a manager account.

        Raises:
            ValidationError: empty name or password
            DuplicateManagerError: name already taken (case-insensitive)
        """
        name = (name or "").strip()
        if not name or not (password or "").strip():
            raise ValidationError("Manager name and password are required")

        with self._lock:
            if any(m.name.lower() == name.lower() for m in self._managers.values()):
                raise DuplicateManagerError(f"A manager named {name!r} already exists")

            manager = Manager(id=new_id(), name=name, password=password)
            self._managers[manager.id] = manager
            self.writer.put(MANAGERS, manager.to_record())
            return copy.deepcopy(manager)

    def delete_manager(self, manager_id: str, boss_password: str) -> None:
        """
        Remove a manager. Needs the boss password and can never target the
        manager who is currently logged in.
        """
        with self._lock:
            if not self.verify_boss_password(boss_password):
                raise AuthorizationError("Boss password is incorrect")
            current = self.session.manager
            if current is not None and current.id == manager_id:
                raise AuthorizationError("A manager cannot delete their own account")

            if self._managers.pop(manager_id, None) is not None:
                self.writer.remove(MANAGERS, manager_id)

    def change_manager_password(self, current: str, new: str, confirm: Optional[str] = None) -> None:
        with self._lock:
            session_manager = self.session.manager
            if session_manager is None:
                raise AuthorizationError("No manager is logged in")
            manager = self._managers.get(session_manager.id)
            if manager is None or not credentials_match(manager.password, current):
                raise AuthorizationError("Current password is incorrect")
            validate_new_password(new, confirm, self.manager_password_min_length)

            manager.password = new
            self.writer.put(MANAGERS, manager.to_record())
            self.session.start(manager)

    # --- Session ---

    def login(self, name: str, password: str) -> Manager:
        """
        Exact, case-sensitive match on both name and password.

        Registration rejects names that differ only in case, but login does
        not fold case: "ana" cannot log in as "Ana".
        """
        with self._lock:
            found = next(
                (
                    m for m in self._managers.values()
                    if m.name == name and credentials_match(m.password, password)
                ),
                None,
            )
            if found is None:
                raise InvalidCredentialsError("Invalid name or password")

            self.session.start(found)
            return copy.deepcopy(found)

    def logout(self) -> None:
        self.session.end()

    def restore_session(self) -> Optional[Manager]:
        """
        Restore the logged-in manager from the session token.

        The token only counts if its manager id still exists; the stored record
        (not the token copy) becomes the session.
        """
        token = self.session.read_token()
        with self._lock:
            manager = self._managers.get(str(token.get("id"))) if token else None
            if manager is None:
                self.session.end()
                return None
            self.session.start(manager)
            return copy.deepcopy(manager)
